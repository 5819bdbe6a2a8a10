from django.urls import path
from . import views

urlpatterns = [
    path('release/', views.release_tickets, name='release_tickets'),
    path('capacity/', views.capacity_overview, name='capacity_overview'),
    path('coverage-gaps/', views.coverage_gaps, name='coverage_gaps'),
]
