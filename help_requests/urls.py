from django.urls import path
from . import views

urlpatterns = [
    path('<int:request_id>/ticket/', views.ticket_detail, name='ticket_detail'),
    path('available-days/', views.available_days, name='available_days'),
]
