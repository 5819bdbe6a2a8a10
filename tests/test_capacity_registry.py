"""Tests for CapacityRegistry.limit_for and CapacityDay validation."""

import logging

import pytest
from django.core.exceptions import ValidationError

from capacity.models import CapacityDay
from capacity.registry import CapacityRegistry
from help_requests.exceptions import ConfigurationError
from tests.dates import SUNDAY, TUESDAY

pytestmark = pytest.mark.django_db


class TestDefaults:
    def test_default_table(self):
        registry = CapacityRegistry()
        assert registry.limit_for(TUESDAY, 'food') == 50
        assert registry.limit_for(TUESDAY, 'general') == 20

    def test_category_missing_from_table_uses_fallback(self):
        assert CapacityRegistry().limit_for(TUESDAY, 'emergency') == 10

    def test_misconfigured_default_clamps_to_zero(self, settings, caplog):
        settings.ALLOCATION = {**settings.ALLOCATION, 'DEFAULT_CAPACITY': {'food': -5, 'general': 20}}
        with caplog.at_level(logging.WARNING, logger='capacity.registry'):
            assert CapacityRegistry().limit_for(TUESDAY, 'food') == 0
        assert 'negative' in caplog.text


class TestClosedDays:
    def test_non_operating_day_is_zero(self):
        assert CapacityRegistry().limit_for(SUNDAY, 'food') == 0

    def test_non_operating_day_ignores_configured_capacity(self):
        CapacityDay.objects.create(date=SUNDAY, max_by_category={'food': 30})
        assert CapacityRegistry().limit_for(SUNDAY, 'food') == 0

    def test_row_marked_closed_is_zero(self):
        CapacityDay.objects.create(date=TUESDAY, max_by_category={'food': 30}, is_operating_day=False)
        assert CapacityRegistry().limit_for(TUESDAY, 'food') == 0

    def test_override_opens_day_with_its_capacity(self):
        CapacityDay.objects.create(date=SUNDAY, max_by_category={'food': 12}, is_override=True)
        assert CapacityRegistry().limit_for(SUNDAY, 'food') == 12


class TestCapacityDayRows:
    def test_row_value_wins_over_default(self):
        CapacityDay.objects.create(date=TUESDAY, max_by_category={'food': 2, 'general': 7})
        registry = CapacityRegistry()
        assert registry.limit_for(TUESDAY, 'food') == 2
        assert registry.limit_for(TUESDAY, 'general') == 7

    def test_category_absent_from_row_is_zero(self):
        CapacityDay.objects.create(date=TUESDAY, max_by_category={'food': 2})
        assert CapacityRegistry().limit_for(TUESDAY, 'general') == 0

    def test_negative_value_clamps_to_zero_and_logs(self, caplog):
        CapacityDay.objects.create(date=TUESDAY, max_by_category={'food': -3})
        with caplog.at_level(logging.WARNING, logger='capacity.registry'):
            assert CapacityRegistry().limit_for(TUESDAY, 'food') == 0
        assert 'Clamping capacity to 0' in caplog.text

    def test_non_integer_value_clamps_to_zero(self):
        CapacityDay.objects.create(date=TUESDAY, max_by_category={'food': 'lots'})
        assert CapacityRegistry().limit_for(TUESDAY, 'food') == 0

    def test_day_of_week_is_derived_on_save(self):
        row = CapacityDay.objects.create(date=TUESDAY)
        assert row.day_of_week == 'Tuesday'

    def test_limit_for_category_raises_configuration_error(self):
        row = CapacityDay(date=TUESDAY, max_by_category={'food': -1})
        with pytest.raises(ConfigurationError):
            row.limit_for_category('food')

    def test_full_clean_rejects_negative_limits(self):
        row = CapacityDay(date=TUESDAY, max_by_category={'food': -1})
        with pytest.raises(ValidationError):
            row.full_clean()

    def test_full_clean_accepts_valid_limits(self):
        row = CapacityDay(date=TUESDAY, max_by_category={'food': 5, 'general': 0})
        row.full_clean()


class TestMalformedShapes:
    def test_row_that_is_not_a_mapping_clamps_to_zero(self, caplog):
        CapacityDay.objects.create(date=TUESDAY, max_by_category=[5])
        with caplog.at_level(logging.WARNING, logger='capacity.registry'):
            assert CapacityRegistry().limit_for(TUESDAY, 'food') == 0
        assert 'not a mapping' in caplog.text

    def test_limit_for_category_rejects_non_mapping(self):
        row = CapacityDay(date=TUESDAY, max_by_category=[5])
        with pytest.raises(ConfigurationError):
            row.limit_for_category('food')

    def test_default_table_that_is_not_a_mapping_clamps_to_zero(self, settings, caplog):
        settings.ALLOCATION = {**settings.ALLOCATION, 'DEFAULT_CAPACITY': [50, 20]}
        with caplog.at_level(logging.WARNING, logger='capacity.registry'):
            assert CapacityRegistry().limit_for(TUESDAY, 'food') == 0
        assert 'not a mapping' in caplog.text
