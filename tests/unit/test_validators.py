"""
Unit tests for validation functions.

Tests reusable field validators used by the configuration models
for schedule and logging settings.
"""

import pytest
from pydantic import BaseModel, ValidationError, field_validator


class TestValidateHour:
    """Test suite for validate_hour() validator."""

    def test_accepts_window_boundaries(self):
        """Should accept 0 and 24 as window boundaries."""
        from disclosure_relay.validators import validate_hour

        assert validate_hour(0) == 0
        assert validate_hour(24) == 24

    def test_accepts_regular_hour(self):
        """Should return a regular hour unchanged."""
        from disclosure_relay.validators import validate_hour

        assert validate_hour(6) == 6

    @pytest.mark.parametrize("hour", [-1, 25, 100])
    def test_rejects_out_of_range(self, hour):
        """Should raise ValueError outside 0-24."""
        from disclosure_relay.validators import validate_hour

        with pytest.raises(ValueError, match="between 0 and 24"):
            validate_hour(hour)


class TestValidateTimezone:
    """Test suite for validate_timezone() validator."""

    def test_accepts_iana_zone(self):
        """Should accept a known IANA timezone."""
        from disclosure_relay.validators import validate_timezone

        assert validate_timezone('Europe/Oslo') == 'Europe/Oslo'
        assert validate_timezone('UTC') == 'UTC'

    def test_rejects_unknown_zone(self):
        """Should raise ValueError for an unknown zone."""
        from disclosure_relay.validators import validate_timezone

        with pytest.raises(ValueError, match="Unknown timezone"):
            validate_timezone('Mars/Olympus')

    def test_rejects_empty_zone(self):
        """Should raise ValueError for an empty name."""
        from disclosure_relay.validators import validate_timezone

        with pytest.raises(ValueError, match="must not be empty"):
            validate_timezone('')


class TestValidateWeekdays:
    """Test suite for validate_weekdays() validator."""

    def test_sorts_and_deduplicates(self):
        """Should return sorted unique ISO weekdays."""
        from disclosure_relay.validators import validate_weekdays

        assert validate_weekdays([5, 1, 3, 1]) == [1, 3, 5]

    def test_rejects_empty_list(self):
        """Should require at least one weekday."""
        from disclosure_relay.validators import validate_weekdays

        with pytest.raises(ValueError, match="At least one"):
            validate_weekdays([])

    def test_rejects_zero_based_weekday(self):
        """Should reject 0 (weekdays are ISO, Monday=1)."""
        from disclosure_relay.validators import validate_weekdays

        with pytest.raises(ValueError, match="Invalid ISO weekdays"):
            validate_weekdays([0, 1])


class TestValidateLogLevel:
    """Test suite for validate_log_level() validator."""

    def test_normalizes_case(self):
        """Should lower-case valid levels."""
        from disclosure_relay.validators import validate_log_level

        assert validate_log_level('DEBUG') == 'debug'
        assert validate_log_level(' Info ') == 'info'

    def test_rejects_unknown_level(self):
        """Should raise ValueError for unknown levels."""
        from disclosure_relay.validators import validate_log_level

        with pytest.raises(ValueError, match="Invalid log level"):
            validate_log_level('verbose')


class TestValidatorsWithPydantic:
    """Validators used through @field_validator."""

    def test_validator_errors_surface_as_validation_error(self):
        """ValueError from a validator should become a pydantic ValidationError."""
        from disclosure_relay.validators import validate_timezone

        class Window(BaseModel):
            timezone: str

            @field_validator('timezone')
            @classmethod
            def check_timezone(cls, v):
                return validate_timezone(v)

        assert Window(timezone='Europe/Oslo').timezone == 'Europe/Oslo'

        with pytest.raises(ValidationError, match="Unknown timezone"):
            Window(timezone='Nowhere/Land')
