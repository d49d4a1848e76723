"""
Unit tests for configuration management using Pydantic Settings.

Tests AppConfig (environment / .env), the RelayConfig sections and
load_relay_config() with schedule overrides.
"""

from datetime import date
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError


PROJECT_CONFIG = Path(__file__).resolve().parents[2] / 'config' / 'schedule.yaml'


class TestAppConfig:
    """Test suite for AppConfig pydantic-settings class."""

    def test_defaults_without_environment(self):
        """Should fall back to defaults when nothing is set."""
        from disclosure_relay.config import AppConfig

        config = AppConfig(_env_file=None)

        assert config.cms_api_token is None
        assert config.test_mode is False
        assert config.processed_data_path == "data/processed.json"
        assert config.missing_cms_credentials() == [
            'CMS_API_TOKEN', 'CMS_SITE_ID', 'CMS_COLLECTION_ID'
        ]

    def test_reads_cms_variables(self, monkeypatch):
        """Should read CMS_* variables from the environment."""
        from disclosure_relay.config import AppConfig

        monkeypatch.setenv('CMS_API_TOKEN', 'token-123')
        monkeypatch.setenv('CMS_SITE_ID', 'site-1')
        monkeypatch.setenv('CMS_COLLECTION_ID', 'coll-1')

        config = AppConfig(_env_file=None)

        assert config.cms_api_token == 'token-123'
        assert config.cms_collection_id == 'coll-1'
        assert config.missing_cms_credentials() == []

    def test_accepts_webflow_variable_names(self, monkeypatch):
        """WEBFLOW_* names should be accepted as aliases."""
        from disclosure_relay.config import AppConfig

        monkeypatch.setenv('WEBFLOW_API_TOKEN', 'wf-token')
        monkeypatch.setenv('WEBFLOW_COLLECTION_ID', 'wf-coll')

        config = AppConfig(_env_file=None)

        assert config.cms_api_token == 'wf-token'
        assert config.cms_collection_id == 'wf-coll'
        assert config.missing_cms_credentials() == ['CMS_SITE_ID']

    def test_test_mode_from_environment(self, monkeypatch):
        """TEST_MODE=true should enable test mode."""
        from disclosure_relay.config import AppConfig

        monkeypatch.setenv('TEST_MODE', 'true')

        assert AppConfig(_env_file=None).test_mode is True


class TestScheduleSettings:
    """Test suite for ScheduleSettings validation."""

    def test_defaults(self):
        """Default window should be weekdays 06-24 Europe/Oslo."""
        from disclosure_relay.config import ScheduleSettings

        schedule = ScheduleSettings()

        assert schedule.start_hour == 6
        assert schedule.end_hour == 24
        assert schedule.timezone == 'Europe/Oslo'
        assert schedule.weekdays == [1, 2, 3, 4, 5]

    def test_rejects_inverted_window(self):
        """start_hour must be before end_hour."""
        from disclosure_relay.config import ScheduleSettings

        with pytest.raises(ValidationError, match="must be before end_hour"):
            ScheduleSettings(start_hour=20, end_hour=6)

    def test_rejects_unknown_timezone(self):
        """Timezone should be validated against the tz database."""
        from disclosure_relay.config import ScheduleSettings

        with pytest.raises(ValidationError, match="Unknown timezone"):
            ScheduleSettings(timezone='Europe/Atlantis')


class TestSourceSettings:
    """Test suite for SourceSettings cutoff validation."""

    def test_absolute_mode_requires_date(self):
        """Absolute cutoff without only_after_date should be rejected."""
        from disclosure_relay.config import SourceSettings

        with pytest.raises(ValidationError, match="requires only_after_date"):
            SourceSettings(cutoff_mode='absolute')

    def test_absolute_mode_parses_date(self):
        """only_after_date should be parsed from ISO text."""
        from disclosure_relay.config import SourceSettings

        source = SourceSettings(cutoff_mode='absolute', only_after_date='2025-01-03')

        assert source.only_after_date == date(2025, 1, 3)

    def test_rejects_unknown_mode(self):
        """Only 'absolute' and 'rolling' are valid modes."""
        from disclosure_relay.config import SourceSettings

        with pytest.raises(ValidationError):
            SourceSettings(cutoff_mode='forever')


class TestLoadRelayConfig:
    """Test suite for load_relay_config()."""

    def test_loads_project_config(self):
        """The shipped config/schedule.yaml should load and validate."""
        from disclosure_relay.config import AppConfig, load_relay_config

        config = load_relay_config(PROJECT_CONFIG, app_config=AppConfig(_env_file=None))

        assert config.schedule.timezone == 'Europe/Oslo'
        assert config.source.max_releases == 10
        assert config.source.test_max_releases == 3
        assert config.cms.publish_immediately is False
        assert config.cms.field_map.date == 'date-2'
        assert config.cms.field_map.body_html == 'pm-body-html'

    def test_applies_environment_overrides(self, monkeypatch, tmp_path):
        """SCHEDULE_* and TIMEZONE should override the YAML schedule."""
        from disclosure_relay.config import AppConfig, load_relay_config

        path = tmp_path / 'schedule.yaml'
        path.write_text(yaml.safe_dump({
            'schedule': {'start_hour': 6, 'end_hour': 24, 'timezone': 'Europe/Oslo'}
        }))
        monkeypatch.setenv('SCHEDULE_START_HOUR', '8')
        monkeypatch.setenv('TIMEZONE', 'UTC')

        config = load_relay_config(path, app_config=AppConfig(_env_file=None))

        assert config.schedule.start_hour == 8
        assert config.schedule.end_hour == 24
        assert config.schedule.timezone == 'UTC'

    def test_empty_file_gives_defaults(self, tmp_path):
        """An empty YAML file should produce the default configuration."""
        from disclosure_relay.config import AppConfig, load_relay_config

        path = tmp_path / 'schedule.yaml'
        path.write_text('')

        config = load_relay_config(path, app_config=AppConfig(_env_file=None))

        assert config.source.cutoff_mode == 'rolling'
        assert config.cms.field_map.name == 'name'

    def test_missing_file_raises(self, tmp_path):
        """An explicit path that does not exist should raise FileNotFoundError."""
        from disclosure_relay.config import AppConfig, load_relay_config

        with pytest.raises(FileNotFoundError):
            load_relay_config(tmp_path / 'nope.yaml', app_config=AppConfig(_env_file=None))

    def test_invalid_values_raise_validation_error(self, tmp_path):
        """Invalid YAML values should surface as ValidationError."""
        from disclosure_relay.config import AppConfig, load_relay_config

        path = tmp_path / 'schedule.yaml'
        path.write_text(yaml.safe_dump({'logging': {'level': 'loud'}}))

        with pytest.raises(ValidationError, match="Invalid log level"):
            load_relay_config(path, app_config=AppConfig(_env_file=None))
