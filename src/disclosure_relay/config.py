"""
Configuration management using Pydantic Settings.

Two layers:
- AppConfig: secrets and runtime switches from environment variables / .env
- RelayConfig: schedule, source, extraction and CMS settings loaded from
  config/schedule.yaml, with schedule overrides taken from AppConfig

Components receive these objects at construction. The lazy singletons at the
bottom of this module are only used as defaults by the entry point.
"""

import logging
from datetime import date
from pathlib import Path
from typing import List, Literal, Optional, Union

import yaml
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from disclosure_relay.validators import (
    validate_hour,
    validate_log_level,
    validate_timezone,
    validate_weekdays,
)

logger = logging.getLogger(__name__)


class AppConfig(BaseSettings):
    """
    Application configuration loaded from environment variables.

    Environment Variables (from .env):
        CMS_API_TOKEN: Bearer token for the CMS API (WEBFLOW_API_TOKEN accepted)
        CMS_SITE_ID: CMS site identifier (WEBFLOW_SITE_ID accepted)
        CMS_COLLECTION_ID: Target collection identifier (WEBFLOW_COLLECTION_ID accepted)
        TEST_MODE: Bypass the schedule gate and use the smaller per-run limit
        PROCESSED_DATA_PATH: Location of the persisted processed-releases JSON
        RELAY_CONFIG_PATH: Optional explicit path to schedule.yaml
        SCHEDULE_START_HOUR / SCHEDULE_END_HOUR / SCHEDULE_INTERVAL_MINUTES / TIMEZONE:
            Overrides for the schedule section of schedule.yaml

    Example:
        >>> config = get_app_config()
        >>> config.processed_data_path
        'data/processed.json'
    """

    cms_api_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices('cms_api_token', 'webflow_api_token'),
        description="Bearer token for the CMS API"
    )

    cms_site_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices('cms_site_id', 'webflow_site_id'),
        description="CMS site identifier"
    )

    cms_collection_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices('cms_collection_id', 'webflow_collection_id'),
        description="CMS collection receiving disclosure items"
    )

    test_mode: bool = Field(
        default=False,
        description="Skip the schedule gate and process fewer records"
    )

    processed_data_path: str = Field(
        default="data/processed.json",
        description="Path of the persisted processed-releases store"
    )

    relay_config_path: Optional[str] = Field(
        default=None,
        description="Explicit path to schedule.yaml (defaults to config/schedule.yaml)"
    )

    # === Schedule overrides ===
    schedule_start_hour: Optional[int] = None
    schedule_end_hour: Optional[int] = None
    schedule_interval_minutes: Optional[int] = None
    timezone: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    def missing_cms_credentials(self) -> List[str]:
        """Return the names of required CMS environment variables that are unset."""
        required = {
            'CMS_API_TOKEN': self.cms_api_token,
            'CMS_SITE_ID': self.cms_site_id,
            'CMS_COLLECTION_ID': self.cms_collection_id,
        }
        return [name for name, value in required.items() if not value]


class ScheduleSettings(BaseModel):
    """Active window in which scheduled runs do real work."""

    start_hour: int = Field(default=6, description="First active hour (inclusive)")
    end_hour: int = Field(default=24, description="End of active window (exclusive)")
    timezone: str = Field(default="Europe/Oslo", description="IANA timezone of the window")
    weekdays: List[int] = Field(
        default_factory=lambda: [1, 2, 3, 4, 5],
        description="Active ISO weekdays (Monday=1)"
    )
    interval_minutes: int = Field(
        default=2,
        ge=1,
        description="Trigger interval of the external scheduler (informational)"
    )

    @field_validator('start_hour', 'end_hour')
    @classmethod
    def check_hour(cls, v: int) -> int:
        return validate_hour(v)

    @field_validator('timezone')
    @classmethod
    def check_timezone(cls, v: str) -> str:
        return validate_timezone(v)

    @field_validator('weekdays')
    @classmethod
    def check_weekdays(cls, v: List[int]) -> List[int]:
        return validate_weekdays(v)

    @model_validator(mode='after')
    def check_window_order(self) -> 'ScheduleSettings':
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"start_hour ({self.start_hour}) must be before end_hour ({self.end_hour})"
            )
        return self


class SourceSettings(BaseModel):
    """Listing page location, cutoff policy and fetch behaviour."""

    list_url: str = Field(
        default="https://live.euronext.com/en/listview/company-press-release/62020",
        description="Listing page with disclosure rows"
    )
    base_url: str = Field(
        default="https://live.euronext.com",
        description="Base used to resolve relative links found in the listing"
    )

    # === Cutoff policy ===
    cutoff_mode: Literal['absolute', 'rolling'] = Field(
        default='rolling',
        description="'absolute' keeps records on/after only_after_date, "
                    "'rolling' keeps the last only_recent_days days"
    )
    only_after_date: Optional[date] = Field(
        default=None,
        description="Cutoff day for absolute mode (inclusive)"
    )
    only_recent_days: int = Field(default=7, ge=0)

    # === Fetch behaviour ===
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=5000, ge=0)
    request_timeout_s: float = Field(default=30.0, gt=0)
    user_agent: str = Field(
        default="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
    )
    max_releases: int = Field(default=10, ge=1)
    test_max_releases: int = Field(default=3, ge=1)

    @model_validator(mode='after')
    def check_cutoff(self) -> 'SourceSettings':
        if self.cutoff_mode == 'absolute' and self.only_after_date is None:
            raise ValueError("cutoff_mode 'absolute' requires only_after_date")
        return self


class ExtractionSettings(BaseModel):
    """Content extraction thresholds and headless-browser selectors."""

    min_content_length: int = Field(
        default=100,
        ge=0,
        description="Minimum text length for extracted content to be accepted"
    )
    browser_timeout_ms: int = Field(default=30000, gt=0)
    modal_trigger_selector: str = Field(
        default='[data-node-nid="{node_ref}"]',
        description="CSS selector template of the element that opens a modal"
    )
    modal_container_selector: str = Field(
        default='#modal-{node_ref}',
        description="CSS selector template of the modal revealed for a node"
    )
    request_delay_ms: int = Field(
        default=1000,
        ge=0,
        description="Pause after each record to stay polite with the source site"
    )


class FieldMap(BaseModel):
    """Mapping from record fields to CMS collection field slugs."""

    name: str = "name"
    slug: str = "slug"
    date: str = "date"
    body_html: str = "bodyHtml"
    source_link: str = "sourceLink"


class CMSSettings(BaseModel):
    """CMS API endpoint, publishing behaviour and pacing."""

    api_base_url: str = Field(default="https://api.webflow.com/v2")
    publish_immediately: bool = Field(
        default=False,
        description="Publish each item right after the draft is created"
    )
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=2000, ge=0)
    inter_item_delay_ms: int = Field(
        default=2000,
        ge=0,
        description="Pause after each record (the CMS allows 60 requests per minute)"
    )
    request_timeout_s: float = Field(default=30.0, gt=0)
    page_size: int = Field(default=100, ge=1, le=100)
    field_map: FieldMap = Field(default_factory=FieldMap)
    read_more_link: Optional[str] = Field(
        default=None,
        description="Static link sent as sourceLink instead of the record URL"
    )


class LoggingSettings(BaseModel):
    level: str = "info"

    @field_validator('level')
    @classmethod
    def check_level(cls, v: str) -> str:
        return validate_log_level(v)


class RelayConfig(BaseModel):
    """
    Complete pipeline configuration loaded from config/schedule.yaml.

    Example:
        >>> config = load_relay_config()
        >>> config.schedule.timezone
        'Europe/Oslo'
        >>> config.source.cutoff_mode
        'rolling'
    """

    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    source: SourceSettings = Field(default_factory=SourceSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    cms: CMSSettings = Field(default_factory=CMSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _resolve_config_path(config_path: Optional[Union[str, Path]]) -> Path:
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found at {path}")
        return path

    # src/disclosure_relay/config.py -> root
    project_root = Path(__file__).parent.parent.parent
    path = project_root / 'config' / 'schedule.yaml'

    if not path.exists():
        # Try alternative: relative to current working directory
        path = Path('config/schedule.yaml')

    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found at {path}. "
            f"Ensure config/schedule.yaml exists in project root."
        )

    return path


def apply_schedule_overrides(data: dict, app_config: AppConfig) -> dict:
    """
    Overlay environment-provided schedule values onto raw YAML data.

    Args:
        data: Raw configuration dictionary (as loaded from YAML)
        app_config: AppConfig carrying the optional overrides

    Returns:
        The same dictionary with the schedule section updated
    """
    overrides = {
        'start_hour': app_config.schedule_start_hour,
        'end_hour': app_config.schedule_end_hour,
        'interval_minutes': app_config.schedule_interval_minutes,
        'timezone': app_config.timezone,
    }
    schedule = dict(data.get('schedule') or {})
    for key, value in overrides.items():
        if value is not None:
            logger.debug(f"Schedule override from environment: {key}={value}")
            schedule[key] = value
    data['schedule'] = schedule
    return data


def load_relay_config(
    config_path: Optional[Union[str, Path]] = None,
    app_config: Optional[AppConfig] = None
) -> RelayConfig:
    """
    Load RelayConfig from YAML and apply environment overrides.

    Resolution order for the file: explicit argument, RELAY_CONFIG_PATH,
    <project root>/config/schedule.yaml, ./config/schedule.yaml.

    Args:
        config_path: Optional explicit path to the YAML file
        app_config: AppConfig supplying overrides (defaults to get_app_config())

    Returns:
        Validated RelayConfig

    Raises:
        FileNotFoundError: If no configuration file can be found
        pydantic.ValidationError: If the file contents are invalid
    """
    app_config = app_config or get_app_config()
    path = _resolve_config_path(config_path or app_config.relay_config_path)

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    data = apply_schedule_overrides(data, app_config)
    return RelayConfig.model_validate(data)


# Singleton pattern - loaded once, cached forever
_app_config: Optional[AppConfig] = None
_relay_config: Optional[RelayConfig] = None


def get_app_config() -> AppConfig:
    """
    Get global application config instance (lazy-loaded singleton).

    Returns:
        Singleton AppConfig instance
    """
    global _app_config
    if _app_config is None:
        _app_config = AppConfig()
    return _app_config


def get_relay_config() -> RelayConfig:
    """
    Get global pipeline config instance (lazy-loaded singleton).

    Returns:
        Singleton RelayConfig instance loaded from config/schedule.yaml
    """
    global _relay_config
    if _relay_config is None:
        _relay_config = load_relay_config(app_config=get_app_config())
    return _relay_config
