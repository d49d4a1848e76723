"""
Pytest configuration for unit tests.

Provides fixtures that apply to all unit tests:
- Configuration with every delay set to zero (no real sleeping)
- A record factory
- A representative listing page
- Isolation from a developer's .env and CMS/schedule environment variables
"""

from datetime import datetime

import pytest

from disclosure_relay.config import (
    CMSSettings,
    ExtractionSettings,
    RelayConfig,
    ScheduleSettings,
    SourceSettings,
)
from disclosure_relay.dates import normalize_date
from disclosure_relay.models.record import DisclosureRecord

LIST_URL = "https://live.euronext.com/en/listview/company-press-release/62020"
BASE_URL = "https://live.euronext.com"


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Remove environment variables that AppConfig would otherwise pick up.

    AppConfig instances built in tests pass _env_file=None so a local .env
    is never read either.
    """
    for name in (
        'CMS_API_TOKEN', 'CMS_SITE_ID', 'CMS_COLLECTION_ID',
        'WEBFLOW_API_TOKEN', 'WEBFLOW_SITE_ID', 'WEBFLOW_COLLECTION_ID',
        'TEST_MODE', 'PROCESSED_DATA_PATH', 'RELAY_CONFIG_PATH',
        'SCHEDULE_START_HOUR', 'SCHEDULE_END_HOUR',
        'SCHEDULE_INTERVAL_MINUTES', 'TIMEZONE',
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def relay_config() -> RelayConfig:
    """RelayConfig with zero delays and single retries."""
    return RelayConfig(
        schedule=ScheduleSettings(),
        source=SourceSettings(
            list_url=LIST_URL,
            base_url=BASE_URL,
            cutoff_mode='rolling',
            only_recent_days=7,
            retry_attempts=1,
            retry_delay_ms=0,
        ),
        extraction=ExtractionSettings(request_delay_ms=0),
        cms=CMSSettings(
            retry_attempts=1,
            retry_delay_ms=0,
            inter_item_delay_ms=0,
        ),
    )


@pytest.fixture
def make_record():
    """
    Factory for DisclosureRecord.

    Example:
        record = make_record("Company ASA: Q3 2025 results", "18 Oct 2025")
    """
    def _make(
        title: str = "Protector Forsikring ASA: Q3 2025 results",
        date_text: str = "18 Oct 2025",
        source_url: str = f"{BASE_URL}/en/node/12345",
        node_ref=None,
        content: str = "",
    ) -> DisclosureRecord:
        return DisclosureRecord(
            title=title,
            date_text=date_text,
            normalized_date=normalize_date(date_text),
            source_url=source_url,
            node_ref=node_ref,
            content=content,
        )

    return _make


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 10, 20, 9, 30)


@pytest.fixture
def listing_html() -> str:
    """Listing page with a header row, three disclosures and one short-title row."""
    return """
    <html><body>
      <table>
        <thead>
          <tr><th>Date</th><th>Company</th><th>Title</th><th>Topic</th></tr>
        </thead>
        <tbody>
          <tr>
            <td>18 Oct 2025
                08:00 CEST</td>
            <td>PROTECTOR FORSIKRING</td>
            <td><a href="/en/node/111" data-node-nid="111">Protector Forsikring ASA: Q3 2025 results</a></td>
            <td>Interim report</td>
          </tr>
          <tr>
            <td>17 Oct 2025</td>
            <td>PROTECTOR FORSIKRING</td>
            <td><a href="https://example.com/external">Invitation to Q3 2025 presentation</a></td>
            <td>Other</td>
          </tr>
          <tr>
            <td>16 Oct 2025</td>
            <td>PROTECTOR FORSIKRING</td>
            <td><a href="#">Share buyback programme update</a></td>
            <td>Other</td>
          </tr>
          <tr>
            <td>15 Oct 2025</td>
            <td>PROTECTOR</td>
            <td><a href="/en/node/999">Short</a></td>
            <td>Other</td>
          </tr>
        </tbody>
      </table>
    </body></html>
    """
