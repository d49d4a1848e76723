"""
Smoke Tests - Quick sanity checks against the live listing page and CMS

These tests make REAL HTTP calls. Run them manually after deployment
changes to make sure the relay can still reach both ends.

Usage:
    # Run smoke tests explicitly
    pytest -m smoke -v

    # Run smoke tests in this file only
    pytest tests/test_smoke.py -m smoke -v

    # Skip smoke tests (default, see addopts in pyproject.toml)
    pytest tests/

Requirements:
- CMS_API_TOKEN, CMS_SITE_ID, CMS_COLLECTION_ID in .env (CMS tests only)
- Active internet connection
- config/schedule.yaml
"""

import pytest
from dotenv import load_dotenv

from disclosure_relay.config import AppConfig, load_relay_config
from disclosure_relay.services import CMSPublisher, ListingService


# Mark all tests in this file as smoke tests (disabled by default)
pytestmark = pytest.mark.smoke


@pytest.fixture(scope="module")
def app_config():
    load_dotenv()
    return AppConfig()


@pytest.fixture(scope="module")
def relay_config(app_config):
    return load_relay_config(app_config=app_config)


@pytest.fixture(scope="module")
def publisher(app_config, relay_config):
    missing = app_config.missing_cms_credentials()
    if missing:
        pytest.skip(f"CMS credentials not set: {', '.join(missing)}")
    return CMSPublisher.from_config(app_config, relay_config.cms)


class TestListingSmoke:
    """Live listing page fetch and parse."""

    def test_listing_page_is_reachable(self, relay_config):
        """
        Smoke Test: the configured listing URL returns an HTML page.
        """
        service = ListingService(relay_config.source, timezone=relay_config.schedule.timezone)

        html = service.fetch_listing_html()

        assert "<table" in html.lower()

    def test_listing_yields_records(self, relay_config):
        """
        Smoke Test: the row/title/date selectors still match the live markup.

        This verifies:
        - At least one row is parsed with a title and a date
        - Every record has an absolute source URL
        """
        service = ListingService(relay_config.source, timezone=relay_config.schedule.timezone)

        records = service.get_records()

        assert records, "No rows parsed from the live listing page"
        for record in records[:5]:
            assert record.title
            assert record.source_url.startswith("http")
            print(f"\n  {record.date_text!r:30} {record.title[:60]}")


class TestCMSSmoke:
    """Live CMS collection access (read-only)."""

    def test_connection(self, publisher):
        """
        Smoke Test: the collection can be read with the configured token.
        """
        assert publisher.test_connection() is True

    def test_existence_check_for_unknown_slug(self, publisher):
        """
        Smoke Test: paging through the collection works and finds nothing
        for a slug that cannot exist.
        """
        assert publisher.item_exists("smoke-test-slug-that-does-not-exist") is False
