"""
CMS Publisher

Creates disclosure items in the CMS collection as drafts, optionally
publishing them right away.

Per record, strictly sequential:
1. Existence check by slug (paged listing of collection items) -> skipped
2. Create draft (bounded retry)
3. Publish if publish_immediately is set (bounded retry, separate from create
   so a failed publish never re-creates the item)
4. Inter-item pause to stay under the API rate limit

Failures of one record land in PublishBatchResult.errors and never stop the
batch. A record whose remote state could not be determined is never created.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import requests

from disclosure_relay.config import AppConfig, CMSSettings
from disclosure_relay.models.record import DisclosureRecord
from disclosure_relay.models.results import CreatedItem, FailedItem, PublishBatchResult
from disclosure_relay.retry import retry_call

logger = logging.getLogger(__name__)


class CMSPublisher:
    """
    Client for the CMS collection API (Webflow v2 compatible).

    Usage:
        publisher = CMSPublisher.from_config(app_config, relay_config.cms)
        if publisher.test_connection():
            result = publisher.create_items(records)
            print(result.summary())
    """

    def __init__(
        self,
        settings: CMSSettings,
        api_token: Optional[str],
        collection_id: Optional[str],
        site_id: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize publisher.

        Args:
            settings: CMS section of RelayConfig
            api_token: Bearer token
            collection_id: Target collection
            site_id: Site identifier (informational, kept for logs)
            session: HTTP session (a new requests.Session when omitted)

        Raises:
            ValueError: If the token or collection id is missing
        """
        missing = [
            name for name, value in (
                ('CMS_API_TOKEN', api_token),
                ('CMS_COLLECTION_ID', collection_id),
            ) if not value
        ]
        if missing:
            raise ValueError(
                f"Missing required CMS environment variables: {', '.join(missing)}"
            )

        self.settings = settings
        self.collection_id = collection_id
        self.site_id = site_id
        self.base_url = settings.api_base_url.rstrip('/')
        self.session = session or requests.Session()
        self.headers = {
            'Authorization': f'Bearer {api_token}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }

    @classmethod
    def from_config(
        cls,
        app_config: AppConfig,
        settings: CMSSettings,
        session: Optional[requests.Session] = None
    ) -> 'CMSPublisher':
        """
        Build a publisher from environment credentials.

        Raises:
            ValueError: If any of CMS_API_TOKEN, CMS_SITE_ID, CMS_COLLECTION_ID is unset
        """
        missing = app_config.missing_cms_credentials()
        if missing:
            raise ValueError(
                f"Missing required CMS environment variables: {', '.join(missing)}"
            )
        return cls(
            settings=settings,
            api_token=app_config.cms_api_token,
            collection_id=app_config.cms_collection_id,
            site_id=app_config.cms_site_id,
            session=session
        )

    # === HTTP helpers ===

    @property
    def collection_url(self) -> str:
        return f"{self.base_url}/collections/{self.collection_id}"

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        response = self.session.request(
            method,
            url,
            headers=self.headers,
            timeout=self.settings.request_timeout_s,
            **kwargs
        )
        response.raise_for_status()
        if not response.content:
            return {}
        return response.json()

    def _with_retry(self, fn, description: str):
        return retry_call(
            fn,
            attempts=self.settings.retry_attempts,
            delay_ms=self.settings.retry_delay_ms,
            description=description,
            retry_on=(requests.RequestException,)
        )

    # === Collection ===

    def get_collection_info(self) -> Dict[str, Any]:
        """GET /collections/{id}."""
        return self._request('GET', self.collection_url)

    def test_connection(self) -> bool:
        """
        Check that the collection is reachable with the configured token.

        Returns:
            True if the collection could be read, False otherwise
        """
        try:
            info = self.get_collection_info()
        except requests.RequestException as e:
            logger.error(f"CMS connection test failed: {e}")
            return False

        field_slugs = [field.get('slug') for field in info.get('fields') or []]
        logger.info("CMS connection test successful")
        logger.info(f"Available fields in collection: {field_slugs or 'no field info'}")
        return True

    # === Items ===

    def item_exists(self, slug: str) -> bool:
        """
        Look up an item by slug, paging through the whole collection.

        Args:
            slug: Item slug to find

        Returns:
            True if an item with this slug exists

        Raises:
            requests.RequestException: If a page could not be read after retries
        """
        slug_field = self.settings.field_map.slug
        limit = self.settings.page_size
        offset = 0

        while True:
            page = self._with_retry(
                lambda: self._request(
                    'GET',
                    f"{self.collection_url}/items",
                    params={'offset': offset, 'limit': limit}
                ),
                description=f"Existence check for '{slug}'"
            )
            items: List[Dict[str, Any]] = page.get('items') or []

            for item in items:
                if (item.get('fieldData') or {}).get(slug_field) == slug:
                    return True

            total = (page.get('pagination') or {}).get('total')
            offset += len(items)
            if not items or len(items) < limit:
                return False
            if total is not None and offset >= total:
                return False

    def format_date(self, record: DisclosureRecord) -> str:
        """
        Display date for the CMS as an ISO 8601 UTC string.

        Parsed listing dates are sent at 12:00 UTC of that day, which keeps
        the calendar day stable in every timezone. Unparsable dates fall
        back to publish_date, then scraped_at, then now.
        """
        if record.normalized_date is not None:
            return record.normalized_date.strftime('%Y-%m-%dT12:00:00.000Z')

        moment = record.publish_date or record.scraped_at or datetime.now(timezone.utc)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.000Z')

    def build_item_payload(self, record: DisclosureRecord) -> Dict[str, Any]:
        """
        Request body for POST /collections/{id}/items.

        Field names come from settings.field_map.
        """
        field_map = self.settings.field_map
        return {
            'isArchived': False,
            'isDraft': not self.settings.publish_immediately,
            'fieldData': {
                field_map.name: record.title,
                field_map.slug: record.slug,
                field_map.date: self.format_date(record),
                field_map.body_html: record.content,
                field_map.source_link: self.settings.read_more_link or record.source_url,
            },
        }

    def create_item(self, record: DisclosureRecord) -> Dict[str, Any]:
        """
        Create one draft item (bounded retry).

        Returns:
            Item JSON returned by the CMS

        Raises:
            requests.RequestException: After retries are exhausted
            RuntimeError: If the CMS response carries no item id
        """
        payload = self.build_item_payload(record)
        logger.info(f"Creating CMS item for: {record.title} (slug: {record.slug})")

        item = self._with_retry(
            lambda: self._request('POST', f"{self.collection_url}/items", json=payload),
            description=f"Create item '{record.slug}'"
        )
        if not item.get('id'):
            raise RuntimeError(f"CMS response for '{record.slug}' has no item id")

        logger.info(f"Created CMS item {item['id']} (draft: {item.get('isDraft')})")
        return item

    def publish_item(self, item_id: str) -> Dict[str, Any]:
        """POST /collections/{id}/items/{item_id}/publish (bounded retry)."""
        logger.info(f"Publishing item: {item_id}")
        return self._with_retry(
            lambda: self._request('POST', f"{self.collection_url}/items/{item_id}/publish", json={}),
            description=f"Publish item {item_id}"
        )

    def create_items(self, records: Iterable[DisclosureRecord]) -> PublishBatchResult:
        """
        Create CMS items for records, skipping ones that already exist.

        records may be a lazy iterator; each record is pulled only when the
        previous one has been handled.

        Args:
            records: Enriched records, newest first

        Returns:
            PublishBatchResult with created, skipped and errors
        """
        result = PublishBatchResult()

        for record in records:
            self._process_record(record, result)

            if self.settings.inter_item_delay_ms:
                time.sleep(self.settings.inter_item_delay_ms / 1000)

        logger.info(f"Bulk creation results: {result.summary()}")
        return result

    def _process_record(self, record: DisclosureRecord, result: PublishBatchResult) -> None:
        logger.info(f"Processing release: {record.title}")

        try:
            exists = self.item_exists(record.slug)
        except requests.RequestException as e:
            logger.error(f"Existence check failed for '{record.title}': {e}")
            result.errors.append(FailedItem(record=record, error=f"Existence check failed: {e}"))
            return

        if exists:
            logger.info(f"Skipping existing item: {record.title}")
            result.skipped.append(record)
            return

        try:
            item = self.create_item(record)
        except (requests.RequestException, RuntimeError) as e:
            logger.error(f"Failed to create item for '{record.title}': {e}")
            result.errors.append(FailedItem(record=record, error=str(e)))
            return

        created = CreatedItem(record=record, item_id=item['id'])
        result.created.append(created)

        if self.settings.publish_immediately:
            try:
                self.publish_item(created.item_id)
                created.published = True
            except requests.RequestException as e:
                # Draft exists remotely; keep it in created so it is remembered
                logger.error(f"Created item {created.item_id} but publish failed: {e}")
                result.errors.append(FailedItem(
                    record=record,
                    error=f"Publish failed for item {created.item_id}: {e}"
                ))
