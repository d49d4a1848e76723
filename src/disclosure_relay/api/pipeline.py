"""
High-level pipeline orchestrator for disclosure publishing.

ReleasePipeline coordinates one batch run:
- Schedule gate (skipped in test mode)
- CMS pre-flight connection check
- Listing fetch, cutoff filter, newest-first ordering, per-run limit
- Local dedup against the processed store
- Lazy content extraction, one record at a time, feeding the publisher
- Store update and atomic save

Design Philosophy:
- Collaborators injected at construction (from_config() builds defaults)
- Resilient per record (errors collected, batch continues)
- Fatal failures recorded in the store's error history, then raised
"""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from disclosure_relay.config import AppConfig, RelayConfig
from disclosure_relay.models.results import RunSummary
from disclosure_relay.models.store import ProcessedStore, filter_new
from disclosure_relay.schedule import is_within_active_window
from disclosure_relay.services.cms_publisher import CMSPublisher
from disclosure_relay.services.content_extraction import ContentExtractor
from disclosure_relay.services.listing_service import ListingService
from disclosure_relay.services.store_service import StoreService

logger = logging.getLogger(__name__)


class ReleasePipeline:
    """
    Single-run batch pipeline from the disclosure listing to the CMS.

    The publisher is built lazily through publisher_factory so that a
    missing-credentials failure happens inside run() and is recorded like
    any other fatal error.

    Example:
        >>> pipeline = ReleasePipeline.from_config(get_app_config(), get_relay_config())
        >>> summary = pipeline.run(test_mode=True)
        >>> print(summary.status, summary.created)
        completed 2
    """

    def __init__(
        self,
        config: RelayConfig,
        listing: ListingService,
        extractor: ContentExtractor,
        publisher_factory: Callable[[], CMSPublisher],
        store_service: StoreService
    ):
        """
        Initialize pipeline with its collaborators.

        Args:
            config: Pipeline configuration
            listing: Listing fetch/filter service
            extractor: Content extractor
            publisher_factory: Zero-argument callable returning a CMSPublisher
            store_service: Processed-store persistence
        """
        self.config = config
        self.listing = listing
        self.extractor = extractor
        self.publisher_factory = publisher_factory
        self.store_service = store_service
        self._publisher: Optional[CMSPublisher] = None

    @classmethod
    def from_config(cls, app_config: AppConfig, relay_config: RelayConfig) -> 'ReleasePipeline':
        """Build a pipeline with default services from configuration."""
        return cls(
            config=relay_config,
            listing=ListingService(
                relay_config.source,
                timezone=relay_config.schedule.timezone
            ),
            extractor=ContentExtractor.from_config(relay_config),
            publisher_factory=lambda: CMSPublisher.from_config(app_config, relay_config.cms),
            store_service=StoreService(app_config.processed_data_path)
        )

    @property
    def publisher(self) -> CMSPublisher:
        if self._publisher is None:
            self._publisher = self.publisher_factory()
        return self._publisher

    def run(self, test_mode: bool = False, now: Optional[datetime] = None) -> RunSummary:
        """
        Execute one pipeline run.

        Args:
            test_mode: Bypass the schedule gate and use the smaller record limit
            now: Moment used for the schedule gate (defaults to current time)

        Returns:
            RunSummary with status 'completed', 'skipped', 'no_records' or
            'no_new_records'

        Raises:
            RuntimeError: On any fatal failure, after it has been recorded in
                          the store's error history
        """
        start_time = time.time()
        logger.info(f"Starting disclosure relay run{' (TEST MODE)' if test_mode else ''}")

        store: Optional[ProcessedStore] = None

        try:
            store = self.store_service.load()
            summary = self._run(store, test_mode, now)
        except Exception as e:
            logger.error(f"Pipeline run failed: {e}", exc_info=True)
            if store is not None:
                self._record_fatal(store, e)
            raise RuntimeError(f"Pipeline run failed: {e}") from e

        summary.duration_sec = round(time.time() - start_time, 2)
        logger.info(
            f"Run finished in {summary.duration_sec}s: status={summary.status}, "
            f"found={summary.found}, new={summary.new}, created={summary.created}, "
            f"skipped={summary.skipped}, errors={summary.errors}"
        )
        return summary

    def _run(
        self,
        store: ProcessedStore,
        test_mode: bool,
        now: Optional[datetime]
    ) -> RunSummary:
        # === Step 1: Schedule gate ===
        if not test_mode and not is_within_active_window(self.config.schedule, now):
            logger.info("Outside scheduled hours, skipping execution")
            return RunSummary(status='skipped')

        # === Step 2: CMS pre-flight ===
        publisher = self.publisher
        if not publisher.test_connection():
            raise RuntimeError("Failed to connect to CMS API")

        # === Step 3: Fetch listing ===
        source = self.config.source
        limit = source.test_max_releases if test_mode else source.max_releases
        records = self.listing.get_latest_records(limit)

        if not records:
            logger.info("No disclosures found")
            return RunSummary(status='no_records')

        # === Step 4: Local dedup ===
        new_records = filter_new(records, store)
        if not new_records:
            logger.info("No new disclosures to process")
            return RunSummary(status='no_new_records', found=len(records))

        logger.info(f"Found {len(new_records)} new disclosure(s) to process")

        # === Step 5: Extract lazily and publish ===
        result = publisher.create_items(self.extractor.iter_enriched(new_records))

        # === Step 6: Persist ===
        store.merge_batch(result)
        self.store_service.save(store)

        if result.errors:
            for failed in result.errors:
                logger.warning(f"Error for '{failed.record.title}': {failed.error}")

        return RunSummary(
            status='completed',
            found=len(records),
            new=len(new_records),
            created=len(result.created),
            skipped=len(result.skipped),
            errors=len(result.errors),
            error_messages=[failed.error for failed in result.errors]
        )

    def _record_fatal(self, store: ProcessedStore, error: Exception) -> None:
        """Best-effort append of a fatal failure to the persisted error history."""
        store.record_error('run', str(error), fatal=True)
        try:
            self.store_service.save(store)
        except OSError as save_error:
            logger.error(f"Failed to save error data: {save_error}")

    def health_check(self) -> bool:
        """
        Check the CMS connection and the listing fetch.

        Returns:
            True if both succeed
        """
        logger.info("Running health check")

        try:
            if not self.publisher.test_connection():
                raise RuntimeError("CMS connection failed")
            self.listing.fetch_listing_html()
        except (ValueError, RuntimeError) as e:
            logger.error(f"Health check failed: {e}")
            return False

        logger.info("Health check passed")
        return True
