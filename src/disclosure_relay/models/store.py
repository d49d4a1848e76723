"""
Pydantic models for the persisted processed-releases store.

Schema Design:
- One JSON document per deployment, read and written whole on each run
- camelCase keys on disk (lastProcessed, processedReleases, ...), snake_case in Python
- processedReleases is append-only across runs
- stats.errors is a ring buffer holding the last MAX_ERRORS entries
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Iterable, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from disclosure_relay.models.results import PublishBatchResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore'
    )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ErrorEntry(_CamelModel):
    """One entry of the persisted error history."""

    context: str = Field(..., description="What was being processed (record title or 'run')")
    message: str = Field(..., description="Causal error message")
    timestamp: datetime = Field(default_factory=utc_now)
    fatal: bool = Field(default=False, description="True if the failure aborted the run")


class ProcessedRelease(_CamelModel):
    """A disclosure that has been created in the CMS."""

    dedup_key: str
    title: str
    source_url: str
    remote_item_id: str
    processed_at: datetime = Field(default_factory=utc_now)


class RunStats(_CamelModel):
    total_processed: int = Field(default=0, ge=0)
    last_run_time: Optional[datetime] = None
    errors: List[ErrorEntry] = Field(default_factory=list)


class ProcessedStore(_CamelModel):
    """
    Durable record of what has already been published.

    Example:
        >>> store = ProcessedStore()
        >>> store.record_error("run", "CMS unreachable", fatal=True)
        >>> store.stats.errors[-1].fatal
        True
    """

    MAX_ERRORS: ClassVar[int] = 10

    last_processed: Optional[datetime] = None
    processed_releases: List[ProcessedRelease] = Field(default_factory=list)
    stats: RunStats = Field(default_factory=RunStats)

    def processed_keys(self) -> Set[str]:
        """Return the dedup keys of every processed release."""
        return {release.dedup_key for release in self.processed_releases}

    def record_error(
        self,
        context: str,
        message: str,
        fatal: bool = False,
        timestamp: Optional[datetime] = None
    ) -> None:
        """Append an error and trim the history to the last MAX_ERRORS entries."""
        self.stats.errors.append(ErrorEntry(
            context=context,
            message=message,
            fatal=fatal,
            timestamp=timestamp or utc_now()
        ))
        self.stats.errors = self.stats.errors[-self.MAX_ERRORS:]

    def merge_batch(
        self,
        result: 'PublishBatchResult',
        now: Optional[datetime] = None
    ) -> None:
        """
        Fold a publish batch into the store.

        Appends created items to processed_releases, bumps totals and run
        time, and pushes per-record errors into the error ring buffer.

        Args:
            result: Batch result from Publisher.create_items()
            now: Timestamp to stamp entries with (defaults to UTC now)
        """
        now = now or utc_now()

        for created in result.created:
            self.processed_releases.append(ProcessedRelease(
                dedup_key=created.record.dedup_key,
                title=created.record.title,
                source_url=created.record.source_url,
                remote_item_id=created.item_id,
                processed_at=now
            ))

        for failed in result.errors:
            self.record_error(failed.record.title, failed.error, timestamp=now)

        self.last_processed = now
        self.stats.total_processed += len(result.created)
        self.stats.last_run_time = now

    def to_json(self) -> str:
        """Serialize with on-disk (camelCase) keys."""
        return self.model_dump_json(by_alias=True, indent=2)


def filter_new(records: Iterable, store: ProcessedStore) -> list:
    """
    Keep records whose dedup_key is not yet in the store.

    This only covers this deployment's own history; items created by a run
    that crashed before saving are caught by the CMS existence check.

    Args:
        records: Candidate DisclosureRecord objects
        store: Loaded ProcessedStore

    Returns:
        Records not seen before, in input order
    """
    seen = store.processed_keys()
    return [record for record in records if record.dedup_key not in seen]
