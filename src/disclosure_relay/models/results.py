"""
Transient per-run result containers.

These are produced fresh on every run and never serialized as a whole;
created entries are folded into ProcessedStore by ProcessedStore.merge_batch().
"""

from dataclasses import dataclass, field
from typing import List, Optional

from disclosure_relay.models.record import DisclosureRecord


@dataclass
class CreatedItem:
    """A record that now exists remotely, with the CMS-assigned identifier."""
    record: DisclosureRecord
    item_id: str
    published: bool = False


@dataclass
class FailedItem:
    """A record that could not be checked or created, with the causal message."""
    record: DisclosureRecord
    error: str


@dataclass
class PublishBatchResult:
    """Outcome of Publisher.create_items() for one batch of records."""
    created: List[CreatedItem] = field(default_factory=list)
    skipped: List[DisclosureRecord] = field(default_factory=list)
    errors: List[FailedItem] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"{len(self.created)} created, "
            f"{len(self.skipped)} skipped, "
            f"{len(self.errors)} errors"
        )


@dataclass
class RunSummary:
    """What a single pipeline run did."""
    status: str  # 'completed', 'skipped', 'no_records', 'no_new_records'
    found: int = 0
    new: int = 0
    created: int = 0
    skipped: int = 0
    errors: int = 0
    duration_sec: Optional[float] = None
    error_messages: List[str] = field(default_factory=list)
