"""Productivity aggregation over QC work-log batches.

Batches are bucketed by ``client_code|||work_type``. Files whose status is
``skip`` are ignored for counts and time, but the batch pause time still
counts. Missing values are coerced to sentinels so a single malformed batch
never drops out of, or breaks, the totals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Tuple

from tracker.models.work_log import WorkLogBatch, WorkLogFile
from tracker.schemas.tracker import ClientAggregate, ProductivityTotals
from tracker.services.formatting import as_int, as_string
from tracker.services.pipeline import Group, merge_groups

UNKNOWN_CLIENT = "unknown_client"
UNKNOWN_WORK_TYPE = "unknown_work_type"
KEY_SEPARATOR = "|||"
SKIP_STATUS = "skip"


def bucket_key(client_code, work_type) -> str:
    client = as_string(client_code) or UNKNOWN_CLIENT
    kind = as_string(work_type) or UNKNOWN_WORK_TYPE
    return f"{client}{KEY_SEPARATOR}{kind}"


def is_skipped(entry: WorkLogFile) -> bool:
    return as_string(getattr(entry, "file_status", None)).strip().lower() == SKIP_STATUS


def counted_files(batch: WorkLogBatch) -> list:
    return [f for f in (batch.files or []) if f is not None and not is_skipped(f)]


@dataclass
class ClientAccumulator:
    total_files: int = 0
    work_seconds: int = 0
    pause_seconds: int = 0
    last_work_type: str = ""
    last_category: str = ""

    def add(self, batch: WorkLogBatch) -> None:
        files = counted_files(batch)
        self.total_files += len(files)
        self.work_seconds += sum(as_int(f.time_spent) for f in files)
        self.pause_seconds += as_int(batch.pause_time)

        work_type = as_string(batch.work_type)
        category = as_string(batch.categories).strip()
        if work_type:
            self.last_work_type = work_type
        if category:
            self.last_category = category

    def merge(self, other: "ClientAccumulator") -> "ClientAccumulator":
        # ``other`` is the later shard, so its non-empty labels win.
        return ClientAccumulator(
            total_files=self.total_files + other.total_files,
            work_seconds=self.work_seconds + other.work_seconds,
            pause_seconds=self.pause_seconds + other.pause_seconds,
            last_work_type=other.last_work_type or self.last_work_type,
            last_category=other.last_category or self.last_category,
        )

    @property
    def avg_seconds(self) -> int:
        return self.work_seconds // self.total_files if self.total_files > 0 else 0

    def to_schema(self) -> ClientAggregate:
        return ClientAggregate(
            total_files=self.total_files,
            work_seconds=self.work_seconds,
            pause_seconds=self.pause_seconds,
            avg_seconds=self.avg_seconds,
            last_work_type=self.last_work_type,
            last_category=self.last_category,
        )


BY_CLIENT_AND_WORK_TYPE: Group[WorkLogBatch, ClientAccumulator] = Group(
    key=lambda batch: bucket_key(batch.client_code, batch.work_type),
    seed=ClientAccumulator,
)


@dataclass
class ProductivityAccumulator:
    """Per-bucket accumulators for one shard of batches."""

    buckets: Dict[str, ClientAccumulator] = field(default_factory=dict)

    @classmethod
    def from_batches(cls, batches: Iterable[WorkLogBatch]) -> "ProductivityAccumulator":
        return cls(buckets=BY_CLIENT_AND_WORK_TYPE.run(batches))

    def merge(self, other: "ProductivityAccumulator") -> "ProductivityAccumulator":
        return ProductivityAccumulator(buckets=merge_groups(self.buckets, other.buckets))

    def totals(self) -> ProductivityTotals:
        total_files = sum(b.total_files for b in self.buckets.values())
        total_work = sum(b.work_seconds for b in self.buckets.values())
        total_pause = sum(b.pause_seconds for b in self.buckets.values())
        return ProductivityTotals(
            total_files=total_files,
            total_work_seconds=total_work,
            total_pause_seconds=total_pause,
            avg_seconds=total_work // total_files if total_files > 0 else 0,
        )

    def by_client(self) -> Dict[str, ClientAggregate]:
        return {key: acc.to_schema() for key, acc in self.buckets.items()}


def aggregate_productivity(
    batches: Iterable[WorkLogBatch],
) -> Tuple[ProductivityTotals, Dict[str, ClientAggregate]]:
    acc = ProductivityAccumulator.from_batches(batches)
    return acc.totals(), acc.by_client()
