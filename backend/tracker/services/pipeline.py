"""Typed query and aggregation stages.

Store reads are described as a sequence of stage values rather than ad-hoc
filter chains, so every call site states exactly which filters, orderings and
caps it applies. ``Match``/``Sort``/``Limit`` are applied to a SQLAlchemy
query; ``Group`` folds already-loaded rows into per-key accumulators.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, Protocol, Sequence, TypeVar, Union

from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

R = TypeVar("R")
A = TypeVar("A", bound="Accumulator")


class Accumulator(Protocol):
    def add(self, row: Any) -> None:
        ...

    def merge(self, other: Any) -> Any:
        ...


@dataclass(frozen=True)
class Match:
    criteria: tuple[ColumnElement[bool], ...]

    @classmethod
    def of(cls, *criteria: ColumnElement[bool]) -> "Match":
        return cls(criteria=tuple(criteria))


@dataclass(frozen=True)
class Sort:
    keys: tuple[Any, ...]

    @classmethod
    def by(cls, *keys: Any) -> "Sort":
        return cls(keys=tuple(keys))


@dataclass(frozen=True)
class Limit:
    count: int

    def __post_init__(self) -> None:
        if self.count <= 0:
            raise ValueError("Limit count must be positive")


Stage = Union[Match, Sort, Limit]


def apply_stages(query: Query, stages: Sequence[Stage]) -> Query:
    for stage in stages:
        if isinstance(stage, Match):
            if stage.criteria:
                query = query.filter(*stage.criteria)
        elif isinstance(stage, Sort):
            query = query.order_by(*stage.keys)
        elif isinstance(stage, Limit):
            query = query.limit(stage.count)
        else:
            raise TypeError(f"Unsupported pipeline stage: {type(stage).__name__}")
    return query


@dataclass(frozen=True)
class Group(Generic[R, A]):
    """Fold rows into one accumulator per key, preserving first-seen key order."""

    key: Callable[[R], str]
    seed: Callable[[], A]

    def run(self, rows: Iterable[R]) -> Dict[str, A]:
        groups: Dict[str, A] = {}
        for row in rows:
            k = self.key(row)
            acc = groups.get(k)
            if acc is None:
                acc = self.seed()
                groups[k] = acc
            acc.add(row)
        return groups


def merge_groups(left: Dict[str, A], right: Dict[str, A]) -> Dict[str, A]:
    """Merge two grouped shards; ``left`` keeps precedence in key order."""
    merged: Dict[str, A] = dict(left)
    for k, acc in right.items():
        existing = merged.get(k)
        merged[k] = acc if existing is None else existing.merge(acc)
    return merged
