"""Diff utilities for record sets."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from .models import RecordConfig

Key = Tuple[str, str]


@dataclass(frozen=True)
class Correlation:
    """Pairs a desired record with an existing one (either may be missing)."""

    existing: RecordConfig | None
    desired: RecordConfig | None

    def __str__(self) -> str:
        if self.existing is None and self.desired is not None:
            return f"CREATE {self.desired}"
        if self.desired is None and self.existing is not None:
            return f"DELETE {self.existing}"
        return f"MODIFY {self.existing} -> {self.desired}"


DiffResult = Tuple[List[Correlation], List[Correlation], List[Correlation], List[Correlation]]
Differ = Callable[[Sequence[RecordConfig], Sequence[RecordConfig]], DiffResult]


def _group(records: Sequence[RecordConfig]) -> Dict[Key, list[RecordConfig]]:
    """Index records by owner/type, skipping SOA."""
    index: Dict[Key, list[RecordConfig]] = defaultdict(list)
    for record in records:
        if record.canonical_type() == "SOA":
            continue
        index[record.key()].append(record)
    return index


def _take(records: list[RecordConfig], match: Callable[[RecordConfig], bool]) -> RecordConfig | None:
    """Remove and return the first record satisfying match."""
    for position, record in enumerate(records):
        if match(record):
            return records.pop(position)
    return None


def incremental_diff(desired: Sequence[RecordConfig], existing: Sequence[RecordConfig]) -> DiffResult:
    """Produce (unchanged, create, delete, modify) between desired and existing records."""
    desired_map = _group(desired)
    existing_map = _group(existing)
    unchanged: list[Correlation] = []
    create: list[Correlation] = []
    delete: list[Correlation] = []
    modify: list[Correlation] = []

    for key in sorted(set(desired_map) | set(existing_map)):
        wanted = list(desired_map.get(key, []))
        present = list(existing_map.get(key, []))

        # Identical content and TTL.
        for record in list(wanted):
            found = _take(present, lambda r: r.content() == record.content() and r.ttl == record.ttl)
            if found is not None:
                wanted.remove(record)
                unchanged.append(Correlation(existing=found, desired=record))

        # Same content, TTL differs.
        for record in list(wanted):
            found = _take(present, lambda r: r.content() == record.content())
            if found is not None:
                wanted.remove(record)
                modify.append(Correlation(existing=found, desired=record))

        # Remaining records under the same name/type are rewritten in place.
        while wanted and present:
            modify.append(Correlation(existing=present.pop(0), desired=wanted.pop(0)))

        create.extend(Correlation(existing=None, desired=record) for record in wanted)
        delete.extend(Correlation(existing=record, desired=None) for record in present)

    return unchanged, create, delete, modify
