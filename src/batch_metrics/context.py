"""Execution context owned by a job instance and the merge of snapshots into it."""

from __future__ import annotations

import dataclasses
from typing import Any, Dict, Iterator, Mapping, Optional

from .extraction import Snapshot


class ExecutionContext:
    """Key/value state of a job instance that outlives single executions."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = dict(values or {})
        self.dirty = False

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def put(self, key: str, value: Any) -> None:
        self._values[key] = value
        self.dirty = True

    def contains_key(self, key: str) -> bool:
        return key in self._values

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ExecutionContext):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"ExecutionContext({self._values!r})"


def merge(snapshot: Snapshot, context: ExecutionContext) -> tuple[ExecutionContext, Snapshot]:
    """Fold ``snapshot`` into ``context``.

    Counters accumulate over all executions of the job instance: a value left in the
    context by an earlier execution is added to the current one, and the returned
    snapshot carries the cumulative total. Gauges always replace what the context holds.
    """

    counters = []
    for entry in snapshot.counters:
        prior = context.get(entry.key)
        value = entry.value
        if isinstance(prior, int) and not isinstance(prior, bool):
            value = prior + entry.value
            entry = dataclasses.replace(entry, value=value)
        context.put(entry.key, value)
        counters.append(entry)

    for entry in snapshot.gauges:
        context.put(entry.key, entry.value)

    return context, Snapshot(counters=tuple(counters), gauges=snapshot.gauges)


class ExecutionContextMerger:
    """Object form of :func:`merge` for callers that inject collaborators."""

    def merge(
        self, snapshot: Snapshot, context: ExecutionContext
    ) -> tuple[ExecutionContext, Snapshot]:
        return merge(snapshot, context)


__all__ = ["ExecutionContext", "ExecutionContextMerger", "merge"]
