"""Track where dataset shards live and score allocations by data locality.

Tasks expose ``inputs``, a list of shards with a ``name``. Locations expose
``url()`` and ``distance(other)``; allocations expose ``location``.
"""

from __future__ import annotations

import threading
from typing import Any, Optional


class DatasetShardLocator:
    """A thread-safe map from shard names to the locations holding them."""

    def __init__(self, executable_file_hash: str) -> None:
        self.executable_file_hash = executable_file_hash
        self._locations: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)

    def _shard_name(self, shard: Any) -> str:
        return f"{self.executable_file_hash}-{shard.name}"

    def get_shard_location(self, shard_name: str) -> Optional[Any]:
        """The location of a shard, or None if it is not registered."""
        return self._locations.get(shard_name)

    def set_shard_location(self, name: str, location: Any) -> None:
        with self._changed:
            self._locations[name] = location
            self._changed.notify_all()

    def _all_inputs_registered(self, task: Any) -> bool:
        return all(self._shard_name(s) in self._locations for s in task.inputs)

    def wait_for_input_locations(self, task: Any, timeout: Optional[float] = None) -> bool:
        """Block until every input of the task has a location; False on timeout."""
        with self._changed:
            return self._changed.wait_for(
                lambda: self._all_inputs_registered(task), timeout
            )

    def all_input_locations(self, task: Any) -> str:
        """Describe the task inputs as ``name@url`` pairs joined by commas."""
        with self._lock:
            parts = []
            for shard in task.inputs:
                name = self._shard_name(shard)
                location = self._locations.get(name)
                if location is None:
                    raise LookupError(f"input {name} has no registered location")
                parts.append(f"{name}@{location.url()}")
            return ",".join(parts)


def score_task_group(
    locator: DatasetShardLocator, task_group: Any, bid: float, allocation: Any
) -> float:
    """Score an allocation for a task group: the bid divided by 1 plus data distance."""
    target = allocation.location
    cost = 1.0
    for shard in task_group.tasks[0].inputs:
        location = locator.get_shard_location(locator._shard_name(shard))
        if location is None:
            continue
        cost += location.distance(target)
    return bid / cost