"""A continuous double auction market that matches demands with supplies.

When a demand arrives and supplies are available, the best-scoring supply is
handed out at once. When a supply arrives and demands are waiting, the
best-scoring demand receives it. Ties go to the candidate that came last.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

ScoreFunction = Callable[[Any, float, Any], float]
FetchFunction = Callable[[list["Demand"]], None]


@dataclass
class Demand:
    """A waiting request for a resource and where to deliver it."""

    requirement: Any
    bid: float
    return_queue: Any


@dataclass
class Supply:
    """An available resource."""

    object: Any


def _best_index(scores: list[float]) -> int:
    best = 0
    for index, score in enumerate(scores):
        if score >= scores[best]:
            best = index
    return best


class Market:
    """Matches demands and supplies using a scoring function."""

    def __init__(
        self,
        score_fn: Optional[ScoreFunction] = None,
        fetch_fn: Optional[FetchFunction] = None,
    ) -> None:
        self.demands: list[Demand] = []
        self.supplies: list[Supply] = []
        self.lock = threading.Lock()
        self.score_fn = score_fn
        self.fetch_fn = fetch_fn
        self._has_demands = threading.Condition(self.lock)

    def set_score_function(self, scorer: ScoreFunction) -> "Market":
        self.score_fn = scorer
        return self

    def set_fetch_function(self, fn: FetchFunction) -> "Market":
        self.fetch_fn = fn
        return self

    def add_demand(self, requirement: Any, bid: float, ret_queue: Any) -> None:
        """Register a demand; ``ret_queue.put`` receives the matched supply."""
        with self.lock:
            if self.supplies:
                ret_queue.put(self._pick_best_supply_for(requirement))
                return
            self.demands.append(Demand(requirement, bid, ret_queue))
            self._has_demands.notify()

    def fetcher_loop(self) -> None:
        """Call the fetch function whenever demands are waiting. Never returns."""
        while True:
            with self._has_demands:
                self._has_demands.wait_for(lambda: bool(self.demands))
                pending = list(self.demands)
            self.fetch_fn(pending)

    def return_supply(self, supply: Supply) -> None:
        self.add_supply(supply)

    def add_supply(self, supply: Supply) -> None:
        """Give the supply to the best waiting demand, or keep it for later."""
        with self.lock:
            if self.demands:
                demand = self._pick_best_demand_for(supply)
                demand.return_queue.put(supply)
                return
            self.supplies.append(supply)

    def _pick_best_supply_for(self, requirement: Any) -> Supply:
        scores = [self.score_fn(requirement, 1, s.object) for s in self.supplies]
        return self.supplies.pop(_best_index(scores))

    def _pick_best_demand_for(self, supply: Supply) -> Demand:
        scores = [
            self.score_fn(d.requirement, d.bid, supply.object) for d in self.demands
        ]
        return self.demands.pop(_best_index(scores))