"""Statuses of executors started by an agent, expired after a day of silence."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional

EXPIRY_SECONDS = 24 * 60 * 60
PURGE_INTERVAL_SECONDS = 60 * 60


@dataclass
class ChannelStatus:
    """Progress of one input or output channel; times are epoch seconds."""

    name: str = ""
    length: int = 0
    start_time: float = 0.0
    stop_time: float = 0.0


@dataclass
class ExecutorStatus:
    """Channel progress and life times of an executor, in epoch seconds."""

    input_channel_statuses: list[ChannelStatus] = field(default_factory=list)
    output_channel_statuses: list[ChannelStatus] = field(default_factory=list)
    request_time: float = 0.0
    start_time: float = 0.0
    stop_time: float = 0.0


@dataclass
class AgentExecutorStatus(ExecutorStatus):
    """An executor status kept by an agent, with its running process."""

    request_hash: int = 0
    process: Optional[Any] = None
    last_access_time: float = 0.0


class LocalExecutorManager:
    """Thread-safe registry of executor statuses keyed by request id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._statuses: dict[int, AgentExecutorStatus] = {}

    def get_executor_status(self, request_id: int) -> AgentExecutorStatus:
        """Return the status for a request, creating it if needed."""
        with self._lock:
            status = self._statuses.get(request_id)
            if status is None:
                status = AgentExecutorStatus(last_access_time=time.time())
                self._statuses[request_id] = status
            return status

    def purge_expired(self, now: Optional[float] = None) -> list[int]:
        """Drop statuses not accessed for a day; return the dropped ids."""
        cutoff = (time.time() if now is None else now) - EXPIRY_SECONDS
        with self._lock:
            expired = [
                rid for rid, s in self._statuses.items() if s.last_access_time < cutoff
            ]
            for rid in expired:
                del self._statuses[rid]
        return expired

    def start_purging(self, interval: float = PURGE_INTERVAL_SECONDS) -> threading.Event:
        """Purge now and then every interval in a daemon thread; set the event to stop."""
        stop = threading.Event()

        def loop() -> None:
            while True:
                self.purge_expired()
                if stop.wait(interval):
                    return

        threading.Thread(target=loop, daemon=True).start()
        return stop