"""Command-line options of the driver and of task executors.

Flags follow the single-dash style: ``-name value``, ``-name=value`` or, for
booleans, ``-name``. Flags not known to an option set are ignored so that
driver, task and user flags can share one command line.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

RELATED_FILES_SEPARATOR = f"'{os.pathsep}'"

_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}


def _parse_bool(value: str) -> bool:
    if value in _TRUE_WORDS:
        return True
    if value in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_uint(value: str) -> int:
    number = int(value)
    if number < 0:
        raise ValueError(f"not an unsigned integer: {value!r}")
    return number


def _parse_flags(
    argv: Optional[Sequence[str]], flags: dict[str, tuple[str, Callable[[str], object]]]
) -> dict[str, object]:
    args = sys.argv[1:] if argv is None else list(argv)
    values: dict[str, object] = {}
    it = iter(args)
    for arg in it:
        if arg == "--":
            break
        if not arg.startswith("-") or arg == "-":
            continue
        body = arg[2:] if arg.startswith("--") else arg[1:]
        name, has_value, value = body.partition("=")
        if name not in flags:
            continue
        field_name, convert = flags[name]
        if convert is _parse_bool and not has_value:
            values[field_name] = True
            continue
        if not has_value:
            next_value = next(it, None)
            if next_value is None:
                raise ValueError(f"flag needs an argument: -{name}")
            value = next_value
        try:
            values[field_name] = convert(value)
        except ValueError as err:
            raise ValueError(f"invalid value {value!r} for flag -{name}: {err}") from None
    return values


_DRIVER_FLAGS: dict[str, tuple[str, Callable[[str], object]]] = {
    "glow": ("should_start", _parse_bool),
    "glow.leader": ("leader", str),
    "glow.dataCenter": ("data_center", str),
    "glow.rack": ("rack", str),
    "glow.task.memoryMB": ("task_memory_mb", int),
    "glow.flow.bid": ("flow_bid", float),
    "glow.flow.plot": ("plot_output", _parse_bool),
    "glow.module": ("module", str),
    "glow.related.files": ("related_files", str),
    "glow.flow.stat": ("show_flow_stats", _parse_bool),
    "glow.driver.host": ("host", str),
    "glow.driver.port": ("port", int),
    "cert.file": ("cert_file", str),
    "key.file": ("key_file", str),
    "ca.file": ("ca_file", str),
}

_TASK_FLAGS: dict[str, tuple[str, Callable[[str], object]]] = {
    "glow.flow.id": ("context_id", int),
    "glow.taskGroup.id": ("task_group_id", int),
    "glow.task.name": ("first_task_name", str),
    "glow.taskGroup.inputs": ("inputs", str),
    "glow.exe.hash": ("executable_file_hash", str),
    "glow.channel.bufferSize": ("channel_buffer_size", int),
    "glow.request.id": ("request_id", _parse_uint),
    "glow.agent.address": ("agent_address", str),
}


@dataclass
class DriverOption:
    """Options that start and steer the driver."""

    should_start: bool = False
    leader: str = "localhost:8930"
    data_center: str = ""
    rack: str = ""
    plot_output: bool = False
    task_memory_mb: int = 64
    flow_bid: float = 100.0
    module: str = ""
    related_files: str = ""
    show_flow_stats: bool = False
    host: str = ""
    port: int = 0
    cert_file: str = ""
    key_file: str = ""
    ca_file: str = ""

    def related_file_names(self) -> list[str]:
        if not self.related_files:
            return []
        return self.related_files.split(RELATED_FILES_SEPARATOR)

    @classmethod
    def from_args(cls, argv: Optional[Sequence[str]] = None) -> "DriverOption":
        return cls(**_parse_flags(argv, _DRIVER_FLAGS))


@dataclass
class TaskOption:
    """Options an agent passes to a started task executor."""

    context_id: int = -1
    task_group_id: int = -1
    first_task_name: str = ""
    inputs: str = ""
    executable_file_hash: str = ""
    channel_buffer_size: int = 0
    request_id: int = 0
    agent_address: str = ""
    extra: dict = field(default_factory=dict, repr=False)

    def is_task_mode(self) -> bool:
        return self.task_group_id >= 0 and self.context_id >= 0

    @classmethod
    def from_args(cls, argv: Optional[Sequence[str]] = None) -> "TaskOption":
        return cls(**_parse_flags(argv, _TASK_FLAGS))


def parse_input_locations(inputs: str) -> dict[str, str]:
    """Parse ``name@location`` pairs separated by commas into a mapping."""
    locations: dict[str, str] = {}
    if not inputs:
        return locations
    for pair in inputs.split(","):
        parts = pair.split("@")
        if len(parts) < 2:
            raise ValueError(f"input {pair!r} has no location")
        locations[parts[0]] = parts[1]
    return locations