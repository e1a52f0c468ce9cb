"""Render task groups of a flow as a graphviz dot graph.

Tasks expose ``id``, ``name``, ``inputs`` and ``outputs``; shards expose
``display_name`` and ``parent``; datasets expose ``id``, ``shards``,
``external_input_chans`` and ``external_output_chans``.
"""

from __future__ import annotations

from typing import Any, Iterable

_INDENT = "  "


def _task_group_lines(tg: Any, p: str) -> list[str]:
    lines = [
        f"{p}subgraph group_{tg.id}{{\n",
        f"{p}{p}node [style=filled,color=white];\n",
        f"{p}{p}style=filled;\n",
        f"{p}{p}color=lightgrey;\n",
    ]
    if tg.tasks:
        chain = " -> ".join(task.name for task in tg.tasks)
        lines.append(f"{p}{p}{chain};\n")
    else:
        lines.append(";\n")
    lines.append(f'{p}{p}label = "group_{tg.id}";\n')
    lines.append(f"{p}}}\n")
    return lines


def render_graph(task_groups: Iterable[Any], fc: Any) -> str:
    """Return the dot description of the task groups of a flow."""
    task_groups = list(task_groups)
    p = _INDENT
    out = ["digraph glow {\n"]
    for tg in task_groups:
        out.extend(_task_group_lines(tg, p))

    has_start = has_end = False
    for tg in task_groups:
        first, last = tg.tasks[0], tg.tasks[-1]
        if not first.inputs:
            ds = first.outputs[0].parent
            if not ds.external_input_chans:
                out.append(f"{p}start -> {first.name};\n")
                has_start = True
            else:
                for _ in ds.external_input_chans:
                    out.append(f"{p}input{first.id} [shape=doublecircle];\n")
                    out.append(f"{p}input{first.id} -> {first.name};\n")
        else:
            for shard in first.inputs:
                out.append(f"{p}{shard.display_name} -> {first.name};\n")

        if not last.outputs:
            has_end = True
            out.append(f"{p}{last.name} -> end;\n")
        else:
            for shard in last.outputs:
                out.append(f"{p}{last.name} -> {shard.display_name};\n")

    for ds in fc.datasets:
        if ds.external_output_chans:
            out.append(f"{p}output{ds.id} [shape=doublecircle];\n")
            for shard in ds.shards:
                out.append(f"{p}{shard.display_name} -> output{ds.id};\n")

    out.append(f"{p}center=true;\n")
    out.append(f"{p}compound=true;\n")
    if has_start:
        out.append(f"{p}start [shape=Mdiamond];\n")
    if has_end:
        out.append(f"{p}end [shape=Msquare];\n")
    out.append("}\n")
    return "".join(out)


def plot_graph(task_groups: Iterable[Any], fc: Any) -> None:
    """Print the dot description of the task groups of a flow."""
    print(render_graph(task_groups, fc))