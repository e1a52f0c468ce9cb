from dataclasses import dataclass, field

from glowdrive.plan import TaskGroup
from glowdrive.plot import plot_graph, render_graph


@dataclass(eq=False)
class Dataset:
    id: int
    shards: list = field(default_factory=list, repr=False)
    external_input_chans: list = field(default_factory=list)
    external_output_chans: list = field(default_factory=list)


@dataclass(eq=False)
class Shard:
    display_name: str
    parent: Dataset = field(repr=False)


@dataclass(eq=False)
class Task:
    id: int
    name: str
    inputs: list = field(default_factory=list, repr=False)
    outputs: list = field(default_factory=list, repr=False)


@dataclass
class Flow:
    datasets: list = field(default_factory=list)


def simple_flow(input_chans=0, output_chans=0):
    ds = Dataset(id=3, external_input_chans=[object()] * input_chans,
                 external_output_chans=[object()] * output_chans)
    shard = Shard("d3_0", ds)
    ds.shards = [shard]
    source = Task(id=4, name="s0", outputs=[shard])
    sink = Task(id=5, name="m0", inputs=[shard])
    return Flow(datasets=[ds]), [TaskGroup(id=0, tasks=[source, sink])]


def test_empty_graph():
    text = render_graph([], Flow())
    assert text == "digraph glow {\n  center=true;\n  compound=true;\n}\n"


def test_start_and_end_nodes():
    flow, groups = simple_flow()
    lines = render_graph(groups, flow).splitlines()

    assert lines[0] == "digraph glow {"
    assert lines[-1] == "}"
    assert "  subgraph group_0{" in lines
    assert "    s0 -> m0;" in lines
    assert '    label = "group_0";' in lines
    assert "  start -> s0;" in lines
    assert "  m0 -> end;" in lines
    assert "  start [shape=Mdiamond];" in lines
    assert "  end [shape=Msquare];" in lines


def test_external_input_channels():
    flow, groups = simple_flow(input_chans=2)
    lines = render_graph(groups, flow).splitlines()

    assert lines.count("  input4 [shape=doublecircle];") == 2
    assert lines.count("  input4 -> s0;") == 2
    assert "  start [shape=Mdiamond];" not in lines


def test_external_output_channels():
    flow, groups = simple_flow(output_chans=1)
    lines = render_graph(groups, flow).splitlines()

    assert "  output3 [shape=doublecircle];" in lines
    assert "  d3_0 -> output3;" in lines


def test_inputs_and_outputs_between_groups():
    ds = Dataset(id=0)
    shard = Shard("d0_0", ds)
    ds.shards = [shard]
    producer = Task(id=0, name="a0", outputs=[shard])
    consumer = Task(id=1, name="b0", inputs=[shard])
    groups = [TaskGroup(id=0, tasks=[producer]), TaskGroup(id=1, tasks=[consumer])]
    lines = render_graph(groups, Flow(datasets=[ds])).splitlines()

    assert "  a0 -> d0_0;" in lines
    assert "  d0_0 -> b0;" in lines
    assert sum(line.startswith("  subgraph group_") for line in lines) == len(groups)


def test_plot_graph_prints_rendering(capsys):
    flow, groups = simple_flow()
    plot_graph(groups, flow)
    assert capsys.readouterr().out == render_graph(groups, flow) + "\n"