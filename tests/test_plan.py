from dataclasses import dataclass, field

import pytest

from glowdrive.plan import PlanError, StepGroup, TaskGroup, group_tasks


@dataclass(eq=False)
class Shard:
    name: str
    parent: object = field(default=None, repr=False)
    reading_tasks: list = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Dataset:
    id: int
    step: object = field(default=None, repr=False)
    shards: list = field(default_factory=list, repr=False)
    reading_steps: list = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Task:
    id: int
    name: str
    inputs: list = field(default_factory=list, repr=False)
    outputs: list = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Step:
    id: int
    name: str
    tasks: list = field(default_factory=list, repr=False)
    inputs: list = field(default_factory=list, repr=False)


@dataclass
class Flow:
    steps: list = field(default_factory=list)
    datasets: list = field(default_factory=list)


def add_step(flow, name, task_count, inputs=()):
    step = Step(id=len(flow.steps), name=name, inputs=list(inputs))
    flow.steps.append(step)
    for ds in inputs:
        ds.reading_steps.append(step)
    out = Dataset(id=len(flow.datasets), step=step)
    flow.datasets.append(out)
    out.shards = [Shard(f"{name}.d{i}", out) for i in range(task_count)]
    for i, shard in enumerate(out.shards):
        task = Task(id=i, name=f"{name}{i}", outputs=[shard])
        step.tasks.append(task)
        for ds in inputs:
            read = [ds.shards[i]] if len(ds.shards) == task_count else ds.shards
            for s in read:
                task.inputs.append(s)
                s.reading_tasks.append(task)
    return step, out


def test_linear_chain_fuses_into_one_group():
    flow = Flow()
    src, d0 = add_step(flow, "src", 3)
    m1, d1 = add_step(flow, "m1", 3, [d0])
    m2, _ = add_step(flow, "m2", 3, [d1])

    step_groups, task_groups = group_tasks(flow)

    assert len(step_groups) == 1
    assert step_groups[0].steps == [src, m1, m2]
    assert [tg.id for tg in task_groups] == [0, 1, 2]
    for i, tg in enumerate(task_groups):
        assert tg.tasks == [src.tasks[i], m1.tasks[i], m2.tasks[i]]
        assert tg.parent_step_group is step_groups[0]
    assert step_groups[0].task_groups == task_groups


def test_reduce_starts_new_group_with_parent():
    flow = Flow()
    src, d0 = add_step(flow, "src", 2)
    mp, d1 = add_step(flow, "map", 2, [d0])
    red, _ = add_step(flow, "reduce", 1, [d1])

    step_groups, task_groups = group_tasks(flow)

    assert len(step_groups) == 2
    assert step_groups[0].steps == [src, mp]
    assert step_groups[1].steps == [red]
    assert step_groups[1].parents == [step_groups[0]]
    assert len(task_groups) == 3
    assert task_groups[-1].tasks == [red.tasks[0]]
    assert task_groups[-1].parent_step_group is step_groups[1]


def test_dataset_read_by_two_steps_is_not_merged():
    flow = Flow()
    src, d0 = add_step(flow, "src", 2)
    a, _ = add_step(flow, "a", 2, [d0])
    b, _ = add_step(flow, "b", 2, [d0])

    step_groups, task_groups = group_tasks(flow)

    assert [sg.steps for sg in step_groups] == [[src], [a], [b]]
    assert step_groups[1].parents == [step_groups[0]]
    assert step_groups[2].parents == [step_groups[0]]
    assert len(task_groups) == 2 * len(step_groups)


def test_different_task_count_breaks_group():
    flow = Flow()
    src, d0 = add_step(flow, "src", 2)
    wide, _ = add_step(flow, "wide", 3, [d0])

    step_groups, task_groups = group_tasks(flow)

    assert [sg.steps for sg in step_groups] == [[src], [wide]]
    assert [len(tg.tasks) for tg in task_groups] == [1] * 5


def test_task_group_ids_are_sequential():
    flow = Flow()
    _, d0 = add_step(flow, "src", 4)
    add_step(flow, "red", 1, [d0])
    _, task_groups = group_tasks(flow)
    assert [tg.id for tg in task_groups] == list(range(len(task_groups)))


def test_missing_parent_group_raises():
    flow = Flow()
    a, d0 = add_step(flow, "a", 2)
    b, _ = add_step(flow, "b", 1, [d0])
    a.id, b.id = 1, 0
    flow.steps = [b, a]

    with pytest.raises(PlanError):
        group_tasks(flow)


def test_empty_flow():
    assert group_tasks(Flow()) == ([], [])


def test_add_methods_chain():
    tg = TaskGroup()
    parent = TaskGroup(id=7)
    assert tg.add_task("t1").add_task("t2").add_parent(parent) is tg
    assert tg.tasks == ["t1", "t2"]
    assert tg.parents == [parent]

    sg = StepGroup()
    other = StepGroup()
    assert sg.add_step("s").add_parent(other) is sg
    assert sg.steps == ["s"]
    assert sg.parents == [other]


def test_request_id_defaults_to_zero():
    flow = Flow()
    add_step(flow, "src", 1)
    _, task_groups = group_tasks(flow)
    assert [tg.request_id for tg in task_groups] == [0]