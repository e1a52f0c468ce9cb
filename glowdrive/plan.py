"""Group the steps and tasks of a flow so connected work runs together.

A flow object exposes ``steps``. Each step has ``id``, ``tasks`` and
``inputs`` (datasets). A dataset has ``step`` (its producer), ``shards`` and
``reading_steps``; a shard has ``reading_tasks``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


class PlanError(Exception):
    """Raised when the steps of a flow cannot be grouped."""


@dataclass(eq=False)
class TaskGroup:
    """Tasks that run together in one executor."""

    id: int = 0
    tasks: list = field(default_factory=list)
    parents: list = field(default_factory=list, repr=False)
    parent_step_group: Optional["StepGroup"] = field(default=None, repr=False)
    request_id: int = 0

    def add_task(self, task: Any) -> "TaskGroup":
        self.tasks.append(task)
        return self

    def add_parent(self, parent: "TaskGroup") -> "TaskGroup":
        self.parents.append(parent)
        return self


@dataclass(eq=False)
class StepGroup:
    """Steps whose tasks can be fused shard by shard."""

    steps: list = field(default_factory=list)
    parents: list = field(default_factory=list, repr=False)
    task_groups: list = field(default_factory=list, repr=False)

    def add_step(self, step: Any) -> "StepGroup":
        self.steps.append(step)
        return self

    def add_parent(self, parent: "StepGroup") -> "StepGroup":
        self.parents.append(parent)
        return self


def group_tasks(fc: Any) -> tuple[list[StepGroup], list[TaskGroup]]:
    """Return the step groups and task groups of a flow."""
    step_groups = _translate_to_step_groups(fc)
    return step_groups, _translate_to_task_groups(step_groups)


def _is_mergeable_dataset(ds: Any, task_count: int) -> bool:
    if task_count != len(ds.shards) or task_count != len(ds.step.tasks):
        return False
    if len(ds.reading_steps) > 1:
        return False
    return all(len(shard.reading_tasks) <= 1 for shard in ds.shards)


def _ancestor_step_id(step: Any) -> int:
    """Id of the furthest upstream step this step can be merged into."""
    current = step
    while len(current.inputs) == 1:
        if not _is_mergeable_dataset(current.inputs[0], len(current.tasks)):
            break
        current = current.inputs[0].step
    return current.id


def _translate_to_step_groups(fc: Any) -> list[StepGroup]:
    by_ancestor: dict[int, StepGroup] = {}
    for step in fc.steps:
        ancestor = _ancestor_step_id(step)
        group = by_ancestor.get(ancestor)
        if group is None:
            group = StepGroup()
            for ds in step.inputs:
                parent = by_ancestor.get(_ancestor_step_id(ds.step))
                if parent is None:
                    raise PlanError(
                        f"parent step group of step {step.id} should already exist"
                    )
                group.add_parent(parent)
            by_ancestor[ancestor] = group
        group.add_step(step)
    return [by_ancestor[key] for key in sorted(by_ancestor) if by_ancestor[key].steps]


def _translate_to_task_groups(step_groups: list[StepGroup]) -> list[TaskGroup]:
    task_groups: list[TaskGroup] = []
    for step_group in step_groups:
        _assert_same_number_of_tasks(step_group.steps)
        for tasks in zip(*(step.tasks for step in step_group.steps)):
            tg = TaskGroup(id=len(task_groups), tasks=list(tasks))
            tg.parent_step_group = step_group
            step_group.task_groups.append(tg)
            task_groups.append(tg)
    return task_groups


def _assert_same_number_of_tasks(steps: list) -> None:
    if not steps:
        return
    first = steps[0]
    for step in steps:
        if len(step.tasks) != len(first.tasks):
            raise PlanError(
                f"step {first.id} has {len(first.tasks)} tasks, "
                f"but step {step.id} has {len(step.tasks)} tasks"
            )