"""
Dependency validation.

Checks task ids and durations, task references, self-dependencies and
cycles before any pass runs.
"""

import logging
from typing import Optional

from .models import Project, Task, ValidationResult
from .network import TaskNetwork

logger = logging.getLogger(__name__)


def validate_dependencies(project: Project, network: TaskNetwork = None) -> ValidationResult:
    """
    Validate the dependency graph of a project.

    Args:
        project: Project to validate
        network: Prebuilt network for the same project (built if None)

    Returns:
        ValidationResult with every reference error and at most one cycle error
    """
    if network is None:
        network = TaskNetwork.from_project(project)

    errors = []
    errors.extend(_check_duplicate_ids(project))
    errors.extend(_check_durations(project))
    errors.extend(_check_inline_references(project, network))
    errors.extend(_check_dependency_records(project, network))

    cyclic_task = find_cycle(project, network)
    if cyclic_task is not None:
        errors.append(f'Circular dependency detected involving task "{cyclic_task.display_name}"')

    if errors:
        logger.debug("Project %s failed validation with %d errors", project.project_id, len(errors))

    return ValidationResult(is_valid=not errors, errors=errors)


def _check_duplicate_ids(project: Project) -> list[str]:
    seen = set()
    reported = set()
    errors = []
    for task in project.tasks:
        if task.task_id in seen and task.task_id not in reported:
            errors.append(f'Duplicate task id "{task.task_id}"')
            reported.add(task.task_id)
        seen.add(task.task_id)
    return errors


def _check_durations(project: Project) -> list[str]:
    return [
        f'Task "{task.display_name}" has negative duration {task.duration}'
        for task in project.tasks
        if task.duration < 0
    ]


def _check_inline_references(project: Project, network: TaskNetwork) -> list[str]:
    errors = []
    for task in project.tasks:
        for dep_id in task.dependencies:
            if dep_id not in network:
                errors.append(f'Task "{task.display_name}" references invalid dependency "{dep_id}"')
            elif dep_id == task.task_id:
                errors.append(f'Task "{task.task_id}" cannot depend on itself')
    return errors


def _check_dependency_records(project: Project, network: TaskNetwork) -> list[str]:
    errors = []
    for dep in project.dependencies:
        if dep.from_task_id not in network:
            errors.append(f'Dependency references invalid from-task "{dep.from_task_id}"')
        if dep.to_task_id not in network:
            errors.append(f'Dependency references invalid to-task "{dep.to_task_id}"')
        if dep.from_task_id == dep.to_task_id:
            errors.append(f'Task "{dep.from_task_id}" cannot depend on itself')
    return errors


def find_cycle(project: Project, network: TaskNetwork = None) -> Optional[Task]:
    """
    Depth-first search over the predecessor relation.

    Returns the task whose traversal first revisits a task still on the
    stack, or None when the graph is acyclic. Only the first cycle is reported.
    """
    if network is None:
        network = TaskNetwork.from_project(project)

    visited = set()
    on_stack = set()

    for task in project.tasks:
        if task.task_id in visited:
            continue

        visited.add(task.task_id)
        on_stack.add(task.task_id)
        stack = [(task.task_id, iter(network.get_predecessors(task.task_id)))]

        while stack:
            node, predecessors = stack[-1]
            for pred_id in predecessors:
                if pred_id not in visited:
                    visited.add(pred_id)
                    on_stack.add(pred_id)
                    stack.append((pred_id, iter(network.get_predecessors(pred_id))))
                    break
                if pred_id in on_stack:
                    return task
            else:
                stack.pop()
                on_stack.discard(node)

    return None
