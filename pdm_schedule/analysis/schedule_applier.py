"""
Schedule Applier.

Projects computed day offsets onto calendar dates and returns an updated
copy of the project.
"""

import logging
from dataclasses import replace
from datetime import timedelta

from ..cpm.engine import calculate_critical_path
from ..cpm.models import DateLike, NetworkResult, Project
from ..cpm.network import TaskNetwork

logger = logging.getLogger(__name__)


def apply_schedule(
    project: Project,
    result: NetworkResult,
    project_start: DateLike = None,
) -> Project:
    """
    Copy schedule values from a calculation onto a new project snapshot.

    Args:
        project: Source project (not modified)
        result: Valid result calculated for this project
        project_start: Calendar anchor (defaults to the project's start date)

    Returns:
        New Project with task dates, float and critical flags populated
    """
    if not result.is_valid:
        raise ValueError("Cannot apply an invalid schedule: " + "; ".join(result.errors))

    if project_start is None:
        project_start = project.start_date

    network = TaskNetwork.from_project(project)

    updated_tasks = []
    for task in project.tasks:
        record = result.get_record(task.task_id)
        if record is None:
            updated_tasks.append(replace(
                task,
                dependencies=list(task.dependencies),
                predecessors=list(task.predecessors),
                successors=list(task.successors),
            ))
            continue

        updated_tasks.append(replace(
            task,
            dependencies=list(task.dependencies),
            start_date=project_start + timedelta(days=record.early_start),
            end_date=project_start + timedelta(days=record.early_finish),
            early_start=record.early_start,
            early_finish=record.early_finish,
            late_start=record.late_start,
            late_finish=record.late_finish,
            total_float=record.total_float,
            free_float=record.free_float,
            is_critical=record.is_critical,
            predecessors=network.get_predecessors(task.task_id),
            successors=network.get_successors(task.task_id),
        ))

    return replace(
        project,
        tasks=updated_tasks,
        dependencies=list(project.dependencies),
        duration=result.project_duration,
        critical_path=list(result.critical_path),
    )


def update_task_dates(project: Project) -> Project:
    """
    Run the full calculation and apply it to the project.

    Returns the input project unchanged when validation fails.
    """
    result = calculate_critical_path(project)

    if not result.is_valid:
        logger.warning("Cannot update task dates due to validation errors: %s", result.errors)
        return project

    return apply_schedule(project, result)
