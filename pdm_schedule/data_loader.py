"""
Data Loader for project schedules.

Loads projects from the planning application's JSON documents or from
task/dependency CSV files, and exports calculated schedules to CSV.
"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd
from pydantic import ValidationError

from src.config.settings import settings
from schemas.project import DependencySchema, ProjectSchema, TaskSchema
from schemas.schedule import ScheduleExportRow
from schemas.validator import validated_df_to_csv

from .analysis.schedule_applier import apply_schedule
from .cpm.models import DateLike, Dependency, NetworkResult, Project, Task

logger = logging.getLogger(__name__)

_ID_SEPARATOR = re.compile(r'[;,]')


class ProjectLoadError(Exception):
    """Raised when a project document or CSV cannot be loaded."""


def load_project(path: Path) -> Project:
    """
    Load a project from a JSON document.

    Args:
        path: Path to the project JSON (camelCase keys)

    Returns:
        Project ready for scheduling
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as e:
        raise ProjectLoadError(f"Cannot read project file {path}: {e}") from e

    try:
        schema = ProjectSchema.model_validate_json(text)
    except ValidationError as e:
        raise ProjectLoadError(f"Invalid project document {path}: {e}") from e

    project = schema.to_model()
    logger.info(f"Loaded project {project.project_id}: {len(project.tasks)} tasks, "
                f"{len(project.dependencies)} dependencies")
    return project


def _read_csv(csv_path: Path, required: set[str]) -> pd.DataFrame:
    csv_path = Path(csv_path)
    try:
        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ProjectLoadError(f"Cannot read {csv_path}: {e}") from e

    missing = required - set(df.columns)
    if missing:
        raise ProjectLoadError(f"{csv_path.name} is missing columns: {sorted(missing)}")
    return df


def _cell(row: pd.Series, column: str) -> Optional[str]:
    value = row.get(column, '')
    value = value.strip() if isinstance(value, str) else value
    return value or None


def load_tasks(csv_path: Path) -> list[Task]:
    """
    Load tasks from a CSV file.

    Required columns: task_id, duration. Optional: name, dependencies
    (ids separated by ';' or ','), wbs_code, constraint_type,
    constraint_date, is_milestone.
    """
    df = _read_csv(csv_path, {'task_id', 'duration'})

    tasks = []
    for idx, row in df.iterrows():
        dependencies = _cell(row, 'dependencies') or ''
        try:
            schema = TaskSchema(
                id=_cell(row, 'task_id'),
                name=_cell(row, 'name') or '',
                duration=_cell(row, 'duration'),
                dependencies=[d.strip() for d in _ID_SEPARATOR.split(dependencies) if d.strip()],
                wbs_code=_cell(row, 'wbs_code') or '',
                constraint_type=_cell(row, 'constraint_type'),
                constraint_date=_cell(row, 'constraint_date'),
                is_milestone=(_cell(row, 'is_milestone') or '').lower() in ('1', 'true', 'yes', 'y'),
            )
        except ValidationError as e:
            raise ProjectLoadError(f"Invalid task on row {idx + 2} of {Path(csv_path).name}: {e}") from e
        tasks.append(schema.to_model())

    return tasks


def load_dependencies(csv_path: Path) -> list[Dependency]:
    """
    Load explicit dependency records from a CSV file.

    Required columns: from_task_id, to_task_id. Optional: dependency_id,
    type (finishToStart, startToStart, finishToFinish, startToFinish), lag_days.
    """
    df = _read_csv(csv_path, {'from_task_id', 'to_task_id'})

    dependencies = []
    for idx, row in df.iterrows():
        from_id = _cell(row, 'from_task_id')
        to_id = _cell(row, 'to_task_id')
        try:
            schema = DependencySchema(
                id=_cell(row, 'dependency_id') or f'dep-{from_id}-{to_id}',
                from_task_id=from_id,
                to_task_id=to_id,
                type=_cell(row, 'type') or 'finishToStart',
                lag_days=_cell(row, 'lag_days') or 0,
            )
        except ValidationError as e:
            raise ProjectLoadError(f"Invalid dependency on row {idx + 2} of {Path(csv_path).name}: {e}") from e
        dependencies.append(schema.to_model())

    return dependencies


def load_project_from_csv(
    tasks_csv: Path,
    start_date: DateLike,
    dependencies_csv: Path = None,
    project_id: str = 'project',
    name: str = '',
) -> Project:
    """
    Build a project from task and dependency CSV files.

    Args:
        tasks_csv: Task CSV (see load_tasks)
        start_date: Project start date
        dependencies_csv: Optional explicit dependency CSV (see load_dependencies)
        project_id: Identifier for the assembled project
        name: Project name

    Returns:
        Project ready for scheduling
    """
    tasks = load_tasks(tasks_csv)
    dependencies = load_dependencies(dependencies_csv) if dependencies_csv else []

    logger.info(f"Loaded {len(tasks)} tasks and {len(dependencies)} dependencies from CSV")

    return Project(
        project_id=project_id,
        name=name,
        start_date=start_date,
        tasks=tasks,
        dependencies=dependencies,
    )


def _iso_day(value: DateLike) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def schedule_to_dataframe(project: Project, result: NetworkResult) -> pd.DataFrame:
    """
    Tabulate a calculated schedule, one row per task in project order.

    Columns follow schemas.schedule.ScheduleExportRow.
    """
    scheduled = apply_schedule(project, result)

    rows = []
    for task in scheduled.tasks:
        rows.append({
            'task_id': task.task_id,
            'task_name': task.name or None,
            'duration': task.duration,
            'early_start': task.early_start,
            'early_finish': task.early_finish,
            'late_start': task.late_start,
            'late_finish': task.late_finish,
            'total_float': task.total_float,
            'free_float': task.free_float,
            'is_critical': task.is_critical,
            'start_date': _iso_day(task.start_date),
            'end_date': _iso_day(task.end_date),
            'predecessors': ','.join(task.predecessors) or None,
        })

    return pd.DataFrame(rows, columns=list(ScheduleExportRow.model_fields))


def export_schedule(
    project: Project,
    result: NetworkResult,
    output_path: Path = None,
) -> Path:
    """
    Write a calculated schedule to CSV after validating its columns.

    Args:
        project: Scheduled project
        result: Valid calculation result for the project
        output_path: Target file (default: OUTPUT_DATA_DIR/<project_id>_schedule.csv)

    Returns:
        Path of the written file
    """
    if output_path is None:
        output_path = settings.OUTPUT_DATA_DIR / f'{project.project_id}_schedule.csv'

    df = schedule_to_dataframe(project, result)
    path = validated_df_to_csv(df, output_path, ScheduleExportRow, index=False)
    logger.info(f"Saved schedule for {len(df)} tasks to {path}")
    return path


def parse_start_date(value: str) -> date:
    """Parse a YYYY-MM-DD project start date."""
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError as e:
        raise ProjectLoadError(f"Invalid start date {value!r}, expected YYYY-MM-DD") from e
