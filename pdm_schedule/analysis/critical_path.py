"""
Critical Path Analysis.

Checks calculated schedules for internal consistency, identifies critical
and near-critical tasks and summarizes the float distribution.
"""

from collections import defaultdict

from src.config.settings import settings

from ..cpm.engine import calculate_critical_path, constraint_offset
from ..cpm.models import (
    CriticalPathResult,
    CriticalPathValidation,
    NetworkResult,
    Project,
)
from ..cpm.network import TaskNetwork
from .schedule_applier import apply_schedule


def validate_critical_path(project: Project) -> CriticalPathValidation:
    """
    Calculate a project's schedule and check it for consistency.

    Structural failures (bad references, cycles) are returned as errors
    with an empty schedule summary.
    """
    result = calculate_critical_path(project)

    if not result.is_valid:
        return CriticalPathValidation(
            is_valid=False,
            errors=list(result.errors),
            warnings=[],
        )

    return check_schedule(project, result)


def check_schedule(project: Project, result: NetworkResult) -> CriticalPathValidation:
    """
    Check a calculated schedule against the CPM invariants.

    Errors are arithmetic or flag inconsistencies; warnings are conditions
    a planner should look at but that do not invalidate the schedule.
    """
    errors = []
    warnings = []
    tasks_with_float = 0
    tasks_on_critical_path = 0

    for task in project.tasks:
        name = task.display_name
        schedule = result.get_record(task.task_id)
        if schedule is None:
            errors.append(f'Task "{name}" missing schedule data')
            continue

        es, ef = schedule.early_start, schedule.early_finish
        ls, lf = schedule.late_start, schedule.late_finish

        if es > ef:
            errors.append(f'Task "{name}": ES({es}) > EF({ef})')
        if ls > lf:
            errors.append(f'Task "{name}": LS({ls}) > LF({lf})')
        if ef != es + task.duration:
            errors.append(f'Task "{name}": EF({ef}) != ES({es}) + Duration({task.duration})')
        if lf != ls + task.duration:
            errors.append(f'Task "{name}": LF({lf}) != LS({ls}) + Duration({task.duration})')
        if schedule.total_float != ls - es or schedule.total_float != lf - ef:
            errors.append(f'Task "{name}": Total Float calculation incorrect')

        if schedule.is_critical and schedule.total_float != 0:
            errors.append(f'Task "{name}": Marked as critical but has float {schedule.total_float}')
        if not schedule.is_critical and schedule.total_float == 0:
            warnings.append(f'Task "{name}": Not marked as critical but has zero float')

        if schedule.total_float < 0:
            warnings.append(f'Task "{name}": Negative total float {schedule.total_float} (constraint conflict)')

        if task.has_dated_constraint() and constraint_offset(project.start_date, task.constraint_date) < 0:
            warnings.append(f'Task "{name}": Constraint date {task.constraint_date} is before the project start')

        if schedule.total_float > 0:
            tasks_with_float += 1
        if schedule.is_critical:
            tasks_on_critical_path += 1

    warnings.extend(_check_critical_sequence(project, result))

    return CriticalPathValidation(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        project_duration=result.project_duration,
        critical_path_length=len(result.critical_path),
        tasks_with_float=tasks_with_float,
        tasks_on_critical_path=tasks_on_critical_path,
    )


def _check_critical_sequence(project: Project, result: NetworkResult) -> list[str]:
    """Look for gaps between neighbouring entries of the critical path."""
    network = TaskNetwork.from_project(project)
    warnings = []

    for current_id, next_id in zip(result.critical_path, result.critical_path[1:]):
        current = network.get_task(current_id)
        following = network.get_task(next_id)
        current_record = result.get_record(current_id)
        next_record = result.get_record(next_id)
        # Missing tasks and records are reported by check_schedule
        if current is None or following is None or current_record is None or next_record is None:
            continue

        dep = network.get_dependency(current_id, next_id)
        if dep is None:
            warnings.append(
                f'Critical path may have gaps: {current.display_name} -> {following.display_name}'
            )
            continue

        if dep.is_finish_to_start() and dep.lag_days == 0:
            current_ef = current_record.early_finish
            next_es = next_record.early_start
            if current_ef != next_es:
                warnings.append(
                    f'Critical path timing mismatch: {current.display_name}.EF({current_ef}) '
                    f'!= {following.display_name}.ES({next_es})'
                )

    return warnings


def analyze_critical_path(
    project: Project,
    near_critical_threshold_days: int = None,
    result: NetworkResult = None,
) -> CriticalPathResult:
    """
    Analyze critical path and near-critical tasks.

    Args:
        project: Project to analyze
        near_critical_threshold_days: Float threshold for near-critical
            classification (defaults to settings)
        result: Precomputed calculation for this project (calculated if None)

    Returns:
        CriticalPathResult with critical path, near-critical tasks, and statistics
    """
    if near_critical_threshold_days is None:
        near_critical_threshold_days = settings.NEAR_CRITICAL_THRESHOLD_DAYS

    if result is None:
        result = calculate_critical_path(project)
    if not result.is_valid:
        raise ValueError("Cannot analyze an invalid schedule: " + "; ".join(result.errors))

    scheduled = apply_schedule(project, result)
    tasks_by_id = {task.task_id: task for task in scheduled.tasks}

    near_critical = []
    float_buckets = defaultdict(int)

    for task in scheduled.tasks:
        total_float = task.total_float

        # Categorize by float amount
        if total_float < 0:
            float_buckets['<0 (negative)'] += 1
        elif total_float == 0:
            float_buckets['0 (critical)'] += 1
        elif total_float <= 5:
            float_buckets['1-5 days'] += 1
        elif total_float <= 10:
            float_buckets['6-10 days'] += 1
        elif total_float <= 20:
            float_buckets['11-20 days'] += 1
        else:
            float_buckets['>20 days'] += 1

        if 0 < total_float <= near_critical_threshold_days:
            near_critical.append(task)

    near_critical.sort(key=lambda t: t.total_float)

    return CriticalPathResult(
        critical_path=[tasks_by_id[tid] for tid in result.critical_path],
        near_critical_tasks=near_critical,
        float_distribution=dict(float_buckets),
        project_duration=result.project_duration,
        near_critical_threshold_days=near_critical_threshold_days,
        total_tasks=len(scheduled.tasks),
    )


def print_critical_path_report(result: CriticalPathResult) -> None:
    """Print a formatted critical path report."""
    print("=" * 80)
    print("CRITICAL PATH ANALYSIS REPORT")
    print("=" * 80)

    print(f"\nProject Duration: {result.project_duration} days")
    print(f"Total Tasks: {result.total_tasks}")
    print(f"Critical Tasks: {len(result.critical_path)}")
    print(f"Near-Critical Tasks (<= {result.near_critical_threshold_days} days float): "
          f"{len(result.near_critical_tasks)}")

    print("\n--- Float Distribution ---")
    for bucket, count in sorted(result.float_distribution.items()):
        pct = count / result.total_tasks * 100 if result.total_tasks else 0
        bar = '#' * int(pct / 2)
        print(f"  {bucket:25s}: {count:5d} ({pct:5.1f}%) {bar}")

    print("\n--- Critical Path (first 20 tasks) ---")
    for i, task in enumerate(result.critical_path[:20]):
        print(f"  {i+1:3d}. {task.task_id:20s} | {task.display_name[:40]:40s} | "
              f"ES {task.early_start:4d} | {task.duration}d")

    if len(result.critical_path) > 20:
        print(f"  ... and {len(result.critical_path) - 20} more critical tasks")

    print("\n--- Near-Critical Tasks (first 10) ---")
    for i, task in enumerate(result.near_critical_tasks[:10]):
        print(f"  {i+1:3d}. {task.task_id:20s} | Float: {task.total_float:4d}d | "
              f"{task.display_name[:35]:35s}")

    print("\n" + "=" * 80)
