"""
Data models for CPM calculations.

Defines dataclasses for tasks, dependencies, projects and schedule results.
All schedule values are whole days counted from the project start.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

DateLike = Union[date, datetime]


class DependencyType(str, Enum):
    """Precedence relation between a predecessor and a successor."""

    FINISH_TO_START = 'finishToStart'
    START_TO_START = 'startToStart'
    FINISH_TO_FINISH = 'finishToFinish'
    START_TO_FINISH = 'startToFinish'


class ConstraintType(str, Enum):
    """Date constraint kinds understood by the scheduler."""

    AS_SOON_AS_POSSIBLE = 'asSoonAsPossible'
    AS_LATE_AS_POSSIBLE = 'asLateAsPossible'
    MUST_START_ON = 'mustStartOn'
    MUST_FINISH_ON = 'mustFinishOn'
    START_NO_EARLIER_THAN = 'startNoEarlierThan'
    START_NO_LATER_THAN = 'startNoLaterThan'
    FINISH_NO_EARLIER_THAN = 'finishNoEarlierThan'
    FINISH_NO_LATER_THAN = 'finishNoLaterThan'


@dataclass
class Dependency:
    """Represents a predecessor-successor relationship."""

    dependency_id: str
    from_task_id: str
    to_task_id: str
    dep_type: DependencyType = DependencyType.FINISH_TO_START
    lag_days: int = 0              # negative = lead

    def __post_init__(self):
        self.dep_type = DependencyType(self.dep_type)

    def is_finish_to_start(self) -> bool:
        return self.dep_type is DependencyType.FINISH_TO_START

    def is_start_to_start(self) -> bool:
        return self.dep_type is DependencyType.START_TO_START

    def is_finish_to_finish(self) -> bool:
        return self.dep_type is DependencyType.FINISH_TO_FINISH

    def is_start_to_finish(self) -> bool:
        return self.dep_type is DependencyType.START_TO_FINISH


@dataclass
class Task:
    """Represents a schedule task/activity."""

    task_id: str
    duration: int                  # work days, >= 0
    name: str = ''
    dependencies: list[str] = field(default_factory=list)   # inline predecessor ids
    wbs_code: str = ''

    # Constraints (optional)
    constraint_type: Optional[ConstraintType] = None
    constraint_date: Optional[DateLike] = None
    milestone: bool = False

    # Schedule results (written by the schedule applier)
    start_date: Optional[DateLike] = None
    end_date: Optional[DateLike] = None
    early_start: Optional[int] = None
    early_finish: Optional[int] = None
    late_start: Optional[int] = None
    late_finish: Optional[int] = None
    total_float: Optional[int] = None
    free_float: Optional[int] = None
    is_critical: bool = False
    predecessors: list[str] = field(default_factory=list)
    successors: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.constraint_type is not None:
            self.constraint_type = ConstraintType(self.constraint_type)

    @property
    def display_name(self) -> str:
        """Name for messages, falling back to the id."""
        return self.name or self.task_id

    def is_milestone(self) -> bool:
        """Check if task is a milestone (flagged or zero duration)."""
        return self.milestone or self.duration == 0

    def has_dated_constraint(self) -> bool:
        """Check if the task carries a constraint that clamps its dates."""
        return (
            self.constraint_type is not None
            and self.constraint_date is not None
            and self.constraint_type not in (
                ConstraintType.AS_SOON_AS_POSSIBLE,
                ConstraintType.AS_LATE_AS_POSSIBLE,
            )
        )


@dataclass
class Project:
    """A project: calendar anchor, ordered tasks and explicit relations."""

    project_id: str
    start_date: DateLike
    tasks: list[Task] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    name: str = ''

    # Derived by the schedule applier
    duration: int = 0
    critical_path: list[str] = field(default_factory=list)

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task by ID."""
        for task in self.tasks:
            if task.task_id == task_id:
                return task
        return None


@dataclass(frozen=True)
class ScheduleRecord:
    """Computed CPM values for one task."""

    task_id: str
    early_start: int
    early_finish: int
    late_start: int
    late_finish: int
    total_float: int
    free_float: int
    is_critical: bool


@dataclass(frozen=True)
class NetworkResult:
    """
    Results from a CPM calculation.

    Read-only: schedule_data is a mapping proxy, critical_path and errors
    are tuples.
    """

    schedule_data: Mapping[str, ScheduleRecord]
    critical_path: tuple[str, ...]  # critical task_ids by early start
    project_duration: int
    is_valid: bool
    errors: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, 'schedule_data', MappingProxyType(dict(self.schedule_data)))
        object.__setattr__(self, 'critical_path', tuple(self.critical_path))
        object.__setattr__(self, 'errors', tuple(self.errors))

    @classmethod
    def invalid(cls, errors: list[str]) -> 'NetworkResult':
        """Result for a project whose graph failed validation."""
        return cls(
            schedule_data={},
            critical_path=(),
            project_duration=0,
            is_valid=False,
            errors=errors,
        )

    def get_record(self, task_id: str) -> Optional[ScheduleRecord]:
        return self.schedule_data.get(task_id)

    def get_critical_tasks(self) -> list[ScheduleRecord]:
        """Get schedule records on the critical path."""
        return [self.schedule_data[tid] for tid in self.critical_path if tid in self.schedule_data]

    def get_tasks_by_float(self, max_float: int = None) -> list[ScheduleRecord]:
        """Get schedule records sorted by total float (ascending)."""
        records = list(self.schedule_data.values())
        if max_float is not None:
            records = [r for r in records if r.total_float <= max_float]
        return sorted(records, key=lambda r: r.total_float)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of dependency validation."""

    is_valid: bool
    errors: list[str]


@dataclass
class CriticalPathValidation:
    """Results from checking a calculated schedule for consistency."""

    is_valid: bool
    errors: list[str]
    warnings: list[str]
    project_duration: int = 0
    critical_path_length: int = 0
    tasks_with_float: int = 0
    tasks_on_critical_path: int = 0

    def get_details(self) -> dict:
        return {
            'project_duration': self.project_duration,
            'critical_path_length': self.critical_path_length,
            'tasks_with_float': self.tasks_with_float,
            'tasks_on_critical_path': self.tasks_on_critical_path,
        }


@dataclass
class CriticalPathResult:
    """Results from critical path analysis."""

    critical_path: list[Task]
    near_critical_tasks: list[Task]
    float_distribution: dict[str, int]  # float_bucket -> count
    project_duration: int
    near_critical_threshold_days: int
    total_tasks: int

    def get_critical_path_length(self) -> int:
        """Number of tasks on critical path."""
        return len(self.critical_path)

    def get_risk_summary(self) -> str:
        """Get summary of schedule risk."""
        critical = len(self.critical_path)
        near_critical = len(self.near_critical_tasks)
        return (f"{critical} critical tasks, {near_critical} near-critical "
                f"(<= {self.near_critical_threshold_days} days float)")
