"""
CPM (Critical Path Method) Engine.

Implements the Precedence Diagramming Method: forward pass (early dates),
backward pass (late dates), total/free float and critical task selection.
All values are whole days counted from the project start.
"""

import logging
import math
from datetime import datetime, time

from .models import (
    ConstraintType,
    DateLike,
    Dependency,
    NetworkResult,
    Project,
    ScheduleRecord,
    Task,
)
from .network import TaskNetwork
from .validator import validate_dependencies

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

NO_START_TASKS_ERROR = (
    "No start tasks found. Project must have at least one task with no dependencies."
)


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def constraint_offset(project_start: DateLike, constraint_date: DateLike) -> int:
    """Whole days from project start to a constraint date, rounded up."""
    start = _as_datetime(project_start)
    target = _as_datetime(constraint_date)
    if (start.tzinfo is None) != (target.tzinfo is None):
        start = start.replace(tzinfo=None)
        target = target.replace(tzinfo=None)
    return math.ceil((target - start).total_seconds() / SECONDS_PER_DAY)


class CPMEngine:
    """
    CPM calculation engine.

    Performs forward pass (early dates), backward pass (late dates),
    float calculation, and critical path identification. An engine is
    scoped to one calculation over one network snapshot.
    """

    def __init__(self, network: TaskNetwork, project_start: DateLike):
        """
        Initialize CPM engine.

        Args:
            network: Validated, acyclic task network
            project_start: Calendar anchor used to resolve constraint dates
        """
        self.network = network
        self.project_start = project_start

        self.early_start: dict[str, int] = {}
        self.early_finish: dict[str, int] = {}
        self.late_start: dict[str, int] = {}
        self.late_finish: dict[str, int] = {}
        self.total_float: dict[str, int] = {}
        self.free_float: dict[str, int] = {}
        self.project_duration = 0

    def _dependency(self, pred_id: str, succ_id: str) -> Dependency:
        dep = self.network.get_dependency(pred_id, succ_id)
        if dep is None:
            raise ValueError(f"No relation between {pred_id} and {succ_id}")
        return dep

    def forward_pass(self) -> None:
        """
        Calculate early start and early finish for all tasks.

        Processes tasks in topological order. ES is the largest value driven
        by any predecessor (never below zero), then clamped by the task's
        date constraint. EF = ES + duration.
        """
        for task_id in self.network.topological_sort():
            task = self.network.tasks[task_id]

            early_start = 0
            for pred_id in self.network.get_predecessors(task_id):
                dep = self._dependency(pred_id, task_id)
                early_start = max(early_start, self._get_driven_early_start(pred_id, dep, task))

            early_start = self._apply_early_constraint(task, early_start)

            self.early_start[task_id] = early_start
            self.early_finish[task_id] = early_start + task.duration

        self.project_duration = max(self.early_finish.values(), default=0)

    def _get_driven_early_start(self, pred_id: str, dep: Dependency, succ: Task) -> int:
        """
        Calculate the early start driven by a predecessor relationship.

        Handles FS, SS, FF, SF relationship types with lag.
        """
        lag = dep.lag_days
        pred_es = self.early_start[pred_id]
        pred_ef = self.early_finish[pred_id]

        if dep.is_finish_to_start():
            # FS: successor starts after predecessor finishes + lag
            return pred_ef + lag

        elif dep.is_start_to_start():
            # SS: successor starts after predecessor starts + lag
            return pred_es + lag

        elif dep.is_finish_to_finish():
            # FF: successor finishes after predecessor finishes + lag
            return max(0, pred_ef + lag - succ.duration)

        elif dep.is_start_to_finish():
            # SF: successor finishes after predecessor starts + lag
            return max(0, pred_es + lag - succ.duration)

        raise ValueError(f"Unsupported dependency type: {dep.dep_type!r}")

    def _apply_early_constraint(self, task: Task, early_start: int) -> int:
        if not task.has_dated_constraint():
            return early_start

        offset = constraint_offset(self.project_start, task.constraint_date)
        kind = task.constraint_type

        if kind in (ConstraintType.MUST_START_ON, ConstraintType.START_NO_EARLIER_THAN):
            return max(early_start, offset)
        if kind is ConstraintType.START_NO_LATER_THAN:
            return min(early_start, offset)
        if kind in (ConstraintType.MUST_FINISH_ON, ConstraintType.FINISH_NO_EARLIER_THAN):
            return max(early_start, offset - task.duration)
        if kind is ConstraintType.FINISH_NO_LATER_THAN:
            return min(early_start, offset - task.duration)
        return early_start

    def backward_pass(self) -> None:
        """
        Calculate late start and late finish for all tasks.

        Processes tasks in reverse topological order. Tasks without
        successors finish at the project duration; others take the tightest
        value driven by any successor, capped at the project duration.
        """
        project_end = self.project_duration

        for task_id in self.network.reverse_topological_sort():
            task = self.network.tasks[task_id]

            late_finish = project_end
            for succ_id in self.network.get_successors(task_id):
                dep = self._dependency(task_id, succ_id)
                late_finish = min(late_finish, self._get_driven_late_finish(succ_id, dep, task))

            late_finish = self._apply_late_constraint(task, late_finish)

            self.late_finish[task_id] = late_finish
            self.late_start[task_id] = late_finish - task.duration

    def _get_driven_late_finish(self, succ_id: str, dep: Dependency, pred: Task) -> int:
        """
        Calculate the late finish driven by a successor relationship.

        This is the reverse of _get_driven_early_start.
        """
        lag = dep.lag_days
        succ_ls = self.late_start[succ_id]
        succ_lf = self.late_finish[succ_id]

        if dep.is_finish_to_start():
            # FS: pred finishes before successor starts - lag
            return succ_ls - lag

        elif dep.is_start_to_start():
            # SS: pred starts before successor starts - lag
            return (succ_ls - lag) + pred.duration

        elif dep.is_finish_to_finish():
            # FF: pred finishes before successor finishes - lag
            return succ_lf - lag

        elif dep.is_start_to_finish():
            # SF: pred starts before successor finishes - lag
            return (succ_lf - lag) + pred.duration

        raise ValueError(f"Unsupported dependency type: {dep.dep_type!r}")

    def _apply_late_constraint(self, task: Task, late_finish: int) -> int:
        if not task.has_dated_constraint():
            return late_finish

        offset = constraint_offset(self.project_start, task.constraint_date)
        kind = task.constraint_type

        if kind in (ConstraintType.MUST_START_ON, ConstraintType.START_NO_LATER_THAN):
            return min(late_finish, offset + task.duration)
        if kind is ConstraintType.START_NO_EARLIER_THAN:
            return max(late_finish, offset + task.duration)
        if kind in (ConstraintType.MUST_FINISH_ON, ConstraintType.FINISH_NO_LATER_THAN):
            return min(late_finish, offset)
        if kind is ConstraintType.FINISH_NO_EARLIER_THAN:
            return max(late_finish, offset)
        return late_finish

    def calculate_float(self) -> None:
        """
        Calculate total float and free float for all tasks.

        Total Float = LS - ES (= LF - EF)
        Free Float = smallest successor slack for the relation type, floored at 0;
                     equals total float for tasks without successors
        """
        for task_id in self.network.tasks:
            es = self.early_start[task_id]
            ef = self.early_finish[task_id]
            total_float = self.late_start[task_id] - es
            self.total_float[task_id] = total_float

            successors = self.network.get_successors(task_id)
            if not successors:
                self.free_float[task_id] = total_float
                continue

            slack = []
            for succ_id in successors:
                dep = self._dependency(task_id, succ_id)
                lag = dep.lag_days
                succ_es = self.early_start[succ_id]
                succ_ef = self.early_finish[succ_id]

                if dep.is_finish_to_start():
                    slack.append(succ_es - ef - lag)
                elif dep.is_start_to_start():
                    slack.append(succ_es - es - lag)
                elif dep.is_finish_to_finish():
                    slack.append(succ_ef - ef - lag)
                elif dep.is_start_to_finish():
                    slack.append(succ_ef - es - lag)
                else:
                    raise ValueError(f"Unsupported dependency type: {dep.dep_type!r}")

            self.free_float[task_id] = max(0, min(slack))

    def get_critical_path(self) -> list[str]:
        """
        Return critical task IDs ordered by early start.

        Critical tasks are those with zero total float; ties keep project order.
        """
        critical = [tid for tid in self.network.tasks if self.total_float[tid] == 0]
        return sorted(critical, key=lambda tid: self.early_start[tid])

    def run(self) -> NetworkResult:
        """
        Execute full CPM calculation.

        Returns:
            NetworkResult with all calculated values
        """
        self.forward_pass()
        self.backward_pass()
        self.calculate_float()

        schedule_data = {
            tid: ScheduleRecord(
                task_id=tid,
                early_start=self.early_start[tid],
                early_finish=self.early_finish[tid],
                late_start=self.late_start[tid],
                late_finish=self.late_finish[tid],
                total_float=self.total_float[tid],
                free_float=self.free_float[tid],
                is_critical=self.total_float[tid] == 0,
            )
            for tid in self.network.tasks
        }
        critical_path = self.get_critical_path()

        logger.debug(
            "Calculated network: %d tasks, duration %d days, critical path %s",
            len(schedule_data), self.project_duration, critical_path,
        )

        return NetworkResult(
            schedule_data=schedule_data,
            critical_path=critical_path,
            project_duration=self.project_duration,
            is_valid=True,
            errors=[],
        )


def calculate_critical_path(project: Project) -> NetworkResult:
    """
    Validate a project and compute its full CPM schedule.

    Args:
        project: Project snapshot; it is not modified

    Returns:
        NetworkResult; is_valid is False with errors and an empty schedule
        when the dependency graph is invalid or has no start task
    """
    network = TaskNetwork.from_project(project)

    validation = validate_dependencies(project, network)
    if not validation.is_valid:
        logger.info("Project %s has invalid dependencies: %s", project.project_id, validation.errors)
        return NetworkResult.invalid(validation.errors)

    if not network.get_start_tasks():
        logger.info("Project %s has no start tasks", project.project_id)
        return NetworkResult.invalid([NO_START_TASKS_ERROR])

    return CPMEngine(network, project.start_date).run()
