"""Unit tests for schedule consistency checks and critical path analysis."""
from dataclasses import replace
from datetime import timedelta

import pytest

from pdm_schedule.analysis.critical_path import (
    analyze_critical_path,
    check_schedule,
    print_critical_path_report,
    validate_critical_path,
)
from pdm_schedule.cpm.engine import calculate_critical_path
from pdm_schedule.cpm.models import ConstraintType, Task


def _tamper(result, task_id, **changes):
    schedule_data = dict(result.schedule_data)
    schedule_data[task_id] = replace(schedule_data[task_id], **changes)
    return replace(result, schedule_data=schedule_data)


class TestValidateCriticalPath:
    """Consistency checks on calculated schedules."""

    def test_consistent_schedule(self, software_project):
        validation = validate_critical_path(software_project)

        assert validation.is_valid
        assert validation.errors == []
        assert validation.warnings == []
        assert validation.get_details() == {
            'project_duration': 33,
            'critical_path_length': 6,
            'tasks_with_float': 3,
            'tasks_on_critical_path': 6,
        }

    def test_structural_errors_are_passed_through(self, cyclic_project):
        validation = validate_critical_path(cyclic_project)

        assert not validation.is_valid
        assert validation.errors == ['Circular dependency detected involving task "Task A"']
        assert validation.project_duration == 0

    def test_negative_float_warning(self, project_factory, fs_chain_project):
        start = fs_chain_project.start_date
        project = project_factory([
            ('A', 5),
            Task(
                task_id='B', name='Task B', duration=3, dependencies=['A'],
                constraint_type=ConstraintType.START_NO_LATER_THAN,
                constraint_date=start + timedelta(days=2),
            ),
        ])

        validation = validate_critical_path(project)

        assert validation.is_valid
        assert 'Task "Task A": Negative total float -3 (constraint conflict)' in validation.warnings

    def test_constraint_before_project_start_warning(self, project_factory, fs_chain_project):
        project = project_factory([
            Task(
                task_id='A', name='Task A', duration=2,
                constraint_type=ConstraintType.START_NO_EARLIER_THAN,
                constraint_date=fs_chain_project.start_date - timedelta(days=3),
            ),
        ])

        validation = validate_critical_path(project)

        assert len(validation.warnings) == 1
        assert 'is before the project start' in validation.warnings[0]

    def test_parallel_critical_tasks_reported_as_gap(self, project_factory):
        validation = validate_critical_path(project_factory([('A', 5), ('B', 5)]))

        assert validation.warnings == ['Critical path may have gaps: Task A -> Task B']


class TestCheckSchedule:
    """Detection of inconsistent results."""

    def test_critical_flag_with_float(self, diamond_project):
        result = _tamper(calculate_critical_path(diamond_project), 'B', is_critical=True)

        validation = check_schedule(diamond_project, result)

        assert not validation.is_valid
        assert 'Task "Task B": Marked as critical but has float 4' in validation.errors

    def test_zero_float_not_flagged(self, fs_chain_project):
        result = _tamper(calculate_critical_path(fs_chain_project), 'A', is_critical=False)

        validation = check_schedule(fs_chain_project, result)

        assert validation.is_valid
        assert 'Task "Task A": Not marked as critical but has zero float' in validation.warnings

    def test_arithmetic_errors(self, fs_chain_project):
        result = _tamper(calculate_critical_path(fs_chain_project), 'B', early_finish=9, late_start=6)

        errors = check_schedule(fs_chain_project, result).errors

        assert 'Task "Task B": EF(9) != ES(5) + Duration(3)' in errors
        assert 'Task "Task B": LF(8) != LS(6) + Duration(3)' in errors
        assert 'Task "Task B": Total Float calculation incorrect' in errors

    def test_reversed_dates(self, fs_chain_project):
        result = _tamper(calculate_critical_path(fs_chain_project), 'C', early_start=11)

        errors = check_schedule(fs_chain_project, result).errors

        assert 'Task "Task C": ES(11) > EF(10)' in errors

    def test_missing_record(self, fs_chain_project):
        result = calculate_critical_path(fs_chain_project)
        schedule_data = {k: v for k, v in result.schedule_data.items() if k != 'B'}

        validation = check_schedule(fs_chain_project, replace(result, schedule_data=schedule_data))

        assert 'Task "Task B" missing schedule data' in validation.errors

    def test_missing_record_at_end_of_critical_path(self, fs_chain_project):
        result = calculate_critical_path(fs_chain_project)
        schedule_data = {k: v for k, v in result.schedule_data.items() if k != 'C'}

        validation = check_schedule(fs_chain_project, replace(result, schedule_data=schedule_data))

        assert validation.errors == ['Task "Task C" missing schedule data']
        assert validation.warnings == []
        assert validation.critical_path_length == 3

    def test_timing_mismatch_on_critical_chain(self, fs_chain_project):
        result = _tamper(
            calculate_critical_path(fs_chain_project), 'B',
            early_start=6, early_finish=9, late_start=6, late_finish=9,
        )

        warnings = check_schedule(fs_chain_project, result).warnings

        assert 'Critical path timing mismatch: Task A.EF(5) != Task B.ES(6)' in warnings


class TestAnalyzeCriticalPath:
    """Near-critical tasks and float distribution."""

    def test_default_threshold(self, software_project):
        analysis = analyze_critical_path(software_project)

        assert analysis.near_critical_threshold_days == 5
        assert analysis.near_critical_tasks == []
        assert [t.task_id for t in analysis.critical_path] == [
            'req', 'design', 'api', 'integ', 'test', 'launch',
        ]
        assert analysis.get_critical_path_length() == 6
        assert analysis.total_tasks == 9
        assert analysis.project_duration == 33

    def test_custom_threshold(self, software_project):
        analysis = analyze_critical_path(software_project, near_critical_threshold_days=6)

        assert [t.task_id for t in analysis.near_critical_tasks] == ['ui']

    def test_near_critical_sorted_by_float(self, software_project):
        analysis = analyze_critical_path(software_project, near_critical_threshold_days=20)

        assert [t.total_float for t in analysis.near_critical_tasks] == [6, 11, 11]

    def test_float_distribution(self, software_project):
        analysis = analyze_critical_path(software_project)

        assert analysis.float_distribution == {'0 (critical)': 6, '6-10 days': 1, '11-20 days': 2}

    def test_risk_summary(self, software_project):
        analysis = analyze_critical_path(software_project)

        assert analysis.get_risk_summary() == "6 critical tasks, 0 near-critical (<= 5 days float)"

    def test_invalid_project_raises(self, cyclic_project):
        with pytest.raises(ValueError, match="Cannot analyze an invalid schedule"):
            analyze_critical_path(cyclic_project)

    def test_precomputed_result_is_reused(self, software_project, monkeypatch):
        result = calculate_critical_path(software_project)

        def fail(project):
            raise AssertionError("schedule recalculated")

        monkeypatch.setattr('pdm_schedule.analysis.critical_path.calculate_critical_path', fail)
        analysis = analyze_critical_path(software_project, result=result)

        assert analysis.project_duration == 33
        assert analysis.get_critical_path_length() == 6

    def test_invalid_precomputed_result_raises(self, cyclic_project):
        result = calculate_critical_path(cyclic_project)

        with pytest.raises(ValueError, match="Cannot analyze an invalid schedule"):
            analyze_critical_path(cyclic_project, result=result)

    def test_report(self, software_project, capsys):
        print_critical_path_report(analyze_critical_path(software_project))

        out = capsys.readouterr().out
        assert "CRITICAL PATH ANALYSIS REPORT" in out
        assert "Project Duration: 33 days" in out
        assert "Critical Tasks: 6" in out
