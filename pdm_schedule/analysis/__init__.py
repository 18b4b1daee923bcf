"""
Analysis modules built on top of CPM results.
"""

from .schedule_applier import apply_schedule, update_task_dates
from .critical_path import (
    analyze_critical_path,
    check_schedule,
    print_critical_path_report,
    validate_critical_path,
)

__all__ = [
    'apply_schedule',
    'update_task_dates',
    'analyze_critical_path',
    'check_schedule',
    'print_critical_path_report',
    'validate_critical_path',
]
