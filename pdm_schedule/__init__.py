"""
Project Schedule Analysis Module.

Provides Precedence Diagramming Method (PDM/CPM) calculations: early and
late dates, total and free float, and the critical task set of a project.
"""

from .cpm import (
    ConstraintType,
    Dependency,
    DependencyType,
    NetworkResult,
    Project,
    ScheduleRecord,
    Task,
    ValidationResult,
    CircularDependencyError,
    TaskNetwork,
    CPMEngine,
    calculate_critical_path,
    validate_dependencies,
    get_predecessors,
    get_successors,
    get_dependency,
)
from .cpm.models import CriticalPathResult, CriticalPathValidation
from .analysis import (
    apply_schedule,
    update_task_dates,
    analyze_critical_path,
    validate_critical_path,
)

__all__ = [
    # Models
    'ConstraintType',
    'Dependency',
    'DependencyType',
    'NetworkResult',
    'Project',
    'ScheduleRecord',
    'Task',
    'ValidationResult',
    'CriticalPathResult',
    'CriticalPathValidation',
    # Core
    'CircularDependencyError',
    'TaskNetwork',
    'CPMEngine',
    'calculate_critical_path',
    'validate_dependencies',
    'get_predecessors',
    'get_successors',
    'get_dependency',
    # Analysis
    'apply_schedule',
    'update_task_dates',
    'analyze_critical_path',
    'validate_critical_path',
]
