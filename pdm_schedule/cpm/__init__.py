"""
CPM (Critical Path Method) Calculator using the Precedence Diagramming Method.

This module provides:
- Task network construction from inline and explicit dependencies
- Dependency validation (references, self-links, cycles)
- Forward/backward pass CPM calculations
- Float and critical path identification
"""

from .models import (
    ConstraintType,
    Dependency,
    DependencyType,
    NetworkResult,
    Project,
    ScheduleRecord,
    Task,
    ValidationResult,
)
from .network import (
    CircularDependencyError,
    TaskNetwork,
    get_dependency,
    get_predecessors,
    get_successors,
)
from .validator import validate_dependencies
from .engine import CPMEngine, calculate_critical_path, constraint_offset

__all__ = [
    'ConstraintType',
    'Dependency',
    'DependencyType',
    'NetworkResult',
    'Project',
    'ScheduleRecord',
    'Task',
    'ValidationResult',
    'CircularDependencyError',
    'TaskNetwork',
    'get_dependency',
    'get_predecessors',
    'get_successors',
    'validate_dependencies',
    'CPMEngine',
    'calculate_critical_path',
    'constraint_offset',
]
