"""Pytest configuration and fixtures."""
from datetime import date

import pytest

from pdm_schedule.cpm.models import Dependency, DependencyType, Project, Task

PROJECT_START = date(2025, 1, 6)


def build_project(tasks, dependencies=None, start_date=PROJECT_START) -> Project:
    """Build a project from (id, duration[, inline deps]) tuples or Task objects."""
    built = []
    for spec in tasks:
        if isinstance(spec, Task):
            built.append(spec)
            continue
        task_id, duration, *rest = spec
        built.append(Task(
            task_id=task_id,
            name=f'Task {task_id}',
            duration=duration,
            dependencies=list(rest[0]) if rest else [],
        ))

    return Project(
        project_id='test-project',
        name='Test Project',
        start_date=start_date,
        tasks=built,
        dependencies=list(dependencies or []),
    )


def link(from_id, to_id, dep_type=DependencyType.FINISH_TO_START, lag=0) -> Dependency:
    """Explicit dependency record."""
    return Dependency(
        dependency_id=f'{from_id}-{to_id}',
        from_task_id=from_id,
        to_task_id=to_id,
        dep_type=dep_type,
        lag_days=lag,
    )


@pytest.fixture
def project_factory():
    """Factory for ad hoc projects."""
    return build_project


@pytest.fixture
def link_factory():
    """Factory for explicit dependency records."""
    return link


@pytest.fixture
def fs_chain_project() -> Project:
    """A(5d) -> B(3d) -> C(2d), all finish-to-start."""
    return build_project([
        ('A', 5),
        ('B', 3, ['A']),
        ('C', 2, ['B']),
    ])


@pytest.fixture
def diamond_project() -> Project:
    """A(5d) -> B(3d) -> D(2d) and A(5d) -> C(7d) -> D(2d)."""
    return build_project([
        ('A', 5),
        ('B', 3, ['A']),
        ('C', 7, ['A']),
        ('D', 2, ['B', 'C']),
    ])


@pytest.fixture
def software_project() -> Project:
    """
    Nine-task delivery plan mixing inline links, SS and FF records.

    Critical chain: req -> design -> api -> integ -> test -> launch (33 days).
    """
    return build_project(
        [
            ('req', 5),
            ('design', 7, ['req']),
            ('api', 10, ['design']),
            ('ui', 8),
            ('db', 4, ['design']),
            ('integ', 5, ['api', 'ui']),
            ('docs', 3),
            ('test', 6, ['integ', 'db']),
            Task(task_id='launch', name='Launch', duration=0, dependencies=['test', 'docs'], milestone=True),
        ],
        dependencies=[
            link('design', 'ui', DependencyType.START_TO_START, lag=3),
            link('api', 'docs', DependencyType.FINISH_TO_FINISH),
        ],
    )


@pytest.fixture
def cyclic_project() -> Project:
    """A -> B -> C -> A."""
    return build_project([
        ('A', 2, ['C']),
        ('B', 3, ['A']),
        ('C', 4, ['B']),
    ])
