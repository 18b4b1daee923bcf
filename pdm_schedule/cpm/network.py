"""
Task Network for CPM calculations.

Merges inline task dependencies with explicit dependency records into one
adjacency structure, with support for topological sorting and lookups.
"""

from collections import deque
from typing import Optional

from .models import Dependency, DependencyType, Project, Task


class CircularDependencyError(ValueError):
    """Raised when a topological order does not exist."""


class TaskNetwork:
    """
    Task dependency network for CPM calculations.

    Built once per calculation from a project snapshot. Predecessor and
    successor lists are deduplicated and keep first-seen order.
    """

    def __init__(self):
        self.tasks: dict[str, Task] = {}
        self.dependencies: list[Dependency] = []
        self._predecessors: dict[str, list[str]] = {}
        self._successors: dict[str, list[str]] = {}
        self._explicit: dict[tuple[str, str], Dependency] = {}
        self._links: set[tuple[str, str]] = set()

    @classmethod
    def from_project(cls, project: Project) -> 'TaskNetwork':
        """Build the merged network for a project."""
        network = cls()
        for task in project.tasks:
            network.add_task(task)

        # Inline links first, so successor lists follow project task order
        for task in project.tasks:
            for pred_id in task.dependencies:
                network._link(pred_id, task.task_id)

        for dep in project.dependencies:
            network.add_dependency(dep)

        return network

    def add_task(self, task: Task) -> None:
        """Add a task to the network. A repeated id keeps the first task."""
        if task.task_id in self.tasks:
            return
        self.tasks[task.task_id] = task
        self._predecessors.setdefault(task.task_id, [])
        self._successors.setdefault(task.task_id, [])

    def add_dependency(self, dep: Dependency) -> None:
        """
        Add an explicit dependency record.

        References to unknown tasks are kept so that validation can
        report them; the first record for a task pair wins lookups.
        """
        self.dependencies.append(dep)
        self._explicit.setdefault((dep.from_task_id, dep.to_task_id), dep)
        self._link(dep.from_task_id, dep.to_task_id)

    def _link(self, pred_id: str, succ_id: str) -> None:
        if (pred_id, succ_id) in self._links:
            return
        self._links.add((pred_id, succ_id))
        self._predecessors.setdefault(succ_id, []).append(pred_id)
        self._successors.setdefault(pred_id, []).append(succ_id)

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task by ID."""
        return self.tasks.get(task_id)

    def get_predecessors(self, task_id: str) -> list[str]:
        """Get predecessor task ids of a task (inline and explicit, deduplicated)."""
        if task_id not in self.tasks:
            return []
        return list(self._predecessors.get(task_id, []))

    def get_successors(self, task_id: str) -> list[str]:
        """Get successor task ids of a task (inline and explicit, deduplicated)."""
        if task_id not in self.tasks:
            return []
        return list(self._successors.get(task_id, []))

    def get_dependency(self, from_task_id: str, to_task_id: str) -> Optional[Dependency]:
        """
        Get the relation between two tasks.

        Explicit records take precedence. A link that only exists in a task's
        inline list is reported as finish-to-start without lag.
        """
        dep = self._explicit.get((from_task_id, to_task_id))
        if dep is not None:
            return dep

        to_task = self.tasks.get(to_task_id)
        if to_task is not None and from_task_id in to_task.dependencies:
            return Dependency(
                dependency_id=f'dep-{from_task_id}-{to_task_id}',
                from_task_id=from_task_id,
                to_task_id=to_task_id,
                dep_type=DependencyType.FINISH_TO_START,
                lag_days=0,
            )

        return None

    def get_start_tasks(self) -> list[str]:
        """Get task IDs with no predecessors."""
        return [tid for tid in self.tasks if not self._predecessors.get(tid)]

    def get_end_tasks(self) -> list[str]:
        """Get task IDs with no successors."""
        return [tid for tid in self.tasks if not self._successors.get(tid)]

    def topological_sort(self) -> list[str]:
        """
        Return task IDs in topological order (predecessors before successors).

        Uses Kahn's algorithm; ready tasks are taken in project order.
        Raises CircularDependencyError if the network has a cycle.
        """
        in_degree = {
            tid: sum(1 for p in self._predecessors[tid] if p in self.tasks)
            for tid in self.tasks
        }

        queue = deque(tid for tid, deg in in_degree.items() if deg == 0)
        result = []

        while queue:
            task_id = queue.popleft()
            result.append(task_id)

            for succ_id in self._successors.get(task_id, []):
                if succ_id not in in_degree:
                    continue
                in_degree[succ_id] -= 1
                if in_degree[succ_id] == 0:
                    queue.append(succ_id)

        if len(result) != len(self.tasks):
            remaining = [tid for tid in self.tasks if in_degree[tid] > 0]
            raise CircularDependencyError(
                f"Circular dependency detected involving {len(remaining)} tasks: "
                f"{remaining[:5]}"
            )

        return result

    def reverse_topological_sort(self) -> list[str]:
        """Return task IDs in reverse topological order (successors before predecessors)."""
        return list(reversed(self.topological_sort()))

    def get_statistics(self) -> dict:
        """Get network statistics."""
        return {
            'total_tasks': len(self.tasks),
            'total_links': len(self._links),
            'explicit_dependencies': len(self.dependencies),
            'start_tasks': len(self.get_start_tasks()),
            'end_tasks': len(self.get_end_tasks()),
            'milestones': sum(1 for t in self.tasks.values() if t.is_milestone()),
            'constrained_tasks': sum(1 for t in self.tasks.values() if t.has_dated_constraint()),
        }

    def __len__(self) -> int:
        return len(self.tasks)

    def __contains__(self, task_id: str) -> bool:
        return task_id in self.tasks

    def __repr__(self) -> str:
        return f"TaskNetwork({len(self.tasks)} tasks, {len(self.dependencies)} dependencies)"


def get_predecessors(task_id: str, project: Project) -> list[str]:
    """Predecessor ids of a task in a project."""
    return TaskNetwork.from_project(project).get_predecessors(task_id)


def get_successors(task_id: str, project: Project) -> list[str]:
    """Successor ids of a task in a project."""
    return TaskNetwork.from_project(project).get_successors(task_id)


def get_dependency(from_task_id: str, to_task_id: str, project: Project) -> Optional[Dependency]:
    """Relation between two tasks of a project, or None."""
    return TaskNetwork.from_project(project).get_dependency(from_task_id, to_task_id)
