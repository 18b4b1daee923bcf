"""
Project input schemas.

Accepts the camelCase project JSON produced by the planning application
and converts it into scheduling models.
"""

from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pdm_schedule.cpm.models import (
    ConstraintType,
    Dependency,
    DependencyType,
    Project,
    Task,
)


class DependencySchema(BaseModel):
    """
    Explicit predecessor-successor relation.

    JSON key: project.dependencies[]
    """
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str = Field(description="Dependency identifier")
    from_task_id: str = Field(alias="fromTaskId", description="Predecessor task id")
    to_task_id: str = Field(alias="toTaskId", description="Successor task id")
    type: DependencyType = Field(default=DependencyType.FINISH_TO_START, description="Relation type")
    lag_days: int = Field(default=0, alias="lagDays", description="Lag in days (negative = lead)")

    def to_model(self) -> Dependency:
        return Dependency(
            dependency_id=self.id,
            from_task_id=self.from_task_id,
            to_task_id=self.to_task_id,
            dep_type=self.type,
            lag_days=self.lag_days,
        )


class TaskSchema(BaseModel):
    """
    Schedulable task.

    JSON key: project.tasks[]
    """
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str = Field(description="Task identifier, unique within the project")
    name: str = Field(default='', description="Task name")
    duration: int = Field(ge=0, description="Duration in days")
    dependencies: List[str] = Field(default_factory=list, description="Inline predecessor task ids")
    wbs_code: str = Field(default='', alias="wbsCode", description="WBS code")
    constraint_type: Optional[ConstraintType] = Field(default=None, alias="constraintType", description="Date constraint kind")
    constraint_date: Optional[Union[datetime, date]] = Field(default=None, alias="constraintDate", description="Date constraint")
    is_milestone: bool = Field(default=False, alias="isMilestone", description="Milestone flag")

    @field_validator('dependencies', mode='before')
    @classmethod
    def none_to_empty(cls, value):
        return [] if value is None else value

    def to_model(self) -> Task:
        return Task(
            task_id=self.id,
            name=self.name,
            duration=self.duration,
            dependencies=list(self.dependencies),
            wbs_code=self.wbs_code,
            constraint_type=self.constraint_type,
            constraint_date=self.constraint_date,
            milestone=self.is_milestone,
        )


class ProjectSchema(BaseModel):
    """
    Project document with tasks and dependency records.

    File: <project>.json
    """
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str = Field(description="Project identifier")
    name: str = Field(default='', description="Project name")
    start_date: Union[datetime, date] = Field(alias="startDate", description="Calendar anchor for day offsets")
    tasks: List[TaskSchema] = Field(default_factory=list)
    dependencies: List[DependencySchema] = Field(default_factory=list)

    @field_validator('dependencies', 'tasks', mode='before')
    @classmethod
    def none_to_empty(cls, value):
        return [] if value is None else value

    def to_model(self) -> Project:
        return Project(
            project_id=self.id,
            name=self.name,
            start_date=self.start_date,
            tasks=[task.to_model() for task in self.tasks],
            dependencies=[dep.to_model() for dep in self.dependencies],
        )
