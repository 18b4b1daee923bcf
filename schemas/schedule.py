"""
Schedule export schema.

Output Location: {OUTPUT_DATA_DIR}/<project_id>_schedule.csv
"""

from typing import Optional
from pydantic import BaseModel, Field


class ScheduleExportRow(BaseModel):
    """
    One row per task of a calculated schedule.

    File: schedule.csv
    """
    task_id: str = Field(description="Task identifier")
    task_name: Optional[str] = Field(default=None, description="Task name")
    duration: int = Field(description="Duration in days")
    early_start: int = Field(description="Early start, days from project start")
    early_finish: int = Field(description="Early finish, days from project start")
    late_start: int = Field(description="Late start, days from project start")
    late_finish: int = Field(description="Late finish, days from project start")
    total_float: int = Field(description="Total float in days")
    free_float: int = Field(description="Free float in days")
    is_critical: bool = Field(description="Zero total float")
    start_date: str = Field(description="Early start as ISO date")
    end_date: str = Field(description="Early finish as ISO date")
    predecessors: Optional[str] = Field(default=None, description="Predecessor ids, comma separated")
