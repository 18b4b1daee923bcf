"""
Input and output data schemas.

This module defines Pydantic models for project documents read by the
scheduler and for the schedule files it writes.

Usage:
    from schemas import ProjectSchema, validated_df_to_csv
    from schemas.schedule import ScheduleExportRow

    project = ProjectSchema.model_validate_json(text).to_model()
    validated_df_to_csv(df, 'schedule.csv', ScheduleExportRow, index=False)
"""

from .project import DependencySchema, ProjectSchema, TaskSchema
from .schedule import ScheduleExportRow
from .validator import (
    validate_dataframe,
    validated_df_to_csv,
    SchemaValidationError,
)

__all__ = [
    'DependencySchema',
    'ProjectSchema',
    'TaskSchema',
    'ScheduleExportRow',
    'validate_dataframe',
    'validated_df_to_csv',
    'SchemaValidationError',
]
