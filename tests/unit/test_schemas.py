"""
Unit tests for schema definitions.

Tests project document parsing and export validation without data files.
"""

import pandas as pd
import pytest
from pydantic import BaseModel, ValidationError

from pdm_schedule.cpm.models import ConstraintType, DependencyType
from schemas.project import DependencySchema, ProjectSchema, TaskSchema
from schemas.schedule import ScheduleExportRow
from schemas.validator import (
    SchemaValidationError,
    pandas_dtype_to_python_type,
    pydantic_type_to_string,
    types_compatible,
    validate_dataframe,
    validated_df_to_csv,
)


PROJECT_DOC = {
    'id': 'web-app',
    'name': 'Web App',
    'startDate': '2025-01-06',
    'ownerId': 'ignored',
    'tasks': [
        {'id': 'a', 'name': 'Design', 'duration': 5, 'wbsCode': '1.1'},
        {
            'id': 'b',
            'name': 'Build',
            'duration': 8,
            'dependencies': ['a'],
            'constraintType': 'startNoEarlierThan',
            'constraintDate': '2025-01-20',
        },
        {'id': 'c', 'name': 'Release', 'duration': 0, 'dependencies': None, 'isMilestone': True},
    ],
    'dependencies': [
        {'id': 'd1', 'fromTaskId': 'b', 'toTaskId': 'c', 'type': 'finishToFinish', 'lagDays': -1},
    ],
}


class TestSchemaDefinitions:
    """Test that schema definitions are valid Pydantic models."""

    @pytest.mark.parametrize("schema", [
        DependencySchema,
        TaskSchema,
        ProjectSchema,
        ScheduleExportRow,
    ])
    def test_schema_is_pydantic_model(self, schema):
        """Each schema should be a valid Pydantic BaseModel."""
        assert issubclass(schema, BaseModel)

    def test_export_columns(self):
        assert list(ScheduleExportRow.model_fields) == [
            'task_id', 'task_name', 'duration', 'early_start', 'early_finish',
            'late_start', 'late_finish', 'total_float', 'free_float', 'is_critical',
            'start_date', 'end_date', 'predecessors',
        ]


class TestProjectSchema:
    """Parsing project documents."""

    def test_camel_case_document(self):
        project = ProjectSchema.model_validate(PROJECT_DOC).to_model()

        assert project.project_id == 'web-app'
        assert str(project.start_date)[:10] == '2025-01-06'
        assert [t.task_id for t in project.tasks] == ['a', 'b', 'c']
        assert project.tasks[0].wbs_code == '1.1'
        assert project.tasks[1].dependencies == ['a']
        assert project.tasks[1].constraint_type is ConstraintType.START_NO_EARLIER_THAN
        assert str(project.tasks[1].constraint_date)[:10] == '2025-01-20'
        assert project.tasks[2].dependencies == []
        assert project.tasks[2].milestone

    def test_dependency_records(self):
        project = ProjectSchema.model_validate(PROJECT_DOC).to_model()
        dep = project.dependencies[0]

        assert (dep.dependency_id, dep.from_task_id, dep.to_task_id) == ('d1', 'b', 'c')
        assert dep.dep_type is DependencyType.FINISH_TO_FINISH
        assert dep.lag_days == -1

    def test_dependency_defaults(self):
        dep = DependencySchema(id='x', fromTaskId='a', toTaskId='b').to_model()

        assert dep.dep_type is DependencyType.FINISH_TO_START
        assert dep.lag_days == 0

    def test_field_names_accepted(self):
        dep = DependencySchema(id='x', from_task_id='a', to_task_id='b', lag_days=2)

        assert dep.lag_days == 2

    def test_missing_collections_default_to_empty(self):
        project = ProjectSchema.model_validate({
            'id': 'p', 'startDate': '2025-01-06', 'tasks': None, 'dependencies': None,
        }).to_model()

        assert project.tasks == []
        assert project.dependencies == []

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            TaskSchema(id='a', duration=-1)

    def test_unknown_dependency_type_rejected(self):
        with pytest.raises(ValidationError):
            DependencySchema(id='x', fromTaskId='a', toTaskId='b', type='startToMiddle')

    def test_unknown_constraint_rejected(self):
        with pytest.raises(ValidationError):
            TaskSchema(id='a', duration=1, constraintType='sometime')

    def test_start_date_required(self):
        with pytest.raises(ValidationError):
            ProjectSchema.model_validate({'id': 'p', 'tasks': []})


class TestTypeMapping:
    """Test pandas to Python type conversion."""

    def test_pandas_int_type(self):
        """Int types should map to 'int'."""
        assert pandas_dtype_to_python_type('int64') == 'int'
        assert pandas_dtype_to_python_type('Int64') == 'int'

    def test_pandas_float_type(self):
        assert pandas_dtype_to_python_type('float64') == 'float'

    def test_pandas_object_and_bool_types(self):
        assert pandas_dtype_to_python_type('object') == 'str'
        assert pandas_dtype_to_python_type('bool') == 'bool'

    def test_optional_annotations_are_unwrapped(self):
        assert pydantic_type_to_string(ScheduleExportRow.model_fields['predecessors'].annotation) == 'str'
        assert pydantic_type_to_string(ScheduleExportRow.model_fields['is_critical'].annotation) == 'bool'

    def test_types_compatible(self):
        assert types_compatible('int', 'int')
        assert types_compatible('float', 'int')
        assert types_compatible('int', 'float')
        assert not types_compatible('str', 'int')


def _export_frame():
    return pd.DataFrame([{
        'task_id': 'a', 'task_name': 'Design', 'duration': 5,
        'early_start': 0, 'early_finish': 5, 'late_start': 0, 'late_finish': 5,
        'total_float': 0, 'free_float': 0, 'is_critical': True,
        'start_date': '2025-01-06', 'end_date': '2025-01-11', 'predecessors': None,
    }])


class TestDataFrameValidation:
    """Test DataFrame validation against schemas."""

    def test_valid_frame(self):
        assert validate_dataframe(_export_frame(), ScheduleExportRow) == []

    def test_validate_missing_columns(self):
        errors = validate_dataframe(_export_frame().drop(columns=['free_float']), ScheduleExportRow)

        assert errors == ["Missing required columns: ['free_float']"]

    def test_validate_strict_mode_extra_columns(self):
        df = _export_frame().assign(extra_column='value')

        assert any('Unexpected columns' in e for e in validate_dataframe(df, ScheduleExportRow, strict=True))
        assert validate_dataframe(df, ScheduleExportRow, strict=False) == []

    def test_type_mismatch(self):
        df = _export_frame().assign(early_start='soon')

        errors = validate_dataframe(df, ScheduleExportRow)

        assert errors == ['Type mismatches: early_start: got str, expected int']

    def test_validated_write(self, tmp_path):
        path = validated_df_to_csv(_export_frame(), tmp_path / 'out' / 'schedule.csv',
                                   ScheduleExportRow, index=False)

        assert path.exists()
        assert list(pd.read_csv(path).columns) == list(ScheduleExportRow.model_fields)

    def test_invalid_frame_is_not_written(self, tmp_path):
        target = tmp_path / 'schedule.csv'

        with pytest.raises(SchemaValidationError) as exc_info:
            validated_df_to_csv(_export_frame().drop(columns=['task_id']), target, ScheduleExportRow)

        assert exc_info.value.missing_columns == ['task_id']
        assert not target.exists()
