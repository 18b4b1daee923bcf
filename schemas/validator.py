"""
Schema validation utilities for exported schedule files.

Validates that output frames conform to their Pydantic schema before they
are written, so consumers reading the CSV always see the same columns.
"""

import typing
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type

import pandas as pd
from pydantic import BaseModel


class SchemaValidationError(Exception):
    """Raised when schema validation fails."""

    def __init__(
        self,
        message: str,
        missing_columns: Optional[List[str]] = None,
        type_mismatches: Optional[Dict[str, Tuple[str, str]]] = None,
    ):
        super().__init__(message)
        self.missing_columns = missing_columns or []
        self.type_mismatches = type_mismatches or {}


def pandas_dtype_to_python_type(dtype) -> str:
    """Convert pandas dtype to a simplified type string."""
    dtype_str = str(dtype)

    if dtype_str.startswith('int') or dtype_str.startswith('Int'):
        return 'int'
    elif dtype_str.startswith('float'):
        return 'float'
    elif dtype_str in ('object', 'string'):
        return 'str'
    elif dtype_str.startswith('datetime'):
        return 'datetime'
    elif dtype_str in ('bool', 'boolean'):
        return 'bool'
    return dtype_str


def pydantic_type_to_string(annotation) -> str:
    """Convert a Pydantic field annotation to a simplified type string."""
    # Unwrap Optional[X] / Union[X, None]
    args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
    if typing.get_origin(annotation) is typing.Union and len(args) == 1:
        annotation = args[0]

    if annotation is bool:
        return 'bool'
    if annotation is int:
        return 'int'
    if annotation is float:
        return 'float'
    if annotation is str:
        return 'str'
    if annotation in (datetime, date):
        return 'datetime'
    return str(annotation)


def types_compatible(pandas_type: str, pydantic_type: str) -> bool:
    """
    Check if pandas type is compatible with pydantic type.

    Lenient where pandas widens types: float can hold a nullable int, and an
    all-missing column reads back as float or object.
    """
    if pandas_type == pydantic_type:
        return True

    # float in pandas can represent nullable int
    if pandas_type == 'float' and pydantic_type in ('int', 'str'):
        return True

    # Any numeric to numeric is generally ok
    if pandas_type in ('int', 'float') and pydantic_type in ('int', 'float'):
        return True

    return False


def validate_dataframe(
    df: pd.DataFrame,
    schema: Type[BaseModel],
    strict: bool = False,
) -> List[str]:
    """
    Validate a DataFrame against a Pydantic schema.

    Args:
        df: DataFrame to validate
        schema: Pydantic model class defining expected columns
        strict: If True, fail on extra columns not in schema

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    schema_fields = schema.model_fields
    expected_columns = set(schema_fields)
    actual_columns = set(df.columns)

    missing = expected_columns - actual_columns
    if missing:
        errors.append(f"Missing required columns: {sorted(missing)}")

    extra = actual_columns - expected_columns
    if extra and strict:
        errors.append(f"Unexpected columns (strict mode): {sorted(extra)}")

    type_mismatches = {}
    for col in sorted(expected_columns & actual_columns):
        # Columns with no values carry no type information
        if df[col].isna().all():
            continue
        pandas_type = pandas_dtype_to_python_type(df[col].dtype)
        pydantic_type = pydantic_type_to_string(schema_fields[col].annotation)
        if not types_compatible(pandas_type, pydantic_type):
            type_mismatches[col] = (pandas_type, pydantic_type)

    if type_mismatches:
        mismatch_strs = [
            f"{col}: got {got}, expected {expected}"
            for col, (got, expected) in type_mismatches.items()
        ]
        errors.append(f"Type mismatches: {'; '.join(mismatch_strs)}")

    return errors


def validated_df_to_csv(
    df: pd.DataFrame,
    file_path: Path,
    schema: Type[BaseModel],
    strict: bool = False,
    **to_csv_kwargs,
) -> Path:
    """
    Validate a DataFrame against its schema and write to CSV.

    Args:
        df: DataFrame to write
        file_path: Output path
        schema: Pydantic model class describing the file
        strict: If True, fail on extra columns not in schema
        **to_csv_kwargs: Additional arguments passed to df.to_csv()

    Returns:
        The written path

    Raises:
        SchemaValidationError: If validation fails
    """
    file_path = Path(file_path)

    errors = validate_dataframe(df, schema, strict=strict)
    if errors:
        error_msg = (
            f"Schema validation failed for '{file_path.name}':\n"
            + "\n".join(f"  - {e}" for e in errors)
        )
        missing = sorted(set(schema.model_fields) - set(df.columns))
        raise SchemaValidationError(error_msg, missing_columns=missing)

    file_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(file_path, **to_csv_kwargs)
    return file_path
