"""
Translation between domain records and storage shapes.

Records are pydantic models. The SQL backend stores them as snake_case
columns with amounts in NUMERIC(10,2); the local store keeps their native
camelCase JSON. Everything read back is validated through the record model.
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel, to_snake
from sqlalchemy import JSON, Numeric

TWO_PLACES = Decimal("0.01")

R = TypeVar("R", bound=BaseModel)


def to_decimal(value: Any) -> Decimal | None:
    """Amount as a 2-place Decimal for NUMERIC columns."""
    if value is None:
        return None
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_float(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def to_json_value(value: Any) -> Any:
    """Plain JSON-compatible value, with nested records in native (camelCase) form."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    return value


def normalize_keys(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Accept camelCase or snake_case field names; return snake_case."""
    return {to_snake(key): value for key, value in changes.items()}


# ==================== SQL ROWS ====================

def _column_value(column, value: Any) -> Any:
    if isinstance(column.type, Numeric):
        return to_decimal(value)
    if isinstance(column.type, JSON):
        return to_json_value(value)
    if isinstance(value, Enum):
        # str enums are stored by value
        return value.value
    return value


def record_to_columns(record: BaseModel, model) -> Dict[str, Any]:
    """Column values for inserting `record` into `model`'s table."""
    data = record.model_dump()
    native = record.model_dump(mode="json", by_alias=True)
    columns = {}
    for column in model.__table__.columns:
        if column.key not in data:
            continue
        if isinstance(column.type, JSON):
            columns[column.key] = native[to_camel(column.key)]
        else:
            columns[column.key] = _column_value(column, data[column.key])
    return columns


def changes_to_columns(changes: Dict[str, Any], model) -> Dict[str, Any]:
    """Column values for a partial update; unknown fields are rejected."""
    table_columns = {column.key: column for column in model.__table__.columns}
    columns = {}
    for key, value in normalize_keys(changes).items():
        column = table_columns.get(key)
        if column is None:
            raise ValueError(f"Unknown field '{key}' for {model.__tablename__}")
        columns[key] = _column_value(column, value)
    return columns


def row_to_record(record_cls: Type[R], row) -> R:
    """Validated record from an ORM row; NUMERIC values come back as float."""
    data = {
        column.key: to_float(getattr(row, column.key))
        for column in row.__table__.columns
    }
    data = {key: value for key, value in data.items() if value is not None}
    return record_cls.model_validate(data)


# ==================== LOCAL STORE ====================

def record_to_native(record: BaseModel) -> Dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True)


def native_to_record(record_cls: Type[R], data: Dict[str, Any]) -> R:
    return record_cls.model_validate(data)


def merge_record(record_cls: Type[R], record: R, changes: Dict[str, Any]) -> R:
    """New validated record with `changes` (either key spelling) applied."""
    data = record.model_dump()
    data.update(normalize_keys(changes))
    return record_cls.model_validate(data)
