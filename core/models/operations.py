# ============================================================================
# OPERATION MODELS
# ============================================================================
# STATUS: Core model - Atomic DDL operations
# PURPOSE: Tagged variants produced by the planner, consumed by the executor
# EXPORTS: Operation and the seven operation models
# DEPENDENCIES: pydantic
# ============================================================================
"""
Operation Models

`Operation` is a discriminated union over seven kinds, tagged by `kind`.
The executor dispatches on `kind` through a table that must cover every
OperationType member.

Every operation targets exactly one table (`table`), which is what the
planner's ordering guarantees are expressed in.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from core.contracts import OperationType
from core.models.schema import Column, UniqueConstraint


class CreateTableOperation(BaseModel):
    kind: Literal[OperationType.CREATE_TABLE] = OperationType.CREATE_TABLE
    table: str
    columns: List[Column] = Field(default_factory=list)
    unique_constraints: List[UniqueConstraint] = Field(default_factory=list)

    def describe(self) -> str:
        return f"create table {self.table} ({len(self.columns)} columns)"


class DropTableOperation(BaseModel):
    kind: Literal[OperationType.DROP_TABLE] = OperationType.DROP_TABLE
    table: str

    def describe(self) -> str:
        return f"drop table {self.table}"


class AddColumnOperation(BaseModel):
    kind: Literal[OperationType.ADD_COLUMN] = OperationType.ADD_COLUMN
    table: str
    column: str
    sql_type: str
    not_null: bool = False

    def describe(self) -> str:
        return f"add column {self.table}.{self.column} {self.sql_type}"


class RemoveColumnOperation(BaseModel):
    kind: Literal[OperationType.REMOVE_COLUMN] = OperationType.REMOVE_COLUMN
    table: str
    column: str

    def describe(self) -> str:
        return f"remove column {self.table}.{self.column}"


class ModifyColumnOperation(BaseModel):
    kind: Literal[OperationType.MODIFY_COLUMN] = OperationType.MODIFY_COLUMN
    table: str
    column: str
    old_type: str
    new_type: str
    type_changed: bool = True
    new_not_null: Optional[bool] = None

    def describe(self) -> str:
        return f"modify column {self.table}.{self.column} {self.old_type} -> {self.new_type}"


class AddUniqueConstraintOperation(BaseModel):
    kind: Literal[OperationType.ADD_UNIQUE_CONSTRAINT] = OperationType.ADD_UNIQUE_CONSTRAINT
    table: str
    name: str
    columns: List[str]

    def describe(self) -> str:
        return f"add unique {self.table} ({', '.join(self.columns)})"


class RemoveUniqueConstraintOperation(BaseModel):
    kind: Literal[OperationType.REMOVE_UNIQUE_CONSTRAINT] = OperationType.REMOVE_UNIQUE_CONSTRAINT
    table: str
    name: str
    columns: List[str]

    def describe(self) -> str:
        return f"remove unique {self.table} ({', '.join(self.columns)})"


Operation = Annotated[
    Union[
        CreateTableOperation,
        DropTableOperation,
        AddColumnOperation,
        RemoveColumnOperation,
        ModifyColumnOperation,
        AddUniqueConstraintOperation,
        RemoveUniqueConstraintOperation,
    ],
    Field(discriminator="kind"),
]


__all__ = [
    "Operation",
    "CreateTableOperation",
    "DropTableOperation",
    "AddColumnOperation",
    "RemoveColumnOperation",
    "ModifyColumnOperation",
    "AddUniqueConstraintOperation",
    "RemoveUniqueConstraintOperation",
]
