# ============================================================================
# DOCTYPE MODEL
# ============================================================================
# STATUS: Core model - Declared entity schema
# PURPOSE: Typed view of a doctype definition (name + ordered fields)
# EXPORTS: FieldDef, DoctypeSchema
# DEPENDENCIES: pydantic
# ============================================================================
"""
Doctype Model

A doctype is a declared entity schema: a name (which is also the physical
table name) and an ordered mapping of field name -> FieldDef.

Doctypes are owned by the declarative configuration layer. The sync engine
only reads them; a snapshot is taken at the start of every run.

Doctype files use the declaring conventions, so flags may be written as
0/1 and the primary key flag as `primaryKey`:

    name: Invoice
    fields:
      id: {type: Text, primaryKey: 1}
      total: {type: Float, unique: 1}
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.contracts import FieldType


class FieldDef(BaseModel):
    """
    One declared field of a doctype.

    Unknown keys (label, in_list_view, default, ...) are UI concerns and are
    ignored here.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    type: FieldType
    required: bool = False
    unique: bool = False
    group: Optional[str] = Field(
        default=None,
        description="Fields sharing a group tag form one multi-column unique constraint"
    )
    primary_key: bool = Field(default=False, alias="primaryKey")
    reference: Optional[str] = Field(
        default=None,
        description="Target doctype for Reference fields"
    )

    @field_validator("group", "reference", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DoctypeSchema(BaseModel):
    """
    A declared doctype.

    Maps to: one physical table named exactly `name`.
    Field order is declaration order and drives column order.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    fields: Dict[str, FieldDef] = Field(default_factory=dict)

    def field_names(self) -> List[str]:
        """Declared field names in declaration order."""
        return list(self.fields.keys())

    def references(self) -> List[str]:
        """Doctype names this doctype points at through Reference fields."""
        return [
            f.reference for f in self.fields.values()
            if f.type == FieldType.REFERENCE and f.reference
        ]


__all__ = ["FieldDef", "DoctypeSchema"]
