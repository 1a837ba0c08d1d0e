# ============================================================================
# SCHEMA DERIVER
# ============================================================================
# STATUS: Core - Declared doctype -> expected physical shape
# PURPOSE: Derive expected columns and unique constraints from a doctype
# EXPORTS: derive_columns, derive_unique_constraints, derive_table
# DEPENDENCIES: none
# ============================================================================
"""
Schema Deriver

Turns a DoctypeSchema into the shape the database is expected to have.

Nullability policy:
    notNull is only ever true when not-null enforcement is switched on.
    Doctypes evolve across many files and rows written under an older
    definition must not break a migration, so strictness is opt-in.

Unique constraint naming:
    unique field, no group      -> idx_<table>_<field>_unique  (one column)
    unique fields sharing group -> idx_<table>_<group>_unique  (declaration order)
"""

import logging
from typing import Dict, List

from core.models.doctype import DoctypeSchema
from core.models.schema import Column, PhysicalTable, UniqueConstraint
from core.schema.type_mapper import map_field_type

logger = logging.getLogger(__name__)


def derive_columns(doctype: DoctypeSchema, enforce_not_null: bool = False) -> List[Column]:
    """
    Expected columns for a doctype, in field declaration order.

    Fields mapped to the NULL sentinel have no column and are skipped.

    Args:
        doctype: Declared doctype
        enforce_not_null: Carry `required` into `not_null`

    Returns:
        List of Column with canonical sql_type
    """
    columns = []
    for field_name, field in doctype.fields.items():
        sql_type = map_field_type(field.type)
        if not sql_type.has_column():
            continue

        columns.append(Column(
            name=field_name,
            sql_type=sql_type.value,
            not_null=field.required if enforce_not_null else False,
            primary_key=field.primary_key,
        ))
    return columns


def derive_unique_constraints(doctype: DoctypeSchema) -> List[UniqueConstraint]:
    """
    Expected unique constraints for a doctype.

    Single-field constraints come first, then one constraint per group in
    order of first appearance.
    """
    individual: List[str] = []
    groups: Dict[str, List[str]] = {}

    for field_name, field in doctype.fields.items():
        if not field.unique:
            continue
        if not map_field_type(field.type).has_column():
            logger.debug(f"Ignoring unique flag on non-storable field {doctype.name}.{field_name}")
            continue
        if field.group:
            groups.setdefault(field.group, []).append(field_name)
        else:
            individual.append(field_name)

    constraints = [
        UniqueConstraint(name=f"idx_{doctype.name}_{field_name}_unique", columns=[field_name])
        for field_name in individual
    ]
    constraints.extend(
        UniqueConstraint(name=f"idx_{doctype.name}_{group}_unique", columns=field_names)
        for group, field_names in groups.items()
    )
    return constraints


def derive_table(doctype: DoctypeSchema, enforce_not_null: bool = False) -> PhysicalTable:
    """Expected PhysicalTable for a doctype."""
    return PhysicalTable(
        name=doctype.name,
        columns=derive_columns(doctype, enforce_not_null=enforce_not_null),
    )


__all__ = [
    "derive_columns",
    "derive_unique_constraints",
    "derive_table",
]
