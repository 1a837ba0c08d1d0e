# ============================================================================
# ERRORS
# ============================================================================
# STATUS: Foundation - Exception hierarchy
# PURPOSE: Errors that must reach the caller (everything else is logged)
# EXPORTS: SchemaSyncError, DoctypeDefinitionError, UnmappedFieldTypeError
# ============================================================================
"""
Exceptions raised by the sync engine.

Only caller-level problems are raised. Catalog read failures and per-operation
DDL failures are logged and collected, never raised.
"""


class SchemaSyncError(Exception):
    """Base class for schema sync errors."""


class DoctypeDefinitionError(SchemaSyncError, ValueError):
    """A doctype file is unreadable, invalid, or duplicates another doctype."""

    def __init__(self, message: str, source: str = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class UnmappedFieldTypeError(SchemaSyncError):
    """The field-type table does not cover every declared field type."""


__all__ = [
    "SchemaSyncError",
    "DoctypeDefinitionError",
    "UnmappedFieldTypeError",
]
