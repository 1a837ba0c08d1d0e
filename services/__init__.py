# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Service layer
# PURPOSE: Declared schema source
# ============================================================================
"""
Services Module

Usage:
    from services import DoctypeService

    service = DoctypeService("doctypes/")
    doctypes = service.list_doctypes()
"""

from .doctype_service import DoctypeService, STANDARD_FIELDS

__all__ = [
    "DoctypeService",
    "STANDARD_FIELDS",
]
