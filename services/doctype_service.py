# ============================================================================
# DOCTYPE SERVICE
# ============================================================================
# STATUS: Service - Declared schema source
# PURPOSE: Load and cache doctype definitions from YAML files
# ============================================================================
"""
Doctype Service

Loads doctype definitions from YAML files and hands the sync engine a
read-only snapshot through list_doctypes().

Doctype files live under the doctypes/ directory (searched recursively):

    name: Invoice
    fields:
      customer: {type: Reference, reference: Customer, required: 1}
      total: {type: Float, unique: 1}

Unlike most loaders, a broken file is not skipped. The sync run cannot
proceed on a partial declared schema, so every load error is raised as
DoctypeDefinitionError.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from core.errors import DoctypeDefinitionError
from core.logging import ComponentType, get_logger
from core.models.doctype import DoctypeSchema, FieldDef

logger = get_logger(__name__, ComponentType.DOCTYPES)


# Fields every doctype carries. Declared fields of the same name win.
STANDARD_FIELDS: Dict[str, Dict[str, Any]] = {
    "id": {"type": "Text", "unique": True},
    "owner": {"type": "Reference", "reference": "User"},
    "created_at": {"type": "Datetime", "required": True},
    "updated_at": {"type": "Datetime", "required": True},
    "created_by": {"type": "Reference", "reference": "User"},
    "updated_by": {"type": "Reference", "reference": "User"},
    "doc_status": {"type": "Integer", "required": True},
    "idx": {"type": "Integer"},
}


class DoctypeService:
    """Service for loading and managing doctype definitions."""

    def __init__(
        self,
        doctypes_dir: Optional[str] = None,
        include_standard_fields: bool = True,
    ):
        """
        Initialize doctype service.

        Args:
            doctypes_dir: Directory containing doctype YAML files.
                          Defaults to ./doctypes/
            include_standard_fields: Merge STANDARD_FIELDS into every doctype
        """
        if doctypes_dir:
            self.doctypes_dir = Path(doctypes_dir)
        else:
            self.doctypes_dir = Path(__file__).parent.parent / "doctypes"

        self.include_standard_fields = include_standard_fields
        self._cache: Dict[str, DoctypeSchema] = {}
        self._sources: Dict[str, str] = {}
        self._loaded = False

    def load_all(self) -> int:
        """
        Load all doctype definitions from the doctypes directory.

        Returns:
            Number of doctypes loaded

        Raises:
            DoctypeDefinitionError: On an unreadable/invalid file or a duplicate name
        """
        if not self.doctypes_dir.exists():
            logger.warning(f"Doctypes directory not found: {self.doctypes_dir}")
            self._loaded = True
            return 0

        files = sorted(
            list(self.doctypes_dir.rglob("*.yaml")) + list(self.doctypes_dir.rglob("*.yml"))
        )

        count = 0
        for yaml_file in files:
            doctype = self._load_yaml(yaml_file)
            self._add(doctype, str(yaml_file))
            count += 1
            logger.debug(f"Loaded doctype: {doctype.name} ({len(doctype.fields)} fields)")

        self._loaded = True
        logger.info(f"Loaded {count} doctypes from {self.doctypes_dir}")
        return count

    def list_doctypes(self) -> List[DoctypeSchema]:
        """
        All declared doctypes, in load order.

        This is the declared-schema source consumed by the synchronizer.
        """
        if not self._loaded:
            self.load_all()
        return list(self._cache.values())

    def register(self, doctype: DoctypeSchema) -> DoctypeSchema:
        """
        Register a doctype (for testing or programmatic use).

        Standard fields are merged the same way as for loaded files.

        Returns:
            The registered (merged) doctype
        """
        merged = self._with_standard_fields(doctype)
        self._add(merged, "<registered>")
        logger.info(f"Registered doctype: {merged.name}")
        return merged

    def reload(self) -> int:
        """
        Reload all doctypes from disk.

        Programmatic registrations are dropped.
        """
        self._cache.clear()
        self._sources.clear()
        self._loaded = False
        return self.load_all()

    def _add(self, doctype: DoctypeSchema, source: str) -> None:
        existing = self._sources.get(doctype.name)
        if existing is not None:
            raise DoctypeDefinitionError(
                f"Duplicate doctype name '{doctype.name}' (already defined in {existing})",
                source=source,
            )
        self._cache[doctype.name] = doctype
        self._sources[doctype.name] = source

    def _load_yaml(self, path: Path) -> DoctypeSchema:
        """
        Load a doctype from a YAML file.

        Raises:
            DoctypeDefinitionError: If the file cannot be parsed or validated
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise DoctypeDefinitionError(f"Cannot read doctype file: {e}", source=str(path)) from e

        if not isinstance(data, dict):
            raise DoctypeDefinitionError("Doctype file must contain a mapping", source=str(path))

        # File stem names the doctype when `name` is omitted
        data.setdefault("name", path.stem)
        if data.get("fields") is None:
            data["fields"] = {}

        try:
            doctype = DoctypeSchema(**data)
        except ValidationError as e:
            raise DoctypeDefinitionError(f"Invalid doctype: {e}", source=str(path)) from e

        return self._with_standard_fields(doctype)

    def _with_standard_fields(self, doctype: DoctypeSchema) -> DoctypeSchema:
        """Merge standard fields (declared wins) and move `id` first."""
        if not self.include_standard_fields:
            return doctype

        fields: Dict[str, FieldDef] = dict(doctype.fields)
        for name, spec in STANDARD_FIELDS.items():
            if name not in fields:
                fields[name] = FieldDef(**spec)

        ordered: Dict[str, FieldDef] = {}
        if "id" in fields:
            ordered["id"] = fields.pop("id")
        ordered.update(fields)

        return DoctypeSchema(name=doctype.name, fields=ordered)


__all__ = ["DoctypeService", "STANDARD_FIELDS"]
