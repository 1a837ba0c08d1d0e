# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for sync behavior and database access
# ============================================================================
"""
Configuration Defaults

Provides defaults for schema synchronization and database connectivity.
These can be overridden via environment variables or explicit arguments.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple
from urllib.parse import quote


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class SyncDefaults:
    """
    Defaults for schema synchronization.

    enforce_not_null is the global not-null toggle. It stays off unless
    explicitly requested; with it off every derived column is nullable and
    nullability is never compared.
    """
    schema_name: str = "public"
    enforce_not_null: bool = False

    # Tables starting with these are never diffed, dropped or reported
    system_table_prefixes: Tuple[str, ...] = ("_", "pg_")

    # Declared doctypes (None: the doctypes/ directory shipped with the project)
    doctypes_dir: Optional[str] = None
    include_standard_fields: bool = True

    @classmethod
    def from_env(cls) -> "SyncDefaults":
        """Create from environment variables."""
        prefixes = os.getenv("SYNC_SYSTEM_PREFIXES")
        return cls(
            schema_name=os.getenv("SYNC_DB_SCHEMA", "public"),
            enforce_not_null=_env_bool("SYNC_ENFORCE_NOT_NULL", False),
            system_table_prefixes=(
                tuple(p.strip() for p in prefixes.split(",") if p.strip())
                if prefixes else ("_", "pg_")
            ),
            doctypes_dir=os.getenv("SYNC_DOCTYPES_DIR"),
            include_standard_fields=_env_bool("SYNC_INCLUDE_STANDARD_FIELDS", True),
        )


@dataclass(frozen=True)
class DatabaseDefaults:
    """
    PostgreSQL connection settings.

    DATABASE_URL wins over the individual POSTGRES_* variables.
    """
    database_url: Optional[str] = None
    host: Optional[str] = None
    port: str = "5432"
    database: Optional[str] = None
    user: str = "postgres"
    password: str = field(default="", repr=False)
    sslmode: str = "prefer"

    def get_connection_string(self) -> str:
        """
        Get database connection string.

        Raises:
            ValueError: If neither DATABASE_URL nor host/database/password are set
        """
        if self.database_url:
            return self.database_url

        if not self.host or not self.database:
            raise ValueError(
                "Database connection not configured. "
                "Set DATABASE_URL or POSTGRES_HOST and POSTGRES_DB environment variables."
            )
        if not self.password:
            raise ValueError(
                "No authentication configured. Provide POSTGRES_PASSWORD or DATABASE_URL."
            )

        return (
            f"postgresql://{quote(self.user, safe='')}:{quote(self.password, safe='')}"
            f"@{self.host}:{self.port}/{self.database}?sslmode={self.sslmode}"
        )

    @property
    def target(self) -> str:
        """host/database for log lines (never includes credentials)."""
        if self.database_url and not self.host:
            return self.database_url.rsplit("@", 1)[-1]
        return f"{self.host or 'localhost'}/{self.database or 'postgres'}"

    @classmethod
    def from_env(cls) -> "DatabaseDefaults":
        """Create from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL"),
            host=os.getenv("POSTGRES_HOST"),
            port=os.getenv("POSTGRES_PORT", "5432"),
            database=os.getenv("POSTGRES_DB"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", ""),
            sslmode=os.getenv("POSTGRES_SSLMODE", "prefer"),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    sync: SyncDefaults = field(default_factory=SyncDefaults)
    database: DatabaseDefaults = field(default_factory=DatabaseDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            sync=SyncDefaults.from_env(),
            database=DatabaseDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SyncDefaults",
    "DatabaseDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
