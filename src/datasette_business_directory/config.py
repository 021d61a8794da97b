"""
Configuration for the business directory plugin.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .classifier import DEFAULT_IMPORT_SIGNALS

PLUGIN_NAME = "datasette-business-directory"


@dataclass
class StoreConfig:
    """Record store connection configuration."""

    backend: str = "sqlite"  # sqlite, postgrest
    db_path: Path | None = field(default_factory=lambda: Path("directory.db"))
    rest_url: str | None = None  # e.g. https://<project>.supabase.co/rest/v1
    api_key: str | None = None
    api_key_env: str | None = "DIRECTORY_STORE_KEY"
    timeout_seconds: float = 10.0

    def get_api_key(self) -> str | None:
        """Get API key from config or environment."""
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class SubmissionConfig:
    """Rules applied to public suggestion submissions."""

    require_city: bool = True
    default_state: str = "FL"
    honeypot_field: str = "company"


@dataclass
class DirectoryConfig:
    """Complete plugin configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    submissions: SubmissionConfig = field(default_factory=SubmissionConfig)
    admin_actor_ids: list[str] = field(default_factory=lambda: ["root"])
    log_searches: bool = True
    import_signals: list[str] = field(default_factory=lambda: list(DEFAULT_IMPORT_SIGNALS))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DirectoryConfig":
        """Create config from a dictionary (e.g., plugin config or YAML)."""
        config = cls()

        if "admin_actor_ids" in data:
            config.admin_actor_ids = [str(a) for a in data["admin_actor_ids"] or []]
        if "log_searches" in data:
            config.log_searches = bool(data["log_searches"])
        if "import_signals" in data:
            config.import_signals = list(data["import_signals"] or [])

        if "store" in data:
            store = data["store"] or {}
            db_path = store.get("db_path", config.store.db_path)
            config.store = StoreConfig(
                backend=store.get("backend", "sqlite"),
                db_path=Path(db_path) if db_path else None,
                rest_url=store.get("rest_url"),
                api_key=store.get("api_key"),
                api_key_env=store.get("api_key_env", config.store.api_key_env),
                timeout_seconds=float(store.get("timeout_seconds", 10.0)),
            )

        if "submissions" in data:
            submissions = data["submissions"] or {}
            config.submissions = SubmissionConfig(
                require_city=submissions.get("require_city", True),
                default_state=submissions.get("default_state", "FL"),
                honeypot_field=submissions.get("honeypot_field", "company"),
            )

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "DirectoryConfig":
        """Load config from a datasette.yaml file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        plugin_config = (data.get("plugins") or {}).get(PLUGIN_NAME) or {}
        return cls.from_dict(plugin_config)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary. Credentials are never included."""
        return {
            "store": {
                "backend": self.store.backend,
                "db_path": str(self.store.db_path) if self.store.db_path else None,
                "rest_url": self.store.rest_url,
                "api_key_env": self.store.api_key_env,
                "timeout_seconds": self.store.timeout_seconds,
            },
            "submissions": {
                "require_city": self.submissions.require_city,
                "default_state": self.submissions.default_state,
                "honeypot_field": self.submissions.honeypot_field,
            },
            "admin_actor_ids": list(self.admin_actor_ids),
            "log_searches": self.log_searches,
            "import_signals": list(self.import_signals),
        }
