"""Configuration management for store access, profile and exports.

Loads from YAML config file with environment variable overrides.
Pattern: CONFIG__{SECTION}__{KEY} overrides nested YAML keys.
Example: CONFIG__EXPORT__TOP_CLIENTS=10
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "$",
    "AUD": "$",
}


# --- Store ---


class StoreConfig(BaseModel):
    backend: Literal["supabase", "sql"] = "sql"
    url: str = ""  # https://<project>.supabase.co, from env: SUPABASE_URL
    api_key: str = ""  # anon/service key, from env: SUPABASE_KEY
    database_url: str = "sqlite:///data/crm.db"  # from env: DATABASE_URL
    timeout_s: float = Field(default=30.0, gt=0)


# --- Profile ---


class ProfileConfig(BaseModel):
    owner_id: str = ""  # from env: CRM_OWNER_ID
    currency: Literal["USD", "EUR", "GBP", "CAD", "AUD"] = "USD"
    timezone: str = "UTC"  # IANA name; decides when a deadline day has started

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone: {v}") from e
        return v

    @property
    def currency_symbol(self) -> str:
        return CURRENCY_SYMBOLS[self.currency]

    def now(self) -> datetime:
        """Current time in the configured timezone."""
        return datetime.now(ZoneInfo(self.timezone))


# --- Export ---


class ExportConfig(BaseModel):
    output_dir: str = "output"
    top_clients: int = Field(default=6, ge=1, description="Bars in the revenue chart")
    recent_projects: int = Field(default=5, ge=1)


# --- Service Config ---


class CRMConfig(BaseModel):
    store: StoreConfig = StoreConfig()
    profile: ProfileConfig = ProfileConfig()
    export: ExportConfig = ExportConfig()


def _apply_env_overrides(config_dict: dict, prefix: str = "CONFIG") -> dict:
    """Apply environment variable overrides to config dict.

    Pattern: CONFIG__SECTION__KEY=value maps to config[section][key] = value
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}__"):
            continue
        parts = key[len(prefix) + 2 :].lower().split("__")
        target = config_dict
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        # Type coercion for common cases
        if value.lower() in ("true", "false"):
            value = value.lower() == "true"
        elif value.isdigit():
            value = int(value)
        target[parts[-1]] = value
    return config_dict


def _apply_dedicated_env(config_dict: dict) -> dict:
    """Well-known variables fill keys the YAML/CONFIG__ layers left empty."""
    store = config_dict.setdefault("store", {})
    profile = config_dict.setdefault("profile", {})

    if not store.get("url") and os.getenv("SUPABASE_URL"):
        store["url"] = os.environ["SUPABASE_URL"]
    if not store.get("api_key") and os.getenv("SUPABASE_KEY"):
        store["api_key"] = os.environ["SUPABASE_KEY"]
    if os.getenv("DATABASE_URL"):
        store["database_url"] = os.environ["DATABASE_URL"]
    if not profile.get("owner_id") and os.getenv("CRM_OWNER_ID"):
        profile["owner_id"] = os.environ["CRM_OWNER_ID"]
    return config_dict


def load_config(
    config_path: Optional[str] = None,
) -> CRMConfig:
    """Load configuration from YAML file with env overrides.

    Priority: env vars > YAML file > defaults
    """
    config_dict = {}

    # 1. Load YAML if exists
    if config_path is None:
        config_path = os.getenv("CRM_CONFIG_PATH", "config/crm.yml")
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

    # 2. Apply env overrides
    config_dict = _apply_env_overrides(config_dict)

    # 3. Supabase / database / owner from dedicated env vars
    config_dict = _apply_dedicated_env(config_dict)

    return CRMConfig(**config_dict)


_config: Optional[CRMConfig] = None


def get_config() -> CRMConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Optional[str] = None) -> CRMConfig:
    global _config
    _config = load_config(config_path)
    return _config
