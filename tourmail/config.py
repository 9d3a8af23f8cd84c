"""
Configuration management for Tourmail.

Loads settings from ~/.tourmail/settings.json and provides
typed access to all configurable values.
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any


class Config:
    """Manages Tourmail configuration and directory structure."""

    def __init__(self, base_dir: Path | str | None = None) -> None:
        if base_dir is not None:
            self.base_dir = Path(base_dir).expanduser()
        else:
            env_dir = os.getenv("TOURMAIL_DIR")
            self.base_dir = Path(env_dir).expanduser() if env_dir else Path.home() / ".tourmail"

        # Sub-directories
        self.log_dir = self.base_dir / "log"
        self.data_dir = self.base_dir / "data"
        self.templates_dir = self.base_dir / "templates"

        self.settings_file = self.base_dir / "settings.json"

        self._ensure_dirs()
        self._settings: dict[str, Any] = self._load_settings()

    def _ensure_dirs(self) -> None:
        for d in [self.base_dir, self.log_dir, self.data_dir, self.templates_dir]:
            d.mkdir(parents=True, exist_ok=True)

    def _default_settings(self) -> dict[str, Any]:
        return {
            "version": "1.0.0",
            "created_at": datetime.now().isoformat(),
            "server": {"host": "0.0.0.0", "port": 8000},
            "email": {
                "provider": "sendgrid",
                "sendgrid_api_key": "",
                "from_email": "kevin@futurepathdevelopment.com",
                "from_name": "Baja Moto Tour 2026",
                "reply_to": "bmwriderkmc@gmail.com",
                "timeout": 10,
            },
            "auth": {"admin_ids": []},
            "branding": {
                "title": "Baja Moto Tour 2026",
                "tagline": "March 19-27, 2026",
            },
            "watch": {
                "collections": {
                    "registrations": ["create", "update"],
                    "users": ["create", "update"],
                    "waitlist": ["create"],
                }
            },
            "logging": {"level": "INFO", "keep": 30},
        }

    def _load_settings(self) -> dict[str, Any]:
        if self.settings_file.exists():
            try:
                data = json.loads(self.settings_file.read_text())
                # Merge with defaults (adds any missing keys)
                defaults = self._default_settings()
                return self._deep_merge(defaults, data)
            except (OSError, ValueError):
                pass
        return self._default_settings()

    def _deep_merge(self, base: dict, override: dict) -> dict:
        result = base.copy()
        for k, v in override.items():
            if k in result and isinstance(result[k], dict) and isinstance(v, dict):
                result[k] = self._deep_merge(result[k], v)
            else:
                result[k] = v
        return result

    def save(self) -> None:
        self.settings_file.write_text(json.dumps(self._settings, indent=2))

    def get(self, key_path: str, default: Any = None) -> Any:
        """Dot-notation access. e.g. config.get('email.from_email')"""
        parts = key_path.split(".")
        val: Any = self._settings
        for part in parts:
            if not isinstance(val, dict) or part not in val:
                return default
            val = val[part]
        return val

    def set(self, key_path: str, value: Any, save: bool = True) -> None:
        parts = key_path.split(".")
        d = self._settings
        for part in parts[:-1]:
            d = d.setdefault(part, {})
        d[parts[-1]] = value
        if save:
            self.save()

    @property
    def setup_required(self) -> bool:
        """True if no settings file exists yet."""
        return not self.settings_file.exists()

    @property
    def log_level(self) -> str:
        return str(self.get("logging.level", "INFO")).upper()

    @property
    def log_keep(self) -> int:
        return int(self.get("logging.keep", 30))

    @property
    def dev_mode(self) -> bool:
        return os.getenv("DEV_MODE", "").lower() in ("1", "true", "yes")

    @property
    def mail_provider(self) -> str:
        return str(self.get("email.provider", "sendgrid"))

    @property
    def sendgrid_api_key(self) -> str:
        return os.getenv("SENDGRID_API_KEY") or str(self.get("email.sendgrid_api_key", ""))

    @property
    def from_email(self) -> str:
        return str(self.get("email.from_email", ""))

    @property
    def from_name(self) -> str:
        return str(self.get("email.from_name", ""))

    @property
    def reply_to(self) -> "str | None":
        val = self.get("email.reply_to")
        return str(val) if val else None

    @property
    def mail_timeout(self) -> float:
        return float(self.get("email.timeout", 10))

    @property
    def admin_ids(self) -> list[str]:
        return [str(uid) for uid in self.get("auth.admin_ids", []) or []]

    @property
    def brand_title(self) -> str:
        return str(self.get("branding.title", ""))

    @property
    def brand_tagline(self) -> str:
        return str(self.get("branding.tagline", ""))

    @property
    def watched_collections(self) -> dict[str, list[str]]:
        watched = self.get("watch.collections", {}) or {}
        return {name: list(events) for name, events in watched.items()}

    def __repr__(self) -> str:
        return f"Config(base_dir={str(self.base_dir)!r})"


# Module-level singleton
_config: Config | None = None


def get_config(base_dir: Path | str | None = None) -> Config:
    global _config
    if _config is None:
        _config = Config(base_dir)
    return _config


def reset_config() -> None:
    """Reset singleton, for testing."""
    global _config
    _config = None
