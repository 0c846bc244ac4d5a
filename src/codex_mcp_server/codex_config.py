"""Model discovery from the Codex CLI config directory (``~/.codex``)."""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILE_NAMES = ("config.toml", "config.yaml", "config.json")


@dataclass(frozen=True)
class ModelEntry:
    name: str
    description: str | None = None

    def format(self) -> str:
        return f"- {self.name}: {self.description}" if self.description else f"- {self.name}"


@dataclass
class ConfigLookup:
    config: dict[str, Any] | None = None
    path: Path | None = None
    found_any: bool = False
    parse_error_path: Path | None = None
    parse_error: Exception | None = None


def codex_home(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    override = env.get("CODEX_HOME", "").strip()
    return Path(override).expanduser() if override else Path.home() / ".codex"


def _parse(path: Path, data: str) -> Any:
    if path.suffix == ".toml":
        return tomllib.loads(data)
    if path.suffix == ".yaml":
        return yaml.safe_load(data)
    return json.loads(data)


def load_codex_config(home: Path) -> ConfigLookup:
    """Return the first config file under ``home`` that parses to a mapping."""
    lookup = ConfigLookup()
    for file_name in CONFIG_FILE_NAMES:
        path = home / file_name
        try:
            data = path.read_text(encoding="utf-8")
        except OSError:
            continue
        lookup.found_any = True
        try:
            parsed = _parse(path, data)
        except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as ex:
            lookup.parse_error_path = path
            lookup.parse_error = ex
            continue
        if not isinstance(parsed, dict):
            lookup.parse_error_path = path
            lookup.parse_error = ValueError("top-level value is not a mapping")
            continue
        lookup.config = parsed
        lookup.path = path
        return lookup
    return lookup


def extract_models(config: dict[str, Any]) -> list[ModelEntry]:
    models: list[ModelEntry] = []
    top_model = config.get("model")
    if isinstance(top_model, str) and top_model.strip():
        provider = config.get("model_provider")
        models.append(ModelEntry(top_model.strip(), f"Provider: {provider}" if provider else None))

    profiles = config.get("profiles")
    if isinstance(profiles, dict):
        for profile_name, profile in profiles.items():
            if not isinstance(profile, dict):
                continue
            model = profile.get("model")
            if not isinstance(model, str) or not model.strip():
                continue
            description = f"Profile: {profile_name}"
            if profile.get("model_provider"):
                description += f", Provider: {profile['model_provider']}"
            models.append(ModelEntry(model.strip(), description))

    unique: dict[str, ModelEntry] = {}
    for entry in models:
        unique.setdefault(entry.name, entry)
    return list(unique.values())
