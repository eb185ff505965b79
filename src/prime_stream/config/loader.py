from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from prime_stream.usecases.config_models import AppConfig

_TOP_LEVEL_KEYS = {"version", "search", "pipeline", "primality", "output", "logging"}


# ConfigError is raised for invalid configuration (fail fast, before any work starts).
class ConfigError(ValueError):
    pass


def load_raw_config(path: Path | None) -> dict[str, Any]:
    # YAML loader; a missing path means "defaults only".
    if path is None:
        return {}
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    _validate_top_level(raw)
    return raw


def build_config(raw: Mapping[str, Any]) -> AppConfig:
    # Single validation point: raw YAML plus CLI overrides become a typed AppConfig.
    _validate_top_level(raw)
    try:
        return AppConfig.model_validate(dict(raw))
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


def load_config(path: Path | None, overrides: Mapping[str, Mapping[str, Any]] | None = None) -> AppConfig:
    raw = load_raw_config(path)
    if overrides:
        raw = merge_overrides(raw, overrides)
    return build_config(raw)


def merge_overrides(
    raw: Mapping[str, Any],
    overrides: Mapping[str, Mapping[str, Any]],
) -> dict[str, Any]:
    # Section-level merge; override values win, None means "not given".
    merged: dict[str, Any] = dict(raw)
    for section, values in overrides.items():
        present = {key: value for key, value in values.items() if value is not None}
        if not present:
            continue
        current = merged.get(section, {})
        if current is None:
            current = {}
        if not isinstance(current, dict):
            raise ConfigError(f"{section} must be a mapping")
        # A main key replaces any alternate spelling of the same field already in the section.
        aliases = _alias_keys(section)
        shadowed = {alias for key in present for alias in aliases.get(key, ())}
        kept = {key: value for key, value in current.items() if key not in shadowed}
        merged[section] = {**kept, **present}
    return merged


def _alias_keys(section: str) -> dict[str, tuple[str, ...]]:
    # Alternate input names per field, taken from the section model's AliasChoices.
    section_field = AppConfig.model_fields.get(section)
    model = section_field.annotation if section_field is not None else None
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        return {}
    aliases: dict[str, tuple[str, ...]] = {}
    for name, info in model.model_fields.items():
        choices = getattr(info.validation_alias, "choices", None) or ()
        alternates = tuple(choice for choice in choices if isinstance(choice, str) and choice != name)
        if alternates:
            aliases[name] = alternates
    return aliases


def _validate_top_level(raw: Mapping[str, Any]) -> None:
    # Fail fast on unknown keys to prevent silent misconfiguration.
    unknown = set(raw.keys()) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"Unknown top-level keys: {sorted(unknown)}")


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "config"
        parts.append(f"{location}: {error['msg']}")
    return "Invalid configuration: " + "; ".join(parts)
