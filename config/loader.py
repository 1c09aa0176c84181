from __future__ import annotations

import json
import logging
import os
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from config.settings import BatterySettings, ConfigurationError

logger = logging.getLogger(__name__)

ENV_SEED = "CLARITY_SEED"
ENV_RESULTS_PATH = "CLARITY_RESULTS_PATH"

_SECTIONS = ("reaction", "stroop", "nback", "memory", "flexibility")


def load_settings(settings_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> BatterySettings:
    """
    Battery settings from an optional JSON file plus environment overrides.

    The file holds one object per test section ({"reaction": {"rounds": 5}})
    and top-level "seed" / "results_path". A missing or unreadable file
    gives the defaults, and so does any section that fails validation.
    """
    environ = os.environ if environ is None else environ
    settings = BatterySettings()

    if settings_path is not None and settings_path.exists():
        try:
            payload = json.loads(settings_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Could not read settings from %s, using defaults", settings_path)
            payload = None
        if isinstance(payload, dict):
            settings = apply_overrides(settings, payload)

    seed = (environ.get(ENV_SEED) or "").strip()
    if seed:
        try:
            settings = replace(settings, seed=int(seed))
        except ValueError:
            logger.warning("Ignoring non-integer %s=%r", ENV_SEED, seed)
    results_path = (environ.get(ENV_RESULTS_PATH) or "").strip()
    if results_path:
        settings = replace(settings, results_path=results_path)
    return settings


def apply_overrides(settings: BatterySettings, payload: Mapping[str, Any]) -> BatterySettings:
    changes = {}
    for section in _SECTIONS:
        values = payload.get(section)
        if not isinstance(values, dict):
            continue
        try:
            candidate = _replace_known(getattr(settings, section), values, section)
            candidate.validate()
        except ConfigurationError as exc:
            logger.warning("Ignoring %s settings, keeping defaults: %s", section, exc)
            continue
        changes[section] = candidate

    if "seed" in payload and (payload["seed"] is None or _is_int(payload["seed"])):
        changes["seed"] = payload["seed"]
    if isinstance(payload.get("results_path"), str):
        changes["results_path"] = payload["results_path"]
    return replace(settings, **changes)


def _replace_known(config, values: Mapping[str, Any], section: str):
    known = {f.name for f in fields(config)}
    kwargs = {}
    for key, value in values.items():
        if key not in known:
            logger.warning("Unknown setting %s.%s", section, key)
            continue
        ok, value = _coerce(getattr(config, key), value)
        if not ok:
            raise ConfigurationError(f"{section}.{key} has the wrong type: {value!r}")
        kwargs[key] = value
    return replace(config, **kwargs)


def _coerce(default: Any, value: Any) -> Tuple[bool, Any]:
    """Check a JSON value against the type of the field's current value."""
    if isinstance(value, list):
        value = tuple(value)
    if default is None:
        # optional millisecond limits
        return value is None or _is_int(value), value
    if isinstance(default, float):
        if _is_int(value) or isinstance(value, float):
            return True, float(value)
        return False, value
    if isinstance(default, int):
        return _is_int(value), value
    if isinstance(default, tuple):
        if not isinstance(value, tuple):
            return False, value
        kinds = {type(item) for item in default}
        return all(type(item) in kinds for item in value), value
    return isinstance(value, type(default)), value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

