"""Load filler settings and value maps from YAML (or JSON) files."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .models import DuplicateNamePolicy, RichText, UnsupportedValuePolicy

logger = logging.getLogger(__name__)


@dataclass
class FillerConfig:
    """Filler settings loaded from YAML."""
    unsupported_values: UnsupportedValuePolicy = UnsupportedValuePolicy.WARN
    duplicate_names: DuplicateNamePolicy = DuplicateNamePolicy.APPLY_ALL
    log_level: str = "INFO"
    on_state_fallback: str = "Yes"  # Checkbox on-state when the widget has no /AP /N


def _policy(enum_cls, raw, default):
    if raw is None:
        return default
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        logger.warning("Unknown %s '%s', using '%s'", enum_cls.__name__, raw, default.value)
        return default


def _state_name(raw) -> str:
    # YAML 1.1 reads a bare Yes as a boolean
    if raw is True:
        return "Yes"
    if raw is None or raw is False or str(raw).strip() == "":
        return "Yes"
    return str(raw).strip().lstrip("/")


def load_config(path: str) -> Optional[FillerConfig]:
    """
    Load filler settings from a YAML file.

    Args:
        path: Path to the YAML config file.

    Returns:
        FillerConfig if successful, None otherwise.
    """
    import yaml

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Config file not found: %s", path)
        return None
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Error reading config file: %s", e)
        return None

    if not raw:
        return None
    if not isinstance(raw, dict):
        logger.warning("Config file %s is not a mapping", path)
        return None

    defaults = FillerConfig()
    return FillerConfig(
        unsupported_values=_policy(
            UnsupportedValuePolicy, raw.get("unsupported_values"), defaults.unsupported_values),
        duplicate_names=_policy(
            DuplicateNamePolicy, raw.get("duplicate_names"), defaults.duplicate_names),
        log_level=str(raw.get("log_level", defaults.log_level)).upper(),
        on_state_fallback=_state_name(raw.get("on_state_fallback")),
    )


def _coerce_value(value: Any) -> Any:
    """Rich text pairs come in as {plain, rich} mappings."""
    if isinstance(value, dict) and "plain" in value:
        rich = value.get("rich")
        return RichText(plain=str(value["plain"]), rich=None if rich is None else str(rich))
    return value


def load_values(path: str) -> Dict[str, Any]:
    """
    Load a value map (qualified field name -> value) from YAML or JSON.

    Raises:
        FileNotFoundError: the file does not exist.
        ValueError: the file does not hold a mapping.
    """
    import yaml

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Value file {path} must contain a mapping of field names to values")

    return {str(name): _coerce_value(value) for name, value in raw.items()}
