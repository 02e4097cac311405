from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for the pipeline, ensuring that the configuration
dictionary conforms to the expected schema. Handles type coercion, range
checks and default value injection to maintain execution stability.
"""

import logging
from typing import Any, Dict, List, Tuple

from diskusage.domain.config import default_concurrency, get_default_config

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (CLI flags, the persisted config file) into
    strictly typed parameters. Fills missing keys with domain defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: A tuple containing the normalized
                                          configuration and a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    # 2. Schema Definition (Declarative mapping)
    string_fields = ["root_path", "load_path", "json_output"]

    bool_fields = [
        "show_user", "show_group", "show_files", "raw_bytes", "gzip_output",
    ]

    # field -> minimum accepted value
    int_fields = {
        "levels": 0,
        "size_width": 0,
        "files_width": 0,
        "top_n": 0,
    }

    # 3. Field Processing & Normalization
    for field in string_fields:
        merged[field] = _as_str(
            merged.get(field), defaults.get(field, ""), field, warnings, strict
        )

    for field in bool_fields:
        merged[field] = _as_bool(
            merged.get(field), defaults.get(field, False), field, warnings, strict
        )

    for field, minimum in int_fields.items():
        merged[field] = _as_int(
            merged.get(field), defaults[field], minimum, field, warnings, strict
        )

    # 4. Worker pool: non-positive means 'use the CPU-based default'
    concurrency = _as_int(
        merged.get("concurrency"), defaults["concurrency"], 0, "concurrency", warnings, strict
    )
    merged["concurrency"] = concurrency if concurrency > 0 else default_concurrency()

    # Unknown keys are not part of the schema
    return {k: merged[k] for k in defaults}, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        # Numeric coercion (0/1)
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        # Human-friendly keywords
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(
        value: Any,
        fallback: int,
        minimum: int,
        field: str,
        warnings: List[str],
        strict: bool,
) -> int:
    """Coerce numeric input into a bounded integer."""
    if value is None:
        return fallback

    result = None
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif not strict:
        if isinstance(value, float) and value.is_integer():
            warnings.append(f"Field '{field}' converted from float {value} to int.")
            result = int(value)
        elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
            warnings.append(f"Field '{field}' converted from '{value}' to int.")
            result = int(value.strip())

    if result is None:
        msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    if result < minimum:
        msg = f"Invalid field '{field}': {result} is below the minimum of {minimum}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    return result
