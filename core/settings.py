"""Linking configuration loading and validation.

Reads an optional YAML file with a ``linking:`` section and environment
overrides (a ``.env`` file is honoured via python-dotenv). In non-strict
mode invalid entries are logged and replaced by defaults; in strict mode
they raise ``ConfigValidationError``.

Example file::

    linking:
      extensions: [".js", ".mjs"]
      ignore_comment_kinds: ["statement_block", "class_body"]
      extra_plain_markers: ['//\\s*eslint-disable-line\\s*']
      continue_on_error: true
      log_level: DEBUG
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, FrozenSet, Optional

import yaml
from dotenv import load_dotenv

from linking.config import (
    BLOCK_LIKE_KINDS,
    DEFAULT_CONTINUE_ON_ERROR,
    IGNORE_COMMENT_KINDS,
    JS_EXTENSIONS,
    PLAIN_COMMENT_REPLACEMENTS,
)
from linking.models import KindPolicy
from linking.walker import LinkerSettings

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "COMMENT_LINKING_CONFIG"
LOG_LEVEL_ENV = "COMMENT_LINKING_LOG_LEVEL"
STRICT_ENV = "STRICT_CONFIG_VALIDATION"

_KNOWN_KEYS = frozenset({
    "extensions",
    "block_like_kinds",
    "ignore_comment_kinds",
    "extra_plain_markers",
    "continue_on_error",
    "log_level",
})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ConfigValidationError(RuntimeError):
    """Raised when strict configuration validation fails."""


@dataclass(frozen=True)
class LinkingConfig:
    """Resolved configuration for a linking run."""

    extensions: FrozenSet[str] = JS_EXTENSIONS
    block_like_kinds: FrozenSet[str] = BLOCK_LIKE_KINDS
    ignore_comment_kinds: FrozenSet[str] = IGNORE_COMMENT_KINDS
    extra_plain_markers: tuple[str, ...] = ()
    continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR
    log_level: str = "INFO"
    source_path: Optional[str] = None

    def to_settings(self) -> LinkerSettings:
        """Build immutable linker settings; extra markers run after the built-in ones."""
        policy = KindPolicy(
            block_like_kinds=self.block_like_kinds,
            ignore_comment_kinds=self.ignore_comment_kinds,
        )
        markers = PLAIN_COMMENT_REPLACEMENTS + tuple(
            re.compile(pattern) for pattern in self.extra_plain_markers
        )
        return LinkerSettings(policy=policy, plain_markers=markers)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag(STRICT_ENV, default=default)


def _fail(msg: str, strict: bool) -> None:
    if strict:
        raise ConfigValidationError(msg)
    logger.warning("%s; using defaults", msg)


def load_yaml_config(config_path: str, strict: bool = False) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    In non-strict mode this returns an empty dict on read/parse failures.
    In strict mode this raises ``ConfigValidationError``.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Linking config file not found: {config_path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse linking config YAML at {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        msg = f"Linking config file is empty: {config_path}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected linking config payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload


def _string_set(
    section: dict[str, Any],
    key: str,
    default: FrozenSet[str],
    strict: bool,
) -> FrozenSet[str]:
    if key not in section:
        return default
    value = section[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        _fail(f"linking.{key} must be a list of strings", strict)
        return default
    return frozenset(value)


def _marker_patterns(section: dict[str, Any], strict: bool) -> tuple[str, ...]:
    value = section.get("extra_plain_markers", [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        _fail("linking.extra_plain_markers must be a list of strings", strict)
        return ()
    patterns: list[str] = []
    for pattern in value:
        try:
            re.compile(pattern)
        except re.error as exc:
            _fail(f"Invalid plain marker pattern {pattern!r}: {exc}", strict)
            continue
        patterns.append(pattern)
    return tuple(patterns)


def _log_level(raw: Any, strict: bool) -> str:
    level = str(raw).strip().upper()
    if level not in _LOG_LEVELS:
        _fail(f"Unknown log level {raw!r}", strict)
        return "INFO"
    return level


def load_linking_config(
    config_path: Optional[str] = None,
    strict: Optional[bool] = None,
) -> LinkingConfig:
    """Resolve the linking configuration from file and environment.

    Args:
        config_path: YAML file path. Falls back to ``COMMENT_LINKING_CONFIG``;
            with neither set, built-in defaults are used.
        strict: Strict validation. Falls back to ``STRICT_CONFIG_VALIDATION``.

    Returns:
        The resolved LinkingConfig.

    Raises:
        ConfigValidationError: In strict mode, on any invalid entry.
    """
    load_dotenv()
    if strict is None:
        strict = resolve_strict_config_validation()
    config_path = config_path or os.getenv(CONFIG_PATH_ENV) or None

    section: dict[str, Any] = {}
    if config_path:
        payload = load_yaml_config(config_path, strict=strict)
        raw_section = payload.get("linking", {}) if payload else {}
        if isinstance(raw_section, dict):
            section = raw_section
        else:
            _fail("linking config missing a 'linking' mapping", strict)

    unknown = sorted(set(section) - _KNOWN_KEYS)
    if unknown:
        msg = "Unknown linking config keys: " + ", ".join(unknown)
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; ignoring them", msg)

    continue_on_error = section.get("continue_on_error", DEFAULT_CONTINUE_ON_ERROR)
    if not isinstance(continue_on_error, bool):
        _fail("linking.continue_on_error must be a boolean", strict)
        continue_on_error = DEFAULT_CONTINUE_ON_ERROR

    log_level_raw = os.getenv(LOG_LEVEL_ENV) or section.get("log_level", "INFO")

    config = LinkingConfig(
        extensions=_string_set(section, "extensions", JS_EXTENSIONS, strict),
        block_like_kinds=_string_set(section, "block_like_kinds", BLOCK_LIKE_KINDS, strict),
        ignore_comment_kinds=_string_set(
            section, "ignore_comment_kinds", IGNORE_COMMENT_KINDS, strict
        ),
        extra_plain_markers=_marker_patterns(section, strict),
        continue_on_error=continue_on_error,
        log_level=_log_level(log_level_raw, strict),
        source_path=config_path,
    )
    logger.debug("Resolved linking config: %s", config)
    return config
