"""Core shared configuration, logging and reporting utilities."""

from core.structured_logging import (
    configure_structured_logging,
    file_scope,
    get_run_id,
    get_source_file,
    set_run_id,
)
from core.settings import (
    ConfigValidationError,
    LinkingConfig,
    load_linking_config,
    load_yaml_config,
    resolve_strict_config_validation,
)
from core.run_artifacts import build_run_report, write_run_report

__all__ = [
    "configure_structured_logging",
    "file_scope",
    "get_run_id",
    "get_source_file",
    "set_run_id",
    "ConfigValidationError",
    "LinkingConfig",
    "load_linking_config",
    "load_yaml_config",
    "resolve_strict_config_validation",
    "build_run_report",
    "write_run_report",
]
