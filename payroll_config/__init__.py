"""
payroll_config -- single public entrypoint for payroll rule configuration.

Responsibility:
    Provides the ONLY way to obtain rule tables at runtime through
    ``get_active_config()``.  No engine reads configuration files or
    environment variables; callers obtain an ``EngineConfig`` here and
    pass its members into the engines.

Architecture position:
    Configuration -- YAML-driven rule tables, load-time validation.
    Sits above ``payroll_kernel`` and ``payroll_engines``.  Engines MUST
    NEVER import from ``payroll_config``.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - Load-time validation: a rule set with any error is rejected before
      a single computation can run.
    - Deterministic compilation: the same YAML always produces the same
      ``EngineConfig`` checksum.

Failure modes:
    - ``FileNotFoundError`` -- the rule set file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigurationError`` (and its table-specific subclasses) -- the
      rule set is incomplete or violates a table invariant.

Audit relevance:
    Every successful load emits a ``PAYROLL_CONFIG_TRACE`` log entry
    containing the config_id, version and checksum, tying every computed
    payout to the exact rule set that produced it.
"""

from __future__ import annotations

import threading
from pathlib import Path

from payroll_config.compiler import EngineConfig, compile_engine_config
from payroll_config.loader import compute_checksum, load_configuration_set
from payroll_config.validator import ConfigValidationResult, validate_config
from payroll_kernel.logging_config import get_logger

__all__ = [
    "ConfigValidationResult",
    "EngineConfig",
    "clear_config_cache",
    "compute_checksum",
    "get_active_config",
    "load_engine_config",
    "validate_config",
]

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

_cache: dict[Path, EngineConfig] = {}
_cache_lock = threading.Lock()


def load_engine_config(path: Path) -> EngineConfig:
    """Load, validate and compile one rule set file (uncached).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ConfigurationError: If the rule set fails validation.
    """
    config_set = load_configuration_set(path)

    validation = validate_config(config_set)
    for warning in validation.warnings:
        _logger.warning(
            "config_validation_warning",
            extra={"config_id": config_set.config_id, "warning": warning},
        )
    if not validation.is_valid:
        _logger.error(
            "config_validation_failed",
            extra={
                "config_id": config_set.config_id,
                "source": str(path),
                "errors": validation.errors,
            },
        )
    validation.raise_for_errors(str(path))

    config = compile_engine_config(config_set)

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(path),
            "bracket_count": len(config.bracket_table),
            "warning_count": len(validation.warnings),
        },
    )
    return config


def get_active_config(path: Path | str | None = None) -> EngineConfig:
    """The ONLY public configuration entrypoint.

    Contract:
        With no ``path`` the bundled rule set is used.  Results are cached
        per resolved path; the returned ``EngineConfig`` is frozen, so
        sharing it across threads and runs is safe.

    Raises:
        FileNotFoundError: If the rule set file does not exist.
        ConfigurationError: If the rule set fails validation.
    """
    resolved = Path(path).resolve() if path is not None else DEFAULT_CONFIG_PATH.resolve()
    with _cache_lock:
        cached = _cache.get(resolved)
    if cached is not None:
        return cached

    config = load_engine_config(resolved)
    with _cache_lock:
        return _cache.setdefault(resolved, config)


def clear_config_cache() -> None:
    """Forget every cached ``EngineConfig``. FOR TESTING ONLY."""
    with _cache_lock:
        _cache.clear()
