"""
Pytest fixtures for the payroll engine test suite.

Provides:
- Structured logging configured for the whole session
- The bundled rule set as an ``EngineConfig`` and its individual tables
- An employee factory with sensible defaults
"""

import json
import logging
from io import StringIO

import pytest

from payroll_config import EngineConfig, clear_config_cache, get_active_config
from payroll_kernel.domain import EmployeeFact, MaritalStatus, PayPeriod
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            resolve_ptkp(...)
            logs = captured_logs()
            assert any(r["message"] == "ptkp_resolved" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Configuration fixtures
# =============================================================================


@pytest.fixture(scope="session")
def engine_config() -> EngineConfig:
    """The bundled Indonesian rule set."""
    clear_config_cache()
    return get_active_config()


@pytest.fixture
def ptkp_table(engine_config):
    return engine_config.ptkp_table


@pytest.fixture
def bracket_table(engine_config):
    return engine_config.bracket_table


@pytest.fixture
def allowance_table(engine_config):
    return engine_config.allowance_table


# =============================================================================
# Employee factory
# =============================================================================


@pytest.fixture
def make_employee():
    """
    Build an ``EmployeeFact`` with defaults overridable per test.

    Usage::

        emp = make_employee(position="Staff Kebun", base_salary=5_000_000)
    """
    counter = {"n": 0}

    def _make(**overrides) -> EmployeeFact:
        counter["n"] += 1
        fields = {
            "employee_id": f"EMP-{counter['n']:04d}",
            "name": f"Employee {counter['n']}",
            "division": "Kebun A",
            "position": "Pemanen",
            "base_salary": 4_000_000,
            "employment_type": "permanent",
            "marital_status": MaritalStatus.SINGLE,
            "dependent_count": 0,
            "active": True,
            "period": PayPeriod(2025, 3),
        }
        fields.update(overrides)
        return EmployeeFact(**fields)

    return _make
