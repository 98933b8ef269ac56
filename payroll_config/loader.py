"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads a YAML rule set and parses it into typed ``payroll_config.schema``
dataclass instances.  This is build/test tooling; runtime callers use
``payroll_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  No dependency on engines;
the compiler is what turns the parsed set into engine tables.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Rates become ``Decimal`` through ``str`` so ``0.05`` is exact.
* No silent defaults for required sections: a missing key is a
  ``ConfigurationError`` naming the key.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing keys or non-numeric values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import (
    AllowanceRatesDef,
    CompensationPolicyDef,
    PayrollConfigurationSet,
    PositionLevelRuleDef,
    PTKPDef,
    TaxBracketDef,
)
from payroll_kernel.exceptions import ConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any, path: str) -> Decimal:
    """Parse a rate; strings and ints are exact, floats go through ``str``."""
    if isinstance(value, bool):
        raise ValueError(f"{path}: expected a number, got {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"{path}: expected a number, got {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"{path}: must be finite, got {value!r}")
    return result


def parse_ptkp(data: dict[str, Any]) -> PTKPDef:
    return PTKPDef(
        single=tuple(data["single"]),
        married=tuple(data["married"]),
    )


def parse_tax_bracket(data: dict[str, Any], index: int) -> TaxBracketDef:
    return TaxBracketDef(
        lower_bound=data["lower_bound"],
        upper_bound=data.get("upper_bound"),
        rate=parse_decimal(data["rate"], f"tax_brackets[{index}].rate"),
    )


def parse_position_rule(data: dict[str, Any]) -> PositionLevelRuleDef:
    return PositionLevelRuleDef(
        level=data["level"],
        title_keywords=tuple(data.get("title_keywords", ())),
        employment_types=tuple(data.get("employment_types", ())),
    )


def parse_allowance_rates(level: str, data: dict[str, Any]) -> AllowanceRatesDef:
    return AllowanceRatesDef(
        level=level,
        rice=data["rice"],
        meat=data["meat"],
        show=data["show"],
    )


def parse_policy(data: dict[str, Any]) -> CompensationPolicyDef:
    """
    Parse the ``policy`` section.

    Raises:
        KeyError: if a required key is missing.
        ValueError: if a rate is not numeric.
    """
    return CompensationPolicyDef(
        flat_withholding_rate=parse_decimal(
            data["flat_withholding_rate"], "policy.flat_withholding_rate"
        ),
        bonus_multiplier=data["bonus_multiplier"],
        recognized_bonus_multipliers=tuple(data["recognized_bonus_multipliers"]),
        position_cost_rate=parse_decimal(
            data["position_cost_rate"], "policy.position_cost_rate"
        ),
        position_cost_monthly_cap=data["position_cost_monthly_cap"],
        months_per_year=data["months_per_year"],
        wage_increase_percentage=parse_decimal(
            data["wage_increase_percentage"], "policy.wage_increase_percentage"
        ),
        realization_months=data["realization_months"],
    )


def parse_configuration_set(
    data: dict[str, Any], source: str = ""
) -> PayrollConfigurationSet:
    """
    Parse a whole rule set from its YAML dict.

    Postconditions:
        - ``checksum`` is ``compute_checksum(data)``.
    Raises:
        ConfigurationError: a required key is missing or a value has the
            wrong shape.  Semantic checks are the validator's job.
    """
    try:
        levels = data["position_levels"]
        return PayrollConfigurationSet(
            config_id=data["config_id"],
            version=data.get("version", 1),
            name=data.get("name", data["config_id"]),
            description=data.get("description", ""),
            effective_from=parse_date(data.get("effective_from")),
            ptkp=parse_ptkp(data["ptkp"]),
            tax_brackets=tuple(
                parse_tax_bracket(b, i) for i, b in enumerate(data["tax_brackets"])
            ),
            position_rules=tuple(parse_position_rule(r) for r in levels["rules"]),
            default_position_level=levels["default"],
            holiday_allowance=tuple(
                parse_allowance_rates(level, rates)
                for level, rates in data["holiday_allowance"].items()
            ),
            policy=parse_policy(data["policy"]),
            checksum=compute_checksum(data),
        )
    except KeyError as e:
        raise ConfigurationError([f"missing required key {e.args[0]!r}"], source) from e
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigurationError([str(e)], source) from e


def load_configuration_set(path: Path) -> PayrollConfigurationSet:
    """Load and parse one YAML rule set file."""
    return parse_configuration_set(load_yaml_file(path), source=str(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums
          (deterministic), regardless of key order.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
