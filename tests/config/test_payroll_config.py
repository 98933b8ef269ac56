"""
Tests for loading, validating and compiling payroll rule sets.

Covers:
- The bundled rule set encodes the reference tables
- get_active_config caching and PAYROLL_CONFIG_TRACE
- Table-specific configuration errors, every problem reported
- Warnings for non-fatal oddities
- Deterministic checksums
"""

import copy
from decimal import Decimal

import pytest
import yaml

from payroll_config import (
    DEFAULT_CONFIG_PATH,
    clear_config_cache,
    get_active_config,
    load_engine_config,
)
from payroll_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_configuration_set,
)
from payroll_config.validator import validate_config
from payroll_engines.holiday_allowance import derive_holiday_allowance
from payroll_engines.position_level import PositionLevel
from payroll_kernel.exceptions import (
    ConfigurationError,
    InvalidAllowanceTableError,
    InvalidBracketTableError,
    InvalidPTKPTableError,
)


@pytest.fixture
def default_data() -> dict:
    return copy.deepcopy(load_yaml_file(DEFAULT_CONFIG_PATH))


@pytest.fixture
def write_config(tmp_path):
    def _write(data: dict, name: str = "rules.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


class TestBundledRuleSet:
    """The default YAML carries the reference values."""

    def test_ptkp(self, engine_config):
        assert engine_config.ptkp_table.single == (54_000_000, 58_500_000, 63_000_000, 67_500_000)
        assert engine_config.ptkp_table.married == (58_500_000, 63_000_000, 67_500_000, 72_000_000)

    def test_brackets(self, engine_config):
        brackets = engine_config.bracket_table.brackets
        assert [(b.lower_bound, b.upper_bound, b.rate) for b in brackets] == [
            (0, 60_000_000, Decimal("0.05")),
            (60_000_000, 250_000_000, Decimal("0.15")),
            (250_000_000, 500_000_000, Decimal("0.25")),
            (500_000_000, None, Decimal("0.30")),
        ]

    def test_allowances(self, engine_config):
        staff = engine_config.allowance_table.for_level(PositionLevel.STAFF)
        assert (staff.rice, staff.meat, staff.show) == (400_000, 500_000, 450_000)
        general = engine_config.allowance_table.for_level(PositionLevel.GENERAL)
        assert general.total == 750_000

    def test_position_rules_order(self, engine_config):
        assert [r.level for r in engine_config.position_rules.rules] == [
            PositionLevel.STAFF,
            PositionLevel.OPERATOR,
            PositionLevel.CONTRACT,
        ]
        assert engine_config.position_rules.default == PositionLevel.GENERAL

    def test_policy(self, engine_config):
        policy = engine_config.policy
        assert policy.flat_withholding_rate == Decimal("0.05")
        assert policy.bonus_multiplier == 3
        assert policy.recognized_bonus_multipliers == (1, 2, 3, 4, 6, 12)
        assert policy.position_cost_rate == Decimal("0.05")
        assert policy.position_cost_monthly_cap == 500_000
        assert policy.months_per_year == 12
        assert policy.wage_increase_percentage == Decimal("6.0")
        assert policy.realization_months == 3

    def test_bundled_set_has_no_warnings(self, default_data):
        result = validate_config(parse_configuration_set(default_data))
        assert result.is_valid
        assert result.warnings == []


class TestGetActiveConfig:
    """Single runtime entrypoint."""

    def setup_method(self):
        clear_config_cache()

    def teardown_method(self):
        clear_config_cache()

    def test_cached_per_path(self):
        assert get_active_config() is get_active_config()
        assert get_active_config(DEFAULT_CONFIG_PATH) is get_active_config()

    def test_emits_config_trace(self, captured_logs):
        config = get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_CONFIG_TRACE"]
        assert traces[0]["config_id"] == config.config_id
        assert traces[0]["checksum"] == config.checksum

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")

    def test_custom_path(self, default_data, write_config):
        default_data["config_id"] = "PAYROLL-TEST"
        config = get_active_config(write_config(default_data))
        assert config.config_id == "PAYROLL-TEST"


class TestConfigErrors:
    """Malformed tables are rejected at load time."""

    def test_ptkp_not_increasing(self, default_data, write_config):
        default_data["ptkp"]["single"] = [54_000_000, 50_000_000, 63_000_000, 67_500_000]
        with pytest.raises(InvalidPTKPTableError, match="strictly increase"):
            load_engine_config(write_config(default_data))

    def test_bracket_gap(self, default_data, write_config):
        default_data["tax_brackets"][1]["lower_bound"] = 70_000_000
        with pytest.raises(InvalidBracketTableError, match="must start where"):
            load_engine_config(write_config(default_data))

    def test_bracket_rates_not_increasing(self, default_data, write_config):
        default_data["tax_brackets"][2]["rate"] = "0.10"
        with pytest.raises(InvalidBracketTableError, match="strictly increase"):
            load_engine_config(write_config(default_data))

    def test_allowance_level_missing(self, default_data, write_config):
        del default_data["holiday_allowance"]["contract"]
        with pytest.raises(InvalidAllowanceTableError, match="contract"):
            load_engine_config(write_config(default_data))

    def test_unknown_allowance_level(self, default_data, write_config):
        default_data["holiday_allowance"]["director"] = {"rice": 1, "meat": 1, "show": 1}
        with pytest.raises(InvalidAllowanceTableError, match="director"):
            load_engine_config(write_config(default_data))

    def test_several_sections_raise_base_error(self, default_data, write_config):
        default_data["ptkp"]["married"] = [1, 2, 3]
        default_data["tax_brackets"][0]["lower_bound"] = 5
        with pytest.raises(ConfigurationError) as exc_info:
            load_engine_config(write_config(default_data))
        assert type(exc_info.value) is ConfigurationError
        assert len(exc_info.value.problems) >= 2

    def test_policy_rate_out_of_range(self, default_data, write_config):
        default_data["policy"]["flat_withholding_rate"] = "1.5"
        with pytest.raises(ConfigurationError, match="flat_withholding_rate"):
            load_engine_config(write_config(default_data))

    def test_bad_wage_increase(self, default_data, write_config):
        default_data["policy"]["wage_increase_percentage"] = "6.25"
        with pytest.raises(ConfigurationError, match="wage_increase_percentage"):
            load_engine_config(write_config(default_data))

    def test_unknown_position_level(self, default_data, write_config):
        default_data["position_levels"]["rules"][0]["level"] = "manager"
        with pytest.raises(ConfigurationError, match="manager"):
            load_engine_config(write_config(default_data))

    def test_missing_section(self, default_data, write_config):
        del default_data["tax_brackets"]
        with pytest.raises(ConfigurationError, match="tax_brackets"):
            load_engine_config(write_config(default_data))

    def test_non_numeric_rate(self, default_data, write_config):
        default_data["policy"]["position_cost_rate"] = "five percent"
        with pytest.raises(ConfigurationError, match="position_cost_rate"):
            load_engine_config(write_config(default_data))


class TestConfigWarnings:
    """Non-fatal oddities are warnings, logged, and do not block loading."""

    def test_unrecognized_bonus_multiplier(self, default_data, write_config, captured_logs):
        default_data["policy"]["bonus_multiplier"] = 5
        config = load_engine_config(write_config(default_data))

        assert config.policy.bonus_multiplier == 5
        warnings = [r for r in captured_logs() if r["message"] == "config_validation_warning"]
        assert "bonus_multiplier 5" in warnings[0]["warning"]

    def test_zero_realization_months(self, default_data):
        default_data["policy"]["realization_months"] = 0
        result = validate_config(parse_configuration_set(default_data))
        assert result.is_valid
        assert any("realization_months" in w for w in result.warnings)


class TestChecksum:
    """Deterministic configuration identity."""

    def test_key_order_irrelevant(self):
        assert compute_checksum({"a": 1, "b": [1, 2]}) == compute_checksum({"b": [1, 2], "a": 1})

    def test_content_sensitive(self, default_data):
        changed = copy.deepcopy(default_data)
        changed["policy"]["bonus_multiplier"] = 4
        assert compute_checksum(default_data) != compute_checksum(changed)

    def test_engine_config_checksum_matches_source(self, default_data, engine_config):
        assert engine_config.checksum == compute_checksum(default_data)


class TestPositionLevelRulesFromYaml:
    """Edits to ``position_levels`` reach the derivers."""

    def test_reordered_keywords_change_allowance(
        self, default_data, write_config, make_employee
    ):
        default_data["position_levels"]["rules"][1]["title_keywords"] = ["Mandor", "Pemanen"]
        config = load_engine_config(write_config(default_data))

        record = derive_holiday_allowance(
            employee=make_employee(position="Pemanen", base_salary=4_000_000),
            allowance_table=config.allowance_table,
            withholding_rate=config.policy.flat_withholding_rate,
            rules=config.position_rules,
        )

        assert record.gross_amount == 4_000_000 + 1_050_000
