"""Tests for config loading and CLI > config > default resolution."""

import argparse

import pytest
from cashflow_sim_jp.config import DEFAULTS, build_scenario, create_parser, load_config, resolve
from cashflow_sim_jp.models import IncomeRole
from cashflow_sim_jp.params import BasicInfo
from cashflow_sim_jp.scenario import initialize_scenario, save_scenario


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "none.toml") == {}

    def test_reads_values(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('current_age = 40\noccupation = "self_employed"\nscenario = false\n', encoding="utf-8")
        config = load_config(path)
        assert config["current_age"] == 40
        assert config["occupation"] == "self_employed"
        assert config["scenario"] == ""

    def test_invalid_toml_exits(self, tmp_path, capsys):
        path = tmp_path / "config.toml"
        path.write_text("current_age = = 1\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            load_config(path)
        assert "設定ファイルの読み込みに失敗" in capsys.readouterr().err


class TestResolve:
    def test_priority(self):
        """CLIフラグ > config.toml > デフォルト"""
        args = argparse.Namespace(current_age=35, death_age=None)
        config = {"current_age": 40, "death_age": 90}
        r = resolve(args, config)
        assert r["current_age"] == 35
        assert r["death_age"] == 90
        assert r["inflation_rate"] == DEFAULTS["inflation_rate"]

    def test_parser_flags_map_to_keys(self):
        args = create_parser("test").parse_args(["--monthly-living-expense", "25", "--marital-status", "married"])
        r = resolve(args, {})
        assert r["monthly_living_expense"] == 25
        assert r["marital_status"] == "married"


class TestBuildScenario:
    def _resolved(self, **kw) -> dict:
        r = dict(DEFAULTS)
        r.update(current_age=30, death_age=32, start_year=2025)
        r.update(kw)
        return r

    def test_wage_income_autofilled(self):
        """額面400万（会社員）→ 手取り308万"""
        scenario = build_scenario(self._resolved(wage_income=400))
        salary = next(i for i in scenario.income_data.personal if i.role == IncomeRole.PRIMARY_WAGE)
        assert salary.original_amounts == {2025: 400, 2026: 400, 2027: 400}
        assert salary.amounts[2025] == pytest.approx(308)

    def test_without_wage(self):
        scenario = build_scenario(self._resolved())
        assert scenario.income_data.personal[0].amounts == {}
        assert scenario.parameters.investment_return == DEFAULTS["investment_return"]

    def test_loads_scenario_file(self, tmp_path):
        path = save_scenario(initialize_scenario(BasicInfo(current_age=45)), tmp_path / "s.json")
        scenario = build_scenario(self._resolved(scenario=str(path)))
        assert scenario.basic_info.current_age == 45
