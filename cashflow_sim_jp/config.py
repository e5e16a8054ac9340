"""TOML config loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from pathlib import Path

from cashflow_sim_jp.autofill import IncomeAutofill, apply_income_autofill
from cashflow_sim_jp.models import IncomeRole
from cashflow_sim_jp.params import MARITAL_STATUSES, OCCUPATIONS, BasicInfo, Parameters
from cashflow_sim_jp.scenario import Scenario, initialize_scenario, load_scenario

DEFAULT_CONFIG_PATH = Path("config.toml")

DEFAULTS = {
    "current_age": 30,
    "death_age": 80,
    "start_year": 2025,
    "occupation": "company_employee",
    "marital_status": "single",
    "monthly_living_expense": 20.0,
    "wage_income": 0.0,
    "wage_raise_rate": 0.0,
    "inflation_rate": 1.0,
    "education_cost_increase_rate": 1.0,
    "investment_return": 5.0,
    "scenario": "",
}


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"設定ファイルの読み込みに失敗: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    # TOML では scenario = false でシナリオ未指定
    if raw.get("scenario") is False:
        raw["scenario"] = ""
    return raw


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared simulation flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="設定ファイルパス (default: config.toml)")
    parser.add_argument("--scenario", type=str, default=None, help="シナリオJSONファイル（指定時は以下の基本設定より優先）")
    parser.add_argument("--current-age", type=int, default=None, help=f"現在年齢 (default: {d['current_age']})")
    parser.add_argument("--death-age", type=int, default=None, help=f"想定寿命 (default: {d['death_age']})")
    parser.add_argument("--start-year", type=int, default=None, help=f"開始年 (default: {d['start_year']})")
    parser.add_argument("--occupation", type=str, default=None, choices=OCCUPATIONS, help=f"職業 (default: {d['occupation']})")
    parser.add_argument("--marital-status", type=str, default=None, choices=MARITAL_STATUSES, help=f"婚姻状況 (default: {d['marital_status']})")
    parser.add_argument("--monthly-living-expense", type=float, default=None, help=f"月額生活費・万円 (default: {d['monthly_living_expense']})")
    parser.add_argument("--wage-income", type=float, default=None, help=f"給与収入（額面・万円/年）(default: {d['wage_income']})")
    parser.add_argument("--wage-raise-rate", type=float, default=None, help=f"昇給率（%%/年）(default: {d['wage_raise_rate']})")
    parser.add_argument("--inflation-rate", type=float, default=None, help=f"インフレ率（%%）(default: {d['inflation_rate']})")
    parser.add_argument("--education-cost-increase-rate", type=float, default=None, help=f"教育費上昇率（%%）(default: {d['education_cost_increase_rate']})")
    parser.add_argument("--investment-return", type=float, default=None, help=f"運用利回り（%%）(default: {d['investment_return']})")
    parser.add_argument("--log-level", type=str, default="WARNING", help="ログレベル (default: WARNING)")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def build_basic_info(r: dict) -> BasicInfo:
    """Build BasicInfo from resolved config dict."""
    return BasicInfo(
        current_age=r["current_age"],
        death_age=r["death_age"],
        start_year=r["start_year"],
        occupation=r["occupation"],
        marital_status=r["marital_status"],
        monthly_living_expense=r["monthly_living_expense"],
    )


def build_parameters(r: dict) -> Parameters:
    return Parameters(
        inflation_rate=r["inflation_rate"],
        education_cost_increase_rate=r["education_cost_increase_rate"],
        investment_return=r["investment_return"],
    )


def parse_args(description: str) -> tuple[dict, argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_dict, namespace).
    """
    parser = create_parser(description)
    args = parser.parse_args()
    config = load_config(args.config)
    return resolve(args, config), args


def build_scenario(r: dict) -> Scenario:
    """Load the scenario file when given, else seed one from the resolved settings."""
    if r["scenario"]:
        return load_scenario(Path(r["scenario"]))
    info = build_basic_info(r)
    scenario = initialize_scenario(info, build_parameters(r))
    if r["wage_income"] > 0:
        salary = next(
            i for i in scenario.income_data.personal if i.role == IncomeRole.PRIMARY_WAGE
        )
        apply_income_autofill(
            salary,
            IncomeAutofill(
                initial_amount=r["wage_income"],
                start_year=info.start_year,
                end_age=info.work_end_age - 1,
                raise_percentage=r["wage_raise_rate"],
            ),
            info,
        )
    return scenario
