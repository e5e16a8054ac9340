"""CLI entry point: synthesize a scenario and print the yearly cash-flow table."""

import logging
import sys

from cashflow_sim_jp.config import build_scenario, parse_args
from cashflow_sim_jp.models import CashFlowRecord
from cashflow_sim_jp.scenario import validate_scenario
from cashflow_sim_jp.synthesis import synthesize

# (見出し, フィールド)
PERSONAL_COLUMNS = (
    ("給与", "main_income"),
    ("副収入", "side_income"),
    ("配偶者", "spouse_income"),
    ("年金", "pension_income"),
    ("運用益", "investment_income"),
    ("生活費", "living_expense"),
    ("住居費", "housing_expense"),
    ("教育費", "education_expense"),
    ("返済", "loan_repayment"),
    ("積立", "investment_amount"),
    ("収支", "personal_balance"),
    ("総資産", "personal_total_assets"),
    ("純資産", "personal_net_assets"),
)
CORPORATE_COLUMNS = (
    ("売上", "corporate_income"),
    ("経費", "corporate_expense"),
    ("原価", "corporate_cost"),
    ("税引前", "corporate_pretax_profit"),
    ("法人税等", "corporate_total_tax"),
    ("税引後", "corporate_aftertax_profit"),
    ("総資産", "corporate_total_assets"),
    ("純資産", "corporate_net_assets"),
)


def _print_table(title: str, records: list[CashFlowRecord], columns: tuple[tuple[str, str], ...]):
    print(f"\n【{title}】（万円）")
    header = f"{'年':>6} {'年齢':>4} " + " ".join(f"{label:>9}" for label, _ in columns)
    print(header)
    print("-" * (12 + 10 * len(columns)))
    for record in records:
        row = f"{record.year:>6} {record.age:>4} "
        row += " ".join(f"{getattr(record, key):>10.1f}" for _, key in columns)
        print(row)


def has_corporate_activity(records: list[CashFlowRecord]) -> bool:
    return any(
        r.corporate_income or r.corporate_other_income or r.corporate_expense
        or r.corporate_cost or r.corporate_total_assets
        for r in records
    )


def main():
    """Execute cash-flow synthesis and print the table."""
    r, args = parse_args("個人・法人キャッシュフローシミュレーション")
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        scenario = build_scenario(r)
        validate_scenario(scenario)
    except (OSError, ValueError) as e:
        print(f"シナリオを読み込めません: {e}", file=sys.stderr)
        raise SystemExit(1)

    info = scenario.basic_info
    print(
        f"キャッシュフローシミュレーション（{info.current_age}歳-{info.death_age}歳、"
        f"{info.start_year}-{info.end_year}年）",
        file=sys.stderr,
    )
    records = synthesize(scenario).table()

    _print_table("個人", records, PERSONAL_COLUMNS)
    if has_corporate_activity(records):
        _print_table("法人", records, CORPORATE_COLUMNS)

    last = records[-1]
    print(f"\n{last.age}歳時点の個人純資産: {last.personal_net_assets:,.1f}万円")


if __name__ == "__main__":
    main()
