"""CLI entry point for chart generation."""

import logging
import sys
from pathlib import Path

from cashflow_sim_jp.charts import plot_asset_trajectory, plot_income_expense
from cashflow_sim_jp.cli import has_corporate_activity
from cashflow_sim_jp.config import build_scenario, create_parser, load_config, resolve
from cashflow_sim_jp.scenario import validate_scenario
from cashflow_sim_jp.synthesis import synthesize


def _build_parser():
    parser = create_parser("キャッシュフロー チャート生成")
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="出力ディレクトリ (default: reports/charts)",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="出力ファイル名のサフィックス（例: a → assets-a.png）",
    )
    return parser


def main():
    parser = _build_parser()
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    config_file = load_config(args.config)
    r = resolve(args, config_file)

    try:
        scenario = build_scenario(r)
        validate_scenario(scenario)
    except (OSError, ValueError) as e:
        print(f"シナリオを読み込めません: {e}", file=sys.stderr)
        raise SystemExit(1)

    info = scenario.basic_info
    print(f"キャッシュフロー計算（{info.start_year}-{info.end_year}年）...", file=sys.stderr)
    records = synthesize(scenario).table()

    path = plot_asset_trajectory(
        records, args.output, name=args.name,
        include_corporate=has_corporate_activity(records),
    )
    print(f"  → {path}", file=sys.stderr)
    path = plot_income_expense(records, args.output, name=args.name)
    print(f"  → {path}", file=sys.stderr)

    print("完了", file=sys.stderr)


if __name__ == "__main__":
    main()
