"""Chart generation for cash-flow tables."""

import platform
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from cashflow_sim_jp.models import CashFlowRecord

SECTION_COLORS = {
    "personal": "#1f77b4",   # blue
    "corporate": "#ff7f0e",  # orange
}

EXPENSE_COLORS = {
    "living": "#66c2a5",
    "housing": "#8da0cb",
    "education": "#fc8d62",
    "other": "#e5c494",
    "loan": "#a6d854",
    "investment": "#ffd92f",
}


def _setup_japanese_font():
    """Configure matplotlib to use a Japanese font."""
    system = platform.system()
    if system == "Darwin":
        font_family = "Hiragino Sans"
    elif system == "Linux":
        font_family = "Noto Sans CJK JP"
    else:
        font_family = "sans-serif"
    plt.rcParams["font.family"] = font_family
    plt.rcParams["axes.unicode_minus"] = False


def _format_oku_axis(ax: plt.Axes):
    """Add 億円 labels on Y axis (secondary tick labels)."""
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    )
    ax_right = ax.secondary_yaxis("right")
    ax_right.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x / 10000:.1f}億" if x != 0 else "0")
    )
    ax_right.set_ylabel("")


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_asset_trajectory(
    records: list[CashFlowRecord], output_path: Path, name: str = "",
    include_corporate: bool = True,
) -> Path:
    """Line chart of total and net assets per year.

    Args:
        records: cash-flow table in year order.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "a" → "assets-a.png").

    Returns:
        Path to the generated PNG file.
    """
    if not records:
        raise ValueError("No records for asset chart")
    _setup_japanese_font()

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = [r.age for r in records]
    sections = [("personal", "個人")]
    if include_corporate:
        sections.append(("corporate", "法人"))
    for section, label in sections:
        color = SECTION_COLORS[section]
        total = [getattr(r, f"{section}_total_assets") for r in records]
        net = [getattr(r, f"{section}_net_assets") for r in records]
        ax.plot(ages, total, label=f"{label} 総資産", color=color, linewidth=2)
        ax.plot(ages, net, label=f"{label} 純資産", color=color, linewidth=1.5, linestyle="--")

    ax.axhline(0, color="black", linewidth=1.0)
    ax.set_xlabel("年齢")
    ax.set_ylabel("資産（万円）")
    ax.set_title("資産推移")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_oku_axis(ax)
    return _save(fig, output_path, "assets", name)


def plot_income_expense(records: list[CashFlowRecord], output_path: Path, name: str = "") -> Path:
    """Stacked personal expenses against total personal income."""
    if not records:
        raise ValueError("No records for cashflow chart")
    _setup_japanese_font()

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = [r.age for r in records]
    stacks = (
        ("生活費", "living", [r.living_expense for r in records]),
        ("住居費", "housing", [r.housing_expense for r in records]),
        ("教育費", "education", [r.education_expense for r in records]),
        ("その他", "other", [r.other_expense + r.life_event_expense for r in records]),
        ("返済", "loan", [r.loan_repayment for r in records]),
        ("積立", "investment", [r.investment_amount for r in records]),
    )
    ax.stackplot(
        ages,
        *[values for _, _, values in stacks],
        labels=[label for label, _, _ in stacks],
        colors=[EXPENSE_COLORS[key] for _, key, _ in stacks],
        alpha=0.75,
    )
    ax.plot(ages, [r.personal_total_income for r in records], color="#1f77b4", linewidth=2, label="収入合計")
    ax.plot(
        ages, [r.personal_balance for r in records],
        color="#d62728", linewidth=1.8, linestyle="--", label="収支",
    )

    ax.axhline(0, color="black", linewidth=2.0, zorder=5)
    ax.set_xlabel("年齢")
    ax.set_ylabel("年間キャッシュフロー（万円）")
    ax.set_title("個人の収入と支出（年次）")
    ax.legend(loc="upper left", fontsize=9)
    ax.grid(True, alpha=0.3)
    return _save(fig, output_path, "cashflow", name)
