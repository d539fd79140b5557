"""Jinja2-based markdown report for a PortfolioResult."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import numpy as np
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from src.analysis.correlation import CorrelationEngine
from src.analysis.portfolio import PortfolioResult
from src.analysis.risk_scoring import RiskProfile
from src.config import Paths
from src.utils.logger import setup_logger

logger = setup_logger("renderer")

DEFAULT_TEMPLATE = "portfolio_report.md.j2"

PROFILE_GOALS = {
    RiskProfile.CONSERVATIVE: "preserving capital with minimal risk",
    RiskProfile.MODERATE: "steady growth at a moderate level of risk",
    RiskProfile.AGGRESSIVE: "maximising returns while accepting high risk",
}


def fmt_num(val, currency="$") -> str:
    if val is None:
        return "N/A"
    try:
        val = float(val)
    except (TypeError, ValueError):
        return str(val)
    if np.isnan(val):
        return "N/A"
    if abs(val) >= 1e9:
        return f"{currency}{val/1e9:.1f}B"
    elif abs(val) >= 1e6:
        return f"{currency}{val/1e6:.1f}M"
    return f"{currency}{val:,.2f}"


def fmt_pct(val) -> str:
    """Format a value that is already in percent."""
    if val is None:
        return "N/A"
    try:
        return f"{float(val):+.1f}%"
    except (TypeError, ValueError):
        return str(val)


def fmt_ratio(val) -> str:
    if val is None:
        return "N/A"
    try:
        return f"{float(val):.2f}"
    except (TypeError, ValueError):
        return str(val)


class PortfolioReportRenderer:
    """Render a PortfolioResult into markdown using Jinja2 templates."""

    def __init__(self, template_dir: Path | None = None, engine: CorrelationEngine | None = None):
        tpl_dir = template_dir or Paths.REPORTS_TEMPLATES
        self.env = Environment(
            loader=FileSystemLoader(str(tpl_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["fmt_num"] = fmt_num
        self.env.filters["fmt_pct"] = fmt_pct
        self.env.filters["fmt_ratio"] = fmt_ratio
        self.engine = engine or CorrelationEngine()

    def render(self, result: PortfolioResult, template_name: str = DEFAULT_TEMPLATE) -> str:
        records = result.recommendations
        n = len(records)
        template = self.env.get_template(template_name)
        return template.render(
            result=result,
            profile=result.risk_profile.value,
            goal=PROFILE_GOALS[result.risk_profile],
            allocation=result.allocation,
            records=records,
            symbols=result.symbols,
            matrix=result.correlation_matrix,
            high_pairs=self.engine.high_correlation_pairs(result.symbols, result.correlation_matrix),
            avg_beta=sum(r.beta for r in records) / n if n else None,
            avg_dividend=sum(r.dividend_yield for r in records) / n if n else None,
            synthetic=[r.symbol for r in records if r.is_synthetic],
            now=result.generated_at,
        )

    def save(self, report: str, path: Path | None = None, profile: str = "portfolio") -> Path:
        """Write *report* to *path* (default: reports/output/<profile>_<timestamp>.md)."""
        if path is None:
            Paths.REPORTS_OUTPUT.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            path = Paths.REPORTS_OUTPUT / f"{profile}_{timestamp}.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report)
        logger.info("Report saved: %s", path)
        return path
