"""Tests for src.reports.renderer -- markdown portfolio report."""

import pytest

from src.analysis.portfolio import Allocation, PortfolioAssembler, PortfolioResult, placeholder_record
from src.analysis.risk_scoring import RiskProfile
from src.reports.renderer import PortfolioReportRenderer, fmt_num, fmt_pct, fmt_ratio

from helpers import FakeProvider, make_answers


def _result(records, matrix, profile=RiskProfile.AGGRESSIVE, score=14):
    return PortfolioResult(
        risk_profile=profile,
        score=score,
        allocation=Allocation(80, 15, 5),
        recommendations=tuple(records),
        correlation_matrix=matrix,
    )


class TestFormatters:

    def test_fmt_num(self):
        assert fmt_num(1234.5) == "$1,234.50"
        assert fmt_num(2.5e9) == "$2.5B"
        assert fmt_num(None) == "N/A"
        assert fmt_num(float("nan")) == "N/A"

    def test_fmt_pct_is_already_percent(self):
        assert fmt_pct(12.345) == "+12.3%"
        assert fmt_pct(-4.0) == "-4.0%"
        assert fmt_pct(None) == "N/A"

    def test_fmt_ratio(self):
        assert fmt_ratio(0.456) == "0.46"
        assert fmt_ratio("x") == "x"


class TestPortfolioReport:

    def test_report_sections(self):
        records = [placeholder_record(s) for s in ("NVDA", "TSLA", "AMD")]
        matrix = [[1.0, 0.82, 0.1], [0.82, 1.0, 0.3], [0.1, 0.3, 1.0]]
        report = PortfolioReportRenderer().render(_result(records, matrix))
        assert report.startswith("# Investment Portfolio Analysis")
        assert "**aggressive**" in report
        assert "| Stocks | 80% |" in report
        assert "| NVDA | NVDA | Unknown | $100.00 | 1.00 | 0.00% | +0.0% |" in report
        assert "| **TSLA** | 0.82 | 1.00 | 0.30 |" in report
        assert "- NVDA / TSLA: 0.82" in report
        assert "## Data Quality" in report

    def test_real_data_report(self):
        result = PortfolioAssembler(provider=FakeProvider()).assemble(make_answers("AAAAA"))
        report = PortfolioReportRenderer().render(result)
        assert "JNJ Corp" in report
        assert "## Data Quality" not in report
        assert "preserving capital" in report

    def test_save_writes_file(self, tmp_path):
        renderer = PortfolioReportRenderer()
        path = renderer.save("# hello", tmp_path / "out" / "report.md")
        assert path.read_text() == "# hello"

    def test_custom_template_dir(self, tmp_path):
        (tmp_path / "mini.md.j2").write_text("{{ profile }}:{{ symbols | join(',') }}")
        renderer = PortfolioReportRenderer(template_dir=tmp_path)
        result = _result([placeholder_record("A"), placeholder_record("B")], [[1.0, 0.0], [0.0, 1.0]])
        assert renderer.render(result, "mini.md.j2") == "aggressive:A,B"

    @pytest.mark.parametrize("profile,goal", [
        (RiskProfile.CONSERVATIVE, "preserving capital"),
        (RiskProfile.MODERATE, "steady growth"),
        (RiskProfile.AGGRESSIVE, "maximising returns"),
    ])
    def test_goal_per_profile(self, profile, goal):
        result = _result([placeholder_record("A")], [[1.0]], profile=profile)
        assert goal in PortfolioReportRenderer().render(result)
