#!/usr/bin/env python3
"""Portfolio Advisor: risk questionnaire -> mock portfolio recommendation.

Usage:
    python main.py questions                                  # list the questionnaire
    python main.py recommend --answers A,B,B,C,B              # answers in question order
    python main.py recommend --answer risk_tolerance=C ...    # answers by question id
    python main.py report --answers C,C,C,C,C                 # markdown report to stdout
    python main.py report --answers A,A,B,A,A --output out.md # ...or to a file
"""

import argparse
import json
import sys
from pathlib import Path

from src.analysis.portfolio import PortfolioAssembler
from src.analysis.questionnaire import QUESTION_IDS, list_questions
from src.config import SETTINGS
from src.errors import InvalidAnswerError
from src.reports.renderer import PortfolioReportRenderer
from src.utils.logger import setup_logger

logger = setup_logger("main", SETTINGS.get("app", {}).get("log_level", "INFO"))

EXIT_INVALID_ANSWERS = 2


def parse_answers(answers: str | None, pairs: list[str] | None) -> dict[str, str]:
    """Merge ``--answers A,B,...`` (question order) and ``--answer id=X`` pairs.

    Only shape errors are caught here; option values are validated by the scorer.
    """
    result: dict[str, str] = {}
    if answers:
        labels = [a.strip() for a in answers.split(",")]
        if len(labels) != len(QUESTION_IDS):
            raise InvalidAnswerError(
                f"expected {len(QUESTION_IDS)} comma-separated answers, got {len(labels)}"
            )
        result.update(zip(QUESTION_IDS, labels))
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep:
            raise InvalidAnswerError(f"expected question_id=option, got {pair!r}")
        result[key.strip()] = value.strip()
    return result


# ============================================================
# COMMANDS
# ============================================================

def cmd_questions(args):
    """Print the questionnaire."""
    for i, q in enumerate(list_questions(), 1):
        print(f"\n{i}. [{q['id']}] {q['text']}")
        for opt in q["options"]:
            print(f"   {opt['label']}) {opt['text']}")


def cmd_recommend(args):
    """Build the portfolio and print it as JSON."""
    answers = parse_answers(args.answers, args.answer)
    result = PortfolioAssembler().assemble(answers)
    print(json.dumps(result.to_dict(), indent=2))


def cmd_report(args):
    """Build the portfolio and render the markdown report."""
    answers = parse_answers(args.answers, args.answer)
    result = PortfolioAssembler().assemble(answers)
    renderer = PortfolioReportRenderer()
    report = renderer.render(result)
    if args.output:
        path = renderer.save(report, Path(args.output))
        print(f"Report saved: {path}")
    else:
        print(report)


def _add_answer_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--answers", default="",
                   help=f"Comma-separated options in order: {', '.join(QUESTION_IDS)}")
    p.add_argument("--answer", action="append", metavar="ID=OPTION",
                   help="Answer a single question by id (repeatable)")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Portfolio Advisor: risk questionnaire to mock portfolio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", help="Commands")

    # questions
    p = sub.add_parser("questions", help="Show the questionnaire")
    p.set_defaults(func=cmd_questions)

    # recommend
    p = sub.add_parser("recommend", help="Portfolio recommendation as JSON")
    _add_answer_args(p)
    p.set_defaults(func=cmd_recommend)

    # report
    p = sub.add_parser("report", help="Markdown portfolio report")
    _add_answer_args(p)
    p.add_argument("--output", default="", help="Write the report to this file")
    p.set_defaults(func=cmd_report)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    try:
        args.func(args)
    except InvalidAnswerError as e:
        logger.error("Invalid answers: %s", e)
        print(f"Invalid answers: {e}", file=sys.stderr)
        return EXIT_INVALID_ANSWERS
    return 0


if __name__ == "__main__":
    sys.exit(main())
