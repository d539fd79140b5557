"""Risk-tolerance questionnaire: five questions, options A/B/C."""

QUESTIONS: dict[str, dict] = {
    "risk_tolerance": {
        "text": "How would you rate your willingness to take risk when investing?",
        "options": {
            "A": "I prefer minimal risk, even if it limits returns",
            "B": "I accept moderate risk for steady returns",
            "C": "I accept high risk for the chance of high returns",
        },
    },
    "capital_share": {
        "text": "What share of your savings are you ready to invest?",
        "options": {
            "A": "No more than 10%, kept back for emergencies",
            "B": "Between 10% and 30%, for moderate growth of savings",
            "C": "More than 30%, I want to put my capital to full use",
        },
    },
    "volatility_tolerance": {
        "text": "How would you react to a temporary drop in the value of your investments?",
        "options": {
            "A": "I would worry and probably want to sell",
            "B": "It would bother me a little, but I would wait for a recovery",
            "C": "It is part of the strategy, I would wait for growth",
        },
    },
    "financial_goals": {
        "text": "What are your main financial goals?",
        "options": {
            "A": "Preserve capital with minimal risk",
            "B": "Earn a stable income to build a financial cushion",
            "C": "Grow capital as much as possible, even with risk",
        },
    },
    "investment_horizon": {
        "text": "What is your investment horizon?",
        "options": {
            "A": "Less than 3 years, I need the money soon",
            "B": "3 to 10 years, I am aiming for medium-term results",
            "C": "More than 10 years, I have long-term plans",
        },
    },
}

QUESTION_IDS: tuple[str, ...] = tuple(QUESTIONS)


def list_questions() -> list[dict]:
    """Questions in presentation order, as plain dicts for JSON output."""
    return [
        {
            "id": qid,
            "text": q["text"],
            "options": [{"label": label, "text": text} for label, text in q["options"].items()],
        }
        for qid, q in QUESTIONS.items()
    ]
