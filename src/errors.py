"""Exception taxonomy shared by the scoring, data and statistics layers."""


class InvalidAnswerError(ValueError):
    """Questionnaire answers are incomplete or use an unknown option."""


class ProviderUnavailableError(RuntimeError):
    """Market data could not be obtained for a single symbol."""

    def __init__(self, symbol: str, reason: str):
        super().__init__(f"{symbol}: {reason}")
        self.symbol = symbol
        self.reason = reason


class DivisionDegenerateError(ArithmeticError):
    """A zero price makes the following simple return undefined."""

    def __init__(self, index: int):
        super().__init__(f"zero price at position {index}, return undefined")
        self.index = index


class DegenerateCorrelationInput(ValueError):
    """Price data is too short or non-numeric for a real correlation."""
