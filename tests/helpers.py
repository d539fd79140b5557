"""Test helpers: answer builders, synthetic price series and fake providers.

Nothing here touches a network or the file cache.
"""

import threading

import numpy as np

from src.analysis.questionnaire import QUESTION_IDS
from src.data_sources.market_data import CompanyProfile
from src.errors import ProviderUnavailableError


def make_answers(labels: str) -> dict[str, str]:
    """'ABBCB' -> {question_id: label} in questionnaire order."""
    assert len(labels) == len(QUESTION_IDS)
    return dict(zip(QUESTION_IDS, labels))


def make_prices(seed: int, n: int = 300, start: float = 100.0) -> list[float]:
    """Geometric random walk, daily drift ~0.04%, vol ~1.5%."""
    rng = np.random.default_rng(seed)
    log_returns = rng.normal(0.0004, 0.015, n)
    return (start * np.exp(np.cumsum(log_returns))).tolist()


class FakeProvider:
    """In-memory stand-in for MarketDataClient.

    Symbols listed in *fail_profile* / *fail_history* raise
    ProviderUnavailableError; symbols in *block_on* wait for ``release``.
    """

    def __init__(self, histories=None, fail_profile=(), fail_history=(), block_on=()):
        self.histories = histories or {}
        self.fail_profile = set(fail_profile)
        self.fail_history = set(fail_history)
        self.block_on = set(block_on)
        self.release = threading.Event()
        self.calls: list[tuple[str, str]] = []

    def get_company_profile(self, symbol):
        self.calls.append(("profile", symbol))
        if symbol in self.block_on:
            self.release.wait(timeout=5)
        if symbol in self.fail_profile:
            raise ProviderUnavailableError(symbol, "profile endpoint down")
        return CompanyProfile(
            symbol=symbol,
            name=f"{symbol} Corp",
            sector="Technology",
            price=200.0,
            beta=1.2,
            last_dividend=2.0,
        )

    def get_historical_prices(self, symbol, lookback_days):
        self.calls.append(("history", symbol))
        if symbol in self.fail_history:
            raise ProviderUnavailableError(symbol, "history endpoint down")
        if symbol in self.histories:
            return self.histories[symbol]
        return make_prices(sum(map(ord, symbol)))


class OutageProvider:
    """Every call fails, like a total upstream outage."""

    def get_company_profile(self, symbol):
        raise ProviderUnavailableError(symbol, "connection refused")

    def get_historical_prices(self, symbol, lookback_days):
        raise ProviderUnavailableError(symbol, "connection refused")
