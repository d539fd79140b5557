"""Portfolio assembly - risk profile, instruments, allocation and correlation.

One request scores the questionnaire, resolves the profile's symbols and
target allocation, fetches each symbol concurrently and independently
(falling back to a synthetic placeholder on any failure or timeout), then
correlates whatever series were obtained.
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol, Sequence

from src.analysis.correlation import CorrelationEngine, identity_matrix
from src.analysis.risk_scoring import RiskProfile, RiskScorer
from src.config import SETTINGS
from src.data_sources.market_data import CompanyProfile, MarketDataClient
from src.utils.logger import setup_logger

logger = setup_logger("portfolio")

PLACEHOLDER_PRICE = 100.0
PLACEHOLDER_BETA = 1.0
UNKNOWN_SECTOR = "Unknown"
SYNTHETIC_POINTS = 60


class MarketDataProvider(Protocol):
    def get_company_profile(self, symbol: str) -> CompanyProfile: ...

    def get_historical_prices(self, symbol: str, lookback_days: int) -> Sequence[float]: ...


def synthetic_price_curve(n: int = SYNTHETIC_POINTS) -> list[float]:
    """Deterministic placeholder history: p[i] = 100 + 20 sin(i / 10) + i / 2."""
    return [100 + math.sin(i / 10) * 20 + i / 2 for i in range(n)]


def price_change_pct(prices: Sequence[float]) -> float:
    """Percent change from the oldest to the most recent price (oldest first)."""
    if len(prices) < 2 or prices[0] == 0:
        return 0.0
    return (prices[-1] - prices[0]) / prices[0] * 100


# ----------------------------------------------------------------------
#  Static fact table: profile -> symbols + allocation
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Allocation:
    stocks: int
    bonds: int
    cash: int

    def __post_init__(self):
        if min(self.stocks, self.bonds, self.cash) < 0:
            raise ValueError(f"allocation shares must be non-negative: {self}")
        if self.stocks + self.bonds + self.cash != 100:
            raise ValueError(f"allocation must sum to 100: {self}")

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ProfileEntry:
    symbols: tuple[str, ...]
    allocation: Allocation


class ProfileTable:
    """Risk profile -> (symbols, allocation). Every profile must be present."""

    def __init__(self, entries: Mapping[RiskProfile | str, ProfileEntry | Mapping[str, Any]]):
        self._entries: dict[RiskProfile, ProfileEntry] = {}
        for key, entry in entries.items():
            profile = RiskProfile(key)
            if not isinstance(entry, ProfileEntry):
                entry = ProfileEntry(
                    symbols=tuple(str(s).upper() for s in entry["symbols"]),
                    allocation=Allocation(**entry["allocation"]),
                )
            if not entry.symbols:
                raise ValueError(f"profile {profile.value} has no symbols")
            if len(set(entry.symbols)) != len(entry.symbols):
                raise ValueError(f"profile {profile.value} lists a symbol twice")
            self._entries[profile] = entry
        missing = [p.value for p in RiskProfile if p not in self._entries]
        if missing:
            raise ValueError(f"profile table is missing: {', '.join(missing)}")

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None = None) -> "ProfileTable":
        settings = SETTINGS if settings is None else settings
        return cls(settings["profiles"])

    def symbols_for(self, profile: RiskProfile | str) -> tuple[str, ...]:
        return self._entries[RiskProfile(profile)].symbols

    def allocation_for(self, profile: RiskProfile | str) -> Allocation:
        return self._entries[RiskProfile(profile)].allocation


# ----------------------------------------------------------------------
#  Result types
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class InstrumentRecord:
    symbol: str
    name: str
    sector: str
    current_price: float
    beta: float
    dividend_yield: float
    price_change_5y: float
    historical_prices: tuple[float, ...]
    synthetic_profile: bool = False
    synthetic_history: bool = False

    @property
    def is_synthetic(self) -> bool:
        return self.synthetic_profile or self.synthetic_history

    def to_dict(self) -> dict:
        data = asdict(self)
        data["historical_prices"] = list(self.historical_prices)
        return data


def placeholder_record(symbol: str, points: int = SYNTHETIC_POINTS) -> InstrumentRecord:
    """Record used when the provider has nothing for *symbol*."""
    return InstrumentRecord(
        symbol=symbol,
        name=symbol,
        sector=UNKNOWN_SECTOR,
        current_price=PLACEHOLDER_PRICE,
        beta=PLACEHOLDER_BETA,
        dividend_yield=0.0,
        price_change_5y=0.0,
        historical_prices=tuple(synthetic_price_curve(points)),
        synthetic_profile=True,
        synthetic_history=True,
    )


@dataclass(frozen=True)
class PortfolioResult:
    risk_profile: RiskProfile
    score: int
    allocation: Allocation
    recommendations: tuple[InstrumentRecord, ...]
    correlation_matrix: list[list[float]]
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def symbols(self) -> list[str]:
        return [r.symbol for r in self.recommendations]

    def to_dict(self) -> dict:
        return {
            "risk_profile": self.risk_profile.value,
            "score": self.score,
            "allocation": self.allocation.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "correlation_matrix": [list(row) for row in self.correlation_matrix],
            "generated_at": self.generated_at.isoformat(),
        }


# ----------------------------------------------------------------------
#  Assembler
# ----------------------------------------------------------------------

class PortfolioAssembler:
    """Builds a PortfolioResult from questionnaire answers.

    Only invalid answers abort a request (InvalidAnswerError); provider
    failures and timeouts are absorbed per instrument.
    """

    def __init__(
        self,
        provider: MarketDataProvider | None = None,
        table: ProfileTable | None = None,
        scorer: RiskScorer | None = None,
        engine: CorrelationEngine | None = None,
        lookback_days: int | None = None,
        display_points: int | None = None,
        request_timeout: float | None = None,
    ):
        provider_cfg = SETTINGS.get("provider", {})
        portfolio_cfg = SETTINGS.get("portfolio", {})
        self.provider = provider if provider is not None else MarketDataClient()
        self.table = table or ProfileTable.from_settings()
        self.scorer = scorer or RiskScorer()
        self.engine = engine or CorrelationEngine()
        self.lookback_days = lookback_days or provider_cfg.get("lookback_days", 252 * 5)
        self.display_points = display_points or provider_cfg.get("display_points", SYNTHETIC_POINTS)
        self.request_timeout = (
            request_timeout if request_timeout is not None
            else portfolio_cfg.get("request_timeout_seconds", 30)
        )

    def assemble(self, answers: Mapping[str, str]) -> PortfolioResult:
        score = self.scorer.score(answers)
        profile = self.scorer.profile_for_score(score)
        symbols = self.table.symbols_for(profile)
        allocation = self.table.allocation_for(profile)
        logger.info("Risk profile: %s (score=%d) -> %s", profile.value, score, ", ".join(symbols))

        records = self.fetch_records(symbols)
        matrix = self._correlate(records)

        synthetic = [r.symbol for r in records if r.is_synthetic]
        if synthetic:
            logger.warning("Portfolio built with synthetic data for: %s", ", ".join(synthetic))
        logger.info("Portfolio assembled: %s", profile.value)
        return PortfolioResult(
            risk_profile=profile,
            score=score,
            allocation=allocation,
            recommendations=tuple(records),
            correlation_matrix=matrix,
        )

    def fetch_records(self, symbols: Sequence[str]) -> list[InstrumentRecord]:
        """Fetch every symbol concurrently; result order follows *symbols*."""
        records: list[InstrumentRecord | None] = [None] * len(symbols)
        if not symbols:
            return []
        executor = ThreadPoolExecutor(max_workers=len(symbols), thread_name_prefix="instrument")
        try:
            future_to_index = {
                executor.submit(self.build_record, symbol): i for i, symbol in enumerate(symbols)
            }
            try:
                for future in as_completed(future_to_index, timeout=self.request_timeout):
                    i = future_to_index[future]
                    try:
                        records[i] = future.result()
                    except Exception as exc:
                        logger.error("Unexpected error building %s: %s", symbols[i], exc)
            except FuturesTimeoutError:
                pending = [symbols[i] for i, r in enumerate(records) if r is None]
                logger.warning("Request timeout after %.1fs, using placeholders for %s",
                               self.request_timeout, ", ".join(pending))
        finally:
            # Stragglers finish in the background; their results are discarded.
            executor.shutdown(wait=False)

        return [
            record if record is not None else placeholder_record(symbol, self.display_points)
            for symbol, record in zip(symbols, records)
        ]

    def build_record(self, symbol: str) -> InstrumentRecord:
        """Profile + history for one symbol, substituting synthetic data on failure."""
        try:
            profile = self.provider.get_company_profile(symbol)
        except Exception as exc:
            logger.warning("Profile unavailable for %s, using placeholder: %s", symbol, exc)
            return placeholder_record(symbol, self.display_points)

        synthetic_history = False
        try:
            prices = [float(p) for p in self.provider.get_historical_prices(symbol, self.lookback_days)]
            if not prices:
                raise ValueError("empty price history")
            display = prices[-self.display_points:]
            change = price_change_pct(prices)
        except Exception as exc:
            logger.warning("History unavailable for %s, using synthetic curve: %s", symbol, exc)
            display = synthetic_price_curve(self.display_points)
            change = 0.0
            synthetic_history = True

        price = profile.price or 0.0
        dividend_yield = (profile.last_dividend or 0.0) / price * 100 if price > 0 else 0.0
        return InstrumentRecord(
            symbol=symbol,
            name=profile.name or symbol,
            sector=profile.sector or UNKNOWN_SECTOR,
            current_price=float(price),
            beta=float(profile.beta) if profile.beta is not None else PLACEHOLDER_BETA,
            dividend_yield=dividend_yield,
            price_change_5y=change,
            historical_prices=tuple(display),
            synthetic_history=synthetic_history,
        )

    def _correlate(self, records: Sequence[InstrumentRecord]) -> list[list[float]]:
        try:
            return self.engine.build_correlation_matrix(
                [(r.symbol, r.historical_prices) for r in records]
            )
        except Exception as exc:
            logger.error("Correlation failed, using identity matrix: %s", exc)
            return identity_matrix(len(records))
