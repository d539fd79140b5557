"""Market data client - company profile and daily close history.

Primary: Financial Modeling Prep REST API | Fallback: yfinance

Every price series leaving this module is chronological (oldest first),
with numeric closes and unique dates. FMP delivers newest first and yfinance
oldest first; both are normalised here so callers never guess the direction.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd
import requests
import yfinance as yf

from src.config import Keys, SETTINGS
from src.errors import ProviderUnavailableError
from src.utils.cache import DataCache
from src.utils.logger import setup_logger
from src.utils.rate_limiter import RateLimiter

logger = setup_logger("market_data")

_PROVIDER_CONFIG = SETTINGS.get("provider", {})
DEFAULT_BASE_URL = _PROVIDER_CONFIG.get("fmp_base_url", "https://financialmodelingprep.com/api/v3")
DEFAULT_LOOKBACK_DAYS = _PROVIDER_CONFIG.get("lookback_days", 252 * 5)
DEFAULT_TIMEOUT = _PROVIDER_CONFIG.get("timeout_seconds", 10)


@dataclass(frozen=True)
class CompanyProfile:
    symbol: str
    name: str | None = None
    sector: str | None = None
    price: float | None = None
    beta: float | None = None
    last_dividend: float | None = None


def _to_float(value) -> float | None:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def normalize_history(rows: list[dict], lookback_days: int | None = None) -> pd.Series:
    """Turn provider rows ``[{"date", "close"}, ...]`` into an ascending close series.

    Rows with unparseable dates or non-numeric, non-finite or non-positive
    closes are dropped, as are duplicate dates (first occurrence wins).
    Only the most recent *lookback_days* points are kept.
    """
    if not rows:
        return pd.Series(dtype=float, name="close")
    df = pd.DataFrame(rows)
    if "date" not in df.columns or "close" not in df.columns:
        raise ValueError("history rows need 'date' and 'close' fields")
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["close"] = pd.to_numeric(df["close"], errors="coerce")
    df = df.dropna(subset=["date", "close"])
    df = df[np.isfinite(df["close"]) & (df["close"] > 0)]
    df = df.drop_duplicates(subset="date", keep="first").sort_values("date")
    series = pd.Series(df["close"].to_numpy(dtype=float), index=pd.DatetimeIndex(df["date"]), name="close")
    if lookback_days:
        series = series.iloc[-lookback_days:]
    return series


class MarketDataClient:
    """Fetch company profiles and historical closes for a symbol."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        use_cache: bool | None = None,
        session: requests.Session | None = None,
        rate_limiter: RateLimiter | None = None,
        use_yfinance: bool = True,
    ):
        self.api_key = Keys.FMP if api_key is None else api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or RateLimiter(_PROVIDER_CONFIG.get("calls_per_minute", 60))
        self.use_yfinance = use_yfinance
        self.profile_cache = DataCache("company_profile", enabled=use_cache)
        self.history_cache = DataCache("price_historical", enabled=use_cache)

    # ------------------------------------------------------------------
    #  Public API
    # ------------------------------------------------------------------
    def get_company_profile(self, symbol: str) -> CompanyProfile:
        """Company name, sector, price, beta and last dividend.

        Raises ProviderUnavailableError when no source returns a profile.
        """
        cached = self.profile_cache.get(symbol)
        if cached is not None:
            logger.info("Cache hit: profile %s", symbol)
            return CompanyProfile(**cached)

        profile = None
        if self.api_key:
            try:
                profile = self._fetch_fmp_profile(symbol)
            except Exception as e:
                logger.warning("FMP profile failed for %s: %s", symbol, e)
        if profile is None and self.use_yfinance:
            try:
                profile = self._fetch_yf_profile(symbol)
            except Exception as e:
                logger.warning("yfinance profile failed for %s: %s", symbol, e)

        if profile is None:
            raise ProviderUnavailableError(symbol, "no company profile from any source")
        self.profile_cache.set(symbol, asdict(profile))
        return profile

    def get_historical_prices(self, symbol: str, lookback_days: int = DEFAULT_LOOKBACK_DAYS) -> pd.Series:
        """Daily closes indexed by date, oldest first.

        Raises ProviderUnavailableError when no source returns usable rows.
        """
        cache_key = f"{symbol}_{lookback_days}"
        rows = self.history_cache.get(cache_key)
        from_cache = rows is not None
        if from_cache:
            logger.info("Cache hit: history %s", cache_key)
        else:
            rows = []
            if self.api_key:
                try:
                    rows = self._fetch_fmp_history(symbol, lookback_days)
                except Exception as e:
                    logger.warning("FMP history failed for %s: %s", symbol, e)
            if not rows and self.use_yfinance:
                try:
                    rows = self._fetch_yf_history(symbol)
                except Exception as e:
                    logger.warning("yfinance history failed for %s: %s", symbol, e)

        try:
            series = normalize_history(rows, lookback_days)
        except ValueError as e:
            raise ProviderUnavailableError(symbol, f"malformed history: {e}") from e
        if series.empty:
            raise ProviderUnavailableError(symbol, "no historical prices from any source")

        if not from_cache:
            self.history_cache.set(cache_key, [
                {"date": d.strftime("%Y-%m-%d"), "close": float(c)} for d, c in series.items()
            ])
        logger.info("Got %d closes for %s (%s to %s)", len(series), symbol,
                    series.index[0].date(), series.index[-1].date())
        return series

    # ------------------------------------------------------------------
    #  Financial Modeling Prep
    # ------------------------------------------------------------------
    def _fmp_get(self, path: str, params: dict | None = None):
        self.rate_limiter.wait()
        resp = self.session.get(
            f"{self.base_url}/{path}",
            params={**(params or {}), "apikey": self.api_key},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def _fetch_fmp_profile(self, symbol: str) -> CompanyProfile | None:
        logger.info("Fetching FMP profile: %s", symbol)
        data = self._fmp_get(f"profile/{symbol}")
        if not data:
            logger.warning("Empty FMP profile for %s", symbol)
            return None
        raw = data[0]
        return CompanyProfile(
            symbol=symbol,
            name=raw.get("companyName"),
            sector=raw.get("sector"),
            price=_to_float(raw.get("price")),
            beta=_to_float(raw.get("beta")),
            last_dividend=_to_float(raw.get("lastDiv")),
        )

    def _fetch_fmp_history(self, symbol: str, lookback_days: int) -> list[dict]:
        logger.info("Fetching FMP history: %s (timeseries=%d)", symbol, lookback_days)
        data = self._fmp_get(f"historical-price-full/{symbol}", {"timeseries": lookback_days})
        historical = (data or {}).get("historical") or []
        return [{"date": day.get("date"), "close": day.get("close")} for day in historical]

    # ------------------------------------------------------------------
    #  yfinance fallback
    # ------------------------------------------------------------------
    def _fetch_yf_profile(self, symbol: str) -> CompanyProfile | None:
        logger.info("yfinance fallback: profile %s", symbol)
        info = yf.Ticker(symbol).info or {}
        price = info.get("currentPrice") or info.get("regularMarketPrice")
        if price is None and not info.get("longName"):
            return None
        return CompanyProfile(
            symbol=symbol,
            name=info.get("longName") or info.get("shortName"),
            sector=info.get("sector"),
            price=_to_float(price),
            beta=_to_float(info.get("beta")),
            last_dividend=_to_float(info.get("dividendRate")),
        )

    def _fetch_yf_history(self, symbol: str) -> list[dict]:
        logger.info("yfinance fallback: history %s", symbol)
        df = yf.Ticker(symbol).history(period="5y", interval="1d", timeout=self.timeout)
        if df is None or df.empty or "Close" not in df.columns:
            return []
        return [
            {"date": idx.strftime("%Y-%m-%d"), "close": close}
            for idx, close in df["Close"].items()
        ]
