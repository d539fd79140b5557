"""Pairwise Pearson correlation of instrument returns.

Degenerate-case policy:
  * fewer than two usable series -> N x N identity (N = instruments passed in)
  * series are truncated to the shortest common length, keeping the most
    recent points (aligned by position, not by trading date)
  * zero variance on either side -> 0.0
  * series that are empty, non-numeric or contain a zero price are excluded
    and correlate 0.0 with everything else
The engine never raises; any failure degrades to the identity matrix.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from src.analysis.returns import build_returns, to_price_array
from src.config import SETTINGS
from src.errors import DegenerateCorrelationInput, DivisionDegenerateError
from src.utils.logger import setup_logger

logger = setup_logger("correlation")

_CORR_CONFIG = SETTINGS.get("correlation", {})


def identity_matrix(n: int) -> list[list[float]]:
    return [[1.0 if i == j else 0.0 for j in range(n)] for i in range(n)]


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation over the common prefix of *x* and *y*.

    Returns 0.0 for empty input and when either side has zero variance.
    """
    n = min(len(x), len(y))
    if n == 0:
        return 0.0
    xa = np.asarray(x[:n], dtype=float)
    ya = np.asarray(y[:n], dtype=float)
    dx = xa - xa.mean()
    dy = ya - ya.mean()
    var_x = float(np.sum(dx * dx))
    var_y = float(np.sum(dy * dy))
    if var_x == 0.0 or var_y == 0.0:
        return 0.0
    corr = float(np.sum(dx * dy)) / (math.sqrt(var_x) * math.sqrt(var_y))
    return max(-1.0, min(1.0, corr))


class CorrelationEngine:
    """Builds a fresh correlation matrix per request."""

    def __init__(self, decimals: int | None = None, high_threshold: float | None = None):
        self.decimals = _CORR_CONFIG.get("decimals", 2) if decimals is None else decimals
        self.high_threshold = (
            _CORR_CONFIG.get("high_threshold", 0.7) if high_threshold is None else high_threshold
        )

    def build_correlation_matrix(
        self, instruments: Sequence[tuple[str, Sequence[float]]],
    ) -> list[list[float]]:
        n = len(instruments)
        try:
            return self._compute(instruments)
        except DegenerateCorrelationInput as exc:
            logger.warning("Correlation fallback to identity: %s", exc)
        except (ArithmeticError, ValueError, TypeError) as exc:
            logger.error("Correlation failed, falling back to identity: %s", exc)
        return identity_matrix(n)

    def _compute(self, instruments) -> list[list[float]]:
        n = len(instruments)
        series: dict[int, np.ndarray] = {}
        for idx, (symbol, prices) in enumerate(instruments):
            try:
                arr = to_price_array(prices)
            except DegenerateCorrelationInput as exc:
                logger.warning("Excluding %s from correlation: %s", symbol, exc)
                continue
            if arr.size:
                series[idx] = arr
        if len(series) < 2:
            raise DegenerateCorrelationInput("fewer than two instruments with price data")

        min_len = min(len(arr) for arr in series.values())
        returns: dict[int, list[float]] = {}
        for idx, arr in series.items():
            try:
                returns[idx] = build_returns(arr[len(arr) - min_len:])
            except DivisionDegenerateError as exc:
                logger.warning("Excluding %s from correlation: %s", instruments[idx][0], exc)
        if len(returns) < 2:
            raise DegenerateCorrelationInput("fewer than two instruments with usable returns")

        matrix = identity_matrix(n)
        for i in range(n):
            for j in range(i + 1, n):
                if i in returns and j in returns:
                    value = round(pearson_correlation(returns[i], returns[j]), self.decimals) + 0.0
                else:
                    value = 0.0
                matrix[i][j] = matrix[j][i] = value
        return matrix

    def high_correlation_pairs(
        self, symbols: Sequence[str], matrix: Sequence[Sequence[float]],
        threshold: float | None = None,
    ) -> list[dict]:
        """Unordered pairs with |rho| above *threshold*, strongest first."""
        threshold = self.high_threshold if threshold is None else threshold
        pairs = [
            {"pair": [symbols[i], symbols[j]], "correlation": float(matrix[i][j])}
            for i in range(len(symbols))
            for j in range(i + 1, len(symbols))
            if abs(matrix[i][j]) > threshold
        ]
        pairs.sort(key=lambda p: abs(p["correlation"]), reverse=True)
        return pairs


def build_correlation_matrix(instruments: Sequence[tuple[str, Sequence[float]]]) -> list[list[float]]:
    return CorrelationEngine().build_correlation_matrix(instruments)
