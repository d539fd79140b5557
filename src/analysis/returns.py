"""Simple period returns from a chronological price series."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from src.errors import DegenerateCorrelationInput, DivisionDegenerateError


def to_price_array(prices: Sequence[float]) -> np.ndarray:
    """Coerce *prices* to a 1-D float array, rejecting non-numeric values."""
    try:
        arr = np.asarray(prices, dtype=float)
    except (TypeError, ValueError) as exc:
        raise DegenerateCorrelationInput(f"non-numeric price data: {exc}") from exc
    if arr.ndim != 1:
        raise DegenerateCorrelationInput(f"expected a 1-D price series, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise DegenerateCorrelationInput("price series contains NaN or infinite values")
    return arr


def build_returns(prices: Sequence[float]) -> list[float]:
    """r[i-1] = (p[i] - p[i-1]) / p[i-1].

    Fewer than two prices give an empty list. A zero price followed by another
    point is rejected with DivisionDegenerateError instead of producing inf.
    """
    arr = to_price_array(prices)
    if len(arr) < 2:
        return []
    zeros = np.flatnonzero(arr[:-1] == 0.0)
    if zeros.size:
        raise DivisionDegenerateError(int(zeros[0]))
    return (np.diff(arr) / arr[:-1]).tolist()
