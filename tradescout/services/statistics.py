"""Statistics primitives used by the detector and the performance tracker.

All functions are pure computation and never raise on degenerate input:
empty or constant data yields 0 instead of NaN or infinity.
"""

from typing import Sequence

import numpy as np

from tradescout.utils.constants import DAILY_RISK_FREE_RATE


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for empty input."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def stddev(values: Sequence[float]) -> float:
    """Population standard deviation (divide by N); 0.0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float), ddof=0))


def zscore(value: float, mean: float, stddev: float) -> float:
    """Number of standard deviations ``value`` lies from ``mean``; 0.0 if stddev is 0."""
    if stddev == 0:
        return 0.0
    return (value - mean) / stddev


def sharpe_ratio(returns: Sequence[float]) -> float:
    """Daily Sharpe ratio against a 2% annual risk-free rate."""
    if len(returns) < 2:
        return 0.0
    sd = stddev(returns)
    if sd == 0:
        return 0.0
    return (mean(returns) - DAILY_RISK_FREE_RATE) / sd


def approximate_percentile(z: float) -> float:
    """Rough lower-tail percentile for a z-score, for human-readable reasoning."""
    if z < -3.0:
        return 0.1
    if z < -2.5:
        return 0.6
    if z < -2.0:
        return 2.5
    if z < -1.5:
        return 7.0
    return 16.0


def max_drawdown(equity_curve: Sequence[float]) -> tuple[float, float]:
    """Largest peak-to-trough decline as (amount, percent of peak)."""
    if len(equity_curve) < 2:
        return 0.0, 0.0
    equity = np.asarray(equity_curve, dtype=float)
    peaks = np.maximum.accumulate(equity)
    drawdowns = peaks - equity
    idx = int(np.argmax(drawdowns))
    amount = float(drawdowns[idx])
    if amount == 0 or peaks[idx] <= 0:
        return amount, 0.0
    return amount, amount / float(peaks[idx]) * 100.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
