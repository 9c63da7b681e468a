import numpy as np
import pandas as pd
import pytest


def make_frame(rows):
    """rows of (open, high, low, close) on a 4h grid."""
    index = pd.date_range("2024-01-01", periods=len(rows), freq="4h", tz="UTC")
    return pd.DataFrame(rows, columns=["open", "high", "low", "close"], index=index, dtype=float)


def random_walk(n=300, seed=7):
    rng = np.random.default_rng(seed)
    close = 100 + np.cumsum(rng.normal(0, 1.0, n))
    open_ = np.concatenate([[100.0], close[:-1]])
    high = np.maximum(open_, close) + np.abs(rng.normal(0, 0.6, n))
    low = np.minimum(open_, close) - np.abs(rng.normal(0, 0.6, n))
    index = pd.date_range("2024-01-01", periods=n, freq="4h", tz="UTC")
    return pd.DataFrame({"open": open_, "high": high, "low": low, "close": close}, index=index)


@pytest.fixture
def walk():
    return random_walk()


@pytest.fixture
def sweep_series():
    """Flat range, a bullish sweep of the range low on bar 10, then a rally."""
    rows = [(100, 101, 99, 100)] * 10
    rows += [
        (100, 100.5, 98, 100.2),
        (100.2, 103, 100, 102.5),
        (102.5, 108, 102, 107.5),
        (107.5, 108, 107, 107.5),
        (107.5, 108, 107, 107.5),
    ]
    return make_frame(rows)
