"""
LiqSweep Historical Data Importer
Load OHLC bars from CSV files into validated pandas frames.

Features:
- Header aliases for common exporter formats
- Epoch (seconds or milliseconds) and ISO timestamps
- Validation through the OHLC validator
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from .validator import validate_ohlc_frame
from ..exceptions import DataValidationError

logger = logging.getLogger(__name__)


COLUMN_ALIASES: Dict[str, List[str]] = {
    "timestamp": ["timestamp", "time", "date", "datetime", "open_time"],
    "open": ["open", "o"],
    "high": ["high", "h"],
    "low": ["low", "l"],
    "close": ["close", "c"],
    "volume": ["volume", "vol", "v"],
}

# Epoch values above this are taken as milliseconds
_EPOCH_MS_THRESHOLD = 10 ** 11


def _map_fields(headers: List[str]) -> Dict[str, str]:
    """Map CSV headers to field names."""
    mapping = {}
    headers_lower = {h.lower().strip(): h for h in headers}

    for field, possible_names in COLUMN_ALIASES.items():
        for name in possible_names:
            if name in headers_lower:
                mapping[headers_lower[name]] = field
                break

    return mapping


def parse_timestamps(values: pd.Series) -> pd.DatetimeIndex:
    """Parse epoch seconds, epoch milliseconds or date strings."""
    numeric = pd.to_numeric(values, errors='coerce')
    if numeric.notna().all():
        unit = 'ms' if numeric.abs().max() > _EPOCH_MS_THRESHOLD else 's'
        return pd.DatetimeIndex(pd.to_datetime(numeric, unit=unit, utc=True))

    try:
        return pd.DatetimeIndex(pd.to_datetime(values, utc=True))
    except (ValueError, TypeError) as e:
        raise DataValidationError(f"Cannot parse timestamps: {e}")


def load_ohlc_csv(file_path: Union[str, Path],
                  delimiter: str = ",",
                  tail: Optional[int] = None) -> pd.DataFrame:
    """
    Load an OHLC CSV into a validated frame indexed by UTC timestamp.

    Args:
        file_path: CSV path with a header row
        delimiter: Field delimiter
        tail: Keep only the last N bars

    Returns:
        Validated OHLC(V) frame

    Raises:
        DataValidationError: if required columns are missing or prices are invalid
    """
    path = Path(file_path)
    if not path.exists():
        raise DataValidationError(f"Data file not found: {path}")

    raw = pd.read_csv(path, sep=delimiter)
    mapping = _map_fields(list(raw.columns))
    frame = raw[list(mapping)].rename(columns=mapping)

    if 'timestamp' in frame.columns:
        frame.index = parse_timestamps(frame.pop('timestamp'))
        frame.index.name = 'timestamp'
    else:
        logger.warning(f"No timestamp column in {path}, using row numbers")

    frame = validate_ohlc_frame(frame)
    if tail is not None:
        frame = frame.iloc[-tail:]

    logger.info(f"Loaded {len(frame)} bars from {path}")
    return frame


__all__ = ['COLUMN_ALIASES', 'parse_timestamps', 'load_ohlc_csv']
