"""
Historical candles from CSV (date,open,high,low,close[,volume], UNIX-second dates)
or from an OHLCV DataFrame as returned by ExecutionClient.get_klines.
"""

from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from kagi_trader.core.types import Candle

logger = logging.getLogger("kagi_trader.data")

PRICE_COLUMNS = ["open", "high", "low", "close"]


def _as_utc(ts: Union[str, datetime, pd.Timestamp, None]) -> Optional[pd.Timestamp]:
    if ts is None:
        return None
    stamp = pd.Timestamp(ts)
    return stamp.tz_localize("UTC") if stamp.tzinfo is None else stamp.tz_convert("UTC")


def filter_range(df: pd.DataFrame, start=None, end=None) -> pd.DataFrame:
    """Keep rows with start < time < end (bounds exclusive, either optional)."""
    start, end = _as_utc(start), _as_utc(end)
    mask = pd.Series(True, index=df.index)
    if start is not None:
        mask &= df["time"] > start
    if end is not None:
        mask &= df["time"] < end
    return df[mask]


def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """DataFrame with columns time, open, high, low, close[, volume] -> candles in row order."""
    has_volume = "volume" in df.columns
    candles = []
    for row in df.itertuples(index=False):
        t = pd.Timestamp(row.time)
        t = t.tz_localize("UTC") if t.tzinfo is None else t.tz_convert("UTC")
        volume = float(row.volume) if has_volume and not pd.isna(row.volume) else None
        candles.append(Candle(
            time=t.to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=volume,
        ))
    return candles


def load_candles_csv(
    path: Union[str, Path],
    start: Union[str, datetime, None] = None,
    end: Union[str, datetime, None] = None,
) -> List[Candle]:
    """
    Read candles from CSV. The first column is the UNIX timestamp in seconds,
    followed by open, high, low, close and an optional volume; extra columns are
    ignored. Duplicate timestamps keep the first row; output is sorted by time.
    """
    df = pd.read_csv(path)
    if len(df.columns) < 5:
        raise ValueError(f"{path}: expected date,open,high,low,close[,volume], got {list(df.columns)}")
    cols = ["date"] + PRICE_COLUMNS + (["volume"] if len(df.columns) > 5 else [])
    df = df.iloc[:, : len(cols)].copy()
    df.columns = cols
    df["time"] = pd.to_datetime(df["date"].astype("int64"), unit="s", utc=True)
    df[PRICE_COLUMNS] = df[PRICE_COLUMNS].astype(float)
    before = len(df)
    df = df.drop_duplicates(subset="time", keep="first").sort_values("time")
    if len(df) != before:
        logger.info("Dropped %d duplicate candles from %s", before - len(df), path)
    df = filter_range(df, start, end)
    logger.info("Loaded %d candles from %s", len(df), path)
    return candles_from_frame(df)
