"""Backtesting: candle-by-candle Kagi/WMA simulation and parameter grid search."""

from kagi_trader.backtesting.engine import BacktestSimulator, BacktestResult
from kagi_trader.backtesting.optimize import grid_search

__all__ = ["BacktestSimulator", "BacktestResult", "grid_search"]
