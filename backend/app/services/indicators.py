"""
Technical indicators over an OHLC series, computed with the `ta` library
"""
from typing import Dict, Optional

import pandas as pd
import ta
from pydantic import BaseModel, Field

from app.core.errors import InsufficientDataError


class IndicatorSettings(BaseModel):
    """Window lengths passed straight through to `ta`"""
    sma_fast: int = Field(default=20, ge=2)
    sma_slow: int = Field(default=50, ge=2)
    ema_fast: int = Field(default=12, ge=2)
    ema_slow: int = Field(default=26, ge=2)
    macd_signal: int = Field(default=9, ge=2)
    rsi_period: int = Field(default=14, ge=2)
    bollinger_period: int = Field(default=20, ge=2)
    bollinger_std: float = Field(default=2.0, gt=0)
    stoch_k: int = Field(default=14, ge=2)
    stoch_d: int = Field(default=3, ge=1)
    adx_period: int = Field(default=14, ge=2)
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    adx_trending: float = 25.0

    @property
    def min_candles(self) -> int:
        return self.rsi_period + 1


def _last(series: pd.Series) -> Optional[float]:
    if series is None or series.empty:
        return None
    value = series.iloc[-1]
    if pd.isna(value):
        return None
    return float(value)


def compute_indicators(
    df: pd.DataFrame,
    settings: Optional[IndicatorSettings] = None
) -> Dict[str, Optional[float]]:
    """
    Latest value of every indicator for the series

    Args:
        df: DataFrame with float open/high/low/close columns, oldest first
        settings: window lengths (defaults when omitted)

    Returns:
        Flat dict of indicator name -> value; None where the series is
        too short for that particular window.

    Raises:
        InsufficientDataError: fewer candles than the RSI needs
    """
    settings = settings or IndicatorSettings()
    if len(df) < settings.min_candles:
        raise InsufficientDataError(
            f"At least {settings.min_candles} candles are required, got {len(df)}."
        )

    close = df["close"]
    high = df["high"]
    low = df["low"]

    macd = ta.trend.MACD(
        close,
        window_slow=settings.ema_slow,
        window_fast=settings.ema_fast,
        window_sign=settings.macd_signal,
    )
    bollinger = ta.volatility.BollingerBands(
        close,
        window=settings.bollinger_period,
        window_dev=settings.bollinger_std,
    )
    stoch = ta.momentum.StochasticOscillator(
        high,
        low,
        close,
        window=settings.stoch_k,
        smooth_window=settings.stoch_d,
    )

    indicators: Dict[str, Optional[float]] = {
        "close": _last(close),
        "sma_20": _last(ta.trend.sma_indicator(close, window=settings.sma_fast)),
        "sma_50": _last(ta.trend.sma_indicator(close, window=settings.sma_slow)),
        "ema_12": _last(ta.trend.ema_indicator(close, window=settings.ema_fast)),
        "ema_26": _last(ta.trend.ema_indicator(close, window=settings.ema_slow)),
        "rsi": _last(ta.momentum.RSIIndicator(close, window=settings.rsi_period).rsi()),
        "macd": _last(macd.macd()),
        "macd_signal": _last(macd.macd_signal()),
        "macd_histogram": _last(macd.macd_diff()),
        "bb_upper": _last(bollinger.bollinger_hband()),
        "bb_middle": _last(bollinger.bollinger_mavg()),
        "bb_lower": _last(bollinger.bollinger_lband()),
        "stoch_k": _last(stoch.stoch()),
        "stoch_d": _last(stoch.stoch_signal()),
        "adx": None,
        "adx_pos": None,
        "adx_neg": None,
    }

    # ADX smoothing needs two full windows of data
    if len(df) >= 2 * settings.adx_period:
        adx = ta.trend.ADXIndicator(high, low, close, window=settings.adx_period)
        indicators["adx"] = _last(adx.adx())
        indicators["adx_pos"] = _last(adx.adx_pos())
        indicators["adx_neg"] = _last(adx.adx_neg())

    return indicators


def summarise_trend(
    indicators: Dict[str, Optional[float]],
    settings: Optional[IndicatorSettings] = None
) -> Dict[str, str]:
    """Plain-language readings of the latest indicator values"""
    settings = settings or IndicatorSettings()
    readings: Dict[str, str] = {}

    rsi = indicators.get("rsi")
    if rsi is not None:
        if rsi >= settings.rsi_overbought:
            readings["RSI"] = "overbought"
        elif rsi <= settings.rsi_oversold:
            readings["RSI"] = "oversold"
        else:
            readings["RSI"] = "neutral"

    close = indicators.get("close")
    sma = indicators.get("sma_20")
    if close is not None and sma is not None:
        readings["Price vs SMA20"] = "above" if close > sma else "below" if close < sma else "at"

    hist = indicators.get("macd_histogram")
    if hist is not None:
        readings["MACD momentum"] = "bullish" if hist > 0 else "bearish" if hist < 0 else "flat"

    upper, lower = indicators.get("bb_upper"), indicators.get("bb_lower")
    if close is not None and upper is not None and lower is not None:
        if close >= upper:
            readings["Bollinger position"] = "at or above upper band"
        elif close <= lower:
            readings["Bollinger position"] = "at or below lower band"
        else:
            readings["Bollinger position"] = "inside bands"

    adx = indicators.get("adx")
    if adx is not None:
        readings["Trend strength"] = "trending" if adx >= settings.adx_trending else "ranging"

    return readings
