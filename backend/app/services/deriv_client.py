"""
Deriv WebSocket API client for OHLC candles (ticks_history, style=candles)
"""
import asyncio
import json
from typing import Any, Callable, Dict, List, Optional

import pandas as pd
import websockets
from websockets.exceptions import WebSocketException

from app.core.config import get_settings
from app.core.errors import UpstreamError
from app.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

PROVIDER = "deriv"
OHLC_COLUMNS = ["open", "high", "low", "close"]


def candles_to_frame(candles: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Convert Deriv candles to a float OHLC DataFrame indexed by UTC time

    Rows with a missing price are dropped; output is sorted oldest first.
    """
    if not candles:
        return pd.DataFrame(columns=OHLC_COLUMNS, index=pd.DatetimeIndex([], tz="UTC", name="time"))

    df = pd.DataFrame(candles)
    for col in OHLC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    df["time"] = pd.to_datetime(df["epoch"].astype(int), unit="s", utc=True)
    df = df.dropna(subset=OHLC_COLUMNS).set_index("time").sort_index()
    return df[OHLC_COLUMNS]


def frame_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """JSON-friendly candle list (ISO timestamps)"""
    return [
        {
            "time": ts.isoformat(),
            "open": float(row["open"]),
            "high": float(row["high"]),
            "low": float(row["low"]),
            "close": float(row["close"]),
        }
        for ts, row in df.iterrows()
    ]


class DerivClient:
    """Opens one short-lived WebSocket connection per request"""

    def __init__(self, connect: Optional[Callable[..., Any]] = None):
        self._settings = None
        self._connect = connect or websockets.connect

    @property
    def settings(self):
        """Lazy load settings"""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def ws_url(self) -> str:
        url = self.settings.deriv_ws_url
        app_id = self.settings.deriv_app_id
        if not app_id:
            return url
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}app_id={app_id}"

    async def _request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        timeout = self.settings.upstream_timeout_seconds
        try:
            async with self._connect(self.ws_url, open_timeout=timeout) as ws:
                await ws.send(json.dumps(payload))
                raw = await asyncio.wait_for(ws.recv(), timeout=timeout)
        except asyncio.TimeoutError:
            raise UpstreamError(f"Deriv API did not answer within {timeout}s", provider=PROVIDER)
        except (OSError, WebSocketException) as e:
            raise UpstreamError(f"Deriv API connection failed: {e}", provider=PROVIDER)

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            raise UpstreamError("Deriv API returned a non-JSON message.", provider=PROVIDER)

        if not isinstance(data, dict):
            raise UpstreamError("Deriv API returned an unexpected message.", provider=PROVIDER)

        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise UpstreamError(f"Deriv API Error: {message}", provider=PROVIDER)
        return data

    async def fetch_candles(
        self,
        symbol: str,
        count: Optional[int] = None,
        granularity: Optional[int] = None
    ) -> pd.DataFrame:
        """
        Request the latest `count` candles of `granularity` seconds for `symbol`

        Raises:
            UpstreamError: connection failure, API error or no candles
        """
        payload = {
            "ticks_history": symbol,
            "style": "candles",
            "granularity": granularity or self.settings.deriv_granularity,
            "count": count or self.settings.deriv_candle_count,
            "end": "latest",
        }
        logger.info(
            "Requesting candles",
            extra={"symbol": symbol, "granularity": payload["granularity"], "count": payload["count"]}
        )

        data = await self._request(payload)
        candles = data.get("candles")
        if candles is None and isinstance(data.get("history"), dict):
            candles = data["history"].get("candles")
        if not candles:
            raise UpstreamError(f"No candles returned for {symbol}", provider=PROVIDER)

        return candles_to_frame(candles)


# Global client instance
_deriv_client: Optional[DerivClient] = None


def get_deriv_client() -> DerivClient:
    """Get global Deriv client instance"""
    global _deriv_client
    if _deriv_client is None:
        _deriv_client = DerivClient()
    return _deriv_client
