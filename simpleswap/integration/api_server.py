"""
Minimal read-only HTTP API over a SimpleSwap engine.

Stdlib only. Endpoints:
- GET /health
- GET /price?tokenA=..&tokenB=..
- GET /liquidity?tokenA=..&tokenB=..
- GET /amount-out?amountIn=..&reserveIn=..&reserveOut=..
- GET /balance?owner=..&tokenA=..&tokenB=..
- GET /snapshot

Engine rejections map to HTTP 400 with {"ok": false, "error": "<TAG>"}.
Amounts are rendered as decimal strings so 256-bit values survive JSON
consumers that parse numbers as doubles.

Security posture:
- Default-deny CORS (no wildcard)
- Basic rate limiting (per-IP, token bucket)
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Dict, Mapping, Optional, Sequence, Set, Tuple
from urllib.parse import parse_qs, urlsplit

from ..config import _env_int, _env_str, config_from_env
from ..core.exchange import SimpleSwap
from ..errors import SimpleSwapError
from ..state.tokens import TokenFactory
from .snapshot import snapshot_from_engine

logger = logging.getLogger(__name__)

MAX_QUERY_VALUE_LEN = 128


def _parse_cors_origins(value: str) -> Set[str]:
    """
    Parse a comma-separated CORS origin list. '*' is ignored on purpose:
    operators must list trusted origins.
    """
    out: Set[str] = set()
    for item in (value or "").split(","):
        origin = item.strip()
        if origin and origin != "*":
            out.add(origin)
    return out


@dataclass
class RateLimitBucket:
    tokens: float
    updated_at: float


class TokenBucketRateLimiter:
    """Per-IP token bucket; rpm <= 0 disables limiting."""

    def __init__(self, *, rpm: int, clock: Callable[[], float] = time.monotonic) -> None:
        self._rpm = int(max(0, rpm))
        self._capacity = float(max(1, rpm)) if rpm > 0 else 0.0
        self._refill_per_s = float(rpm) / 60.0 if rpm > 0 else 0.0
        self._buckets: Dict[str, RateLimitBucket] = {}
        self._clock = clock

    def allow(self, key: str) -> bool:
        if self._rpm <= 0:
            return True
        now = self._clock()
        b = self._buckets.get(key)
        if b is None:
            self._buckets[key] = RateLimitBucket(tokens=self._capacity - 1.0, updated_at=now)
            return True
        dt = max(0.0, now - b.updated_at)
        b.tokens = min(self._capacity, b.tokens + dt * self._refill_per_s)
        b.updated_at = now
        if b.tokens >= 1.0:
            b.tokens -= 1.0
            return True
        return False


class BadRequest(Exception):
    pass


def _query_str(params: Mapping[str, list], name: str) -> str:
    values = params.get(name)
    if not values or not values[0]:
        raise BadRequest(f"missing parameter: {name}")
    v = values[0]
    if len(v) > MAX_QUERY_VALUE_LEN:
        raise BadRequest(f"parameter too long: {name}")
    return v


def _query_int(params: Mapping[str, list], name: str) -> int:
    raw = _query_str(params, name)
    if not raw.isdigit():
        raise BadRequest(f"parameter must be a non-negative integer: {name}")
    return int(raw)


def _stringify_ints(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, dict):
        return {k: _stringify_ints(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_stringify_ints(v) for v in value]
    return value


def handle_query(engine: SimpleSwap, path: str, params: Mapping[str, list]) -> Tuple[int, object]:
    """
    Route one GET request. Returns (status, json_body).

    Kept free of HTTP plumbing so it can be exercised directly.
    """
    try:
        if path == "/health":
            return 200, {"status": "healthy", "service": "simpleswap-api"}
        if path == "/price":
            price = engine.get_price(_query_str(params, "tokenA"), _query_str(params, "tokenB"))
            return 200, {"ok": True, "price": str(price), "scale": str(engine.config.price_scale)}
        if path == "/liquidity":
            total = engine.total_liquidity(_query_str(params, "tokenA"), _query_str(params, "tokenB"))
            return 200, {"ok": True, "totalLiquidity": str(total)}
        if path == "/amount-out":
            out = engine.get_amount_out(
                _query_int(params, "amountIn"),
                _query_int(params, "reserveIn"),
                _query_int(params, "reserveOut"),
            )
            return 200, {"ok": True, "amountOut": str(out)}
        if path == "/balance":
            shares = engine.balance_of(
                _query_str(params, "owner"),
                _query_str(params, "tokenA"),
                _query_str(params, "tokenB"),
            )
            return 200, {"ok": True, "shares": str(shares)}
        if path == "/snapshot":
            return 200, _stringify_ints(snapshot_from_engine(engine).to_json_dict())
    except SimpleSwapError as exc:
        return 400, {"ok": False, "error": exc.tag}
    except BadRequest as exc:
        return 400, {"ok": False, "error": "bad_request", "detail": str(exc)}
    return 404, {"ok": False, "error": "not_found"}


class _Handler(BaseHTTPRequestHandler):
    server_version = "SimpleSwapApi/1"
    max_requestline = 8192
    max_headers = 100

    def _client_ip(self) -> str:
        # X-Forwarded-For is not trusted.
        try:
            return str(self.client_address[0])
        except (TypeError, IndexError):
            return "unknown"

    def _allowed_cors_origin_or_none(self) -> Optional[str]:
        allowed: Set[str] = getattr(self.server, "cors_origins")  # type: ignore[attr-defined]
        origin = self.headers.get("Origin")
        if not isinstance(origin, str) or not origin:
            return None
        return origin if origin in allowed else None

    def _write_json(self, status: int, obj: object, *, cors_origin: Optional[str]) -> None:
        body = json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        self.send_response(int(status))
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Cache-Control", "no-store")
        self.send_header("Content-Length", str(len(body)))
        if cors_origin is not None:
            self.send_header("Access-Control-Allow-Origin", cors_origin)
            self.send_header("Vary", "Origin")
        self.end_headers()
        self.wfile.write(body)

    def do_OPTIONS(self) -> None:  # noqa: N802
        cors_origin = self._allowed_cors_origin_or_none()
        self.send_response(204)
        if cors_origin is not None:
            self.send_header("Access-Control-Allow-Origin", cors_origin)
            self.send_header("Access-Control-Allow-Methods", "GET,OPTIONS")
            self.send_header("Access-Control-Allow-Headers", "Content-Type")
            self.send_header("Access-Control-Max-Age", "600")
            self.send_header("Vary", "Origin")
        self.end_headers()

    def do_GET(self) -> None:  # noqa: N802
        limiter: TokenBucketRateLimiter = getattr(self.server, "rate_limiter")  # type: ignore[attr-defined]
        if not limiter.allow(self._client_ip()):
            self._write_json(429, {"ok": False, "error": "rate_limited"}, cors_origin=None)
            return

        cors_origin = self._allowed_cors_origin_or_none()
        parts = urlsplit(self.path or "")
        engine: SimpleSwap = getattr(self.server, "engine")  # type: ignore[attr-defined]
        status, body = handle_query(engine, parts.path, parse_qs(parts.query))
        self._write_json(status, body, cors_origin=cors_origin)

    def log_message(self, fmt: str, *args: object) -> None:
        # Path only: query strings can carry owner addresses.
        msg = fmt % args if args else fmt
        logger.info("%s %s => %s", self.command, (self.path or "").split("?", 1)[0], msg)


def make_server(engine: SimpleSwap, *, host: str, port: int, cors_origins: Set[str], rpm: int) -> ThreadingHTTPServer:
    httpd = ThreadingHTTPServer((host, port), _Handler)
    httpd.engine = engine  # type: ignore[attr-defined]
    httpd.cors_origins = cors_origins  # type: ignore[attr-defined]
    httpd.rate_limiter = TokenBucketRateLimiter(rpm=rpm)  # type: ignore[attr-defined]
    return httpd


def main(argv: Optional[Sequence[str]] = None) -> int:
    _ = argv
    logging.basicConfig(level=_env_str("LOG_LEVEL", "INFO").upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    host = _env_str("API_HOST", "127.0.0.1")
    port = _env_int("API_PORT", 8000, lo=1, hi=65535)
    cors_origins = _parse_cors_origins(_env_str("CORS_ORIGINS", ""))
    rpm = _env_int("RATE_LIMIT_RPM", 600, lo=0, hi=1_000_000)

    engine = SimpleSwap(TokenFactory(), config=config_from_env())
    httpd = make_server(engine, host=host, port=port, cors_origins=cors_origins, rpm=rpm)
    logger.info("simpleswap-api listening on http://%s:%d (cors_origins=%s, rpm=%d)", host, port, sorted(cors_origins), rpm)
    httpd.serve_forever(poll_interval=0.25)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
