import logging
import time
from typing import Optional

import redis
from django.conf import settings

logger = logging.getLogger(__name__)

KEYS = ("metrics:pins:issued", "metrics:pins:redeemed", "metrics:pins:failed", "metrics:pins:failures")


def _enabled() -> bool:
    return bool(getattr(settings, "PIN_METRICS_ENABLED", True))


def _client():
    """
    Redis client for counters. Default to CELERY_BROKER_URL if it is Redis, otherwise fallback to localhost.
    """
    url = getattr(settings, "METRICS_REDIS_URL", None) or getattr(settings, "CELERY_BROKER_URL", "redis://localhost:6379/0")
    return redis.Redis.from_url(url, socket_connect_timeout=1, socket_timeout=1)


def _safe_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _run(name, fn):
    # Counters are best effort: a Redis outage must never fail issuance or redemption.
    if not _enabled():
        return
    try:
        fn(_client())
    except redis.RedisError as exc:
        logger.warning("PIN metrics update %s failed: %s", name, exc)


def _ensure_start(cli):
    if not cli.exists("metrics:pins:start"):
        cli.set("metrics:pins:start", time.time())


def reset_metrics():
    cli = _client()
    pipe = cli.pipeline()
    pipe.delete(*KEYS)
    pipe.set("metrics:pins:start", time.time())
    pipe.execute()


def mark_issued(count: int):
    def _apply(cli):
        _ensure_start(cli)
        cli.incrby("metrics:pins:issued", count)

    _run("issued", _apply)


def mark_redeemed():
    def _apply(cli):
        _ensure_start(cli)
        cli.incr("metrics:pins:redeemed")

    _run("redeemed", _apply)


def mark_failed(code: str):
    """Count a failed redemption, broken down by failure code."""

    def _apply(cli):
        _ensure_start(cli)
        pipe = cli.pipeline()
        pipe.incr("metrics:pins:failed")
        pipe.hincrby("metrics:pins:failures", code, 1)
        pipe.execute()

    _run("failed", _apply)


def get_metrics() -> Optional[dict]:
    """
    Returns counters from Redis. If Redis is unreachable, returns None.
    """
    try:
        cli = _client()
        now = time.time()
        redeemed = _safe_int(cli.get("metrics:pins:redeemed"))
        failed = _safe_int(cli.get("metrics:pins:failed"))
        issued = _safe_int(cli.get("metrics:pins:issued"))
        failures = {k.decode(): _safe_int(v) for k, v in cli.hgetall("metrics:pins:failures").items()}
        start_val = cli.get("metrics:pins:start")
    except redis.RedisError:
        return None
    started_at = float(start_val) if start_val else None
    elapsed = round(now - started_at, 2) if started_at else None
    attempts = redeemed + failed
    return {
        "issued": issued,
        "redeemed": redeemed,
        "failed": failed,
        "failures": failures,
        "success_rate": round(redeemed / attempts, 4) if attempts else None,
        "elapsed_seconds": elapsed,
        "redemptions_per_min": round(attempts / elapsed * 60, 2) if elapsed else None,
    }
