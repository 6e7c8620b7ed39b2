"""
Access auditor: one append-only ``PinAccessLog`` row per redemption attempt.

Writes go through a Celery task so the redemption request never waits on them;
a failure to dispatch or to write is logged and dropped, never raised.
"""
import logging

from django.conf import settings

from pins.tasks import record_access_attempt

logger = logging.getLogger(__name__)


def record_attempt(*, pin_code, admission_number, ip_address, success, outcome, attempted_at, pin=None, school=None):
    payload = {
        "pin_id": getattr(pin, "pk", None),
        "pin_code": pin_code,
        "school_id": getattr(school, "pk", None),
        "admission_number": admission_number,
        "ip_address": ip_address,
        "success": success,
        "outcome": outcome,
        "attempted_at": attempted_at.isoformat(),
    }
    try:
        if getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
            res = record_access_attempt.apply(kwargs=payload)
            if res.failed():
                logger.warning("PIN access audit write failed: %s", res.result, extra={"pin_code": pin_code})
        else:
            record_access_attempt.delay(**payload)
    except Exception as exc:
        logger.warning("PIN access audit dispatch failed: %s", exc, extra={"pin_code": pin_code, "outcome": outcome})
