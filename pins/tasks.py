import logging

from celery import shared_task
from django.db import DatabaseError
from django.utils.dateparse import parse_datetime

from pins.models import PinAccessLog
from pins.services import issuance

logger = logging.getLogger(__name__)


@shared_task(bind=True, autoretry_for=(DatabaseError,), retry_backoff=5, max_retries=3)
def record_access_attempt(
    self, pin_id, pin_code, school_id, admission_number, ip_address, success, outcome, attempted_at
):
    entry = PinAccessLog.objects.create(
        pin_id=pin_id,
        pin_code=pin_code,
        school_id=school_id,
        admission_number=admission_number or "",
        ip_address=ip_address or None,
        success=success,
        outcome=outcome,
        attempted_at=parse_datetime(attempted_at),
    )
    return entry.id


@shared_task
def purge_expired_pins(days: int = 0):
    deleted = issuance.purge_expired_pins(older_than_days=days)
    logger.info("purge_expired_pins done", extra={"days": days, "deleted_pins": deleted})
    return deleted
