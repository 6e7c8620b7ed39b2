"""
Public result checking: redeem a one-time PIN against an approved result.

The PIN row is read with ``select_for_update`` and consumed with a conditional
UPDATE (``WHERE id = ? AND is_used = false``); only the caller whose UPDATE
touches the row wins. Failures that must leave a trace (the failed attempt
appended when no approved result exists) are returned from the transaction
instead of raised inside it, so they commit before the error reaches the caller.
"""
import logging
from typing import NamedTuple, Optional

from django.db import transaction
from django.utils import timezone

from pins.models import PIN, PinAttempt
from pins.services import audit, metrics
from results.models import Result
from results.services.workflow import find_approved_result
from schools import exceptions
from schools.models import School, Student

logger = logging.getLogger(__name__)


class Redemption(NamedTuple):
    pin: Optional[PIN]
    result: Optional[Result]
    error: Optional[exceptions.PlatformError]


def _approved_result(school, student, session, term):
    return find_approved_result(school_id=school.pk, student_id=student.pk, session=session, term=term)


def _redeem_locked(*, school, student, session, term, pin_code, caller_ip, now) -> Redemption:
    pin = (
        PIN.objects.select_for_update()
        .filter(pin=pin_code, school=school, session=session, term=term)
        .first()
    )
    if pin is None:
        return Redemption(None, None, exceptions.PinNotFound())
    if now > pin.expiry_date:
        return Redemption(pin, None, exceptions.PinExpired())
    if pin.is_used:
        return Redemption(pin, None, exceptions.PinAlreadyUsed(used_by=pin.used_by))
    if pin.attempts.count() >= pin.max_attempts:
        return Redemption(pin, None, exceptions.AttemptsExhausted())

    result = _approved_result(school, student, session, term)
    if result is None:
        PinAttempt.objects.create(
            pin=pin, admission_number=student.admission_number, attempted_at=now, ip_address=caller_ip, success=False
        )
        return Redemption(pin, None, exceptions.ResultNotApprovedOrMissing())

    used_by = {
        "admission_number": student.admission_number,
        "student_name": student.full_name,
        "used_at": now.isoformat(),
        "ip_address": caller_ip,
    }
    claimed = PIN.objects.filter(pk=pin.pk, is_used=False).update(is_used=True, used_by=used_by, updated_at=now)
    if not claimed:
        current = PIN.objects.filter(pk=pin.pk).values_list("used_by", flat=True).first()
        return Redemption(pin, None, exceptions.PinAlreadyUsed(used_by=current))
    PinAttempt.objects.create(
        pin=pin, admission_number=student.admission_number, attempted_at=now, ip_address=caller_ip, success=True
    )
    return Redemption(pin, result, None)


def redeem_pin(*, school_code, admission_number, session, term, pin_code, caller_ip=None) -> Result:
    """
    Validate and consume ``pin_code`` for the student's approved result.

    Raises SchoolNotFound, StudentNotFound, PinNotFound, PinExpired,
    PinAlreadyUsed (with ``used_by``), AttemptsExhausted or
    ResultNotApprovedOrMissing.
    """
    now = timezone.now()
    school = School.objects.filter(code=(school_code or "").strip().upper(), is_active=True).first()
    if school is None:
        raise exceptions.SchoolNotFound()
    admission_number = (admission_number or "").strip().upper()
    student = Student.objects.filter(school=school, admission_number=admission_number, is_active=True).first()
    if student is None:
        raise exceptions.StudentNotFound()

    pin_code = (pin_code or "").strip().upper()
    with transaction.atomic():
        outcome = _redeem_locked(
            school=school,
            student=student,
            session=session,
            term=term,
            pin_code=pin_code,
            caller_ip=caller_ip,
            now=now,
        )

    success = outcome.error is None
    audit.record_attempt(
        pin=outcome.pin,
        pin_code=pin_code,
        school=school,
        admission_number=admission_number,
        ip_address=caller_ip,
        success=success,
        outcome="redeemed" if success else outcome.error.code,
        attempted_at=now,
    )
    if not success:
        metrics.mark_failed(outcome.error.code)
        logger.warning(
            "PIN redemption failed",
            extra={"school_id": school.pk, "pin_id": getattr(outcome.pin, "pk", None), "code": outcome.error.code},
        )
        raise outcome.error
    metrics.mark_redeemed()
    logger.info("PIN redeemed", extra={"school_id": school.pk, "pin_id": outcome.pin.pk, "result_id": outcome.result.pk})
    return outcome.result
