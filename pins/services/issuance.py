"""
PIN issuance: direct batch generation, and the request -> approval path where a
super admin's approval creates the batch as a side effect.

Approval flips the request status with a conditional UPDATE and creates the PINs
inside the same transaction: either the request ends ``approved`` with exactly
``quantity`` PINs pointing at it, or nothing changes.
"""
import logging
from datetime import timedelta
from typing import List

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count
from django.utils import timezone

from pins.models import PIN, PINRequest
from pins.services import metrics
from pins.services.codes import unique_codes
from results.models import TERM_CHOICES
from schools import exceptions
from schools.models import School

logger = logging.getLogger(__name__)

TERMS = [value for value, _ in TERM_CHOICES]


def _max_batch() -> int:
    return int(getattr(settings, "PIN_MAX_BATCH", 1000))


def _validate_period(session, term):
    if not session or not str(session).strip():
        raise exceptions.ValidationError("session is required")
    if term not in TERMS:
        raise exceptions.ValidationError(f"term must be one of: {', '.join(TERMS)}")


def _validate_quantity(quantity):
    if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= _max_batch():
        raise exceptions.ValidationError(f"quantity must be between 1 and {_max_batch()}")


def _expiry_days(expiry_days) -> int:
    if expiry_days is None:
        return int(getattr(settings, "PIN_DEFAULT_EXPIRY_DAYS", 90))
    limit = int(getattr(settings, "PIN_MAX_EXPIRY_DAYS", 365))
    if isinstance(expiry_days, bool) or not isinstance(expiry_days, int) or not 1 <= expiry_days <= limit:
        raise exceptions.ValidationError(f"expiry_days must be between 1 and {limit}")
    return expiry_days


def _scoped(qs, school_id):
    return qs if school_id is None else qs.filter(school_id=school_id)


def _taken(candidates):
    return PIN.objects.filter(pin__in=list(candidates)).values_list("pin", flat=True)


def generate_pins(
    *, school_id, session, term, quantity, issuer_id, expiry_days=None, request_id=None, now=None
) -> List[PIN]:
    _validate_period(session, term)
    _validate_quantity(quantity)
    days = _expiry_days(expiry_days)
    if not School.objects.filter(pk=school_id).exists():
        raise exceptions.SchoolNotFound()

    now = now or timezone.now()
    expiry_date = now + timedelta(days=days)
    max_attempts = int(getattr(settings, "PIN_MAX_ATTEMPTS", 3))
    with transaction.atomic():
        codes = unique_codes(quantity, taken=_taken)
        PIN.objects.bulk_create(
            [
                PIN(
                    school_id=school_id,
                    pin=code,
                    session=session,
                    term=term,
                    expiry_date=expiry_date,
                    max_attempts=max_attempts,
                    generated_by_id=issuer_id,
                    request_id=request_id,
                )
                for code in codes
            ]
        )
        pins = list(PIN.objects.filter(pin__in=codes).order_by("id"))
        transaction.on_commit(lambda: metrics.mark_issued(len(pins)))
    logger.info(
        "PIN batch generated",
        extra={"school_id": school_id, "session": session, "term": term, "quantity": len(pins), "request_id": request_id},
    )
    return pins


def list_pins(*, school_id=None, session=None, term=None, is_used=None):
    qs = _scoped(
        PIN.objects.select_related("school", "generated_by").annotate(attempt_count=Count("attempts")), school_id
    )
    if session:
        qs = qs.filter(session=session)
    if term:
        qs = qs.filter(term=term)
    if is_used is not None:
        qs = qs.filter(is_used=is_used)
    return qs.order_by("-created_at", "-id")


def delete_pin(pin_id, *, school_id=None) -> None:
    qs = _scoped(PIN.objects.filter(pk=pin_id), school_id)
    deleted, _ = qs.filter(is_used=False).delete()
    if not deleted:
        if not qs.exists():
            raise exceptions.PinNotFound("PIN not found")
        raise exceptions.InvalidTransitionError("Cannot delete used PIN")


def purge_expired_pins(*, older_than_days=0, now=None) -> int:
    """Delete unused PINs expired for more than ``older_than_days``. Used PINs are kept."""
    cutoff = (now or timezone.now()) - timedelta(days=older_than_days)
    _, per_model = PIN.objects.filter(is_used=False, expiry_date__lt=cutoff).delete()
    deleted = per_model.get(PIN._meta.label, 0)
    logger.info("Expired PINs purged", extra={"deleted": deleted, "older_than_days": older_than_days})
    return deleted


def get_pin_request(request_id, *, school_id=None) -> PINRequest:
    req = _scoped(PINRequest.objects.select_related("school"), school_id).filter(pk=request_id).first()
    if req is None:
        raise exceptions.PinRequestNotFound()
    return req


def list_pin_requests(*, school_id=None, status=None):
    qs = _scoped(PINRequest.objects.select_related("school", "requested_by", "processed_by"), school_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at", "-id")


def request_pins(*, school_id, session, term, quantity, requester_id) -> PINRequest:
    _validate_period(session, term)
    _validate_quantity(quantity)
    period = {"school_id": school_id, "session": session, "term": term}
    if PINRequest.objects.filter(status=PINRequest.PENDING, **period).exists():
        raise exceptions.DuplicatePendingRequest()
    try:
        with transaction.atomic():
            req = PINRequest.objects.create(quantity=quantity, requested_by_id=requester_id, **period)
    except IntegrityError:
        raise exceptions.DuplicatePendingRequest()
    logger.info("PIN request filed", extra={"request_id": req.pk, "school_id": school_id, "quantity": quantity})
    return req


def approve_pin_request(request_id, *, approver_id, expiry_days=None, now=None) -> PINRequest:
    _expiry_days(expiry_days)
    now = now or timezone.now()
    with transaction.atomic():
        req = PINRequest.objects.select_for_update().filter(pk=request_id).first()
        if req is None:
            raise exceptions.PinRequestNotFound()
        claimed = PINRequest.objects.filter(pk=req.pk, status=PINRequest.PENDING).update(
            status=PINRequest.APPROVED, processed_by_id=approver_id, processed_at=now
        )
        if not claimed:
            raise exceptions.InvalidTransitionError(
                "Only pending requests can be approved", current_status=req.status
            )
        pins = generate_pins(
            school_id=req.school_id,
            session=req.session,
            term=req.term,
            quantity=req.quantity,
            issuer_id=approver_id,
            expiry_days=expiry_days,
            request_id=req.pk,
            now=now,
        )
    req.refresh_from_db()
    logger.info("PIN request approved", extra={"request_id": req.pk, "generated": len(pins)})
    return req


def reject_pin_request(request_id, *, approver_id, reason, now=None) -> PINRequest:
    reason = (reason or "").strip()
    if not reason:
        raise exceptions.MissingReason("Rejection reason is required")
    updated = PINRequest.objects.filter(pk=request_id, status=PINRequest.PENDING).update(
        status=PINRequest.REJECTED,
        processed_by_id=approver_id,
        processed_at=now or timezone.now(),
        rejection_reason=reason,
    )
    if not updated:
        current = PINRequest.objects.filter(pk=request_id).values_list("status", flat=True).first()
        if current is None:
            raise exceptions.PinRequestNotFound()
        raise exceptions.InvalidTransitionError("Only pending requests can be rejected", current_status=current)
    logger.info("PIN request rejected", extra={"request_id": request_id})
    return PINRequest.objects.get(pk=request_id)
