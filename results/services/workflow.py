"""
Result lifecycle: draft -> submitted -> approved | rejected.

Every status change is a conditional UPDATE on the current status
(``filter(pk=..., status__in=...).update(...)``), so two concurrent approvals
or an approval racing an edit can never both win. ``school_id=None`` means
the caller is a super admin and is not pinned to a tenant.
"""
import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from results.models import TERM_CHOICES, Result
from results.services.grading import compute, summarize
from schools import exceptions
from schools.models import Student

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("class_name", "teacher_comment", "principal_comment", "attendance", "position", "total_students")
TERMS = [value for value, _ in TERM_CHOICES]


def _scoped(qs, school_id):
    return qs if school_id is None else qs.filter(school_id=school_id)


def _extra_fields(extra: dict) -> dict:
    unknown = sorted(set(extra) - set(EDITABLE_FIELDS))
    if unknown:
        raise exceptions.ValidationError(f"Fields cannot be set directly: {', '.join(unknown)}")
    return dict(extra)


def get_result(result_id, *, school_id=None) -> Result:
    result = _scoped(Result.objects.select_related("school", "student"), school_id).filter(pk=result_id).first()
    if result is None:
        raise exceptions.ResultNotFound()
    return result


def list_results(*, school_id=None, session=None, term=None, status=None, search=None):
    qs = _scoped(Result.objects.select_related("school", "student"), school_id)
    if session:
        qs = qs.filter(session=session)
    if term:
        qs = qs.filter(term=term)
    if status:
        qs = qs.filter(status=status)
    if search:
        qs = qs.filter(
            Q(student__first_name__icontains=search)
            | Q(student__last_name__icontains=search)
            | Q(student__admission_number__icontains=search)
        )
    return qs.order_by("-created_at", "-id")


def find_approved_result(*, school_id, student_id, session, term) -> Optional[Result]:
    return (
        Result.objects.select_related("school", "student")
        .filter(school_id=school_id, student_id=student_id, session=session, term=term, status=Result.APPROVED)
        .first()
    )


def create_result(*, school_id, student_id, session, term, subjects, uploader_id, **extra) -> Result:
    if not session or not str(session).strip():
        raise exceptions.ValidationError("session is required")
    if term not in TERMS:
        raise exceptions.ValidationError(f"term must be one of: {', '.join(TERMS)}")
    fields = _extra_fields(extra)
    if not Student.objects.filter(pk=student_id, school_id=school_id).exists():
        raise exceptions.StudentNotFound()

    identity = {"school_id": school_id, "student_id": student_id, "session": session, "term": term}
    if Result.objects.filter(**identity).exists():
        raise exceptions.DuplicateResult()
    try:
        with transaction.atomic():
            result = Result.objects.create(subjects=list(subjects or []), uploaded_by_id=uploader_id, **identity, **fields)
    except IntegrityError:
        raise exceptions.DuplicateResult()
    logger.info("Result created", extra={"result_id": result.id, "school_id": school_id, "session": session, "term": term})
    return result


def bulk_create_results(*, school_id, session, term, rows, uploader_id) -> dict:
    """
    Create one draft per row (``{"admission_number", "subjects", ...extras}``).

    Rows are independent: an unknown student, an existing result or bad scores
    fail that row only. Returns ``{"success", "failed", "errors", "result_ids"}``.
    """
    if not session or not str(session).strip():
        raise exceptions.ValidationError("session is required")
    if term not in TERMS:
        raise exceptions.ValidationError(f"term must be one of: {', '.join(TERMS)}")

    report = {"success": 0, "failed": 0, "errors": [], "result_ids": []}
    for number, row in enumerate(rows or [], start=1):
        row = dict(row) if isinstance(row, dict) else {}
        admission_number = str(row.pop("admission_number", "") or "").strip().upper()
        try:
            if not admission_number:
                raise exceptions.ValidationError("Missing admission number")
            student = Student.objects.filter(school_id=school_id, admission_number=admission_number).first()
            if student is None:
                raise exceptions.StudentNotFound(f"Student {admission_number} not found")
            row.setdefault("class_name", student.class_name)
            subjects = row.pop("subjects", None) or []
            if not isinstance(subjects, list):
                raise exceptions.ValidationError("subjects must be a list")
            result = create_result(
                school_id=school_id,
                student_id=student.pk,
                session=session,
                term=term,
                subjects=subjects,
                uploader_id=uploader_id,
                **row,
            )
        except exceptions.DuplicateResult:
            report["failed"] += 1
            report["errors"].append(f"Row {number}: Result already exists for {admission_number}")
        except exceptions.PlatformError as exc:
            report["failed"] += 1
            report["errors"].append(f"Row {number}: {exc.message}")
        else:
            report["success"] += 1
            report["result_ids"].append(result.pk)
    logger.info(
        "Bulk result upload",
        extra={"school_id": school_id, "session": session, "term": term, "created": report["success"], "failed": report["failed"]},
    )
    return report


def update_result(result_id, *, school_id=None, subjects=None, **extra) -> Result:
    """Edit content of a non-approved result. Status is left as is (a rejected result stays rejected)."""
    changes = _extra_fields(extra)
    if subjects is not None:
        graded = compute(subjects)
        total_score, average_score = summarize(graded)
        changes.update(subjects=graded, total_score=total_score, average_score=average_score)

    qs = _scoped(Result.objects.filter(pk=result_id), school_id)
    updated = qs.exclude(status=Result.APPROVED).update(updated_at=timezone.now(), **changes)
    if not updated:
        if not qs.exists():
            raise exceptions.ResultNotFound()
        raise exceptions.InvalidTransitionError("Cannot update approved result", current_status=Result.APPROVED)
    return get_result(result_id)


def _transition(result_id, *, school_id, allowed, action, blocked=None, **changes) -> Result:
    """
    ``blocked`` is an optional ``(lookup, error)`` pair: rows matching ``lookup`` are left
    untouched by the same UPDATE and ``error`` is raised for them.
    """
    qs = _scoped(Result.objects.filter(pk=result_id), school_id)
    candidates = qs.filter(status__in=allowed)
    if blocked is not None:
        candidates = candidates.exclude(**blocked[0])
    updated = candidates.update(updated_at=timezone.now(), **changes)
    if not updated:
        current = qs.values_list("status", flat=True).first()
        if current is None:
            raise exceptions.ResultNotFound()
        if blocked is not None and current in allowed:
            raise blocked[1]
        raise exceptions.InvalidTransitionError(
            f"Only {' or '.join(allowed)} results can be {action}", current_status=current
        )
    logger.info("Result %s", action, extra={"result_id": result_id, "status": changes.get("status")})
    return get_result(result_id)


def submit_result(result_id, *, school_id=None) -> Result:
    return _transition(
        result_id, school_id=school_id, allowed=[Result.DRAFT], action="submitted", status=Result.SUBMITTED
    )


def approve_result(result_id, *, approver_id, school_id=None) -> Result:
    """Staff never approve results they uploaded themselves."""
    return _transition(
        result_id,
        school_id=school_id,
        allowed=[Result.SUBMITTED],
        action="approved",
        blocked=({"uploaded_by_id": approver_id}, exceptions.SelfApproval()),
        status=Result.APPROVED,
        approved_by_id=approver_id,
        approved_at=timezone.now(),
    )


def reject_result(result_id, *, reason, school_id=None) -> Result:
    reason = (reason or "").strip()
    if not reason:
        raise exceptions.MissingReason("Rejection reason is required")
    return _transition(
        result_id,
        school_id=school_id,
        allowed=[Result.SUBMITTED],
        action="rejected",
        status=Result.REJECTED,
        rejection_reason=reason,
    )


def reopen_result(result_id, *, school_id=None) -> Result:
    """Explicit way back to draft for a rejected result."""
    return _transition(
        result_id,
        school_id=school_id,
        allowed=[Result.REJECTED],
        action="reopened",
        status=Result.DRAFT,
        rejection_reason="",
    )


def delete_result(result_id, *, school_id=None) -> None:
    qs = _scoped(Result.objects.filter(pk=result_id), school_id)
    deleted, _ = qs.exclude(status=Result.APPROVED).delete()
    if not deleted:
        if not qs.exists():
            raise exceptions.ResultNotFound()
        raise exceptions.InvalidTransitionError("Cannot delete approved result", current_status=Result.APPROVED)
    logger.info("Result deleted", extra={"result_id": result_id})
