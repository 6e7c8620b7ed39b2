from typing import Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from schools.models import AdmissionSequence, School


def next_admission_number(school: School, year: Optional[int] = None) -> str:
    """
    Reserve the next admission number for a school, e.g. ``GRV2025007``.
    The per-(school, year) counter row is locked and incremented in the database,
    so concurrent enrolments on several workers never get the same number.
    """
    year = year or timezone.now().year
    with transaction.atomic():
        seq, _ = AdmissionSequence.objects.select_for_update().get_or_create(school=school, year=year)
        AdmissionSequence.objects.filter(pk=seq.pk).update(last_value=F("last_value") + 1)
        seq.refresh_from_db(fields=["last_value"])
    return f"{school.code}{year}{seq.last_value:03d}"
