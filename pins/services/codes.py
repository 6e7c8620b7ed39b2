import secrets
import string
from typing import List, Optional

from django.conf import settings

ALPHABET = string.ascii_uppercase + string.digits
MIN_LENGTH = 12


def code_length() -> int:
    return max(int(getattr(settings, "PIN_CODE_LENGTH", MIN_LENGTH)), MIN_LENGTH)


def new_code(length: Optional[int] = None) -> str:
    length = max(length or code_length(), MIN_LENGTH)
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def unique_codes(quantity: int, taken=None) -> List[str]:
    """
    ``quantity`` distinct random codes. ``taken`` answers which of a set of
    candidates already exist in storage; those are drawn again.
    """
    codes = set()
    while len(codes) < quantity:
        batch = {new_code() for _ in range(quantity - len(codes))} - codes
        if taken is not None and batch:
            batch -= set(taken(batch))
        codes |= batch
    return sorted(codes)
