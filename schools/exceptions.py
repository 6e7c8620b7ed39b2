"""
Errors raised by the result workflow and the PIN lifecycle.

Every error carries an HTTP status, a stable machine code and an optional
payload; the DRF exception handler in ``config.exceptions`` renders them.
None of them is retried internally.
"""


class PlatformError(Exception):
    status_code = 400
    code = "error"
    default_message = "Request could not be processed"

    def __init__(self, message=None, **payload):
        self.message = message or self.default_message
        self.payload = payload
        super().__init__(self.message)

    def as_dict(self) -> dict:
        data = {"success": False, "code": self.code, "message": self.message}
        data.update(self.payload)
        return data


class ValidationError(PlatformError):
    code = "validation_error"
    default_message = "Invalid input"


class MissingReason(ValidationError):
    code = "missing_reason"
    default_message = "A reason is required"


class NotFoundError(PlatformError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class SchoolNotFound(NotFoundError):
    code = "school_not_found"
    default_message = "School not found or inactive"


class StudentNotFound(NotFoundError):
    code = "student_not_found"
    default_message = "Student not found"


class ResultNotFound(NotFoundError):
    code = "result_not_found"
    default_message = "Result not found"


class PinNotFound(NotFoundError):
    code = "pin_not_found"
    default_message = "Invalid PIN or PIN not found for this session/term"


class PinRequestNotFound(NotFoundError):
    code = "pin_request_not_found"
    default_message = "PIN request not found"


class ConflictError(PlatformError):
    status_code = 409
    code = "conflict"
    default_message = "Conflicting record exists"


class DuplicateResult(ConflictError):
    code = "duplicate_result"
    default_message = "Result already exists for this student in this session and term"


class DuplicatePendingRequest(ConflictError):
    code = "duplicate_pending_request"
    default_message = "A pending PIN request already exists for this session and term"


class InvalidTransitionError(PlatformError):
    status_code = 409
    code = "invalid_transition"
    default_message = "Operation not allowed in the current state"


class ForbiddenError(PlatformError):
    status_code = 403
    code = "forbidden"
    default_message = "You are not allowed to perform this action"


class SelfApproval(ForbiddenError):
    code = "self_approval"
    default_message = "Cannot approve your own results"


class PinRedemptionError(PlatformError):
    code = "pin_redemption_error"
    default_message = "PIN could not be redeemed"


class PinExpired(PinRedemptionError):
    code = "pin_expired"
    default_message = "PIN has expired"


class PinAlreadyUsed(PinRedemptionError):
    code = "pin_already_used"
    default_message = "PIN has already been used"


class AttemptsExhausted(PinRedemptionError):
    code = "attempts_exhausted"
    default_message = "Maximum attempts exceeded for this PIN"


class ResultNotApprovedOrMissing(PinRedemptionError):
    status_code = 404
    code = "result_not_approved_or_missing"
    default_message = "Result not found or not yet approved"
