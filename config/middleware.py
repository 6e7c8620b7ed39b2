from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.http import HttpResponse


class SimpleCorsMiddleware:
    """
    Minimal CORS middleware so the public result checker can be called from school websites.
    Origins come from CORS_ALLOWED_ORIGINS; "*" allows all (dev).
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def _allowed_origin(self, origin):
        allowed = getattr(settings, "CORS_ALLOWED_ORIGINS", ["*"])
        if "*" in allowed:
            return "*"
        if origin and origin in allowed:
            return origin
        return None

    def __call__(self, request):
        if request.method == "OPTIONS":
            response = HttpResponse()
        else:
            response = self.get_response(request)

        origin = self._allowed_origin(request.headers.get("Origin"))
        if origin is None:
            return response
        response["Access-Control-Allow-Origin"] = origin
        response["Access-Control-Allow-Methods"] = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
        response["Access-Control-Allow-Headers"] = request.headers.get(
            "Access-Control-Request-Headers", "Content-Type, Authorization"
        )
        if origin != "*":
            response["Access-Control-Allow-Credentials"] = "true"
            response["Vary"] = "Origin"
        return response


def _valid_ip(value):
    value = (value or "").strip()
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return None
    return value


class ClientIpMiddleware:
    """Sets ``request.client_ip`` (first X-Forwarded-For hop when trusted, else REMOTE_ADDR)."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        ip = None
        if getattr(settings, "USE_X_FORWARDED_FOR", False):
            forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
            ip = _valid_ip(forwarded.split(",")[0]) if forwarded else None
        request.client_ip = ip or _valid_ip(request.META.get("REMOTE_ADDR"))
        return self.get_response(request)
