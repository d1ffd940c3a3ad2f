"""Application errors.

Route handlers and the trip access helpers raise these; the handler
registered in ``main.py`` turns them into ``{"error": message}`` responses
with the matching status code.
"""


class LinkError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInput(LinkError):
    status_code = 400
    message = "Invalid request"


class QuotaExceeded(LinkError):
    status_code = 400
    message = "북마크는 최대 5개까지만 가능합니다."


class Unauthenticated(LinkError):
    status_code = 401
    message = "Unauthorized"


class Forbidden(LinkError):
    status_code = 403
    message = "Forbidden"


class NotFound(LinkError):
    status_code = 404
    message = "Not found"


class Conflict(LinkError):
    status_code = 409
    message = "Conflict"


class Unexpected(LinkError):
    status_code = 500


class UpstreamError(LinkError):
    status_code = 502
    message = "Upstream service failed"


class ServiceUnavailable(LinkError):
    status_code = 503
    message = "Service unavailable"
