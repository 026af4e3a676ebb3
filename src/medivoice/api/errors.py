class APIError(Exception):
    def __init__(self, code: str, message: str, http_status: int = 400, details: dict = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details


class BadRequestError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("INVALID_INPUT", message, 400, details)


class ValidationError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("INVALID_INPUT", message, 422, details)


class NotFoundError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("NOT_FOUND", message, 404, details)


class UnauthorizedError(APIError):
    def __init__(self, message: str = "Unauthorized", details: dict = None):
        super().__init__("UNAUTHORIZED", message, 401, details)


class RateLimitError(APIError):
    def __init__(self, message: str = "Too many requests", details: dict = None):
        super().__init__("RATE_LIMITED", message, 429, details)


class DownstreamError(APIError):
    def __init__(self, message: str, details: dict = None):
        super().__init__("DOWNSTREAM_ERROR", message, 502, details)


# Domain error code -> HTTP status; codes not listed map to 400
DOMAIN_ERROR_STATUS = {
    "INVALID_INPUT": 400,
    "INVALID_DOCTOR_PROFILE": 400,
    "INVALID_REPORT": 400,
    "SESSION_NOT_FOUND": 404,
    "SESSION_CLOSED": 409,
    "VOICE_PROCESSING_FAILED": 502,
    "REPORT_GENERATION_FAILED": 502,
}
