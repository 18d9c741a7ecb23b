"""Error kinds shared by the service layer, the HTTP layer and the client.

Every server-side error carries a stable ``code`` and the HTTP ``status``
the blueprints answer with. Messages are safe to show to end users; they
never include driver or stack details.
"""


class TablebookError(Exception):
    code = "INTERNAL_ERROR"
    status = 500
    message = "Something went wrong."

    def __init__(self, message: str | None = None, details=None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationError(TablebookError):
    code = "VALIDATION_ERROR"
    status = 400
    message = "Invalid input."


class MissingFields(ValidationError):
    code = "MISSING_FIELDS"
    message = "Missing required fields"

    def __init__(self, fields, message: str | None = None):
        self.fields = list(fields)
        super().__init__(message, details=self.fields)


class InvalidDateFormat(ValidationError):
    code = "INVALID_DATE_FORMAT"
    message = "Invalid date format. Use YYYY-MM-DD"


class InvalidTimeFormat(ValidationError):
    code = "INVALID_TIME_FORMAT"
    message = "Invalid time format. Use HH:MM or HH:MM:SS"


class InvalidPartySize(ValidationError):
    code = "INVALID_PARTY_SIZE"
    message = "People count must be a positive integer"


class RestaurantNotFound(TablebookError):
    code = "RESTAURANT_NOT_FOUND"
    status = 404
    message = "Restaurant not found"


class DuplicateReservation(TablebookError):
    code = "DUPLICATE_RESERVATION"
    status = 400
    message = "You already have a reservation for this time slot."


class NotFoundOrUnauthorized(TablebookError):
    # Deliberately the same answer for "missing" and "owned by someone else".
    code = "NOT_FOUND_OR_UNAUTHORIZED"
    status = 404
    message = "Reservation not found or unauthorized"


class StoreUnavailable(TablebookError):
    code = "STORE_UNAVAILABLE"
    status = 500
    message = "The reservation store is unavailable. Try again shortly."


class Unauthenticated(TablebookError):
    code = "UNAUTHENTICATED"
    status = 401
    message = "Access denied. No token provided."


class InvalidToken(Unauthenticated):
    code = "INVALID_TOKEN"
    status = 403
    message = "Invalid or expired token."


class EmailTaken(TablebookError):
    code = "EMAIL_TAKEN"
    status = 409
    message = "An account with this email already exists."


class InvalidCredentials(TablebookError):
    code = "INVALID_CREDENTIALS"
    status = 401
    message = "Invalid email or password."


class ClientError(Exception):
    """Base for failures seen by :class:`tablebook.client.TablebookClient`."""


class NetworkError(ClientError):
    """The server could not be reached or did not answer in time."""


class ApiError(ClientError):
    """The server answered with an error body."""

    def __init__(self, status: int, code: str, message: str):
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{status} {code}: {message}")
