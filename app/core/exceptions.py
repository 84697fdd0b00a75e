"""Application errors rendered as ``{"error": message}`` JSON responses."""


class AppError(Exception):
    """Base error carrying a user-facing message and an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(AppError):
    status_code = 400


class PageFetchError(AppError):
    """Target page could not be fetched for a reason the user can act on."""

    status_code = 400


class ServiceNotConfiguredError(AppError):
    status_code = 500


class EmailDeliveryError(AppError):
    status_code = 500
