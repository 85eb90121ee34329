from fastapi import HTTPException, status


class ParkShareException(HTTPException):
    code = "error"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An error occurred",
    ):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(ParkShareException):
    code = "not_found"

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidInputError(ParkShareException):
    code = "invalid_input"

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidWindowError(ParkShareException):
    code = "invalid_window"

    def __init__(self, detail: str = "Invalid booking window"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(ParkShareException):
    code = "conflict"

    def __init__(self, detail: str = "Resource conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidTransitionError(ParkShareException):
    code = "invalid_transition"

    def __init__(self, detail: str = "Booking cannot move to the requested status"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class CancellationWindowClosedError(ParkShareException):
    code = "cancellation_window_closed"

    def __init__(self, detail: str = "Bookings cannot be cancelled after they have started"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
