"""
Application-layer exceptions.

These exceptions are raised by services and mapped to HTTP responses by
the exception handlers registered in backend.main:

- NotFoundError -> 404
- ForbiddenError -> 403
- BadRequestError -> 400
"""


class ApplicationError(Exception):
    """Base class for errors with an HTTP-facing status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ApplicationError):
    """Requested routine, session or set log does not exist."""

    status_code = 404


class ForbiddenError(ApplicationError):
    """Resource exists but belongs to another user."""

    status_code = 403


class BadRequestError(ApplicationError):
    """Request violates a domain rule."""

    status_code = 400


class RoutineNotFoundError(NotFoundError):
    def __init__(self, routine_id: str):
        super().__init__(f"Routine {routine_id} not found")
        self.routine_id = routine_id


class RoutineOwnershipError(ForbiddenError):
    def __init__(self, routine_id: str):
        super().__init__(f"Access denied: you do not own routine {routine_id}")
        self.routine_id = routine_id


class MissingProgramError(BadRequestError):
    def __init__(self, routine_id: str):
        super().__init__(f"Routine {routine_id} does not have program data")


class WeekOutOfRangeError(BadRequestError):
    def __init__(self, week: int, total_weeks: int):
        super().__init__(f"Week {week} out of range [1, {total_weeks}]")
        self.week = week
        self.total_weeks = total_weeks


class TmEventNotAllowedError(BadRequestError):
    """Exercise is not a PROGRAMMED_RTF member of the routine."""

    def __init__(self, reason: str = "TM events are only supported for PROGRAMMED_RTF exercises"):
        super().__init__(reason)


class TmMathMismatchError(BadRequestError):
    def __init__(self, pre_tm_kg: float, delta_kg: float, post_tm_kg: float):
        super().__init__(
            f"TM math mismatch: preTmKg ({pre_tm_kg}) + deltaKg ({delta_kg}) "
            f"!= postTmKg ({post_tm_kg})"
        )


class TmGuardrailError(BadRequestError):
    def __init__(self, delta_kg: float, max_delta_kg: float):
        super().__init__(
            f"TM guardrail rejection: |deltaKg| {abs(delta_kg)} exceeds {max_delta_kg}"
        )
