"""Domain errors raised by the grafik services.

Every error carries a Polish message meant to be shown to the user as is;
the JSON views turn them into ``{'error': message}`` responses.
"""


class GrafikError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TeamLimitExceeded(GrafikError):
    status_code = 403

    def __init__(self, limit: int):
        super().__init__(f"Osiągnięto limit zespołów ({limit}). Ulepsz plan, aby dodać więcej.")
        self.limit = limit


class EmployeeLimitExceeded(GrafikError):
    status_code = 403

    def __init__(self, limit: int):
        super().__init__(f"Osiągnięto limit pracowników ({limit}). Ulepsz plan, aby dodać więcej.")
        self.limit = limit


class AbsenceConflict(GrafikError):
    status_code = 409

    def __init__(self, conflicting=()):
        super().__init__("Pracownik ma już nieobecność w tym terminie")
        self.conflicting = list(conflicting)


class HolidayApiError(GrafikError):
    status_code = 502


class InvalidPeriod(GrafikError):
    pass


class InvalidSettings(GrafikError):
    """Malformed team settings or employee preferences."""
