"""Appointment domain errors"""


class InvalidBookingRequest(Exception):
    """A booking request violated one or more business rules"""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class IdentifierConflict(Exception):
    """An appointment number could not be claimed on this attempt"""


class DuplicateAppointmentNumber(IdentifierConflict):
    """The unique constraint on appointment_number rejected an insert"""

    def __init__(self, appointment_number: str):
        self.appointment_number = appointment_number
        super().__init__(f"Appointment number {appointment_number} already exists")


class SequenceContention(IdentifierConflict):
    """Another writer advanced the sequence between read and update"""


class AllocationConflict(Exception):
    """No unique appointment number could be allocated within the retry budget"""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not allocate a unique appointment number after {attempts} attempts")
