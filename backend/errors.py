"""Error taxonomy shared by the services and the HTTP layer."""


class TrackerError(Exception):
    """Base class for every error the tracker raises on purpose."""


class ValidationError(TrackerError):
    """A single input field failed its constraint. Nothing was changed."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class PersistenceError(TrackerError):
    """The key-value store could not be read or written.

    Raised after the in-memory change has already been applied.
    """


class SummaryGenerationError(TrackerError):
    """The AI collaborator was unreachable, failed, or returned nothing usable."""


class SummaryInProgressError(TrackerError):
    """A summary request is already pending."""


class RecordNotFoundError(TrackerError):
    def __init__(self, record_id: str):
        super().__init__(f"Record {record_id} not found")
        self.record_id = record_id
