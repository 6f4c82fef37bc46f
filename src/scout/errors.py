"""
Error taxonomy for the memory engine.

Store errors propagate to the caller, which owns retry policy.
Notification errors are reported as a degraded success by the processor.
"""


class ScoutError(Exception):
    """Base class for all scout errors."""


class MemoryStoreError(ScoutError):
    """The content memory store could not be used."""


class StoreReadError(MemoryStoreError):
    """Querying history (hashes, recent URLs, recent findings) failed."""

    def __init__(self, operation: str, topic: str, message: str):
        super().__init__(f"Memory store read '{operation}' failed for topic \"{topic}\": {message}")
        self.operation = operation
        self.topic = topic


class StoreWriteError(MemoryStoreError):
    """Persisting a content memory record failed."""

    def __init__(self, topic: str, report_id: str, message: str):
        super().__init__(f"Saving content memory for topic \"{topic}\" (report {report_id}) failed: {message}")
        self.topic = topic
        self.report_id = report_id


class NotificationError(ScoutError):
    """Creating a notification failed."""


class NotFoundError(ScoutError):
    def __init__(self, resource: str, id: str | None = None):
        message = f'{resource} with id "{id}" not found' if id else f"{resource} not found"
        super().__init__(message)
        self.resource = resource
        self.id = id


class ValidationError(ScoutError, ValueError):
    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field
