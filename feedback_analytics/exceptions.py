"""Project-wide custom exception types."""


class InvalidSnapshotError(ValueError):
    """Raised when a snapshot record is missing a grouping dimension or is malformed."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field
