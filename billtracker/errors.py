"""Exceptions raised by the bill tracker core and stores."""


class BillTrackerError(Exception):
    """Base class for bill tracker errors."""

    pass


class InvalidUtilityType(BillTrackerError, ValueError):
    """Raised when a utility filter is not electricity, water or gas."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid utility type: {value!r}. Must be electricity, water, or gas")


class EmptyMessage(BillTrackerError, ValueError):
    """Raised when the advisor is given an empty message."""

    def __init__(self) -> None:
        super().__init__("Message is required")


class BillNotFound(BillTrackerError, LookupError):
    """Raised when a bill id does not exist in the store."""

    def __init__(self, bill_id: object):
        self.bill_id = bill_id
        super().__init__(f"Bill not found: {bill_id}")
