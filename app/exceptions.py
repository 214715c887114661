"""Domain errors raised by the loader, aggregation engine and query cache."""


class EnergyServiceError(Exception):
    """Base class for all service-level errors."""


class ParseError(EnergyServiceError):
    """The reading source is malformed (missing columns, no parsable rows, bad workbook)."""


class LoadError(EnergyServiceError):
    """The bulk load could not complete (source file missing or store unreachable)."""


class InvalidRangeError(EnergyServiceError):
    """An aggregation request has date_from later than date_to."""

    def __init__(self, date_from, date_to) -> None:
        self.date_from = date_from
        self.date_to = date_to
        super().__init__(
            f"date_from ({date_from.isoformat()}) must not be after "
            f"date_to ({date_to.isoformat()})"
        )


class NotFoundError(EnergyServiceError):
    """A single requested resource does not exist."""


class CacheUnavailable(EnergyServiceError):
    """The cache backend failed; callers treat this as a miss."""
