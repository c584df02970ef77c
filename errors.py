"""Error taxonomy for the fetcher.

Expected conditions (a claim conflict, an unmapped response line) are not
errors and never raise. Everything here is fatal for the run: ``main`` logs
the cause and exits non-zero.
"""

from __future__ import annotations


class SatfetchError(Exception):
    """Base class for all fatal fetcher errors."""


class ConfigError(SatfetchError):
    """A required setting or environment variable is missing or invalid."""


class CatalogError(SatfetchError):
    """The SATCAT file could not be read or is malformed."""


class FetchError(SatfetchError):
    """Base class for failures inside a batch cycle."""


class ClaimError(FetchError):
    """An output artifact could not be created or written for a reason other than a conflict."""


class TransportError(FetchError):
    """The remote service could not be reached or returned an error status."""


class ResponseParseError(FetchError):
    """A response line does not carry a parsable object identifier."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"Cannot parse NORAD id from response line {line!r}: {reason}")
        self.line = line
