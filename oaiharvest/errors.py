"""Exception hierarchy raised by the harvester.

Every failure aborts the current harvest; nothing is retried internally.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oaiharvest.formats.base import OAIError


class HarvestError(Exception):
    """Base class for all harvester errors."""


class UnsupportedFormatError(HarvestError):
    """The metadata prefix has no registered parser."""

    def __init__(self, metadata_prefix: str):
        super().__init__(f"unsupported metadata format: {metadata_prefix}")
        self.metadata_prefix = metadata_prefix


class RequestConstructionError(HarvestError, ValueError):
    """A ListRecords request was built without metadataPrefix or resumptionToken."""


class TransportError(HarvestError):
    """Network failure or non-200 response from the repository."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(HarvestError):
    """The response body is not a well-formed OAI-PMH envelope."""


class OAIProtocolError(HarvestError):
    """The repository answered with an OAI-PMH ``error`` element."""

    def __init__(self, error: OAIError):
        super().__init__(f"OAI-PMH error [{error.code}]: {error.message}")
        self.error = error

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message


class CallbackError(HarvestError):
    """The per-page callback raised; the original exception is ``__cause__``."""


class HarvestStopped(Exception):
    """Raise from a callback to end a harvest early.

    The client still reports it as a :class:`CallbackError`, so callers that
    stop on purpose check ``isinstance(err.__cause__, HarvestStopped)``.
    """
