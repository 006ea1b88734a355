"""Error kinds raised by the practice core and its collaborators."""

from __future__ import annotations


class CaseCoachError(Exception):
    """Base class for recoverable casecoach failures."""


class NoActiveSession(CaseCoachError):
    """Timer or completion requested while no case type is selected."""

    def __init__(self, message: str = "No case session active. Open a case type first.") -> None:
        super().__init__(message)


class MissingCredential(CaseCoachError):
    """AI request attempted without a stored API key."""

    def __init__(self, message: str = "No API key saved. Add one in Settings first.") -> None:
        super().__init__(message)


class RemoteRequestFailed(CaseCoachError):
    """The chat-completion endpoint answered with an error or could not be reached."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class PersistenceUnavailable(CaseCoachError):
    """Durable storage could not be read or written."""


class CatalogUnavailable(CaseCoachError):
    """A catalog file override could not be read or failed validation."""
