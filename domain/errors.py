"""Error taxonomy shared by the orchestrator and the browser adapters."""

from __future__ import annotations


class OutreachError(RuntimeError):
    pass


class SessionError(OutreachError):
    """Browser launch or navigation failed. Fatal to the run."""


class LoginTimeout(SessionError):
    """The operator did not complete login within the allowed window."""


class SelectorNotFound(OutreachError):
    def __init__(self, role: str) -> None:
        super().__init__(f"No locator matched for role '{role}'")
        self.role = role


class ComposeError(OutreachError):
    """Composer, body field or send control could not be driven."""


class WrongCandidatePanel(ComposeError):
    def __init__(self, expected: str, label: str) -> None:
        super().__init__(
            f"Profile panel shows wrong candidate: \"{label}\" (expected \"{expected}\")"
        )
        self.expected = expected
        self.label = label


class CandidateStateError(OutreachError):
    pass


class RunAlreadyInProgress(OutreachError):
    def __init__(self) -> None:
        super().__init__("A run is already in progress")


__all__ = [
    "OutreachError",
    "SessionError",
    "LoginTimeout",
    "SelectorNotFound",
    "ComposeError",
    "WrongCandidatePanel",
    "CandidateStateError",
    "RunAlreadyInProgress",
]
