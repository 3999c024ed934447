from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from domain.models import (
    CandidateInfo,
    CandidateRecord,
    CandidateStatus,
    GeneratedMessage,
    RunMode,
    TunedMessage,
)
from domain.ports import LoggerPort, RecruiterUiPort
from domain.services.diagnostics import DiagnosticsRecorder


@dataclass(frozen=True)
class CandidateWork:
    """Everything a mode handler needs to finish one candidate."""

    index: int
    item: Any
    info: CandidateInfo
    record: CandidateRecord
    generated: GeneratedMessage
    tuned: TunedMessage

    @property
    def subject(self) -> str:
        return self.tuned.subject or self.generated.subject


@dataclass(frozen=True)
class ModeOutcome:
    """
    Result of dispatching a candidate to its run mode.

    ``event`` is published by the orchestrator when set; ``resets_list``
    asks it to reload the candidate list before continuing.
    """

    status: CandidateStatus
    event: str | None = None
    resets_list: bool = False


class RunModeHandler(Protocol):
    async def handle(self, work: CandidateWork) -> ModeOutcome:
        ...


class DryRunHandler:
    """Records the generated message and touches nothing in the UI."""

    async def handle(self, work: CandidateWork) -> ModeOutcome:
        return ModeOutcome(status=CandidateStatus.DRY_RUN)


class ManualReviewHandler:
    """Parks the candidate until an operator approves or skips it."""

    async def handle(self, work: CandidateWork) -> ModeOutcome:
        return ModeOutcome(status=CandidateStatus.PENDING_REVIEW, event="pending_review")


class AutoSendHandler:
    """Opens the composer for the candidate, fills it in and sends."""

    def __init__(
        self,
        *,
        ui: RecruiterUiPort,
        diagnostics: DiagnosticsRecorder,
        logger: LoggerPort,
    ) -> None:
        self._ui = ui
        self._diagnostics = diagnostics
        self._logger = logger

    async def handle(self, work: CandidateWork) -> ModeOutcome:
        await self._ui.open_composer(work.item, work.info.name)
        await self._diagnostics.capture(f"compose-{work.index}")

        if work.subject and not await self._ui.fill_subject(work.subject):
            self._logger.warning("subject_field_missing", candidate=work.info.name)
        await self._ui.fill_body(work.tuned.body)
        await self._diagnostics.capture(f"filled-{work.index}")

        await self._ui.send()
        await self._diagnostics.capture(f"sent-{work.index}")
        self._logger.info("message_sent", candidate=work.info.name)
        return ModeOutcome(status=CandidateStatus.SENT, event="message_sent", resets_list=True)


def build_mode_handler(
    mode: RunMode,
    *,
    ui: RecruiterUiPort,
    diagnostics: DiagnosticsRecorder,
    logger: LoggerPort,
) -> RunModeHandler:
    if mode is RunMode.DRY_RUN:
        return DryRunHandler()
    if mode is RunMode.MANUAL_REVIEW:
        return ManualReviewHandler()
    if mode is RunMode.AUTO_SEND:
        return AutoSendHandler(ui=ui, diagnostics=diagnostics, logger=logger)
    raise ValueError(f"Unsupported run mode: {mode}")
