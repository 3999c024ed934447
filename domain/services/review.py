from __future__ import annotations

from dataclasses import replace

from domain.errors import CandidateStateError
from domain.models import CandidateRecord, CandidateStatus
from domain.ports import (
    CandidateRepositoryPort,
    ClockPort,
    EventSinkPort,
    LoggerPort,
    RecruiterUiPort,
)


class ReviewService:
    """Completes or discards candidates parked in ``pending_review``."""

    def __init__(
        self,
        *,
        ui: RecruiterUiPort,
        candidate_repo: CandidateRepositoryPort,
        events: EventSinkPort,
        clock: ClockPort,
        logger: LoggerPort,
    ) -> None:
        self._ui = ui
        self._candidate_repo = candidate_repo
        self._events = events
        self._clock = clock
        self._logger = logger

    async def approve(self, candidate_id: str) -> CandidateRecord:
        record = self._require(candidate_id)
        if record.status is not CandidateStatus.PENDING_REVIEW:
            raise CandidateStateError(
                f"Candidate {candidate_id} is {record.status.value}, not pending_review",
            )

        body = record.tuned_message or record.message
        if not body:
            raise CandidateStateError(f"Candidate {candidate_id} has no message to send")
        subject = record.tuned_subject or record.subject

        self._logger.info("approve_started", candidate_id=candidate_id, candidate=record.name)
        try:
            await self._ui.ensure_session()
            await self._ui.open_composer_for_profile(record.profile_url or None, record.name)
            if subject and not await self._ui.fill_subject(subject):
                self._logger.warning("subject_field_missing", candidate=record.name)
            await self._ui.fill_body(body)
            await self._ui.send()
            await self._ui.close_any_dialog()
        except Exception as exc:
            self._logger.error(
                "approve_failed",
                candidate_id=candidate_id,
                candidate=record.name,
                error=str(exc),
            )
            self._save(record, status=CandidateStatus.ERROR, error=str(exc))
            self._events.publish(
                "candidate_error",
                candidateId=candidate_id,
                name=record.name,
                error=str(exc),
            )
            raise

        sent = self._save(record, status=CandidateStatus.SENT, error=None)
        self._events.publish("message_sent", candidateId=candidate_id, name=record.name)
        return sent

    def skip(self, candidate_id: str) -> CandidateRecord:
        record = self._require(candidate_id)
        if record.status is CandidateStatus.SENT:
            raise CandidateStateError(f"Candidate {candidate_id} was already sent")
        skipped = self._save(record, status=CandidateStatus.SKIPPED)
        self._logger.info("candidate_skipped", candidate_id=candidate_id)
        self._events.publish("candidate_skipped", candidateId=candidate_id, name=record.name)
        return skipped

    def _require(self, candidate_id: str) -> CandidateRecord:
        record = self._candidate_repo.get(candidate_id)
        if record is None:
            raise CandidateStateError(f"Candidate {candidate_id} not found")
        return record

    def _save(self, record: CandidateRecord, **changes) -> CandidateRecord:
        updated = replace(record, updated_at=self._clock.now(), **changes)
        self._candidate_repo.update(updated)
        return updated
