from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable

from domain.models import (
    CandidateInfo,
    CandidateRecord,
    CandidateStatus,
    ListPage,
    RunConfig,
    RunPhase,
    RunRecord,
    RunStatus,
)
from domain.ports import (
    CandidateRepositoryPort,
    ClockPort,
    EventSinkPort,
    IdGeneratorPort,
    LoggerPort,
    MessageGeneratorPort,
    RecruiterUiPort,
    RunRepositoryPort,
)
from domain.services.diagnostics import DiagnosticsRecorder
from domain.services.message_tuner import MessageTuner
from domain.services.rate_limiter import RateLimiter
from domain.services.run_modes import CandidateWork, RunModeHandler, build_mode_handler

RateLimiterFactory = Callable[[RunConfig], RateLimiter]


@dataclass
class _Counters:
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass
class _Cursor:
    page: ListPage
    position: int = 0
    page_number: int = 1

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.page.items)


class OutreachOrchestrator:
    """
    Drives one outreach run over the recruiter pipeline UI.

    Candidates are processed strictly one at a time in list order. Any
    failure inside a candidate is contained: it is recorded, broadcast and
    followed by a reset of the list to a known state. Only session and
    setup failures end the run with ``status=error``.
    """

    def __init__(
        self,
        *,
        ui: RecruiterUiPort,
        run_repo: RunRepositoryPort,
        candidate_repo: CandidateRepositoryPort,
        generator: MessageGeneratorPort,
        tuner: MessageTuner,
        events: EventSinkPort,
        clock: ClockPort,
        id_generator: IdGeneratorPort,
        logger: LoggerPort,
        diagnostics: DiagnosticsRecorder,
        rate_limiter_factory: RateLimiterFactory | None = None,
    ) -> None:
        self._ui = ui
        self._run_repo = run_repo
        self._candidate_repo = candidate_repo
        self._generator = generator
        self._tuner = tuner
        self._events = events
        self._clock = clock
        self._id_generator = id_generator
        self._logger = logger
        self._diagnostics = diagnostics
        self._rate_limiter_factory = rate_limiter_factory or self._default_rate_limiter
        self._stop_requested = False
        self._phase = RunPhase.IDLE
        self._current_run_id: str | None = None

    @property
    def phase(self) -> RunPhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._current_run_id is not None

    @property
    def current_run_id(self) -> str | None:
        return self._current_run_id

    def request_stop(self) -> None:
        """Ask the loop to stop at the next candidate boundary."""
        if not self.is_running:
            return
        self._stop_requested = True
        self._logger.info("stop_requested", run_id=self._current_run_id)
        self._events.publish("stop_requested", runId=self._current_run_id)

    async def run(self, config: RunConfig) -> RunRecord:
        self._stop_requested = False
        run = RunRecord(
            id=self._id_generator.new_run_id(),
            project_url=config.project_url,
            run_mode=config.run_mode,
            max_candidates=config.max_candidates,
            started_at=self._clock.now(),
        )
        self._run_repo.add(run)
        self._current_run_id = run.id
        self._enter(RunPhase.STARTING)
        self._logger.info(
            "run_started",
            run_id=run.id,
            run_mode=config.run_mode.value,
            max_candidates=config.max_candidates,
        )
        self._events.publish(
            "run_started",
            runId=run.id,
            runMode=config.run_mode.value,
            maxCandidates=config.max_candidates,
        )

        try:
            await self._ui.ensure_session()
            self._enter(RunPhase.AUTHENTICATING)
            await self._ui.ensure_authenticated(config.project_url)
            await self._diagnostics.capture("after-login")

            self._enter(RunPhase.FILTERING)
            if not await self._ui.apply_uncontacted_filter():
                self._logger.info("uncontacted_filter_unavailable", run_id=run.id)
            await self._diagnostics.capture("uncontacted-filter")

            self._enter(RunPhase.LOADING)
            page = await self._ui.load_candidates()
            self._events.publish(
                "candidates_found",
                total=len(page),
                processing=min(len(page), config.max_candidates),
                pageIndicator=page.indicator,
            )
            if not page.items:
                self._logger.info("no_candidates_found", run_id=run.id)
                await self._diagnostics.capture("no-candidates")
                return self._finish(run, RunStatus.COMPLETED)

            run = await self._process_loop(run, config, page)
        except Exception as exc:
            self._logger.error("run_failed", run_id=run.id, error=str(exc))
            latest = self._run_repo.get(run.id) or run
            failed = self._finish(latest, RunStatus.ERROR, error=str(exc))
            self._events.publish("run_error", runId=failed.id, error=str(exc))
            raise

        status = RunStatus.STOPPED if self._stop_requested else RunStatus.COMPLETED
        return self._finish(run, status)

    async def _process_loop(
        self,
        run: RunRecord,
        config: RunConfig,
        page: ListPage,
    ) -> RunRecord:
        handler = build_mode_handler(
            config.run_mode,
            ui=self._ui,
            diagnostics=self._diagnostics,
            logger=self._logger,
        )
        rate_limiter = self._rate_limiter_factory(config)
        counters = _Counters()
        cursor = _Cursor(page=page)
        seen: set[str] = set()

        while counters.processed < config.max_candidates:
            if self._stop_requested:
                self._logger.info("run_stop_honoured", run_id=run.id, processed=counters.processed)
                break

            if cursor.exhausted:
                if not await self._advance_page(cursor):
                    break
                continue

            item = cursor.page.items[cursor.position]
            cursor.position += 1
            self._enter(RunPhase.PROCESSING)

            info = await self._ui.extract_candidate(item)
            key = _dedup_key(info)
            if key is not None:
                if key in seen:
                    self._logger.info("duplicate_candidate_skipped", candidate=info.name)
                    continue
                seen.add(key)

            # Only between two handled candidates.
            if counters.processed > 0:
                self._enter(RunPhase.RATE_LIMITING)
                await rate_limiter.wait()
                if self._stop_requested:
                    self._logger.info("run_stop_honoured", run_id=run.id, processed=counters.processed)
                    break
                self._enter(RunPhase.PROCESSING)

            reset_needed = await self._process_candidate(
                run, config, handler, item, info, counters,
            )
            counters.processed += 1
            run = self._save_counters(run, counters)

            if reset_needed:
                cursor.page = await self._reset_list(config, run.id)
                cursor.position = 0
                cursor.page_number = 1

        return run

    async def _process_candidate(
        self,
        run: RunRecord,
        config: RunConfig,
        handler: RunModeHandler,
        item: Any,
        info: CandidateInfo,
        counters: _Counters,
    ) -> bool:
        """Handle one candidate. Returns True when the list must be reset."""
        index = counters.processed + 1
        self._events.publish(
            "processing_candidate",
            index=index,
            total=config.max_candidates,
            name=info.name,
            headline=info.headline,
        )

        record: CandidateRecord | None = None
        try:
            record = self._create_candidate(run, config, info)

            generated = await self._generator.generate(info, config.outreach_mode)
            tuned = self._tuner.tune(generated.body, generated.subject or None)
            record = self._update_candidate(
                record,
                subject=generated.subject or None,
                message=generated.body,
                tuned_subject=tuned.subject,
                tuned_message=tuned.body,
            )
            self._events.publish(
                "message_generated",
                candidateId=record.id,
                name=info.name,
                subject=tuned.subject or "",
                message=tuned.body,
            )

            if not tuned.body:
                self._update_candidate(
                    record,
                    status=CandidateStatus.SKIPPED,
                    error="Generated message was empty",
                )
                counters.skipped += 1
                self._events.publish("candidate_skipped", candidateId=record.id, name=info.name)
                return False

            outcome = await handler.handle(
                CandidateWork(
                    index=index,
                    item=item,
                    info=info,
                    record=record,
                    generated=generated,
                    tuned=tuned,
                ),
            )
            record = self._update_candidate(record, status=outcome.status)
            counters.succeeded += 1
            if outcome.event:
                self._events.publish(outcome.event, candidateId=record.id, name=info.name)
            return outcome.resets_list
        except Exception as exc:
            counters.failed += 1
            self._logger.error(
                "candidate_processing_failed",
                run_id=run.id,
                candidate=info.name,
                error=str(exc),
            )
            screenshot = await self._diagnostics.capture(f"error-{index}")
            if record is not None:
                self._update_candidate(
                    record,
                    status=CandidateStatus.ERROR,
                    error=str(exc),
                    screenshot_path=screenshot,
                )
            self._events.publish(
                "candidate_error",
                index=index,
                candidateId=record.id if record else None,
                name=info.name,
                error=str(exc),
            )
            return True

    async def _advance_page(self, cursor: _Cursor) -> bool:
        try:
            if not await self._ui.go_to_next_page():
                self._logger.info("no_next_page", page=cursor.page_number)
                return False
            self._enter(RunPhase.LOADING)
            next_page = await self._ui.load_candidates()
        except Exception as exc:
            self._logger.error("page_advance_failed", page=cursor.page_number, error=str(exc))
            return False
        cursor.page = next_page
        cursor.position = 0
        cursor.page_number += 1
        self._events.publish(
            "page_changed",
            page=cursor.page_number,
            candidates=len(cursor.page),
            pageIndicator=cursor.page.indicator,
        )
        return bool(cursor.page.items)

    async def _reset_list(self, config: RunConfig, run_id: str) -> ListPage:
        try:
            page = await self._ui.reset_to_list(config.project_url)
        except Exception as exc:
            self._logger.error("recovery_failed", run_id=run_id, error=str(exc))
            return ListPage()
        self._logger.info("list_reset", run_id=run_id, candidates=len(page))
        return page

    def _create_candidate(
        self,
        run: RunRecord,
        config: RunConfig,
        info: CandidateInfo,
    ) -> CandidateRecord:
        now = self._clock.now()
        record = CandidateRecord(
            id=self._id_generator.new_candidate_id(),
            run_id=run.id,
            name=info.name,
            headline=info.headline,
            profile_url=info.profile_url,
            run_mode=config.run_mode,
            created_at=now,
            updated_at=now,
        )
        self._candidate_repo.add(record)
        return record

    def _update_candidate(self, record: CandidateRecord, **changes: Any) -> CandidateRecord:
        updated = replace(record, updated_at=self._clock.now(), **changes)
        self._candidate_repo.update(updated)
        return updated

    def _save_counters(self, run: RunRecord, counters: _Counters) -> RunRecord:
        updated = replace(
            run,
            processed=counters.processed,
            succeeded=counters.succeeded,
            failed=counters.failed,
            skipped=counters.skipped,
        )
        self._run_repo.update(updated)
        return updated

    def _finish(
        self,
        run: RunRecord,
        status: RunStatus,
        *,
        error: str | None = None,
    ) -> RunRecord:
        self._current_run_id = None
        self._stop_requested = False
        self._enter(RunPhase.FINISHED)
        if run.status.is_terminal:
            return run

        finished = replace(run, status=status, error=error, finished_at=self._clock.now())
        self._run_repo.update(finished)
        self._logger.info(
            "run_finished",
            run_id=finished.id,
            status=status.value,
            processed=finished.processed,
            succeeded=finished.succeeded,
            failed=finished.failed,
            skipped=finished.skipped,
        )
        if status is not RunStatus.ERROR:
            self._events.publish(
                f"run_{status.value}",
                runId=finished.id,
                processed=finished.processed,
                succeeded=finished.succeeded,
                failed=finished.failed,
                skipped=finished.skipped,
            )
        return finished

    def _enter(self, phase: RunPhase) -> None:
        self._phase = phase

    def _default_rate_limiter(self, config: RunConfig) -> RateLimiter:
        return RateLimiter(
            config.rate_limit_min,
            config.rate_limit_max,
            events=self._events,
            logger=self._logger,
        )


def _dedup_key(info: CandidateInfo) -> str | None:
    """Name, or the profile URL when the name could not be read."""
    if info.name and info.name != "Unknown":
        return info.name
    return info.profile_url or None
