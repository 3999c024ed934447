from __future__ import annotations

import asyncio
from typing import Any, Sequence

from domain.errors import RunAlreadyInProgress
from domain.models import (
    CandidateRecord,
    CandidateStatus,
    EngineStatus,
    RunConfig,
    RunHistory,
    RunRecord,
)
from domain.ports import (
    CandidateRepositoryPort,
    ConfigProviderPort,
    LoggerPort,
    RecruiterUiPort,
    RunRepositoryPort,
)
from domain.services.outreach_run import OutreachOrchestrator
from domain.services.review import ReviewService


class OutreachFacade:
    """
    Control plane shared by the CLI and the Telegram bot.

    Runs execute as a background task so the caller stays responsive to
    ``stop_run`` and ``status``. Only one run, and no approval, may drive
    the browser at a time.
    """

    def __init__(
        self,
        *,
        orchestrator: OutreachOrchestrator,
        review: ReviewService,
        run_repo: RunRepositoryPort,
        candidate_repo: CandidateRepositoryPort,
        ui: RecruiterUiPort,
        config_provider: ConfigProviderPort,
        logger: LoggerPort,
    ) -> None:
        self._orchestrator = orchestrator
        self._review = review
        self._run_repo = run_repo
        self._candidate_repo = candidate_repo
        self._ui = ui
        self._config_provider = config_provider
        self._logger = logger
        self._task: asyncio.Task[RunRecord | None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def build_run_config(self, **overrides: Any) -> RunConfig:
        return self._config_provider.get_config().to_run_config(**overrides)

    async def start_run(self, **overrides: Any) -> str | None:
        """Start a run in the background and return its id."""
        if self.is_running:
            raise RunAlreadyInProgress()
        config = self.build_run_config(**overrides)
        self._task = asyncio.create_task(self._run_safely(config))
        # The orchestrator records the run before its first await.
        await asyncio.sleep(0)
        return self._orchestrator.current_run_id

    async def run_to_completion(self, **overrides: Any) -> RunRecord | None:
        await self.start_run(**overrides)
        return await self.wait_for_run()

    async def wait_for_run(self) -> RunRecord | None:
        if self._task is None:
            return None
        return await self._task

    def stop_run(self) -> bool:
        if not self.is_running:
            return False
        self._orchestrator.request_stop()
        return True

    async def approve(self, candidate_id: str) -> CandidateRecord:
        if self.is_running:
            raise RunAlreadyInProgress()
        return await self._review.approve(candidate_id)

    def skip(self, candidate_id: str) -> CandidateRecord:
        return self._review.skip(candidate_id)

    def status(self) -> EngineStatus:
        run_id = self._orchestrator.current_run_id
        current = self._run_repo.get(run_id) if run_id else self._run_repo.latest()
        return EngineStatus(
            running=self.is_running,
            current_run=current,
            browser_connected=self._ui.is_connected,
            pending_review=len(self._candidate_repo.list_pending()),
            phase=self._orchestrator.phase,
        )

    def history(self, limit: int = 50) -> RunHistory:
        return RunHistory(
            candidates=self._candidate_repo.list_recent(limit),
            runs=self._run_repo.list_recent(),
        )

    def pending(self) -> Sequence[CandidateRecord]:
        return self._candidate_repo.list_pending()

    def failures(self, limit: int = 10) -> Sequence[CandidateRecord]:
        return self._candidate_repo.list_by_status(CandidateStatus.ERROR, limit)

    def status_counts(self) -> dict[CandidateStatus, int]:
        return self._candidate_repo.count_by_status()

    async def shutdown(self) -> None:
        if self.is_running:
            self._orchestrator.request_stop()
            await self.wait_for_run()
        await self._ui.close()

    async def _run_safely(self, config: RunConfig) -> RunRecord | None:
        try:
            return await self._orchestrator.run(config)
        except Exception as exc:
            self._logger.error("run_task_failed", error=str(exc))
            return None
