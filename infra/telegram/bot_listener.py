from __future__ import annotations

from typing import Any

from app.facade import OutreachFacade
from domain.errors import OutreachError
from domain.models import CandidateRecord, ProgressEvent, RunMode
from domain.ports import LoggerPort

from .bot_api import TelegramClient, format_event

_HELP_TEXT = (
    "Commands:\n"
    "  /run [max] [mode] — start a run (mode: dry_run, manual_review, auto_send)\n"
    "  /stop — stop after the current candidate\n"
    "  /approve ID — send a message waiting for review\n"
    "  /skip ID — discard a message waiting for review\n"
    "  /status — current run and browser state\n"
    "  /pending — messages waiting for review\n"
    "  /history — recent candidates\n"
    "  /help — this message"
)


class TelegramBot:
    """Long-running Telegram bot: remote control plane and progress feed.

    Commands are handled one at a time; runs themselves execute in the
    background so ``/stop`` and ``/status`` stay responsive.
    """

    def __init__(
        self,
        *,
        client: TelegramClient,
        facade: OutreachFacade,
        logger: LoggerPort,
    ) -> None:
        self._client = client
        self._facade = facade
        self._logger = logger

    # -- main loop ----------------------------------------------------------

    async def run(self) -> None:
        self._logger.info("telegram_bot_started", chat_id=self._client.chat_id)
        await self._client.send_message("Outreach bot started. Send /help for commands.")

        while True:
            updates = await self._client.get_updates()
            for update in updates:
                await self.handle_update(update)

    async def handle_update(self, update: dict[str, Any]) -> None:
        text = self._client.extract_text(update)
        if text is None:
            return
        try:
            await self._dispatch(text)
        except OutreachError as exc:
            await self._client.send_message(str(exc))
        except Exception as exc:
            self._logger.error("telegram_command_failed", command=text, error=str(exc))
            await self._client.send_message(f"Command failed: {exc}")

    async def _dispatch(self, text: str) -> None:
        command, *args = text.split()
        command = command.split("@", 1)[0].lower()

        if command == "/run":
            await self._handle_run(args)
        elif command == "/stop":
            await self._handle_stop()
        elif command == "/approve":
            await self._handle_approve(args)
        elif command == "/skip":
            await self._handle_skip(args)
        elif command == "/status":
            await self._handle_status()
        elif command == "/pending":
            await self._handle_pending()
        elif command == "/history":
            await self._handle_history()
        elif command in ("/help", "/start"):
            await self._client.send_message(_HELP_TEXT)
        else:
            await self._client.send_message("Unrecognized message. Send /help for commands.")

    # -- command handlers ---------------------------------------------------

    async def _handle_run(self, args: list[str]) -> None:
        max_candidates: int | None = None
        run_mode: str | None = None
        modes = {mode.value for mode in RunMode}
        for arg in args:
            if arg.isdigit():
                max_candidates = int(arg)
            elif arg in modes:
                run_mode = arg
            else:
                await self._client.send_message(f"Unknown argument: {arg}\n\n{_HELP_TEXT}")
                return

        run_id = await self._facade.start_run(max_candidates=max_candidates, run_mode=run_mode)
        await self._client.send_message(f"Run {run_id} starting.")

    async def _handle_stop(self) -> None:
        if self._facade.stop_run():
            await self._client.send_message("Stop requested; the run ends after the current candidate.")
        else:
            await self._client.send_message("No run in progress.")

    async def _handle_approve(self, args: list[str]) -> None:
        if not args:
            await self._client.send_message("Usage: /approve ID")
            return
        record = await self._facade.approve(args[0])
        await self._client.send_message(f"Sent to {record.name}.")

    async def _handle_skip(self, args: list[str]) -> None:
        if not args:
            await self._client.send_message("Usage: /skip ID")
            return
        record = self._facade.skip(args[0])
        await self._client.send_message(f"Skipped {record.name}.")

    async def _handle_status(self) -> None:
        status = self._facade.status()
        lines = [
            f"Running: {'yes' if status.running else 'no'} ({status.phase.value})",
            f"Browser: {'connected' if status.browser_connected else 'not connected'}",
            f"Pending review: {status.pending_review}",
        ]
        run = status.current_run
        if run is not None:
            lines.append(
                f"Run {run.id} [{run.status.value}]: {run.processed}/{run.max_candidates} processed, "
                f"{run.succeeded} ok, {run.failed} failed, {run.skipped} skipped"
            )
        await self._client.send_message("\n".join(lines))

    async def _handle_pending(self) -> None:
        pending = self._facade.pending()
        if not pending:
            await self._client.send_message("Nothing waiting for review.")
            return
        for record in pending[:10]:
            await self._client.send_message(_review_card(record))

    async def _handle_history(self) -> None:
        candidates = self._facade.history(limit=10).candidates
        if not candidates:
            await self._client.send_message("No candidates yet.")
            return
        lines = [f"- [{c.status.value}] {c.name} ({c.id})" for c in candidates]
        await self._client.send_message("Recent candidates:\n" + "\n".join(lines))

    # -- progress feed ------------------------------------------------------

    async def deliver(self, event: ProgressEvent) -> None:
        text = format_event(event)
        if text is not None:
            await self._client.send_message(text)


def _review_card(record: CandidateRecord) -> str:
    subject = record.tuned_subject or record.subject or "(no subject)"
    body = record.tuned_message or record.message or ""
    return (
        f"{record.name} — {record.headline}\n"
        f"Subject: {subject}\n\n{body}\n\n"
        f"/approve {record.id}  or  /skip {record.id}"
    )
