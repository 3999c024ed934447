from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import dataclass
from typing import Sequence

from app.facade import OutreachFacade
from domain.models import AppConfig, OutreachMode, RunMode, RunStatus
from domain.services import (
    DiagnosticsRecorder,
    MessageGenerator,
    MessageTuner,
    OutreachOrchestrator,
    ReviewService,
)
from infra.browser import PlaywrightRecruiterUi, PlaywrightSessionController, inspect_dom
from infra.config import FileSystemConfigProvider
from infra.events import ConsoleEventSink, ProgressBroadcaster
from infra.llm import OpenAIChatClient
from infra.logs import FileSystemScreenshotStore
from infra.persistence import SQLiteCandidateRepository, SQLiteRunRepository
from infra.runtime import StructuredLogger, SystemClock, UuidIdGenerator
from infra.telegram import TelegramBot, TelegramBotConfig, TelegramClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="outreach-pilot")
    parser.add_argument("--db-path", default="outreach_pilot.db")
    parser.add_argument("--config-dir", default="./config", help="Path to config folder")
    sub = parser.add_subparsers(dest="command", required=True)

    start_p = sub.add_parser("start", help="Start the Telegram bot control plane")
    start_p.add_argument("--headless", action="store_true", default=False)
    start_p.add_argument(
        "--skip-connectivity",
        action="store_true",
        help="Skip Telegram/OpenAI connectivity checks on startup",
    )

    run_p = sub.add_parser("run", help="Run one outreach pass in the foreground")
    run_p.add_argument("--max", dest="max_candidates", type=int)
    run_p.add_argument("--mode", dest="run_mode", choices=[m.value for m in RunMode])
    run_p.add_argument("--outreach-mode", choices=[m.value for m in OutreachMode])
    run_p.add_argument("--project-url")
    run_p.add_argument("--headless", action="store_true", default=False)

    approve_p = sub.add_parser("approve", help="Send a message waiting for review")
    approve_p.add_argument("candidate_id")
    approve_p.add_argument("--headless", action="store_true", default=False)

    skip_p = sub.add_parser("skip", help="Discard a message waiting for review")
    skip_p.add_argument("candidate_id")

    sub.add_parser("pending", help="List messages waiting for review")

    history_p = sub.add_parser("history", help="List recent candidates and runs")
    history_p.add_argument("--limit", type=int, default=20)

    errors_p = sub.add_parser("errors", help="Show recent failed candidates")
    errors_p.add_argument("--limit", type=int, default=10)

    inspect_p = sub.add_parser("inspect", help="Report which selectors match on the project page")
    inspect_p.add_argument("--project-url")

    sub.add_parser("validate", help="Check config.json and profile.json")
    return parser


@dataclass
class Application:
    facade: OutreachFacade
    events: ProgressBroadcaster
    session: PlaywrightSessionController
    logger: StructuredLogger


def build_application(
    config_provider: FileSystemConfigProvider,
    *,
    db_path: str,
    headless: bool = False,
) -> Application:
    cfg = config_provider.get_config()
    logger = StructuredLogger()
    clock = SystemClock()
    ids = UuidIdGenerator()
    run_repo = SQLiteRunRepository(db_path=db_path)
    candidate_repo = SQLiteCandidateRepository(db_path=db_path)
    events = ProgressBroadcaster(clock=clock, logger=logger)

    session = PlaywrightSessionController(
        user_data_dir=cfg.user_data_dir,
        events=events,
        logger=logger,
        headless=headless,
        login_timeout_seconds=cfg.login_timeout_seconds,
    )
    ui = PlaywrightRecruiterUi.create(session=session, logger=logger)
    diagnostics = DiagnosticsRecorder(
        ui=ui,
        store=FileSystemScreenshotStore(cfg.screenshots_dir),
        clock=clock,
        logger=logger,
    )
    generator = MessageGenerator(
        llm=OpenAIChatClient(
            api_key=cfg.openai_key,
            base_url=cfg.openai_base_url,
            model=cfg.openai_model,
        ),
        logger=logger,
        sender=config_provider.get_sender_profile(),
    )
    orchestrator = OutreachOrchestrator(
        ui=ui,
        run_repo=run_repo,
        candidate_repo=candidate_repo,
        generator=generator,
        tuner=MessageTuner(),
        events=events,
        clock=clock,
        id_generator=ids,
        logger=logger,
        diagnostics=diagnostics,
    )
    review = ReviewService(
        ui=ui,
        candidate_repo=candidate_repo,
        events=events,
        clock=clock,
        logger=logger,
    )
    facade = OutreachFacade(
        orchestrator=orchestrator,
        review=review,
        run_repo=run_repo,
        candidate_repo=candidate_repo,
        ui=ui,
        config_provider=config_provider,
        logger=logger,
    )
    return Application(facade=facade, events=events, session=session, logger=logger)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config_provider = FileSystemConfigProvider(args.config_dir)

    if args.command == "validate":
        return _handle_validate(config_provider)

    errors = config_provider.validate()
    if errors:
        _print_errors("Config validation failed:", errors)
        return 1

    if args.command == "start":
        return _handle_start(args, config_provider)
    if args.command == "run":
        return asyncio.run(_handle_run(args, config_provider))
    if args.command == "approve":
        return asyncio.run(_handle_approve(args, config_provider))
    if args.command == "inspect":
        return asyncio.run(_handle_inspect(args, config_provider))

    app = build_application(config_provider, db_path=args.db_path)
    facade = app.facade

    if args.command == "skip":
        record = facade.skip(args.candidate_id)
        print(f"skipped {record.id} ({record.name})")
        return 0

    if args.command == "pending":
        for rec in facade.pending():
            subject = rec.tuned_subject or rec.subject or "-"
            print(f"{rec.id} | {rec.name} | {subject}")
            print(f"    {rec.tuned_message or rec.message or ''}")
        return 0

    if args.command == "history":
        history = facade.history(limit=args.limit)
        for run in history.runs:
            started = run.started_at.isoformat() if run.started_at else "-"
            print(
                f"run {run.id} | {started} | {run.run_mode.value} | {run.status.value} | "
                f"{run.processed} processed, {run.succeeded} ok, {run.failed} failed, {run.skipped} skipped"
            )
        for rec in history.candidates:
            print(f"{rec.id} | {rec.name} | {rec.status.value} | {rec.error or '-'}")
        return 0

    if args.command == "errors":
        failures = facade.failures(limit=args.limit)
        print(f"=== FAILED CANDIDATES (showing last {args.limit}) ===")
        if not failures:
            print("No errors found in database.")
        for i, rec in enumerate(failures, 1):
            created = rec.created_at.isoformat() if rec.created_at else "-"
            print(f"{i}. {rec.name}")
            print(f"   Error: {rec.error}")
            print(f"   Screenshot: {rec.screenshot_path or '-'}")
            print(f"   Time: {created}")
        print("=== SUMMARY ===")
        for status, count in sorted(facade.status_counts().items(), key=lambda kv: kv[0].value):
            print(f"  {status.value}: {count}")
        return 0

    raise SystemExit(f"Unsupported command: {args.command}")


def _handle_validate(config_provider: FileSystemConfigProvider) -> int:
    errors = config_provider.validate()
    if errors:
        _print_errors("Config validation failed:", errors)
        return 1
    cfg = config_provider.get_config()
    print(f"Config OK: project={cfg.project_url}, mode={cfg.run_mode.value}, max={cfg.max_candidates}")
    return 0


def _handle_start(args: argparse.Namespace, config_provider: FileSystemConfigProvider) -> int:
    cfg = config_provider.get_config()
    if not cfg.bot_token or not cfg.telegram_chat_id:
        print("BOT_TOKEN and TELEGRAM_CHAT_ID are required for the Telegram bot.")
        return 1
    print(f"Config OK: bot_token=***{cfg.bot_token[-4:]}, chat_id={cfg.telegram_chat_id}")

    if not args.skip_connectivity:
        print("Verifying API connectivity...")
        conn_result = asyncio.run(config_provider.validate_connectivity())
        if not conn_result.ok:
            _print_errors("Connectivity check failed:", conn_result.errors)
            return 1
        print(f"Telegram bot: @{conn_result.bot_username}")
        print("OpenAI API: connected")
    else:
        print("Skipping connectivity checks (--skip-connectivity)")

    print("Starting Telegram bot listener...")
    return asyncio.run(_serve_telegram(args, config_provider, cfg))


async def _serve_telegram(
    args: argparse.Namespace,
    config_provider: FileSystemConfigProvider,
    cfg: AppConfig,
) -> int:
    app = build_application(config_provider, db_path=args.db_path, headless=args.headless)
    bot = TelegramBot(
        client=TelegramClient(
            TelegramBotConfig(bot_token=cfg.bot_token or "", chat_id=cfg.telegram_chat_id or ""),
        ),
        facade=app.facade,
        logger=app.logger,
    )
    app.events.subscribe(ConsoleEventSink())
    app.events.subscribe(bot)
    await app.events.start()
    try:
        await bot.run()
    finally:
        await app.facade.shutdown()
        await app.events.aclose()
    return 0


async def _handle_run(args: argparse.Namespace, config_provider: FileSystemConfigProvider) -> int:
    app = build_application(config_provider, db_path=args.db_path, headless=args.headless)
    app.events.subscribe(ConsoleEventSink())
    await app.events.start()
    try:
        record = await app.facade.run_to_completion(
            max_candidates=args.max_candidates,
            run_mode=args.run_mode,
            outreach_mode=args.outreach_mode,
            project_url=args.project_url,
        )
    finally:
        await app.facade.shutdown()
        await app.events.aclose()

    if record is None:
        print("Run failed; see the log above.")
        return 1
    print(
        f"run={record.id} status={record.status.value} processed={record.processed} "
        f"succeeded={record.succeeded} failed={record.failed} skipped={record.skipped}"
    )
    return 0 if record.status is not RunStatus.ERROR else 1


async def _handle_approve(args: argparse.Namespace, config_provider: FileSystemConfigProvider) -> int:
    app = build_application(config_provider, db_path=args.db_path, headless=args.headless)
    app.events.subscribe(ConsoleEventSink())
    await app.events.start()
    try:
        record = await app.facade.approve(args.candidate_id)
        print(f"sent {record.id} ({record.name})")
        return 0
    finally:
        await app.facade.shutdown()
        await app.events.aclose()


async def _handle_inspect(args: argparse.Namespace, config_provider: FileSystemConfigProvider) -> int:
    app = build_application(config_provider, db_path=args.db_path)
    url = args.project_url or config_provider.get_config().project_url
    await app.events.start()
    try:
        await app.session.launch()
        await app.session.ensure_authenticated(url)
        report = await inspect_dom(app.session.page)
    finally:
        await app.session.close()
        await app.events.aclose()
    print(json.dumps(report, indent=2, default=str))
    return 0


def _print_errors(title: str, errors: Sequence[str]) -> None:
    print(title)
    for err in errors:
        print(f"  - {err}")


if __name__ == "__main__":
    raise SystemExit(main())
