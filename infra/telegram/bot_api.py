from __future__ import annotations

import asyncio
import json
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

from domain.models import ProgressEvent


class TelegramApiError(RuntimeError):
    pass


@dataclass(frozen=True)
class TelegramBotConfig:
    bot_token: str
    chat_id: str
    poll_timeout_seconds: int = 30


class TelegramClient:
    """Long-polling Telegram Bot API client for a single configured chat."""

    def __init__(self, config: TelegramBotConfig) -> None:
        self._config = config
        self._offset = 0

    @property
    def chat_id(self) -> str:
        return self._config.chat_id

    async def send_message(self, text: str) -> None:
        await self._post("sendMessage", {"chat_id": self._config.chat_id, "text": text})

    async def get_updates(self) -> list[dict[str, Any]]:
        """Long-poll for new updates and advance the offset past them."""
        params = {
            "offset": str(self._offset),
            "timeout": str(self._config.poll_timeout_seconds),
            "allowed_updates": json.dumps(["message"]),
        }
        data = await self._post("getUpdates", params)
        if not isinstance(data, list):
            return []
        updates = [item for item in data if isinstance(item, dict)]
        for update in updates:
            self._offset = max(self._offset, int(update.get("update_id", 0)) + 1)
        return updates

    def extract_text(self, update: dict[str, Any]) -> str | None:
        """Text of a message from the configured chat, or ``None``."""
        message = update.get("message", {})
        chat = message.get("chat", {})
        if str(chat.get("id", "")) != str(self._config.chat_id):
            return None
        text = message.get("text")
        if isinstance(text, str) and text.strip():
            return text.strip()
        return None

    async def _post(self, method: str, params: dict[str, str]) -> Any:
        return await asyncio.to_thread(self._sync_post, method, params)

    def _sync_post(self, method: str, params: dict[str, str]) -> Any:
        base = f"https://api.telegram.org/bot{self._config.bot_token}/{method}"
        body = urllib.parse.urlencode(params).encode("utf-8")
        req = urllib.request.Request(base, data=body, method="POST")
        with urllib.request.urlopen(req, timeout=self._config.poll_timeout_seconds + 30) as resp:  # nosec B310
            payload = json.loads(resp.read().decode("utf-8"))
        if not payload.get("ok", False):
            raise TelegramApiError(str(payload))
        return payload.get("result")


def format_event(event: ProgressEvent) -> str | None:
    """Chat text for a progress event, or ``None`` for events not worth a message."""
    data = event.data
    name = event.event
    if name == "run_started":
        return f"Run {data.get('runId')} started ({data.get('runMode')}, max {data.get('maxCandidates')})."
    if name == "login_required":
        return "Login required: please log in to LinkedIn Recruiter in the browser window."
    if name == "candidates_found":
        return (
            f"Found {data.get('total')} candidates, processing {data.get('processing')} "
            f"({data.get('pageIndicator', 'unknown')})."
        )
    if name == "page_changed":
        return f"Moved to page {data.get('page')}: {data.get('candidates')} candidates."
    if name == "pending_review":
        return (
            f"Ready for review: {data.get('name')}\n"
            f"/approve {data.get('candidateId')}  or  /skip {data.get('candidateId')}"
        )
    if name == "message_sent":
        return f"Sent to {data.get('name')}."
    if name == "candidate_error":
        return f"Failed on {data.get('name', 'candidate')}: {data.get('error')}"
    if name in ("run_completed", "run_stopped"):
        return (
            f"Run {name.split('_', 1)[1]}: {data.get('processed')} processed, "
            f"{data.get('succeeded')} succeeded, {data.get('failed')} failed, "
            f"{data.get('skipped')} skipped."
        )
    if name == "run_error":
        return f"Run failed: {data.get('error')}"
    return None
