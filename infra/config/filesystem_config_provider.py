from __future__ import annotations

import asyncio
import json
import re
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path

from domain.models import AppConfig, OutreachMode, RunMode, SenderProfile


@dataclass(frozen=True)
class ConnectivityResult:
    """Outcome of validate_connectivity(): errors list plus bot info on success."""

    errors: list[str]
    bot_username: str | None = None

    @property
    def ok(self) -> bool:
        return len(self.errors) == 0


_REQUIRED_CONFIG_KEYS = {"OPENAI_KEY", "PROJECT_URL"}
_PLACEHOLDER_PATTERN = re.compile(r"^YOUR_", re.IGNORECASE)
_RUN_MODES = {mode.value for mode in RunMode}
_OUTREACH_MODES = {mode.value for mode in OutreachMode}


class FileSystemConfigProvider:
    """Reads config.json and the optional profile.json from a config directory.

    Every public method re-reads from disk so that edits
    to the JSON files take effect without restarting the app.
    """

    def __init__(self, config_dir: str) -> None:
        self._config_dir = Path(config_dir)

    def validate(self) -> list[str]:
        errors: list[str] = []
        config_path = self._config_dir / "config.json"

        config_data = self._validate_json_file(config_path, _REQUIRED_CONFIG_KEYS, errors)
        if config_data is not None:
            errors.extend(self._validate_config_formats(config_data))

        profile_path = self._config_dir / "profile.json"
        if profile_path.is_file():
            self._validate_json_file(profile_path, set(), errors)

        return errors

    @staticmethod
    def _validate_config_formats(data: dict) -> list[str]:
        errors: list[str] = []

        openai_key = str(data.get("OPENAI_KEY", ""))
        if not openai_key or "YOUR" in openai_key.upper():
            errors.append("OPENAI_KEY is a placeholder. Set your real OpenAI API key.")

        base_url = str(data.get("OPENAI_BASE_URL", "https://api.openai.com/v1"))
        if not base_url.startswith("https://"):
            errors.append("OPENAI_BASE_URL must start with 'https://'.")

        project_url = str(data.get("PROJECT_URL", ""))
        if not project_url.startswith("https://"):
            errors.append("PROJECT_URL must be the https:// URL of a Recruiter project pipeline.")

        run_mode = data.get("RUN_MODE", RunMode.DRY_RUN.value)
        if run_mode not in _RUN_MODES:
            errors.append(f"RUN_MODE must be one of: {', '.join(sorted(_RUN_MODES))}.")

        outreach_mode = data.get("OUTREACH_MODE", OutreachMode.RECRUITER.value)
        if outreach_mode not in _OUTREACH_MODES:
            errors.append(f"OUTREACH_MODE must be one of: {', '.join(sorted(_OUTREACH_MODES))}.")

        max_candidates = data.get("MAX_CANDIDATES", 20)
        if isinstance(max_candidates, bool) or not isinstance(max_candidates, int) or max_candidates < 1:
            errors.append("MAX_CANDIDATES must be a positive integer.")

        rate_min = data.get("RATE_LIMIT_MIN", 20)
        rate_max = data.get("RATE_LIMIT_MAX", 60)
        if not _is_number(rate_min) or not _is_number(rate_max):
            errors.append("RATE_LIMIT_MIN and RATE_LIMIT_MAX must be numbers of seconds.")
        elif not 0 <= rate_min <= rate_max:
            errors.append("RATE_LIMIT_MIN must be between 0 and RATE_LIMIT_MAX.")

        bot_token = data.get("BOT_TOKEN")
        chat_id = data.get("TELEGRAM_CHAT_ID")
        if (bot_token is None) != (chat_id is None):
            errors.append("BOT_TOKEN and TELEGRAM_CHAT_ID must be set together.")
        if bot_token is not None and (not bot_token or _PLACEHOLDER_PATTERN.search(str(bot_token))):
            errors.append("BOT_TOKEN is a placeholder. Get a real token from @BotFather on Telegram.")
        if chat_id is not None and not str(chat_id).lstrip("-").isdigit():
            errors.append("TELEGRAM_CHAT_ID must be numeric. Send /start to your bot and check the chat ID.")

        return errors

    async def validate_connectivity(self) -> ConnectivityResult:
        """Verify the OpenAI API key (and the Telegram bot token, if set) over the network."""
        errors: list[str] = []
        bot_username: str | None = None
        config = self.get_config()

        if config.bot_token:
            bot_username, tg_err = await asyncio.to_thread(
                self._check_telegram, config.bot_token,
            )
            if tg_err:
                errors.append(tg_err)

        openai_err = await asyncio.to_thread(
            self._check_openai, config.openai_key, config.openai_base_url,
        )
        if openai_err:
            errors.append(openai_err)

        return ConnectivityResult(errors=errors, bot_username=bot_username)

    @staticmethod
    def _check_telegram(bot_token: str) -> tuple[str | None, str | None]:
        url = f"https://api.telegram.org/bot{bot_token}/getMe"
        try:
            req = urllib.request.Request(url, method="GET")
            with urllib.request.urlopen(req, timeout=15) as resp:
                payload = json.loads(resp.read().decode("utf-8"))
            if payload.get("ok"):
                username = payload.get("result", {}).get("username", "unknown")
                return username, None
            return None, f"Telegram BOT_TOKEN rejected: {payload}"
        except urllib.error.HTTPError as exc:
            return None, (
                f"Telegram BOT_TOKEN is invalid: {exc.code} {exc.reason}. "
                "Get a valid token from @BotFather."
            )
        except Exception as exc:
            return None, f"Telegram connectivity failed: {exc}"

    @staticmethod
    def _check_openai(api_key: str, base_url: str) -> str | None:
        url = f"{base_url.rstrip('/')}/models"
        try:
            req = urllib.request.Request(url, method="GET")
            req.add_header("Authorization", f"Bearer {api_key}")
            with urllib.request.urlopen(req, timeout=15) as resp:
                resp.read()
            return None
        except urllib.error.HTTPError as exc:
            if exc.code == 401:
                return (
                    "OpenAI API key rejected: 401 Unauthorized. "
                    "Check your OPENAI_KEY in config.json."
                )
            return f"OpenAI API error: {exc.code} {exc.reason}."
        except Exception as exc:
            return f"OpenAI connectivity failed: {exc}"

    def get_config(self) -> AppConfig:
        data = self._read_json("config.json")
        chat_id = data.get("TELEGRAM_CHAT_ID")
        return AppConfig(
            openai_key=data["OPENAI_KEY"],
            project_url=data["PROJECT_URL"],
            openai_base_url=data.get("OPENAI_BASE_URL", "https://api.openai.com/v1"),
            openai_model=data.get("OPENAI_MODEL", "gpt-4o"),
            run_mode=RunMode(data.get("RUN_MODE", RunMode.DRY_RUN.value)),
            outreach_mode=OutreachMode(data.get("OUTREACH_MODE", OutreachMode.RECRUITER.value)),
            max_candidates=int(data.get("MAX_CANDIDATES", 20)),
            rate_limit_min=float(data.get("RATE_LIMIT_MIN", 20)),
            rate_limit_max=float(data.get("RATE_LIMIT_MAX", 60)),
            user_data_dir=data.get("USER_DATA_DIR", "./browser-data"),
            screenshots_dir=data.get("SCREENSHOTS_DIR", "./screenshots"),
            login_timeout_seconds=float(data.get("LOGIN_TIMEOUT_SECONDS", 300)),
            bot_token=data.get("BOT_TOKEN"),
            telegram_chat_id=str(chat_id) if chat_id is not None else None,
        )

    def get_sender_profile(self) -> SenderProfile:
        path = self._config_dir / "profile.json"
        if not path.is_file():
            return SenderProfile()
        data = self._read_json("profile.json")
        return SenderProfile(
            full_name=data.get("name", ""),
            company=data.get("company", ""),
            offer=data.get("offer", ""),
        )

    # -- internal helpers ---------------------------------------------------

    def _read_json(self, filename: str) -> dict:
        path = self._config_dir / filename
        return json.loads(path.read_text(encoding="utf-8"))

    @staticmethod
    def _validate_json_file(
        path: Path,
        required_keys: set[str],
        errors: list[str],
    ) -> dict | None:
        """Validate a JSON file exists and has required keys.

        Returns the parsed dict on success, or None if the file
        is missing or unparseable.
        """
        if not path.is_file():
            errors.append(f"Missing file: {path}")
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            errors.append(f"Cannot read {path}: {exc}")
            return None
        missing = required_keys - set(data.keys())
        if missing:
            errors.append(f"{path.name} missing keys: {', '.join(sorted(missing))}")
            return None
        return data


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
