from .bot_api import TelegramApiError, TelegramBotConfig, TelegramClient, format_event
from .bot_listener import TelegramBot

__all__ = [
    "TelegramApiError",
    "TelegramBot",
    "TelegramBotConfig",
    "TelegramClient",
    "format_event",
]
