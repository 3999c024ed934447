from .console_sink import ConsoleEventSink
from .progress_broadcaster import ProgressBroadcaster, ProgressSubscriber

__all__ = ["ProgressBroadcaster", "ProgressSubscriber", "ConsoleEventSink"]
