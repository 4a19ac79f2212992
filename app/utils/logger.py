import logging
import sys
from typing import Optional

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")


class Colors:
    """ANSI color codes for console output"""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    BRIGHT_BLACK = '\033[90m'
    BRIGHT_RED = '\033[91m'
    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_CYAN = '\033[96m'


class ConsoleFormatter(logging.Formatter):
    """Formats records as ``[HH:MM:SS.mmm] 🔍 [SERVICE] [LEVEL] message``."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BRIGHT_CYAN,
        logging.INFO: Colors.BRIGHT_BLUE,
        SUCCESS: Colors.BRIGHT_GREEN,
        logging.WARNING: Colors.BRIGHT_YELLOW,
        logging.ERROR: Colors.BRIGHT_RED,
    }

    LEVEL_EMOJIS = {
        logging.DEBUG: "🔍",
        logging.INFO: "ℹ️",
        SUCCESS: "✅",
        logging.WARNING: "⚠️",
        logging.ERROR: "❌",
    }

    def __init__(self, service_name: str, enable_colors: bool = True):
        super().__init__()
        self.service_name = service_name.upper()
        self.enable_colors = enable_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.enable_colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def formatTime(self, record, datefmt=None):
        return super().formatTime(record, "%H:%M:%S") + f".{int(record.msecs):03d}"

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.LEVEL_COLORS.get(record.levelno, "")
        emoji = self.LEVEL_EMOJIS.get(record.levelno, "")

        timestamp_text = self._colorize(f"[{self.formatTime(record)}]", Colors.DIM)
        service_text = self._colorize(f"[{self.service_name}]", Colors.BRIGHT_BLACK)
        level_text = self._colorize(f"[{record.levelname}]", level_color + Colors.BOLD)

        message = f"{timestamp_text} {emoji} {service_text} {level_text} {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class BlogLogger(logging.LoggerAdapter):
    """Console reporter used by the seed and example scripts.

    Wraps a stdlib logger and adds ``success`` plus banner helpers so that
    script output reads as a report.
    """

    def success(self, message: str, *args, **kwargs):
        self.log(SUCCESS, message, *args, **kwargs)

    def banner(self, message: str, char: str = "═", width: int = 60):
        content = f" {message} "
        if len(content) < width - 4:
            padding = (width - len(content)) // 2
            content = char * padding + content + char * (width - len(content) - padding)
        self.info(content)

    def section_start(self, section_name: str):
        self.banner(f"🚀 {section_name.upper()} STARTED", "═", 50)

    def section_end(self, section_name: str, success: bool = True):
        status_emoji = "✅" if success else "❌"
        status_text = "COMPLETED" if success else "FAILED"
        self.banner(f"{status_emoji} {section_name.upper()} {status_text}", "═", 50)


def get_logger(service_name: str, level: int = logging.INFO, enable_colors: Optional[bool] = None) -> BlogLogger:
    """Get a console logger for a specific script or service."""
    logger = logging.getLogger(f"blog.{service_name.lower()}")
    if not logger.handlers:
        if enable_colors is None:
            enable_colors = sys.stdout.isatty()
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ConsoleFormatter(service_name, enable_colors=enable_colors))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level)
    return BlogLogger(logger, {})
