"""
Logging configuration for Entrypoint Config.

Features:
- Console output with optional colors (only when attached to a TTY)
- Optional file output with rotation
- Per-module log level overrides
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path


class Colors:
    """ANSI color codes."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"

    BRIGHT_RED = "\033[91m"


LEVEL_COLORS = {
    logging.DEBUG: Colors.DIM + Colors.CYAN,
    logging.INFO: Colors.GREEN,
    logging.WARNING: Colors.YELLOW,
    logging.ERROR: Colors.RED,
    logging.CRITICAL: Colors.BOLD + Colors.BRIGHT_RED,
}

# Logger name fragment -> color
COMPONENT_COLORS = {
    "schema": Colors.MAGENTA,
    "loader": Colors.BLUE,
    "parser": Colors.CYAN,
    "main": Colors.GREEN,
}

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER = "entrypoint_config"


class ColoredFormatter(logging.Formatter):
    """
    Formatter that adds ANSI colors to log output.

    The level name is colored by severity, the logger name by component.
    The record is restored after formatting so other handlers see it unchanged.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        use_colors: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def _component_color(self, name: str) -> str:
        lowered = name.lower()
        for key, color in COMPONENT_COLORS.items():
            if key in lowered:
                return color
        return ""

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        saved = (record.levelname, record.name, record.msg)

        level_color = LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{level_color}{record.levelname:8}{Colors.RESET}"

        component_color = self._component_color(record.name)
        if component_color:
            record.name = f"{component_color}{record.name}{Colors.RESET}"

        if record.levelno >= logging.ERROR:
            record.msg = f"{Colors.RED}{record.msg}{Colors.RESET}"
        elif record.levelno >= logging.WARNING:
            record.msg = f"{Colors.YELLOW}{record.msg}{Colors.RESET}"

        try:
            return super().format(record)
        finally:
            record.levelname, record.name, record.msg = saved


class PlainFormatter(logging.Formatter):
    """Plain formatter without colors for file output."""

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = f"{record.levelname:8}"
        return super().format(record)


@dataclass
class LogConfig:
    """Logging configuration."""

    console_level: str = "WARNING"
    console_colors: bool = True

    file_enabled: bool = False
    file_path: str = "entrypoint-config.log"
    file_level: str = "DEBUG"
    file_max_bytes: int = 5 * 1024 * 1024  # 5 MB
    file_backup_count: int = 3

    format: str = DEFAULT_FORMAT
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # module_name -> level, e.g. {"config.schema": "debug"}
    module_levels: dict[str, str] | None = None


def get_log_level(level_str: str) -> int:
    """Convert string log level to logging constant (INFO if unknown)."""
    levels = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "warn": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    return levels.get(level_str.lower(), logging.INFO)


def setup_logging(config: LogConfig | None = None) -> None:
    """
    Configure logging for the application.

    Args:
        config: Logging configuration (uses defaults if None)
    """
    if config is None:
        config = LogConfig()

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(logging.DEBUG)  # filtering happens at the handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(get_log_level(config.console_level))
    use_colors = config.console_colors and hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
    console_handler.setFormatter(
        ColoredFormatter(fmt=config.format, datefmt=config.date_format, use_colors=use_colors)
    )
    root_logger.addHandler(console_handler)

    if config.file_enabled:
        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config.file_max_bytes,
            backupCount=config.file_backup_count,
        )
        file_handler.setLevel(get_log_level(config.file_level))
        file_handler.setFormatter(PlainFormatter(fmt=config.format, datefmt=config.date_format))
        root_logger.addHandler(file_handler)

    if config.module_levels:
        for module_name, level_str in config.module_levels.items():
            get_logger(module_name).setLevel(get_log_level(level_str))


def setup_logging_from_args(
    verbose: bool = False,
    debug: bool = False,
    quiet: bool = False,
    log_file: str | None = None,
    colors: bool = True,
) -> LogConfig:
    """
    Setup logging from command-line arguments.

    Returns the LogConfig that was applied.
    """
    config = LogConfig(console_colors=colors)

    if debug:
        config.console_level = "DEBUG"
    elif verbose:
        config.console_level = "INFO"
    elif quiet:
        config.console_level = "ERROR"

    if log_file:
        config.file_enabled = True
        config.file_path = log_file

    setup_logging(config)
    return config


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a component.

    Args:
        name: Component name (will be prefixed with entrypoint_config)

    Returns:
        Logger instance
    """
    if name.startswith(ROOT_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class Loggers:
    """Pre-configured loggers for common components."""

    @staticmethod
    def main() -> logging.Logger:
        return get_logger("main")

    @staticmethod
    def config(name: str = "") -> logging.Logger:
        if name:
            return get_logger(f"config.{name}")
        return get_logger("config")
