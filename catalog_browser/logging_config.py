from dataclasses import dataclass
from enum import Enum
import logging
from logging import (
    Handler,
    Logger,
    getLogger,
    basicConfig,
    FileHandler,
    StreamHandler,
)
from typing import List, Optional


class LogLevel(Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_name(cls, name: Optional[str], default: "LogLevel") -> "LogLevel":
        """
        Resolves a level from its name, e.g. the value of an environment variable.

        :param name: Case-insensitive level name, or None.
        :param default: Level returned when the name is empty or unknown.
        """
        if not name:
            return default
        try:
            return cls[name.strip().upper()]
        except KeyError:
            return default


@dataclass
class LogConfig:
    """
    Logging configuration of the catalog browser.

    :param level: Root logging level.
    :param filename: Log file name. File logging is disabled when None.
    :param console_level: Level of the console handler.
    :param file_level: Level of the file handler.
    :param fmt: Record format shared by all handlers.
    """

    level: LogLevel = LogLevel.INFO
    filename: Optional[str] = "catalog_browser.log"
    console_level: LogLevel = LogLevel.INFO
    file_level: LogLevel = LogLevel.INFO
    fmt: str = "%(asctime)s : %(name)s : %(levelname)s : %(message)s"


class LoggerSetup:
    """
    Configures the root logger once and hands out a named logger.
    """

    def __init__(
        self,
        logger_name: str = __name__,
        log_config: Optional[LogConfig] = None,
    ) -> None:
        self.logger: Logger = getLogger(logger_name)
        self._log_config: LogConfig = log_config or LogConfig(level=LogLevel.DEBUG)
        self._setup_logger()

    def _setup_logger(self) -> None:
        handlers: List[Handler] = self._get_handlers()
        basicConfig(
            level=self._log_config.level.value,
            format=self._log_config.fmt,
            handlers=handlers,
        )
        self.logger.setLevel(self._log_config.level.value)

    def _get_handlers(self) -> List[Handler]:
        """
        Builds the handler list: an optional file handler and a console handler.

        :return: Configured handlers.
        """
        handlers: List[Handler] = []

        if self._log_config.filename:
            file_handler = FileHandler(self._log_config.filename, encoding="utf-8")
            file_handler.setLevel(self._log_config.file_level.value)
            handlers.append(file_handler)

        console = StreamHandler()
        console.setLevel(self._log_config.console_level.value)
        handlers.append(console)

        return handlers
