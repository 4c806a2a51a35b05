import logging
import sys
import json
from pathlib import Path
from datetime import date
from loguru import logger

from app.config.settings import settings
from app.utils.context import get_request_id

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"

DEFAULT_LOGGING_CONFIG = {
    "log_dir": "logs",
    "filename": "student-records.log",
    "level": "info",
    "rotation": "20 MB",
    "retention": "1 months",
    "console_format": "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | {extra[request_id]} | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    "file_format": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} - {message}",
    "use_json_logs": False,
    "log_to_file": True,
}


class InterceptHandler(logging.Handler):
    loglevel_mapping = {
        50: "CRITICAL",
        40: "ERROR",
        30: "WARNING",
        20: "INFO",
        10: "DEBUG",
        0: "NOTSET",
    }

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except (ValueError, AttributeError):
            level = self.loglevel_mapping.get(record.levelno, record.levelno)

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _attach_request_id(record) -> None:
    # Resolved per record so module-level loggers still pick up the current request
    record["extra"]["request_id"] = get_request_id() or record["extra"].get(
        "request_id", "app"
    )


class CustomizeLogger:
    @classmethod
    def make_logger(cls, config_path: Path, environment: str = "logger"):
        config = cls.load_logging_config(config_path)
        logging_config = {
            **DEFAULT_LOGGING_CONFIG,
            **config.get(environment, config.get("logger", {})),
        }

        return cls.customize_logging(
            log_dir=logging_config["log_dir"],
            filename=f"{date.today().strftime('%Y-%m-%d')}-{logging_config['filename']}",
            level=settings.LOG_LEVEL or logging_config["level"],
            rotation=logging_config["rotation"],
            retention=logging_config["retention"],
            console_format=logging_config["console_format"],
            file_format=logging_config["file_format"],
            use_json_logs=logging_config["use_json_logs"],
            log_to_file=logging_config["log_to_file"],
        )

    @classmethod
    def customize_logging(
        cls,
        log_dir: str,
        filename: str,
        level: str,
        rotation: str,
        retention: str,
        console_format: str,
        file_format: str,
        use_json_logs: bool = False,
        log_to_file: bool = True,
    ):
        logger.remove()
        logger.configure(extra={"request_id": "app"}, patcher=_attach_request_id)

        # Console logger with colors
        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            level=level.upper(),
            format=console_format,
            colorize=True,
        )

        # File logger without colors
        if log_to_file:
            logger.add(
                str(Path(log_dir) / filename),
                rotation=rotation,
                retention=retention,
                enqueue=True,
                backtrace=True,
                level=level.upper(),
                colorize=False,
                **(
                    {"serialize": True}
                    if use_json_logs and file_format == "json"
                    else {"format": file_format}
                ),
            )

        # Redirect standard logging to loguru
        cls._setup_intercept_handlers()

        return logger

    @staticmethod
    def _setup_intercept_handlers():
        logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

        for log_name in ["uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"]:
            _logger = logging.getLogger(log_name)
            _logger.handlers = [InterceptHandler()]
            _logger.propagate = False

    @staticmethod
    def load_logging_config(config_path: Path) -> dict:
        if not config_path.is_file():
            return {}
        with open(config_path, encoding="utf-8") as config_file:
            return json.load(config_file)


# Initialize logger
config_path = (
    Path(settings.LOGGING_CONFIG_PATH)
    if settings.LOGGING_CONFIG_PATH
    else DEFAULT_CONFIG_PATH
)
custom_logger = CustomizeLogger.make_logger(config_path, settings.ENVIRONMENT)


def get_logger():
    """Get the custom logger instance; each record carries the current request ID."""
    return custom_logger
