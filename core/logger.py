import sys
from loguru import logger
from core.config import Config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time} | {level} | {name}:{function}:{line} - {message}"
AUTH_CHANNEL = "auth"


def is_auth_event(record) -> bool:
    return record["extra"].get("channel") == AUTH_CHANNEL


def setup_logger(logs_dir: str = Config.LOGS_DIR, level: str = Config.LOG_LEVEL):
    """
    Настройка loguru для админ-панели.
    Консоль, общий app.log, json.log для сборщика логов, errors.log
    и отдельный auth.log с входами, выходами и очисткой сессий.
    """
    logger.remove()

    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=level, colorize=True)

    # Все события приложения
    logger.add(f"{logs_dir}/app.log", rotation="10 MB", retention="1 month",
               format=FILE_FORMAT, level=level)

    logger.add(f"{logs_dir}/json.log", rotation="50 MB", serialize=True, level="INFO")

    logger.add(f"{logs_dir}/errors.log", rotation="1 week", level="ERROR", format=FILE_FORMAT)

    # Журнал входов храним дольше остальных
    logger.add(f"{logs_dir}/auth.log", rotation="1 week", retention="3 months",
               format=FILE_FORMAT, level="INFO", filter=is_auth_event)

    return logger


log = setup_logger()
auth_log = log.bind(channel=AUTH_CHANNEL)
