
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def setup_logging(level="INFO", format_str=None):
    """
    Configure the root logger with a single stream handler.
    `level` may be a level name ("DEBUG") or a logging constant.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=format_str or LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name):
    return logging.getLogger(name)
