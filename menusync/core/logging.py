import os
import sys
from typing import List

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{thread.name}</magenta> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | {name}:{function}:{line} - {message}"


def setup_logging(debug_mode: bool = True, log_dir: str = "logs") -> List[int]:
    """
    Configures Loguru for menusync: console on stderr, plus a rotating file
    under log_dir unless log_dir is empty.

    Probe starts, timeouts and stale-result drops are logged at DEBUG, so run
    with debug_mode when a menu shows the wrong state.

    Returns:
        Ids of the added handlers, for logger.remove()
    """
    logger.remove()

    handler_ids = [
        logger.add(sys.stderr, level="DEBUG" if debug_mode else "INFO", format=CONSOLE_FORMAT),
    ]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handler_ids.append(logger.add(
            os.path.join(log_dir, "menusync_{time}.log"),
            level="DEBUG", format=FILE_FORMAT, rotation="10 MB", retention="1 week",
        ))

    logger.info(f"Logging initialized ({'debug' if debug_mode else 'info'}, log dir: {log_dir or 'none'})")
    return handler_ids
