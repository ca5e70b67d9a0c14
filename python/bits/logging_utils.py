import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'

# Marks handlers installed here so teardown leaves other handlers alone
_OWNED = '_bits_owned'


def setup_logging(*, console_level: int = logging.WARNING,
                  file_path: Optional[Union[str, Path]] = None,
                  file_level: int = logging.DEBUG) -> None:
    """
    Route log records to stderr and, optionally, a log file.

    Handlers from an earlier call are replaced; handlers installed by
    anyone else are left untouched.

    Args:
        console_level: Level for messages written to stderr
        file_path: Also log to this file (overwritten) when given
        file_level: Level for the log file
    """
    teardown_logging()
    root = logging.getLogger()
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = [(logging.StreamHandler(sys.stderr), console_level)]
    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append((logging.FileHandler(path, mode='w', encoding='utf-8'), file_level))

    for handler, level in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        setattr(handler, _OWNED, True)
        root.addHandler(handler)
    root.setLevel(min(level for _, level in handlers))


def teardown_logging() -> None:
    """Remove and close the handlers installed by setup_logging()."""
    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, _OWNED, False)]:
        root.removeHandler(handler)
        handler.close()
