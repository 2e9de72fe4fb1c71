"""NoteGrimoire - turn selections of rendered explanations into notes.

A selection taken from rendered markdown (KaTeX formulas, superscripts,
subscripts, emphasis, tables) is turned into a normalized plain-text form
and a sanitized canonical markup form, ready to store or to drag elsewhere.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"

# Handlers installed by setup_logging carry this name so a repeat call
# replaces them instead of stacking duplicates
_HANDLER_NAME = "notegrimoire"


def setup_logging(level: int = logging.INFO, log_dir: Path | None = None) -> None:
    """Configure logging to the console and, optionally, a rotating file.

    Args:
        level: Console log level.
        log_dir: Directory for ``notegrimoire.log``. No file handler when None.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in list(root_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "notegrimoire.log"

    # 10MB, keep 5 backups
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.set_name(_HANDLER_NAME)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())
