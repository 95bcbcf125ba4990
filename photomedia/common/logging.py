# photomedia/common/logging.py
from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_of(level: int | str) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).strip().upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def get_logger(name: str = "photomedia", level: int | str = logging.INFO) -> logging.Logger:
    """
    Return a named logger. Under Uvicorn the root already has handlers and we
    leave them alone; otherwise basicConfig runs once.

    `level` accepts either a logging constant or a name from settings ("DEBUG").
    """
    lvl = _level_of(level)
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(level=lvl, format=_FORMAT)
    logger.setLevel(lvl)
    return logger
