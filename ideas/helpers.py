"""
This is a helper file used across Ideas.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Iterable

from decouple import config

DATA_LOCATION: Path = Path(config('IDEAS_DATA_LOCATION',
                                  default=str(Path.home() / "Library" / "Application Support" / "Ideas")))  #: Location
# where application data is stored.
LOG_LOCATION: Path = Path(config('IDEAS_LOG_DIR', default=str(Path.home() / "Library" / "Logs" / "Ideas")))  #: Default
# location of log files.


def settings_folder() -> Path:
    """
    Get the location of the Application Data folder for Ideas

    :return: path to the Application Data folder.
    """
    folder = DATA_LOCATION
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def log_file_name() -> str:
    """
    Get a timestamped name for a new log file.

    :return: the log file name.
    """
    return datetime.now().strftime("Ideas_%Y%m%d-%H%M%S") + '.log'


def unique_name(existing: Iterable[str], name: str) -> str:
    """
    Pick a name which isn't in ``existing``, by numbering copies the way Finder does: ``photo.json``,
    ``photo 2.json``, ``photo 3.json``...

    :param existing: names already in use.
    :param name: the preferred name.
    :return: ``name`` if it is free, otherwise the first free numbered copy.
    """
    taken = set(existing)
    if name not in taken:
        return name
    stem, ext = os.path.splitext(name)
    counter = 2
    while '{0} {1}{2}'.format(stem, counter, ext) in taken:
        counter += 1
    return '{0} {1}{2}'.format(stem, counter, ext)

