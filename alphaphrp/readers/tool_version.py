"""Tool_Version_Info file reader.

Analysis pipelines write a small text file next to the search results::

    Date: 11/19/2021 3:45:22 PM
    ToolVersionInfo:
    MS-GF+, v2021.09.06

The version may follow ``ToolVersionInfo:`` on the same line or on the
next one.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

from ..data.search_params import DEFAULT_SEARCH_DATE, SearchEngineParameters
from ..messages import MessageLog
from ..params.common import parse_key_value_setting

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


DATE_FORMATS = (
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
)


def parse_search_date(text: str) -> Optional[datetime]:
    """Parse a Tool_Version_Info date; None if no known format matches.

    >>> parse_search_date("11/19/2021 3:45:22 PM")
    datetime.datetime(2021, 11, 19, 15, 45, 22)
    """
    text = text.strip()
    for date_format in DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format)
        except ValueError:
            continue
    return None


def find_tool_version_file(input_directory: PathLike, candidate_names: Iterable[str]) -> Optional[Path]:
    """First candidate file that exists in input_directory."""
    input_directory = Path(input_directory)
    for name in candidate_names:
        file_path = input_directory / name
        if file_path.is_file():
            return file_path
    return None


def read_tool_version_info(
    input_directory: PathLike,
    candidate_names: Iterable[str],
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Store the search engine version and search date in search_params.

    Parameters
    ----------
    input_directory : str or Path
        Directory holding the search results
    candidate_names : Iterable[str]
        Tool_Version_Info file names to try, in order
    search_params : SearchEngineParameters
    message_log : MessageLog, optional

    Returns
    -------
    bool
        True when both the date and the version were found. A missing file
        is a warning; a file without a date or version line is an error.
        Whatever was found is stored either way.
    """
    message_log = message_log or MessageLog()
    candidate_names = list(candidate_names)

    file_path = find_tool_version_file(input_directory, candidate_names)
    if file_path is None:
        expected = candidate_names[0] if candidate_names else "Tool_Version_Info file"
        message_log.warning(f"Tool version info file not found: {Path(input_directory) / expected}")
        return False

    search_engine_version = "Unknown"
    search_date = DEFAULT_SEARCH_DATE
    valid_date = False
    valid_version = False

    with open(file_path, encoding='utf-8', errors='replace') as f:
        lines = [line.rstrip('\r\n') for line in f]

    index = 0
    while index < len(lines):
        data_line = lines[index].lstrip()
        index += 1
        if not data_line:
            continue

        key, value = parse_key_value_setting(data_line, ':')
        key = key.lower()

        if key == "date":
            parsed = parse_search_date(value)
            if parsed is not None:
                search_date = parsed
                valid_date = True

        elif key == "toolversioninfo":
            if value:
                search_engine_version = value
                valid_version = True
            elif index < len(lines) and lines[index].strip():
                # Version is on the next line
                search_engine_version = lines[index].strip()
                valid_version = True
                index += 1

    if not valid_date:
        message_log.error("Date line not found in the ToolVersionInfo file")
    elif not valid_version:
        message_log.error("ToolVersionInfo line not found in the ToolVersionInfo file")

    search_params.search_engine_version = search_engine_version
    search_params.search_date = search_date

    logger.debug(f"{file_path.name}: version {search_engine_version}, date {search_date:%Y-%m-%d}")
    return valid_date and valid_version
