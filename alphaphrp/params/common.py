"""Shared pieces of search-engine parameter extraction.

Most tools write ``key=value`` parameter files; InSpecT uses ``key,value``.
Tolerances are normalized to both Da and ppm, converting between the two at
a fixed reference of 2000 m/z (the same approximation every PHRP tool uses,
kept for numeric compatibility).

Examples
--------
>>> params = SearchEngineParameters("MS-GF+")
>>> store_tolerance(params, 20.0, ppm_based=True)
>>> round(params.precursor_mass_tolerance_da, 6)
0.04
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from ..constants import TOLERANCE_REFERENCE_MZ
from ..data.search_params import SearchEngineParameters
from ..mass_calculator import mass_to_ppm, ppm_to_mass
from ..schema.columns import PeptideHitResultType

logger = logging.getLogger(__name__)


# =============================================================================
# Key/Value Files
# =============================================================================

def parse_key_value_setting(text: str, delimiter: str = '=', comment_char: str = "") -> Tuple[str, str]:
    """Split ``key<delimiter>value``, trimming both sides.

    Returns ("", "") when the delimiter is missing or the key is empty.
    When comment_char is given, it and everything after it are removed from
    the value.

    >>> parse_key_value_setting("PrecursorMassTolerance=20ppm  # tolerance", '=', '#')
    ('PrecursorMassTolerance', '20ppm')
    """
    if not text:
        return "", ""

    char_index = text.find(delimiter)
    if char_index <= 0:
        return "", ""

    key = text[:char_index].strip()
    value = text[char_index + 1:].strip()

    if comment_char and value:
        comment_index = value.find(comment_char)
        if comment_index > 0:
            value = value[:comment_index].strip()

    return key, value


def _moda_static_mod_setting(key: str, value: str, message_log) -> Tuple[str, str]:
    """``ADD=C,57.021`` becomes (``ADD_C``, ``57.021``)."""
    comma_index = value.find(',')
    if comma_index <= 0:
        message_log.warning("Value for MODa keyword ADD does not contain a comma")
        return key, value

    residue = value[:comma_index].strip()
    return f"{key}_{residue}", value[comma_index + 1:].strip()


def read_key_value_param_file(
    param_file_path: Union[str, Path],
    search_params: SearchEngineParameters,
    message_log,
    result_type: PeptideHitResultType = PeptideHitResultType.UNKNOWN,
) -> bool:
    """Load every ``key=value`` setting of a parameter file into search_params.

    Parameters
    ----------
    param_file_path : str or Path
    search_params : SearchEngineParameters
        Receives the settings in ``parameters``
    message_log : MessageLog
    result_type : PeptideHitResultType
        InSpecT files use a comma delimiter; MODa ``ADD`` settings are
        stored per residue

    Returns
    -------
    bool
        True when the file was read

    Raises
    ------
    FileNotFoundError
        If the parameter file does not exist
    """
    param_file_path = Path(param_file_path)
    if not param_file_path.is_file():
        raise FileNotFoundError(f"{search_params.search_engine_name} param file not found: {param_file_path}")

    search_params.param_file_path = str(param_file_path)
    delimiter = ',' if result_type == PeptideHitResultType.INSPECT else '='

    with open(param_file_path, encoding='utf-8', errors='replace') as f:
        for line in f:
            data_line = line.strip()
            if not data_line or data_line.startswith('#') or delimiter not in data_line:
                continue

            key, value = parse_key_value_setting(data_line, delimiter, '#')
            if not key:
                continue

            if result_type == PeptideHitResultType.MODA and key.lower() == "add":
                key, value = _moda_static_mod_setting(key, value, message_log)

            search_params.add_update_parameter(key, value)

    logger.debug(f"Read {len(search_params.parameters)} settings from {param_file_path.name}")
    return True


# =============================================================================
# Typed Setting Lookups
# =============================================================================

def get_param_float(search_params: SearchEngineParameters, name: str) -> Optional[float]:
    """Float value of a setting, or None if missing or not numeric."""
    value = search_params.parameters.get(name)
    if value is None:
        return None
    try:
        return float(value.strip())
    except ValueError:
        return None


def get_param_int(search_params: SearchEngineParameters, name: str) -> Optional[int]:
    value = search_params.parameters.get(name)
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


# =============================================================================
# Tolerances
# =============================================================================

def store_tolerance(search_params: SearchEngineParameters, tolerance: float, ppm_based: bool):
    """Store a tolerance in both units, converting at 2000 m/z."""
    if ppm_based:
        search_params.precursor_mass_tolerance_ppm = tolerance
        search_params.precursor_mass_tolerance_da = ppm_to_mass(tolerance, TOLERANCE_REFERENCE_MZ)
    else:
        search_params.precursor_mass_tolerance_da = tolerance
        search_params.precursor_mass_tolerance_ppm = mass_to_ppm(tolerance, TOLERANCE_REFERENCE_MZ)


def combine_tolerance_bounds(lower: float, upper: float) -> float:
    """Single tolerance from lower/upper bounds.

    Symmetric bounds give the bound itself; asymmetric bounds give the mean
    of their absolute values.

    >>> combine_tolerance_bounds(-10, 30)
    20.0
    >>> combine_tolerance_bounds(-20, 20)
    20.0
    """
    lower = abs(lower)
    upper = abs(upper)
    if abs(lower - upper) < 1e-7:
        return float(upper)
    return (lower + upper) / 2.0


def store_tolerance_bounds(search_params: SearchEngineParameters, lower: float, upper: float, ppm_based: bool):
    store_tolerance(search_params, combine_tolerance_bounds(lower, upper), ppm_based)


def clear_tolerance(search_params: SearchEngineParameters):
    search_params.precursor_mass_tolerance_da = 0.0
    search_params.precursor_mass_tolerance_ppm = 0.0
