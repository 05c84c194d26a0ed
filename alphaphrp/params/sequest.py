"""SEQUEST parameter files.

SEQUEST files are ``key = value`` lines with ``;`` comments and
``[section]`` headers. Old-style files name the enzyme with
``enzyme_number``; new-style files use ``enzyme_info``, e.g.::

    enzyme_info = Trypsin(KR) 1 1 KR -      # fully tryptic
    enzyme_info = Trypsin(KR) 2 1 KR -      # partially tryptic
    enzyme_info = No_Enzyme(-) 0 0 - -
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from ..constants import MASS_TYPE_AVERAGE, MASS_TYPE_MONOISOTOPIC
from ..data.search_params import SearchEngineParameters
from ..messages import MessageLog
from .common import clear_tolerance, get_param_float, parse_key_value_setting, store_tolerance

logger = logging.getLogger(__name__)


SEQUEST_ENZYMES = {
    1: "trypsin",
    2: "trypsin_modified",
    3: "Chymotrypsin",
    4: "Chymotrypsin_modified",
    5: "Clostripain",
    6: "Cyanogen_Bromide",
    7: "IodosoBenzoate",
    8: "Proline_Endopept",
    9: "Staph_Protease",
    10: "Trypsin_K",
    11: "Trypsin_R",
    12: "GluC",
    13: "LysC",
    14: "AspN",
    15: "Elastase",
    16: "Elastase/Tryp/Chymo",
}

# First number after the enzyme name is the cleavage specificity
_ENZYME_SPECIFICITY = re.compile(r"^\S+\s(\d)\s\d\s.+", re.IGNORECASE)

# peptide_mass_units codes
UNITS_DA = 0
UNITS_MMU = 1
UNITS_PPM = 2


def _mass_type(setting_value: str) -> str:
    return MASS_TYPE_AVERAGE if setting_value == "0" else MASS_TYPE_MONOISOTOPIC


def _apply_setting(search_params: SearchEngineParameters, key: str, value: str):
    key = key.lower()

    if key in ("first_database_name", "database_name"):
        search_params.fasta_file_path = Path(value.replace('\\', '/')).name or value

    elif key == "mass_type_parent":
        search_params.precursor_mass_type = _mass_type(value)

    elif key == "mass_type_fragment":
        search_params.fragment_mass_type = _mass_type(value)

    elif key == "max_num_internal_cleavage_sites":
        try:
            search_params.max_number_internal_cleavages = int(value)
        except ValueError:
            pass

    elif key == "enzyme_info":
        search_params.enzyme = "trypsin"
        if value.lower().startswith("no_enzyme"):
            search_params.min_number_termini = 0
        else:
            match = _ENZYME_SPECIFICITY.match(value)
            if match:
                search_params.min_number_termini = int(match.group(1))

    elif key == "enzyme_number":
        try:
            enzyme_number = int(value)
        except ValueError:
            return

        if enzyme_number == 0:
            # No enzyme
            search_params.enzyme = "trypsin"
            search_params.min_number_termini = 0
        else:
            search_params.enzyme = SEQUEST_ENZYMES.get(enzyme_number, "Unknown")
            search_params.min_number_termini = 2


def determine_sequest_precursor_tolerance(search_params: SearchEngineParameters):
    """Store ``peptide_mass_tolerance`` in Da and ppm; 0 when missing."""
    tolerance = get_param_float(search_params, "peptide_mass_tolerance")
    if tolerance is None:
        clear_tolerance(search_params)
        return

    units = UNITS_DA
    units_text = search_params.parameters.get("peptide_mass_units", "").strip()
    if units_text:
        try:
            units = int(units_text)
        except ValueError:
            units = UNITS_DA

    if units == UNITS_PPM:
        store_tolerance(search_params, tolerance, ppm_based=True)
    elif units == UNITS_MMU:
        store_tolerance(search_params, tolerance / 1000.0, ppm_based=False)
    else:
        store_tolerance(search_params, tolerance, ppm_based=False)


def extract_sequest_params(
    param_file_path: Union[str, Path],
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read a SEQUEST parameter file into search_params.

    Raises
    ------
    FileNotFoundError
        If the parameter file does not exist
    """
    param_file_path = Path(param_file_path)
    if not param_file_path.is_file():
        raise FileNotFoundError(f"SEQUEST param file not found: {param_file_path}")

    search_params.param_file_path = str(param_file_path)

    with open(param_file_path, encoding='utf-8', errors='replace') as f:
        for line in f:
            data_line = line.lstrip()
            if not data_line.strip():
                continue
            if data_line.startswith(';') or data_line.startswith('[') or '=' not in data_line:
                continue

            key, value = parse_key_value_setting(data_line, '=', ';')
            if not key:
                continue

            search_params.add_update_parameter(key, value)
            _apply_setting(search_params, key, value)

    determine_sequest_precursor_tolerance(search_params)

    logger.debug(f"Read SEQUEST parameters from {param_file_path.name}: {search_params}")
    return True
