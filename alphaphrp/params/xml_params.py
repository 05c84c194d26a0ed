"""XML parameter files: MODPlus and X!Tandem.

MODPlus writes one XML document under ``<search>``. X!Tandem writes
``<note type="input" label="...">value</note>`` pairs and points to a
default-parameters file and a taxonomy file (which names the FASTA file).
"""

import logging
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from lxml import etree

from ..constants import (
    C_TERMINAL_PEPTIDE_SYMBOL,
    MASS_TYPE_AVERAGE,
    MASS_TYPE_MONOISOTOPIC,
    N_TERMINAL_PEPTIDE_SYMBOL,
)
from ..data.modifications import ModificationDefinition, ModificationType
from ..data.search_params import SearchEngineParameters
from ..messages import MessageLog
from .common import store_tolerance, store_tolerance_bounds

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _require_file(param_file_path: PathLike, engine_name: str) -> Path:
    param_file_path = Path(param_file_path)
    if not param_file_path.is_file():
        raise FileNotFoundError(f"{engine_name} param file not found: {param_file_path}")
    return param_file_path


def _try_float(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    try:
        return float(text.strip())
    except ValueError:
        return None


def _try_int(text: Optional[str]) -> Optional[int]:
    if text is None:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None


# =============================================================================
# MODPlus
# =============================================================================

def resolution_to_mass_type(resolution: str) -> str:
    """``high`` -> monoisotopic, ``low`` -> average, else ``unknown``."""
    if resolution == "high":
        return MASS_TYPE_MONOISOTOPIC
    if resolution == "low":
        return MASS_TYPE_AVERAGE
    return "unknown"


def extract_modplus_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read a MODPlus XML parameter file.

    MODPlus performs a blind search, so the only modifications stored are
    the fixed mods of ``/search/modifications/fixed``.

    Returns
    -------
    bool
        False if the file is not well-formed XML

    Raises
    ------
    FileNotFoundError
        If the parameter file does not exist
    """
    message_log = message_log or MessageLog()
    param_file_path = _require_file(param_file_path, search_params.search_engine_name)
    search_params.param_file_path = str(param_file_path)

    try:
        root = etree.parse(str(param_file_path)).getroot()
    except etree.XMLSyntaxError as e:
        message_log.error(f"Error reading MODPlus parameter file {param_file_path.name}: {e}")
        return False

    # Paths below are relative to the <search> root element
    database = root.find("database")
    if database is not None:
        search_params.fasta_file_path = database.get("local_path", "")

    enzyme_rule = root.find("enzyme_rule")
    if enzyme_rule is not None:
        search_params.enzyme = enzyme_rule.get("name", "")

    resolution = root.find("instrument_resolution")
    if resolution is not None:
        search_params.precursor_mass_type = resolution_to_mass_type(resolution.get("ms", ""))
        search_params.fragment_mass_type = resolution_to_mass_type(resolution.get("msms", ""))

    enzyme_constraint = root.find("parameters/enzyme_constraint")
    if enzyme_constraint is not None:
        max_missed = _try_int(enzyme_constraint.get("max_miss_cleavages"))
        if max_missed is not None:
            search_params.max_number_internal_cleavages = max_missed

        min_termini = _try_int(enzyme_constraint.get("min_number_termini"))
        if min_termini is not None:
            search_params.min_number_termini = min_termini

    mass_tolerance = root.find("parameters/peptide_mass_tol")
    if mass_tolerance is not None:
        tolerance = _try_float(mass_tolerance.get("value"))
        units = mass_tolerance.get("unit", "").lower()

        if tolerance is not None and units == "ppm":
            store_tolerance(search_params, tolerance, ppm_based=True)
        elif tolerance is not None and units == "da":
            store_tolerance(search_params, tolerance, ppm_based=False)

    for mod_node in root.iterfind("modifications/fixed/mod"):
        residue = mod_node.get("site", "").strip()
        if residue.lower() == "n-term":
            residue = N_TERMINAL_PEPTIDE_SYMBOL
        elif residue.lower() == "c-term":
            residue = C_TERMINAL_PEPTIDE_SYMBOL

        mass_text = mod_node.get("massdiff", "")
        mod_mass = _try_float(mass_text)
        if mod_mass is None or abs(mod_mass) < 1e-12:
            continue

        if residue in (N_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL):
            mod_type = ModificationType.TERMINAL_PEPTIDE_STATIC
        else:
            mod_type = ModificationType.STATIC

        search_params.add_modification(ModificationDefinition(
            mass_correction_tag=f"Mod{mod_mass:.0f}",
            mass=mod_mass,
            target_residues=residue,
            mod_type=mod_type,
            mass_as_text=mass_text.strip(),
        ))

    return True


# =============================================================================
# X!Tandem
# =============================================================================

DEFAULT_PARAMETERS_KEY = "list path, default parameters"
TAXONOMY_INFO_KEY = "list path, taxonomy information"

XTANDEM_ERROR_UNITS_KEY = "spectrum, parent monoisotopic mass error units"
XTANDEM_ERROR_MINUS_KEY = "spectrum, parent monoisotopic mass error minus"
XTANDEM_ERROR_PLUS_KEY = "spectrum, parent monoisotopic mass error plus"


def iter_input_notes(xml_file_path: PathLike) -> Iterator[Tuple[str, str]]:
    """Yield (label, text) for every ``<note type="input">`` element."""
    root = etree.parse(str(xml_file_path)).getroot()
    for note in root.iter("note"):
        if note.get("type") != "input":
            continue
        label = note.get("label", "")
        if label:
            yield label, (note.text or "").strip()


def fasta_file_from_taxonomy_file(taxonomy_file_path: PathLike, message_log: MessageLog) -> str:
    """URL of the ``<file format="peptide">`` entry of an X!Tandem taxonomy file."""
    taxonomy_file_path = Path(taxonomy_file_path)
    if not taxonomy_file_path.is_file():
        message_log.warning(f"Taxonomy file not found: {taxonomy_file_path}")
        return ""

    try:
        root = etree.parse(str(taxonomy_file_path)).getroot()
    except etree.XMLSyntaxError as e:
        message_log.error(f"Error reading taxonomy file {taxonomy_file_path.name}: {e}")
        return ""

    for file_node in root.iter("file"):
        if file_node.get("format") == "peptide":
            return file_node.get("URL", "")

    return ""


def _read_xtandem_notes(
    param_file_path: Path,
    search_params: SearchEngineParameters,
    message_log: MessageLog,
    follow_default_parameters: bool,
):
    input_directory = param_file_path.parent
    notes = list(iter_input_notes(param_file_path))

    if follow_default_parameters:
        for label, value in notes:
            if label != DEFAULT_PARAMETERS_KEY or not value:
                continue

            default_params_path = input_directory / Path(value.replace('\\', '/')).name
            if default_params_path.is_file():
                # Settings in the main file override the defaults, so read these first
                _read_xtandem_notes(default_params_path, search_params, message_log, False)
            else:
                message_log.warning(f"X!Tandem default parameters file not found: {default_params_path.name}")
            break

    for label, value in notes:
        search_params.add_update_parameter(label, value)

        if label == TAXONOMY_INFO_KEY:
            taxonomy_path = input_directory / Path(value.replace('\\', '/')).name
            fasta_file = fasta_file_from_taxonomy_file(taxonomy_path, message_log)
            if fasta_file:
                search_params.fasta_file_path = fasta_file

        elif label == "spectrum, fragment mass type":
            search_params.fragment_mass_type = value

        elif label == "scoring, maximum missed cleavage sites":
            max_missed = _try_int(value)
            if max_missed is not None:
                search_params.max_number_internal_cleavages = max_missed


def determine_xtandem_precursor_tolerance(search_params: SearchEngineParameters):
    """Parent mass error bounds (minus/plus) in Da or ppm; 0 when missing."""
    units = search_params.parameters.get(XTANDEM_ERROR_UNITS_KEY, "")
    ppm_based = units.strip().lower() == "ppm"

    tolerance_minus = _try_float(search_params.parameters.get(XTANDEM_ERROR_MINUS_KEY)) or 0.0
    tolerance_plus = _try_float(search_params.parameters.get(XTANDEM_ERROR_PLUS_KEY)) or 0.0

    store_tolerance_bounds(search_params, tolerance_minus, tolerance_plus, ppm_based)


def extract_xtandem_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read an X!Tandem input XML file, its default-parameters file and taxonomy file.

    Raises
    ------
    FileNotFoundError
        If the parameter file does not exist
    """
    message_log = message_log or MessageLog()
    param_file_path = _require_file(param_file_path, search_params.search_engine_name)
    search_params.param_file_path = str(param_file_path)

    try:
        _read_xtandem_notes(param_file_path, search_params, message_log, True)
    except etree.XMLSyntaxError as e:
        message_log.error(f"Error reading X!Tandem parameter file {param_file_path.name}: {e}")
        return False

    determine_xtandem_precursor_tolerance(search_params)
    return True
