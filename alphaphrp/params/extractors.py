"""Parameter extractors for tools with ``key=value`` parameter files.

Each extractor loads the raw settings with read_key_value_param_file(),
then derives the normalized fields: enzyme, minimum number of enzymatic
termini, missed cleavages and precursor tolerance.

Unrecognized codes and missing settings are warnings, never failures;
a tolerance that cannot be determined is stored as 0.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Tuple, Union

from ..constants import C_TERMINAL_PEPTIDE_SYMBOL, N_TERMINAL_PEPTIDE_SYMBOL, TOLERANCE_REFERENCE_MZ
from ..data.modifications import ModificationDefinition, ModificationType
from ..data.search_params import SearchEngineParameters
from ..mass_calculator import mass_to_ppm, ppm_to_mass
from ..messages import MessageLog
from ..schema.columns import PeptideHitResultType
from .common import (
    clear_tolerance,
    get_param_float,
    get_param_int,
    read_key_value_param_file,
    store_tolerance,
    store_tolerance_bounds,
)
from .msgf_mods import extract_msgf_mods

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# =============================================================================
# MS-GF+ Family (MS-GF+, MSPathFinder, TopPIC)
# =============================================================================

MSGFPLUS_ENZYMES = {
    0: "no_enzyme",
    1: "trypsin",
    2: "Chymotrypsin",
    3: "Lys-C",
    4: "Lys-N",
    5: "Glu-C",
    6: "Arg-C",
    7: "Asp-N",
    8: "alphaLP",
    9: "no_enzyme_peptidomics",
}

# Tolerance items look like "20ppm" or "0.5Da"; MSPathFinder and TopPIC omit units (always ppm)
_TOLERANCE_WITH_UNITS = re.compile(r"([0-9.]+)([A-Za-z]+)")
_TOLERANCE_NO_UNITS = re.compile(r"([0-9.]+)")


def determine_msgf_precursor_tolerance(
    search_params: SearchEngineParameters,
    result_type: PeptideHitResultType = PeptideHitResultType.MSGFPLUS,
) -> Tuple[float, float]:
    """Precursor tolerance of an MS-GF+, MSPathFinder or TopPIC search.

    The setting may list several comma-separated tolerances, e.g.
    ``0.5Da,2.5Da`` for asymmetric bounds; the larger one wins.

    Parameters
    ----------
    search_params : SearchEngineParameters
        Raw settings already loaded
    result_type : PeptideHitResultType
        Selects the setting name and whether units are present

    Returns
    -------
    tolerance_da, tolerance_ppm : float
        (0, 0) when the setting is missing or unparsable
    """
    if result_type == PeptideHitResultType.TOPPIC:
        setting_names = ("ErrorTolerance",)
    else:
        setting_names = ("PrecursorMassTolerance", "PMTolerance")

    tolerance_text = ""
    for name in setting_names:
        tolerance_text = search_params.parameters.get(name, "")
        if tolerance_text:
            break

    if not tolerance_text:
        return 0.0, 0.0

    ppm_only = result_type in (PeptideHitResultType.MSPATHFINDER, PeptideHitResultType.TOPPIC)
    tolerance_pattern = _TOLERANCE_NO_UNITS if ppm_only else _TOLERANCE_WITH_UNITS

    tolerance_da = 0.0
    tolerance_ppm = 0.0

    for item in tolerance_text.split(','):
        item = item.strip()
        if not item or item.startswith('#'):
            continue

        match = tolerance_pattern.match(item)
        if not match:
            continue

        try:
            value = float(match.group(1))
        except ValueError:
            continue

        units = "ppm" if ppm_only else match.group(2).lower()

        if units == "ppm":
            tolerance_ppm = max(tolerance_ppm, value)
            value_da = _ppm_to_da(value)
        elif units == "da":
            value_da = value
        else:
            logger.debug(f"Ignoring tolerance with unrecognized units: {item}")
            continue

        tolerance_da = max(tolerance_da, value_da)

    if abs(tolerance_ppm) < 1e-12 and abs(tolerance_da) > 0:
        tolerance_ppm = _da_to_ppm(tolerance_da)

    return tolerance_da, tolerance_ppm


def _ppm_to_da(ppm: float) -> float:
    return ppm_to_mass(ppm, TOLERANCE_REFERENCE_MZ)


def _da_to_ppm(da: float) -> float:
    return mass_to_ppm(da, TOLERANCE_REFERENCE_MZ)


def _apply_msgf_tolerance(search_params: SearchEngineParameters, result_type: PeptideHitResultType):
    tolerance_da, tolerance_ppm = determine_msgf_precursor_tolerance(search_params, result_type)
    search_params.precursor_mass_tolerance_da = tolerance_da
    search_params.precursor_mass_tolerance_ppm = tolerance_ppm


def _store_msgf_mods(param_file_path: PathLike, search_params: SearchEngineParameters, message_log: MessageLog):
    modifications, custom_amino_acids = extract_msgf_mods(param_file_path, message_log)
    for mod_definition in modifications:
        search_params.add_modification(mod_definition)
    search_params.custom_amino_acids.update(custom_amino_acids)


def extract_msgfplus_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read an MS-GF+ parameter file.

    ``enzymeid`` maps through the MS-GF+ enzyme table. ``nnet`` (number of
    non-enzymatic termini) takes precedence over ``ntt`` (number of
    tolerable termini) and has the opposite sense.

    StaticMod and DynamicMod lines become modifications; CustomAA lines
    become custom amino acid masses.
    """
    message_log = message_log or MessageLog()
    read_key_value_param_file(param_file_path, search_params, message_log, PeptideHitResultType.MSGFPLUS)

    enzyme_id = get_param_int(search_params, "enzymeid")
    if enzyme_id is not None:
        if enzyme_id in MSGFPLUS_ENZYMES:
            search_params.enzyme = MSGFPLUS_ENZYMES[enzyme_id]
        else:
            message_log.warning(f"Unrecognized enzyme ID {enzyme_id} in the MS-GF+ parameter file")
            search_params.enzyme = "unknown_enzyme"

    nnet = get_param_int(search_params, "nnet")
    if nnet is not None:
        if nnet == 0:
            search_params.min_number_termini = 2
        elif nnet == 1:
            search_params.min_number_termini = 1
        else:
            search_params.min_number_termini = 0
    else:
        ntt = get_param_int(search_params, "ntt")
        if ntt is not None:
            if ntt == 0:
                search_params.min_number_termini = 0
            elif ntt == 1:
                search_params.min_number_termini = 1
            else:
                search_params.min_number_termini = 2

    _apply_msgf_tolerance(search_params, PeptideHitResultType.MSGFPLUS)
    _store_msgf_mods(param_file_path, search_params, message_log)

    charge_carrier_mass = get_param_float(search_params, "ChargeCarrierMass")
    if charge_carrier_mass is not None:
        search_params.charge_carrier_mass = charge_carrier_mass
        message_log.status(f"Using a charge carrier mass of {charge_carrier_mass:.3f} Da")

    return True


def extract_mspathfinder_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read an MSPathFinder parameter file (top-down, no enzyme)."""
    message_log = message_log or MessageLog()
    read_key_value_param_file(param_file_path, search_params, message_log, PeptideHitResultType.MSPATHFINDER)

    search_params.enzyme = "no_enzyme"
    search_params.min_number_termini = 0
    _apply_msgf_tolerance(search_params, PeptideHitResultType.MSPATHFINDER)
    _store_msgf_mods(param_file_path, search_params, message_log)
    return True


def extract_toppic_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read a TopPIC parameter file (top-down, no enzyme)."""
    message_log = message_log or MessageLog()
    read_key_value_param_file(param_file_path, search_params, message_log, PeptideHitResultType.TOPPIC)

    search_params.enzyme = "no_enzyme"
    search_params.min_number_termini = 0
    _apply_msgf_tolerance(search_params, PeptideHitResultType.TOPPIC)
    return True


# =============================================================================
# InSpecT
# =============================================================================

def extract_inspect_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read an InSpecT parameter file (``key,value`` lines).

    ``ParentPPM`` and ``PMTolerance`` (Da) may both be present; the larger
    tolerance, compared in Da, is stored.
    """
    message_log = message_log or MessageLog()
    read_key_value_param_file(param_file_path, search_params, message_log, PeptideHitResultType.INSPECT)

    protease = search_params.parameters.get("protease", "").strip()
    if protease.lower() == "trypsin":
        search_params.enzyme = "trypsin"
    elif protease.lower() == "none":
        search_params.enzyme = "no_enzyme"
    elif protease.lower() == "chymotrypsin":
        search_params.enzyme = "chymotrypsin"
    elif protease:
        search_params.enzyme = protease

    tolerance_ppm_as_da = 0.0
    parent_ppm = get_param_float(search_params, "ParentPPM")
    if parent_ppm is not None:
        store_tolerance(search_params, parent_ppm, ppm_based=True)
        tolerance_ppm_as_da = search_params.precursor_mass_tolerance_da

    pm_tolerance = get_param_float(search_params, "PMTolerance")
    if pm_tolerance is not None and pm_tolerance > tolerance_ppm_as_da:
        store_tolerance(search_params, pm_tolerance, ppm_based=False)

    return True


# =============================================================================
# MSAlign
# =============================================================================

def extract_msalign_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read an MSAlign parameter file.

    ``cysteineProtection`` of C57 or C58 adds a static cysteine mod.
    """
    message_log = message_log or MessageLog()
    read_key_value_param_file(param_file_path, search_params, message_log, PeptideHitResultType.MSALIGN)

    tolerance_ppm = get_param_float(search_params, "errorTolerance")
    if tolerance_ppm is not None:
        store_tolerance(search_params, tolerance_ppm, ppm_based=True)

    cysteine_protection = search_params.parameters.get("cysteineProtection", "").strip().upper()
    if cysteine_protection == "C57":
        search_params.add_modification(
            ModificationDefinition("IodoAcet", 57.0215, "C", ModificationType.STATIC, mass_as_text="57.0215")
        )
    elif cysteine_protection == "C58":
        search_params.add_modification(
            ModificationDefinition("IodoAcid", 58.0055, "C", ModificationType.STATIC, mass_as_text="58.0055")
        )

    return True


# =============================================================================
# MODa
# =============================================================================

MODA_STATIC_MOD_RESIDUES = "ACDEFGHIKLMNPQRSTVWY"


def _add_moda_static_mod(
    search_params: SearchEngineParameters,
    setting_name: str,
    target_residues: str,
    mod_type: ModificationType,
):
    mass = get_param_float(search_params, setting_name)
    if mass is None or abs(mass) < 1e-12:
        return

    search_params.add_modification(ModificationDefinition(
        mass_correction_tag=f"Mod{mass:.0f}",
        mass=mass,
        target_residues=target_residues,
        mod_type=mod_type,
        mass_as_text=search_params.parameters[setting_name],
    ))


def extract_moda_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read a MODa parameter file.

    ``ADD=C,57.021`` lines are stored as ``ADD_C`` and become static mods;
    ``ADD_NTerm`` and ``ADD_CTerm`` become peptide-terminal static mods.
    """
    message_log = message_log or MessageLog()
    read_key_value_param_file(param_file_path, search_params, message_log, PeptideHitResultType.MODA)

    tolerance_ppm = get_param_float(search_params, "PPMTolerance")
    if tolerance_ppm is not None:
        store_tolerance(search_params, tolerance_ppm, ppm_based=True)
    else:
        tolerance_da = get_param_float(search_params, "PeptTolerance")
        if tolerance_da is not None:
            store_tolerance(search_params, tolerance_da, ppm_based=False)

    for residue in MODA_STATIC_MOD_RESIDUES:
        _add_moda_static_mod(search_params, f"ADD_{residue}", residue, ModificationType.STATIC)

    _add_moda_static_mod(search_params, "ADD_NTerm", N_TERMINAL_PEPTIDE_SYMBOL,
                         ModificationType.TERMINAL_PEPTIDE_STATIC)
    _add_moda_static_mod(search_params, "ADD_CTerm", C_TERMINAL_PEPTIDE_SYMBOL,
                         ModificationType.TERMINAL_PEPTIDE_STATIC)

    return True


# =============================================================================
# MSFragger and DIA-NN
# =============================================================================

MSFRAGGER_ENZYMES = frozenset((
    "argc", "aspn", "chymotrypsin", "cnbr", "elastase", "formicacid", "gluc",
    "gluc_bicarb", "lysc", "lysc-p", "lysn", "lysn_promisc", "nonspecific",
    "null", "stricttrypsin", "thermolysin", "trypsin", "trypsin/chymotrypsin",
    "trypsin/cnbr", "trypsin_gluc", "trypsin_k", "trypsin_r",
))

DIANN_CLEAVAGE_SPECIFICITIES = {
    "K*,R*": "trypsin",         # proline rule ignored
    "K*,R*,!*P": "trypsin",
    "K*": "lysc",
    "F*,W*,Y*,L*": "chymotrypsin",
    "D*": "aspn",
    "E*,D*": "gluc",
}


def msfragger_parameter_prefix(search_params: SearchEngineParameters) -> str:
    """``msfragger.`` for FragPipe workflow files, else an empty string."""
    if ("msfragger.precursor_mass_lower" in search_params.parameters or
            "msfragger.precursor_mass_units" in search_params.parameters):
        return "msfragger."
    return ""


def _tolerance_units_are_ppm(units: int, setting_name: str, message_log: MessageLog) -> bool:
    if units == 0:
        return False
    if units == 1:
        return True
    message_log.warning(f"Unrecognized value for {setting_name}: {units}; assuming Da")
    return False


def get_precursor_search_tolerances(
    search_params: SearchEngineParameters,
    prefix: str,
    message_log: MessageLog,
) -> Optional[Tuple[float, float, bool]]:
    """Lower bound, upper bound and ppm flag from MSFragger-style settings.

    ``precursor_mass_lower``/``precursor_mass_upper`` take precedence over
    the single ``precursor_true_tolerance``. Returns None when neither is
    defined.
    """
    lower = get_param_float(search_params, prefix + "precursor_mass_lower")
    upper = get_param_float(search_params, prefix + "precursor_mass_upper")
    units = get_param_int(search_params, prefix + "precursor_mass_units")

    if lower is not None and upper is not None and units is not None:
        return lower, upper, _tolerance_units_are_ppm(units, "precursor_mass_units", message_log)

    true_tolerance = get_param_float(search_params, prefix + "precursor_true_tolerance")
    true_units = get_param_int(search_params, prefix + "precursor_true_units")

    if true_tolerance is not None and true_units is not None:
        ppm_based = _tolerance_units_are_ppm(true_units, "precursor_true_units", message_log)
        return true_tolerance, true_tolerance, ppm_based

    return None


def _apply_precursor_search_tolerances(search_params, prefix, message_log):
    tolerances = get_precursor_search_tolerances(search_params, prefix, message_log)
    if tolerances is None:
        clear_tolerance(search_params)
        return

    lower, upper, ppm_based = tolerances
    store_tolerance_bounds(search_params, lower, upper, ppm_based)


def extract_msfragger_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read an MSFragger (or FragPipe workflow) parameter file."""
    message_log = message_log or MessageLog()
    read_key_value_param_file(param_file_path, search_params, message_log, PeptideHitResultType.MSFRAGGER)

    prefix = msfragger_parameter_prefix(search_params)
    parameters = search_params.parameters

    # search_enzyme_name_1 replaced search_enzyme_name in MSFragger 3.4
    if prefix + "search_enzyme_name_1" in parameters:
        enzyme_name = parameters[prefix + "search_enzyme_name_1"]
    elif prefix + "search_enzyme_name" in parameters:
        enzyme_name = parameters[prefix + "search_enzyme_name"]
    else:
        enzyme_name = ""
        message_log.warning(
            "The MSFragger parameter file does not have parameter 'search_enzyme_name' or 'search_enzyme_name_1'"
        )

    if enzyme_name.strip():
        search_params.enzyme = enzyme_name
        if enzyme_name not in MSFRAGGER_ENZYMES:
            message_log.warning(f"Unrecognized enzyme '{enzyme_name}' in the MSFragger parameter file")

    num_termini = parameters.get(prefix + "num_enzyme_termini")
    if num_termini is None:
        message_log.warning("'num_enzyme_termini' parameter not found in the MSFragger parameter file")
    elif num_termini in ("0", "1", "2"):
        search_params.min_number_termini = int(num_termini)
    else:
        message_log.warning(f"Unrecognized value for num_enzyme_termini in the MSFragger parameter file: {num_termini}")

    _apply_precursor_search_tolerances(search_params, prefix, message_log)
    return True


def extract_diann_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """Read a DIA-NN parameter file; searches are assumed fully tryptic."""
    message_log = message_log or MessageLog()
    read_key_value_param_file(param_file_path, search_params, message_log, PeptideHitResultType.DIANN)

    cleavage_specificity = search_params.parameters.get("CleavageSpecificity")
    if cleavage_specificity is None:
        message_log.warning("The DIA-NN parameter file does not have parameter 'CleavageSpecificity'")
    elif cleavage_specificity.strip():
        enzyme = DIANN_CLEAVAGE_SPECIFICITIES.get(cleavage_specificity.strip())
        if enzyme is None:
            message_log.warning(
                f"Unrecognized cleavage specificity '{cleavage_specificity}' in the DIA-NN parameter file"
            )
            enzyme = cleavage_specificity
        search_params.enzyme = enzyme

    search_params.min_number_termini = 2

    missed_cleavages = get_param_int(search_params, "MissedCleavages")
    if missed_cleavages is not None:
        search_params.max_number_internal_cleavages = missed_cleavages

    _apply_precursor_search_tolerances(search_params, "", message_log)
    return True


# =============================================================================
# MaxQuant
# =============================================================================

def extract_maxquant_params(
    param_file_path: PathLike,
    search_params: SearchEngineParameters,
    message_log: Optional[MessageLog] = None,
) -> bool:
    """MaxQuant writes parameters to an XML file that is not parsed."""
    message_log = message_log or MessageLog()

    if not Path(param_file_path).is_file():
        raise FileNotFoundError(f"MaxQuant param file not found: {param_file_path}")

    message_log.warning(f"Reading MaxQuant parameter files is not supported: {Path(param_file_path).name}")
    return False
