"""PHRP file naming conventions and result-type detection.

Every side file is named after the dataset plus a tool-specific stem:

>>> mod_summary_file_name(PeptideHitResultType.MSGFPLUS, "QC_Shew_20_01")
'QC_Shew_20_01_msgfplus_syn_ModSummary.txt'
>>> auto_determine_dataset_name("QC_Shew_20_01_msgfplus_syn.txt")
'QC_Shew_20_01'
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..constants import UNDEFINED_DATASET_NAME
from .columns import (
    MSGFDB_SPEC_PROB,
    MSGFPLUS_SPEC_EVALUE,
    PeptideHitResultType,
    ToolSchema,
)
from .tools import TOOL_SCHEMAS, schema_for

logger = logging.getLogger(__name__)


# Suffixes of PHRP side files; stripped when guessing the dataset name
AUXILIARY_FILE_SUFFIXES = (
    "_ResultToSeqMap.txt",
    "_SeqToProteinMap.txt",
    "_SeqInfo.txt",
    "_MSGF.txt",
    "_peptides.txt",
    "_ProteinMods.txt",
    "_ModDetails.txt",
    "_ModSummary.txt",
)

# Written by MSGFDB before it was renamed MS-GF+
LEGACY_MSGFPLUS_SUFFIXES = ("_msgfdb_syn.txt", "_msgfdb_fht.txt")


def _schema(result_type: Union[PeptideHitResultType, str, ToolSchema]) -> ToolSchema:
    if isinstance(result_type, ToolSchema):
        return result_type
    return schema_for(result_type)


# =============================================================================
# File Names
# =============================================================================

def synopsis_file_name(result_type, dataset_name: str) -> str:
    return dataset_name + _schema(result_type).syn_suffix


def first_hits_file_name(result_type, dataset_name: str) -> str:
    """First-hits file name; empty for tools that only write a synopsis file."""
    schema = _schema(result_type)
    if not schema.fht_suffix:
        return ""
    return dataset_name + schema.fht_suffix


def mod_summary_file_name(result_type, dataset_name: str) -> str:
    return dataset_name + _schema(result_type).side_file_stem + "_ModSummary.txt"


def protein_mods_file_name(result_type, dataset_name: str) -> str:
    return dataset_name + _schema(result_type).side_file_stem + "_ProteinMods.txt"


def result_to_seq_map_file_name(result_type, dataset_name: str) -> str:
    return dataset_name + _schema(result_type).side_file_stem + "_ResultToSeqMap.txt"


def seq_info_file_name(result_type, dataset_name: str) -> str:
    return dataset_name + _schema(result_type).side_file_stem + "_SeqInfo.txt"


def seq_to_protein_map_file_name(result_type, dataset_name: str) -> str:
    return dataset_name + _schema(result_type).side_file_stem + "_SeqToProteinMap.txt"


def pep_to_prot_map_file_name(result_type, dataset_name: str) -> str:
    """PepToProtMapMTS file name (``Dataset_msgfplus_PepToProtMapMTS.txt``)."""
    schema = _schema(result_type)
    infix = "_" + schema.file_infix if schema.file_infix else ""
    return dataset_name + infix + "_PepToProtMapMTS.txt"


def _switch_infix(file_name: str, old: str, new: str) -> Optional[str]:
    index = file_name.lower().rfind(old.lower())
    if index < 0:
        return None
    return file_name[:index] + new + file_name[index + len(old):]


def side_file_candidates(phrp_data_file_name: str, preferred_name: str) -> List[str]:
    """Side-file names to try for a synopsis or first-hits file, best first.

    Side files of a first-hits file say ``_fht`` where synopsis side files
    say ``_syn``; files written by MSGFDB say ``_msgfdb`` instead of
    ``_msgfplus``. preferred_name itself is always the last candidate.

    >>> side_file_candidates("Ds_msgfplus_fht.txt", "Ds_msgfplus_syn_SeqInfo.txt")
    ['Ds_msgfplus_fht_SeqInfo.txt', 'Ds_msgfplus_syn_SeqInfo.txt']
    """
    base_name = Path(phrp_data_file_name).name.lower() if phrp_data_file_name else ""
    file_name = preferred_name

    if "_msgfdb" in base_name:
        file_name = _switch_infix(file_name, "_msgfplus", "_msgfdb") or file_name

    candidates = []
    if "_fht" in base_name:
        fht_name = _switch_infix(file_name, "_syn", "_fht")
        if fht_name:
            candidates.append(fht_name)

    candidates.append(file_name)
    if preferred_name not in candidates:
        candidates.append(preferred_name)
    return candidates


def find_side_file(directory: Union[str, Path], phrp_data_file_name: str, preferred_name: str) -> Path:
    """First existing side-file candidate in directory (else the first candidate)."""
    directory = Path(directory)
    candidates = [directory / name for name in side_file_candidates(phrp_data_file_name, preferred_name)]
    for file_path in candidates:
        if file_path.is_file():
            return file_path
    return candidates[0]


def tool_version_info_file_names(result_type) -> List[str]:
    """Candidate Tool_Version_Info file names, most recent naming first."""
    if result_type == PeptideHitResultType.UNKNOWN:
        return []
    return list(_schema(result_type).tool_version_files)


# =============================================================================
# Dataset Name Detection
# =============================================================================

def _strip_suffix(text: str, suffix: str) -> Optional[str]:
    if suffix and text.lower().endswith(suffix.lower()):
        return text[:len(text) - len(suffix)]
    return None


def _trim_auxiliary_suffix(file_path: str) -> Optional[str]:
    """``X_syn_SeqInfo.txt`` -> ``X_syn.txt``; None if there is no side-file suffix."""
    for suffix in AUXILIARY_FILE_SUFFIXES:
        trimmed = _strip_suffix(file_path, suffix)
        if trimmed is not None:
            return trimmed + Path(file_path).suffix
    return None


def auto_determine_dataset_name(file_path: Union[str, Path], result_type=None) -> str:
    """Guess the dataset name from a synopsis, first-hits or side file name.

    Parameters
    ----------
    file_path : str or Path
    result_type : PeptideHitResultType, optional
        Detected from the file name when omitted

    Returns
    -------
    str
        Dataset name, or an empty string if the name does not follow the
        PHRP conventions
    """
    file_path = str(file_path)
    detected = result_type is None
    if detected:
        result_type = auto_determine_result_type(file_path, read_header=False)

    file_stem = Path(file_path).stem
    if not file_stem.strip():
        return ""

    dataset_name = ""

    if result_type == PeptideHitResultType.XTANDEM:
        dataset_name = _strip_suffix(file_stem, "_xt") or ""

    elif result_type != PeptideHitResultType.UNKNOWN:
        trimmed = _strip_suffix(file_stem, "_fht") or _strip_suffix(file_stem, "_syn")
        if trimmed:
            dataset_name = trimmed
            infixes = [_schema(result_type).file_infix]
            if result_type == PeptideHitResultType.MSGFPLUS:
                infixes.append("msgfdb")

            for infix in infixes:
                if not infix:
                    continue
                without_infix = _strip_suffix(dataset_name, "_" + infix)
                if without_infix:
                    dataset_name = without_infix
                    break

    if not dataset_name:
        trimmed_path = _trim_auxiliary_suffix(file_path)
        if trimmed_path:
            return auto_determine_dataset_name(trimmed_path, None if detected else result_type)

    return dataset_name


def dataset_name_or_default(file_path: Union[str, Path], result_type=None) -> str:
    return auto_determine_dataset_name(file_path, result_type) or UNDEFINED_DATASET_NAME


# =============================================================================
# Result Type Detection
# =============================================================================

def _filename_suffixes() -> List[Tuple[str, PeptideHitResultType]]:
    # X!Tandem first: its bare _xt.txt suffix never collides with the _syn/_fht names
    suffixes = [(TOOL_SCHEMAS[PeptideHitResultType.XTANDEM].syn_suffix, PeptideHitResultType.XTANDEM)]

    for result_type, schema in TOOL_SCHEMAS.items():
        if result_type in (PeptideHitResultType.XTANDEM, PeptideHitResultType.SEQUEST):
            continue
        suffixes.append((schema.syn_suffix, result_type))
        if schema.fht_suffix:
            suffixes.append((schema.fht_suffix, result_type))
        if result_type == PeptideHitResultType.MSGFPLUS:
            suffixes.extend((suffix, result_type) for suffix in LEGACY_MSGFPLUS_SUFFIXES)

    return suffixes


def read_header_line(file_path: Union[str, Path]) -> List[str]:
    """Column names of the first line of a tab-delimited file."""
    with open(file_path, encoding='utf-8', errors='replace') as f:
        first_line = f.readline()
    return [name.strip() for name in first_line.rstrip('\r\n').split('\t')]


def _contains_columns(column_names: List[str], *required: str) -> bool:
    observed = {name.lower() for name in column_names}
    return all(name.lower() in observed for name in required)


def result_type_from_header(column_names: List[str]) -> PeptideHitResultType:
    """Identify the search tool from characteristic header columns."""
    if _contains_columns(column_names, "MQScore", "TotalPRMScore"):
        return PeptideHitResultType.INSPECT

    if _contains_columns(column_names, "DelM_MaxQuant", "Score"):
        return PeptideHitResultType.MAXQUANT

    if _contains_columns(column_names, "DelM_MSFragger", "Hyperscore"):
        return PeptideHitResultType.MSFRAGGER

    if (_contains_columns(column_names, "MSGFScore", MSGFDB_SPEC_PROB) or
            _contains_columns(column_names, "MSGFScore", MSGFPLUS_SPEC_EVALUE) or
            _contains_columns(column_names, "MSGFScore", "DeNovoScore")):
        return PeptideHitResultType.MSGFPLUS

    if _contains_columns(column_names, "XCorr", "DelCn"):
        return PeptideHitResultType.SEQUEST

    return PeptideHitResultType.UNKNOWN


def auto_determine_result_type(file_path: Union[str, Path], read_header: bool = True) -> PeptideHitResultType:
    """Detect the search tool of a PHRP file.

    The file name suffix is checked first (``_msgfplus_syn.txt``,
    ``_xt.txt``, ...). Otherwise the header line is read and matched
    against columns characteristic of each tool.

    Parameters
    ----------
    file_path : str or Path
    read_header : bool
        Open the file when the name is not conclusive

    Returns
    -------
    PeptideHitResultType
        UNKNOWN if the tool cannot be determined or the file is missing
    """
    file_path = str(file_path)
    lower_path = file_path.lower()

    for suffix, result_type in _filename_suffixes():
        if lower_path.endswith(suffix.lower()):
            return result_type

    if not read_header:
        # Plain _syn.txt / _fht.txt without a tool infix is SEQUEST
        for suffix in (TOOL_SCHEMAS[PeptideHitResultType.SEQUEST].syn_suffix,
                       TOOL_SCHEMAS[PeptideHitResultType.SEQUEST].fht_suffix):
            if lower_path.endswith(suffix):
                return PeptideHitResultType.SEQUEST
        return PeptideHitResultType.UNKNOWN

    if not Path(file_path).is_file():
        logger.warning(f"Cannot determine result type; file not found: {file_path}")
        return PeptideHitResultType.UNKNOWN

    try:
        column_names = read_header_line(file_path)
    except OSError as e:
        logger.warning(f"Cannot read header line of {file_path}: {e}")
        return PeptideHitResultType.UNKNOWN

    return result_type_from_header(column_names)
