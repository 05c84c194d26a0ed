"""Sequence map side files written next to a synopsis file.

PHRP assigns every unique modified peptide a sequence ID and writes:

- ``_ResultToSeqMap.txt``: ResultID -> Unique_Seq_ID
- ``_SeqInfo.txt``: Unique_Seq_ID -> mod count, mod description, mass
- ``_SeqToProteinMap.txt``: Unique_Seq_ID -> proteins with cleavage context
- ``_PepToProtMapMTS.txt``: clean peptide -> protein residue start/end

All files are tab-delimited; the header line is optional.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from ..cleavage import CleavageState, PeptideTerminusState, extract_clean_sequence
from ..data.case_insensitive import CaseInsensitiveDict
from ..data.proteins import PepToProteinMapInfo, ProteinInfo
from ..data.sequence_info import SequenceInfo
from ..messages import MessageLog
from ..schema.columns import PeptideHitResultType
from ..schema.filenames import (
    find_side_file,
    pep_to_prot_map_file_name,
    result_to_seq_map_file_name,
    seq_info_file_name,
    seq_to_protein_map_file_name,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


COLUMN_UNIQUE_SEQ_ID = "Unique_Seq_ID"

SEQ_INFO_COLUMNS = (COLUMN_UNIQUE_SEQ_ID, "Mod_Count", "Mod_Description", "Monoisotopic_Mass")

SEQ_TO_PROTEIN_MAP_COLUMNS = (
    COLUMN_UNIQUE_SEQ_ID,
    "Cleavage_State",
    "Terminus_State",
    "Protein_Name",
    # X!Tandem only
    "Protein_Expectation_Value_Log(e)",
    "Protein_Intensity_Log(I)",
)

# Seconds between progress messages while reading large maps
PROGRESS_INTERVAL_SECONDS = 5.0
_PROGRESS_CHECK_LINES = 100


# =============================================================================
# Line Iteration
# =============================================================================

def _iter_split_lines(file_path: Path, description: str) -> Iterator[List[str]]:
    """Yield non-empty lines split on tabs, logging progress every few seconds."""
    file_size = max(file_path.stat().st_size, 1)
    bytes_read = 0
    last_progress = time.monotonic()

    with open(file_path, encoding='utf-8', errors='replace') as f:
        for line_number, line in enumerate(f, start=1):
            bytes_read += len(line)

            if line_number % _PROGRESS_CHECK_LINES == 0:
                now = time.monotonic()
                if now - last_progress >= PROGRESS_INTERVAL_SECONDS:
                    last_progress = now
                    logger.info(f"  Loading {description}: {bytes_read / file_size * 100:.1f}% complete")

            line = line.rstrip('\r\n')
            if line:
                yield line.split('\t')


def _try_int(text: str) -> Optional[int]:
    try:
        return int(text.strip())
    except ValueError:
        return None


def _try_float(text: str) -> Optional[float]:
    try:
        return float(text.strip())
    except ValueError:
        return None


def _column_lookup(columns: List[str], header: Dict[str, int], name: str, default: str = "") -> str:
    index = header.get(name, -1)
    if 0 <= index < len(columns):
        value = columns[index].strip()
        return value if value else default
    return default


def _header_map(default_columns) -> Dict[str, int]:
    header = CaseInsensitiveDict()
    for index, name in enumerate(default_columns):
        header[name] = index
    return header


def _update_header_map(header: Dict[str, int], columns: List[str]):
    """Point known column names at their header position; first occurrence wins."""
    for name in list(header):
        header[name] = -1
    seen = set()
    for index, name in enumerate(columns):
        key = name.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        if name.strip() in header:
            header[name.strip()] = index


# =============================================================================
# Loaders
# =============================================================================

def load_result_to_seq_map(file_path: PathLike) -> Dict[int, int]:
    """ResultID -> Unique_Seq_ID.

    Lines whose first column is not an integer (the header) are skipped; the
    first mapping of a ResultID wins.

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"ResultToSeqMap file not found: {file_path}")

    result_to_seq_map: Dict[int, int] = {}

    for columns in _iter_split_lines(file_path, file_path.name):
        if len(columns) < 2:
            continue

        result_id = _try_int(columns[0])
        seq_id = _try_int(columns[1])
        if result_id is None or seq_id is None:
            continue

        result_to_seq_map.setdefault(result_id, seq_id)

    logger.info(f"✓ Loaded {len(result_to_seq_map):,} ResultID to SeqID entries from {file_path.name}")
    return result_to_seq_map


def load_seq_info(file_path: PathLike) -> Dict[int, SequenceInfo]:
    """Unique_Seq_ID -> SequenceInfo; the first entry of a SeqID wins.

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"SeqInfo file not found: {file_path}")

    header = _header_map(SEQ_INFO_COLUMNS)
    seq_info: Dict[int, SequenceInfo] = {}
    header_checked = False

    for columns in _iter_split_lines(file_path, file_path.name):
        if not header_checked:
            header_checked = True
            if columns[0].strip().lower() == COLUMN_UNIQUE_SEQ_ID.lower():
                _update_header_map(header, columns)
                continue

        if len(columns) < 3:
            continue

        seq_id = _try_int(columns[0])
        if seq_id is None or seq_id in seq_info:
            continue

        seq_info[seq_id] = SequenceInfo(
            seq_id=seq_id,
            mod_count=_try_int(_column_lookup(columns, header, "Mod_Count", "0")) or 0,
            mod_description=_column_lookup(columns, header, "Mod_Description"),
            monoisotopic_mass=_try_float(_column_lookup(columns, header, "Monoisotopic_Mass", "0")) or 0.0,
        )

    logger.info(f"✓ Loaded {len(seq_info):,} sequences from {file_path.name}")
    return seq_info


def load_seq_to_protein_map(file_path: PathLike, max_proteins_per_seq_id: int = 0) -> Dict[int, List[ProteinInfo]]:
    """Unique_Seq_ID -> proteins, in file order.

    Parameters
    ----------
    file_path : str or Path
    max_proteins_per_seq_id : int
        Keep at most this many proteins per SeqID (0 keeps all)

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"SeqToProteinMap file not found: {file_path}")

    header = _header_map(SEQ_TO_PROTEIN_MAP_COLUMNS)
    seq_to_protein_map: Dict[int, List[ProteinInfo]] = {}
    header_checked = False

    for columns in _iter_split_lines(file_path, file_path.name):
        if not header_checked:
            header_checked = True
            if columns[0].strip().lower() == COLUMN_UNIQUE_SEQ_ID.lower():
                _update_header_map(header, columns)
                continue

        if len(columns) < 3:
            continue

        seq_id = _try_int(columns[0])
        if seq_id is None:
            continue

        protein_name = _column_lookup(columns, header, "Protein_Name")
        if not protein_name:
            continue

        cleavage_value = _try_int(_column_lookup(columns, header, "Cleavage_State", "0")) or 0
        terminus_value = _try_int(_column_lookup(columns, header, "Terminus_State", "0")) or 0

        try:
            cleavage_state = CleavageState(cleavage_value)
        except ValueError:
            cleavage_state = CleavageState.UNKNOWN

        try:
            terminus_state = PeptideTerminusState(terminus_value)
        except ValueError:
            terminus_state = PeptideTerminusState.NONE

        proteins = seq_to_protein_map.setdefault(seq_id, [])
        if max_proteins_per_seq_id == 0 or len(proteins) < max_proteins_per_seq_id:
            proteins.append(ProteinInfo(protein_name, seq_id, cleavage_state, terminus_state))

    logger.info(f"✓ Loaded proteins for {len(seq_to_protein_map):,} sequences from {file_path.name}")
    return seq_to_protein_map


def load_pep_to_prot_map(file_path: PathLike, max_proteins_per_peptide: int = 0) -> Dict[str, PepToProteinMapInfo]:
    """Clean peptide -> protein locations from a PepToProtMapMTS file.

    Columns are Peptide, Protein, Residue_Start, Residue_End. Lines whose
    residue columns are not integers (the header) are skipped.

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"PepToProtMap file not found: {file_path}")

    pep_to_prot_map: Dict[str, PepToProteinMapInfo] = {}

    for columns in _iter_split_lines(file_path, file_path.name):
        if len(columns) < 4:
            continue

        residue_start = _try_int(columns[2])
        residue_end = _try_int(columns[3])
        if residue_start is None or residue_end is None:
            continue

        peptide = extract_clean_sequence(columns[0].strip(), True)
        protein_name = columns[1].strip()

        info = pep_to_prot_map.get(peptide)
        if info is None:
            pep_to_prot_map[peptide] = PepToProteinMapInfo(protein_name, residue_start, residue_end)
        elif max_proteins_per_peptide == 0 or info.protein_count < max_proteins_per_peptide:
            info.add_protein(protein_name, residue_start, residue_end)

    logger.info(f"✓ Loaded protein locations for {len(pep_to_prot_map):,} peptides from {file_path.name}")
    return pep_to_prot_map


# =============================================================================
# Combined Reader
# =============================================================================

@dataclass
class SeqMaps:
    """Sequence maps of one synopsis file."""
    result_to_seq_map: Dict[int, int] = field(default_factory=dict)
    seq_info: Dict[int, SequenceInfo] = field(default_factory=dict)
    seq_to_protein_map: Dict[int, List[ProteinInfo]] = field(default_factory=dict)
    pep_to_prot_map: Dict[str, PepToProteinMapInfo] = field(default_factory=dict)

    @property
    def loaded(self) -> bool:
        return bool(self.result_to_seq_map)


class SeqMapReader:
    """Locate and load the sequence map files of a synopsis file.

    Parameters
    ----------
    input_directory : str or Path
        Directory holding the synopsis file and its side files
    dataset_name : str
    result_type : PeptideHitResultType
    message_log : MessageLog, optional
    max_proteins_per_seq_id : int
        Limit on proteins kept per sequence (0 keeps all)
    phrp_data_file_name : str
        Synopsis or first-hits file the maps belong to; selects ``_fht`` and
        legacy ``_msgfdb`` side-file names
    """

    def __init__(
        self,
        input_directory: PathLike,
        dataset_name: str,
        result_type: PeptideHitResultType,
        message_log: Optional[MessageLog] = None,
        max_proteins_per_seq_id: int = 0,
        phrp_data_file_name: str = "",
    ):
        self.input_directory = Path(input_directory)
        self.dataset_name = dataset_name
        self.result_type = result_type
        self.message_log = message_log or MessageLog()
        self.max_proteins_per_seq_id = max_proteins_per_seq_id
        self.phrp_data_file_name = phrp_data_file_name

        self.result_to_seq_map_path = self._locate(result_to_seq_map_file_name(result_type, dataset_name))
        self.seq_info_path = self._locate(seq_info_file_name(result_type, dataset_name))
        self.seq_to_protein_map_path = self._locate(seq_to_protein_map_file_name(result_type, dataset_name))
        self.pep_to_prot_map_path = self._find_pep_to_prot_map()

    def _locate(self, preferred_name: str) -> Path:
        return find_side_file(self.input_directory, self.phrp_data_file_name, preferred_name)

    def _find_pep_to_prot_map(self) -> Path:
        file_path = self._locate(pep_to_prot_map_file_name(self.result_type, self.dataset_name))

        if self.result_type == PeptideHitResultType.MSGFPLUS and not file_path.is_file():
            # Written by MSGFDB before the rename to MS-GF+
            legacy_path = self.input_directory / f"{self.dataset_name}_msgfdb_PepToProtMapMTS.txt"
            if legacy_path.is_file():
                return legacy_path

        return file_path

    def load(self) -> SeqMaps:
        """Read all four maps.

        Returns
        -------
        SeqMaps
            Empty maps when the ResultToSeqMap file does not exist

        Notes
        -----
        SeqInfo and SeqToProteinMap are required once a ResultToSeqMap is
        present; a missing PepToProtMap is a warning and leaves protein
        residue locations at 0.
        """
        seq_maps = SeqMaps()

        if not self.result_to_seq_map_path.is_file():
            logger.debug(f"No ResultToSeqMap file for {self.dataset_name}: {self.result_to_seq_map_path.name}")
            return seq_maps

        seq_maps.result_to_seq_map = load_result_to_seq_map(self.result_to_seq_map_path)
        seq_maps.seq_info = load_seq_info(self.seq_info_path)
        seq_maps.seq_to_protein_map = load_seq_to_protein_map(
            self.seq_to_protein_map_path, self.max_proteins_per_seq_id
        )

        if self.pep_to_prot_map_path.is_file():
            seq_maps.pep_to_prot_map = load_pep_to_prot_map(
                self.pep_to_prot_map_path, self.max_proteins_per_seq_id
            )
        else:
            self.message_log.warning(
                f"PepToProtMap file not found; protein residue start/end values will be zero: "
                f"{self.pep_to_prot_map_path.name}"
            )

        return seq_maps


def build_result_to_proteins(seq_maps: SeqMaps, max_proteins: int = 0) -> Dict[int, List[str]]:
    """ResultID -> protein names, for synopsis files without a protein column.

    Parameters
    ----------
    seq_maps : SeqMaps
    max_proteins : int
        When a result maps to more proteins than this, keep the first
        max_proteins and sort them by name (0 keeps all, in file order)
    """
    result_to_proteins: Dict[int, List[str]] = {}

    for result_id, seq_id in seq_maps.result_to_seq_map.items():
        proteins = seq_maps.seq_to_protein_map.get(seq_id)
        if not proteins:
            continue

        names = [info.protein_name for info in proteins]
        if 0 < max_proteins < len(names):
            names = sorted(names[:max_proteins])

        result_to_proteins[result_id] = names

    return result_to_proteins
