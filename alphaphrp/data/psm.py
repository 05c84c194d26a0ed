"""Peptide-spectrum match record shared by all synopsis readers.

Every tool-specific parser fills the same PSM fields; anything the common
fields cannot hold is kept as a string in additional_scores, keyed by the
canonical column name.
"""

from typing import Dict, List, Optional

from ..cleavage import CleavageState, CleavageStateCalculator, extract_clean_sequence
from ..constants import UNKNOWN_COLLISION_MODE
from .case_insensitive import CaseInsensitiveDict
from .modifications import AminoAcidModInfo, ModificationDefinition, ResidueTerminusState
from .proteins import ProteinInfo


class PSM:
    """One peptide-spectrum match read from a synopsis or first-hits file.

    Attributes
    ----------
    result_id : int
        Unique per row of the source file
    seq_id : int
        Unique sequence ID from the ResultToSeqMap (0 when unknown)
    scan_number : int
        Assigning it also records the scan in scan_list
    peptide : str
        Peptide as reported, with prefix/suffix residues and mod symbols
    peptide_clean_sequence : str
        Residue letters only
    peptide_with_numeric_mods : str
        Peptide with each modification written as a signed mass,
        e.g. ``R.A+144.102AS+79.9663PQDLAGGYTSSLAC+57.0215HR.A``
    precursor_neutral_mass : float
        Observed neutral mass derived from precursor m/z and charge
    peptide_monoisotopic_mass : float
        Theoretical neutral mass including modifications
    mass_error_da, mass_error_ppm, msgf_spec_evalue : str
        Kept as text to preserve the source formatting
    """

    def __init__(self):
        self.additional_scores: Dict[str, str] = CaseInsensitiveDict()
        self.protein_details: Dict[str, ProteinInfo] = CaseInsensitiveDict()
        self.proteins: List[str] = []
        self.modified_residues: List[AminoAcidModInfo] = []
        self.scan_list = set()
        self.clear()

    def clear(self):
        """Reset every field to its default."""
        self.data_line_text = ""
        self._scan_number = 0
        self.scan_list.clear()
        self.elution_time_minutes = 0.0

        self.peptide = ""
        self.peptide_clean_sequence = ""
        self.peptide_with_numeric_mods = ""
        self.charge = 0
        self.result_id = 0
        self.seq_id = 0
        self.score_rank = 0

        self.collision_mode = UNKNOWN_COLLISION_MODE
        self.msgf_spec_evalue = ""

        self.cleavage_state = CleavageState.UNKNOWN
        self.num_missed_cleavages = 0
        self.num_tryptic_termini = 0

        self.precursor_neutral_mass = 0.0
        self.mass_error_da = ""
        self.mass_error_ppm = ""
        self.peptide_monoisotopic_mass = 0.0

        self.proteins.clear()
        self.protein_details.clear()
        self.modified_residues.clear()
        self.additional_scores.clear()

    # =========================================================================
    # Scans
    # =========================================================================

    @property
    def scan_number(self) -> int:
        return self._scan_number

    @scan_number.setter
    def scan_number(self, value: int):
        self._scan_number = value
        self.scan_list.add(value)

    @property
    def scan_number_start(self) -> int:
        return min(self.scan_list) if self.scan_list else 0

    @property
    def scan_number_end(self) -> int:
        return max(self.scan_list) if self.scan_list else 0

    def add_combined_scan(self, scan_number: int):
        self.scan_list.add(scan_number)

    # =========================================================================
    # Sequence
    # =========================================================================

    def set_peptide(
        self,
        peptide: str,
        update_clean_sequence: bool = True,
        cleavage_calculator: Optional[CleavageStateCalculator] = None,
    ):
        """Store the peptide, optionally deriving clean sequence and cleavage info.

        Parameters
        ----------
        peptide : str
            Peptide with optional prefix/suffix residues and mod symbols
        update_clean_sequence : bool
            Derive peptide_clean_sequence now (False defers it to finalize)
        cleavage_calculator : CleavageStateCalculator, optional
            When given, also update cleavage state, NTT and missed cleavages
        """
        self.peptide = peptide or ""

        if update_clean_sequence:
            self.update_clean_sequence()

        if cleavage_calculator is not None:
            self.update_cleavage_info(cleavage_calculator)

    def update_clean_sequence(self):
        if not self.peptide:
            self.peptide_clean_sequence = ""
        else:
            self.peptide_clean_sequence = extract_clean_sequence(self.peptide, True)

    def update_cleavage_info(self, cleavage_calculator: CleavageStateCalculator):
        """Compute missed cleavages, cleavage state and number of tryptic termini."""
        self.num_missed_cleavages = cleavage_calculator.count_missed_cleavages(self.peptide)

        _, self.cleavage_state, _ = cleavage_calculator.classify(self.peptide)

        if self.cleavage_state == CleavageState.FULL:
            self.num_tryptic_termini = 2
        elif self.cleavage_state == CleavageState.PARTIAL:
            self.num_tryptic_termini = 1
        else:
            self.num_tryptic_termini = 0

    # =========================================================================
    # Proteins
    # =========================================================================

    @property
    def protein_first(self) -> str:
        return self.proteins[0] if self.proteins else ""

    def add_protein(self, protein_name: str):
        """Append a protein name; blank names and case-insensitive duplicates are ignored."""
        if protein_name and protein_name.strip() and not self._has_protein(protein_name):
            self.proteins.append(protein_name)

    def add_protein_detail(self, protein_info: ProteinInfo):
        """Add or replace protein details; also adds the name to proteins."""
        name = protein_info.protein_name
        self.protein_details[name] = protein_info

        if not self._has_protein(name):
            self.proteins.append(name)

    def _has_protein(self, protein_name: str) -> bool:
        name_lower = protein_name.lower()
        return any(name.lower() == name_lower for name in self.proteins)

    # =========================================================================
    # Modifications
    # =========================================================================

    def add_modified_residue(
        self,
        residue: str,
        residue_loc: int,
        terminus_state: ResidueTerminusState,
        mod_definition: ModificationDefinition,
        end_residue_loc: int = 0,
    ):
        self.modified_residues.append(
            AminoAcidModInfo(residue, residue_loc, terminus_state, mod_definition, end_residue_loc)
        )

    def clear_modified_residues(self):
        self.modified_residues.clear()

    # =========================================================================
    # Scores
    # =========================================================================

    def set_score(self, score_name: str, score_value: str):
        """Add or update a score (names are case-insensitive)."""
        self.additional_scores[score_name] = score_value

    def try_get_score(self, score_name: str):
        """Return (True, value) if the score is defined, else (False, "")."""
        if score_name in self.additional_scores:
            return True, self.additional_scores[score_name]
        return False, ""

    def get_score(self, score_name: str) -> str:
        """Score text, or an empty string when undefined."""
        return self.additional_scores.get(score_name, "")

    def get_score_float(self, score_name: str, value_if_missing: float = 0.0) -> float:
        value = self.get_score(score_name)
        if value:
            try:
                return float(value)
            except ValueError:
                pass
        return value_if_missing

    def get_score_int(self, score_name: str, value_if_missing: int = 0) -> int:
        value = self.get_score(score_name)
        if value:
            try:
                return int(value.strip())
            except ValueError:
                pass
        return value_if_missing

    # =========================================================================
    # Copy
    # =========================================================================

    def clone(self) -> 'PSM':
        """Independent copy; catalog entries (mod definitions) stay shared."""
        new_psm = PSM()
        new_psm.data_line_text = self.data_line_text
        new_psm.result_id = self.result_id
        new_psm.seq_id = self.seq_id
        new_psm.score_rank = self.score_rank
        new_psm.scan_number = self._scan_number
        new_psm.scan_list.update(self.scan_list)
        new_psm.elution_time_minutes = self.elution_time_minutes

        new_psm.peptide = self.peptide
        new_psm.peptide_clean_sequence = self.peptide_clean_sequence
        new_psm.peptide_with_numeric_mods = self.peptide_with_numeric_mods
        new_psm.charge = self.charge
        new_psm.collision_mode = self.collision_mode
        new_psm.msgf_spec_evalue = self.msgf_spec_evalue

        new_psm.cleavage_state = self.cleavage_state
        new_psm.num_missed_cleavages = self.num_missed_cleavages
        new_psm.num_tryptic_termini = self.num_tryptic_termini

        new_psm.precursor_neutral_mass = self.precursor_neutral_mass
        new_psm.mass_error_da = self.mass_error_da
        new_psm.mass_error_ppm = self.mass_error_ppm
        new_psm.peptide_monoisotopic_mass = self.peptide_monoisotopic_mass

        for protein in self.proteins:
            new_psm.add_protein(protein)

        for info in self.protein_details.values():
            new_psm.add_protein_detail(info)

        for mod in self.modified_residues:
            new_psm.add_modified_residue(
                mod.residue, mod.residue_loc, mod.terminus_state,
                mod.mod_definition, mod.end_residue_loc,
            )

        for name, value in self.additional_scores.items():
            new_psm.set_score(name, value)

        return new_psm

    def __repr__(self):
        return (f"PSM(result_id={self.result_id}, scan={self._scan_number}, "
                f"charge={self.charge}, peptide={self.peptide!r})")
