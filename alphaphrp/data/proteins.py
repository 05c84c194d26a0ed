"""Protein associations of a peptide."""

from typing import Dict, List, Tuple

from ..cleavage import CleavageState, PeptideTerminusState
from .case_insensitive import CaseInsensitiveDict


class ProteinInfo:
    """A protein matched by a peptide, with its cleavage context.

    Parameters
    ----------
    protein_name : str
    seq_id : int
        Unique sequence ID of the peptide (0 when unknown)
    cleavage_state : CleavageState
    terminus_state : PeptideTerminusState
    description : str
    """

    def __init__(
        self,
        protein_name: str,
        seq_id: int = 0,
        cleavage_state: CleavageState = CleavageState.NON_SPECIFIC,
        terminus_state: PeptideTerminusState = PeptideTerminusState.NONE,
        description: str = "",
    ):
        self.protein_name = protein_name
        self.seq_id = seq_id
        self.cleavage_state = cleavage_state
        self.terminus_state = terminus_state
        self.description = description
        self.residue_start = 0
        self.residue_end = 0

    def update_location_in_protein(self, residue_start: int, residue_end: int):
        """Record where the peptide starts and ends in the protein (1-based)."""
        self.residue_start = residue_start
        self.residue_end = residue_end

    def __repr__(self):
        return (f"ProteinInfo({self.protein_name!r}, seq_id={self.seq_id}, "
                f"{self.cleavage_state.name}, {self.terminus_state.name})")


class PepToProteinMapInfo:
    """Protein locations of one clean peptide sequence.

    Maps protein name to a list of (residue_start, residue_end) tuples; a
    peptide may occur more than once in the same protein.

    Examples
    --------
    >>> info = PepToProteinMapInfo("Prot1", 10, 20)
    >>> info.add_protein("Prot1", 50, 60)
    >>> info.protein_map["Prot1"]
    [(10, 20), (50, 60)]
    >>> info.protein_count
    1
    """

    def __init__(self, protein_name: str = None, residue_start: int = 0, residue_end: int = 0):
        self.protein_map: Dict[str, List[Tuple[int, int]]] = CaseInsensitiveDict()
        if protein_name:
            self.add_protein(protein_name, residue_start, residue_end)

    @property
    def protein_count(self) -> int:
        return len(self.protein_map)

    def add_protein(self, protein_name: str, residue_start: int, residue_end: int):
        locations = self.protein_map.get(protein_name)
        if locations is None:
            self.protein_map[protein_name] = [(residue_start, residue_end)]
            return

        if (residue_start, residue_end) not in locations:
            locations.append((residue_start, residue_end))
