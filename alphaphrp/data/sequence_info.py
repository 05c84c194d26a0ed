"""Per-sequence modification summary loaded from a SeqInfo file."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SequenceInfo:
    """Modification summary for one unique sequence ID.

    Attributes
    ----------
    seq_id : int
        Unique sequence ID shared by PSMs with the same modified peptide
    mod_count : int
        Number of modifications
    mod_description : str
        Comma-separated ``tag:position`` tokens, e.g. ``IodoAcet:3,Plus1Oxy:4``
    monoisotopic_mass : float
        Theoretical neutral mass including modifications
    """

    seq_id: int
    mod_count: int
    mod_description: str
    monoisotopic_mass: float
