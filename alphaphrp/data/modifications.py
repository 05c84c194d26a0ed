"""Modification catalog entries and per-residue modification records.

A ModificationDefinition is one row of a dataset's ModSummary file: a mass
correction tag (e.g. ``Phosph``), its mass, the residues it targets and its
type. Target residues may include the terminus symbols ``<`` / ``>``
(peptide N/C terminus) and ``[`` / ``]`` (protein N/C terminus).

An AminoAcidModInfo attaches a definition to a residue of one peptide. When
the search engine could only narrow a modification down to a span of
residues, end_residue_loc marks the last residue of the span.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum

from ..constants import (
    C_TERMINAL_PEPTIDE_SYMBOL,
    C_TERMINAL_PROTEIN_SYMBOL,
    N_TERMINAL_PEPTIDE_SYMBOL,
    N_TERMINAL_PROTEIN_SYMBOL,
    NO_SYMBOL_MODIFICATION_SYMBOL,
    UNKNOWN_MASS_CORRECTION_TAG,
)


TERMINAL_SYMBOLS = frozenset((
    N_TERMINAL_PEPTIDE_SYMBOL,
    C_TERMINAL_PEPTIDE_SYMBOL,
    N_TERMINAL_PROTEIN_SYMBOL,
    C_TERMINAL_PROTEIN_SYMBOL,
))


class ModificationType(Enum):
    """Modification type, valued by its one-letter ModSummary code."""
    UNKNOWN = '?'
    DYNAMIC = 'D'
    STATIC = 'S'
    TERMINAL_PEPTIDE_STATIC = 'T'
    ISOTOPIC = 'I'
    PROTEIN_TERMINUS_STATIC = 'P'

    @classmethod
    def from_symbol(cls, symbol: str) -> 'ModificationType':
        """Map a ModSummary type code (D, S, T, I, P) to its type.

        >>> ModificationType.from_symbol('T')
        <ModificationType.TERMINAL_PEPTIDE_STATIC: 'T'>
        >>> ModificationType.from_symbol('x')
        <ModificationType.UNKNOWN: '?'>
        """
        if not symbol:
            return cls.UNKNOWN
        try:
            return cls(symbol[0].upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        """True for peptide-terminus and protein-terminus static mods."""
        return self in (ModificationType.TERMINAL_PEPTIDE_STATIC, ModificationType.PROTEIN_TERMINUS_STATIC)


class ResidueTerminusState(IntEnum):
    """Position of a modified residue relative to peptide and protein termini."""
    NONE = 0
    PEPTIDE_N_TERMINUS = 1
    PEPTIDE_C_TERMINUS = 2
    PROTEIN_N_TERMINUS = 3
    PROTEIN_C_TERMINUS = 4
    PROTEIN_N_AND_C_TERMINUS = 5


@dataclass
class ModificationDefinition:
    """One entry of a dataset's modification catalog.

    Parameters
    ----------
    mass_correction_tag : str
        Catalog key, e.g. ``Phosph`` or ``IodoAcet``; matched case-insensitively
    mass : float
        Monoisotopic mass delta (Da)
    target_residues : str
        One-letter residues (plus terminus symbols) the mod can occupy;
        empty means any residue
    mod_type : ModificationType
        Dynamic, static, terminal static, isotopic or protein-terminus static
    symbol : str
        Inline symbol used by the search engine (``*``, ``#``); ``-`` for none
    mass_as_text : str
        Mass exactly as written in the source file
    """

    mass_correction_tag: str = UNKNOWN_MASS_CORRECTION_TAG
    mass: float = 0.0
    target_residues: str = ""
    mod_type: ModificationType = ModificationType.UNKNOWN
    symbol: str = NO_SYMBOL_MODIFICATION_SYMBOL
    mass_as_text: str = ""
    affected_atom: str = ""
    occurrence_count: int = 0
    unknown_mod_auto_defined: bool = field(default=False, repr=False)

    def __post_init__(self):
        if not self.symbol:
            self.symbol = NO_SYMBOL_MODIFICATION_SYMBOL
        if self.mass_correction_tag is None:
            self.mass_correction_tag = ""
        if self.target_residues is None:
            self.target_residues = ""
        if not self.mass_as_text:
            self.mass_as_text = repr(float(self.mass))

    def target_residues_contain(self, residue: str) -> bool:
        """True if residue (a letter or terminus symbol) is a target."""
        if not residue:
            return False
        return residue in self.target_residues

    def can_affect_peptide_or_protein_terminus(self) -> bool:
        if self.mod_type.is_terminal:
            return True
        return any(char in TERMINAL_SYMBOLS for char in self.target_residues)

    def can_affect_peptide_residues(self) -> bool:
        if self.mod_type.is_terminal:
            return False
        if not self.target_residues:
            return True
        return any(char not in TERMINAL_SYMBOLS for char in self.target_residues)

    def __str__(self):
        return f"{self.mod_type.name} {self.mass_correction_tag}, {self.mass:.4f}; {self.target_residues}"


@dataclass
class AminoAcidModInfo:
    """A modification attached to one residue (or a span) of a peptide.

    Locations are 1-based positions in the clean sequence. An N-terminal
    peptide mod sits at position 1.
    """

    residue: str
    residue_loc: int
    terminus_state: ResidueTerminusState
    mod_definition: ModificationDefinition
    end_residue_loc: int = 0

    def __post_init__(self):
        if self.end_residue_loc < self.residue_loc:
            self.end_residue_loc = self.residue_loc

    @property
    def ambiguous(self) -> bool:
        """True when the exact residue within a span is unknown."""
        return self.end_residue_loc > self.residue_loc

    def __str__(self):
        return f"{self.residue}{self.residue_loc}: {self.mod_definition.mass_correction_tag}"
