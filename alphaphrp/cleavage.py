"""Peptide cleavage state and terminus state classification.

Splits PHRP-style peptides (``K.PEPTIDE.G``, ``-.MPEPTIDEK.A``) into prefix,
primary sequence and suffix, then classifies the peptide against a cleavage
rule:
- Full: both ends follow the rule (or the peptide spans the whole protein)
- Partial: exactly one end follows the rule
- NonSpecific: neither end follows the rule

The default rule is trypsin (cleaves after K/R, blocked by P). Other
proteases are expressed as a pair of single-residue regular expressions
tested against the residues on either side of a cleavage site.

Examples
--------
>>> calc = CleavageStateCalculator()
>>> calc.classify("K.AEPTIDER.G")
('AEPTIDER', <CleavageState.FULL: 2>, <PeptideTerminusState.NONE: 0>)
>>> calc.count_missed_cleavages("R.PEPKTIDER.G")
1
"""

import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Tuple

from .constants import (
    C_TERMINAL_PROTEIN_SYMBOL,
    N_TERMINAL_PROTEIN_SYMBOL,
    PROTEIN_TERMINUS_SYMBOL_PHRP,
)


# Prefix/suffix characters that mark a protein terminus
TERMINUS_SYMBOLS = frozenset((
    PROTEIN_TERMINUS_SYMBOL_PHRP,
    N_TERMINAL_PROTEIN_SYMBOL,
    C_TERMINAL_PROTEIN_SYMBOL,
))

TRYPSIN_LEFT_RESIDUE_REGEX = "[KR]"
TRYPSIN_RIGHT_RESIDUE_REGEX = "[^P]"

_NOT_LETTER = re.compile("[^A-Za-z]")


class CleavageState(IntEnum):
    """Number of peptide ends consistent with the cleavage rule."""
    UNKNOWN = -1
    NON_SPECIFIC = 0
    PARTIAL = 1
    FULL = 2


class PeptideTerminusState(IntEnum):
    """Location of a peptide relative to its parent protein's termini."""
    NONE = 0
    PROTEIN_N_TERMINUS = 1
    PROTEIN_C_TERMINUS = 2
    PROTEIN_N_AND_C_TERMINUS = 3


class CleavageAgent(Enum):
    """Standard proteases with their (left, right) residue rules."""
    TRYPSIN = (TRYPSIN_LEFT_RESIDUE_REGEX, TRYPSIN_RIGHT_RESIDUE_REGEX)
    TRYPSIN_WITHOUT_PROLINE_RULE = ("[KR]", "[A-Z]")
    TRYPSIN_PLUS_FVLEY = ("[KRFYVEL]", "[A-Z]")
    CHYMOTRYPSIN = ("[FWYL]", "[A-Z]")
    CHYMOTRYPSIN_AND_TRYPSIN = ("[FWYLKR]", "[A-Z]")
    GLU_C = ("[ED]", "[A-Z]")
    CYANOGEN_BROMIDE = ("[M]", "[A-Z]")
    ARG_C = ("[R]", "[A-Z]")
    LYS_C = ("[K]", "[A-Z]")
    ASP_N = ("[A-Z]", "[D]")


def is_letter(char: str) -> bool:
    """True for ASCII letters A-Z and a-z."""
    return ('A' <= char <= 'Z') or ('a' <= char <= 'z')


# =============================================================================
# Sequence Splitting
# =============================================================================

def split_prefix_and_suffix(sequence: str) -> Tuple[bool, str, str, str]:
    """Split a peptide into (success, primary, prefix, suffix).

    Parameters
    ----------
    sequence : str
        Peptide, optionally with prefix/suffix residues, e.g. ``R.PEPTIDEK.L``

    Returns
    -------
    success : bool
        False when no prefix/suffix periods were found
    primary : str
        Text between the periods (the whole input when success is False)
    prefix : str
        Characters before the first period (may be more than one)
    suffix : str
        Characters after the last period

    Examples
    --------
    >>> split_prefix_and_suffix("R.PEPTIDEK.L")
    (True, 'PEPTIDEK', 'R', 'L')
    >>> split_prefix_and_suffix("PEPTIDEK")
    (False, 'PEPTIDEK', '', '')
    >>> split_prefix_and_suffix("..PEPTIDE.G")
    (True, 'PEPTIDE', '', 'G')

    Notes
    -----
    A leading ``..`` becomes ``.`` and a trailing ``..`` becomes ``.``
    before splitting.
    """
    if not sequence:
        return False, "", "", ""

    if sequence.startswith("..") and len(sequence) > 2:
        sequence = "." + sequence[2:]

    if sequence.endswith("..") and len(sequence) > 2:
        sequence = sequence[:-2] + "."

    period_loc1 = sequence.find('.')
    if period_loc1 < 0:
        return False, sequence, "", ""

    period_loc2 = sequence.rfind('.')

    if period_loc2 > period_loc1 + 1:
        # Two periods with residues between them, e.g. R.PEPTIDEK.L or RPEP.TIDESEQK.L
        primary = sequence[period_loc1 + 1:period_loc2]
        prefix = sequence[:period_loc1]
        suffix = sequence[period_loc2 + 1:]
        return True, primary, prefix, suffix

    if period_loc2 == period_loc1 + 1:
        # Two periods in a row
        if period_loc1 <= 1:
            return True, "", sequence[:period_loc1], sequence[period_loc2 + 1:]
        return False, sequence, "", ""

    # Only one period
    if period_loc1 == 0:
        return True, sequence[1:], "", ""

    if period_loc1 == len(sequence) - 1:
        return True, sequence[:period_loc1], "", ""

    if period_loc1 == 1 and len(sequence) > 2:
        return True, sequence[period_loc1 + 1:], sequence[:period_loc1], ""

    if period_loc1 == len(sequence) - 2:
        return True, sequence[:period_loc1], "", sequence[period_loc1 + 1:]

    return False, sequence, "", ""


def extract_clean_sequence(sequence_with_mods: str, check_for_prefix_and_suffix: bool = True) -> str:
    """Letters-only peptide sequence.

    >>> extract_clean_sequence("K.M*PEP#TIDE.G")
    'MPEPTIDE'
    """
    if check_for_prefix_and_suffix:
        success, primary, _, _ = split_prefix_and_suffix(sequence_with_mods)
        if success:
            return _NOT_LETTER.sub("", primary)

    return _NOT_LETTER.sub("", sequence_with_mods)


def _letter_nearest_end(text: str) -> str:
    if not text:
        return PROTEIN_TERMINUS_SYMBOL_PHRP

    index = len(text) - 1
    char = text[index]
    while not (is_letter(char) or char in TERMINUS_SYMBOLS) and index > 0:
        index -= 1
        char = text[index]
    return char


def _letter_nearest_start(text: str) -> str:
    if not text:
        return PROTEIN_TERMINUS_SYMBOL_PHRP

    index = 0
    char = text[index]
    while not (is_letter(char) or char in TERMINUS_SYMBOLS) and index < len(text) - 1:
        index += 1
        char = text[index]
    return char


# =============================================================================
# Cleavage State Calculator
# =============================================================================

@dataclass
class EnzymeMatchSpec:
    """Cleavage rule as two single-residue regular expressions.

    An empty expression, ``X`` or ``[X]`` matches any residue.
    """

    left_residue_regex: str = TRYPSIN_LEFT_RESIDUE_REGEX
    right_residue_regex: str = TRYPSIN_RIGHT_RESIDUE_REGEX

    @classmethod
    def for_agent(cls, agent: CleavageAgent) -> 'EnzymeMatchSpec':
        left, right = agent.value
        return cls(left, right)


def _normalize_residue_regex(regex: str) -> str:
    if regex in ("", "X", "[X]"):
        return "[A-Z]"
    if regex == "[^X]":
        return "[^A-Z]"
    return regex


class CleavageStateCalculator:
    """Classify peptides by cleavage state, terminus state and missed cleavages.

    Parameters
    ----------
    enzyme_match_spec : EnzymeMatchSpec, optional
        Cleavage rule (default: trypsin)
    """

    def __init__(self, enzyme_match_spec: EnzymeMatchSpec = None):
        self.set_enzyme_match_spec(enzyme_match_spec or EnzymeMatchSpec())

    def set_enzyme_match_spec(self, enzyme_match_spec: EnzymeMatchSpec):
        """Replace the cleavage rule."""
        left = _normalize_residue_regex(enzyme_match_spec.left_residue_regex)
        right = _normalize_residue_regex(enzyme_match_spec.right_residue_regex)

        self.enzyme_match_spec = EnzymeMatchSpec(left, right)
        self._left_regex = re.compile(left, re.IGNORECASE)
        self._right_regex = re.compile(right, re.IGNORECASE)
        self._using_trypsin_rule = (
            left == TRYPSIN_LEFT_RESIDUE_REGEX and right == TRYPSIN_RIGHT_RESIDUE_REGEX
        )

    def set_standard_enzyme(self, agent: CleavageAgent):
        self.set_enzyme_match_spec(EnzymeMatchSpec.for_agent(agent))

    def test_cleavage_rule(self, left_char: str, right_char: str) -> bool:
        """True if a cleavage between left_char and right_char follows the rule."""
        if self._using_trypsin_rule:
            return left_char in ('K', 'R') and right_char != 'P'

        return bool(self._left_regex.match(left_char)) and bool(self._right_regex.match(right_char))

    def compute_terminus_state(self, prefix: str, suffix: str) -> PeptideTerminusState:
        """Terminus state from the residue characters flanking the peptide."""
        if prefix in TERMINUS_SYMBOLS:
            if suffix in TERMINUS_SYMBOLS:
                return PeptideTerminusState.PROTEIN_N_AND_C_TERMINUS
            return PeptideTerminusState.PROTEIN_N_TERMINUS

        if suffix in TERMINUS_SYMBOLS:
            return PeptideTerminusState.PROTEIN_C_TERMINUS

        return PeptideTerminusState.NONE

    def compute_cleavage_state(
        self,
        clean_sequence: str,
        prefix_residues: str,
        suffix_residues: str,
    ) -> CleavageState:
        """Cleavage state of a clean sequence given its flanking residues.

        Peptides at a protein terminus can only be fully specific or
        non-specific, never partially specific.
        """
        if not clean_sequence:
            return CleavageState.NON_SPECIFIC

        prefix = _letter_nearest_end(prefix_residues)
        suffix = _letter_nearest_start(suffix_residues)
        sequence_start = _letter_nearest_start(clean_sequence)
        sequence_end = _letter_nearest_end(clean_sequence)

        terminus_state = self.compute_terminus_state(prefix, suffix)

        if terminus_state == PeptideTerminusState.PROTEIN_N_AND_C_TERMINUS:
            return CleavageState.FULL

        if terminus_state == PeptideTerminusState.PROTEIN_N_TERMINUS:
            if self.test_cleavage_rule(sequence_end, suffix):
                return CleavageState.FULL
            return CleavageState.NON_SPECIFIC

        if terminus_state == PeptideTerminusState.PROTEIN_C_TERMINUS:
            if self.test_cleavage_rule(prefix, sequence_start):
                return CleavageState.FULL
            return CleavageState.NON_SPECIFIC

        rule_match_start = self.test_cleavage_rule(prefix, sequence_start)
        rule_match_end = self.test_cleavage_rule(sequence_end, suffix)

        if rule_match_start and rule_match_end:
            return CleavageState.FULL
        if rule_match_start or rule_match_end:
            return CleavageState.PARTIAL
        return CleavageState.NON_SPECIFIC

    def count_missed_cleavages(self, sequence_with_prefix_and_suffix: str) -> int:
        """Number of internal sites that follow the cleavage rule."""
        success, primary, _, _ = split_prefix_and_suffix(sequence_with_prefix_and_suffix)
        if not success or not primary.strip():
            return 0

        missed = 0
        previous = ""
        for char in primary:
            if not is_letter(char):
                continue
            if previous and self.test_cleavage_rule(previous, char):
                missed += 1
            previous = char

        return missed

    def classify(self, sequence: str) -> Tuple[str, CleavageState, PeptideTerminusState]:
        """Classify a peptide with prefix and suffix residues.

        Parameters
        ----------
        sequence : str
            Peptide such as ``K.PEPTIDER.G`` (mod symbols allowed)

        Returns
        -------
        clean_sequence : str
            Letters of the primary sequence
        cleavage_state : CleavageState
            NON_SPECIFIC when the prefix/suffix cannot be determined
        terminus_state : PeptideTerminusState
        """
        success, primary, prefix, suffix = split_prefix_and_suffix(sequence)
        clean_sequence = _NOT_LETTER.sub("", primary)

        if not success:
            return clean_sequence, CleavageState.NON_SPECIFIC, PeptideTerminusState.NONE

        cleavage_state = self.compute_cleavage_state(clean_sequence, prefix, suffix)

        if clean_sequence:
            terminus_state = self.compute_terminus_state(
                _letter_nearest_end(prefix), _letter_nearest_start(suffix)
            )
        else:
            terminus_state = PeptideTerminusState.NONE

        return clean_sequence, cleavage_state, terminus_state
