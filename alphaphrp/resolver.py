"""Attach modification definitions to PSMs.

Two sources of modification information exist for a synopsis file:

1. The SeqInfo map (preferred). Each PSM's ResultID maps to a sequence ID
   whose mod description lists ``tag:position`` tokens, e.g.
   ``IodoAcet:3,Plus1Oxy:4``. Tags are looked up in the ModSummary catalog.
2. Inline symbols (fallback). When a PSM has no sequence ID, the dynamic
   mod symbols in the peptide (``M*``) and the catalog's static mods are
   used to annotate the peptide directly.

Either way the PSM ends up with modified_residues and a
peptide_with_numeric_mods such as ``R.TDM+15.9949ESALPVTVLSAEDIAK.T``.

Examples
--------
>>> format_signed(79.9663, 4)
'+79.9663'
>>> format_signed(42.0, 2)
'+42'
"""

import copy
import logging
import sys
from typing import Dict, List, NamedTuple, Optional, Tuple

from .cleavage import CleavageState, PeptideTerminusState, is_letter, split_prefix_and_suffix
from .constants import (
    C_TERMINAL_PEPTIDE_SYMBOL,
    C_TERMINAL_PROTEIN_SYMBOL,
    MINUS_H2O_MASS,
    MINUS_H2O_MATCH_TOLERANCE,
    N_TERMINAL_PEPTIDE_SYMBOL,
    N_TERMINAL_PROTEIN_SYMBOL,
    PROTEIN_TERMINUS_SYMBOL_PHRP,
)
from .data.modifications import AminoAcidModInfo, ModificationDefinition, ModificationType, ResidueTerminusState
from .data.proteins import ProteinInfo
from .data.psm import PSM
from .data.sequence_info import SequenceInfo
from .mass_calculator import compute_sequence_mass
from .messages import MessageLog
from .params.common import parse_key_value_setting
from .readers.seq_map import SeqMaps

logger = logging.getLogger(__name__)


# Mass correction tag with a built-in mass when the catalog lacks it
MINUS_H2O_TAG = "MinusH2O"

# Digits used when writing modification masses into peptides
NUMERIC_MOD_DIGITS = 4


# =============================================================================
# Formatting
# =============================================================================

def format_signed(value: float, digits_of_precision: int) -> str:
    """Format a mass with a leading sign and at most the given decimals.

    Trailing zeros are removed, then a trailing decimal point.

    >>> format_signed(-18.0106, 4)
    '-18.0106'
    >>> format_signed(15.99491, 4)
    '+15.9949'
    >>> format_signed(100.0, 0)
    '+100'
    """
    digits_of_precision = max(int(digits_of_precision), 0)
    text = f"{value:+.{digits_of_precision}f}"

    if digits_of_precision > 0:
        text = text.rstrip('0').rstrip('.')

    return text


def convert_mods_to_numeric(clean_sequence: str, modified_residues: List[AminoAcidModInfo]) -> str:
    """Write each modification's mass after its residue.

    >>> mod = ModificationDefinition("Plus1Oxy", 15.9949, "M", ModificationType.DYNAMIC, "*")
    >>> convert_mods_to_numeric("PEPMK", [AminoAcidModInfo("M", 4, ResidueTerminusState.NONE, mod)])
    'PEPM+15.9949K'
    """
    if not modified_residues:
        return clean_sequence

    parts = []
    for index, residue in enumerate(clean_sequence):
        parts.append(residue)
        for mod in modified_residues:
            if mod.residue_loc == index + 1:
                parts.append(format_signed(mod.mod_definition.mass, NUMERIC_MOD_DIGITS))

    return "".join(parts)


def _with_prefix_and_suffix(peptide: str, numeric_sequence: str) -> str:
    success, _, prefix, suffix = split_prefix_and_suffix(peptide)
    if success:
        return f"{prefix}.{numeric_sequence}.{suffix}"
    return numeric_sequence


# =============================================================================
# Ambiguous Modifications
# =============================================================================

class AmbiguousModInfo(NamedTuple):
    """A modification known only to lie somewhere within a residue span."""
    residue_start: int
    residue_end: int
    mod_mass_string: str


def extract_ambiguous_mods(sequence_with_mods: str, message_log: Optional[MessageLog] = None) -> Dict[int, AmbiguousModInfo]:
    """Find ``(residues)[mass]`` spans in a peptide.

    Parameters
    ----------
    sequence_with_mods : str
        Peptide as reported, e.g. ``I.(TIIQ)[-30.09]APQGVSLQYTSR.Q``
    message_log : MessageLog, optional
        Receives a warning for a ``[`` without a closing ``]``

    Returns
    -------
    Dict[int, AmbiguousModInfo]
        Keyed by the 1-based start residue of each span

    Examples
    --------
    >>> extract_ambiguous_mods("I.(TIIQ)[-30.09]APQGVSLQYTSR.Q")
    {1: AmbiguousModInfo(residue_start=1, residue_end=4, mod_mass_string='-30.09')}
    """
    success, primary, _, _ = split_prefix_and_suffix(sequence_with_mods)
    if not success:
        primary = sequence_with_mods

    ambiguous_mods: Dict[int, AmbiguousModInfo] = {}

    residue_number = 0
    span_start = 0
    parsing_span = False

    char_index = 0
    while char_index < len(primary):
        char = primary[char_index]

        if is_letter(char):
            residue_number += 1
            if char_index > 0 and primary[char_index - 1] == '(' and not parsing_span:
                parsing_span = True
                span_start = residue_number

        elif parsing_span:
            # First non-letter closes the span; the mass or name follows in brackets
            parsing_span = False

            if char_index < len(primary) - 2 and primary[char_index + 1] == '[':
                bracket_index = primary.find(']', char_index + 2)
                if bracket_index > 0:
                    ambiguous_mods[span_start] = AmbiguousModInfo(
                        span_start, residue_number, primary[char_index + 2:bracket_index]
                    )
                    char_index = bracket_index
                else:
                    message = (f"Opening bracket at index {char_index + 1} does not have a matching "
                               f"closing bracket: {primary}")
                    if message_log is not None:
                        message_log.warning(message)
                    else:
                        logger.warning(message)

        char_index += 1

    return ambiguous_mods


def _ambiguous_span_end(ambiguous_mods: Dict[int, AmbiguousModInfo], residue_loc: int) -> int:
    """End of the span containing residue_loc, or 0 if it is in none."""
    for info in ambiguous_mods.values():
        if info.residue_start <= residue_loc <= info.residue_end:
            return info.residue_end
    return 0


# =============================================================================
# Symbol Maps (inline markup fallback)
# =============================================================================

_STATIC_MOD_TYPES = (
    ModificationType.STATIC,
    ModificationType.TERMINAL_PEPTIDE_STATIC,
    ModificationType.PROTEIN_TERMINUS_STATIC,
)


def build_symbol_mod_maps(
    modification_defs: List[ModificationDefinition],
) -> Tuple[Dict[str, ModificationDefinition], Dict[str, List[ModificationDefinition]]]:
    """Dynamic mods by inline symbol and static mods by target residue.

    Static targets include the terminus symbols ``<`` ``>`` ``[`` ``]``.
    A dynamic symbol defined twice keeps its first definition. Isotopic and
    unknown-type mods are ignored.
    """
    dynamic_mods: Dict[str, ModificationDefinition] = {}
    static_mods: Dict[str, List[ModificationDefinition]] = {}
    duplicate_symbols = set()

    for mod_def in modification_defs:
        if mod_def.mod_type in _STATIC_MOD_TYPES:
            for residue in mod_def.target_residues:
                mod_defs = static_mods.setdefault(residue, [])
                if mod_def in mod_defs:
                    continue
                if mod_defs:
                    logger.info(f"Residue '{residue}' has more than one static mod defined; allowing it")
                mod_defs.append(mod_def)

        elif mod_def.mod_type == ModificationType.DYNAMIC:
            if mod_def.symbol in dynamic_mods:
                # Common with MODa, which reports many mods
                if mod_def.symbol not in duplicate_symbols:
                    duplicate_symbols.add(mod_def.symbol)
                    logger.warning(
                        f"Dynamic mod symbol '{mod_def.symbol}' is already defined; ignoring the duplicate "
                        f"with mass {mod_def.mass_as_text}"
                    )
                continue
            dynamic_mods[mod_def.symbol] = mod_def

    return dynamic_mods, static_mods


# =============================================================================
# Resolver
# =============================================================================

class ModificationResolver:
    """Resolve modifications and proteins of PSMs read from one synopsis file.

    Parameters
    ----------
    modification_defs : List[ModificationDefinition], optional
        ModSummary catalog; None when no ModSummary file was loaded
    seq_maps : SeqMaps, optional
        ResultToSeqMap, SeqInfo, SeqToProteinMap and PepToProtMap
    message_log : MessageLog, optional
        Receives unmatched-tag errors and fallback warnings
    max_proteins_per_psm : int
        Limit on placeholder protein details added per PSM (0 = no limit)
    """

    def __init__(
        self,
        modification_defs: Optional[List[ModificationDefinition]] = None,
        seq_maps: Optional[SeqMaps] = None,
        message_log: Optional[MessageLog] = None,
        max_proteins_per_psm: int = 0,
    ):
        self.modification_defs = modification_defs
        self.seq_maps = seq_maps or SeqMaps()
        self.message_log = message_log or MessageLog()
        self.max_proteins_per_psm = max_proteins_per_psm
        # ord()-indexed residue masses; None means the standard table
        self.aa_masses = None

        self._dynamic_mods, self._static_mods = build_symbol_mod_maps(modification_defs or [])

    # =========================================================================
    # Catalog Matching
    # =========================================================================

    def find_matching_mod(
        self,
        mass_correction_tag: str,
        favor_terminal_mods: bool,
        residue_terminus_state: ResidueTerminusState,
    ) -> Optional[ModificationDefinition]:
        """Catalog entry for a mass correction tag.

        A tag may be registered both as a residue mod and as a terminal
        static mod. At a peptide terminus, a terminal entry targeting that
        terminus is preferred when favor_terminal_mods is set; otherwise a
        non-terminal entry is preferred. When neither preference matches,
        the first entry with the tag is used and a warning is logged.

        Returns
        -------
        ModificationDefinition or None
            None when the catalog has no entry for the tag
        """
        if self.modification_defs is None:
            return None

        tag_lower = mass_correction_tag.lower()
        matched_defs = [mod for mod in self.modification_defs if mod.mass_correction_tag.lower() == tag_lower]

        if not matched_defs and mass_correction_tag == MINUS_H2O_TAG:
            for mod in self.modification_defs:
                if abs(mod.mass - MINUS_H2O_MASS) <= MINUS_H2O_MATCH_TOLERANCE:
                    self.message_log.warning(
                        f"Mod {mass_correction_tag} not found in the ModSummary by name, but was found by "
                        f"modification mass ({mod.mass_correction_tag})"
                    )
                    matched_defs.append(mod)
                    break

        if not matched_defs:
            return None

        if favor_terminal_mods:
            if residue_terminus_state == ResidueTerminusState.PEPTIDE_N_TERMINUS:
                terminus_symbols = (N_TERMINAL_PEPTIDE_SYMBOL, N_TERMINAL_PROTEIN_SYMBOL)
            elif residue_terminus_state == ResidueTerminusState.PEPTIDE_C_TERMINUS:
                terminus_symbols = (C_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PROTEIN_SYMBOL)
            else:
                terminus_symbols = ()

            for mod in matched_defs:
                if mod.mod_type.is_terminal and any(mod.target_residues_contain(s) for s in terminus_symbols):
                    return mod

        for mod in matched_defs:
            if not mod.mod_type.is_terminal:
                return mod

        self.message_log.warning(
            f"No {residue_terminus_state.name.lower()} match for mass correction tag {mass_correction_tag}; "
            f"using the first catalog entry ({matched_defs[0]})"
        )
        return matched_defs[0]

    def _definition_for_unmatched_tag(self, mass_correction_tag: str) -> ModificationDefinition:
        if self.modification_defs is None:
            # No catalog loaded; keep the tag without a mass
            return ModificationDefinition(mass_correction_tag=mass_correction_tag)

        if mass_correction_tag == MINUS_H2O_TAG:
            self.message_log.warning(
                f"Mass correction tag {MINUS_H2O_TAG} not defined in the ModSummary file; using {MINUS_H2O_MASS}"
            )
            return ModificationDefinition(mass_correction_tag=mass_correction_tag, mass=MINUS_H2O_MASS)

        self.message_log.error(f"Unrecognized mass correction tag found in the SeqInfo file: {mass_correction_tag}")
        return ModificationDefinition(mass_correction_tag=mass_correction_tag, unknown_mod_auto_defined=True)

    # =========================================================================
    # SeqInfo Resolution
    # =========================================================================

    def store_mod_info(self, psm: PSM, seq_info: SequenceInfo):
        """Replace the PSM's modifications with those of its SeqInfo entry."""
        psm.peptide_monoisotopic_mass = seq_info.monoisotopic_mass
        psm.clear_modified_residues()

        if seq_info.mod_count <= 0 or not seq_info.mod_description:
            return

        clean_sequence = psm.peptide_clean_sequence
        residue_count = len(clean_sequence)

        n_terminal_mods_added = set()
        c_terminal_mods_added = set()

        ambiguous_mods = extract_ambiguous_mods(psm.peptide, self.message_log)

        for token in seq_info.mod_description.split(','):
            mass_correction_tag, position_text = parse_key_value_setting(token, ':')
            if not mass_correction_tag or not position_text:
                continue

            try:
                residue_loc = int(position_text)
            except ValueError:
                continue

            if not 1 <= residue_loc <= residue_count:
                logger.debug(f"Mod position {residue_loc} outside {clean_sequence}; skipping {token}")
                continue

            # A tag already used at a terminus (e.g. iTRAQ on an N-terminal Lys)
            # should next match its residue entry
            if residue_loc == 1:
                terminus_state = ResidueTerminusState.PEPTIDE_N_TERMINUS
                favor_terminal_mods = mass_correction_tag.lower() not in n_terminal_mods_added
            elif residue_loc == residue_count:
                terminus_state = ResidueTerminusState.PEPTIDE_C_TERMINUS
                favor_terminal_mods = mass_correction_tag.lower() not in c_terminal_mods_added
            else:
                terminus_state = ResidueTerminusState.NONE
                favor_terminal_mods = False

            mod_def = self.find_matching_mod(mass_correction_tag, favor_terminal_mods, terminus_state)
            if mod_def is None:
                mod_def = self._definition_for_unmatched_tag(mass_correction_tag)

            psm.add_modified_residue(
                clean_sequence[residue_loc - 1],
                residue_loc,
                terminus_state,
                mod_def,
                _ambiguous_span_end(ambiguous_mods, residue_loc),
            )

            if residue_loc == 1:
                n_terminal_mods_added.add(mod_def.mass_correction_tag.lower())
            elif residue_loc == residue_count:
                c_terminal_mods_added.add(mod_def.mass_correction_tag.lower())

    def update_psm_using_seq_info(self, psm: PSM) -> bool:
        """Apply sequence ID, modifications, proteins and numeric mods.

        Returns
        -------
        bool
            False when the PSM's ResultID has no ResultToSeqMap entry
        """
        seq_id = self.seq_maps.result_to_seq_map.get(psm.result_id)
        if seq_id is None:
            return False

        psm.seq_id = seq_id

        seq_info = self.seq_maps.seq_info.get(seq_id)
        if seq_info is not None:
            self.store_mod_info(psm, seq_info)

        # Copies, so residue locations never write back into the shared map
        for protein_info in self.seq_maps.seq_to_protein_map.get(seq_id, ()):
            psm.add_protein_detail(copy.copy(protein_info))

        # One more than the maximum is allowed since two sources are merged
        for protein_name in [name for name in psm.proteins if name not in psm.protein_details]:
            if 0 < self.max_proteins_per_psm < len(psm.protein_details):
                break
            psm.add_protein_detail(ProteinInfo(
                protein_name, 0, CleavageState.NON_SPECIFIC, PeptideTerminusState.NONE
            ))

        pep_to_prot_info = self.seq_maps.pep_to_prot_map.get(psm.peptide_clean_sequence)
        if pep_to_prot_info is not None:
            for protein_name, protein_info in psm.protein_details.items():
                locations = pep_to_prot_info.protein_map.get(protein_name)
                if locations:
                    residue_start, residue_end = locations[0]
                    protein_info.update_location_in_protein(residue_start, residue_end)

        psm.peptide_with_numeric_mods = _with_prefix_and_suffix(
            psm.peptide, convert_mods_to_numeric(psm.peptide_clean_sequence, psm.modified_residues)
        )
        return True

    # =========================================================================
    # Inline Symbol Markup
    # =========================================================================

    def _append_static_mods(self, key: str, residue: str, residue_loc: int, terminus_state, parts, mods):
        for mod_def in self._static_mods.get(key, ()):
            parts.append(format_signed(mod_def.mass, NUMERIC_MOD_DIGITS))
            mods.append(AminoAcidModInfo(residue, residue_loc, terminus_state, mod_def))

    def convert_symbols_to_numeric(self, peptide: str) -> Tuple[str, List[AminoAcidModInfo]]:
        """Replace dynamic mod symbols with masses and add static mod masses.

        Parameters
        ----------
        peptide : str
            Peptide with inline symbols, e.g. ``R.TDM*ESALPVTVLSAEDIAK.T``

        Returns
        -------
        peptide_with_numeric_mods : str
            e.g. ``R.TDM+15.9949ESALPVTVLSAEDIAK.T``
        modified_residues : List[AminoAcidModInfo]
        """
        if not self._dynamic_mods and not self._static_mods:
            return peptide, []

        _, primary, _, _ = split_prefix_and_suffix(peptide)
        peptide_length = sum(1 for char in primary if is_letter(char))

        index_start = 0
        index_end = len(peptide) - 1
        if len(peptide) >= 4:
            # Skip the prefix and suffix residues of R.HRDTGILDSIGR.F
            if peptide[1] == '.':
                index_start = 2
            if peptide[-2] == '.':
                index_end = len(peptide) - 3

        parts = []
        mods: List[AminoAcidModInfo] = []
        residue_loc = 0
        most_recent_residue = '.'

        for index, char in enumerate(peptide):
            if index < index_start or index > index_end:
                parts.append(char)
                continue

            terminus_state = ResidueTerminusState.NONE

            if is_letter(char):
                most_recent_residue = char
                residue_loc += 1

                if residue_loc == 1:
                    terminus_state = ResidueTerminusState.PEPTIDE_N_TERMINUS
                elif residue_loc == peptide_length:
                    terminus_state = ResidueTerminusState.PEPTIDE_C_TERMINUS

                parts.append(char)

                if self._static_mods:
                    self._append_static_mods(char, char, residue_loc, terminus_state, parts, mods)

                    if index == index_start:
                        self._append_static_mods(
                            N_TERMINAL_PEPTIDE_SYMBOL, char, residue_loc,
                            ResidueTerminusState.PEPTIDE_N_TERMINUS, parts, mods,
                        )
                        if peptide.startswith(PROTEIN_TERMINUS_SYMBOL_PHRP):
                            self._append_static_mods(
                                N_TERMINAL_PROTEIN_SYMBOL, char, residue_loc,
                                ResidueTerminusState.PROTEIN_N_TERMINUS, parts, mods,
                            )
            else:
                mod_def = self._dynamic_mods.get(char)
                if mod_def is not None:
                    parts.append(format_signed(mod_def.mass, NUMERIC_MOD_DIGITS))
                    mods.append(AminoAcidModInfo(most_recent_residue, residue_loc, terminus_state, mod_def))

            if index == index_end and self._static_mods:
                self._append_static_mods(
                    C_TERMINAL_PEPTIDE_SYMBOL, most_recent_residue, residue_loc,
                    ResidueTerminusState.PEPTIDE_C_TERMINUS, parts, mods,
                )
                if peptide.endswith(PROTEIN_TERMINUS_SYMBOL_PHRP):
                    self._append_static_mods(
                        C_TERMINAL_PROTEIN_SYMBOL, most_recent_residue, residue_loc,
                        ResidueTerminusState.PROTEIN_C_TERMINUS, parts, mods,
                    )

        return "".join(parts), mods

    def markup_peptide_with_mods(self, psm: PSM):
        """Fill modifications from inline symbols when no SeqInfo entry exists.

        When the theoretical mass is still 0, it is computed from the
        residues plus the modification masses.
        """
        peptide_with_mods, mods = self.convert_symbols_to_numeric(psm.peptide.strip())

        psm.peptide_with_numeric_mods = peptide_with_mods
        psm.clear_modified_residues()

        total_mod_mass = 0.0
        for mod in mods:
            psm.add_modified_residue(mod.residue, mod.residue_loc, mod.terminus_state, mod.mod_definition)
            total_mod_mass += mod.mod_definition.mass

        if abs(psm.peptide_monoisotopic_mass) < sys.float_info.epsilon:
            sequence_mass = compute_sequence_mass(psm.peptide_clean_sequence, self.aa_masses)
            psm.peptide_monoisotopic_mass = sequence_mass + total_mod_mass

    # =========================================================================
    # Entry Point
    # =========================================================================

    def resolve(self, psm: PSM) -> PSM:
        """Resolve a PSM from the SeqInfo maps, else from inline symbols.

        Safe to call more than once on the same PSM.
        """
        if not self.update_psm_using_seq_info(psm) and not psm.peptide_with_numeric_mods:
            self.markup_peptide_with_mods(psm)
        return psm
