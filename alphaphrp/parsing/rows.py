"""Shared pieces of synopsis-row parsing.

A RowContext wraps one split data line together with the header mapping
and the PSM being filled. Tool strategies read typed column values through
it and copy leftover columns into the PSM's score map with add_score().
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ..cleavage import CleavageStateCalculator
from ..data.psm import PSM
from ..mass_calculator import convolute_mass
from ..schema.columns import (
    ColumnMapping,
    lookup_column_float,
    lookup_column_int,
    lookup_column_value,
    try_get_column_value,
)


# =============================================================================
# Parse Results
# =============================================================================

class ParseOutcome(Enum):
    """Result of parsing one data line."""
    OK = "ok"
    INVALID_LINE = "invalid_line"   # e.g. scan column missing or not numeric
    ERROR = "error"                 # exception while parsing a well-formed line


@dataclass
class ParseResult:
    outcome: ParseOutcome
    psm: Optional[PSM] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome == ParseOutcome.OK


# =============================================================================
# Score Helpers
# =============================================================================

def add_score(psm: PSM, data_columns: List[str], column_name: str, mapping: ColumnMapping) -> bool:
    """Copy one column into psm.additional_scores under column_name.

    Returns False (and stores nothing) when the file has no such column.
    """
    found, value = try_get_column_value(data_columns, column_name, mapping)
    if found:
        psm.set_score(column_name, value)
    return found


def split_proteins(protein_list: str, separator: str = ';') -> List[str]:
    """Split a delimited protein list, trimming names and dropping blanks."""
    if not protein_list:
        return []
    return [name.strip() for name in protein_list.split(separator) if name.strip()]


def format_scientific(
    value: float,
    decimals: int,
    exponent_digits: int = 2,
    exponent_char: str = 'E',
    signed_exponent: bool = False,
) -> str:
    """Scientific notation with a fixed-width exponent.

    PHRP files write ``1.23457E-05`` (no '+' on positive exponents) and
    X!Tandem expectation values as ``1.23e-005``.

    >>> format_scientific(1.5e-7, 5)
    '1.50000E-07'
    >>> format_scientific(0.00123, 2, 3, 'e', True)
    '1.23e-003'
    >>> format_scientific(2.0, 1)
    '2.0E00'
    """
    if not math.isfinite(value):
        return str(value)

    mantissa, exponent = f"{value:.{decimals}E}".split('E')
    exponent = int(exponent)

    if exponent < 0:
        sign = '-'
    elif signed_exponent:
        sign = '+'
    else:
        sign = ''

    return f"{mantissa}{exponent_char}{sign}{abs(exponent):0{exponent_digits}d}"


def try_parse_float(text: str) -> Optional[float]:
    """Float value of text, or None if it is not a number."""
    if not text or not text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


# =============================================================================
# Row Context
# =============================================================================

class RowContext:
    """One data line being parsed by a tool strategy.

    Parameters
    ----------
    data_columns : List[str]
        Data line split on tabs
    mapping : ColumnMapping
        Header mapping of the file
    psm : PSM
        Record with the common fields (scan, result ID, peptide, charge)
        already filled
    fast_mode : bool
        Skip cleavage and modification work
    charge_carrier_mass : float
        Mass of the charge carrier; 0 means a proton
    result_to_proteins : Dict[int, List[str]], optional
        Result ID -> proteins, for tools whose synopsis lacks a protein column
    cleavage_calculator : CleavageStateCalculator, optional
    """

    def __init__(
        self,
        data_columns: List[str],
        mapping: ColumnMapping,
        psm: PSM,
        fast_mode: bool = False,
        charge_carrier_mass: float = 0.0,
        result_to_proteins: Optional[Dict[int, List[str]]] = None,
        cleavage_calculator: Optional[CleavageStateCalculator] = None,
    ):
        self.data_columns = data_columns
        self.mapping = mapping
        self.psm = psm
        self.fast_mode = fast_mode
        self.charge_carrier_mass = charge_carrier_mass
        self.result_to_proteins = result_to_proteins if result_to_proteins is not None else {}
        self.cleavage_calculator = cleavage_calculator

    def has_column(self, name: str) -> bool:
        return self.mapping.has_column(name)

    def get_text(self, name: str, value_if_missing: str = "") -> str:
        return lookup_column_value(self.data_columns, name, self.mapping, value_if_missing)

    def get_int(self, name: str, value_if_missing: int = 0) -> int:
        return lookup_column_int(self.data_columns, name, self.mapping, value_if_missing)

    def get_float(self, name: str, value_if_missing: float = 0.0) -> float:
        return lookup_column_float(self.data_columns, name, self.mapping, value_if_missing)

    def add_score(self, name: str) -> bool:
        return add_score(self.psm, self.data_columns, name, self.mapping)

    def add_scores(self, names) -> None:
        for name in names:
            self.add_score(name)

    def copy_score(self, source_name: str, target_name: str) -> bool:
        """Store an already-parsed score under a second name."""
        found, value = self.psm.try_get_score(source_name)
        if found:
            self.psm.set_score(target_name, value)
        return found

    # =========================================================================
    # Masses
    # =========================================================================

    def neutral_mass(self, mass_mz: float, charge: int) -> float:
        """Neutral mass of an ion observed at mass_mz with the given charge."""
        return convolute_mass(float(mass_mz), int(charge), 0, float(self.charge_carrier_mass))

    def set_precursor_from_mz(self, mz_column: str = "PrecursorMZ"):
        self.psm.precursor_neutral_mass = self.neutral_mass(self.get_float(mz_column), self.psm.charge)

    def set_precursor_from_mh(self, mh_column: str, mass_error_column: str):
        """Precursor mass from a theoretical MH column corrected by the mass error.

        SEQUEST and X!Tandem report the computed MH of the peptide; the
        observed precursor is MH - DelM.
        """
        peptide_mh = self.get_float(mh_column)
        self.psm.precursor_neutral_mass = self.neutral_mass(peptide_mh, 1)

        self.psm.mass_error_da = self.get_text(mass_error_column)
        mass_error_da = try_parse_float(self.psm.mass_error_da)
        if mass_error_da is not None:
            self.psm.precursor_neutral_mass = self.neutral_mass(peptide_mh - mass_error_da, 1)

    def set_precursor_from_mz_or_mass(self, mz_column: str = "PrecursorMZ", mass_column: str = "Mass"):
        """Use the precursor m/z when it is non-zero, else the neutral mass column."""
        precursor_mz = self.get_float(mz_column)
        if abs(precursor_mz) > 0:
            self.psm.precursor_neutral_mass = self.neutral_mass(precursor_mz, self.psm.charge)
        else:
            self.psm.precursor_neutral_mass = self.get_float(mass_column)
