"""Peptide mass arithmetic used by the synopsis-file readers.

Numba-compiled helpers that convert between m/z and neutral mass, convert
tolerances between ppm and Daltons, and compute the theoretical mass of an
unmodified peptide from its residues.

Key Features
------------
- convolute_mass(): m/z at one charge state → m/z at another (0 = neutral)
- ppm_to_mass() / mass_to_ppm(): tolerance conversion at a reference m/z
- compute_sequence_mass(): residue sum + H2O via the ord()-indexed mass table
- build_aa_mass_table(): mass table with custom residues (MS-GF+ CustomAA)
- compute_formula_mass(): mass of an empirical formula such as C2H3N1O1

Examples
--------
>>> convolute_mass(500.5, 2)          # [M+2H]2+ → neutral mass
998.985447...
>>> ppm_to_mass(20, 2000)
0.04
>>> compute_sequence_mass("PEPTIDE")
799.359964...
"""

import re
from typing import Dict, Optional

import numpy as np
import numba

from .constants import AA_MASSES, ELEMENT_MASSES, H2O_MASS, HEXNAC_MASS, PROTON_MASS


# =============================================================================
# Charge State Conversion
# =============================================================================

@numba.jit(nopython=True, cache=True)
def convolute_mass(
    mass_mz: float,
    current_charge: int,
    desired_charge: int = 0,
    charge_carrier_mass: float = 0.0,
) -> float:
    """Convert an m/z value from one charge state to another.

    Parameters
    ----------
    mass_mz : float
        Observed m/z (or neutral mass when current_charge is 0)
    current_charge : int
        Charge state of mass_mz
    desired_charge : int
        Charge state to convert to; 0 returns the neutral mass
    charge_carrier_mass : float
        Mass of the charge carrier; 0 means a proton

    Returns
    -------
    float
        Converted value; 0.0 for negative charge states (not supported)

    Examples
    --------
    >>> convolute_mass(1000.0, 1, 0)      # M+H → M
    998.992723...
    >>> convolute_mass(998.992723, 0, 2)  # M → [M+2H]2+
    500.503638...
    """
    if abs(charge_carrier_mass) < 1e-12:
        charge_carrier_mass = PROTON_MASS

    if current_charge == desired_charge:
        return mass_mz

    # Convert to M+H first
    if current_charge == 1:
        mh = mass_mz
    elif current_charge > 1:
        mh = mass_mz * current_charge - charge_carrier_mass * (current_charge - 1)
    elif current_charge == 0:
        mh = mass_mz + charge_carrier_mass
    else:
        return 0.0

    if desired_charge > 1:
        return (mh + charge_carrier_mass * (desired_charge - 1)) / desired_charge
    elif desired_charge == 1:
        return mh
    elif desired_charge == 0:
        return mh - charge_carrier_mass

    return 0.0


# =============================================================================
# Tolerance Conversion
# =============================================================================

@numba.jit(nopython=True, cache=True)
def ppm_to_mass(ppm: float, reference_mz: float) -> float:
    """Convert a ppm tolerance to Daltons at reference_mz."""
    return ppm / 1e6 * reference_mz


@numba.jit(nopython=True, cache=True)
def mass_to_ppm(mass_da: float, reference_mz: float) -> float:
    """Convert a Dalton tolerance to ppm at reference_mz."""
    return mass_da * 1e6 / reference_mz


# =============================================================================
# Sequence Mass
# =============================================================================

@numba.jit(nopython=True, cache=True)
def _sum_residue_masses(sequence_ord: np.ndarray, aa_masses: np.ndarray) -> float:
    """Sum residue masses of an ord()-encoded sequence (Numba-compiled)."""
    total = 0.0
    for i in range(len(sequence_ord)):
        total += aa_masses[sequence_ord[i]]
    return total


def compute_sequence_mass(clean_sequence: str, aa_masses: Optional[np.ndarray] = None) -> float:
    """Monoisotopic neutral mass of an unmodified peptide.

    Parameters
    ----------
    clean_sequence : str
        Residue letters only (no prefix/suffix, no mod symbols)
    aa_masses : np.ndarray, optional
        ord()-indexed residue masses; defaults to AA_MASSES

    Returns
    -------
    float
        Residue sum plus H2O; 0.0 for an empty sequence

    Notes
    -----
    Unknown characters contribute 0 Da; callers pass clean sequences.
    """
    if not clean_sequence:
        return 0.0

    sequence_ord = np.frombuffer(clean_sequence.encode('ascii', 'replace'), dtype=np.uint8)
    if aa_masses is None:
        aa_masses = AA_MASSES
    return _sum_residue_masses(sequence_ord, aa_masses) + H2O_MASS


def build_aa_mass_table(custom_masses: Dict[str, float]) -> np.ndarray:
    """Copy of AA_MASSES with custom residue masses applied.

    >>> table = build_aa_mass_table({'J': 113.047678})
    >>> float(table[ord('J')])
    113.047678
    """
    aa_masses = AA_MASSES.copy()
    for residue, mass in custom_masses.items():
        aa_masses[ord(residue.upper())] = mass
        aa_masses[ord(residue.lower())] = mass
    return aa_masses


# =============================================================================
# Empirical Formulas
# =============================================================================

_FORMULA = re.compile(r"(?:[A-Z][a-z]?(?:[+-]?\d+)?)+")
_FORMULA_ELEMENT = re.compile(r"([A-Z][a-z]?)([+-]?\d+)?")


def compute_formula_mass(empirical_formula: str) -> float:
    """Monoisotopic mass of an empirical formula.

    Element counts may be omitted (meaning 1), signed or zero, e.g.
    ``C2H3N1O1``, ``C+2H+3N+1O+1``, ``H-2O-1`` or ``C3H6N2O0S1``.
    ``HexNAc`` is accepted as a special case.

    Raises
    ------
    ValueError
        If the formula is malformed or names an unknown element

    Examples
    --------
    >>> round(compute_formula_mass("C2H3N1O1"), 6)
    57.021464
    >>> round(compute_formula_mass("H-2O-1"), 6)
    -18.010565
    """
    formula = empirical_formula.strip()
    if formula.lower() == "hexnac":
        return HEXNAC_MASS

    if not _FORMULA.fullmatch(formula):
        raise ValueError(f"Invalid empirical formula: {empirical_formula}")

    mass = 0.0
    unknown_elements = []
    for element, count_text in _FORMULA_ELEMENT.findall(formula):
        if element not in ELEMENT_MASSES:
            unknown_elements.append(element)
            continue
        count = int(count_text) if count_text else 1
        mass += ELEMENT_MASSES[element] * count

    if unknown_elements:
        raise ValueError(
            f"Error parsing empirical formula '{empirical_formula}', unknown element(s) {', '.join(unknown_elements)}"
        )

    return mass
