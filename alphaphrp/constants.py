"""Physical constants, residue masses and file-format markers.

This module provides the physical constants and amino acid masses used by
the mass calculator, together with the sentinel values and symbols shared
by every synopsis-file reader in AlphaPHRP.

Constants are provided in both dictionary and ord()-indexed array formats
for compatibility with both standard Python and Numba JIT-compiled code.

Key Features
------------
- Correct PROTON_MASS (1.007276466622 Da, not hydrogen atom mass!)
- ord()-indexed AA_MASSES array for high-performance Numba code
- Terminus symbols used in ModSummary target residues (< > [ ])
- Sentinel for data lines without a scan number
- Element masses for empirical formulas in parameter files
- The 2000 m/z reference used for every ppm <-> Da conversion

Sources
-------
- NIST physical constants: https://physics.nist.gov/cgi-bin/cuu/Value
- IUPAC amino acid masses: https://www.unimod.org/masses.html
"""

import numpy as np

# =============================================================================
# Fundamental Physical Constants (NIST values)
# =============================================================================

# Proton mass (NOT hydrogen atom mass!)
# Source: NIST 2018 CODATA
PROTON_MASS = 1.007276466622  # Da

# Electron mass
ELECTRON_MASS = 0.000548579909  # Da

# Water mass (H2O)
# Calculated: 2*1.007825 + 15.994915 = 18.010564684
H2O_MASS = 18.010564684  # Da

# Mass assigned to the built-in "MinusH2O" mass correction tag when the
# ModSummary file does not define it
MINUS_H2O_MASS = -18.010565  # Da

# Maximum difference when matching MinusH2O against catalog masses
MINUS_H2O_MATCH_TOLERANCE = 0.001  # Da

# =============================================================================
# Element Monoisotopic Masses (Da)
# =============================================================================

# Most abundant isotope of each element; used for empirical formulas such as
# C2H3N1O1 in MS-GF+ modification definitions
ELEMENT_MASSES = {
    'H': 1.00782503207,
    'C': 12.0,
    'N': 14.0030740048,
    'O': 15.99491461956,
    'S': 31.97207100,
    'P': 30.97376163,
    'Se': 79.9165213,
    'Na': 22.9897692809,
    'K': 38.96370668,
    'Li': 7.01600455,
    'Mg': 23.9850417,
    'Ca': 39.96259098,
    'F': 18.99840322,
    'Cl': 34.96885268,
    'Br': 78.9183371,
    'I': 126.904473,
    'B': 11.0093054,
    'Si': 27.9769265325,
    'Fe': 55.9349375,
    'Cu': 62.9295975,
    'Zn': 63.9291422,
    'Hg': 201.970643,
}

# MS-GF+ accepts HexNAc (N-acetylhexosamine) in place of a formula
HEXNAC_MASS = 203.079376  # Da

# =============================================================================
# Tolerance Conversion
# =============================================================================

# Every parameter-file reader converts between ppm and Da at this m/z.
# Downstream tools compare against these numbers, so it must not change.
TOLERANCE_REFERENCE_MZ = 2000.0

# =============================================================================
# Amino Acid Monoisotopic Masses (Da)
# =============================================================================

# Values are monoisotopic masses of residues (not including N/C terminals)
AA_MASSES_DICT = {
    'A': 71.037114,   # Alanine
    'R': 156.101111,  # Arginine
    'N': 114.042927,  # Asparagine
    'D': 115.026943,  # Aspartic acid
    'C': 103.009185,  # Cysteine (unmodified)
    'E': 129.042593,  # Glutamic acid
    'Q': 128.058578,  # Glutamine
    'G': 57.021464,   # Glycine
    'H': 137.058912,  # Histidine
    'I': 113.084064,  # Isoleucine
    'L': 113.084064,  # Leucine
    'K': 128.094963,  # Lysine
    'M': 131.040485,  # Methionine
    'F': 147.068414,  # Phenylalanine
    'P': 97.052764,   # Proline
    'S': 87.032028,   # Serine
    'T': 101.047679,  # Threonine
    'W': 186.079313,  # Tryptophan
    'Y': 163.063320,  # Tyrosine
    'V': 99.068414,   # Valine
}

# Non-standard amino acids mapped to standard equivalents
AA_MASSES_NONSTANDARD = {
    'X': 113.084064,  # Unknown → Leu/Ile (most common)
    'Z': 128.058578,  # Glu/Gln → Gln
    'B': 114.042927,  # Asp/Asn → Asn
    'J': 113.084064,  # Leu/Ile → Leu
    'U': 150.953636,  # Selenocysteine
    'O': 237.147727,  # Pyrrolysine
}

# =============================================================================
# ord()-Indexed Arrays for Numba
# =============================================================================

# Access via: AA_MASSES[ord('A')] → 71.037114
AA_MASSES = np.zeros(256, dtype=np.float64)

for aa, mass in AA_MASSES_DICT.items():
    AA_MASSES[ord(aa)] = mass
    # Synopsis files occasionally carry lowercase residues
    AA_MASSES[ord(aa.lower())] = mass

for aa, mass in AA_MASSES_NONSTANDARD.items():
    AA_MASSES[ord(aa)] = mass
    AA_MASSES[ord(aa.lower())] = mass

# =============================================================================
# Modification Target Symbols
# =============================================================================

# Used in the Target_Residues column of ModSummary files
N_TERMINAL_PEPTIDE_SYMBOL = '<'
C_TERMINAL_PEPTIDE_SYMBOL = '>'
N_TERMINAL_PROTEIN_SYMBOL = '['
C_TERMINAL_PROTEIN_SYMBOL = ']'

# Modification symbol used for static mods (no inline symbol)
NO_SYMBOL_MODIFICATION_SYMBOL = '-'

# Default mass correction tag of an unnamed modification
UNKNOWN_MASS_CORRECTION_TAG = "UnkMod00"

# Prefix/suffix residue marking a protein terminus in PHRP peptides (-.PEPTIDE.A)
PROTEIN_TERMINUS_SYMBOL_PHRP = '-'

# =============================================================================
# Reader Sentinels
# =============================================================================

# Scan number of a PSM whose data line has no parsable scan number
SCAN_NOT_FOUND_FLAG = -100

# Collision mode stored when the synopsis file does not report one
UNKNOWN_COLLISION_MODE = "n/a"

# Default dataset name when none can be determined
UNDEFINED_DATASET_NAME = "Undefined"

# =============================================================================
# Mass Types
# =============================================================================

MASS_TYPE_MONOISOTOPIC = "monoisotopic"
MASS_TYPE_AVERAGE = "average"


def validate_constants():
    """Validate that constants are physically reasonable.

    Raises AssertionError if any constant is out of expected range.
    """
    assert 1.0072 < PROTON_MASS < 1.0073, f"PROTON_MASS is wrong: {PROTON_MASS}"
    assert 18.00 < H2O_MASS < 18.02, f"H2O_MASS is wrong: {H2O_MASS}"
    assert abs(H2O_MASS + MINUS_H2O_MASS) < MINUS_H2O_MATCH_TOLERANCE, \
        f"MINUS_H2O_MASS inconsistent: {MINUS_H2O_MASS}"

    for aa, mass in AA_MASSES_DICT.items():
        assert 50.0 < mass < 250.0, f"AA {aa} mass out of range: {mass}"
