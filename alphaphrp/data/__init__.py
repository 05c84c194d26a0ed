"""Data model shared by the synopsis readers.

PSM records, modification catalog entries, sequence/protein maps and
normalized search-engine parameters.
"""

from .case_insensitive import CaseInsensitiveDict

from .modifications import (
    ModificationType,
    ResidueTerminusState,
    ModificationDefinition,
    AminoAcidModInfo,
    TERMINAL_SYMBOLS,
)

from .proteins import (
    ProteinInfo,
    PepToProteinMapInfo,
)

from .sequence_info import SequenceInfo

from .psm import PSM

from .search_params import (
    SearchEngineParameters,
    DEFAULT_SEARCH_DATE,
)

__all__ = [
    'CaseInsensitiveDict',

    # Modifications
    'ModificationType',
    'ResidueTerminusState',
    'ModificationDefinition',
    'AminoAcidModInfo',
    'TERMINAL_SYMBOLS',

    # Proteins and sequences
    'ProteinInfo',
    'PepToProteinMapInfo',
    'SequenceInfo',

    # Records
    'PSM',
    'SearchEngineParameters',
    'DEFAULT_SEARCH_DATE',
]
