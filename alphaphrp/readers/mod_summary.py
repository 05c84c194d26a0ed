"""ModSummary file reader.

A ModSummary file lists every modification used by a dataset's search::

    Modification_Symbol  Modification_Mass  Target_Residues  Modification_Type  Mass_Correction_Tag  Occurrence_Count
    *                    15.9949            M                D                  Plus1Oxy             12
    -                    57.0215            C                S                  IodoAcet             40
"""

import logging
from pathlib import Path
from typing import Dict, List, Union

from ..constants import NO_SYMBOL_MODIFICATION_SYMBOL
from ..data.case_insensitive import CaseInsensitiveDict
from ..data.modifications import ModificationDefinition, ModificationType
from ..exceptions import ModSummaryFormatError

logger = logging.getLogger(__name__)


COLUMN_MODIFICATION_SYMBOL = "Modification_Symbol"
COLUMN_MODIFICATION_MASS = "Modification_Mass"
COLUMN_TARGET_RESIDUES = "Target_Residues"
COLUMN_MODIFICATION_TYPE = "Modification_Type"
COLUMN_MASS_CORRECTION_TAG = "Mass_Correction_Tag"
COLUMN_OCCURRENCE_COUNT = "Occurrence_Count"

MOD_SUMMARY_COLUMNS = (
    COLUMN_MODIFICATION_SYMBOL,
    COLUMN_MODIFICATION_MASS,
    COLUMN_TARGET_RESIDUES,
    COLUMN_MODIFICATION_TYPE,
    COLUMN_MASS_CORRECTION_TAG,
    COLUMN_OCCURRENCE_COUNT,
)

# Misspelled in files written before December 2012
_LEGACY_OCCURRENCE_COUNT = "Occurence_Count"


class ModSummaryReader:
    """Modification definitions of one ModSummary file.

    Parameters
    ----------
    mod_summary_file_path : str or Path

    Attributes
    ----------
    modification_defs : List[ModificationDefinition]
        In file order

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ModSummaryFormatError
        If a modification mass is not numeric
    """

    def __init__(self, mod_summary_file_path: Union[str, Path]):
        self.file_path = Path(mod_summary_file_path)
        self.modification_defs: List[ModificationDefinition] = []

        # Mass correction tag -> mass exactly as written; first occurrence wins
        self._masses_as_text: Dict[str, str] = CaseInsensitiveDict()

        if not self.file_path.is_file():
            raise FileNotFoundError(f"ModSummary file not found: {self.file_path}")

        self._read()

    def get_modification_mass_as_text(self, mass_correction_tag: str) -> str:
        return self._masses_as_text.get(mass_correction_tag, "")

    def _read(self):
        column_index = {name.lower(): index for index, name in enumerate(MOD_SUMMARY_COLUMNS)}
        header_checked = False

        with open(self.file_path, encoding='utf-8', errors='replace') as f:
            for line in f:
                line = line.rstrip('\r\n')
                if not line:
                    continue

                columns = line.split('\t')

                if not header_checked:
                    header_checked = True
                    if columns[0].strip().lower() == COLUMN_MODIFICATION_SYMBOL.lower():
                        column_index = self._map_header(columns)
                        continue

                if len(columns) < 4:
                    continue

                self._add_definition(columns, column_index)

        logger.debug(f"✓ Read {len(self.modification_defs)} modification definitions from {self.file_path.name}")

    @staticmethod
    def _map_header(columns: List[str]) -> Dict[str, int]:
        column_index = {}
        for index, name in enumerate(columns):
            name = name.strip()
            if name == _LEGACY_OCCURRENCE_COUNT:
                name = COLUMN_OCCURRENCE_COUNT
            column_index.setdefault(name.lower(), index)
        return column_index

    def _add_definition(self, columns: List[str], column_index: Dict[str, int]):
        def value(column_name: str) -> str:
            index = column_index.get(column_name.lower(), -1)
            if 0 <= index < len(columns):
                return columns[index].strip()
            return ""

        symbol_text = value(COLUMN_MODIFICATION_SYMBOL) or NO_SYMBOL_MODIFICATION_SYMBOL
        mass_text = value(COLUMN_MODIFICATION_MASS)
        mass_correction_tag = value(COLUMN_MASS_CORRECTION_TAG)

        try:
            mass = float(mass_text)
        except ValueError:
            raise ModSummaryFormatError(
                f"Modification mass is not numeric for MassCorrectionTag {mass_correction_tag}: "
                f"{mass_text} ({self.file_path.name})"
            )

        try:
            occurrence_count = int(value(COLUMN_OCCURRENCE_COUNT) or 0)
        except ValueError:
            occurrence_count = 0

        mod_def = ModificationDefinition(
            mass_correction_tag=mass_correction_tag,
            mass=mass,
            target_residues=value(COLUMN_TARGET_RESIDUES),
            mod_type=ModificationType.from_symbol(value(COLUMN_MODIFICATION_TYPE)),
            symbol=symbol_text[0],
            mass_as_text=mass_text,
            occurrence_count=occurrence_count,
        )
        self.modification_defs.append(mod_def)

        if mass_correction_tag not in self._masses_as_text:
            self._masses_as_text[mass_correction_tag] = mass_text


def read_mod_summary_file(mod_summary_file_path: Union[str, Path]) -> List[ModificationDefinition]:
    """Modification definitions of a ModSummary file, in file order."""
    return ModSummaryReader(mod_summary_file_path).modification_defs
