"""Normalized search-engine parameters."""

from datetime import datetime
from typing import Dict, List

from ..constants import MASS_TYPE_MONOISOTOPIC
from .case_insensitive import CaseInsensitiveDict
from .modifications import ModificationDefinition


DEFAULT_SEARCH_DATE = datetime(1980, 1, 1)


class SearchEngineParameters:
    """Enzyme, termini and precursor tolerance of one search, plus the raw settings.

    Parameters
    ----------
    search_engine_name : str
        Display name, e.g. ``MS-GF+``
    modifications : List[ModificationDefinition], optional
        Static/dynamic mods defined by the search

    Attributes
    ----------
    custom_amino_acids : Dict[str, float]
        Residue mass of each custom amino acid symbol defined by the search

    Notes
    -----
    Assigning an empty enzyme stores ``"none"``; assigning an empty mass
    type stores ``"monoisotopic"``.
    """

    def __init__(self, search_engine_name: str = "Unknown", modifications: List[ModificationDefinition] = None):
        self.search_engine_name = search_engine_name
        self.search_engine_version = "Unknown"
        self.search_date = DEFAULT_SEARCH_DATE
        self.param_file_path = ""

        self.fasta_file_path = ""
        self.precursor_mass_tolerance_da = 0.0
        self.precursor_mass_tolerance_ppm = 0.0
        self._precursor_mass_type = MASS_TYPE_MONOISOTOPIC
        self._fragment_mass_type = MASS_TYPE_MONOISOTOPIC

        self._enzyme = "trypsin"
        self.max_number_internal_cleavages = 4
        self.min_number_termini = 0

        # 0 means a proton
        self.charge_carrier_mass = 0.0

        self.modifications: List[ModificationDefinition] = list(modifications or [])
        self.custom_amino_acids: Dict[str, float] = {}
        self.parameters: Dict[str, str] = CaseInsensitiveDict()

    @property
    def enzyme(self) -> str:
        return self._enzyme

    @enzyme.setter
    def enzyme(self, value: str):
        self._enzyme = value if value else "none"

    @property
    def precursor_mass_type(self) -> str:
        return self._precursor_mass_type

    @precursor_mass_type.setter
    def precursor_mass_type(self, value: str):
        self._precursor_mass_type = value if value else MASS_TYPE_MONOISOTOPIC

    @property
    def fragment_mass_type(self) -> str:
        return self._fragment_mass_type

    @fragment_mass_type.setter
    def fragment_mass_type(self, value: str):
        self._fragment_mass_type = value if value else MASS_TYPE_MONOISOTOPIC

    def add_modification(self, mod_definition: ModificationDefinition):
        self.modifications.append(mod_definition)

    def add_update_parameter(self, name: str, value: str):
        self.parameters[name] = value

    def __repr__(self):
        return (f"SearchEngineParameters({self.search_engine_name!r}, enzyme={self._enzyme!r}, "
                f"min_termini={self.min_number_termini}, "
                f"tol={self.precursor_mass_tolerance_da:.4f} Da / {self.precursor_mass_tolerance_ppm:.2f} ppm)")
