"""Column schemas and typed column lookups for tab-delimited synopsis files.

A ToolSchema lists the canonical column names of one search tool's
synopsis file, in file order. Each name gets a ColumnId whose index is its
position in that order. Legacy names (e.g. ``MSGFDB_SpecProb``) resolve to
the ColumnId of the modern column they replaced.

Header lines are matched by name, never by position:

>>> mapping = map_header_line(schema, "ResultID\\tScan\\tCharge".split("\\t"))
>>> lookup_column_int(["1", "2044", "2"], "Scan", mapping)
2044
"""

import logging
import warnings
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from ..data.case_insensitive import CaseInsensitiveDict

logger = logging.getLogger(__name__)


# =============================================================================
# Result Types
# =============================================================================

class PeptideHitResultType(IntEnum):
    """Search tools whose synopsis files can be read."""
    UNKNOWN = 0
    SEQUEST = 1
    XTANDEM = 2
    INSPECT = 3
    MSGFPLUS = 4
    MSALIGN = 5
    MODA = 6
    MODPLUS = 7
    MSPATHFINDER = 8
    TOPPIC = 9
    MAXQUANT = 10
    MSFRAGGER = 11
    DIANN = 12

    @classmethod
    def from_name(cls, name: str) -> 'PeptideHitResultType':
        """Resolve a tool name, ignoring case, dashes and '!' (``X!Tandem``).

        ``MSGFDB`` is accepted as an obsolete name for MS-GF+.

        >>> PeptideHitResultType.from_name("ms-gf+")
        <PeptideHitResultType.MSGFPLUS: 4>
        >>> PeptideHitResultType.from_name("nothing")
        <PeptideHitResultType.UNKNOWN: 0>
        """
        if not name:
            return cls.UNKNOWN

        key = name.strip().upper().replace('-', '').replace('!', '').replace('+', 'PLUS')

        if key == "MSGFDB":
            warnings.warn(
                "Result type 'MSGFDB' is obsolete; use MSGFPLUS",
                DeprecationWarning,
                stacklevel=2,
            )
            return cls.MSGFPLUS

        try:
            return cls[key]
        except KeyError:
            return cls.UNKNOWN


# Columns renamed when MSGFDB became MS-GF+ (SpecProb -> SpecEValue, etc.)
MSGFDB_SPEC_PROB = "MSGFDB_SpecProb"
MSGFDB_RANK_SPEC_PROB = "Rank_MSGFDB_SpecProb"
MSGFDB_PVALUE = "PValue"
MSGFDB_FDR = "FDR"
MSGFDB_PEP_FDR = "PepFDR"

MSGFPLUS_SPEC_EVALUE = "MSGFDB_SpecEValue"
MSGFPLUS_RANK_SPEC_EVALUE = "Rank_MSGFDB_SpecEValue"


class ColumnId(NamedTuple):
    """Identity of one canonical column: its position and canonical name."""
    index: int
    name: str


# =============================================================================
# Tool Schema
# =============================================================================

@dataclass(frozen=True)
class ToolSchema:
    """Column layout, file naming and parsing hooks of one search tool.

    Parameters
    ----------
    result_type : PeptideHitResultType
    search_engine_name : str
        Display name, e.g. ``MS-GF+``
    columns : Tuple[str, ...]
        Canonical column names in synopsis-file order
    aliases : Dict[str, str]
        Legacy column name -> canonical column name
    optional_columns : Tuple[str, ...]
        Columns written only by some tool versions or variants
        (e.g. MSAlign-histone ``Species_ID``); indexed after ``columns``
    file_infix : str
        Tool tag in side-file names, e.g. ``msgfplus`` in
        ``Dataset_msgfplus_syn_ModSummary.txt``
    syn_suffix, fht_suffix : str
        Synopsis / first-hits suffix appended to the dataset name; an empty
        fht_suffix means the tool has no first-hits file
    side_file_stem : str
        Text between the dataset name and ``_ModSummary.txt``,
        ``_SeqInfo.txt`` and the other side files, e.g. ``_msgfplus_syn``
    tool_version_files : Tuple[str, ...]
        Candidate Tool_Version_Info file names
    row_parser : callable
        ``row_parser(ctx)`` fills the tool-specific PSM fields of one row
    param_extractor : callable
        ``param_extractor(path, search_params, message_log) -> bool``

    Notes
    -----
    The name -> ColumnId map is built once, here, when the schema is
    defined; nothing is cached lazily afterwards.
    """

    result_type: PeptideHitResultType
    search_engine_name: str
    columns: Tuple[str, ...]
    aliases: Dict[str, str] = field(default_factory=dict)
    optional_columns: Tuple[str, ...] = ()

    file_infix: str = ""
    syn_suffix: str = ""
    fht_suffix: str = ""
    side_file_stem: str = ""
    tool_version_files: Tuple[str, ...] = ()

    scan_column: str = "Scan"
    result_id_column: str = "ResultID"
    peptide_column: str = "Peptide"
    charge_column: str = "Charge"

    row_parser: Optional[Callable] = field(default=None, repr=False, compare=False)
    param_extractor: Optional[Callable] = field(default=None, repr=False, compare=False)

    _column_ids: CaseInsensitiveDict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        column_ids = CaseInsensitiveDict()

        for index, name in enumerate(tuple(self.columns) + tuple(self.optional_columns)):
            if name in column_ids:
                raise ValueError(f"Duplicate column '{name}' in {self.search_engine_name} schema")
            column_ids[name] = ColumnId(index, name)

        for legacy_name, canonical_name in self.aliases.items():
            if canonical_name not in column_ids:
                raise ValueError(
                    f"Alias '{legacy_name}' refers to unknown column '{canonical_name}' "
                    f"in {self.search_engine_name} schema"
                )
            if legacy_name not in column_ids:
                column_ids[legacy_name] = column_ids[canonical_name]

        object.__setattr__(self, '_column_ids', column_ids)

    def __hash__(self):
        return hash(self.result_type)

    def column_ids(self) -> CaseInsensitiveDict:
        """Ordered name -> ColumnId map, legacy aliases included."""
        return self._column_ids.copy()

    def column_id(self, name: str) -> Optional[ColumnId]:
        """ColumnId for a canonical or legacy name; None if unknown."""
        if not name:
            return None
        return self._column_ids.get(name.strip())

    def canonical_name(self, name: str) -> str:
        column_id = self.column_id(name)
        return column_id.name if column_id else name

    def header_names(self, include_legacy: bool = False) -> List[str]:
        """Canonical column names in file order (plus legacy names on request)."""
        names = list(self.columns) + list(self.optional_columns)
        if include_legacy:
            names.extend(name for name in self.aliases if name not in names)
        return names

    @property
    def has_first_hits_file(self) -> bool:
        return bool(self.fht_suffix)


# =============================================================================
# Header Mapping
# =============================================================================

class ColumnMapping(dict):
    """ColumnId -> 0-based index in the data lines of one file.

    ``observed`` keeps the header text that was actually seen for each
    column, so a parser can tell a legacy file (``MSGFDB_SpecProb``) from a
    modern one (``MSGFDB_SpecEValue``) even though both share a ColumnId.
    """

    def __init__(self, schema: ToolSchema):
        super().__init__()
        self.schema = schema
        self.observed: Dict[ColumnId, str] = {}

    def index_of(self, name: str) -> int:
        """Index of the named column, or -1 when the file lacks it."""
        column_id = self.schema.column_id(name)
        if column_id is None:
            return -1
        return self.get(column_id, -1)

    def has_column(self, name: str) -> bool:
        return self.index_of(name) >= 0

    def observed_name(self, name: str) -> str:
        """Header text seen for the column of ``name``; empty if absent."""
        column_id = self.schema.column_id(name)
        if column_id is None:
            return ""
        return self.observed.get(column_id, "")


def map_header_line(schema: ToolSchema, observed_names: Iterable[str]) -> ColumnMapping:
    """Map the header tokens of a synopsis file onto the schema's columns.

    Parameters
    ----------
    schema : ToolSchema
    observed_names : Iterable[str]
        Header line split on tabs

    Returns
    -------
    ColumnMapping
        ColumnId -> index of the first header token naming that column

    Notes
    -----
    Names are compared case-insensitively. When two tokens name the same
    column (including a legacy alias of a modern name), the first wins and
    the later one is logged and ignored. Unknown tokens are skipped.
    """
    mapping = ColumnMapping(schema)

    for index, name in enumerate(observed_names):
        name = name.strip()
        column_id = schema.column_id(name)

        if column_id is None:
            if name:
                logger.debug(f"Ignoring unrecognized {schema.search_engine_name} column '{name}'")
            continue

        if column_id in mapping:
            logger.warning(
                f"Duplicate column '{name}' at index {index} in {schema.search_engine_name} header; "
                f"keeping '{mapping.observed[column_id]}' at index {mapping[column_id]}"
            )
            continue

        mapping[column_id] = index
        mapping.observed[column_id] = name

    return mapping


def default_column_mapping(schema: ToolSchema) -> ColumnMapping:
    """Positional mapping used when a file has no header line."""
    mapping = ColumnMapping(schema)
    for name in schema.header_names():
        column_id = schema.column_id(name)
        mapping[column_id] = column_id.index
        mapping.observed[column_id] = name
    return mapping


def is_header_line(first_column: str) -> bool:
    """A line is a header when its first token is not a number."""
    text = first_column.strip()
    if not text:
        return False
    try:
        float(text)
    except ValueError:
        return True
    return False


# =============================================================================
# Typed Column Lookups
# =============================================================================

def lookup_column_value(
    data_columns: List[str],
    column_name: str,
    mapping: ColumnMapping,
    value_if_missing: Optional[str] = "",
) -> Optional[str]:
    """Text of the named column.

    Returns value_if_missing when the file has no such column or the row is
    too short; whitespace-only text is returned as an empty string.
    """
    if data_columns is not None:
        index = mapping.index_of(column_name)
        if 0 <= index < len(data_columns):
            value = data_columns[index]
            return value if value.strip() else ""

    return value_if_missing


def try_get_column_value(data_columns: List[str], column_name: str, mapping: ColumnMapping) -> Tuple[bool, str]:
    """Return (True, text) if the column exists in this row, else (False, "")."""
    value = lookup_column_value(data_columns, column_name, mapping, None)
    if value is None:
        return False, ""
    return True, value


def lookup_column_int(data_columns: List[str], column_name: str, mapping: ColumnMapping, value_if_missing: int = 0) -> int:
    """Integer in the named column.

    A missing column yields value_if_missing; a present column that does
    not hold an integer yields 0.
    """
    value = lookup_column_value(data_columns, column_name, mapping, None)
    if value is None:
        return value_if_missing
    try:
        return int(value.strip())
    except ValueError:
        return 0


def lookup_column_float(
    data_columns: List[str],
    column_name: str,
    mapping: ColumnMapping,
    value_if_missing: float = 0.0,
) -> float:
    """Float in the named column; same fallback rules as lookup_column_int."""
    value = lookup_column_value(data_columns, column_name, mapping, None)
    if value is None:
        return value_if_missing
    try:
        return float(value.strip())
    except ValueError:
        return 0.0
