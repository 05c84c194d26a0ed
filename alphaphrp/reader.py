"""Synopsis / first-hits file reader.

One SynFileReader handles every supported search tool; the tool's
ToolSchema supplies the column names, the row strategy and the parameter
extractor.

Workflow
--------
1. Construct the reader (loads the header, ModSummary and sequence maps)
2. Call iter_psms() or parse_line() for each data line
3. Optionally call load_search_engine_parameters() for enzyme/tolerance info

Examples
--------
>>> reader = open_reader("QC_Shew_20_01_msgfplus_syn.txt")
>>> for psm in reader.iter_psms():
...     print(psm.scan_number, psm.peptide_with_numeric_mods)
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .cleavage import CleavageStateCalculator, EnzymeMatchSpec
from .constants import SCAN_NOT_FOUND_FLAG, UNDEFINED_DATASET_NAME
from .data.modifications import ModificationDefinition
from .data.psm import PSM
from .data.search_params import SearchEngineParameters
from .exceptions import ModSummaryFormatError, ReaderNotReadyError, UnknownResultTypeError
from .mass_calculator import build_aa_mass_table
from .messages import MessageLog
from .parsing.rows import ParseOutcome, ParseResult, RowContext
from .readers.mod_summary import read_mod_summary_file
from .readers.seq_map import SeqMapReader, SeqMaps, build_result_to_proteins
from .readers.tool_version import read_tool_version_info
from .resolver import ModificationResolver
from .schema import filenames
from .schema.columns import (
    ColumnMapping,
    PeptideHitResultType,
    ToolSchema,
    default_column_mapping,
    is_header_line,
    lookup_column_int,
    lookup_column_value,
    map_header_line,
)
from .schema.tools import schema_for

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# =============================================================================
# Configuration
# =============================================================================

class ReaderState(IntEnum):
    """Initialization progress; transitions only move forward."""
    UNINITIALIZED = 0
    SCHEMA_LOADED = 1
    MODS_LOADED = 2
    SEQ_INFO_LOADED = 3
    READY = 4


@dataclass
class StartupOptions:
    """Options applied when a reader is constructed.

    Attributes
    ----------
    load_mods_and_seq_info : bool
        Read the ModSummary file and the sequence maps so modifications and
        protein details can be resolved
    max_proteins_per_psm : int
        Limit on proteins kept per PSM (0 = no limit)
    disable_opening_input_files : bool
        Do not open the synopsis file itself; lines are supplied through
        parse_line() and side files are still loaded
    enzyme_match_spec : EnzymeMatchSpec, optional
        Cleavage rule for cleavage state and missed cleavages (default trypsin)
    """

    load_mods_and_seq_info: bool = True
    max_proteins_per_psm: int = 0
    disable_opening_input_files: bool = False
    enzyme_match_spec: Optional[EnzymeMatchSpec] = None


# =============================================================================
# Reader
# =============================================================================

class SynFileReader:
    """Reader for PHRP synopsis and first-hits files of any supported tool.

    Parameters
    ----------
    input_file_path : str or Path, optional
        Synopsis or first-hits file. Without it only the file-name helpers
        and search-parameter loading (given a result type) are available.
    result_type : PeptideHitResultType or str, optional
        Detected from the file name, then the header line, when omitted
    options : StartupOptions, optional
    message_log : MessageLog, optional
        Receives warnings and errors (default: a new log)

    Raises
    ------
    FileNotFoundError
        If input_file_path does not exist (unless opening input files is
        disabled)
    UnknownResultTypeError
        If the search tool cannot be determined
    """

    def __init__(
        self,
        input_file_path: Optional[PathLike] = None,
        result_type: Union[PeptideHitResultType, str, None] = None,
        options: Optional[StartupOptions] = None,
        message_log: Optional[MessageLog] = None,
    ):
        self.options = options or StartupOptions()
        self.message_log = message_log or MessageLog(__name__)
        self.state = ReaderState.UNINITIALIZED

        self.cleavage_calculator = CleavageStateCalculator(self.options.enzyme_match_spec)

        self.input_file_path: Optional[Path] = Path(input_file_path) if input_file_path else None
        self.schema: Optional[ToolSchema] = None
        self.dataset_name = UNDEFINED_DATASET_NAME
        self.mapping: Optional[ColumnMapping] = None

        self.modification_defs: Optional[List[ModificationDefinition]] = None
        self.seq_maps = SeqMaps()
        self.result_to_proteins = {}
        self.search_engine_parameters: Optional[SearchEngineParameters] = None
        self.charge_carrier_mass = 0.0

        self.resolver = ModificationResolver(None, self.seq_maps, self.message_log, self.options.max_proteins_per_psm)

        if self.input_file_path is None:
            if result_type is not None:
                self._load_schema(result_type)
            return

        self._initialize(result_type)

    # =========================================================================
    # Initialization
    # =========================================================================

    def _advance(self, state: ReaderState):
        if state > self.state:
            self.state = state

    def _load_schema(self, result_type: Union[PeptideHitResultType, str]):
        self.schema = schema_for(result_type)
        self.mapping = default_column_mapping(self.schema)
        self._advance(ReaderState.SCHEMA_LOADED)

    def _initialize(self, result_type):
        input_file_path = self.input_file_path
        opening_disabled = self.options.disable_opening_input_files

        if not opening_disabled and not input_file_path.is_file():
            raise FileNotFoundError(f"Input file not found: {input_file_path}")

        if result_type is None:
            result_type = filenames.auto_determine_result_type(input_file_path, read_header=not opening_disabled)
            if result_type == PeptideHitResultType.UNKNOWN:
                raise UnknownResultTypeError(f"Unable to determine the search tool of {input_file_path.name}")

        self._load_schema(result_type)
        self.dataset_name = filenames.dataset_name_or_default(input_file_path, self.schema.result_type)

        if not opening_disabled:
            header = filenames.read_header_line(input_file_path)
            if header and is_header_line(header[0]):
                self.set_header_line(header)

        logger.info(f"Reading {self.schema.search_engine_name} results for dataset {self.dataset_name}")

        if self.options.load_mods_and_seq_info:
            self._load_mod_summary()
            self._load_seq_maps()

        self.resolver = ModificationResolver(
            self.modification_defs, self.seq_maps, self.message_log, self.options.max_proteins_per_psm
        )
        self._advance(ReaderState.READY)

    def _load_mod_summary(self):
        mod_summary_path = filenames.find_side_file(
            self.input_directory,
            self.input_file_path.name,
            filenames.mod_summary_file_name(self.schema, self.dataset_name),
        )

        if not mod_summary_path.is_file():
            self.message_log.warning(f"ModSummary file not found: {mod_summary_path}")
            return

        try:
            self.modification_defs = read_mod_summary_file(mod_summary_path)
        except ModSummaryFormatError as err:
            self.message_log.error(f"Error reading ModSummary file, continuing without modification definitions: {err}")
            self.modification_defs = None
            return

        self._advance(ReaderState.MODS_LOADED)

    def _load_seq_maps(self):
        seq_map_reader = SeqMapReader(
            self.input_directory,
            self.dataset_name,
            self.schema.result_type,
            self.message_log,
            self.options.max_proteins_per_psm,
            self.input_file_path.name,
        )

        self.seq_maps = seq_map_reader.load()
        if not self.seq_maps.loaded:
            self.message_log.warning(
                f"ResultToSeqMap file not found; modifications will be inferred from the peptide: "
                f"{seq_map_reader.result_to_seq_map_path.name}"
            )
            return

        if self.schema.result_type == PeptideHitResultType.XTANDEM:
            # X!Tandem synopsis files have no protein column
            self.result_to_proteins = build_result_to_proteins(self.seq_maps, self.options.max_proteins_per_psm)

        self._advance(ReaderState.SEQ_INFO_LOADED)

    def set_header_line(self, column_names: List[str]):
        """Map columns by name from a header line (already split on tabs)."""
        if self.schema is None:
            raise ReaderNotReadyError("No result type is defined; cannot map header columns")
        self.mapping = map_header_line(self.schema, column_names)

    @property
    def input_directory(self) -> Path:
        if self.input_file_path is None:
            return Path(".")
        return self.input_file_path.parent

    @property
    def result_type(self) -> PeptideHitResultType:
        return self.schema.result_type if self.schema else PeptideHitResultType.UNKNOWN

    @property
    def is_ready(self) -> bool:
        return self.state == ReaderState.READY

    # =========================================================================
    # Parsing
    # =========================================================================

    def parse_line(self, line: str, line_number: int = 0, fast_mode: bool = False) -> ParseResult:
        """Parse one data line into a PSM.

        Parameters
        ----------
        line : str
            Tab-delimited data line
        line_number : int
            Used in messages only
        fast_mode : bool
            Skip clean sequence, cleavage and modification work; call
            finalize() later for PSMs of interest

        Returns
        -------
        ParseResult
            INVALID_LINE for blank lines and lines without a numeric scan
            (the PSM then carries scan number SCAN_NOT_FOUND_FLAG);
            ERROR when the tool strategy raised

        Raises
        ------
        ReaderNotReadyError
            If the reader was created without an input file
        """
        if not self.is_ready:
            raise ReaderNotReadyError("parse_line requires a reader created with an input file")

        line = line.rstrip('\r\n')
        if not line.strip():
            return ParseResult(ParseOutcome.INVALID_LINE, message=f"Line {line_number} is empty")

        data_columns = line.split('\t')
        schema = self.schema

        psm = PSM()
        psm.data_line_text = line

        scan_text = lookup_column_value(data_columns, schema.scan_column, self.mapping, None)
        try:
            psm.scan_number = int(scan_text.strip()) if scan_text is not None else SCAN_NOT_FOUND_FLAG
        except ValueError:
            psm.scan_number = SCAN_NOT_FOUND_FLAG

        if psm.scan_number == SCAN_NOT_FOUND_FLAG:
            return ParseResult(
                ParseOutcome.INVALID_LINE,
                psm,
                f"{schema.scan_column} column not found or not numeric on line {line_number}",
            )

        psm.result_id = lookup_column_int(data_columns, schema.result_id_column, self.mapping, 0)

        peptide = lookup_column_value(data_columns, schema.peptide_column, self.mapping, "")
        if fast_mode:
            psm.set_peptide(peptide, update_clean_sequence=False)
        else:
            psm.set_peptide(peptide, cleavage_calculator=self.cleavage_calculator)

        psm.charge = lookup_column_int(data_columns, schema.charge_column, self.mapping, 0)

        ctx = RowContext(
            data_columns,
            self.mapping,
            psm,
            fast_mode=fast_mode,
            charge_carrier_mass=self.charge_carrier_mass,
            result_to_proteins=self.result_to_proteins,
            cleavage_calculator=self.cleavage_calculator,
        )

        try:
            schema.row_parser(ctx)
            if not fast_mode:
                self._resolve(psm)
        except Exception as e:
            message = f"Error parsing line {line_number} of the {schema.search_engine_name} file: {e}"
            self.message_log.error(message)
            return ParseResult(ParseOutcome.ERROR, psm, message)

        return ParseResult(ParseOutcome.OK, psm)

    def _resolve(self, psm: PSM):
        if self.resolver.update_psm_using_seq_info(psm):
            return
        if self.options.load_mods_and_seq_info and not psm.peptide_with_numeric_mods:
            self.resolver.markup_peptide_with_mods(psm)

    def finalize(self, psm: PSM) -> PSM:
        """Apply the work skipped by fast mode; calling it twice is harmless."""
        psm.update_clean_sequence()
        psm.update_cleavage_info(self.cleavage_calculator)
        self._resolve(psm)
        return psm

    def iter_psms(self, fast_mode: bool = False) -> Iterator[PSM]:
        """Yield the PSM of every valid data line of the input file.

        The header line (first token not numeric) is skipped; invalid lines
        are counted and skipped.
        """
        if not self.is_ready or self.options.disable_opening_input_files:
            raise ReaderNotReadyError("iter_psms requires a reader that opened its input file")

        psm_count = 0
        skipped_count = 0
        header_checked = False

        with open(self.input_file_path, encoding='utf-8', errors='replace') as f:
            for line_number, line in enumerate(f, start=1):
                line = line.rstrip('\r\n')
                if not line.strip():
                    continue

                if not header_checked:
                    header_checked = True
                    columns = line.split('\t')
                    if is_header_line(columns[0]):
                        self.set_header_line(columns)
                        continue

                result = self.parse_line(line, line_number, fast_mode)
                if result.ok:
                    psm_count += 1
                    yield result.psm
                else:
                    skipped_count += 1

        logger.info(f"✓ Read {psm_count:,} PSMs from {self.input_file_path.name} ({skipped_count:,} lines skipped)")

    # =========================================================================
    # Search Parameters
    # =========================================================================

    def load_search_engine_parameters(self, param_file_path: PathLike) -> SearchEngineParameters:
        """Read the search tool's parameter file and Tool_Version_Info file.

        A relative path that does not exist is looked up next to the input
        file. A charge carrier mass found in the parameters is used for the
        precursor masses of lines parsed afterwards.
        Custom amino acid masses are used for peptide masses computed from
        the sequence.

        Raises
        ------
        ReaderNotReadyError
            If no result type is defined
        FileNotFoundError
            If the parameter file does not exist
        """
        if self.schema is None:
            raise ReaderNotReadyError("No result type is defined; cannot read search engine parameters")

        param_file_path = Path(param_file_path)
        if not param_file_path.is_absolute() and not param_file_path.exists():
            param_file_path = self.input_directory / param_file_path

        search_params = SearchEngineParameters(self.schema.search_engine_name)

        if not self.schema.param_extractor(param_file_path, search_params, self.message_log):
            self.message_log.warning(
                f"Search engine parameters not fully read from {param_file_path.name}"
            )

        read_tool_version_info(
            param_file_path.parent, self.schema.tool_version_files, search_params, self.message_log
        )

        if abs(search_params.charge_carrier_mass) > 0:
            self.charge_carrier_mass = search_params.charge_carrier_mass

        if search_params.custom_amino_acids:
            self.resolver.aa_masses = build_aa_mass_table(search_params.custom_amino_acids)
            self.message_log.status(
                f"Using custom amino acid masses for {', '.join(sorted(search_params.custom_amino_acids))}"
            )

        self.search_engine_parameters = search_params
        logger.info(f"✓ Loaded {self.schema.search_engine_name} parameters: {search_params}")
        return search_params

    # =========================================================================
    # File Names
    # =========================================================================

    def _file_name(self, name_function, dataset_name: Optional[str]) -> str:
        if self.schema is None:
            raise ReaderNotReadyError("No result type is defined; file names are unknown")
        return name_function(self.schema, dataset_name or self.dataset_name)

    def synopsis_file_name(self, dataset_name: Optional[str] = None) -> str:
        return self._file_name(filenames.synopsis_file_name, dataset_name)

    def first_hits_file_name(self, dataset_name: Optional[str] = None) -> str:
        return self._file_name(filenames.first_hits_file_name, dataset_name)

    def mod_summary_file_name(self, dataset_name: Optional[str] = None) -> str:
        return self._file_name(filenames.mod_summary_file_name, dataset_name)

    def protein_mods_file_name(self, dataset_name: Optional[str] = None) -> str:
        return self._file_name(filenames.protein_mods_file_name, dataset_name)

    def result_to_seq_map_file_name(self, dataset_name: Optional[str] = None) -> str:
        return self._file_name(filenames.result_to_seq_map_file_name, dataset_name)

    def seq_info_file_name(self, dataset_name: Optional[str] = None) -> str:
        return self._file_name(filenames.seq_info_file_name, dataset_name)

    def seq_to_protein_map_file_name(self, dataset_name: Optional[str] = None) -> str:
        return self._file_name(filenames.seq_to_protein_map_file_name, dataset_name)

    def pep_to_prot_map_file_name(self, dataset_name: Optional[str] = None) -> str:
        return self._file_name(filenames.pep_to_prot_map_file_name, dataset_name)

    def tool_version_info_file_names(self) -> List[str]:
        if self.schema is None:
            return []
        return filenames.tool_version_info_file_names(self.schema)

    def __repr__(self):
        name = self.input_file_path.name if self.input_file_path else None
        return f"SynFileReader({name!r}, {self.result_type.name}, state={self.state.name})"


def open_reader(
    input_file_path: PathLike,
    options: Optional[StartupOptions] = None,
    message_log: Optional[MessageLog] = None,
) -> SynFileReader:
    """Reader for a synopsis or first-hits file, detecting the search tool.

    The tool is identified by the file name suffix, then by the header line.

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    UnknownResultTypeError
        If the tool cannot be determined
    """
    return SynFileReader(input_file_path, None, options, message_log)
