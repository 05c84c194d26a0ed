"""AlphaPHRP - Readers for peptide hit result synopsis files.

Reads the tab-delimited synopsis and first-hits files written by the
Peptide Hit Results Processor for SEQUEST, X!Tandem, Inspect, MS-GF+,
MSAlign, MODa, MODPlus, MSPathFinder, TopPIC, MaxQuant, MSFragger and
DIA-NN, normalizing every row into the same PSM record.

Side files next to the synopsis file (ModSummary, ResultToSeqMap, SeqInfo,
SeqToProteinMap, PepToProtMapMTS) supply modification definitions and
protein details; search-engine parameter files supply enzyme and
tolerance settings.

Examples
--------
>>> from alphaphrp import open_reader
>>> reader = open_reader("QC_Shew_20_01_msgfplus_syn.txt")
>>> psms = list(reader.iter_psms())
"""

__version__ = "0.1.0"
__author__ = "AlphaPHRP developers"

from alphaphrp import constants
from alphaphrp import mass_calculator
from alphaphrp import cleavage
from alphaphrp import data
from alphaphrp import messages
from alphaphrp import schema
from alphaphrp import parsing
from alphaphrp import params
from alphaphrp import readers
from alphaphrp import resolver

from alphaphrp.exceptions import (
    PHRPReaderError,
    ReaderNotReadyError,
    UnknownResultTypeError,
    ModSummaryFormatError,
)
from alphaphrp.data import PSM, SearchEngineParameters
from alphaphrp.messages import MessageLog
from alphaphrp.schema import PeptideHitResultType
from alphaphrp.resolver import ModificationResolver
from alphaphrp.reader import (
    ReaderState,
    StartupOptions,
    SynFileReader,
    open_reader,
)

__all__ = [
    "constants",
    "mass_calculator",
    "cleavage",
    "data",
    "messages",
    "schema",
    "parsing",
    "params",
    "readers",
    "resolver",

    # Errors
    "PHRPReaderError",
    "ReaderNotReadyError",
    "UnknownResultTypeError",
    "ModSummaryFormatError",

    # Main API
    "PSM",
    "SearchEngineParameters",
    "MessageLog",
    "PeptideHitResultType",
    "ModificationResolver",
    "ReaderState",
    "StartupOptions",
    "SynFileReader",
    "open_reader",
]
