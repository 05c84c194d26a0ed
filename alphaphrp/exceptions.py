"""Exceptions raised by the synopsis-file readers.

Malformed data lines never raise; they come back as a ParseOutcome. These
exceptions cover misuse of the reader and side files that cannot be read
at all. Missing files raise the builtin FileNotFoundError.
"""


class PHRPReaderError(Exception):
    """Base class for reader errors."""


class ReaderNotReadyError(PHRPReaderError):
    """parse_line was called on a reader that has no input file loaded."""


class UnknownResultTypeError(PHRPReaderError, ValueError):
    """The search tool could not be determined or is not supported."""


class ModSummaryFormatError(PHRPReaderError, ValueError):
    """A ModSummary file row has a modification mass that is not a number."""
