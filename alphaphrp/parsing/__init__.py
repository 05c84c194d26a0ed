"""Row parsing: shared helpers and one strategy function per search tool."""

from .rows import (
    ParseOutcome,
    ParseResult,
    RowContext,
    add_score,
    split_proteins,
    format_scientific,
)

from .strategies import (
    parse_sequest_row,
    parse_xtandem_row,
    parse_inspect_row,
    parse_msgfplus_row,
    parse_msalign_row,
    parse_moda_row,
    parse_modplus_row,
    parse_mspathfinder_row,
    parse_toppic_row,
    parse_maxquant_row,
    parse_msfragger_row,
    parse_diann_row,
    compute_msgf_pvalue,
    is_msgfplus_file,
)

__all__ = [
    # Shared
    'ParseOutcome',
    'ParseResult',
    'RowContext',
    'add_score',
    'split_proteins',
    'format_scientific',

    # Strategies
    'parse_sequest_row',
    'parse_xtandem_row',
    'parse_inspect_row',
    'parse_msgfplus_row',
    'parse_msalign_row',
    'parse_moda_row',
    'parse_modplus_row',
    'parse_mspathfinder_row',
    'parse_toppic_row',
    'parse_maxquant_row',
    'parse_msfragger_row',
    'parse_diann_row',
    'compute_msgf_pvalue',
    'is_msgfplus_file',
]
