"""Search-engine parameter extraction.

One extractor per tool normalizes enzyme, termini, missed cleavages and
precursor tolerance into a SearchEngineParameters object.
"""

from .common import (
    parse_key_value_setting,
    read_key_value_param_file,
    store_tolerance,
    store_tolerance_bounds,
    combine_tolerance_bounds,
)

from .extractors import (
    extract_msgfplus_params,
    extract_mspathfinder_params,
    extract_toppic_params,
    extract_inspect_params,
    extract_msalign_params,
    extract_moda_params,
    extract_msfragger_params,
    extract_diann_params,
    extract_maxquant_params,
    determine_msgf_precursor_tolerance,
    get_precursor_search_tolerances,
    msfragger_parameter_prefix,
)

from .msgf_mods import extract_msgf_mods

from .sequest import extract_sequest_params

from .xml_params import (
    extract_modplus_params,
    extract_xtandem_params,
)

__all__ = [
    # Shared
    'parse_key_value_setting',
    'read_key_value_param_file',
    'store_tolerance',
    'store_tolerance_bounds',
    'combine_tolerance_bounds',

    # Key=value tools
    'extract_msgfplus_params',
    'extract_mspathfinder_params',
    'extract_toppic_params',
    'extract_inspect_params',
    'extract_msalign_params',
    'extract_moda_params',
    'extract_msfragger_params',
    'extract_diann_params',
    'extract_maxquant_params',
    'determine_msgf_precursor_tolerance',
    'get_precursor_search_tolerances',
    'msfragger_parameter_prefix',
    'extract_msgf_mods',

    # SEQUEST and XML tools
    'extract_sequest_params',
    'extract_modplus_params',
    'extract_xtandem_params',
]
