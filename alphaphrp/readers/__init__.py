"""Readers for the side files PHRP writes next to a synopsis file."""

from .mod_summary import (
    ModSummaryReader,
    read_mod_summary_file,
)

from .seq_map import (
    SeqMaps,
    SeqMapReader,
    load_result_to_seq_map,
    load_seq_info,
    load_seq_to_protein_map,
    load_pep_to_prot_map,
    build_result_to_proteins,
)

from .tool_version import (
    read_tool_version_info,
    find_tool_version_file,
    parse_search_date,
)

__all__ = [
    # Modifications
    'ModSummaryReader',
    'read_mod_summary_file',

    # Sequence maps
    'SeqMaps',
    'SeqMapReader',
    'load_result_to_seq_map',
    'load_seq_info',
    'load_seq_to_protein_map',
    'load_pep_to_prot_map',
    'build_result_to_proteins',

    # Tool version
    'read_tool_version_info',
    'find_tool_version_file',
    'parse_search_date',
]
