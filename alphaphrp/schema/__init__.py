"""Column schema registry for PHRP synopsis and first-hits files.

One ToolSchema per search tool: canonical column names, legacy aliases,
file naming conventions and the row-parser / parameter-extractor hooks.
"""

from .columns import (
    PeptideHitResultType,
    ColumnId,
    ToolSchema,
    ColumnMapping,
    map_header_line,
    default_column_mapping,
    is_header_line,
    lookup_column_value,
    lookup_column_int,
    lookup_column_float,
    try_get_column_value,
    MSGFDB_SPEC_PROB,
    MSGFPLUS_SPEC_EVALUE,
)

from .tools import (
    TOOL_SCHEMAS,
    schema_for,
)

from .filenames import (
    synopsis_file_name,
    first_hits_file_name,
    mod_summary_file_name,
    protein_mods_file_name,
    result_to_seq_map_file_name,
    seq_info_file_name,
    seq_to_protein_map_file_name,
    pep_to_prot_map_file_name,
    tool_version_info_file_names,
    side_file_candidates,
    find_side_file,
    auto_determine_dataset_name,
    auto_determine_result_type,
    result_type_from_header,
    read_header_line,
)

__all__ = [
    # Schema
    'PeptideHitResultType',
    'ColumnId',
    'ToolSchema',
    'ColumnMapping',
    'TOOL_SCHEMAS',
    'schema_for',

    # Header mapping and lookups
    'map_header_line',
    'default_column_mapping',
    'is_header_line',
    'lookup_column_value',
    'lookup_column_int',
    'lookup_column_float',
    'try_get_column_value',
    'MSGFDB_SPEC_PROB',
    'MSGFPLUS_SPEC_EVALUE',

    # File names
    'synopsis_file_name',
    'first_hits_file_name',
    'mod_summary_file_name',
    'protein_mods_file_name',
    'result_to_seq_map_file_name',
    'seq_info_file_name',
    'seq_to_protein_map_file_name',
    'pep_to_prot_map_file_name',
    'tool_version_info_file_names',
    'side_file_candidates',
    'find_side_file',
    'auto_determine_dataset_name',
    'auto_determine_result_type',
    'result_type_from_header',
    'read_header_line',
]
