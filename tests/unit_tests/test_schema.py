"""Tests for the column schema registry and PHRP file naming.

Tests cover:
1. Result type names
2. Column IDs and legacy aliases
3. Header mapping (case, duplicates, unknown names)
4. Typed column lookups
5. File names, dataset names and result type detection
6. Side-file candidates for first-hits and legacy MSGFDB files
"""

import pytest

from alphaphrp.exceptions import UnknownResultTypeError
from alphaphrp.schema import (
    TOOL_SCHEMAS,
    PeptideHitResultType,
    auto_determine_dataset_name,
    auto_determine_result_type,
    default_column_mapping,
    find_side_file,
    first_hits_file_name,
    is_header_line,
    lookup_column_float,
    lookup_column_int,
    lookup_column_value,
    map_header_line,
    mod_summary_file_name,
    pep_to_prot_map_file_name,
    result_type_from_header,
    schema_for,
    seq_info_file_name,
    side_file_candidates,
    synopsis_file_name,
    tool_version_info_file_names,
    try_get_column_value,
)


class TestResultTypes:
    """Test tool name resolution."""

    @pytest.mark.parametrize("name,expected", [
        ("MSGFPlus", PeptideHitResultType.MSGFPLUS),
        ("ms-gf+", PeptideHitResultType.MSGFPLUS),
        ("X!Tandem", PeptideHitResultType.XTANDEM),
        ("sequest", PeptideHitResultType.SEQUEST),
        ("DiaNN", PeptideHitResultType.DIANN),
        ("", PeptideHitResultType.UNKNOWN),
        ("Mascot", PeptideHitResultType.UNKNOWN),
    ])
    def test_from_name(self, name, expected):
        assert PeptideHitResultType.from_name(name) == expected

    def test_msgfdb_name_is_deprecated(self):
        with pytest.warns(DeprecationWarning):
            assert PeptideHitResultType.from_name("MSGFDB") == PeptideHitResultType.MSGFPLUS

    def test_every_tool_has_a_schema(self):
        for result_type in PeptideHitResultType:
            if result_type == PeptideHitResultType.UNKNOWN:
                continue
            assert TOOL_SCHEMAS[result_type].result_type == result_type

    def test_unknown_tool_raises(self):
        with pytest.raises(UnknownResultTypeError):
            schema_for(PeptideHitResultType.UNKNOWN)
        with pytest.raises(UnknownResultTypeError):
            schema_for("Mascot")


class TestColumnIds:
    """Test canonical column IDs and aliases."""

    def test_indices_follow_column_order(self):
        schema = schema_for(PeptideHitResultType.MSGFPLUS)
        for index, name in enumerate(schema.columns):
            assert schema.column_id(name).index == index

    def test_lookup_is_case_insensitive(self):
        schema = schema_for(PeptideHitResultType.MSGFPLUS)
        assert schema.column_id("resultid") == schema.column_id("ResultID")
        assert schema.column_id("  Scan ") == schema.column_id("Scan")

    def test_legacy_aliases_share_column_id(self):
        schema = schema_for(PeptideHitResultType.MSGFPLUS)
        modern = schema.column_id("MSGFDB_SpecEValue")

        assert schema.column_id("MSGFDB_SpecProb") == modern
        assert schema.column_id("SpecEValue") == modern
        assert schema.column_id("PValue") == schema.column_id("EValue")
        assert schema.column_id("FDR") == schema.column_id("QValue")

    def test_optional_columns_indexed_after_columns(self):
        schema = schema_for(PeptideHitResultType.MSALIGN)
        species = schema.column_id("Species_ID")

        assert species is not None
        assert species.index == len(schema.columns)

    def test_unknown_column(self):
        schema = schema_for(PeptideHitResultType.SEQUEST)
        assert schema.column_id("NotAColumn") is None
        assert schema.column_id("") is None


class TestHeaderMapping:
    """Test matching header lines onto schemas."""

    def test_maps_by_name_not_position(self):
        schema = schema_for(PeptideHitResultType.MSGFPLUS)
        mapping = map_header_line(schema, ["Scan", "ResultID", "Charge"])

        assert mapping.index_of("Scan") == 0
        assert mapping.index_of("ResultID") == 1
        assert mapping.index_of("Peptide") == -1

    def test_first_duplicate_wins(self):
        schema = schema_for(PeptideHitResultType.MSGFPLUS)
        mapping = map_header_line(schema, ["ResultID", "MSGFDB_SpecEValue", "MSGFDB_SpecProb"])

        assert mapping.index_of("MSGFDB_SpecEValue") == 1
        assert mapping.observed_name("MSGFDB_SpecProb") == "MSGFDB_SpecEValue"

    def test_unknown_names_ignored(self):
        schema = schema_for(PeptideHitResultType.MSGFPLUS)
        mapping = map_header_line(schema, ["ResultID", "Mystery", "Scan"])

        assert len(mapping) == 2
        assert mapping.index_of("Scan") == 2

    def test_default_mapping_is_positional(self):
        schema = schema_for(PeptideHitResultType.MODA)
        mapping = default_column_mapping(schema)

        assert mapping.index_of("ResultID") == 0
        assert mapping.index_of("QValue") == len(schema.columns) - 1

    @pytest.mark.parametrize("first_column,expected", [
        ("ResultID", True),
        ("HitNum", True),
        ("1", False),
        ("12.5", False),
        ("", False),
    ])
    def test_is_header_line(self, first_column, expected):
        assert is_header_line(first_column) == expected


class TestColumnLookups:
    """Test typed column lookups."""

    @pytest.fixture
    def mapping(self):
        schema = schema_for(PeptideHitResultType.MSGFPLUS)
        return map_header_line(schema, ["ResultID", "Scan", "Charge", "PrecursorMZ", "Peptide"])

    def test_text(self, mapping):
        columns = ["7", "2044", "2", "621.83", "K.PEPTIDE.A"]
        assert lookup_column_value(columns, "Peptide", mapping) == "K.PEPTIDE.A"

    def test_missing_column_returns_default(self, mapping):
        columns = ["7", "2044", "2", "621.83", "K.PEPTIDE.A"]
        assert lookup_column_value(columns, "Protein", mapping, "none") == "none"
        assert lookup_column_int(columns, "NTT", mapping, -1) == -1

    def test_short_row_returns_default(self, mapping):
        assert lookup_column_value(["7", "2044"], "Peptide", mapping, "n/a") == "n/a"

    def test_blank_value_is_empty_string(self, mapping):
        assert lookup_column_value(["7", "2044", "2", "   ", ""], "PrecursorMZ", mapping, "x") == ""

    def test_non_numeric_int_is_zero(self, mapping):
        assert lookup_column_int(["7", "abc", "2"], "Scan", mapping, -100) == 0

    def test_float(self, mapping):
        assert lookup_column_float(["7", "2044", "2", "621.83"], "PrecursorMZ", mapping) == pytest.approx(621.83)

    def test_try_get(self, mapping):
        assert try_get_column_value(["7", "2044"], "Scan", mapping) == (True, "2044")
        assert try_get_column_value(["7", "2044"], "Charge", mapping) == (False, "")


class TestFileNames:
    """Test PHRP file naming conventions."""

    def test_msgfplus_names(self):
        result_type = PeptideHitResultType.MSGFPLUS
        assert synopsis_file_name(result_type, "Ds") == "Ds_msgfplus_syn.txt"
        assert first_hits_file_name(result_type, "Ds") == "Ds_msgfplus_fht.txt"
        assert mod_summary_file_name(result_type, "Ds") == "Ds_msgfplus_syn_ModSummary.txt"
        assert seq_info_file_name(result_type, "Ds") == "Ds_msgfplus_syn_SeqInfo.txt"
        assert pep_to_prot_map_file_name(result_type, "Ds") == "Ds_msgfplus_PepToProtMapMTS.txt"

    def test_xtandem_names(self):
        result_type = PeptideHitResultType.XTANDEM
        assert synopsis_file_name(result_type, "Ds") == "Ds_xt.txt"
        assert first_hits_file_name(result_type, "Ds") == ""
        assert mod_summary_file_name(result_type, "Ds") == "Ds_xt_ModSummary.txt"

    def test_tool_version_names(self):
        names = tool_version_info_file_names(PeptideHitResultType.MSGFPLUS)
        assert names == ["Tool_Version_Info_MSGFPlus.txt", "Tool_Version_Info_MSGFDB.txt"]
        assert tool_version_info_file_names(PeptideHitResultType.DIANN) == ["Tool_Version_Info_DiaNN.txt"]
        assert tool_version_info_file_names(PeptideHitResultType.UNKNOWN) == []


class TestDatasetName:
    """Test dataset name detection."""

    @pytest.mark.parametrize("file_name,expected", [
        ("QC_Shew_20_01_msgfplus_syn.txt", "QC_Shew_20_01"),
        ("QC_Shew_20_01_msgfplus_fht.txt", "QC_Shew_20_01"),
        ("QC_Shew_20_01_msgfdb_syn.txt", "QC_Shew_20_01"),
        ("QC_Shew_20_01_xt.txt", "QC_Shew_20_01"),
        ("QC_Shew_20_01_syn.txt", "QC_Shew_20_01"),
        ("QC_Shew_20_01_msgfplus_syn_ModSummary.txt", "QC_Shew_20_01"),
        ("QC_Shew_20_01_toppic_syn_SeqInfo.txt", "QC_Shew_20_01"),
        ("results.txt", ""),
    ])
    def test_auto_determine(self, file_name, expected):
        assert auto_determine_dataset_name(file_name) == expected


class TestResultTypeDetection:
    """Test detection of the search tool from file names and headers."""

    @pytest.mark.parametrize("file_name,expected", [
        ("Ds_msgfplus_syn.txt", PeptideHitResultType.MSGFPLUS),
        ("Ds_msgfdb_fht.txt", PeptideHitResultType.MSGFPLUS),
        ("Ds_xt.txt", PeptideHitResultType.XTANDEM),
        ("Ds_inspect_syn.txt", PeptideHitResultType.INSPECT),
        ("Ds_msalign_syn.txt", PeptideHitResultType.MSALIGN),
        ("Ds_moda_syn.txt", PeptideHitResultType.MODA),
        ("Ds_modp_syn.txt", PeptideHitResultType.MODPLUS),
        ("Ds_mspath_syn.txt", PeptideHitResultType.MSPATHFINDER),
        ("Ds_toppic_syn.txt", PeptideHitResultType.TOPPIC),
        ("Ds_maxq_syn.txt", PeptideHitResultType.MAXQUANT),
        ("Ds_msfragger_syn.txt", PeptideHitResultType.MSFRAGGER),
        ("Ds_diann_syn.txt", PeptideHitResultType.DIANN),
        ("Ds_syn.txt", PeptideHitResultType.SEQUEST),
        ("Ds_unknown.txt", PeptideHitResultType.UNKNOWN),
    ])
    def test_from_file_name(self, file_name, expected):
        assert auto_determine_result_type(file_name, read_header=False) == expected

    def test_from_header(self, tmp_path, tsv_writer):
        path = tsv_writer(tmp_path / "renamed.txt", [["ResultID", "Scan", "MSGFScore", "MSGFDB_SpecEValue"]])
        assert auto_determine_result_type(path) == PeptideHitResultType.MSGFPLUS

    def test_missing_file_is_unknown(self, tmp_path):
        assert auto_determine_result_type(tmp_path / "missing.txt") == PeptideHitResultType.UNKNOWN

    @pytest.mark.parametrize("columns,expected", [
        (["MQScore", "TotalPRMScore"], PeptideHitResultType.INSPECT),
        (["DelM_MaxQuant", "Score"], PeptideHitResultType.MAXQUANT),
        (["DelM_MSFragger", "Hyperscore"], PeptideHitResultType.MSFRAGGER),
        (["MSGFScore", "MSGFDB_SpecProb"], PeptideHitResultType.MSGFPLUS),
        (["XCorr", "DelCn"], PeptideHitResultType.SEQUEST),
        (["Foo", "Bar"], PeptideHitResultType.UNKNOWN),
    ])
    def test_result_type_from_header(self, columns, expected):
        assert result_type_from_header(columns) == expected


class TestSideFiles:
    """Test side-file candidates for first-hits and legacy files."""

    def test_synopsis_file_uses_preferred_name(self):
        assert side_file_candidates("Ds_msgfplus_syn.txt", "Ds_msgfplus_syn_SeqInfo.txt") == [
            "Ds_msgfplus_syn_SeqInfo.txt"
        ]

    def test_first_hits_file_tries_fht_first(self):
        assert side_file_candidates("Ds_msgfplus_fht.txt", "Ds_msgfplus_syn_SeqInfo.txt") == [
            "Ds_msgfplus_fht_SeqInfo.txt",
            "Ds_msgfplus_syn_SeqInfo.txt",
        ]

    def test_legacy_msgfdb_file(self):
        assert side_file_candidates("Ds_msgfdb_syn.txt", "Ds_msgfplus_syn_ModSummary.txt") == [
            "Ds_msgfdb_syn_ModSummary.txt",
            "Ds_msgfplus_syn_ModSummary.txt",
        ]

    def test_find_existing_candidate(self, tmp_path):
        (tmp_path / "Ds_msgfplus_syn_SeqInfo.txt").write_text("")

        found = find_side_file(tmp_path, "Ds_msgfplus_fht.txt", "Ds_msgfplus_syn_SeqInfo.txt")
        assert found.name == "Ds_msgfplus_syn_SeqInfo.txt"

    def test_missing_returns_first_candidate(self, tmp_path):
        found = find_side_file(tmp_path, "Ds_msgfplus_fht.txt", "Ds_msgfplus_syn_SeqInfo.txt")
        assert found == tmp_path / "Ds_msgfplus_fht_SeqInfo.txt"
