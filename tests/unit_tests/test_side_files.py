"""Tests for the side-file readers.

Tests cover:
1. ModSummary files (current and legacy headers, bad masses)
2. ResultToSeqMap, SeqInfo, SeqToProteinMap and PepToProtMapMTS loaders
3. SeqMapReader file discovery and warnings
4. ResultID to protein lists for X!Tandem
5. Tool_Version_Info files
"""

from datetime import datetime

import pytest

from alphaphrp.cleavage import CleavageState, PeptideTerminusState
from alphaphrp.data import DEFAULT_SEARCH_DATE, ModificationType, SearchEngineParameters
from alphaphrp.exceptions import ModSummaryFormatError
from alphaphrp.messages import MessageLog
from alphaphrp.readers import (
    ModSummaryReader,
    SeqMapReader,
    SeqMaps,
    build_result_to_proteins,
    load_pep_to_prot_map,
    load_result_to_seq_map,
    load_seq_info,
    load_seq_to_protein_map,
    parse_search_date,
    read_mod_summary_file,
    read_tool_version_info,
)
from alphaphrp.schema import PeptideHitResultType


# =============================================================================
# ModSummary
# =============================================================================

class TestModSummary:
    """Test ModSummary parsing."""

    def test_definitions_in_file_order(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "Ds_msgfplus_syn_ModSummary.txt", side_rows["mod_summary"])
        mod_defs = read_mod_summary_file(path)

        assert [mod.mass_correction_tag for mod in mod_defs] == ["Plus1Oxy", "IodoAcet"]

        oxidation = mod_defs[0]
        assert oxidation.symbol == "*"
        assert oxidation.mass == pytest.approx(15.9949)
        assert oxidation.mass_as_text == "15.9949"
        assert oxidation.target_residues == "M"
        assert oxidation.mod_type == ModificationType.DYNAMIC
        assert oxidation.occurrence_count == 1

        assert mod_defs[1].mod_type == ModificationType.STATIC

    def test_legacy_occurrence_column(self, tmp_path, tsv_writer):
        rows = [
            ["Modification_Symbol", "Modification_Mass", "Target_Residues",
             "Modification_Type", "Mass_Correction_Tag", "Occurence_Count"],
            ["#", "79.9663", "STY", "D", "Phosph", "17"],
        ]
        path = tsv_writer(tmp_path / "legacy_ModSummary.txt", rows)

        assert read_mod_summary_file(path)[0].occurrence_count == 17

    def test_columns_matched_by_name(self, tmp_path, tsv_writer):
        rows = [
            ["Modification_Symbol", "Mass_Correction_Tag", "Modification_Mass",
             "Target_Residues", "Modification_Type"],
            ["<", "itrac", "144.102", "<", "T"],
        ]
        path = tsv_writer(tmp_path / "reordered_ModSummary.txt", rows)
        mod = read_mod_summary_file(path)[0]

        assert mod.mass_correction_tag == "itrac"
        assert mod.mass == pytest.approx(144.102)
        assert mod.mod_type == ModificationType.TERMINAL_PEPTIDE_STATIC
        assert mod.occurrence_count == 0

    def test_without_header(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "noheader_ModSummary.txt", side_rows["mod_summary"][1:])
        assert len(read_mod_summary_file(path)) == 2

    def test_mass_as_text_lookup(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "Ds_ModSummary.txt", side_rows["mod_summary"])
        reader = ModSummaryReader(path)

        assert reader.get_modification_mass_as_text("iodoacet") == "57.0215"
        assert reader.get_modification_mass_as_text("Phosph") == ""

    def test_non_numeric_mass(self, tmp_path, tsv_writer, side_rows):
        rows = side_rows["mod_summary"][:1] + [["*", "heavy", "M", "D", "Plus1Oxy", "1"]]
        path = tsv_writer(tmp_path / "bad_ModSummary.txt", rows)

        with pytest.raises(ModSummaryFormatError, match="Plus1Oxy"):
            read_mod_summary_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ModSummaryReader(tmp_path / "missing_ModSummary.txt")


# =============================================================================
# Sequence maps
# =============================================================================

class TestSeqMapLoaders:
    """Test the individual sequence map loaders."""

    def test_result_to_seq_map(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "map.txt", side_rows["result_to_seq_map"] + [["1", "99"]])

        # Header skipped; first mapping of a ResultID wins
        assert load_result_to_seq_map(path) == {1: 10, 2: 11}

    def test_seq_info(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "seqinfo.txt", side_rows["seq_info"] + [["10", "0", "", "1.0"]])
        seq_info = load_seq_info(path)

        assert set(seq_info) == {10, 11}
        assert seq_info[10].mod_count == 1
        assert seq_info[10].mod_description == "Plus1Oxy:3"
        assert seq_info[10].monoisotopic_mass == pytest.approx(2000.9842)

    def test_seq_info_without_header(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "seqinfo.txt", side_rows["seq_info"][1:])
        assert load_seq_info(path)[11].mod_description == "IodoAcet:2"

    def test_seq_to_protein_map(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "seqprot.txt", side_rows["seq_to_protein_map"])
        seq_to_protein = load_seq_to_protein_map(path)

        assert [info.protein_name for info in seq_to_protein[10]] == ["SO_0001", "SO_0001b"]
        assert seq_to_protein[11][0].cleavage_state == CleavageState.FULL
        assert seq_to_protein[11][0].terminus_state == PeptideTerminusState.NONE
        assert seq_to_protein[11][0].seq_id == 11

    def test_seq_to_protein_map_limit(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "seqprot.txt", side_rows["seq_to_protein_map"])
        assert len(load_seq_to_protein_map(path, max_proteins_per_seq_id=1)[10]) == 1

    def test_unknown_cleavage_state(self, tmp_path, tsv_writer, side_rows):
        rows = side_rows["seq_to_protein_map"][:1] + [["12", "7", "9", "SO_0009", "0", "0"]]
        path = tsv_writer(tmp_path / "seqprot.txt", rows)
        info = load_seq_to_protein_map(path)[12][0]

        assert info.cleavage_state == CleavageState.UNKNOWN
        assert info.terminus_state == PeptideTerminusState.NONE

    def test_pep_to_prot_map(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "pep2prot.txt", side_rows["pep_to_prot_map"])
        pep_to_prot = load_pep_to_prot_map(path)

        info = pep_to_prot["TDMESALPVTVLSAEDIAK"]
        assert info.protein_count == 2
        assert info.protein_map["SO_0001"] == [(35, 53)]
        assert info.protein_map["so_0001b"] == [(12, 30)]

    def test_pep_to_prot_map_strips_prefix_and_suffix(self, tmp_path, tsv_writer):
        path = tsv_writer(tmp_path / "pep2prot.txt", [["K.LLEEAK.A", "SO_5", "3", "8"]])
        assert "LLEEAK" in load_pep_to_prot_map(path)

    def test_pep_to_prot_map_limit(self, tmp_path, tsv_writer, side_rows):
        path = tsv_writer(tmp_path / "pep2prot.txt", side_rows["pep_to_prot_map"])
        assert load_pep_to_prot_map(path, max_proteins_per_peptide=1)["TDMESALPVTVLSAEDIAK"].protein_count == 1

    @pytest.mark.parametrize("loader", [
        load_result_to_seq_map, load_seq_info, load_seq_to_protein_map, load_pep_to_prot_map,
    ])
    def test_missing_file(self, tmp_path, loader):
        with pytest.raises(FileNotFoundError):
            loader(tmp_path / "missing.txt")


class TestSeqMapReader:
    """Test locating and loading all sequence maps of a dataset."""

    def test_load_all(self, msgfplus_dataset):
        log = MessageLog()
        reader = SeqMapReader(
            msgfplus_dataset.parent, "QC_Shew", PeptideHitResultType.MSGFPLUS, log,
            phrp_data_file_name=msgfplus_dataset.name,
        )
        seq_maps = reader.load()

        assert seq_maps.loaded
        assert seq_maps.result_to_seq_map == {1: 10, 2: 11}
        assert set(seq_maps.seq_info) == {10, 11}
        assert "ACDEFGHIK" in seq_maps.pep_to_prot_map
        assert log.warning_messages == []

    def test_missing_result_to_seq_map(self, msgfplus_synopsis_only):
        reader = SeqMapReader(msgfplus_synopsis_only.parent, "Solo", PeptideHitResultType.MSGFPLUS)
        seq_maps = reader.load()

        assert not seq_maps.loaded
        assert seq_maps.seq_info == {}

    def test_missing_pep_to_prot_map_warns(self, msgfplus_dataset):
        (msgfplus_dataset.parent / "QC_Shew_msgfplus_PepToProtMapMTS.txt").unlink()
        log = MessageLog()

        seq_maps = SeqMapReader(msgfplus_dataset.parent, "QC_Shew", PeptideHitResultType.MSGFPLUS, log).load()

        assert seq_maps.loaded
        assert seq_maps.pep_to_prot_map == {}
        assert len(log.warning_messages) == 1
        assert "PepToProtMap" in log.warning_messages[0]

    def test_legacy_msgfdb_pep_to_prot_map(self, msgfplus_dataset, tsv_writer, side_rows):
        directory = msgfplus_dataset.parent
        (directory / "QC_Shew_msgfplus_PepToProtMapMTS.txt").unlink()
        tsv_writer(directory / "QC_Shew_msgfdb_PepToProtMapMTS.txt", side_rows["pep_to_prot_map"])

        reader = SeqMapReader(directory, "QC_Shew", PeptideHitResultType.MSGFPLUS)

        assert reader.pep_to_prot_map_path.name == "QC_Shew_msgfdb_PepToProtMapMTS.txt"
        assert reader.load().pep_to_prot_map

    def test_missing_seq_info_raises(self, msgfplus_dataset):
        (msgfplus_dataset.parent / "QC_Shew_msgfplus_syn_SeqInfo.txt").unlink()
        reader = SeqMapReader(msgfplus_dataset.parent, "QC_Shew", PeptideHitResultType.MSGFPLUS)

        with pytest.raises(FileNotFoundError):
            reader.load()

    def test_first_hits_side_files(self, tmp_path, tsv_writer, side_rows):
        tsv_writer(tmp_path / "Ds_msgfplus_fht_ResultToSeqMap.txt", side_rows["result_to_seq_map"])
        tsv_writer(tmp_path / "Ds_msgfplus_fht_SeqInfo.txt", side_rows["seq_info"])
        tsv_writer(tmp_path / "Ds_msgfplus_fht_SeqToProteinMap.txt", side_rows["seq_to_protein_map"])

        reader = SeqMapReader(
            tmp_path, "Ds", PeptideHitResultType.MSGFPLUS, phrp_data_file_name="Ds_msgfplus_fht.txt"
        )

        assert reader.result_to_seq_map_path.name == "Ds_msgfplus_fht_ResultToSeqMap.txt"
        assert reader.load().loaded


class TestResultToProteins:
    """Test ResultID to protein lists built from the sequence maps."""

    def make_seq_maps(self, tmp_path, tsv_writer, side_rows):
        seq_maps = SeqMaps()
        seq_maps.result_to_seq_map = {1: 10, 2: 11, 3: 99}
        seq_maps.seq_to_protein_map = load_seq_to_protein_map(
            tsv_writer(tmp_path / "seqprot.txt", side_rows["seq_to_protein_map"])
        )
        return seq_maps

    def test_all_proteins_in_file_order(self, tmp_path, tsv_writer, side_rows):
        result_to_proteins = build_result_to_proteins(self.make_seq_maps(tmp_path, tsv_writer, side_rows))

        assert result_to_proteins == {1: ["SO_0001", "SO_0001b"], 2: ["SO_0002"]}

    def test_limit_keeps_first_proteins(self, tmp_path, tsv_writer, side_rows):
        seq_maps = self.make_seq_maps(tmp_path, tsv_writer, side_rows)
        result_to_proteins = build_result_to_proteins(seq_maps, max_proteins=1)
        assert result_to_proteins[1] == ["SO_0001"]


# =============================================================================
# Tool version
# =============================================================================

class TestToolVersionInfo:
    """Test Tool_Version_Info parsing."""

    def test_version_on_next_line(self, tmp_path):
        (tmp_path / "Tool_Version_Info_MSGFPlus.txt").write_text(
            "Date: 11/19/2021 3:45:22 PM\nToolVersionInfo:\nMS-GF+, v2021.09.06\n"
        )
        params = SearchEngineParameters("MS-GF+")

        assert read_tool_version_info(tmp_path, ["Tool_Version_Info_MSGFPlus.txt"], params)
        assert params.search_engine_version == "MS-GF+, v2021.09.06"
        assert params.search_date == datetime(2021, 11, 19, 15, 45, 22)

    def test_version_on_same_line(self, tmp_path):
        (tmp_path / "Tool_Version_Info_MSFragger.txt").write_text(
            "Date: 2022-03-04 10:11:12\nToolVersionInfo: MSFragger 3.4\n"
        )
        params = SearchEngineParameters("MSFragger")

        assert read_tool_version_info(tmp_path, ["Tool_Version_Info_MSFragger.txt"], params)
        assert params.search_engine_version == "MSFragger 3.4"
        assert params.search_date == datetime(2022, 3, 4, 10, 11, 12)

    def test_second_candidate_used(self, tmp_path):
        (tmp_path / "Tool_Version_Info_MSGFDB.txt").write_text("Date: 1/2/2012\nToolVersionInfo: MSGFDB v7097\n")
        params = SearchEngineParameters("MS-GF+")

        read_tool_version_info(
            tmp_path, ["Tool_Version_Info_MSGFPlus.txt", "Tool_Version_Info_MSGFDB.txt"], params
        )
        assert params.search_engine_version == "MSGFDB v7097"

    def test_missing_file_warns(self, tmp_path):
        log = MessageLog()
        params = SearchEngineParameters("MS-GF+")

        assert not read_tool_version_info(tmp_path, ["Tool_Version_Info_MSGFPlus.txt"], params, log)
        assert len(log.warning_messages) == 1
        assert params.search_engine_version == "Unknown"
        assert params.search_date == DEFAULT_SEARCH_DATE

    def test_missing_date_is_error(self, tmp_path):
        (tmp_path / "Tool_Version_Info_TopPIC.txt").write_text("ToolVersionInfo: TopPIC 1.4\n")
        log = MessageLog()
        params = SearchEngineParameters("TopPIC")

        assert not read_tool_version_info(tmp_path, ["Tool_Version_Info_TopPIC.txt"], params, log)
        assert log.has_errors
        assert params.search_engine_version == "TopPIC 1.4"

    @pytest.mark.parametrize("text,expected", [
        ("11/19/2021 3:45:22 PM", datetime(2021, 11, 19, 15, 45, 22)),
        ("11/19/2021 15:45:22", datetime(2021, 11, 19, 15, 45, 22)),
        ("2021-11-19", datetime(2021, 11, 19)),
        ("not a date", None),
    ])
    def test_parse_search_date(self, text, expected):
        assert parse_search_date(text) == expected
