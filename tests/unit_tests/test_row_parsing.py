"""Tests for per-tool row parsing.

Tests cover:
1. Round trip of the common fields for every supported tool
2. Tool-specific fields (proteins, ranks, precursor masses, elution times)
3. MS-GF+ / MSGFDB score name equivalence
4. PValue derived from EValue and SpecEValue
5. Scientific number formatting
"""

import pytest

from alphaphrp.constants import PROTON_MASS
from alphaphrp.mass_calculator import convolute_mass
from alphaphrp.parsing import compute_msgf_pvalue, format_scientific, split_proteins
from alphaphrp.reader import StartupOptions, SynFileReader
from alphaphrp.schema import PeptideHitResultType, schema_for


def read_single_row(tmp_path, tsv_writer, result_type, values, file_name=None):
    """Write a one-row synopsis file for result_type and parse it."""
    schema = schema_for(result_type)
    header = schema.header_names()
    row = [values.get(name, "0") for name in header]

    file_name = file_name or "Ds" + schema.syn_suffix
    path = tsv_writer(tmp_path / file_name, [header, row])

    reader = SynFileReader(path, result_type, StartupOptions(load_mods_and_seq_info=False))
    psms = list(reader.iter_psms())
    assert len(psms) == 1
    return psms[0]


# (result type, values written, protein expected first)
ROUND_TRIP_CASES = [
    (PeptideHitResultType.SEQUEST,
     {"HitNum": "11", "ScanNum": "1500", "ChargeState": "2", "Peptide": "K.IGLFGGAGVGK.T",
      "Reference": "SO_1000", "MH": "1003.58", "DelM": "0.002", "XCorr": "3.21", "RankXc": "1"},
     "SO_1000"),
    (PeptideHitResultType.XTANDEM,
     {"Result_ID": "12", "Scan": "1501", "Charge": "3", "Peptide_Sequence": "R.LSDEEMTK.A",
      "Peptide_MH": "952.44", "Delta_Mass": "0.01", "Peptide_Hyperscore": "45.2"},
     None),
    (PeptideHitResultType.INSPECT,
     {"ResultID": "13", "Scan": "1502", "Charge": "2", "Peptide": "K.VLDALQAIK.N",
      "Protein": "SO_1002", "PrecursorMZ": "485.8", "MQScore": "1.2", "RankTotalPRMScore": "1"},
     "SO_1002"),
    (PeptideHitResultType.MSGFPLUS,
     {"ResultID": "14", "Scan": "1503", "Charge": "2", "Peptide": "R.TDM*ESALPVTVLSAEDIAK.T",
      "Protein": "SO_1003", "PrecursorMZ": "1003.5", "MSGFDB_SpecEValue": "1.1E-12",
      "Rank_MSGFDB_SpecEValue": "1", "EValue": "2.2E-06"},
     "SO_1003"),
    (PeptideHitResultType.MSALIGN,
     {"ResultID": "15", "Scan": "1504", "Charge": "8", "Peptide": "-.MSKIKGNVK.W",
      "Protein": "SO_1004", "PrecursorMZ": "1200.1", "PValue": "1E-08", "Rank_PValue": "1"},
     "SO_1004"),
    (PeptideHitResultType.MODA,
     {"ResultID": "16", "Scan": "1505", "Charge": "2", "Peptide": "K.YAQ+0.984GEGK.V",
      "Protein": "SO_1005", "PrecursorMZ": "451.2", "Probability": "0.99", "Rank_Probability": "1"},
     "SO_1005"),
    (PeptideHitResultType.MODPLUS,
     {"ResultID": "17", "Scan": "1506", "Charge": "3", "Peptide": "R.GDLGIEIPAEK.V",
      "Protein": "SO_1006", "PrecursorMZ": "380.9", "Score": "55", "Rank_Score": "1"},
     "SO_1006"),
    (PeptideHitResultType.MSPATHFINDER,
     {"ResultID": "18", "Scan": "1507", "Charge": "12", "Sequence": "MKVLAAGIVGLPNVGK",
      "ProteinName": "SO_1007", "Mass": "15000.5", "SpecEValue": "1E-20"},
     "SO_1007"),
    (PeptideHitResultType.TOPPIC,
     {"ResultID": "19", "Scan": "1508", "Charge": "10", "Peptide": "M.SEQVENCE.K",
      "Protein": "SO_1008", "PrecursorMZ": "900.4", "Rank_PValue": "1", "EValue": "3E-09"},
     "SO_1008"),
    (PeptideHitResultType.MAXQUANT,
     {"ResultID": "20", "Scan": "1509", "Charge": "2", "Peptide": "K.AGLQFPVGR.V",
      "LeadingRazorProtein": "SO_1009", "Proteins": "SO_1009;SO_2009", "PrecursorMZ": "472.8",
      "Score": "120.5", "RetentionTime": "35.2"},
     "SO_1009"),
    (PeptideHitResultType.MSFRAGGER,
     {"ResultID": "21", "Scan": "1510", "Charge": "2", "Peptide": "R.IVGGWECEK.H",
      "Protein": "SO_1010", "AdditionalProteins": "SO_2010; SO_3010", "PrecursorMZ": "539.7",
      "Hyperscore": "32.1", "Rank_EValue": "1", "ElutionTime": "41.75"},
     "SO_1010"),
    (PeptideHitResultType.DIANN,
     {"ResultID": "22", "Scan": "1511", "Charge": "2", "Peptide": "AAPEEHPVLLTEAPLNPK",
      "ProteinIDs": "SO_1011;SO_2011", "PrecursorMZ": "977.5", "CScore": "0.99",
      "ElutionTime": "52.3"},
     "SO_1011"),
]


class TestRoundTrip:
    """Test that common fields come back exactly as written."""

    @pytest.mark.parametrize(
        "result_type,values,protein", ROUND_TRIP_CASES, ids=[case[0].name for case in ROUND_TRIP_CASES]
    )
    def test_common_fields(self, tmp_path, tsv_writer, result_type, values, protein):
        schema = schema_for(result_type)
        psm = read_single_row(tmp_path, tsv_writer, result_type, values)

        assert psm.result_id == int(values[schema.result_id_column])
        assert psm.scan_number == int(values[schema.scan_column])
        assert psm.charge == int(values[schema.charge_column])
        assert psm.peptide == values[schema.peptide_column]

        if protein is not None:
            assert psm.protein_first == protein

    @pytest.mark.parametrize(
        "result_type,values,protein", ROUND_TRIP_CASES, ids=[case[0].name for case in ROUND_TRIP_CASES]
    )
    def test_data_line_kept(self, tmp_path, tsv_writer, result_type, values, protein):
        psm = read_single_row(tmp_path, tsv_writer, result_type, values)
        assert psm.data_line_text.split('\t')[0] == values[schema_for(result_type).header_names()[0]]


class TestToolSpecificFields:
    """Test fields each tool strategy fills."""

    def test_sequest_precursor_from_mh(self, tmp_path, tsv_writer):
        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.SEQUEST, ROUND_TRIP_CASES[0][1])

        assert psm.precursor_neutral_mass == pytest.approx(1003.58 - 0.002 - PROTON_MASS)
        assert psm.mass_error_da == "0.002"
        assert psm.get_score("XCorr") == "3.21"
        assert psm.score_rank == 1

    def test_xtandem_expectation_value(self, tmp_path, tsv_writer):
        values = dict(ROUND_TRIP_CASES[1][1])
        values["Peptide_Expectation_Value_Log(e)"] = "-2"

        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.XTANDEM, values)

        assert psm.get_score("Peptide_Expectation_Value") == "1.00e-002"
        assert psm.score_rank == 1
        assert psm.proteins == []

    def test_msgfplus_precursor_from_mz(self, tmp_path, tsv_writer):
        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.MSGFPLUS, ROUND_TRIP_CASES[3][1])

        assert psm.precursor_neutral_mass == pytest.approx(convolute_mass(1003.5, 2, 0))
        assert psm.msgf_spec_evalue == "1.1E-12"
        assert psm.score_rank == 1

    def test_msgfplus_long_spec_evalue_reformatted(self, tmp_path, tsv_writer):
        values = dict(ROUND_TRIP_CASES[3][1])
        values["MSGFDB_SpecEValue"] = "1.23456789012345E-12"

        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.MSGFPLUS, values)

        assert psm.msgf_spec_evalue == "1.2345679E-12"

    def test_msgfplus_collision_mode_default(self, tmp_path, tsv_writer):
        values = dict(ROUND_TRIP_CASES[3][1])
        values["FragMethod"] = ""

        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.MSGFPLUS, values)
        assert psm.collision_mode == "n/a"

    def test_mspathfinder_mass(self, tmp_path, tsv_writer):
        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.MSPATHFINDER, ROUND_TRIP_CASES[7][1])

        assert psm.precursor_neutral_mass == pytest.approx(15000.5)
        assert psm.get_score("SpecEValue") == "1E-20"

    def test_toppic_scores(self, tmp_path, tsv_writer):
        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.TOPPIC, ROUND_TRIP_CASES[8][1])

        assert psm.msgf_spec_evalue == "3E-09"
        assert psm.get_score("Proteoform_QValue") == "0"

    def test_maxquant_proteins_and_elution_time(self, tmp_path, tsv_writer):
        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.MAXQUANT, ROUND_TRIP_CASES[9][1])

        assert psm.proteins == ["SO_1009", "SO_2009"]
        assert psm.elution_time_minutes == pytest.approx(35.2)
        assert psm.get_score("Score") == "120.5"
        assert psm.get_score("Proteins") == ""

    def test_maxquant_mass_when_mz_is_zero(self, tmp_path, tsv_writer):
        values = dict(ROUND_TRIP_CASES[9][1])
        values["PrecursorMZ"] = "0"
        values["Mass"] = "943.53"

        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.MAXQUANT, values)
        assert psm.precursor_neutral_mass == pytest.approx(943.53)

    def test_msfragger_additional_proteins(self, tmp_path, tsv_writer):
        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.MSFRAGGER, ROUND_TRIP_CASES[10][1])

        assert psm.proteins == ["SO_1010", "SO_2010", "SO_3010"]
        assert psm.elution_time_minutes == pytest.approx(41.75)
        assert psm.get_score("Hyperscore") == "32.1"

    def test_diann_proteins(self, tmp_path, tsv_writer):
        psm = read_single_row(tmp_path, tsv_writer, PeptideHitResultType.DIANN, ROUND_TRIP_CASES[11][1])

        assert psm.proteins == ["SO_1011", "SO_2011"]
        assert psm.elution_time_minutes == pytest.approx(52.3)
        assert psm.get_score("CScore") == "0.99"
        assert psm.score_rank == 1


class TestMsgfLegacyNames:
    """Test that MSGFDB and MS-GF+ headers give the same scores."""

    MODERN_HEADER = [
        "ResultID", "Scan", "Charge", "PrecursorMZ", "Peptide", "Protein",
        "MSGFDB_SpecEValue", "Rank_MSGFDB_SpecEValue", "EValue", "QValue", "PepQValue",
    ]
    LEGACY_HEADER = [
        "ResultID", "Scan", "Charge", "PrecursorMZ", "Peptide", "Protein",
        "MSGFDB_SpecProb", "Rank_MSGFDB_SpecProb", "PValue", "FDR", "PepFDR",
    ]
    ROW = ["5", "3001", "2", "650.3", "K.LLEEAK.A", "SO_5000", "1.5E-11", "1", "4.2E-05", "0.001", "0.002"]

    def _parse(self, tmp_path, tsv_writer, file_name, header):
        path = tsv_writer(tmp_path / file_name, [header, self.ROW])
        reader = SynFileReader(path, options=StartupOptions(load_mods_and_seq_info=False))
        return next(reader.iter_psms())

    def test_both_names_present(self, tmp_path, tsv_writer):
        modern = self._parse(tmp_path, tsv_writer, "Ds_msgfplus_syn.txt", self.MODERN_HEADER)
        legacy = self._parse(tmp_path, tsv_writer, "Ds_msgfdb_syn.txt", self.LEGACY_HEADER)

        for name in ("MSGFDB_SpecEValue", "MSGFDB_SpecProb", "Rank_MSGFDB_SpecEValue",
                     "Rank_MSGFDB_SpecProb", "QValue", "FDR", "PepQValue", "PepFDR", "EValue"):
            assert modern.get_score(name) != ""
            assert modern.get_score(name) == legacy.get_score(name), name

    def test_common_fields_equal(self, tmp_path, tsv_writer):
        modern = self._parse(tmp_path, tsv_writer, "Ds_msgfplus_syn.txt", self.MODERN_HEADER)
        legacy = self._parse(tmp_path, tsv_writer, "Ds_msgfdb_syn.txt", self.LEGACY_HEADER)

        assert modern.scan_number == legacy.scan_number == 3001
        assert modern.msgf_spec_evalue == legacy.msgf_spec_evalue == "1.5E-11"
        assert modern.score_rank == legacy.score_rank == 1
        assert modern.proteins == legacy.proteins == ["SO_5000"]

    def test_modern_pvalue_computed(self, tmp_path, tsv_writer):
        modern = self._parse(tmp_path, tsv_writer, "Ds_msgfplus_syn.txt", self.MODERN_HEADER)

        expected = format_scientific(compute_msgf_pvalue(4.2e-5, 1.5e-11), 5)
        assert modern.get_score("PValue") == expected

    @pytest.mark.parametrize("spec_evalue", ["0", "n/a"])
    def test_modern_pvalue_falls_back_to_evalue(self, tmp_path, tsv_writer, spec_evalue):
        """Test that PValue is the EValue text when SpecEValue is zero or not numeric."""
        row = list(self.ROW)
        row[6] = spec_evalue
        row[8] = "3.1E-05"
        path = tsv_writer(tmp_path / "Ds_msgfplus_syn.txt", [self.MODERN_HEADER, row])

        psm = next(SynFileReader(path, options=StartupOptions(load_mods_and_seq_info=False)).iter_psms())
        assert psm.get_score("PValue") == "3.1E-05"

    def test_legacy_pvalue_kept(self, tmp_path, tsv_writer):
        legacy = self._parse(tmp_path, tsv_writer, "Ds_msgfdb_syn.txt", self.LEGACY_HEADER)
        assert legacy.get_score("PValue") == "4.2E-05"


class TestPValue:
    """Test the PValue approximation from EValue and SpecEValue."""

    def test_matches_legacy_output(self):
        # n = 0.01 / 1e-6 = 10000 peptides; 1 - (1 - 1e-6)^10000
        assert compute_msgf_pvalue(0.01, 1e-6) == pytest.approx(0.00995017, rel=1e-5)

    def test_small_values_close_to_evalue(self):
        assert compute_msgf_pvalue(1e-9, 1e-12) == pytest.approx(1e-9, rel=1e-2)


class TestFormatting:
    """Test number and protein list helpers."""

    @pytest.mark.parametrize("value,decimals,expected", [
        (1.5e-7, 5, "1.50000E-07"),
        (2.0, 1, "2.0E00"),
        (123456.0, 2, "1.23E05"),
    ])
    def test_format_scientific(self, value, decimals, expected):
        assert format_scientific(value, decimals) == expected

    def test_format_scientific_xtandem_style(self):
        assert format_scientific(0.00123, 2, 3, 'e', True) == "1.23e-003"
        assert format_scientific(1230.0, 2, 3, 'e', True) == "1.23e+003"

    def test_split_proteins(self):
        assert split_proteins(" A; B ;;C") == ["A", "B", "C"]
        assert split_proteins("") == []
