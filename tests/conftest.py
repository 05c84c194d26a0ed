"""Pytest configuration for AlphaPHRP tests.

Fixtures write small synopsis files and their side files into tmp_path so
every reader test works on real files without shipping test data.
"""

import pytest


def write_tsv(path, rows):
    """Write rows (lists of values) as a tab-delimited file; returns the path."""
    path.write_text("".join("\t".join(str(value) for value in row) + "\n" for row in rows))
    return path


@pytest.fixture
def tsv_writer():
    return write_tsv


# =============================================================================
# MS-GF+ dataset with side files
# =============================================================================

MSGFPLUS_HEADER = [
    "ResultID", "Scan", "FragMethod", "SpecIndex", "Charge", "PrecursorMZ",
    "DelM", "DelM_PPM", "MH", "Peptide", "Protein", "NTT", "DeNovoScore",
    "MSGFScore", "MSGFDB_SpecEValue", "Rank_MSGFDB_SpecEValue", "EValue",
    "QValue", "PepQValue", "IsotopeError",
]

MSGFPLUS_ROWS = [
    ["1", "2044", "HCD", "1", "2", "621.83", "0.0012", "1.93", "1242.652",
     "R.TDM*ESALPVTVLSAEDIAK.T", "SO_0001", "2", "120", "98", "1.2E-15", "1",
     "3.1E-09", "0", "0", "0"],
    ["2", "2045", "HCD", "2", "3", "433.25", "-0.002", "-1.5", "1297.73",
     "K.ACDEFGHIK.L", "SO_0002", "2", "80", "52", "4.5E-10", "1",
     "8.8E-04", "0.001", "0.002", "0"],
    ["3", "2046", "HCD", "3", "2", "500.5", "0.001", "1.0", "1000.0",
     "-.MPEPTIDEK.A", "SO_0003", "1", "60", "40", "2.0E-08", "1",
     "1.5E-02", "0.01", "0.01", "0"],
]

MOD_SUMMARY_ROWS = [
    ["Modification_Symbol", "Modification_Mass", "Target_Residues",
     "Modification_Type", "Mass_Correction_Tag", "Occurrence_Count"],
    ["*", "15.9949", "M", "D", "Plus1Oxy", "1"],
    ["-", "57.0215", "C", "S", "IodoAcet", "1"],
]

RESULT_TO_SEQ_MAP_ROWS = [
    ["Result_ID", "Unique_Seq_ID"],
    ["1", "10"],
    ["2", "11"],
]

SEQ_INFO_ROWS = [
    ["Unique_Seq_ID", "Mod_Count", "Mod_Description", "Monoisotopic_Mass"],
    ["10", "1", "Plus1Oxy:3", "2000.9842"],
    ["11", "1", "IodoAcet:2", "1080.4608"],
]

SEQ_TO_PROTEIN_MAP_ROWS = [
    ["Unique_Seq_ID", "Cleavage_State", "Terminus_State", "Protein_Name",
     "Protein_Expectation_Value_Log(e)", "Protein_Intensity_Log(I)"],
    ["10", "2", "0", "SO_0001", "0", "0"],
    ["10", "2", "0", "SO_0001b", "0", "0"],
    ["11", "2", "0", "SO_0002", "0", "0"],
]

PEP_TO_PROT_MAP_ROWS = [
    ["Peptide", "Protein", "Residue_Start", "Residue_End"],
    ["TDMESALPVTVLSAEDIAK", "SO_0001", "35", "53"],
    ["TDMESALPVTVLSAEDIAK", "SO_0001b", "12", "30"],
    ["ACDEFGHIK", "SO_0002", "100", "108"],
]


@pytest.fixture
def msgfplus_dataset(tmp_path):
    """Synopsis file of dataset ``QC_Shew`` with ModSummary and sequence maps."""
    stem = tmp_path / "QC_Shew_msgfplus_syn"

    write_tsv(tmp_path / "QC_Shew_msgfplus_syn_ModSummary.txt", MOD_SUMMARY_ROWS)
    write_tsv(tmp_path / "QC_Shew_msgfplus_syn_ResultToSeqMap.txt", RESULT_TO_SEQ_MAP_ROWS)
    write_tsv(tmp_path / "QC_Shew_msgfplus_syn_SeqInfo.txt", SEQ_INFO_ROWS)
    write_tsv(tmp_path / "QC_Shew_msgfplus_syn_SeqToProteinMap.txt", SEQ_TO_PROTEIN_MAP_ROWS)
    write_tsv(tmp_path / "QC_Shew_msgfplus_PepToProtMapMTS.txt", PEP_TO_PROT_MAP_ROWS)

    return write_tsv(stem.with_suffix(".txt"), [MSGFPLUS_HEADER] + MSGFPLUS_ROWS)


@pytest.fixture
def msgfplus_synopsis_only(tmp_path):
    """MS-GF+ synopsis file without any side files."""
    return write_tsv(tmp_path / "Solo_msgfplus_syn.txt", [MSGFPLUS_HEADER] + MSGFPLUS_ROWS)


@pytest.fixture
def side_rows():
    """Rows of the QC_Shew side files, keyed by file type."""
    return {
        "mod_summary": MOD_SUMMARY_ROWS,
        "result_to_seq_map": RESULT_TO_SEQ_MAP_ROWS,
        "seq_info": SEQ_INFO_ROWS,
        "seq_to_protein_map": SEQ_TO_PROTEIN_MAP_ROWS,
        "pep_to_prot_map": PEP_TO_PROT_MAP_ROWS,
    }
