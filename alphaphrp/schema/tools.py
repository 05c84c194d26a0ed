"""Column tables and file conventions of every supported search tool.

Each ToolSchema below is defined once at import time. Column order is the
order PHRP writes the synopsis file; files written by other versions are
still read correctly because headers are matched by name.
"""

from typing import Dict, Union

from .columns import (
    MSGFDB_FDR,
    MSGFDB_PEP_FDR,
    MSGFDB_PVALUE,
    MSGFDB_RANK_SPEC_PROB,
    MSGFDB_SPEC_PROB,
    MSGFPLUS_RANK_SPEC_EVALUE,
    MSGFPLUS_SPEC_EVALUE,
    PeptideHitResultType,
    ToolSchema,
)
from ..exceptions import UnknownResultTypeError
from ..parsing.strategies import (
    parse_diann_row,
    parse_inspect_row,
    parse_maxquant_row,
    parse_moda_row,
    parse_modplus_row,
    parse_msalign_row,
    parse_msfragger_row,
    parse_msgfplus_row,
    parse_mspathfinder_row,
    parse_sequest_row,
    parse_toppic_row,
    parse_xtandem_row,
)
from ..params.extractors import (
    extract_diann_params,
    extract_inspect_params,
    extract_maxquant_params,
    extract_moda_params,
    extract_msalign_params,
    extract_msfragger_params,
    extract_msgfplus_params,
    extract_mspathfinder_params,
    extract_toppic_params,
)
from ..params.sequest import extract_sequest_params
from ..params.xml_params import extract_modplus_params, extract_xtandem_params


# =============================================================================
# Schemas
# =============================================================================

SEQUEST_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.SEQUEST,
    search_engine_name="SEQUEST",
    columns=(
        "HitNum", "ScanNum", "ScanCount", "ChargeState", "MH", "XCorr", "DelCn",
        "Sp", "Reference", "MultiProtein", "Peptide", "DelCn2", "RankSp",
        "RankXc", "DelM", "XcRatio", "PassFilt", "MScore", "NumTrypticEnds",
    ),
    optional_columns=(
        "Ions_Observed", "Ions_Expected", "DelM_PPM", "Cleavage_State",
        "Terminus_State", "Mod_Count", "Mod_Description", "Monoisotopic_Mass",
    ),
    file_infix="",
    syn_suffix="_syn.txt",
    fht_suffix="_fht.txt",
    side_file_stem="_syn",
    tool_version_files=("Tool_Version_Info_Sequest.txt",),
    scan_column="ScanNum",
    result_id_column="HitNum",
    charge_column="ChargeState",
    row_parser=parse_sequest_row,
    param_extractor=extract_sequest_params,
)

XTANDEM_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.XTANDEM,
    search_engine_name="X! Tandem",
    columns=(
        "Result_ID", "Group_ID", "Scan", "Charge", "Peptide_MH",
        "Peptide_Hyperscore", "Peptide_Expectation_Value_Log(e)",
        "Multiple_Protein_Count", "Peptide_Sequence", "DeltaCn2", "y_score",
        "y_ions", "b_score", "b_ions", "Delta_Mass", "Peptide_Intensity_Log(I)",
        "DelM_PPM",
    ),
    file_infix="xt",
    syn_suffix="_xt.txt",
    fht_suffix="",
    side_file_stem="_xt",
    tool_version_files=("Tool_Version_Info_XTandem.txt",),
    result_id_column="Result_ID",
    peptide_column="Peptide_Sequence",
    row_parser=parse_xtandem_row,
    param_extractor=extract_xtandem_params,
)

INSPECT_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.INSPECT,
    search_engine_name="InSpecT",
    columns=(
        "ResultID", "Scan", "Peptide", "Protein", "Charge", "MQScore", "Length",
        "TotalPRMScore", "MedianPRMScore", "FractionY", "FractionB", "Intensity",
        "NTT", "PValue", "FScore", "DeltaScore", "DeltaScoreOther",
        "DeltaNormMQScore", "DeltaNormTotalPRMScore", "RankTotalPRMScore",
        "RankFScore", "MH", "RecordNumber", "DBFilePos", "SpecFilePos",
        "PrecursorMZ", "PrecursorError", "DelM_PPM",
    ),
    file_infix="inspect",
    syn_suffix="_inspect_syn.txt",
    fht_suffix="_inspect_fht.txt",
    side_file_stem="_inspect_syn",
    tool_version_files=("Tool_Version_Info_Inspect.txt",),
    row_parser=parse_inspect_row,
    param_extractor=extract_inspect_params,
)

MSGFPLUS_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.MSGFPLUS,
    search_engine_name="MS-GF+",
    columns=(
        "ResultID", "Scan", "FragMethod", "SpecIndex", "Charge", "PrecursorMZ",
        "DelM", "DelM_PPM", "MH", "Peptide", "Protein", "NTT", "DeNovoScore",
        "MSGFScore", MSGFPLUS_SPEC_EVALUE, MSGFPLUS_RANK_SPEC_EVALUE, "EValue",
        "QValue", "PepQValue", "EFDR", "IsotopeError",
    ),
    aliases={
        "SpecEValue": MSGFPLUS_SPEC_EVALUE,
        MSGFDB_SPEC_PROB: MSGFPLUS_SPEC_EVALUE,
        MSGFDB_RANK_SPEC_PROB: MSGFPLUS_RANK_SPEC_EVALUE,
        MSGFDB_PVALUE: "EValue",
        MSGFDB_FDR: "QValue",
        MSGFDB_PEP_FDR: "PepQValue",
    },
    optional_columns=("IMS_Scan", "IMS_Drift_Time"),
    file_infix="msgfplus",
    syn_suffix="_msgfplus_syn.txt",
    fht_suffix="_msgfplus_fht.txt",
    side_file_stem="_msgfplus_syn",
    # Renamed from Tool_Version_Info_MSGFDB.txt in November 2016
    tool_version_files=("Tool_Version_Info_MSGFPlus.txt", "Tool_Version_Info_MSGFDB.txt"),
    row_parser=parse_msgfplus_row,
    param_extractor=extract_msgfplus_params,
)

MSALIGN_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.MSALIGN,
    search_engine_name="MSAlign",
    columns=(
        "ResultID", "Scan", "Prsm_ID", "Spectrum_ID", "Charge", "PrecursorMZ",
        "DelM", "DelM_PPM", "MH", "Peptide", "Protein", "Protein_Mass",
        "Unexpected_Mod_Count", "Peak_Count", "Matched_Peak_Count",
        "Matched_Fragment_Ion_Count", "PValue", "Rank_PValue", "EValue", "FDR",
    ),
    # Only in MSAlign_Histone results
    optional_columns=("Species_ID", "FragMethod"),
    file_infix="msalign",
    syn_suffix="_msalign_syn.txt",
    fht_suffix="_msalign_fht.txt",
    side_file_stem="_msalign_syn",
    tool_version_files=("Tool_Version_Info_MSAlign.txt",),
    row_parser=parse_msalign_row,
    param_extractor=extract_msalign_params,
)

MODA_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.MODA,
    search_engine_name="MODa",
    columns=(
        "ResultID", "Scan", "Spectrum_Index", "Charge", "PrecursorMZ", "DelM",
        "DelM_PPM", "MH", "Peptide", "Protein", "Score", "Probability",
        "Rank_Probability", "Peptide_Position", "QValue",
    ),
    file_infix="moda",
    syn_suffix="_moda_syn.txt",
    fht_suffix="",
    side_file_stem="_moda_syn",
    tool_version_files=("Tool_Version_Info_MODa.txt",),
    row_parser=parse_moda_row,
    param_extractor=extract_moda_params,
)

MODPLUS_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.MODPLUS,
    search_engine_name="MODPlus",
    columns=(
        "ResultID", "Scan", "Spectrum_Index", "Charge", "PrecursorMZ", "DelM",
        "DelM_PPM", "MH", "Peptide", "NTT", "ModificationAnnotation", "Protein",
        "Peptide_Position", "Score", "Probability", "Rank_Score", "QValue",
    ),
    file_infix="modp",
    syn_suffix="_modp_syn.txt",
    fht_suffix="",
    side_file_stem="_modp_syn",
    tool_version_files=("Tool_Version_Info_MODPlus.txt",),
    row_parser=parse_modplus_row,
    param_extractor=extract_modplus_params,
)

MSPATHFINDER_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.MSPATHFINDER,
    search_engine_name="MSPathFinder",
    columns=(
        "ResultID", "Scan", "Charge", "MostAbundantIsotopeMz", "Mass", "Sequence",
        "Modifications", "Composition", "ProteinName", "ProteinDesc",
        "ProteinLength", "ResidueStart", "ResidueEnd", "MatchedFragments",
        "SpecEValue", "EValue", "QValue", "PepQValue",
    ),
    file_infix="mspath",
    syn_suffix="_mspath_syn.txt",
    fht_suffix="",
    side_file_stem="_mspath_syn",
    tool_version_files=("Tool_Version_Info_MSPathFinder.txt",),
    peptide_column="Sequence",
    row_parser=parse_mspathfinder_row,
    param_extractor=extract_mspathfinder_params,
)

TOPPIC_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.TOPPIC,
    search_engine_name="TopPIC",
    columns=(
        "ResultID", "Scan", "Prsm_ID", "Spectrum_ID", "FragMethod", "Charge",
        "PrecursorMZ", "DelM", "DelM_PPM", "MH", "Peptide", "Proteoform_ID",
        "Feature_Intensity", "Feature_Score", "Protein", "ResidueStart",
        "ResidueEnd", "Unexpected_Mod_Count", "Peak_Count", "Matched_Peak_Count",
        "Matched_Fragment_Ion_Count", "PValue", "Rank_PValue", "EValue", "QValue",
        "Proteoform_QValue",
    ),
    aliases={"Proteoform_FDR": "Proteoform_QValue"},
    optional_columns=("Variable_PTMs",),
    file_infix="toppic",
    syn_suffix="_toppic_syn.txt",
    fht_suffix="_toppic_fht.txt",
    side_file_stem="_toppic_syn",
    tool_version_files=("Tool_Version_Info_TopPIC.txt",),
    row_parser=parse_toppic_row,
    param_extractor=extract_toppic_params,
)

MAXQUANT_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.MAXQUANT,
    search_engine_name="MaxQuant",
    columns=(
        "ResultID", "Dataset", "DatasetID", "Scan", "FragMethod", "SpecIndex",
        "Charge", "PrecursorMZ", "DelM", "DelM_PPM", "MH", "Mass", "Peptide",
        "Proteins", "LeadingRazorProtein", "NTT", "PEP", "Score", "DeltaScore",
        "Intensity", "MassAnalyzer", "PrecursorType", "RetentionTime",
        "PrecursorScan", "PrecursorIntensity", "NumberOfMatches",
        "IntensityCoverage", "MissedCleavages", "MsMsID", "ProteinGroupIDs",
        "PeptideID", "ModPeptideID", "EvidenceID",
    ),
    optional_columns=("DelM_MaxQuant",),
    file_infix="maxq",
    syn_suffix="_maxq_syn.txt",
    fht_suffix="",
    side_file_stem="_maxq_syn",
    tool_version_files=(
        "Tool_Version_Info_MaxQuant.txt",
        "Tool_Version_Info_MaxqPeak.txt",
        "Tool_Version_Info_MaxqS1.txt",
        "Tool_Version_Info_MaxqS2.txt",
        "Tool_Version_Info_MaxqS3.txt",
    ),
    row_parser=parse_maxquant_row,
    param_extractor=extract_maxquant_params,
)

MSFRAGGER_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.MSFRAGGER,
    search_engine_name="MSFragger",
    columns=(
        "ResultID", "Dataset", "DatasetID", "Scan", "Charge", "PrecursorMZ",
        "DelM", "DelM_PPM", "DelM_MSFragger", "MH", "Mass", "Peptide",
        "Modifications", "Protein", "AdditionalProteins", "NTT", "EValue",
        "Rank_EValue", "Hyperscore", "Nextscore", "PeptideProphetProbability",
        "ElutionTime", "ElutionTimeAverage", "MissedCleavages", "MatchedIons",
        "TotalIons", "QValue",
    ),
    file_infix="msfragger",
    syn_suffix="_msfragger_syn.txt",
    fht_suffix="",
    side_file_stem="_msfragger_syn",
    tool_version_files=("Tool_Version_Info_MSFragger.txt",),
    row_parser=parse_msfragger_row,
    param_extractor=extract_msfragger_params,
)

DIANN_SCHEMA = ToolSchema(
    result_type=PeptideHitResultType.DIANN,
    search_engine_name="DIA-NN",
    columns=(
        "ResultID", "Dataset", "DatasetID", "Scan", "IonMobility", "Charge",
        "PrecursorMZ", "MH", "Mass", "Peptide", "Modifications", "ProteinGroup",
        "ProteinIDs", "ProteinNames", "Genes", "NTT", "ProteinGroupQuantity",
        "ProteinGroupNormalized", "ProteinGroupMaxLFQ", "GenesQuantity",
        "GenesNormalized", "GenesMaxLFQ", "GenesMaxLFQUnique", "QValue", "PEP",
        "GlobalQValue", "ProteinQValue", "ProteinGroupQValue",
        "GlobalProteinGroupQValue", "GeneGroupQValue", "TranslatedQValue",
        "PrecursorQuantity", "PrecursorNormalized", "PrecursorTranslated",
        "TranslatedQuality", "MS1Translated", "QuantityQuality", "ElutionTime",
        "ElutionTimeStart", "ElutionTimeStop", "IndexedRT", "PredictedRT",
        "PredictedIndexedRT", "MS1ProfileCorrelation", "MS1Area", "Evidence",
        "SpectrumSimilarity", "Averagine", "MassEvidence", "CScore",
        "DecoyEvidence", "DecoyCScore", "IndexedIonMobility",
    ),
    file_infix="diann",
    syn_suffix="_diann_syn.txt",
    fht_suffix="",
    side_file_stem="_diann_syn",
    tool_version_files=("Tool_Version_Info_DiaNN.txt",),
    row_parser=parse_diann_row,
    param_extractor=extract_diann_params,
)


# =============================================================================
# Registry
# =============================================================================

TOOL_SCHEMAS: Dict[PeptideHitResultType, ToolSchema] = {
    schema.result_type: schema
    for schema in (
        SEQUEST_SCHEMA,
        XTANDEM_SCHEMA,
        INSPECT_SCHEMA,
        MSGFPLUS_SCHEMA,
        MSALIGN_SCHEMA,
        MODA_SCHEMA,
        MODPLUS_SCHEMA,
        MSPATHFINDER_SCHEMA,
        TOPPIC_SCHEMA,
        MAXQUANT_SCHEMA,
        MSFRAGGER_SCHEMA,
        DIANN_SCHEMA,
    )
}


def schema_for(tool: Union[PeptideHitResultType, str]) -> ToolSchema:
    """Column schema of a search tool.

    Parameters
    ----------
    tool : PeptideHitResultType or str
        Result type, or a tool name such as ``"MS-GF+"`` or ``"sequest"``

    Returns
    -------
    ToolSchema

    Raises
    ------
    UnknownResultTypeError
        If the tool is unknown or unsupported

    Examples
    --------
    >>> schema_for("msgfplus").column_id("MSGFDB_SpecProb")
    ColumnId(index=14, name='MSGFDB_SpecEValue')
    """
    if isinstance(tool, str):
        result_type = PeptideHitResultType.from_name(tool)
    else:
        result_type = PeptideHitResultType(tool)

    schema = TOOL_SCHEMAS.get(result_type)
    if schema is None:
        raise UnknownResultTypeError(f"No column schema for result type '{tool}'")
    return schema
