"""Per-tool row strategies.

Each function fills the tool-specific fields of a PSM whose scan, result
ID, peptide and charge were already read by the reader. Columns with no
dedicated PSM field are copied into the score map.
"""

import math
import sys

from ..constants import UNKNOWN_COLLISION_MODE
from ..schema.columns import (
    MSGFDB_FDR,
    MSGFDB_PEP_FDR,
    MSGFDB_PVALUE,
    MSGFDB_RANK_SPEC_PROB,
    MSGFDB_SPEC_PROB,
    MSGFPLUS_RANK_SPEC_EVALUE,
    MSGFPLUS_SPEC_EVALUE,
)
from .rows import RowContext, format_scientific, split_proteins, try_parse_float


# Columns read into dedicated PSM fields; never duplicated as scores
_COMMON_COLUMNS = frozenset(name.lower() for name in (
    "ResultID", "Scan", "Charge", "Peptide", "PrecursorMZ", "DelM", "DelM_PPM",
))


def _add_remaining_scores(ctx: RowContext, *consumed: str):
    """Copy every schema column not in consumed (or the common set) as a score."""
    skip = _COMMON_COLUMNS | {name.lower() for name in consumed}
    for name in ctx.mapping.schema.header_names():
        if name.lower() not in skip:
            ctx.add_score(name)


def _set_elution_time(ctx: RowContext, column: str):
    elution_time = try_parse_float(ctx.get_text(column))
    if elution_time is not None:
        ctx.psm.elution_time_minutes = elution_time


# =============================================================================
# SEQUEST
# =============================================================================

SEQUEST_SCORE_COLUMNS = (
    "XCorr", "DelCn", "Sp", "DelCn2", "RankSp", "RankXc", "XcRatio",
    "Ions_Observed", "Ions_Expected", "NumTrypticEnds",
)


def parse_sequest_row(ctx: RowContext):
    psm = ctx.psm
    psm.score_rank = ctx.get_int("RankXc", 1)
    psm.add_protein(ctx.get_text("Reference"))

    # MH is the computed MH of the peptide, not the observed precursor
    ctx.set_precursor_from_mh("MH", "DelM")
    psm.mass_error_ppm = ctx.get_text("DelM_PPM")

    ctx.add_scores(SEQUEST_SCORE_COLUMNS)


# =============================================================================
# X!Tandem
# =============================================================================

XTANDEM_SCORE_COLUMNS = (
    "Peptide_Hyperscore", "Peptide_Expectation_Value_Log(e)", "DeltaCn2",
    "y_score", "y_ions", "b_score", "b_ions", "Peptide_Intensity_Log(I)",
)


def parse_xtandem_row(ctx: RowContext):
    psm = ctx.psm

    # X!Tandem only reports the top hit of each spectrum
    psm.score_rank = 1

    for protein in ctx.result_to_proteins.get(psm.result_id, ()):
        psm.add_protein(protein)

    ctx.set_precursor_from_mh("Peptide_MH", "Delta_Mass")
    psm.mass_error_ppm = ctx.get_text("DelM_PPM")

    ctx.add_scores(XTANDEM_SCORE_COLUMNS)

    # Base-10 log of the expectation value; also keep the plain E-value
    log_evalue = try_parse_float(psm.get_score("Peptide_Expectation_Value_Log(e)"))
    if log_evalue is not None:
        psm.set_score("Peptide_Expectation_Value", format_scientific(10 ** log_evalue, 2, 3, 'e', True))


# =============================================================================
# InSpecT
# =============================================================================

INSPECT_SCORE_COLUMNS = (
    "MQScore", "TotalPRMScore", "MedianPRMScore", "PValue", "FScore",
    "DeltaScore", "DeltaScoreOther", "DeltaNormMQScore",
    "DeltaNormTotalPRMScore", "RankTotalPRMScore", "RankFScore",
)


def parse_inspect_row(ctx: RowContext):
    psm = ctx.psm
    psm.score_rank = ctx.get_int("RankTotalPRMScore", 0)
    psm.add_protein(ctx.get_text("Protein"))

    ctx.set_precursor_from_mz()
    psm.mass_error_da = ctx.get_text("PrecursorError")
    psm.mass_error_ppm = ctx.get_text("DelM_PPM")

    ctx.add_scores(INSPECT_SCORE_COLUMNS)


# =============================================================================
# MS-GF+ / MSGFDB
# =============================================================================

def is_msgfplus_file(ctx: RowContext) -> bool:
    """True for MS-GF+ headers (SpecEValue), False for MSGFDB ones (SpecProb)."""
    observed = ctx.mapping.observed_name(MSGFPLUS_SPEC_EVALUE)
    return bool(observed) and observed.lower() != MSGFDB_SPEC_PROB.lower()


def compute_msgf_pvalue(evalue: float, spec_evalue: float) -> float:
    """Approximate PValue from EValue and SpecEValue.

    n = EValue / SpecEValue approximates the number of peptides searched,
    and PValue = 1 - (1 - SpecEValue)^n. This matches legacy PHRP output and
    is not an exact statistic.
    """
    n = evalue / spec_evalue
    return 1 - math.pow(1 - spec_evalue, n)


def _store_msgf_pvalue(ctx: RowContext) -> bool:
    psm = ctx.psm
    found_evalue, evalue_text = psm.try_get_score("EValue")
    found_spec, spec_evalue_text = psm.try_get_score(MSGFPLUS_SPEC_EVALUE)
    if not (found_evalue and found_spec):
        return False

    evalue = try_parse_float(evalue_text)
    spec_evalue = try_parse_float(spec_evalue_text)
    if evalue is None or spec_evalue is None or spec_evalue <= 0:
        return False

    pvalue = compute_msgf_pvalue(evalue, spec_evalue)
    if abs(pvalue) <= sys.float_info.epsilon:
        psm.set_score(MSGFDB_PVALUE, "0")
    else:
        psm.set_score(MSGFDB_PVALUE, format_scientific(pvalue, 5))
    return True


# Modern name -> legacy MSGFDB name
MSGFPLUS_LEGACY_SCORE_NAMES = (
    (MSGFPLUS_SPEC_EVALUE, MSGFDB_SPEC_PROB),
    (MSGFPLUS_RANK_SPEC_EVALUE, MSGFDB_RANK_SPEC_PROB),
    ("QValue", MSGFDB_FDR),
    ("PepQValue", MSGFDB_PEP_FDR),
)


def parse_msgfplus_row(ctx: RowContext):
    """MS-GF+ and MSGFDB rows.

    Both score naming schemes end up in the score map whichever one the
    file used, so downstream code can ask for either name.
    """
    psm = ctx.psm
    modern = is_msgfplus_file(ctx)

    if modern:
        psm.score_rank = ctx.get_int(MSGFPLUS_RANK_SPEC_EVALUE, 1)
    else:
        psm.score_rank = ctx.get_int(MSGFDB_RANK_SPEC_PROB, 1)

    psm.add_protein(ctx.get_text("Protein"))
    psm.collision_mode = ctx.get_text("FragMethod", UNKNOWN_COLLISION_MODE) or UNKNOWN_COLLISION_MODE

    ctx.set_precursor_from_mz()
    psm.mass_error_da = ctx.get_text("DelM")
    psm.mass_error_ppm = ctx.get_text("DelM_PPM")

    psm.msgf_spec_evalue = ctx.get_text(MSGFPLUS_SPEC_EVALUE)
    if len(psm.msgf_spec_evalue) > 13:
        spec_evalue = try_parse_float(psm.msgf_spec_evalue)
        if spec_evalue is not None:
            psm.msgf_spec_evalue = format_scientific(spec_evalue, 7)

    ctx.add_scores(("DeNovoScore", "MSGFScore"))

    if modern:
        ctx.add_scores((
            MSGFPLUS_SPEC_EVALUE, MSGFPLUS_RANK_SPEC_EVALUE, "EValue",
            "QValue", "PepQValue", "IsotopeError",
        ))

        for modern_name, legacy_name in MSGFPLUS_LEGACY_SCORE_NAMES:
            ctx.copy_score(modern_name, legacy_name)

        found_evalue, evalue_text = psm.try_get_score("EValue")
        if found_evalue and not _store_msgf_pvalue(ctx):
            # EValue only approximates PValue for confident (FDR < 2%) hits
            psm.set_score(MSGFDB_PVALUE, evalue_text)
    else:
        ctx.add_scores((
            MSGFDB_SPEC_PROB, MSGFDB_RANK_SPEC_PROB, MSGFDB_PVALUE,
            MSGFDB_FDR, MSGFDB_PEP_FDR,
        ))

        for modern_name, legacy_name in MSGFPLUS_LEGACY_SCORE_NAMES:
            ctx.copy_score(legacy_name, modern_name)
        ctx.copy_score(MSGFDB_PVALUE, "EValue")

    # EFDR is absent from target/decoy searches
    ctx.add_scores(("EFDR", "IMS_Scan", "IMS_Drift_Time"))


# =============================================================================
# MSAlign
# =============================================================================

MSALIGN_SCORE_COLUMNS = (
    "Prsm_ID", "Spectrum_ID", "MH", "Protein_Mass", "Unexpected_Mod_Count",
    "Peak_Count", "Matched_Peak_Count", "Matched_Fragment_Ion_Count", "PValue",
    "EValue", "FDR", "Species_ID", "FragMethod",
)


def parse_msalign_row(ctx: RowContext):
    psm = ctx.psm
    psm.score_rank = ctx.get_int("Rank_PValue", 1)
    psm.add_protein(ctx.get_text("Protein"))

    ctx.set_precursor_from_mz()
    psm.mass_error_da = ctx.get_text("DelM")
    psm.mass_error_ppm = ctx.get_text("DelM_PPM")

    ctx.add_scores(MSALIGN_SCORE_COLUMNS)


# =============================================================================
# MODa / MODPlus
# =============================================================================

MODA_SCORE_COLUMNS = (
    "Spectrum_Index", "MH", "Score", "Probability", "Peptide_Position", "QValue",
)

MODPLUS_SCORE_COLUMNS = (
    "Spectrum_Index", "MH", "ModificationAnnotation", "Peptide_Position",
    "Score", "Probability", "QValue",
)


def _parse_modx_row(ctx: RowContext, rank_column: str, score_columns):
    psm = ctx.psm
    psm.score_rank = ctx.get_int(rank_column, 1)
    psm.add_protein(ctx.get_text("Protein"))

    ctx.set_precursor_from_mz()
    psm.mass_error_da = ctx.get_text("DelM")
    psm.mass_error_ppm = ctx.get_text("DelM_PPM")

    ctx.add_scores(score_columns)


def parse_moda_row(ctx: RowContext):
    _parse_modx_row(ctx, "Rank_Probability", MODA_SCORE_COLUMNS)


def parse_modplus_row(ctx: RowContext):
    _parse_modx_row(ctx, "Rank_Score", MODPLUS_SCORE_COLUMNS)


# =============================================================================
# MSPathFinder
# =============================================================================

MSPATHFINDER_SCORE_COLUMNS = (
    "MostAbundantIsotopeMz", "Modifications", "Composition", "ProteinDesc",
    "ProteinLength", "ResidueStart", "ResidueEnd", "MatchedFragments",
    "SpecEValue", "EValue", "QValue", "PepQValue",
)


def parse_mspathfinder_row(ctx: RowContext):
    psm = ctx.psm

    # MSPathFinder reports one match per spectrum
    psm.score_rank = 1
    psm.add_protein(ctx.get_text("ProteinName"))

    # Monoisotopic neutral mass of the precursor, as written
    psm.precursor_neutral_mass = ctx.get_float("Mass")

    ctx.add_scores(MSPATHFINDER_SCORE_COLUMNS)


# =============================================================================
# TopPIC
# =============================================================================

TOPPIC_SCORE_COLUMNS = (
    "Prsm_ID", "Spectrum_ID", "FragMethod", "MH", "Proteoform_ID",
    "Feature_Intensity", "Feature_Score", "ResidueStart", "ResidueEnd",
    "Unexpected_Mod_Count", "Peak_Count", "Matched_Peak_Count",
    "Matched_Fragment_Ion_Count", "PValue", "EValue", "QValue",
    "Variable_PTMs",
)


def parse_toppic_row(ctx: RowContext):
    psm = ctx.psm
    psm.score_rank = ctx.get_int("Rank_PValue", 1)
    psm.add_protein(ctx.get_text("Protein"))

    ctx.set_precursor_from_mz()
    psm.mass_error_da = ctx.get_text("DelM")
    psm.mass_error_ppm = ctx.get_text("DelM_PPM")
    psm.msgf_spec_evalue = ctx.get_text("EValue")

    ctx.add_scores(TOPPIC_SCORE_COLUMNS)

    # Older files call it Proteoform_FDR; keep the name the file used
    observed = ctx.mapping.observed_name("Proteoform_QValue")
    if observed:
        psm.set_score(observed, ctx.get_text("Proteoform_QValue"))


# =============================================================================
# MaxQuant
# =============================================================================

def parse_maxquant_row(ctx: RowContext):
    """MaxQuant rows; the leading razor protein is listed first."""
    psm = ctx.psm

    # One PSM per MS/MS scan in msms.txt
    psm.score_rank = 1

    psm.add_protein(ctx.get_text("LeadingRazorProtein").strip())
    for protein in split_proteins(ctx.get_text("Proteins")):
        psm.add_protein(protein)

    ctx.set_precursor_from_mz_or_mass()
    psm.mass_error_da = ctx.get_text("DelM")
    psm.mass_error_ppm = ctx.get_text("DelM_PPM")
    psm.collision_mode = ctx.get_text("FragMethod", UNKNOWN_COLLISION_MODE) or UNKNOWN_COLLISION_MODE

    _set_elution_time(ctx, "RetentionTime")

    _add_remaining_scores(ctx, "Proteins", "LeadingRazorProtein")


# =============================================================================
# MSFragger
# =============================================================================

MSFRAGGER_SCORE_COLUMNS = (
    "Dataset", "DatasetID", "DelM_MSFragger", "MH", "Mass", "Modifications",
    "NTT", "EValue", "Hyperscore", "Nextscore", "PeptideProphetProbability",
    "ElutionTime", "ElutionTimeAverage", "MissedCleavages", "MatchedIons",
    "TotalIons", "QValue",
)


def parse_msfragger_row(ctx: RowContext):
    psm = ctx.psm
    psm.score_rank = ctx.get_int("Rank_EValue", 0)

    psm.add_protein(ctx.get_text("Protein").strip())
    for protein in split_proteins(ctx.get_text("AdditionalProteins")):
        psm.add_protein(protein)

    ctx.set_precursor_from_mz_or_mass()
    psm.mass_error_da = ctx.get_text("DelM")
    psm.mass_error_ppm = ctx.get_text("DelM_PPM")

    _set_elution_time(ctx, "ElutionTime")

    ctx.add_scores(MSFRAGGER_SCORE_COLUMNS)


# =============================================================================
# DIA-NN
# =============================================================================

def parse_diann_row(ctx: RowContext):
    psm = ctx.psm

    # One precursor per row of the DIA-NN report
    psm.score_rank = 1

    for protein in split_proteins(ctx.get_text("ProteinIDs")):
        psm.add_protein(protein)

    ctx.set_precursor_from_mz_or_mass()
    _set_elution_time(ctx, "ElutionTime")

    _add_remaining_scores(ctx, "ProteinIDs")
