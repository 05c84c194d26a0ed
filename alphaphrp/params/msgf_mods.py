"""Modification definitions in MS-GF+ and MSPathFinder parameter files.

Each definition is one comma-separated line::

    StaticMod=C2H3N1O1,C,fix,any,Carbamidomethyl
    DynamicMod=O1,M,opt,any,Oxidation
    DynamicMod=C2H2O, *, opt, Prot-N-term, Acetyl
    CustomAA=C5H7N1O2S0,J,custom,P,Hydroxylation     # Hydroxyproline

Fields are mass (or empirical formula), residues, ``fix``/``opt``/``custom``,
position and name. A custom amino acid puts its one-letter symbol in the
residues field. MSGFPlus_Mods.txt files list the same definitions without
the ``StaticMod=`` prefix.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..constants import (
    C_TERMINAL_PEPTIDE_SYMBOL,
    C_TERMINAL_PROTEIN_SYMBOL,
    N_TERMINAL_PEPTIDE_SYMBOL,
    N_TERMINAL_PROTEIN_SYMBOL,
)
from ..data.modifications import ModificationDefinition, ModificationType
from ..mass_calculator import compute_formula_mass
from ..messages import MessageLog
from .common import parse_key_value_setting

logger = logging.getLogger(__name__)

PARAM_TAG_MOD_STATIC = "StaticMod"
PARAM_TAG_MOD_DYNAMIC = "DynamicMod"
PARAM_TAG_CUSTOM_AA = "CustomAA"

MIN_MOD_SPEC_PARTS = 5

# Position keyword (lowercase, dashes removed) -> (target symbol, static type)
_TERMINAL_POSITIONS = {
    "nterm": (N_TERMINAL_PEPTIDE_SYMBOL, ModificationType.TERMINAL_PEPTIDE_STATIC),
    "cterm": (C_TERMINAL_PEPTIDE_SYMBOL, ModificationType.TERMINAL_PEPTIDE_STATIC),
    "protnterm": (N_TERMINAL_PROTEIN_SYMBOL, ModificationType.PROTEIN_TERMINUS_STATIC),
    "protcterm": (C_TERMINAL_PROTEIN_SYMBOL, ModificationType.PROTEIN_TERMINUS_STATIC),
}


@dataclass
class MsgfModSpec:
    """One parsed StaticMod, DynamicMod or CustomAA line."""
    name: str
    mass_text: str
    mass: float
    residues: str
    kind: str        # fix, opt or custom
    position: str


def _mod_spec_from_line(data_line: str) -> str:
    """Definition part of a mod line, or "" when the line defines no mod."""
    for tag in (PARAM_TAG_MOD_STATIC, PARAM_TAG_MOD_DYNAMIC, PARAM_TAG_CUSTOM_AA):
        if data_line.lower().startswith(tag.lower()):
            key, value = parse_key_value_setting(data_line, '=', '#')
            if key.lower() != tag.lower() or not value or value.lower() == "none":
                return ""
            return value

    # MSGFPlus_Mods.txt style
    comment_index = data_line.find('#')
    no_spaces = (data_line[:comment_index] if comment_index > 0 else data_line).replace(" ", "")
    if any(marker in no_spaces for marker in (",opt,", ",fix,", ",custom,")):
        return no_spaces

    return ""


def _parse_mod_spec(mod_spec: str, message_log: MessageLog) -> Optional[MsgfModSpec]:
    parts = [part.strip() for part in mod_spec.split(',')]
    if len(parts) < MIN_MOD_SPEC_PARTS:
        return None

    mass_text = parts[0]
    try:
        mass = float(mass_text)
    except ValueError:
        try:
            mass = compute_formula_mass(mass_text)
        except ValueError as err:
            message_log.error(str(err))
            return None

    kind = parts[2].lower()
    if kind not in ("opt", "fix", "custom"):
        message_log.warning(
            f"Unrecognized Mod Type {parts[2]} in the MS-GF+ parameter file; "
            f"should be 'opt', 'fix', or 'custom'; will assume 'opt'"
        )
        kind = "opt"

    return MsgfModSpec(parts[4], mass_text, mass, parts[1], kind, parts[3])


def read_msgf_mod_specs(param_file_path: Union[str, Path], message_log: MessageLog) -> List[MsgfModSpec]:
    """Every modification and custom amino acid line of a parameter file.

    Lines with fewer than five fields are skipped; a formula that cannot be
    parsed is logged as an error and its line is skipped.
    """
    mod_specs = []
    unnamed_mod_count = 0
    with open(param_file_path, encoding='utf-8', errors='replace') as f:
        for line in f:
            data_line = line.strip()
            if not data_line or data_line.startswith('#'):
                continue

            mod_spec = _mod_spec_from_line(data_line)
            if not mod_spec:
                continue

            if '=' in mod_spec:
                message_log.error(
                    f"Mod definition '{mod_spec}' contains an unknown keyword before the equals sign; "
                    f"see parameter file {Path(param_file_path).name}"
                )
                continue

            mod_info = _parse_mod_spec(mod_spec, message_log)
            if mod_info is None:
                continue

            if not mod_info.name:
                unnamed_mod_count += 1
                mod_info.name = f"UnnamedMod{unnamed_mod_count}"
            mod_specs.append(mod_info)

    return mod_specs


def mod_spec_to_definition(mod_info: MsgfModSpec, message_log: MessageLog) -> ModificationDefinition:
    """ModificationDefinition for a fix or opt line.

    Terminal static mods limited to specific residues are stored as dynamic
    mods, since static terminal mods apply to every residue.
    """
    mod_type = ModificationType.STATIC if mod_info.kind == "fix" else ModificationType.DYNAMIC
    target_residues = mod_info.residues

    position = mod_info.position.lower().replace("-", "")
    if position in _TERMINAL_POSITIONS:
        terminus_symbol, terminal_static_type = _TERMINAL_POSITIONS[position]
        if mod_type == ModificationType.STATIC:
            mod_type = terminal_static_type if mod_info.residues == "*" else ModificationType.DYNAMIC
        target_residues = terminus_symbol
    elif position != "any":
        message_log.warning(
            f"Unrecognized Mod Position {mod_info.position} in the MS-GF+ parameter file; "
            f"should be 'any', 'N-term', 'C-term', 'Prot-N-term', or 'Prot-C-term'"
        )

    if target_residues == "*":
        target_residues = ""

    return ModificationDefinition(
        mass_correction_tag=mod_info.name,
        mass=mod_info.mass,
        target_residues=target_residues,
        mod_type=mod_type,
        mass_as_text=mod_info.mass_text,
    )


def extract_msgf_mods(
    param_file_path: Union[str, Path],
    message_log: MessageLog,
) -> Tuple[List[ModificationDefinition], Dict[str, float]]:
    """Modification definitions and custom amino acid masses of a parameter file.

    Returns
    -------
    modifications : List[ModificationDefinition]
        StaticMod and DynamicMod entries
    custom_amino_acids : Dict[str, float]
        Residue mass of each CustomAA symbol
    """
    modifications = []
    custom_amino_acids = {}

    for mod_info in read_msgf_mod_specs(param_file_path, message_log):
        if mod_info.kind == "custom":
            if not mod_info.residues:
                message_log.warning(f"Custom amino acid {mod_info.name} has no symbol; ignoring it")
                continue
            custom_amino_acids[mod_info.residues[0].upper()] = mod_info.mass
        else:
            modifications.append(mod_spec_to_definition(mod_info, message_log))

    logger.debug(
        f"Found {len(modifications)} modifications and {len(custom_amino_acids)} custom amino acids "
        f"in {Path(param_file_path).name}"
    )
    return modifications, custom_amino_acids
