"""molgraph.structure: protein backbone model and PDB parser.

Architecture:
    - model.py: Atom, Bond, Residue, SecondaryStructure, MolecularModel
    - parser.py: PDBParser (HEADER / HELIX / SHEET / ATOM records up to TER)

Usage::

    from molgraph.structure import PDBParser

    model = PDBParser(backbone_bonds=True).parse("1crn.pdb")
    for res in model.residues:
        print(res.seq_num, res.one_letter, res.secondary_structure_code)
"""

from molgraph.structure.model import (
    AminoAcid,
    Atom,
    Bond,
    ElementTag,
    MolecularModel,
    Residue,
    SecondaryStructure,
    StructureType,
)
from molgraph.structure.parser import ATOM_DISTANCE_FACTOR, PDBParser, glycine_cbeta_position

__all__ = [
    "ATOM_DISTANCE_FACTOR",
    "AminoAcid",
    "Atom",
    "Bond",
    "ElementTag",
    "MolecularModel",
    "PDBParser",
    "Residue",
    "SecondaryStructure",
    "StructureType",
    "glycine_cbeta_position",
]
