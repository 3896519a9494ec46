"""Protein backbone model built on the generic graph container.

Hierarchy:
    MolecularModel (Graph[Atom])
    ├── title, code (HEADER fields)
    ├── atoms / bonds: graph nodes and edges
    ├── residues: list[Residue]
    │   └── N, CA, CB, C, O atom slots
    └── secondary_structures: list[SecondaryStructure]
        └── residues (helix or sheet range)
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np
import pandas as pd

from molgraph.graph.base import Edge, Graph, Node


# ======================================================================
# Vocabularies
# ======================================================================

class ElementTag(Enum):
    """Backbone atom kinds kept by the parser, valued by their PDB atom name."""

    N = "N"
    CA = "CA"
    CB = "CB"
    C = "C"
    O = "O"

    @property
    def radius(self) -> float:
        return _ELEMENT_RADIUS[self]

    @property
    def color(self) -> str:
        return _ELEMENT_COLOR[self]


_ELEMENT_RADIUS = {
    ElementTag.N: 1.55,
    ElementTag.CA: 1.7,
    ElementTag.CB: 1.7,
    ElementTag.C: 1.7,
    ElementTag.O: 1.52,
}

_ELEMENT_COLOR = {
    ElementTag.N: "#3050F8",
    ElementTag.CA: "#909090",
    ElementTag.CB: "#C8C8C8",
    ElementTag.C: "#404040",
    ElementTag.O: "#FF0D0D",
}

THREE_TO_ONE = {
    "ALA": "A", "ARG": "R", "ASN": "N", "ASP": "D", "CYS": "C",
    "GLN": "Q", "GLU": "E", "GLY": "G", "HIS": "H", "ILE": "I",
    "LEU": "L", "LYS": "K", "MET": "M", "PHE": "F", "PRO": "P",
    "SER": "S", "THR": "T", "TRP": "W", "TYR": "Y", "VAL": "V",
}


class AminoAcid(Enum):
    ALA = "ALA"
    ARG = "ARG"
    ASN = "ASN"
    ASP = "ASP"
    CYS = "CYS"
    GLN = "GLN"
    GLU = "GLU"
    GLY = "GLY"
    HIS = "HIS"
    ILE = "ILE"
    LEU = "LEU"
    LYS = "LYS"
    MET = "MET"
    PHE = "PHE"
    PRO = "PRO"
    SER = "SER"
    THR = "THR"
    TRP = "TRP"
    TYR = "TYR"
    VAL = "VAL"

    @property
    def one_letter(self) -> str:
        return THREE_TO_ONE[self.value]


class StructureType(Enum):
    HELIX = "helix"
    SHEET = "sheet"

    @property
    def one_letter(self) -> str:
        return "H" if self is StructureType.HELIX else "E"


# ======================================================================
# Atoms and bonds
# ======================================================================

@dataclass(eq=False, kw_only=True)
class Atom(Node):
    """Backbone atom with display coordinates.

    The owning residue is held through a weak reference; an atom never keeps
    its residue alive.
    """

    element: ElementTag
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    _residue_ref: Optional[weakref.ref] = field(default=None, init=False, repr=False)

    @property
    def residue(self) -> Optional["Residue"]:
        return self._residue_ref() if self._residue_ref is not None else None

    @residue.setter
    def residue(self, residue: Optional["Residue"]) -> None:
        self._residue_ref = weakref.ref(residue) if residue is not None else None

    @property
    def coords(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @property
    def radius(self) -> float:
        return self.element.radius

    @property
    def color(self) -> str:
        return self.element.color


class Bond(Edge):
    """Edge between two atoms."""

    def __init__(
        self,
        source: Atom,
        target: Atom,
        label: Optional[str] = None,
        weight: Optional[float] = None,
        bond_type: str = "covalent",
    ):
        super().__init__(source, target, label=label, weight=weight)
        self.bond_type = bond_type


# ======================================================================
# Residues and secondary structure
# ======================================================================

_SLOT_BY_ELEMENT = {
    ElementTag.N: "n",
    ElementTag.CA: "ca",
    ElementTag.CB: "cb",
    ElementTag.C: "c",
    ElementTag.O: "o",
}


@dataclass(eq=False)
class Residue:
    """One amino acid with up to five backbone atom slots."""

    seq_num: int
    amino_acid: AminoAcid
    n: Optional[Atom] = None
    ca: Optional[Atom] = None
    cb: Optional[Atom] = None
    c: Optional[Atom] = None
    o: Optional[Atom] = None
    insertion_code: str = ""
    secondary_structure: Optional["SecondaryStructure"] = field(default=None, repr=False)

    @property
    def name(self) -> str:
        return self.amino_acid.value

    @property
    def one_letter(self) -> str:
        return self.amino_acid.one_letter

    @property
    def secondary_structure_code(self) -> str:
        if self.secondary_structure is None:
            return " "
        return self.secondary_structure.type.one_letter

    @property
    def atoms(self) -> list[Atom]:
        """Filled slots in N, CA, CB, C, O order."""
        slots = (self.n, self.ca, self.cb, self.c, self.o)
        return [a for a in slots if a is not None]

    def get_atom(self, element: ElementTag) -> Optional[Atom]:
        return getattr(self, _SLOT_BY_ELEMENT[element])

    def set_atom(self, atom: Atom) -> None:
        """Place an atom into the slot matching its element and point it back here."""
        setattr(self, _SLOT_BY_ELEMENT[atom.element], atom)
        atom.residue = self


@dataclass(eq=False)
class SecondaryStructure:
    """Contiguous run of residues forming a helix or a sheet strand."""

    type: StructureType
    residues: list[Residue] = field(default_factory=list)

    def add_residue(self, residue: Residue) -> None:
        self.residues.append(residue)

    def length(self) -> int:
        return len(self.residues)

    def __len__(self) -> int:
        return len(self.residues)

    @property
    def first_residue(self) -> Residue:
        return self.residues[0]

    @property
    def last_residue(self) -> Residue:
        return self.residues[-1]


# ======================================================================
# Model
# ======================================================================

class MolecularModel(Graph[Atom]):
    """Atoms and bonds of a protein plus its residues and secondary structures."""

    edge_type = Bond

    def __init__(self, title: str = "", code: str = ""):
        super().__init__()
        self.title = title
        self.code = code
        self.residues: list[Residue] = []
        self.secondary_structures: list[SecondaryStructure] = []

    @property
    def atoms(self) -> tuple[Atom, ...]:
        return self.nodes

    @property
    def bonds(self) -> tuple[Edge, ...]:
        return self.edges

    def add_residue(self, residue: Residue) -> None:
        """Append a completed residue and register its atoms as graph nodes."""
        self.residues.append(residue)
        for atom in residue.atoms:
            self.add_node(atom)

    def add_secondary_structure(self, structure: SecondaryStructure) -> None:
        self.secondary_structures.append(structure)

    def reset(self) -> None:
        super().reset()
        self.residues.clear()
        self.secondary_structures.clear()
        self.title = ""
        self.code = ""

    # -- derived views --------------------------------------------------

    @property
    def sequence(self) -> str:
        return "".join(r.one_letter for r in self.residues)

    @property
    def secondary_structure_sequence(self) -> str:
        return "".join(r.secondary_structure_code for r in self.residues)

    def secondary_structure_content(self) -> dict[str, float]:
        """Fraction of residues in helices, sheets, and neither."""
        total = len(self.residues)
        if total == 0:
            return {"helix": 0.0, "sheet": 0.0, "coil": 0.0}
        codes = self.secondary_structure_sequence
        helix = codes.count("H") / total
        sheet = codes.count("E") / total
        coil = codes.count(" ") / total
        return {"helix": helix, "sheet": sheet, "coil": coil}

    def coordinates(self) -> np.ndarray:
        """Atom coordinates in node order, shape (n_atoms, 3)."""
        if not self.node_count():
            return np.zeros((0, 3))
        return np.array([a.coords for a in self.atoms], dtype=float)

    # -- geometry and bonding -------------------------------------------

    def center(self) -> tuple[float, float, float]:
        """Translate all atoms so that their centroid is the origin.

        Returns the centroid that was subtracted.
        """
        coords = self.coordinates()
        if len(coords) == 0:
            return (0.0, 0.0, 0.0)
        cx, cy, cz = coords.mean(axis=0)
        for atom in self.atoms:
            atom.x -= cx
            atom.y -= cy
            atom.z -= cz
        return (float(cx), float(cy), float(cz))

    def connect_backbone(self) -> int:
        """Bond backbone atoms: C(i-1)-N(i), N-CA, CA-CB, CA-C and C-O.

        Missing atoms and already present bonds are skipped. Returns the number
        of bonds created.
        """
        created = 0
        previous: Optional[Residue] = None
        for res in self.residues:
            pairs = [(res.n, res.ca), (res.ca, res.cb), (res.ca, res.c), (res.c, res.o)]
            if previous is not None:
                pairs.insert(0, (previous.c, res.n))
            for a, b in pairs:
                if a is None or b is None or self.has_edge(a, b):
                    continue
                self.connect(a, b)
                created += 1
            previous = res
        return created

    # -- export ---------------------------------------------------------

    def residue_table(self) -> pd.DataFrame:
        rows = []
        for r in self.residues:
            ca = r.ca
            rows.append({
                "seq_num": r.seq_num,
                "name": r.name,
                "one_letter": r.one_letter,
                "secondary_structure": r.secondary_structure_code.strip() or None,
                "atom_count": len(r.atoms),
                "ca_x": ca.x if ca else None,
                "ca_y": ca.y if ca else None,
                "ca_z": ca.z if ca else None,
            })
        return pd.DataFrame(rows, columns=[
            "seq_num", "name", "one_letter", "secondary_structure",
            "atom_count", "ca_x", "ca_y", "ca_z",
        ])

    def to_dict(self) -> dict:
        content = self.secondary_structure_content()
        return {
            "code": self.code,
            "title": self.title,
            "residue_count": len(self.residues),
            "atom_count": self.node_count(),
            "bond_count": self.edge_count(),
            "helix_count": sum(1 for s in self.secondary_structures if s.type is StructureType.HELIX),
            "sheet_count": sum(1 for s in self.secondary_structures if s.type is StructureType.SHEET),
            "helix_fraction": content["helix"],
            "sheet_fraction": content["sheet"],
            "sequence": self.sequence,
        }

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self.code} "
            f"residues={len(self.residues)} atoms={self.node_count()} "
            f"bonds={self.edge_count()}>"
        )
