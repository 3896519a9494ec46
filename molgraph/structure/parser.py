"""Legacy PDB format parser for protein backbones.

Reads HEADER, HELIX, SHEET and ATOM records up to the first TER and builds a
MolecularModel. Only the backbone atoms N, CA, C, O and the side-chain CB
are kept; coordinates are multiplied by ATOM_DISTANCE_FACTOR so that one
Angstrom becomes twenty display units.

Parsing is two-pass: the line scan only collects flat lists of atoms and
helix/sheet ranges, and residues and secondary structures are assembled once
the whole atom stream is known. Any malformed ATOM field aborts the parse.
"""

from __future__ import annotations

import gzip
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, TextIO, Union

import numpy as np

from molgraph.core.logging_utils import get_logger
from molgraph.exceptions import ParseCancelledError, PDBParseError
from molgraph.structure.model import (
    AminoAcid,
    Atom,
    ElementTag,
    MolecularModel,
    Residue,
    SecondaryStructure,
    StructureType,
)

logger = get_logger(__name__)

ATOM_DISTANCE_FACTOR = 20.0

_KEPT_ATOM_NAMES = {tag.value: tag for tag in ElementTag}

Source = Union[str, Path, TextIO, Iterable[str]]
ProgressCallback = Callable[[int], Optional[bool]]


@dataclass
class _ScanResult:
    atoms: list[tuple[int, Atom]] = field(default_factory=list)
    helices: list[tuple[int, int]] = field(default_factory=list)
    sheets: list[tuple[int, int]] = field(default_factory=list)


def glycine_cbeta_position(
    n: np.ndarray,
    ca: np.ndarray,
    c: np.ndarray,
    scale: float = ATOM_DISTANCE_FACTOR,
) -> np.ndarray:
    """Place a virtual CB along the normal of the N-CA-C plane.

    Returns ``CA + normalize(cross(N - CA, C - CA)) * scale``.
    """
    normal = np.cross(n - ca, c - ca)
    length = np.linalg.norm(normal)
    if length == 0:
        raise ValueError("N, CA and C are collinear")
    return ca + normal / length * scale


class PDBParser:
    """Parse PDB-format text (.pdb, .ent, .ent.gz) into a MolecularModel.

    Usage::

        model = PDBParser().parse("1crn.pdb")
        print(model.code, model.sequence)
        print(model.secondary_structure_sequence)

    ``progress`` is called with the 1-based line number before each line is
    handled; returning ``False`` aborts with ParseCancelledError.
    """

    def __init__(
        self,
        center: bool = False,
        backbone_bonds: bool = False,
        progress: Optional[ProgressCallback] = None,
    ):
        self.center = center
        self.backbone_bonds = backbone_bonds
        self.progress = progress

    @staticmethod
    def extensions() -> list[str]:
        return [".pdb", ".ent", ".ent.gz"]

    def parse(self, source: Source, model: Optional[MolecularModel] = None) -> MolecularModel:
        if model is None:
            model = MolecularModel()
        model.reset()

        if isinstance(source, (str, Path)):
            path = Path(source)
            opener = gzip.open if path.suffix == ".gz" else open
            try:
                with opener(path, "rt", encoding="utf-8", errors="ignore") as f:
                    scan = self._scan(f, model)
            except OSError as e:
                raise PDBParseError(f"Cannot open PDB file {path}: {e}") from e
        else:
            scan = self._scan(source, model)

        if not scan.atoms:
            raise PDBParseError("No atoms were read from PDB input.")

        self._assemble_residues(model, scan.atoms)
        for start, end in scan.helices:
            self._assemble_secondary_structure(model, start, end, StructureType.HELIX)
        for start, end in scan.sheets:
            self._assemble_secondary_structure(model, start, end, StructureType.SHEET)

        if self.center:
            model.center()
        if self.backbone_bonds:
            model.connect_backbone()

        logger.info(
            "Parsed PDB %s: residues=%d atoms=%d secondary_structures=%d",
            model.code or "<unknown>", len(model.residues), model.node_count(),
            len(model.secondary_structures),
        )
        return model

    # -- pass 1: line scan ----------------------------------------------

    def _scan(self, lines: Iterable[str], model: MolecularModel) -> _ScanResult:
        scan = _ScanResult()
        for line_number, raw in enumerate(lines, start=1):
            if self.progress is not None and self.progress(line_number) is False:
                raise ParseCancelledError(f"Parsing cancelled at line {line_number}")
            line = raw.rstrip("\r\n")

            if line.startswith("HEADER"):
                model.title = line[10:50].strip()
                model.code = line[62:66].strip()
            elif line.startswith("HELIX"):
                self._add_range(scan.helices, line, line_number, line[21:25], line[33:37])
            elif line.startswith("SHEET"):
                self._add_range(scan.sheets, line, line_number, line[22:26], line[33:37])
            elif line.startswith("ATOM"):
                record = self._read_atom(line, line_number)
                if record is not None:
                    scan.atoms.append(record)
            elif line.startswith("TER"):
                break
        return scan

    @staticmethod
    def _add_range(
        ranges: list[tuple[int, int]],
        line: str,
        line_number: int,
        start: str,
        end: str,
    ) -> None:
        try:
            ranges.append((int(start), int(end)))
        except ValueError:
            logger.warning("Skipping secondary structure record at line %d: %r", line_number, line)

    @staticmethod
    def _read_atom(line: str, line_number: int) -> Optional[tuple[int, Atom]]:
        """Return (sequence number, atom) for a kept backbone atom.

        The temporary label is keyed on resSeq plus insertion code, so 52 and
        52A become separate residues.
        """
        element = _KEPT_ATOM_NAMES.get(line[12:16].strip())
        if element is None:
            return None
        try:
            x = float(line[30:38]) * ATOM_DISTANCE_FACTOR
            y = float(line[38:46]) * ATOM_DISTANCE_FACTOR
            z = float(line[46:54]) * ATOM_DISTANCE_FACTOR
            res_seq = int(line[22:26])
        except ValueError as e:
            raise PDBParseError(f"Malformed ATOM record at line {line_number}: {line!r}") from e
        res_key = line[22:27].strip()
        res_name = line[17:20].strip()
        return res_seq, Atom(label=f"{res_key}${res_name}", element=element, x=x, y=y, z=z)

    # -- pass 2: assembly -----------------------------------------------

    def _assemble_residues(self, model: MolecularModel, atoms: list[tuple[int, Atom]]) -> None:
        current: Optional[Residue] = None
        current_key = None
        for seq_num, atom in atoms:
            res_key, res_name = atom.label.split("$", 1)
            if current is None or current_key != res_key:
                if current is not None:
                    self._close_residue(model, current)
                current = self._open_residue(seq_num, res_name)
                current.insertion_code = res_key[-1] if res_key[-1:].isalpha() else ""
                current_key = res_key
            current.set_atom(atom)
            atom.label = f"Residue: {res_key}, amino acid: {res_name}"
        if current is not None:
            self._close_residue(model, current)

    @staticmethod
    def _open_residue(seq_num: int, res_name: str) -> Residue:
        try:
            amino_acid = AminoAcid(res_name)
        except ValueError as e:
            raise PDBParseError(f"Unknown residue {res_name!r} at sequence number {seq_num}") from e
        return Residue(seq_num=seq_num, amino_acid=amino_acid)

    @staticmethod
    def _close_residue(model: MolecularModel, residue: Residue) -> None:
        if residue.amino_acid is AminoAcid.GLY and residue.cb is None:
            _add_glycine_cbeta(residue)
        model.add_residue(residue)

    @staticmethod
    def _assemble_secondary_structure(
        model: MolecularModel,
        start: int,
        end: int,
        structure_type: StructureType,
    ) -> None:
        structure = SecondaryStructure(type=structure_type)
        for res in model.residues:
            if start <= res.seq_num <= end:
                structure.add_residue(res)
                if res.secondary_structure is None:
                    res.secondary_structure = structure
        if structure.residues:
            model.add_secondary_structure(structure)


def _add_glycine_cbeta(residue: Residue) -> None:
    if residue.n is None or residue.ca is None or residue.c is None:
        logger.warning("Glycine %d lacks N, CA or C; no CB placed", residue.seq_num)
        return
    try:
        x, y, z = glycine_cbeta_position(residue.n.position, residue.ca.position, residue.c.position)
    except ValueError:
        logger.warning("Glycine %d has a collinear backbone; no CB placed", residue.seq_num)
        return
    residue.set_atom(Atom(label="", element=ElementTag.CB, x=float(x), y=float(y), z=float(z)))
