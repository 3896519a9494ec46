"""Tests for PDBParser: record scanning, residue assembly, glycine repair, secondary structures."""

import gzip
import io
from pathlib import Path

import numpy as np
import pytest

from conftest import atom_line, build_pdb, header_line, helix_line, residue_lines, sheet_line
from molgraph.exceptions import ParseCancelledError, PDBParseError
from molgraph.structure.model import AminoAcid, ElementTag, MolecularModel, StructureType
from molgraph.structure.parser import ATOM_DISTANCE_FACTOR, PDBParser, glycine_cbeta_position


class TestGlycineCbeta:
    def test_exact_vector(self):
        n = np.array([0.0, 0.0, 0.0])
        ca = np.array([1.0, 0.0, 0.0])
        c = np.array([1.0, 1.0, 0.0])
        cb = glycine_cbeta_position(n, ca, c)
        # cross(N - CA, C - CA) = cross((-1, 0, 0), (0, 1, 0)) = (0, 0, -1)
        assert cb.tolist() == [1.0, 0.0, -ATOM_DISTANCE_FACTOR]

    def test_collinear_raises(self):
        with pytest.raises(ValueError):
            glycine_cbeta_position(np.zeros(3), np.array([1.0, 0, 0]), np.array([2.0, 0, 0]))

    def test_parsed_glycine_gets_cbeta(self):
        f = ATOM_DISTANCE_FACTOR
        text = "\n".join([
            atom_line(1, "N", "GLY", 1, 0.0, 0.0, 0.0),
            atom_line(2, "CA", "GLY", 1, 1.0 / f, 0.0, 0.0),
            atom_line(3, "C", "GLY", 1, 1.0 / f, 1.0 / f, 0.0),
            atom_line(4, "O", "GLY", 1, 1.0 / f, 2.0 / f, 0.0),
            "TER",
        ])
        model = PDBParser().parse(io.StringIO(text))
        gly = model.residues[0]
        assert gly.amino_acid is AminoAcid.GLY
        assert gly.ca.coords == pytest.approx((1.0, 0.0, 0.0))
        assert gly.cb is not None
        assert gly.cb.coords == pytest.approx((1.0, 0.0, -f))
        assert gly.cb.label == ""
        assert gly.cb.residue is gly
        assert model.has_node(gly.cb)
        assert model.node_count() == 5

    def test_glycine_missing_backbone_left_without_cbeta(self):
        text = atom_line(1, "CA", "GLY", 1, 1.0, 0.0, 0.0) + "\n"
        model = PDBParser().parse(io.StringIO(text))
        assert model.residues[0].cb is None
        assert model.node_count() == 1


class TestPDBParser:
    def test_header(self, sample_pdb: Path):
        model = PDBParser().parse(sample_pdb)
        assert isinstance(model, MolecularModel)
        assert model.title == "TEST PROTEIN"
        assert model.code == "1TST"

    def test_residues(self, sample_pdb: Path):
        model = PDBParser().parse(sample_pdb)
        assert [r.seq_num for r in model.residues] == [10, 11, 12, 13, 14, 15]
        assert model.sequence == "AGLSVK"
        # 5 residues with CB + glycine with 4 atoms and a synthesized CB
        assert model.node_count() == 30
        assert model.edge_count() == 0

    def test_atoms_scaled_and_relabelled(self, sample_pdb: Path):
        model = PDBParser().parse(sample_pdb)
        ala = model.residues[0]
        assert ala.ca.coords == pytest.approx((10.5 * 20, 0.8 * 20, 0.0))
        assert ala.ca.label == "Residue: 10, amino acid: ALA"
        assert ala.ca.element is ElementTag.CA
        assert all(a.residue is ala for a in ala.atoms)

    def test_atom_order_follows_residues(self, sample_pdb: Path):
        model = PDBParser().parse(sample_pdb)
        first = model.residues[0]
        assert list(model.atoms[:5]) == [first.n, first.ca, first.cb, first.c, first.o]

    def test_secondary_structures(self, sample_pdb: Path):
        model = PDBParser().parse(sample_pdb)
        types = [s.type for s in model.secondary_structures]
        assert types == [StructureType.HELIX, StructureType.SHEET]
        helix, sheet = model.secondary_structures
        assert [r.seq_num for r in helix.residues] == [10, 11, 12]
        assert [r.seq_num for r in sheet.residues] == [13, 14]
        assert model.secondary_structure_sequence == "HHHEE "

    def test_helix_range_length(self):
        residues = [("ALA", i) for i in range(10, 16)]
        text = build_pdb(residues=residues, helices=((10, 15),), sheets=())
        model = PDBParser().parse(io.StringIO(text))
        assert len(model.secondary_structures) == 1
        helix = model.secondary_structures[0]
        assert helix.type is StructureType.HELIX
        assert helix.length() == 6

    def test_range_without_residues_not_committed(self):
        text = build_pdb(helices=((100, 110),), sheets=())
        model = PDBParser().parse(io.StringIO(text))
        assert model.secondary_structures == []

    def test_first_matching_range_wins(self):
        text = build_pdb(helices=((10, 12),), sheets=((12, 13),))
        model = PDBParser().parse(io.StringIO(text))
        res12 = model.residues[2]
        assert res12.secondary_structure_code == "H"
        assert res12 in model.secondary_structures[1].residues

    def test_insertion_code_starts_new_residue(self):
        lines = residue_lines(1, "ALA", 52) + residue_lines(6, "SER", 52, icode="A")
        model = PDBParser().parse(io.StringIO("\n".join(lines) + "\n"))
        assert [(r.seq_num, r.insertion_code, r.name) for r in model.residues] == [
            (52, "", "ALA"),
            (52, "A", "SER"),
        ]
        assert model.node_count() == 10
        ala, ser = model.residues
        assert ala.ca.label == "Residue: 52, amino acid: ALA"
        assert ser.ca.label == "Residue: 52A, amino acid: SER"
        assert all(a.residue is ser for a in ser.atoms)

    def test_insertion_code_residues_share_range(self):
        lines = [helix_line(52, 52)] + residue_lines(1, "ALA", 52) + residue_lines(6, "SER", 52, icode="A")
        model = PDBParser().parse(io.StringIO("\n".join(lines) + "\n"))
        assert model.secondary_structure_sequence == "HH"

    def test_side_chain_atoms_ignored(self):
        extra = [atom_line(500, "CG", "LYS", 15, 1.0, 1.0, 1.0)]
        model = PDBParser().parse(io.StringIO(build_pdb(extra=extra)))
        assert model.node_count() == 30

    def test_stops_at_ter(self, sample_pdb: Path):
        model = PDBParser().parse(sample_pdb)
        assert 99 not in [r.seq_num for r in model.residues]

    def test_gzip(self, tmp_path: Path):
        p = tmp_path / "pdb1tst.ent.gz"
        with gzip.open(p, "wt") as f:
            f.write(build_pdb())
        model = PDBParser().parse(p)
        assert model.code == "1TST"
        assert len(model.residues) == 6

    def test_backbone_bonds_opt_in(self, sample_pdb: Path):
        model = PDBParser(backbone_bonds=True).parse(sample_pdb)
        # 4 intra-residue bonds per residue + 5 peptide bonds
        assert model.edge_count() == 6 * 4 + 5

    def test_center_opt_in(self, sample_pdb: Path):
        model = PDBParser(center=True).parse(sample_pdb)
        assert model.coordinates().mean(axis=0) == pytest.approx([0.0, 0.0, 0.0], abs=1e-9)

    def test_parse_into_existing_model(self, sample_pdb: Path):
        model = MolecularModel(title="old", code="OLD0")
        PDBParser().parse(sample_pdb, model=model)
        PDBParser().parse(sample_pdb, model=model)
        assert model.code == "1TST"
        assert len(model.residues) == 6

    def test_extensions(self):
        exts = PDBParser.extensions()
        assert ".pdb" in exts
        assert ".ent.gz" in exts


class TestPDBParserErrors:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(PDBParseError):
            PDBParser().parse(tmp_path / "missing.pdb")

    def test_no_atoms(self):
        text = header_line("EMPTY", "0ABC") + "\nTER\n"
        with pytest.raises(PDBParseError, match="No atoms"):
            PDBParser().parse(io.StringIO(text))

    def test_only_side_chain_atoms(self):
        text = atom_line(1, "CG", "LYS", 1, 0.0, 0.0, 0.0) + "\n"
        with pytest.raises(PDBParseError):
            PDBParser().parse(io.StringIO(text))

    def test_malformed_coordinate_is_fatal(self):
        lines = residue_lines(1, "ALA", 1)
        bad = lines[1][:30] + "   abcde" + lines[1][38:]
        text = "\n".join([lines[0], bad] + lines[2:])
        with pytest.raises(PDBParseError, match="line 2"):
            PDBParser().parse(io.StringIO(text))

    def test_unknown_residue_is_fatal(self):
        text = atom_line(1, "CA", "MSE", 1, 0.0, 0.0, 0.0) + "\n"
        with pytest.raises(PDBParseError, match="MSE"):
            PDBParser().parse(io.StringIO(text))

    def test_malformed_helix_is_skipped(self):
        bad_helix = helix_line(10, 12)[:21] + "  xx" + helix_line(10, 12)[25:]
        text = build_pdb(helices=(), sheets=()).replace("REMARK", bad_helix + "\nREMARK", 1)
        model = PDBParser().parse(io.StringIO(text))
        assert model.secondary_structures == []
        assert len(model.residues) == 6

    def test_sheet_columns(self):
        line = sheet_line(13, 14)
        assert line[22:26].strip() == "13"
        assert line[33:37].strip() == "14"


class TestProgress:
    def test_called_once_per_line(self, sample_pdb: Path):
        seen = []
        PDBParser(progress=seen.append).parse(sample_pdb)
        assert seen[0] == 1
        assert seen == list(range(1, len(seen) + 1))
        # scanning stops at TER, the trailing ATOM and END lines are not visited
        text_lines = sample_pdb.read_text().splitlines()
        assert len(seen) == text_lines.index("TER") + 1

    def test_cancel(self, sample_pdb: Path):
        with pytest.raises(ParseCancelledError):
            PDBParser(progress=lambda n: n < 3).parse(sample_pdb)
