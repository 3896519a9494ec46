from pathlib import Path

import pytest


def atom_line(
    serial: int, name: str, res_name: str, res_seq: int, x: float, y: float, z: float, icode: str = " "
) -> str:
    return (
        f"ATOM  {serial:5d} {name:<4s} {res_name:>3s} A{res_seq:4d}{icode:1s}   "
        f"{x:8.3f}{y:8.3f}{z:8.3f}  1.00  0.00           {name[0]}"
    )


def helix_line(start: int, end: int) -> str:
    return f"HELIX  {1:3d} {'H1':>3s} {'ALA':>3s} A {start:4d}  {'LYS':>3s} A {end:4d}  1"


def sheet_line(start: int, end: int) -> str:
    return f"SHEET  {1:3d} {'S1':>3s}{2:2d} {'SER':>3s} A{start:4d}  {'VAL':>3s} A{end:4d}  0"


def header_line(title: str, code: str) -> str:
    return f"HEADER    {title:<40s}{'01-JAN-00':9s}   {code:4s}"


def residue_lines(serial: int, res_name: str, res_seq: int, icode: str = " ") -> list[str]:
    """Backbone atoms offset along x by the sequence number, plus CB unless glycine."""
    i = float(res_seq)
    atoms = [
        ("N", i, 0.0, 0.0),
        ("CA", i + 0.5, 0.8, 0.0),
        ("C", i + 1.0, 0.0, 0.3),
        ("O", i + 1.0, -1.0, 0.3),
    ]
    if res_name != "GLY":
        atoms.insert(2, ("CB", i + 0.5, 1.5, -0.5))
    return [atom_line(serial + k, name, res_name, res_seq, x, y, z, icode) for k, (name, x, y, z) in enumerate(atoms)]


SAMPLE_RESIDUES = [("ALA", 10), ("GLY", 11), ("LEU", 12), ("SER", 13), ("VAL", 14), ("LYS", 15)]


def build_pdb(residues=SAMPLE_RESIDUES, helices=((10, 12),), sheets=((13, 14),), extra=()) -> str:
    lines = [header_line("TEST PROTEIN", "1TST")]
    lines += [helix_line(s, e) for s, e in helices]
    lines += [sheet_line(s, e) for s, e in sheets]
    lines.append("REMARK   2 RESOLUTION.    1.50 ANGSTROMS.")
    serial = 1
    for res_name, res_seq in residues:
        block = residue_lines(serial, res_name, res_seq)
        lines += block
        serial += len(block)
    lines += list(extra)
    lines.append("TER")
    lines.append(atom_line(999, "CA", "ALA", 99, 50.0, 50.0, 50.0))
    lines.append("END")
    return "\n".join(lines) + "\n"


@pytest.fixture
def sample_pdb(tmp_path: Path) -> Path:
    p = tmp_path / "1tst.pdb"
    p.write_text(build_pdb())
    return p
