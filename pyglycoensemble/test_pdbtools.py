#!/usr/bin/env python3

import pytest
import numpy as np

from pyglycoensemble.pdbtools import *
from pyglycoensemble.selection import Chain, Standard, AtomName
from pyglycoensemble.errors import EmptySelectionError
from pytest import approx

def residues(P):
    return [(d['chain'], d['resi'], d['icode']) for d in P.listdict]

def test_parse(make_model):
    P = PDB(make_model({'A': (5, 2)}, glycans=[100]))

    assert len(P) == 12
    assert P.chains == ['A', 'G']
    assert P.resids == [5, 6, 100]

    ca = P.listdict[1]
    assert ca['name'] == 'CA'
    assert ca['resn'] == 'ALA'
    assert ca['num'] == 2
    assert not ca['het']

    nag = P.listdict[-1]
    assert nag['resn'] == 'NAG'
    assert nag['het']

def test_parse_skips_metadata():
    P = PDB('CRYST1    1.000    1.000    1.000  90.00  90.00  90.00 P 1\n'
            'REMARK nothing to see\n'
            + FormatAtom(1, 2, 3, aname='CA', rname='GLY', chain='A') + '\n'
            + 'TER\nEND\n')
    assert len(P) == 1
    assert P.GetCoords() == approx(np.array([[1, 2, 3]]))

def test_missing_path():
    with pytest.raises(FileNotFoundError):
        PDB('not_a_model.pdb')

def test_path(tmp_path, make_model):
    path = tmp_path / 'pm.pdb.B99990001.pdb'
    path.write_text(make_model({'A': (1, 3)}))

    for P in [PDB(path), PDB(str(path))]:
        assert len(P) == 15
        assert P.path == str(path)

def test_renumber():
    lines = [
            FormatAtom(0, 0, 0, aname='CA', rname='ALA', rnum=5, chain='A'),
            FormatAtom(0, 0, 0, aname='CB', rname='ALA', rnum=5, chain='A'),
            FormatAtom(0, 0, 0, aname='CA', rname='GLY', rnum=6, chain='A'),
            FormatAtom(0, 0, 0, aname='CA', rname='GLY', rnum=6, chain='A', icode='A'),
            FormatAtom(0, 0, 0, aname='CA', rname='SER', rnum=5, chain='B'),
    ]
    P = PDB('\n'.join(lines))
    P.Renumber(10)

    assert residues(P) == [
            ('A', 10, ' '),
            ('A', 10, ' '),
            ('A', 11, ' '),
            ('A', 12, ' '),
            ('B', 13, ' '),
    ]
    assert [d['line'][22:27] for d in P.listdict] == ['  10 ', '  10 ', '  11 ', '  12 ', '  13 ']
    assert P.resids == [10, 11, 12, 13]

    # The records themselves must parse back to the new numbers.
    assert residues(PDB(str(P))) == residues(P)

def test_reatom(make_model):
    P = PDB(make_model({'A': (1, 2)}))
    P = P.Select(AtomName('CA'))
    assert [d['num'] for d in P.listdict] == [2, 7]

    P.Reatom(1)
    assert [d['num'] for d in P.listdict] == [1, 2]
    assert [int(d['line'][6:11]) for d in P.listdict] == [1, 2]

def test_reatom_past_max_serial(make_model):
    P = PDB(make_model({'A': (1, 1)}))
    P.Reatom(99998)

    assert [d['num'] for d in P.listdict] == [99998, 99999, 100000, 100001, 100002]
    assert [d['line'][6:11] for d in P.listdict] == ['99998', '99999', '*****', '*****', '*****']

    # The overflowed serials must not shift the other columns, and must parse.
    Q = PDB(str(P))
    assert [d['num'] for d in Q.listdict] == [99998, 99999, None, None, None]
    assert [d['name'] for d in Q.listdict] == ['N', 'CA', 'C', 'O', 'CB']
    assert residues(Q) == residues(P)
    assert Q.GetCoords() == approx(P.GetCoords())

def test_select(make_model):
    P = PDB(make_model({'A': (1, 2), 'B': (1, 2)}))

    A = P.Select(Chain('A'))
    assert len(A) == 10
    assert A.chains == ['A']

    # Selections are copies.
    A.Renumber(50)
    assert P.resids == [1, 2]

    assert len(P.Select(Chain('Z'))) == 0

def test_getitem(make_model):
    P = PDB(make_model({'A': (1, 2)}))
    assert len(P[Chain('A') & Standard()]) == 10

    with pytest.raises(EmptySelectionError, match="Chain"):
        P[Chain('Z')]

def test_concatenate(make_model):
    A = PDB(make_model({'A': (1, 2)}))
    B = PDB(make_model({'B': (1, 3)}))

    AB = Concatenate([A, B])
    assert len(AB) == 25
    assert AB.chains == ['A', 'B']

def test_transform(make_model):
    P = PDB(make_model({'A': (1, 3)}))
    xyz = P.GetCoords()

    R = np.array([[0, 1, 0], [-1, 0, 0], [0, 0, 1]], dtype=float)
    T = np.array([1.0, -2.0, 3.0])
    P.Transform(R, T)

    assert P.GetCoords() == approx(xyz @ R + T)
    assert PDB(str(P)).GetCoords() == approx(xyz @ R + T, abs=1e-3)

@pytest.mark.parametrize(
        'text, expected', [
            ('', 0),
            ('MODEL        1\n{a}ENDMDL\nMODEL        2\n{a}{a}ENDMDL\nEND\n', [1, 2]),
            ('{a}END\n{a}{a}END\n', [1, 2]),
            ('{a}{a}{a}', [3]),
            ('MODEL        1\nENDMDL\nMODEL        2\n{a}ENDMDL\n', [1]),
        ],
)
def test_split_models(text, expected):
    atom = FormatAtom(0, 0, 0, aname='CA', rname='ALA', chain='A') + '\n'
    models = split_models(text.format(a=atom))
    assert [len(PDB(x)) for x in models] == (expected or [])

def test_write_read_models(tmp_path, make_model):
    frames = [PDB(make_model({'A': (1, 2)}, seed=i, noise=0.5)) for i in range(3)]
    path = tmp_path / 'output.pdb'

    WriteModels(path, frames, model_numbers=[1, 2, 4])

    text = path.read_text()
    assert text.count('ENDMDL') == 3
    assert text.splitlines()[0] == 'MODEL        1'
    assert 'MODEL        4' in text
    assert text.endswith('END\n')
    assert [x.name for x in tmp_path.iterdir()] == ['output.pdb']

    models = ReadModels(path)
    assert len(models) == 3
    for expected, actual in zip(frames, models):
        assert str(actual) == str(expected)
