import numpy as np
from pytest import fixture
from pyglycoensemble.pdbtools import FormatAtom

BACKBONE_ATOMS = (('N', 'N'), ('CA', 'C'), ('C', 'C'), ('O', 'O'), ('CB', 'C'))
GLYCAN_ATOMS = (('C1', 'C'), ('O5', 'O'))

def model_text(chains, glycans=(), glycan_chain='G', skip_chains=(), noise=0.0, seed=0):
    """PDB text of a synthetic glycoprotein.

    chains        dict of chain -> (first residue number, number of ALA residues)
    glycans       residue numbers of the NAG (HETATM) residues
    skip_chains   chains to leave out, e.g. to make a fragment go missing
    noise         std. dev. of the gaussian noise added to every coordinate
    """
    rng = np.random.default_rng(seed)
    lines = []

    def add(aname, rname, rnum, chain, atype, elem):
        k = len([x for x in lines if x[:6] in ('ATOM  ', 'HETATM')])
        xyz = np.array([5 * np.cos(0.7 * k) + 0.3 * k, 4 * np.sin(1.3 * k), 2 * np.cos(k) + 0.1 * k])
        xyz = xyz + noise * rng.standard_normal(3)
        lines.append(FormatAtom(*xyz, aname=aname, rname=rname, rnum=rnum, anum=k + 1, elem=elem, atype=atype, chain=chain))

    for chain, (start, n) in chains.items():
        if chain in skip_chains: continue
        for resi in range(start, start + n):
            for aname, elem in BACKBONE_ATOMS:
                add(aname, 'ALA', resi, chain, 'ATOM  ', elem)
        lines.append('TER')

    for resi in glycans:
        for aname, elem in GLYCAN_ATOMS:
            add(aname, 'NAG', resi, glycan_chain, 'HETATM', elem)

    lines.append('END')
    return '\n'.join(lines) + '\n'

def atoms_text(n, chain='A'):
    """PDB text of n CA atoms, one residue each"""
    return ''.join(
            FormatAtom(1.5 * i, np.sin(i), np.cos(i), aname='CA', rname='ALA', rnum=i + 1, anum=i + 1, elem='C', chain=chain) + '\n'
            for i in range(n)
    )

@fixture
def make_model():
    return model_text

@fixture
def make_atoms():
    return atoms_text

THREE_CHAIN_ALI = '''\
>P1;template
structureX:template:   1 :A:  12 :C:::-1.00:-1.00
MKTLLAAA/MKTLLAAA/MKTLLAAA*

>P1;pm.pdb
sequence:pm.pdb:     :     :     :     :ignore :ignore : 0.00: 0.00
MKTLLAAA/MKTLLAAA/MKTLLAAA*
'''

def ensemble_folder(root, chains, glycans, alignment=THREE_CHAIN_ALI, nruns=3, prefix='start.pdb', skip_models=(), **kwargs):
    """Lay out an ensemble folder: input.dat, align.ali and one predicted model per run"""
    root.mkdir(parents=True, exist_ok=True)
    (root / 'input.dat').write_text(f'JOBNAME=test\nNRUNS={nruns}\n')
    (root / 'align.ali').write_text(alignment)

    for i in range(nruns):
        run = root / 'pred_dECALCrAS1000' / f'{prefix}_{i}'
        run.mkdir(parents=True)
        if i not in skip_models:
            (run / 'pm.pdb.B99990001.pdb').write_text(model_text(chains, glycans, seed=i, noise=0.3, **kwargs))

    return root

@fixture
def make_ensemble():
    return ensemble_folder
