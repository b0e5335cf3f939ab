"""Split one model into its protein chains and glycan fragments."""
import os
from pyglycoensemble.pdbtools import PDB
from pyglycoensemble.selection import Chain, Standard, ResidueRange

def protein_fragment_name(chain):
    return 'CH' + chain

def extract_fragments(P, glycans, chains):
    """Return the fragments of a model, keyed by fragment name, in concatenation order.

    Protein fragments (CHA, CHB, ...) hold the standard residues of one chain;
    glycan fragments (CAR1, CAR2, CAR3) hold the non-standard residues whose
    numbers fall in the corresponding range.  A fragment that matches nothing
    is returned empty; deciding whether that is fatal is up to the caller.

    Arguments: PDB (or path), GlycanRangeParams, iterable of chain letters
    Returns: dict of str -> PDB
    """
    if not isinstance(P, PDB): P = PDB(P)
    fragments = {}
    for chain in chains:
        fragments[protein_fragment_name(chain)] = P.Select(Chain(chain) & Standard())
    for name, (lo, hi) in glycans.ranges.items():
        fragments[name] = P.Select(~Standard() & ResidueRange(lo, hi))
    return fragments

def write_fragments(fragments, directory):
    """Write each fragment to <directory>/<name>.pdb, e.g. for inspection with an external viewer"""
    os.makedirs(directory, exist_ok=True)
    paths = {}
    for name, fragment in fragments.items():
        paths[name] = os.path.join(directory, f'{name}.pdb')
        fragment.WritePDB(paths[name])
    return paths

def get_starting_chain_number(P, chain='C'):
    """Residue number of the first standard residue of a chain in the untouched model, or None"""
    if not isinstance(P, PDB): P = PDB(P)
    sele = Chain(chain) & Standard()
    for d in P.listdict:
        if sele(d):
            return d['resi']
    return None
