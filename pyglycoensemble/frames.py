"""Renumber extracted fragments and concatenate them into one frame.

The complexes are trimers (or dimers) of a repeat unit.  With three chains
every protein chain keeps the numbering origin of the reference chain.  With
six chains the repeat unit is two sub-chains: A, C, E keep the reference
origin and B, D, F continue after the first chain (first chain length + 1).
Glycan fragments always restart at 1.
"""
import enum
import logging
from pyglycoensemble.pdbtools import PDB, Concatenate
from pyglycoensemble.extract import extract_fragments, write_fragments, get_starting_chain_number, protein_fragment_name
from pyglycoensemble.glycans import GLYCAN_NAMES
from pyglycoensemble.selection import Chain, Standard
from pyglycoensemble.errors import MissingFragmentError, EmptySelectionError
from pyglycoensemble.log import kv

logger = logging.getLogger(__name__)

## Offset rules
STARTING = 'starting_chain_number'
FIRST_CHAIN_PLUS_ONE = 'first_chain_len_plus_one'
GLYCAN_START = 1

class Topology(enum.Enum):
    THREE_CHAIN = 3
    SIX_CHAIN = 6

    @classmethod
    def from_chain_len(cls, chain_len):
        return cls(chain_len)

    @property
    def chains(self):
        return tuple(RENUMBERING_RULES[self])

    @property
    def fragment_names(self):
        return tuple(protein_fragment_name(x) for x in self.chains) + GLYCAN_NAMES

    def start_for(self, chain, starting_chain_number, first_chain_len_plus_one):
        rule = RENUMBERING_RULES[self][chain]
        return {
            STARTING: starting_chain_number,
            FIRST_CHAIN_PLUS_ONE: first_chain_len_plus_one,
        }[rule]

RENUMBERING_RULES = {
    Topology.THREE_CHAIN: {
        'A': STARTING,
        'B': STARTING,
        'C': STARTING,
    },
    Topology.SIX_CHAIN: {
        'A': STARTING,
        'B': FIRST_CHAIN_PLUS_ONE,
        'C': STARTING,
        'D': FIRST_CHAIN_PLUS_ONE,
        'E': STARTING,
        'F': FIRST_CHAIN_PLUS_ONE,
    },
}

def renumber_fragments(fragments, topology, starting_chain_number, first_chain_len_plus_one):
    """Renumber each fragment in place according to the topology's offset rules.

    Returns: dict of fragment name -> first residue number used
    """
    starts = {}
    for chain in topology.chains:
        name = protein_fragment_name(chain)
        starts[name] = topology.start_for(chain, starting_chain_number, first_chain_len_plus_one)
    for name in GLYCAN_NAMES:
        starts[name] = GLYCAN_START

    for name, start in starts.items():
        if name in fragments:
            fragments[name].Renumber(start)
    return starts

def validate_fragments(fragments, topology):
    """Raise MissingFragmentError unless every expected fragment is present and non-empty"""
    missing = [x for x in topology.fragment_names if x not in fragments or not len(fragments[x])]
    if missing:
        raise MissingFragmentError(missing)

def concatenate(fragments, topology):
    """Join the fragments in the fixed order (protein chains, then CAR1-3) and renumber atoms from 1"""
    frame = Concatenate([fragments[x] for x in topology.fragment_names])
    frame.Reatom(1)
    return frame

def build_frame(P, glycans, chains, start_chain='C', fragments_dir=None):
    """Turn one model into a frame.

    Arguments:
    P             path to the model, or a PDB object
    glycans       GlycanRangeParams of the ensemble
    chains        ChainCountParams of the ensemble
    start_chain   chain whose first standard residue sets the protein numbering origin
    fragments_dir optional directory to dump the renumbered fragments into

    Returns: PDB
    Raises: MissingFragmentError, EmptySelectionError
    """
    if not isinstance(P, PDB): P = PDB(P)
    topology = Topology.from_chain_len(chains.chain_len)

    starting_chain_number = get_starting_chain_number(P, start_chain)
    if starting_chain_number is None:
        raise EmptySelectionError(Chain(start_chain) & Standard(), "can't find the first residue of chain {chain}", chain=start_chain)

    fragments = extract_fragments(P, glycans, topology.chains)
    validate_fragments(fragments, topology)
    starts = renumber_fragments(fragments, topology, starting_chain_number, chains.first_chain_len_plus_one)
    for name, start in starts.items():
        logger.debug(kv(name, f"{len(fragments[name])} atoms, residues from {start}"))

    if fragments_dir is not None:
        write_fragments(fragments, fragments_dir)

    return concatenate(fragments, topology)
