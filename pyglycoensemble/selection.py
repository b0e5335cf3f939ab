"""Atom selection predicates.

Every predicate is called with one atom (a dict from ``PDB.listdict``) and
returns True if the atom belongs to the selection.  Predicates combine with
``&``, ``|`` and ``~``:

    sele = Chain('A') & Standard()
    glycan = ~Standard() & ResidueRange(3394, 3549)
    P.Select(sele)
"""

## Standard amino acids, including the protonation-state names written by
## CHARMM/AMBER based tools.
STANDARD_RESIDUES = frozenset({
    'ALA', 'ARG', 'ASN', 'ASP', 'CYS', 'GLN', 'GLU', 'GLY', 'HIS', 'ILE',
    'LEU', 'LYS', 'MET', 'PHE', 'PRO', 'SER', 'THR', 'TRP', 'TYR', 'VAL',
    'HSD', 'HSE', 'HSP', 'HID', 'HIE', 'HIP', 'CYX',
})

BACKBONE_NAMES = ('N', 'CA', 'C', 'O')

class Predicate:

    def __call__(self, atom):
        raise NotImplementedError

    def __and__(self, other): return And(self, other)
    def __or__(self, other): return Or(self, other)
    def __invert__(self): return Not(self)

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def __hash__(self):
        return hash((type(self).__name__, repr(self)))

class Chain(Predicate):

    def __init__(self, chain):
        self.chain = chain

    def __call__(self, atom):
        return atom['chain'] == self.chain

    def __repr__(self):
        return f'Chain({self.chain!r})'

class Standard(Predicate):
    """Atoms belonging to a standard amino acid residue."""

    def __call__(self, atom):
        return atom['resn'].strip() in STANDARD_RESIDUES

    def __repr__(self):
        return 'Standard()'

class ResidueRange(Predicate):
    """Residue numbers in [lo, hi], inclusive."""

    def __init__(self, lo, hi):
        self.lo, self.hi = lo, hi

    def __call__(self, atom):
        return self.lo <= atom['resi'] <= self.hi

    def __repr__(self):
        return f'ResidueRange({self.lo}, {self.hi})'

class AtomName(Predicate):

    def __init__(self, *names):
        self.names = frozenset(names)

    def __call__(self, atom):
        return atom['name'] in self.names

    def __repr__(self):
        return 'AtomName(%s)' % ', '.join(repr(x) for x in sorted(self.names))

class And(Predicate):

    def __init__(self, *terms):
        self.terms = terms

    def __call__(self, atom):
        return all(term(atom) for term in self.terms)

    def __repr__(self):
        return '(%s)' % ' & '.join(repr(x) for x in self.terms)

class Or(Predicate):

    def __init__(self, *terms):
        self.terms = terms

    def __call__(self, atom):
        return any(term(atom) for term in self.terms)

    def __repr__(self):
        return '(%s)' % ' | '.join(repr(x) for x in self.terms)

class Not(Predicate):

    def __init__(self, term):
        self.term = term

    def __call__(self, atom):
        return not self.term(atom)

    def __repr__(self):
        return f'~{self.term!r}'

def backbone(names=BACKBONE_NAMES):
    """Protein backbone atoms, the default superposition selection."""
    return Standard() & AtomName(*names)

BACKBONE = backbone()
