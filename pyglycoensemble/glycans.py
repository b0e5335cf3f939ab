"""Partition the glycan (HETATM) residues of an ensemble into three fragments.

The glycans in predicted models are usually unlabeled or share chain
identifiers with the protein, so they are split by residue number: the span
of HETATM residue numbers in one representative model is cut into three
contiguous, near-equal ranges (CAR1, CAR2, CAR3).  The same ranges are then
used for every model of the ensemble.
"""
import logging
from dataclasses import dataclass
from pyglycoensemble.pdbtools import PDB
from pyglycoensemble.errors import NoHeteroatomsError, ModelParseError
from pyglycoensemble.log import kv

logger = logging.getLogger(__name__)

GLYCAN_NAMES = ('CAR1', 'CAR2', 'CAR3')

@dataclass(frozen=True)
class GlycanRangeParams:
    g1: tuple
    g2: tuple
    g3: tuple
    hetatm_start: int
    hetatm_end: int

    @property
    def ranges(self):
        return dict(zip(GLYCAN_NAMES, (self.g1, self.g2, self.g3)))

    def as_dict(self):
        return {
            'g1_start': self.g1[0], 'g1_end': self.g1[1],
            'g2_start': self.g2[0], 'g2_end': self.g2[1],
            'g3_start': self.g3[0], 'g3_end': self.g3[1],
            'hetatm_start': self.hetatm_start, 'hetatm_end': self.hetatm_end,
        }

def get_hetatm_range(P):
    """Return (first, last) residue number over the HETATM records of a structure."""
    if not isinstance(P, PDB): P = PDB(P)
    resids = sorted(set(d['resi'] for d in P.listdict if d['het']))
    if not resids:
        raise NoHeteroatomsError(P.path)
    return resids[0], resids[-1]

def calculate_equal_glycan_ranges(hetatm_start, hetatm_end):
    """Split [hetatm_start, hetatm_end] into three contiguous ranges.

    Each range gets n//3 residues; the remainder (0, 1 or 2) goes to the
    earlier ranges first, and the last range always ends at hetatm_end.

    Returns: ((g1_start, g1_end), (g2_start, g2_end), (g3_start, g3_end))
    """
    total = hetatm_end - hetatm_start + 1
    assert total >= 1, 'Empty HETATM range %d-%d' % (hetatm_start, hetatm_end)
    base, remainder = divmod(total, 3)

    g1_start = hetatm_start
    g1_end = g1_start + base - 1 + (1 if remainder >= 1 else 0)
    g2_start = g1_end + 1
    g2_end = g1_end + base + (1 if remainder >= 2 else 0)
    g3_start = g2_end + 1
    g3_end = hetatm_end

    logger.info(f"HETATM residue range: {hetatm_start}-{hetatm_end} ({total} total residues)")
    if remainder:
        logger.info(f"Distributing remainder of {remainder} residues")
    for name, (lo, hi) in zip(GLYCAN_NAMES, [(g1_start, g1_end), (g2_start, g2_end), (g3_start, g3_end)]):
        logger.info(kv(name, f"{lo}-{hi} ({hi - lo + 1} residues)"))

    return (g1_start, g1_end), (g2_start, g2_end), (g3_start, g3_end)

def calculate_glycan_parameters(sample):
    """Compute the glycan ranges of an ensemble from one representative model.

    Arguments: path to the sample model, or a PDB object
    Returns: GlycanRangeParams
    Raises: ModelParseError, NoHeteroatomsError
    """
    if isinstance(sample, PDB):
        P = sample
    else:
        try:
            P = PDB(sample)
        except (ValueError, OSError) as err:
            raise ModelParseError(sample, err) from err
    logger.info(f"Analyzing HETATM residues in: {P.path or 'structure'}")
    hetatm_start, hetatm_end = get_hetatm_range(P)
    g1, g2, g3 = calculate_equal_glycan_ranges(hetatm_start, hetatm_end)
    return GlycanRangeParams(g1, g2, g3, hetatm_start, hetatm_end)
