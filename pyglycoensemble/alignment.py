"""Read the chain topology of a complex from its PIR alignment file.

The query entry (header '>P1;pm.pdb' by default) holds the model sequence,
with '/' between chains and '*' as the terminator:

    >P1;pm.pdb
    sequence:pm.pdb:     :     :     :     : : : :
    AENLWVTVYYGV.../EKGKCVRLQN.../...*
"""
import logging
from dataclasses import dataclass
from pyglycoensemble.errors import UnsupportedTopologyError
from pyglycoensemble.log import kv

logger = logging.getLogger(__name__)

QUERY_PREFIX = '>P1;pm.pdb'

## Number of chain breaks -> number of polymer chains
CHAIN_LENGTHS = {2: 3, 5: 6}

@dataclass(frozen=True)
class ChainCountParams:
    aa_count: int
    slash_count: int
    chain_len: int
    first_chain_length: int

    @property
    def first_chain_len_plus_one(self):
        return self.first_chain_length + 1

    def as_dict(self):
        return {
            'aa_count': self.aa_count,
            'slash_count': self.slash_count,
            'chain_len': self.chain_len,
            'first_chain_length': self.first_chain_length,
            'first_chain_len_plus_one': self.first_chain_len_plus_one,
        }

def analyze_alignment(ali, query_prefix=QUERY_PREFIX):
    """Count residues and chain breaks in the query entry of an alignment.

    Arguments: path to the alignment file, or an iterable of its lines
    Returns: (aa_count, slash_count, before_first_slash_count)
    """
    if isinstance(ali, str) or hasattr(ali, '__fspath__'):
        logger.info(f"Analyzing alignment file: {ali}")
        with open(ali) as f:
            return analyze_alignment(f.readlines(), query_prefix)

    aa_count = slash_count = before_first_slash_count = 0
    in_query = False

    for line in ali:
        line = line.rstrip('\r\n').lstrip()
        if line.startswith('>'):
            in_query = line.startswith(query_prefix)
            continue
        if not in_query:
            continue
        if line.startswith('structure') or line.startswith('sequence:'):
            continue

        for char in line:
            if char == '/':
                slash_count += 1
            elif char == '*' or char.isspace():
                continue
            else:
                if not slash_count:
                    before_first_slash_count += 1
                aa_count += 1

    return aa_count, slash_count, before_first_slash_count

def determine_chain_length(slash_count):
    """Map the number of chain breaks to the number of chains (3 or 6)"""
    try:
        return CHAIN_LENGTHS[slash_count]
    except KeyError:
        raise UnsupportedTopologyError(slash_count) from None

def process_alignment(ali, query_prefix=QUERY_PREFIX):
    """Derive the chain-count parameters of an ensemble from its alignment.

    Returns: ChainCountParams
    """
    aa_count, slash_count, first_chain_length = analyze_alignment(ali, query_prefix)
    chain_len = determine_chain_length(slash_count)
    params = ChainCountParams(aa_count, slash_count, chain_len, first_chain_length)

    logger.info(f"Detected {chain_len}-chain protein system")
    logger.info(kv("aa_count", aa_count))
    logger.info(kv("first_chain_len", first_chain_length))
    return params
