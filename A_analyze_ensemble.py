#!/usr/bin/env python3
"""\
Compute the chain-count and glycan-range parameters of an ensemble.

Usage:
    A_analyze_ensemble.py <folder> [-o <json>] [-q <header>] [-v]

Arguments:
    <folder>
        An ensemble folder containing 'input.dat', the PIR alignment and the
        predicted models (see pyglycoensemble/config.py for the layout).

Options:
    -o --output <json>
        Also write the parameters to this JSON file.

    -q --query-prefix <header>
        Header prefix of the model entry in the alignment file.  The default
        is taken from 'ensemble.json', or '>P1;pm.pdb'.

    -v --verbose
        Log debugging information.
"""
import sys
import docopt
import logging
from pyglycoensemble.config import load_config
from pyglycoensemble.pipeline import analyze_ensemble, write_parameters
from pyglycoensemble.errors import GlycoEnsembleError
from pyglycoensemble.log import init_logging

logger = logging.getLogger('glycoensemble.analyze')

if __name__ == '__main__':
    args = docopt.docopt(__doc__)
    init_logging('DEBUG' if args['--verbose'] else 'INFO')

    folder = args['<folder>']
    try:
        config = load_config(folder, query_prefix=args['--query-prefix'])
        chains, glycans, model_paths = analyze_ensemble(folder, config)
    except GlycoEnsembleError as err:
        logger.error(str(err))
        sys.exit(1)

    print(f"Ensemble {folder}: {len(model_paths)} models")
    print(f"  Chains: {chains.chain_len} ({chains.slash_count} chain breaks, {chains.aa_count} residues)")
    print(f"  First chain: {chains.first_chain_length} residues")
    print(f"  HETATM residues: {glycans.hetatm_start}-{glycans.hetatm_end}")
    for name, (lo, hi) in glycans.ranges.items():
        print(f"    {name}: {lo}-{hi} ({hi - lo + 1} residues)")

    if args['--output']:
        write_parameters(args['--output'], chains, glycans, num_models=len(model_paths))
        print(f"  JSON -> {args['--output']}")
