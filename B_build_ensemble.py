#!/usr/bin/env python3
"""\
Split, renumber and concatenate every model of an ensemble into one
multi-model PDB file (one frame per model).

Usage:
    B_build_ensemble.py <folder> [-o <pdb>] [-c <chain>] [-f <dir>] [-v]

Arguments:
    <folder>
        An ensemble folder containing 'input.dat', the PIR alignment and the
        predicted models.

Options:
    -o --output <pdb>           [default: output.pdb]
        Where to write the assembled frames.

    -c --start-chain <chain>
        The chain whose first residue number is the numbering origin of the
        protein chains.  The default is taken from 'ensemble.json', or 'C'.

    -f --fragments <dir>
        Also write the renumbered fragments of each model (CHA.pdb, ...,
        CAR3.pdb) to <dir>/model_<i>/, for inspection.

    -v --verbose
        Log debugging information.

Frames are skipped (with a warning) when a model file is missing, when any
chain or glycan fragment comes out empty, or when the frame's atom count
differs from that of the first accepted frame.
"""
import sys
import docopt
import logging
from pyglycoensemble.config import load_config
from pyglycoensemble.pipeline import analyze_ensemble
from pyglycoensemble.ensemble import assemble_ensemble
from pyglycoensemble.errors import GlycoEnsembleError
from pyglycoensemble.log import init_logging

logger = logging.getLogger('glycoensemble.build')

if __name__ == '__main__':
    args = docopt.docopt(__doc__)
    init_logging('DEBUG' if args['--verbose'] else 'INFO')

    folder = args['<folder>']
    try:
        config = load_config(folder, start_chain=args['--start-chain'])
        chains, glycans, model_paths = analyze_ensemble(folder, config)
        ensemble = assemble_ensemble(
                model_paths, glycans, chains, args['--output'],
                start_chain=config['start_chain'],
                fragments_dir=args['--fragments'],
        )
    except GlycoEnsembleError as err:
        logger.error(str(err))
        sys.exit(1)

    print(f"Accepted {len(ensemble.accepted)}/{len(model_paths)} frames")
    for i, reason in ensemble.skipped:
        print(f"  skipped {i}: {reason}")
    if not ensemble.accepted:
        sys.exit(1)
