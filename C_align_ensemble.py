#!/usr/bin/env python3
"""\
Superimpose every frame of a multi-model PDB file onto a reference frame.

Usage:
    C_align_ensemble.py <in> <out> [-s <names>] [-r <frame>] [-v]

Arguments:
    <in>
        A multi-model PDB file, e.g. the output of B_build_ensemble.py.
        Models may be delimited by MODEL/ENDMDL or by END records.

    <out>
        Where to write the superimposed frames (MODEL/ENDMDL records).

Options:
    -s --fit-atoms <names>      [default: N,CA,C,O]
        Comma-separated atom names of the standard residues used for the fit.
        The transform is applied to all atoms.

    -r --ref-frame <index>      [default: 0]
        Index of the reference frame, counting from 0.

    -v --verbose
        Log debugging information.
"""
import sys
import docopt
import logging
from pyglycoensemble.trajectory import align_trajectory
from pyglycoensemble.selection import backbone
from pyglycoensemble.errors import GlycoEnsembleError
from pyglycoensemble.log import init_logging

logger = logging.getLogger('glycoensemble.align')

if __name__ == '__main__':
    args = docopt.docopt(__doc__)
    init_logging('DEBUG' if args['--verbose'] else 'INFO')

    names = [x.strip() for x in args['--fit-atoms'].split(',') if x.strip()]
    try:
        transforms = align_trajectory(
                args['<in>'], args['<out>'],
                sele=backbone(names),
                ref_frame=int(args['--ref-frame']),
        )
    except GlycoEnsembleError as err:
        logger.error(str(err))
        sys.exit(1)

    print(f"Aligned {len(transforms)} frames -> {args['<out>']}")
    for i, (R, T, before, after) in enumerate(transforms):
        print(f"  [{i:>4}]  rmsd {before:8.3f} -> {after:8.3f}")
