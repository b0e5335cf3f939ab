#!/usr/bin/env python3
"""\
Build and align the trajectory of every ensemble in a batch folder.

Usage:
    D_process_batch.py <folder> <user> [-o <dir>] [-l <dir>] [-c <chain>]
        [-f] [-v]

Arguments:
    <folder>
        A folder with one subfolder per ensemble.  Each subfolder needs
        'input.dat', the PIR alignment and the predicted models; subfolders
        without 'input.dat' are skipped.

    <user>
        Outputs are written to <out>/<user>/<ensemble>/ and logs to
        <log>/<user>/ensemble_modelling/.

Options:
    -o --output-dir <dir>
        Root of the output tree.  Defaults to $OUTPUT_DIR, or to the log
        directory.

    -l --log-dir <dir>
        Root of the log tree.  Defaults to $LOG_DIR, or to './logs'.

    -c --start-chain <chain>
        The chain whose first residue number is the numbering origin of the
        protein chains.  Overrides 'ensemble.json'.

    -f --keep-fragments
        Keep the renumbered fragments of each model under
        <out>/<user>/<ensemble>/fragments/.

    -v --verbose
        Log debugging information.

A failed ensemble (unsupported chain topology, no glycans, no usable frames,
alignment failure) is logged and leaves no output; the remaining ensembles
are still processed.  The exit status is 1 if any ensemble failed.
"""
import os, sys, json
import docopt
import logging
from pyglycoensemble.config import load_config, find_ensembles
from pyglycoensemble.pipeline import process_ensemble
from pyglycoensemble.errors import GlycoEnsembleError
from pyglycoensemble.log import init_logging, kv

logger = logging.getLogger('glycoensemble.batch')

if __name__ == '__main__':
    args = docopt.docopt(__doc__)
    level = 'DEBUG' if args['--verbose'] else 'INFO'
    user = args['<user>']

    log_root = args['--log-dir'] or os.environ.get('LOG_DIR') or os.environ.get('LOG_ROOT') or 'logs'
    log_dir = os.path.join(log_root, user, 'ensemble_modelling')
    os.makedirs(log_dir, exist_ok=True)
    out_root = os.path.abspath(args['--output-dir'] or os.environ.get('OUTPUT_DIR') or log_dir)

    job = os.environ.get('SLURM_JOB_ID', 'standalone')
    init_logging(level, os.path.join(log_dir, f'get_pdb_{job}.log'))

    results = {}
    for folder in find_ensembles(args['<folder>']):
        name = os.path.basename(folder)
        try:
            config = load_config(folder, start_chain=args['--start-chain'])
        except GlycoEnsembleError as err:
            logger.error(f"ensemble {name} failed:\n{err}")
            results[name] = {'status': 'failed', 'error': str(err)}
            continue
        if not os.path.isfile(os.path.join(folder, config['input_dat'])):
            logger.info(f"Skipping {name} (no {config['input_dat']})")
            continue

        out_dir = os.path.join(out_root, user, name)
        fragments_dir = os.path.join(out_dir, 'fragments') if args['--keep-fragments'] else None
        logger.info(f"Processing ensemble {name}")

        try:
            summary = process_ensemble(folder, out_dir, config, fragments_dir)
        except GlycoEnsembleError as err:
            logger.error(f"ensemble {name} failed:\n{err}")
            results[name] = {'status': 'failed', 'error': str(err)}
            continue

        if summary['aligned'] is None:
            results[name] = {'status': 'failed', 'error': 'no frames accepted'}
        else:
            results[name] = {'status': 'ok', 'frames': len(summary['accepted']), 'aligned': summary['aligned']}

    failed = [k for k, v in results.items() if v['status'] != 'ok']
    logger.info(kv("ensembles processed", len(results)))
    logger.info(kv("ensembles failed", ', '.join(failed) or 'none'))

    os.makedirs(os.path.join(out_root, user), exist_ok=True)
    with open(os.path.join(out_root, user, 'batch_summary.json'), 'w') as f:
        json.dump(results, f, indent=2)

    sys.exit(1 if failed else 0)
