"""Locate the inputs of an ensemble folder.

An ensemble folder looks like:

    <folder>/
        input.dat                 NRUNS=<n>
        align.ali                 PIR alignment of the complex
        ensemble.json             optional overrides of DEFAULTS
        pred_dECALCrAS1000/
            <prefix>_0/pm.pdb.B99990001.pdb
            <prefix>_1/pm.pdb.B99990001.pdb
            ...

where <prefix> is detected from the first run directory (e.g. 'start.pdb').
"""
import os, re, json, glob
import logging
from pyglycoensemble.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULTS = {
    'alignment_file': 'align.ali',
    'input_dat': 'input.dat',
    'query_prefix': '>P1;pm.pdb',
    'pred_subdir': 'pred_dECALCrAS1000',
    'model_filename': 'pm.pdb.B99990001.pdb',
    'start_chain': 'C',
    'backbone_names': ['N', 'CA', 'C', 'O'],
    'output_name': 'output.pdb',
    'aligned_name': 'output_aligned.pdb',
}

CONFIG_NAME = 'ensemble.json'

def load_config(folder, **overrides):
    """DEFAULTS, updated from <folder>/ensemble.json if present, then from any non-None overrides"""
    config = dict(DEFAULTS)
    config_path = os.path.join(folder, CONFIG_NAME)
    if os.path.isfile(config_path):
        with open(config_path) as f:
            try:
                user = json.load(f)
            except json.JSONDecodeError as err:
                raise ConfigError(folder, "can't parse {config_path}: {err}", config_path=config_path, err=err) from None
        unknown = set(user) - set(DEFAULTS)
        if unknown:
            raise ConfigError(folder, "unknown key(s) in {config_path}: {keys}", config_path=config_path, keys=', '.join(sorted(unknown)))
        config.update(user)
    config.update({k: v for k, v in overrides.items() if v is not None})
    return config

def parse_input_dat(path):
    """Return the NRUNS value of an input.dat file, or None if it has none"""
    with open(path) as f:
        for line in f:
            if line.startswith('NRUNS='):
                m = re.search(r'\d+', line.split('=', 1)[1])
                if m: return int(m.group())
                return None
    return None

def detect_pdb_prefix(pred_dir):
    """Find the run-directory prefix, e.g. 'start.pdb' for 'start.pdb_0/'; None if there is no run 0"""
    for candidate in sorted(glob.glob(os.path.join(glob.escape(pred_dir), '*.pdb_0'))):
        if os.path.isdir(candidate):
            return os.path.basename(candidate)[:-len('_0')]
    return None

def find_model_paths(folder, config=None):
    """List the expected model files of an ensemble as (model_index, path), ascending.

    Paths are listed whether or not they exist; missing models are skipped
    (with a warning) when the ensemble is assembled.
    """
    config = config or load_config(folder)

    input_dat = os.path.join(folder, config['input_dat'])
    if not os.path.isfile(input_dat):
        raise ConfigError(folder, "no {input_dat}", input_dat=config['input_dat'])
    nruns = parse_input_dat(input_dat)
    if nruns is None:
        raise ConfigError(folder, "NRUNS not found in {input_dat}", input_dat=input_dat)

    pred_dir = os.path.join(folder, config['pred_subdir'])
    prefix = detect_pdb_prefix(pred_dir)
    if prefix is None:
        raise ConfigError(folder, "could not find *.pdb_0 directory in {pred_dir}", pred_dir=pred_dir)
    logger.info(f"Detected PDB prefix pattern: {prefix}_*")

    return [
        (i, os.path.join(pred_dir, f'{prefix}_{i}', config['model_filename']))
        for i in range(nruns)
    ]

def find_sample_model(model_paths):
    """The first model that exists, used to compute the glycan ranges of the ensemble"""
    for i, path in model_paths:
        if os.path.isfile(path):
            return path
    return None

def find_ensembles(batch_dir):
    """Subdirectories of a batch folder, one per ensemble, sorted by name"""
    return sorted(
        os.path.join(batch_dir, x) for x in os.listdir(batch_dir)
        if os.path.isdir(os.path.join(batch_dir, x))
    )
