"""pipeline.py: run one ensemble folder from alignment file to aligned trajectory.

Steps:
  1. chain-count parameters from the PIR alignment (once per ensemble)
  2. glycan ranges from the first available model (once per ensemble)
  3. one frame per model, assembled into <out_dir>/output.pdb
  4. every frame superimposed onto the first, written to <out_dir>/output_aligned.pdb

Errors in steps 1, 2 and 4 abort the ensemble, and no output is left behind.
Errors in step 3 only skip the affected model.
"""
import os, json, shutil
import logging
from pyglycoensemble.alignment import process_alignment
from pyglycoensemble.glycans import calculate_glycan_parameters
from pyglycoensemble.ensemble import assemble_ensemble
from pyglycoensemble.trajectory import align_trajectory
from pyglycoensemble.selection import backbone
from pyglycoensemble.config import load_config, find_model_paths, find_sample_model
from pyglycoensemble.errors import ConfigError, GlycoEnsembleError
from pyglycoensemble.log import kv

logger = logging.getLogger(__name__)

def analyze_ensemble(folder, config=None):
    """Compute the per-ensemble parameters.

    Returns: (ChainCountParams, GlycanRangeParams, list of (model_index, path))
    Raises: ConfigError, UnsupportedTopologyError, ModelParseError, NoHeteroatomsError
    """
    config = config or load_config(folder)
    model_paths = find_model_paths(folder, config)

    ali_path = os.path.join(folder, config['alignment_file'])
    if not os.path.isfile(ali_path):
        raise ConfigError(folder, "no alignment file {ali_path}", ali_path=ali_path)
    chains = process_alignment(ali_path, config['query_prefix'])

    sample = find_sample_model(model_paths)
    if sample is None:
        raise ConfigError(folder, "none of the {n} expected model files exist", n=len(model_paths))
    logger.info(f"Protein has {chains.chain_len} chains, using 3 glycan chains (CAR1, CAR2, CAR3)")
    glycans = calculate_glycan_parameters(sample)

    return chains, glycans, model_paths

def write_parameters(path, chains, glycans, **extra):
    with open(path, 'w') as f:
        json.dump({**chains.as_dict(), **glycans.as_dict(), **extra}, f, indent=2)

def process_ensemble(folder, out_dir, config=None, fragments_dir=None):
    """Build and align the trajectory of one ensemble folder.

    Returns: dict summarizing the run (also written to <out_dir>/summary.json)
    Raises: GlycoEnsembleError if the ensemble has to be abandoned
    """
    config = config or load_config(folder)
    os.makedirs(out_dir, exist_ok=True)
    out_pdb = os.path.join(out_dir, config['output_name'])
    aligned_pdb = os.path.join(out_dir, config['aligned_name'])
    params_json = os.path.join(out_dir, 'parameters.json')
    summary_json = os.path.join(out_dir, 'summary.json')

    try:
        chains, glycans, model_paths = analyze_ensemble(folder, config)

        ensemble = assemble_ensemble(
                model_paths, glycans, chains, out_pdb,
                start_chain=config['start_chain'],
                fragments_dir=fragments_dir,
        )
        summary = {
            'folder': os.path.abspath(folder),
            'num_models': len(model_paths),
            'accepted': ensemble.accepted,
            'skipped': [{'model': i, 'reason': r} for i, r in ensemble.skipped],
            'atoms_per_frame': ensemble.expected_atom_count,
            'output': None,
            'aligned': None,
        }

        if ensemble.accepted:
            summary['output'] = out_pdb
            transforms = align_trajectory(out_pdb, aligned_pdb, sele=backbone(config['backbone_names']))
            summary['aligned'] = aligned_pdb
            summary['rmsd'] = [round(after, 4) for R, T, before, after in transforms]
        else:
            logger.warning(f"no frames for {folder}; skipping alignment")
            _remove(aligned_pdb)

    except GlycoEnsembleError:
        for path in (out_pdb, aligned_pdb, params_json, summary_json):
            _remove(path)
        if fragments_dir is not None and os.path.isdir(fragments_dir):
            shutil.rmtree(fragments_dir)
        raise

    # Only written once the whole ensemble has succeeded.
    write_parameters(params_json, chains, glycans)
    logger.info(kv("frames accepted", f"{len(ensemble.accepted)}/{len(model_paths)}"))
    with open(summary_json, 'w') as f:
        json.dump(summary, f, indent=2)
    return summary

def _remove(path):
    if os.path.exists(path):
        os.remove(path)
