"""Superimpose every frame of an ensemble onto a reference frame."""
import logging
import numpy as np
from pyglycoensemble.pdbtools import ReadModels, WriteModels
from pyglycoensemble.selection import BACKBONE
from pyglycoensemble.superimpy import superpose_rot_trans, rmsd
from pyglycoensemble.errors import EmptySelectionError, AtomCountMismatchError

logger = logging.getLogger(__name__)

def fit_coords(frame, sele):
    """Coordinates of the fitting atoms of one frame, in file order"""
    return frame[sele].GetCoords()

def align_frames(frames, sele=BACKBONE, ref_frame=0):
    """Rigid-body superimpose each frame onto frames[ref_frame], in place.

    The fit uses only the atoms matching `sele`, paired in file order, but the
    transform is applied to every atom of the frame.  All transforms are
    computed before any frame is moved, so an error leaves the frames as they
    were.

    Arguments: list of PDB, (Predicate)sele, (int)ref_frame
    Returns: list of (R, T, rmsd_before, rmsd_after), one per frame
    Raises: EmptySelectionError, AtomCountMismatchError
    """
    if not frames:
        return []

    try:
        ref_xyz = fit_coords(frames[ref_frame], sele)
    except EmptySelectionError as err:
        err.info += f"reference frame: {ref_frame}"
        raise
    transforms = []

    for i, frame in enumerate(frames):
        try:
            mobile_xyz = fit_coords(frame, sele)
        except EmptySelectionError as err:
            err.info += f"frame: {i}"
            raise
        if len(mobile_xyz) != len(ref_xyz):
            err = AtomCountMismatchError(len(ref_xyz), len(mobile_xyz))
            err.info += f"fitting atoms of frame {i} don't pair with reference frame {ref_frame}"
            raise err

        R, T = superpose_rot_trans(mobile_xyz, ref_xyz)
        before = rmsd(mobile_xyz, ref_xyz)
        after = rmsd(np.dot(mobile_xyz, R) + T, ref_xyz)
        transforms.append((R, T, before, after))

    for i, (frame, (R, T, before, after)) in enumerate(zip(frames, transforms)):
        frame.Transform(R, T)
        logger.info(f"frame {i}: {len(ref_xyz)} fit atoms, rmsd {before:.3f} -> {after:.3f}")

    return transforms

def align_trajectory(in_pdb, out_pdb, sele=BACKBONE, ref_frame=0):
    """Read a multi-model PDB, superimpose all frames onto the reference, and write them out.

    Usage:
    align_trajectory('output.pdb', 'output_aligned.pdb')

    Returns: list of (R, T, rmsd_before, rmsd_after)
    """
    frames = ReadModels(in_pdb)
    logger.info(f"numframes={len(frames)}")
    if not frames:
        raise EmptySelectionError(sele, "no frames in {in_pdb}", in_pdb=in_pdb)

    transforms = align_frames(frames, sele, ref_frame)
    WriteModels(out_pdb, frames)
    return transforms
