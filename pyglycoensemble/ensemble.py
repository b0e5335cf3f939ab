"""Assemble the frames of one ensemble into a multi-model PDB file.

Models are fed in ascending index order.  The first model that produces a
frame fixes the atom count of the ensemble; any later frame with a different
count is skipped, as is any model whose frame can't be built.  Accepted frames
are streamed to a temporary file which is only renamed into place once the
ensemble is finished, and only if at least one frame was accepted.
"""
import os, tempfile
import logging
from pyglycoensemble.pdbtools import PDB, WriteModel
from pyglycoensemble.frames import build_frame
from pyglycoensemble.errors import MissingFragmentError, EmptySelectionError, AtomCountMismatchError

logger = logging.getLogger(__name__)

## Per-model errors: the model is skipped and the ensemble carries on.
FRAME_ERRORS = (MissingFragmentError, EmptySelectionError, AtomCountMismatchError)

class EnsembleAssembler:
    """Accumulate frames that share one atom count into a single output file.

    Usage:
    with EnsembleAssembler('output.pdb', glycans, chains) as ensemble:
        for i, path in model_paths:
            ensemble.add(i, path)
    ensemble.accepted  ## model indices written, in order
    """

    def __init__(self, out_path, glycans, chains, start_chain='C', fragments_dir=None):
        self.out_path = out_path
        self.glycans = glycans
        self.chains = chains
        self.start_chain = start_chain
        self.fragments_dir = fragments_dir
        self.expected_atom_count = None
        self.accepted = []
        self.skipped = []
        self._last_index = None
        self._file = None
        self._tmp = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.finish()
        else:
            self.discard()
        return False

    def add(self, model_index, model):
        """Build the frame of one model and add it to the ensemble.

        Arguments: (int)model_index, path to the model or PDB object
        Returns: the frame (PDB), or None if the model was skipped
        """
        if isinstance(model, PDB):
            name = model.path or f'model {model_index}'
        else:
            name = os.fspath(model)
            if not os.path.isfile(name):
                return self._skip(model_index, name, f"missing model file {name}")

        fragments_dir = None
        if self.fragments_dir is not None:
            fragments_dir = os.path.join(self.fragments_dir, f'model_{model_index}')

        try:
            frame = build_frame(
                    model, self.glycans, self.chains,
                    start_chain=self.start_chain,
                    fragments_dir=fragments_dir,
            )
        except FRAME_ERRORS as err:
            return self._skip(model_index, name, err)
        except ValueError as err:
            return self._skip(model_index, name, f"can't parse model: {err}")

        return self.add_frame(model_index, frame, name)

    def add_frame(self, model_index, frame, name=None):
        """Add an already built frame, enforcing the ensemble's atom count.

        Returns: the frame, or None if it was rejected
        """
        if self._last_index is not None and model_index <= self._last_index:
            raise ValueError(f"frames must be added in ascending model order: {model_index} after {self._last_index}")
        self._last_index = model_index

        atoms = len(frame)
        try:
            self.check_atom_count(atoms)
        except AtomCountMismatchError as err:
            return self._skip(model_index, name or f'model {model_index}', err)

        self._write(model_index, frame)
        self.accepted.append(model_index)
        return frame

    def check_atom_count(self, atoms):
        if self.expected_atom_count is None:
            self.expected_atom_count = atoms
            logger.info(f"first frame atoms={atoms}")
        elif atoms != self.expected_atom_count:
            raise AtomCountMismatchError(self.expected_atom_count, atoms)

    def finish(self):
        """Move the finished ensemble into place.  Returns the output path, or None if no frame was accepted."""
        if self._file is None:
            logger.warning(f"no frames accepted; not writing {self.out_path}")
            if os.path.exists(self.out_path):
                os.remove(self.out_path)
            return None
        self._file.write('END\n')
        self._file.close()
        self._file = None
        os.replace(self._tmp, self.out_path)
        logger.info(f"wrote {len(self.accepted)} frames ({self.expected_atom_count} atoms each) to {self.out_path}")
        return self.out_path

    def discard(self):
        """Throw away a partially written ensemble"""
        if self._file is not None:
            self._file.close()
            self._file = None
            os.remove(self._tmp)

    def _write(self, model_index, frame):
        if self._file is None:
            outdir = os.path.dirname(os.path.abspath(self.out_path))
            fd, self._tmp = tempfile.mkstemp(suffix='.pdb', prefix='.tmp_', dir=outdir)
            self._file = os.fdopen(fd, 'w')
        WriteModel(self._file, model_index + 1, frame)

    def _skip(self, model_index, name, reason):
        logger.warning(f"skipping frame {model_index} ({name}): {reason}")
        self.skipped.append((model_index, str(reason)))
        return None

def assemble_ensemble(model_paths, glycans, chains, out_path, start_chain='C', fragments_dir=None):
    """Build every model of an ensemble and write the accepted frames to out_path.

    Arguments:
    model_paths  iterable of (model_index, path) pairs
    glycans      GlycanRangeParams
    chains       ChainCountParams

    Returns: EnsembleAssembler; its 'accepted' list is empty, and nothing
    was written, if no model produced a usable frame.
    """
    with EnsembleAssembler(out_path, glycans, chains, start_chain, fragments_dir) as ensemble:
        for model_index, path in sorted(model_paths, key=lambda x: x[0]):
            logger.info(f"Processing frame {model_index} ({path})")
            ensemble.add(model_index, path)
    return ensemble
