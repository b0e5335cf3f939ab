import tidyexc

class GlycoEnsembleError(tidyexc.Error):
    """Base class for every error raised while preparing an ensemble."""

class EmptySelectionError(GlycoEnsembleError):

    def __init__(self, sele, brief="selection matched no atoms", **kwargs):
        super().__init__(brief, **{'sele': sele, **kwargs})
        self.info += "selection: {sele!r}"

class NoHeteroatomsError(GlycoEnsembleError):

    def __init__(self, path=None, brief="no HETATM residues found in sample model", **kwargs):
        super().__init__(brief, **{'path': path, **kwargs})
        if path is not None:
            self.info += "sample model: {path}"

class UnsupportedTopologyError(GlycoEnsembleError):

    def __init__(self, slash_count, **kwargs):
        super().__init__(
                "unexpected number of chain breaks in alignment: {slash_count}",
                **{'slash_count': slash_count, **kwargs},
        )
        self.info += "expected 2 (3 chains) or 5 (6 chains)"

class MissingFragmentError(GlycoEnsembleError):

    def __init__(self, missing, **kwargs):
        missing = list(missing)
        super().__init__(
                "missing or empty component(s): {missing_str}",
                **{'missing': missing, 'missing_str': ', '.join(missing), **kwargs},
        )

class AtomCountMismatchError(GlycoEnsembleError):

    def __init__(self, expected, actual, **kwargs):
        super().__init__(
                "atoms {actual} != expected {expected}",
                **{'expected': expected, 'actual': actual, **kwargs},
        )

class ConfigError(GlycoEnsembleError):

    def __init__(self, folder, brief, **kwargs):
        super().__init__(brief, **{'folder': folder, **kwargs})
        self.info += "ensemble folder: {folder}"

class ModelParseError(GlycoEnsembleError):

    def __init__(self, path, reason, **kwargs):
        super().__init__("can't read model: {reason}", **{'path': path, 'reason': reason, **kwargs})
        self.info += "model: {path}"
