"""Exception types raised by collaborators and caught at handler boundaries."""


class ModelChangerError(Exception):
    """Base class for all model changer errors."""


class ModelApplyError(ModelChangerError):
    """The host refused to apply a model to a pawn."""


class PreferenceStoreError(ModelChangerError):
    """A preference store read or write failed."""
