class TipoutError(Exception):
    """Base class for tip pool failures that stop a run."""


class ConfigurationError(TipoutError):
    """
    Raised when there is nothing to anchor a pay period to, or when
    the engine is configured with values it cannot work with.
    """


class ReconciliationInvariantError(TipoutError):
    """
    Distributed + overpaid no longer equals processed, or a transaction
    was folded into the ledger twice. Fatal for the run.
    """

    def __init__(self, message, processed=0.0, distributed=0.0, overpaid=0.0):
        super().__init__(message)
        self.processed = processed
        self.distributed = distributed
        self.overpaid = overpaid

    @property
    def difference(self):
        return self.distributed + self.overpaid - self.processed
