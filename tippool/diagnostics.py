import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

DUPLICATE_TRANSACTION = "duplicate_transaction"
REFUND_OR_VOID = "refund_or_void"
DEFAULTED_BOOKING_DURATION = "defaulted_booking_duration"
NO_BOOKING_MATCH = "no_booking_match"
NO_ELIGIBLE_WORKER = "no_eligible_worker"
NO_WORKER_FOUND = "no_worker_found"
SKIPPED_RECORD = "skipped_record"


@dataclass(frozen=True)
class DataQualityWarning:
    """A non-fatal problem with one input record or tip event."""
    kind: str
    detail: str
    reference: Optional[str] = None


@dataclass
class Diagnostics:
    """Counts and keeps every data-quality warning raised during a run."""
    counts: Counter = field(default_factory=Counter)
    warnings: List[DataQualityWarning] = field(default_factory=list)

    def record(self, kind, detail, reference=None, level=logging.WARNING):
        warning = DataQualityWarning(kind, detail, reference)
        self.counts[kind] += 1
        self.warnings.append(warning)
        logger.log(level, "%s: %s", kind, detail)
        return warning

    def count(self, kind):
        return self.counts.get(kind, 0)
