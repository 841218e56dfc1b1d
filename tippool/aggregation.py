import logging
from collections import defaultdict

from .errors import ReconciliationInvariantError

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 0.01


class TipLedger:
    """
    Running totals for a distribution run.

    Every processed tip ends up either with an employee or in the
    overpaid bucket, so distributed + overpaid must equal processed.
    """

    def __init__(self):
        self.per_employee_total = defaultdict(float)
        self.employee_names = {}
        self.total_distributed = 0.0
        self.total_overpaid = 0.0
        self.total_processed = 0.0
        self._transactions = set()

    @classmethod
    def from_records(cls, records):
        ledger = cls()
        for rec in records:
            ledger.add(rec)
        return ledger

    @property
    def transaction_count(self):
        return len(self._transactions)

    @property
    def balance_difference(self):
        return self.total_distributed + self.total_overpaid - self.total_processed

    def add(self, record):
        tid = record.tip_event.transaction_id
        if tid in self._transactions:
            raise ReconciliationInvariantError(
                f"Transaction {tid} folded into the ledger twice",
                self.total_processed, self.total_distributed, self.total_overpaid,
            )
        self._transactions.add(tid)

        for share in record.employees:
            if share.tip_amount == 0:
                continue
            self.per_employee_total[share.employee_id] += share.tip_amount
            self.employee_names.setdefault(share.employee_id, share.shift.full_name)
            self.total_distributed += share.tip_amount

        self.total_overpaid += record.overpaid_amount
        self.total_processed += record.tip_event.tip_amount

    def check(self, epsilon=DEFAULT_EPSILON):
        logger.info("Tips Processed: $%.2f", self.total_processed)
        logger.info("Tips Distributed: $%.2f", self.total_distributed)
        logger.info("Tips Overpaid: $%.2f", self.total_overpaid)

        difference = abs(self.balance_difference)
        if not difference <= epsilon:
            logger.error("Tip accounting mismatch: difference $%.2f", difference)
            raise ReconciliationInvariantError(
                f"Distributed ${self.total_distributed:.2f} + overpaid ${self.total_overpaid:.2f} "
                f"!= processed ${self.total_processed:.2f}",
                self.total_processed, self.total_distributed, self.total_overpaid,
            )

        per_employee = sum(self.per_employee_total.values())
        if not abs(per_employee - self.total_distributed) <= epsilon:
            logger.error("Per-employee totals $%.2f do not add up to distributed $%.2f",
                         per_employee, self.total_distributed)
            raise ReconciliationInvariantError(
                f"Per-employee totals ${per_employee:.2f} != distributed ${self.total_distributed:.2f}",
                self.total_processed, self.total_distributed, self.total_overpaid,
            )

        logger.info("✓ Tips balance correctly")

    def total_for(self, emp_id):
        return self.per_employee_total.get(emp_id, 0.0)
