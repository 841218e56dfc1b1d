import logging
from dataclasses import dataclass, field
from datetime import datetime

from .config import TipoutConfig
from .diagnostics import Diagnostics, DUPLICATE_TRANSACTION, REFUND_OR_VOID, SKIPPED_RECORD
from .utils import combine_date_and_time, is_blank, normalize_email, parse_money, parse_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerIdentity:
    id: str = ""
    name: str = ""
    email: str = ""


@dataclass(frozen=True)
class TipEvent:
    transaction_id: str
    timestamp: datetime
    tip_amount: float
    customer: CustomerIdentity = field(default_factory=CustomerIdentity)

    @property
    def is_refund(self):
        return self.tip_amount < 0


def _text(value):
    return "" if is_blank(value) else str(value).strip()


def _payment_time(record, zone):
    stamp = parse_timestamp(record.get("timestamp"), zone)
    if stamp is None:
        stamp = combine_date_and_time(record.get("date"), record.get("time"), zone)
    return stamp


def collect_tip_events(records, period, config=None, diagnostics=None):
    """
    Pulls tip events out of raw transaction rows.

    Zero tips are not events. Negative tips are refunds/voids and are
    kept. Only payments inside `period` are returned, in input order,
    and a transaction id is only ever returned once.
    """
    config = config or TipoutConfig()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    events = []
    seen = set()

    for i, rec in enumerate(records):
        tip = parse_money(rec.get("tip_amount"))
        if tip == 0:
            continue

        transaction_id = _text(rec.get("transaction_id"))
        if not transaction_id:
            diagnostics.record(SKIPPED_RECORD, f"Transaction row {i} with tip {tip:.2f} has no transaction id")
            continue

        paid_at = _payment_time(rec, config.local_tz)
        if paid_at is None:
            diagnostics.record(SKIPPED_RECORD, f"Transaction {transaction_id} has no readable date", transaction_id)
            continue
        if not period.contains(paid_at):
            continue

        if transaction_id in seen:
            diagnostics.record(
                DUPLICATE_TRANSACTION,
                f"⚠️ DUPLICATE TRANSACTION: {transaction_id} - skipping",
                transaction_id,
            )
            continue
        seen.add(transaction_id)

        events.append(TipEvent(
            transaction_id=transaction_id,
            timestamp=paid_at,
            tip_amount=tip,
            customer=CustomerIdentity(
                id=_text(rec.get("customer_id")),
                name=_text(rec.get("customer_name")),
                email=normalize_email(rec.get("customer_email")),
            ),
        ))

    refunds = [e for e in events if e.is_refund]
    if refunds:
        total = sum(e.tip_amount for e in refunds)
        for e in refunds:
            diagnostics.record(
                REFUND_OR_VOID,
                f"Refund/void tip {e.tip_amount:.2f} on {e.transaction_id}",
                e.transaction_id,
                level=logging.DEBUG,
            )
        logger.warning("⚠️ Found %d negative tips (refunds/voids): $%.2f", len(refunds), total)

    logger.info(
        "Found %d transactions with tips in pay period (%d duplicates skipped)",
        len(events), diagnostics.count(DUPLICATE_TRANSACTION),
    )
    return events
