import json
from datetime import datetime
from pathlib import Path
from textwrap import shorten

import pandas as pd

from .diagnostics import (
    DEFAULTED_BOOKING_DURATION, DUPLICATE_TRANSACTION, NO_BOOKING_MATCH,
    NO_ELIGIBLE_WORKER, NO_WORKER_FOUND, REFUND_OR_VOID,
)

DIAGNOSTIC_LABELS = [
    (DUPLICATE_TRANSACTION, "Duplicate transactions skipped"),
    (REFUND_OR_VOID, "Refund/void tips"),
    (DEFAULTED_BOOKING_DURATION, "Bookings given default duration"),
    (NO_BOOKING_MATCH, "Tips with no booking nearby"),
    (NO_ELIGIBLE_WORKER, "Tips with no eligible worker"),
    (NO_WORKER_FOUND, "Tips with nobody clocked in"),
]


def _stamp(dt):
    return dt.strftime("%m/%d/%Y %I:%M %p") if dt else ""


def print_tip_summary(result, title="💰 Tip Distribution Summary"):
    ledger = result.ledger

    print("\n" + title)
    print(f"Pay Period: {result.period.start:%m/%d/%Y} to {result.period.end:%m/%d/%Y}")
    print("=" * 60)
    print(f"{'Name':<35} {'Tips':>22}")
    print("-" * 60)

    rows = sorted(ledger.per_employee_total.items(), key=lambda x: ledger.employee_names.get(x[0], "").lower())
    for emp_id, amount in rows:
        name = shorten(ledger.employee_names.get(emp_id, str(emp_id)), width=35, placeholder="…")
        print(f"{name:<35} {amount:22.2f}")

    print("-" * 60)
    print(f"{'Tips Processed':<35} {ledger.total_processed:22.2f}")
    print(f"{'Tips Distributed':<35} {ledger.total_distributed:22.2f}")
    print(f"{'Overpaid (Not Distributed)':<35} {ledger.total_overpaid:22.2f}")
    print("=" * 60)

    counts = result.diagnostics.counts
    if any(counts.get(kind) for kind, _ in DIAGNOSTIC_LABELS):
        print("\n⚠️ Data quality")
        for kind, label in DIAGNOSTIC_LABELS:
            if counts.get(kind):
                print(f"  - {label}: {counts[kind]}")


def print_payroll_summary(lines, title="📋 Complete Payroll Summary"):
    print("\n" + title)
    print("=" * 85)
    print(f"{'Employee Name':<30} {'Hours':>10} {'Wages':>14} {'Tips':>14} {'Total Pay':>14}")
    print("-" * 85)

    total_hours = 0
    total_wages = 0
    total_tips = 0
    total_pay = 0

    for line in lines:
        name = shorten(line.name, width=30, placeholder="…")
        hours = "Salary" if line.salaried else f"{line.hours:.2f}"
        print(f"{name:<30} {hours:>10} {line.wages:14.2f} {line.tips:14.2f} {line.total_pay:14.2f}")

        if not line.salaried:
            total_hours += line.hours
        total_wages += line.wages
        total_tips += line.tips
        total_pay += line.total_pay

    print("-" * 85)
    print(f"{'TOTALS':<30} {total_hours:10.2f} {total_wages:14.2f} {total_tips:14.2f} {total_pay:14.2f}")
    print("=" * 85)


def allocation_rows(records):
    """
    Flattens the audit trail: one row per (tip, employee), or a single
    row for a tip nobody was working for.
    """
    rows = []
    for rec in records:
        event = rec.tip_event
        base = {
            "transaction_id": event.transaction_id,
            "customer_name": event.customer.name,
            "paid_at": _stamp(event.timestamp),
            "tip": round(event.tip_amount, 2),
            "refund": event.is_refund,
            "work_start": _stamp(rec.window_start),
            "work_end": _stamp(rec.window_end),
            "booking_start": _stamp(rec.booking.start_time) if rec.booking else "",
            "reason": rec.reason.value,
            "overpaid": round(rec.overpaid_amount, 2),
        }
        if not rec.employees:
            rows.append({**base, "employee": "", "clock_in": "", "clock_out": "",
                         "overlap_percent": 0.0, "tip_amount": 0.0, "note": ""})
            continue
        for share in rec.employees:
            rows.append({
                **base,
                "employee": share.shift.full_name,
                "clock_in": _stamp(share.shift.clock_in),
                "clock_out": _stamp(share.shift.clock_out),
                "overlap_percent": round(share.overlap_percent, 1),
                "tip_amount": round(share.tip_amount, 2),
                "note": share.note,
            })
    return rows


def save_results(rows, prefix="tip_distribution", output_dir="."):
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    out = Path(output_dir)
    json_path = out / f"{prefix}_{timestamp}.json"
    xlsx_path = out / f"{prefix}_{timestamp}.xlsx"

    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(rows, f, indent=2, ensure_ascii=False)

    df = pd.DataFrame(rows)
    df.to_excel(xlsx_path, index=False)

    print(f"Saved {len(rows)} rows:")
    print(f" - JSON:  {json_path}")
    print(f" - Excel: {xlsx_path}")
    return json_path, xlsx_path
