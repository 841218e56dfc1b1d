import json

import pandas as pd
import pytest

from tippool.config import TipoutConfig
from tippool.distribution import allocate_tip, run_tipout
from tippool.payroll import build_payroll
from tippool.reporting import allocation_rows, print_payroll_summary, print_tip_summary, save_results

from conftest import at, make_booking, make_event, make_shift


def test_allocation_rows_one_per_employee_and_one_for_empty_events():
    ann = make_shift("Ann Lee", at(9), at(17))
    pat = make_shift("Pat Owner", at(9), at(17), eligible=False)
    records = [
        allocate_tip(make_event("T1", at(14), 10.0, name="Jo Golfer"), make_booking(at(13)), [ann, pat]),
        allocate_tip(make_event("T2", at(22), -2.0), None, [ann]),
    ]
    rows = allocation_rows(records)

    assert len(rows) == 3
    assert rows[0]["employee"] == "Ann Lee"
    assert rows[0]["tip_amount"] == 10.0
    assert rows[0]["reason"] == "ALLOCATED"
    assert rows[0]["work_start"] == "01/10/2025 01:00 PM"
    assert rows[1]["note"] == "Not tip-eligible (Pat Owner)"
    assert rows[2]["employee"] == ""
    assert rows[2]["refund"] is True
    assert rows[2]["overpaid"] == -2.0
    assert rows[2]["reason"] == "NO_WORKER_FOUND"


def test_save_results_writes_json_and_excel(tmp_path, capsys):
    rows = [{"transaction_id": "T1", "employee": "Ann Lee", "tip_amount": 5.0}]
    json_path, xlsx_path = save_results(rows, prefix="tips", output_dir=tmp_path)

    assert json.loads(json_path.read_text(encoding="utf-8")) == rows
    assert pd.read_excel(xlsx_path).to_dict("records") == rows
    assert "Saved 1 rows" in capsys.readouterr().out


def test_console_summaries(capsys):
    shifts = [
        {"name": "Ann Lee", "clock_in": "2025-01-10 09:00", "clock_out": "2025-01-10 17:00"},
        {"name": "Pat Owner", "clock_in": "2025-01-10 09:00", "clock_out": "2025-01-10 20:00"},
    ]
    tips = [
        {"transaction_id": "T1", "timestamp": "2025-01-10 12:00", "tip_amount": "12.00"},
        {"transaction_id": "T1", "timestamp": "2025-01-10 12:00", "tip_amount": "12.00"},
        {"transaction_id": "T2", "timestamp": "2025-01-10 19:00", "tip_amount": "3.00"},
    ]
    config = TipoutConfig(exempt_employees=("Pat Owner",), salaries={"Pat Owner": 1000})
    result = run_tipout(shifts, tips, [], config)

    print_tip_summary(result)
    print_payroll_summary(build_payroll(result.shifts, result.ledger, config))
    out = capsys.readouterr().out

    assert "Pay Period: 01/10/2025 to 01/10/2025" in out
    assert "Ann Lee" in out
    assert "15.00" in out
    assert "Duplicate transactions skipped: 1" in out
    assert "Tips with no eligible worker: 1" in out
    assert "Salary" in out
