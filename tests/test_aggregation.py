import pytest

from tippool.aggregation import TipLedger
from tippool.distribution import AllocationRecord, EmployeeShare, ReasonCode, allocate_tip
from tippool.errors import ReconciliationInvariantError

from conftest import at, make_booking, make_event, make_shift

ANN = make_shift("Ann Lee", at(9), at(17))
BO = make_shift("Bo Diaz", at(12), at(17))
PAT = make_shift("Pat Owner", at(8), at(20), eligible=False)


def test_ledger_folds_records():
    records = [
        allocate_tip(make_event("T1", at(14), 10.0), make_booking(at(13)), [ANN, BO, PAT]),
        allocate_tip(make_event("T2", at(15), -4.0), None, [ANN, BO]),
        allocate_tip(make_event("T3", at(19), 2.5), None, [ANN, PAT]),
    ]
    ledger = TipLedger.from_records(records)
    ledger.check()

    assert ledger.transaction_count == 3
    assert ledger.total_processed == pytest.approx(8.5)
    assert ledger.total_distributed == pytest.approx(6.0)
    assert ledger.total_overpaid == pytest.approx(2.5)
    assert ledger.total_for(ANN.employee_id) == pytest.approx(3.0)
    assert ledger.total_for(BO.employee_id) == pytest.approx(3.0)
    assert ledger.total_for(PAT.employee_id) == 0.0
    assert ledger.employee_names[ANN.employee_id] == "Ann Lee"
    assert ledger.balance_difference == pytest.approx(0.0)


def test_folding_a_transaction_twice_is_fatal():
    record = allocate_tip(make_event("T1", at(14), 10.0), None, [ANN])
    ledger = TipLedger()
    ledger.add(record)
    with pytest.raises(ReconciliationInvariantError):
        ledger.add(record)


def test_imbalance_is_fatal():
    event = make_event("T1", at(14), 10.0)
    broken = AllocationRecord(
        tip_event=event,
        booking=None,
        window_start=at(14),
        window_end=at(14),
        employees=(EmployeeShare(ANN, 100.0, 4.0), EmployeeShare(BO, 100.0, 4.0)),
        overpaid_amount=0.0,
        reason=ReasonCode.FALLBACK_EVEN_SPLIT,
    )
    ledger = TipLedger.from_records([broken])

    with pytest.raises(ReconciliationInvariantError) as exc:
        ledger.check()
    assert exc.value.processed == pytest.approx(10.0)
    assert exc.value.difference == pytest.approx(-2.0)


def test_small_rounding_is_tolerated():
    ledger = TipLedger()
    ledger.total_processed = 10.0
    ledger.total_distributed = 10.004
    ledger.per_employee_total[ANN.employee_id] = 10.004
    ledger.check(0.01)


def test_non_finite_totals_are_fatal():
    ledger = TipLedger()
    ledger.total_processed = float("inf")
    ledger.total_distributed = float("inf")

    with pytest.raises(ReconciliationInvariantError):
        ledger.check()

    ledger = TipLedger()
    ledger.total_processed = 5.0
    ledger.total_distributed = 5.0
    ledger.per_employee_total[ANN.employee_id] = float("nan")
    with pytest.raises(ReconciliationInvariantError):
        ledger.check()
