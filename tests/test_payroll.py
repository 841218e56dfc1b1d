import pytest

from tippool.aggregation import TipLedger
from tippool.config import TipoutConfig
from tippool.distribution import allocate_tip
from tippool.payroll import build_payroll
from tippool.timecards import ShiftStore

from conftest import at, make_event, make_shift


def test_payroll_hourly_salary_and_tips():
    ann = make_shift("Ann Lee", at(9), at(17))
    bo = make_shift("Bo Diaz", at(12), at(16), paid_hours=3.5)
    pat = make_shift("Pat Owner", at(8), at(20), eligible=False)
    store = ShiftStore([bo, ann, pat], registry=None)

    ledger = TipLedger.from_records([allocate_tip(make_event("T1", at(13), 10.0), None, [ann, bo, pat])])
    config = TipoutConfig(exempt_employees=("Pat Owner",), hourly_rate=20.0, salaries={"pat owner": 2308.0})

    lines = build_payroll(store, ledger, config)

    assert [line.name for line in lines] == ["Ann Lee", "Bo Diaz", "Pat Owner"]
    ann_line, bo_line, pat_line = lines
    assert ann_line.hours == pytest.approx(8.0)
    assert ann_line.wages == pytest.approx(160.0)
    assert ann_line.tips == pytest.approx(5.0)
    assert ann_line.total_pay == pytest.approx(165.0)
    assert bo_line.hours == pytest.approx(3.5)
    assert bo_line.wages == pytest.approx(70.0)
    assert pat_line.salaried
    assert pat_line.wages == pytest.approx(2308.0)
    assert pat_line.tips == 0.0
