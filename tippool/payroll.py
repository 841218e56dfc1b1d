from collections import defaultdict
from dataclasses import dataclass

from .config import TipoutConfig


@dataclass(frozen=True)
class PayrollLine:
    employee_id: str
    name: str
    hours: float
    wages: float
    tips: float
    salaried: bool = False

    @property
    def total_pay(self):
        return self.wages + self.tips


def build_payroll(store, ledger, config=None):
    """
    One payroll line per employee who worked a shift or earned tips.
    Hourly staff earn hours * hourly_rate; anyone listed in
    config.salaries gets that fixed amount instead.
    """
    config = config or TipoutConfig()

    hours = defaultdict(float)
    names = {}
    for shift in store:
        hours[shift.employee_id] += shift.hours
        names.setdefault(shift.employee_id, shift.full_name)
    for emp_id, name in ledger.employee_names.items():
        names.setdefault(emp_id, name)

    lines = []
    for emp_id, name in names.items():
        salary = config.salary_for(name)
        worked = hours.get(emp_id, 0.0)
        lines.append(PayrollLine(
            employee_id=emp_id,
            name=name,
            hours=worked,
            wages=salary if salary is not None else worked * config.hourly_rate,
            tips=ledger.total_for(emp_id),
            salaried=salary is not None,
        ))

    return sorted(lines, key=lambda line: (line.name.lower(), line.employee_id))
