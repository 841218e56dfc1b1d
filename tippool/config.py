import os
from dataclasses import dataclass, field
from datetime import timedelta, tzinfo
from typing import Mapping, Tuple

from dateutil import tz

from .errors import ConfigurationError

DEFAULT_TZ_NAME = "America/New_York"


@dataclass(frozen=True)
class TipoutConfig:
    """
    Settings for one distribution run.

    exempt_employees: full names that never receive a share of tips.
        Names match ignoring case and runs of whitespace.
    proximity_threshold: how far a payment may sit from a booking edge
        and still be matched to it.
    epsilon: tolerance for the reconciliation check, in currency units.
    salaries: full name -> fixed pay for the period (payroll only).
    """
    exempt_employees: Tuple[str, ...] = ()
    proximity_threshold: timedelta = timedelta(hours=3)
    epsilon: float = 0.01
    default_booking_minutes: int = 60
    local_tz: tzinfo = field(default_factory=lambda: tz.gettz(DEFAULT_TZ_NAME))
    hourly_rate: float = 17.50
    salaries: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if self.local_tz is None:
            raise ConfigurationError("local_tz could not be resolved")
        if self.proximity_threshold <= timedelta(0):
            raise ConfigurationError("proximity_threshold must be positive")
        if self.epsilon < 0:
            raise ConfigurationError("epsilon must not be negative")
        if self.default_booking_minutes <= 0:
            raise ConfigurationError("default_booking_minutes must be positive")
        if self.hourly_rate < 0:
            raise ConfigurationError("hourly_rate must not be negative")
        object.__setattr__(self, "exempt_employees", tuple(self.exempt_employees))

    def is_exempt(self, full_name):
        key = normalize_name(full_name)
        return any(key == normalize_name(n) for n in self.exempt_employees)

    def salary_for(self, full_name):
        key = normalize_name(full_name)
        for name, amount in self.salaries.items():
            if normalize_name(name) == key:
                return float(amount)
        return None

    @classmethod
    def from_env(cls, **overrides):
        """
        Build a config from TIPPOOL_* environment variables.
        Keyword arguments win over the environment.
        """
        values = {}

        exempt = os.getenv("TIPPOOL_EXEMPT")
        if exempt:
            values["exempt_employees"] = tuple(n.strip() for n in exempt.split(",") if n.strip())

        tz_name = os.getenv("TIPPOOL_TZ")
        if tz_name:
            zone = tz.gettz(tz_name)
            if zone is None:
                raise ConfigurationError(f"Unknown timezone: {tz_name}")
            values["local_tz"] = zone

        rate = os.getenv("TIPPOOL_HOURLY_RATE")
        if rate:
            try:
                values["hourly_rate"] = float(rate)
            except ValueError:
                raise ConfigurationError(f"TIPPOOL_HOURLY_RATE is not a number: {rate!r}")

        values.update(overrides)
        return cls(**values)


def normalize_name(name):
    return " ".join(str(name or "").split()).casefold()
