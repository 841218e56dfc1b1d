import argparse
import logging
import sys

import pandas as pd
from dateutil import tz

from tippool.config import TipoutConfig
from tippool.distribution import run_tipout
from tippool.errors import ConfigurationError, TipoutError
from tippool.matching import IdentityMatcher
from tippool.payroll import build_payroll
from tippool.reporting import allocation_rows, print_payroll_summary, print_tip_summary, save_results


def read_records(path):
    """CSV rows as dicts, blank cells as None."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df = df.astype(object).where(df != "", None)
    return df.to_dict("records")


def parse_salaries(pairs):
    salaries = {}
    for pair in pairs:
        name, sep, amount = pair.rpartition("=")
        if not sep or not name.strip():
            raise ConfigurationError(f"--salary expects NAME=AMOUNT, got {pair!r}")
        try:
            salaries[name.strip()] = float(amount)
        except ValueError:
            raise ConfigurationError(f"--salary amount is not a number: {pair!r}")
    return salaries


def build_config(args):
    overrides = {}
    if args.exempt:
        overrides["exempt_employees"] = tuple(args.exempt)
    if args.tz:
        zone = tz.gettz(args.tz)
        if zone is None:
            raise ConfigurationError(f"Unknown timezone: {args.tz}")
        overrides["local_tz"] = zone
    if args.hourly_rate is not None:
        overrides["hourly_rate"] = args.hourly_rate
    if args.salary:
        overrides["salaries"] = parse_salaries(args.salary)
    return TipoutConfig.from_env(**overrides)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Tip distribution by staff overlap with bookings")
    parser.add_argument("--shifts", required=True, help="Staff timecards CSV")
    parser.add_argument("--tips", required=True, help="Transactions CSV with tips")
    parser.add_argument("--bookings", required=True, help="Bookings CSV")
    parser.add_argument("--exempt", nargs="*", default=[], help="Employees who never receive tips")
    parser.add_argument("--hourly-rate", type=float, help="Hourly wage for payroll")
    parser.add_argument("--salary", nargs="*", default=[], help="Salaried employees as NAME=AMOUNT")
    parser.add_argument("--tz", help="Local timezone (default America/New_York)")
    parser.add_argument("--identity-match", action="store_true", help="Match tips to bookings by customer email/name")
    parser.add_argument("--workers", type=int, default=None, help="Threads for the allocation map")
    parser.add_argument("--save", action="store_true", help="Save the per-tip breakdown as JSON + Excel")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
        matcher = IdentityMatcher() if args.identity_match else None

        print("💰 Calculating Tip Distribution...")
        result = run_tipout(
            read_records(args.shifts),
            read_records(args.tips),
            read_records(args.bookings),
            config=config,
            matcher=matcher,
            max_workers=args.workers,
        )
    except TipoutError as e:
        print(f"❌ {e}")
        return 1

    print_tip_summary(result)
    print_payroll_summary(build_payroll(result.shifts, result.ledger, config))

    if args.save:
        save_results(allocation_rows(result.records))
    return 0


if __name__ == "__main__":
    sys.exit(main())
