"""Command line entry point.

Usage:
  homeops meter add <floor> <reading>           Register reading (current month)
  homeops meter add <month> <floor> <reading>   Register reading for MM/YYYY
  homeops meter list [month]                    List readings (all or by month)
  homeops meter delete <month>                  Delete readings for a month
  homeops report [--payments]                   Print the chat report
  homeops email                                 Send the monthly report email
"""

import argparse
import asyncio
import logging
import re
import sys
from decimal import Decimal, InvalidOperation

from fastapi import HTTPException

from app.core.config import settings
from app.core.database import SessionLocal, init_db
from app.core.logging import configure_logging
from app.schemas.meter_reading import MONTH_PATTERN
from app.services import meter_reading as reading_service
from app.services.email import EmailError, send_monthly_report
from app.services.formatter import format_payments, format_report
from app.services.providers import ProviderError, UtilitySources
from app.services.report import fetch_all_data

logger = logging.getLogger(__name__)


def _month(value: str) -> str:
    if not re.match(MONTH_PATTERN, value):
        raise argparse.ArgumentTypeError(f"month must be MM/YYYY, got {value!r}")
    return value


def _reading(value: str) -> Decimal:
    try:
        reading = Decimal(value)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"invalid reading number: {value!r}") from e
    if not reading.is_finite() or reading < 0:
        raise argparse.ArgumentTypeError(f"reading must be a non-negative number: {value!r}")
    return reading


def cmd_meter_add(args: argparse.Namespace) -> int:
    if len(args.values) == 2:
        month = None
        floor_arg, reading_arg = args.values
    elif len(args.values) == 3:
        month_arg, floor_arg, reading_arg = args.values
        month = _month(month_arg)
    else:
        print("Usage: meter add [month] <floor> <reading>   e.g. meter add 1 1587.3")
        return 2

    if not floor_arg.isdigit():
        print(f"Floor must be a number between 1 and {settings.FLOOR_COUNT}")
        return 2

    with SessionLocal() as db:
        try:
            r = reading_service.register_reading(db, int(floor_arg), _reading(reading_arg), month)
        except HTTPException as e:
            print(e.detail)
            return 2
        kwh = max(r.consumption, Decimal("0"))
        print(f"{r.month} Piso {r.floor}: {r.start_reading} -> {r.end_reading} ({kwh:.1f} kWh)")
    return 0


def cmd_meter_list(args: argparse.Namespace) -> int:
    with SessionLocal() as db:
        if args.month:
            readings = reading_service.get_readings(db, args.month)
        else:
            readings = reading_service.get_all_readings(db)

        if not readings:
            print("No readings found")
            return 0

        current = None
        for r in readings:
            if r.month != current:
                current = r.month
                print(current)
            kwh = max(r.consumption, Decimal("0"))
            print(f"   Piso {r.floor}: {r.start_reading} -> {r.end_reading} ({kwh:.1f} kWh)")
    return 0


def cmd_meter_delete(args: argparse.Namespace) -> int:
    with SessionLocal() as db:
        count = reading_service.delete_month(db, args.month)
    print(f"Deleted {count} readings for {args.month}")
    return 0


async def _fetch_report():
    sources = UtilitySources.from_settings(settings)
    try:
        with SessionLocal() as db:
            return await fetch_all_data(sources, db, settings)
    finally:
        await sources.aclose()


def cmd_report(args: argparse.Namespace) -> int:
    try:
        data = asyncio.run(_fetch_report())
    except ProviderError as e:
        logger.error("Report failed: %s", e)
        return 1
    print(format_payments(data) if args.payments else format_report(data))
    return 0


def cmd_email(args: argparse.Namespace) -> int:
    async def run() -> str:
        return await send_monthly_report(settings, await _fetch_report())

    try:
        message_id = asyncio.run(run())
    except (ProviderError, EmailError) as e:
        logger.error("Email failed: %s", e)
        return 1
    print(f"Email sent (id {message_id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="homeops", description="HomeOps utility bills")
    commands = parser.add_subparsers(dest="command", required=True)

    meter = commands.add_parser("meter", help="Manage electricity meter readings")
    meter_commands = meter.add_subparsers(dest="meter_command", required=True)

    add = meter_commands.add_parser("add", help="Register a reading")
    add.add_argument("values", nargs="+", metavar="[month] floor reading")
    add.set_defaults(func=cmd_meter_add)

    list_ = meter_commands.add_parser("list", help="List readings")
    list_.add_argument("month", nargs="?", type=_month)
    list_.set_defaults(func=cmd_meter_list)

    delete = meter_commands.add_parser("delete", help="Delete a month of readings")
    delete.add_argument("month", type=_month)
    delete.set_defaults(func=cmd_meter_delete)

    report = commands.add_parser("report", help="Print the chat report")
    report.add_argument("--payments", action="store_true", help="Print the payments summary")
    report.set_defaults(func=cmd_report)

    email = commands.add_parser("email", help="Send the monthly report email")
    email.set_defaults(func=cmd_email)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    init_db()
    try:
        return args.func(args)
    except argparse.ArgumentTypeError as e:
        print(e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
