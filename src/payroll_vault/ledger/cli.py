"""Payroll ledger command line interface.

Provides operational tools for:
- Ledger initialization
- Deposits and employee management
- Settlement (single, whole roster, automation trigger)
- Balance, roster and event queries
- Metrics emission

Usage:
    payroll-vault --caller 0xEMPLOYER init
    payroll-vault --caller 0xEMPLOYER deposit 100
    payroll-vault --caller 0xEMPLOYER add-employee 0xA 30 --frequency 3600
    payroll-vault probe
    payroll-vault trigger
    payroll-vault events --type SalaryPaid
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import asdict, replace
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from payroll_vault.config import get_settings
from payroll_vault.database import create_db_engine
from payroll_vault.ledger.auth import CallerContext
from payroll_vault.ledger.clock import Clock, FixedClock, SystemClock
from payroll_vault.ledger.errors import PayrollError
from payroll_vault.ledger.payroll import Payroll
from payroll_vault.ledger.services import SettlementPass
from payroll_vault.logging_config import configure_logging
from payroll_vault.models import Base

logger = logging.getLogger(__name__)


def _pass_to_dict(result: SettlementPass) -> dict[str, Any]:
    return {
        "correlation_id": str(result.correlation_id),
        "evaluated_at": result.evaluated_at,
        "settled": [asdict(s) for s in result.settlements],
        "skipped": [{"address": s.address, "reason": s.reason.value} for s in result.skipped],
        "total_paid": result.total_paid,
        "balance_after": result.balance_after,
    }


class PayrollCli:
    """Payroll ledger command line interface."""

    def __init__(self, out: Any = None, err: Any = None) -> None:
        self.parser = self._build_parser()
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="payroll-vault",
            description="Payroll vault operational tools",
        )
        parser.add_argument(
            "--database-url",
            type=str,
            help="SQLAlchemy database URL (default: DATABASE_URL setting)",
        )
        parser.add_argument(
            "--caller",
            type=str,
            help="Caller address (default: EMPLOYER_ADDRESS setting)",
        )
        parser.add_argument(
            "--at",
            type=int,
            help="Evaluate at this epoch timestamp instead of the wall clock",
        )
        parser.add_argument(
            "--disallow-zero-frequency",
            action="store_true",
            help="Reject employees with a payment frequency of 0",
        )
        parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init", help="Create the vault for the caller as employer")

        deposit = subparsers.add_parser("deposit", help="Deposit funds into the vault")
        deposit.add_argument("amount", type=int, help="Amount in value units")

        add = subparsers.add_parser("add-employee", help="Register an employee")
        add.add_argument("address", type=str, help="Employee address")
        add.add_argument("salary", type=int, help="Salary paid per interval")
        add.add_argument(
            "--frequency",
            type=int,
            default=0,
            help="Seconds between payments (default: 0)",
        )

        remove = subparsers.add_parser("remove-employee", help="Deactivate an employee")
        remove.add_argument("address", type=str, help="Employee address")

        settle = subparsers.add_parser("settle", help="Settle one employee's salary")
        settle.add_argument("address", type=str, help="Employee address")

        subparsers.add_parser("settle-all", help="Settle every due employee")
        subparsers.add_parser("probe", help="Check whether any payment is due")
        subparsers.add_parser("trigger", help="Run the automation trigger")
        subparsers.add_parser("balance", help="Show the vault balance")

        employee = subparsers.add_parser("employee", help="Show an employee record")
        employee.add_argument("address", type=str, help="Employee address")

        roster = subparsers.add_parser("roster", help="List the roster")
        roster.add_argument("--position", type=int, help="Show only this position")

        events = subparsers.add_parser("events", help="List ledger events")
        events.add_argument("--type", dest="event_type", type=str, help="Event type filter")
        events.add_argument("--address", type=str, help="Address filter")
        events.add_argument(
            "--limit",
            type=int,
            default=100,
            help="Maximum events to list (default: 100)",
        )

        metrics = subparsers.add_parser("metrics", help="Emit ledger metrics")
        metrics.add_argument(
            "--format",
            choices=["prometheus", "json"],
            default="json",
            help="Output format (default: json)",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help(self.err)
            return 1

        settings = get_settings()
        configure_logging(
            level=logging.DEBUG if parsed.verbose else settings.log_level,
            json_format=settings.log_json,
        )

        handlers: dict[str, Callable[[Payroll, argparse.Namespace], int]] = {
            "init": self._cmd_init,
            "deposit": self._cmd_deposit,
            "add-employee": self._cmd_add_employee,
            "remove-employee": self._cmd_remove_employee,
            "settle": self._cmd_settle,
            "settle-all": self._cmd_settle_all,
            "probe": self._cmd_probe,
            "trigger": self._cmd_trigger,
            "balance": self._cmd_balance,
            "employee": self._cmd_employee,
            "roster": self._cmd_roster,
            "events": self._cmd_events,
            "metrics": self._cmd_metrics,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=self.err)
            return 1

        engine = create_db_engine(parsed.database_url or settings.database_url)
        Base.metadata.create_all(engine)
        factory = sessionmaker(engine, expire_on_commit=False)
        try:
            with factory() as session:
                payroll = self._payroll(session, parsed)
                return handler(payroll, parsed)
        except PayrollError as e:
            print(f"ERROR [{e.code}]: {e.message}", file=self.err)
            return 2
        finally:
            engine.dispose()

    def _payroll(self, session: Session, args: argparse.Namespace) -> Payroll:
        clock: Clock = FixedClock(args.at) if args.at is not None else SystemClock()
        config = get_settings().ledger_config()
        if args.disallow_zero_frequency:
            config = replace(config, allow_zero_frequency=False)
        return Payroll(session, clock=clock, config=config)

    def _caller(self, args: argparse.Namespace) -> CallerContext:
        return CallerContext(args.caller or get_settings().employer_address)

    def _print(self, data: Any) -> None:
        print(json.dumps(data, indent=2, default=str), file=self.out)

    def _cmd_init(self, payroll: Payroll, args: argparse.Namespace) -> int:
        caller = self._caller(args)
        payroll.initialize(caller.address or "")
        self._print({"employer": payroll.employer, "balance": payroll.balance()})
        return 0

    def _cmd_deposit(self, payroll: Payroll, args: argparse.Namespace) -> int:
        balance = payroll.deposit(self._caller(args), args.amount)
        self._print({"deposited": args.amount, "balance": balance})
        return 0

    def _cmd_add_employee(self, payroll: Payroll, args: argparse.Namespace) -> int:
        record = payroll.add_employee(self._caller(args), args.address, args.salary, args.frequency)
        self._print(asdict(record))
        return 0

    def _cmd_remove_employee(self, payroll: Payroll, args: argparse.Namespace) -> int:
        record = payroll.remove_employee(self._caller(args), args.address)
        self._print(asdict(record))
        return 0

    def _cmd_settle(self, payroll: Payroll, args: argparse.Namespace) -> int:
        settlement = payroll.settle(self._caller(args), args.address)
        self._print(asdict(settlement))
        return 0

    def _cmd_settle_all(self, payroll: Payroll, args: argparse.Namespace) -> int:
        self._print(_pass_to_dict(payroll.settle_all(self._caller(args))))
        return 0

    def _cmd_probe(self, payroll: Payroll, args: argparse.Namespace) -> int:
        check = payroll.check()
        self._print(
            {
                "upkeep_needed": check.upkeep_needed,
                "checked_at": check.checked_at,
                "balance": check.balance,
                "due_addresses": check.due_addresses,
            }
        )
        return 0 if check.upkeep_needed else 3

    def _cmd_trigger(self, payroll: Payroll, args: argparse.Namespace) -> int:
        caller = CallerContext(args.caller, actor_type="scheduler")
        self._print(_pass_to_dict(payroll.trigger(caller)))
        return 0

    def _cmd_balance(self, payroll: Payroll, args: argparse.Namespace) -> int:
        self._print({"balance": payroll.balance()})
        return 0

    def _cmd_employee(self, payroll: Payroll, args: argparse.Namespace) -> int:
        record = payroll.employee(args.address)
        if record is None:
            print(f"Employee not found: {args.address}", file=self.err)
            return 1
        self._print(asdict(record))
        return 0

    def _cmd_roster(self, payroll: Payroll, args: argparse.Namespace) -> int:
        if args.position is not None:
            try:
                self._print({"position": args.position, "address": payroll.address_at(args.position)})
            except IndexError as e:
                print(str(e), file=self.err)
                return 1
            return 0

        entries = []
        for position in range(payroll.roster_size()):
            address = payroll.address_at(position)
            record = payroll.employee(address)
            entries.append(
                {
                    "position": position,
                    "address": address,
                    "active": record.active if record else False,
                }
            )
        self._print(entries)
        return 0

    def _cmd_events(self, payroll: Payroll, args: argparse.Namespace) -> int:
        events = payroll.events.replay(
            event_types=[args.event_type] if args.event_type else None,
            address=args.address.strip().lower() if args.address else None,
            limit=args.limit,
        )
        self._print([event.to_dict() for event in events])
        return 0

    def _cmd_metrics(self, payroll: Payroll, args: argparse.Namespace) -> int:
        metrics = payroll.metrics()
        if args.format == "prometheus":
            print(metrics.to_prometheus(), file=self.out, end="")
        else:
            print(metrics.to_json(), file=self.out)
        return 0


def main() -> int:
    """CLI entry point."""
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
