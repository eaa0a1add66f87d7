"""CLI for Helpdesk Dispatch: bootstrap the store, seed data, inspect availability."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import logging
import sys
from datetime import datetime
from decimal import Decimal

from helpdesk.config import get_settings

_DEMO_SERVICES = [
    ("Hardware diagnostics", Decimal("120.00")),
    ("Software installation", Decimal("80.00")),
    ("Network setup", Decimal("150.00")),
    ("Data backup", Decimal("60.00")),
]

_DEMO_TECHNICIANS = [
    ("Ana Souza", "ana.souza@helpdesk.local", ["08:00", "09:00", "10:00", "11:00"]),
    ("Bruno Lima", "bruno.lima@helpdesk.local", ["14:00", "15:00", "16:00", "17:00"]),
]


async def _open_database():
    from helpdesk.db.engine import Database

    database = Database(get_settings().store)
    await database.open()
    return database


async def cmd_init_db(args):
    """Create all tables."""
    database = await _open_database()
    await database.close()
    print("Database initialized")


async def cmd_create_admin(args):
    """Create an administrator account."""
    from helpdesk.errors import HelpdeskError
    from helpdesk.services.accounts import create_admin

    password = args.password
    if not password:
        password = getpass.getpass("Admin password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match")
            sys.exit(1)

    if len(password) < 6:
        print("Password must be at least 6 characters")
        sys.exit(1)

    database = await _open_database()
    try:
        admin = await database.run(create_admin, args.name, args.email, password)
    except HelpdeskError as exc:
        print(exc.message)
        sys.exit(1)
    finally:
        await database.close()
    print(f"Admin user: {admin.email} (id={admin.id})")


async def _seed(db, password: str):
    from helpdesk.db import crud
    from helpdesk.schemas.technician import TechnicianCreate
    from helpdesk.services.accounts import register_technician

    created_services = 0
    for name, value in _DEMO_SERVICES:
        if not await crud.get_service_by_name(db, name):
            await crud.create_service(db, name, value)
            created_services += 1

    created_techs = 0
    for name, email, availability in _DEMO_TECHNICIANS:
        if await crud.get_user_by_email(db, email):
            continue
        payload = TechnicianCreate(name=name, email=email, password=password, availability=availability)
        await register_technician(db, payload, availability)
        created_techs += 1
    return created_services, created_techs


async def cmd_seed_demo(args):
    """Insert demo catalog services and two technicians (idempotent)."""
    database = await _open_database()
    try:
        services, techs = await database.run(_seed, args.password)
    finally:
        await database.close()
    print(f"Seeded {services} service(s) and {techs} technician(s)")


async def cmd_availability(args):
    """Print the technician availability report."""
    from helpdesk.clock import FixedClock, SystemClock
    from helpdesk.services.workload import availability_report

    settings = get_settings()
    clock = SystemClock(settings.assignment.timezone)
    if args.at:
        hour, minute = (int(part) for part in args.at.split(":"))
        clock = FixedClock(clock.now().replace(hour=hour, minute=minute, second=0, microsecond=0))

    database = await _open_database()
    try:
        async with database.session_factory() as db:
            report = await availability_report(db, clock.now(), settings.assignment.tolerance_minutes)
    finally:
        await database.close()
    print(json.dumps(report.model_dump(mode="json", by_alias=True), indent=2))


def cmd_serve(args):
    import uvicorn

    uvicorn.run("helpdesk.main:app", host=args.host, port=args.port, reload=args.reload)


def _clock_time(value: str) -> str:
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError:
        raise argparse.ArgumentTypeError("expected HH:MM")
    return value


def main():
    parser = argparse.ArgumentParser(description="Helpdesk Dispatch CLI")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Create database tables")

    ca = subparsers.add_parser("create-admin", help="Create an administrator")
    ca.add_argument("--name", required=True, help="Admin display name")
    ca.add_argument("--email", required=True, help="Admin email")
    ca.add_argument("--password", help="Admin password (prompted if omitted)")

    sd = subparsers.add_parser("seed-demo", help="Seed demo services and technicians")
    sd.add_argument("--password", default="technician", help="Password for the demo technicians")

    av = subparsers.add_parser("availability", help="Show technician availability")
    av.add_argument("--at", type=_clock_time, help="Evaluate at HH:MM today instead of now")

    sv = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    sv.add_argument("--host", default="127.0.0.1")
    sv.add_argument("--port", type=int, default=8000)
    sv.add_argument("--reload", action="store_true")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(level=get_settings().log_level.upper())

    if args.command == "init-db":
        asyncio.run(cmd_init_db(args))
    elif args.command == "create-admin":
        asyncio.run(cmd_create_admin(args))
    elif args.command == "seed-demo":
        asyncio.run(cmd_seed_demo(args))
    elif args.command == "availability":
        asyncio.run(cmd_availability(args))
    elif args.command == "serve":
        cmd_serve(args)


if __name__ == "__main__":
    main()
