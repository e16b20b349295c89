#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from server.core.config import get_settings
from server.db.session import AsyncSessionLocal, async_engine, create_tables
from server.features.employees import service as employees_service
from server.features.employees.errors import EmployeeConflictError
from server.features.workers import service as workers_service
from server.features.workers.errors import WorkerPhoneConflictError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create a default worker and employee in the dev database.",
    )
    parser.add_argument("--worker-name", default="Default Worker")
    parser.add_argument("--worker-phone", required=True, help="Primary phone of the default worker.")
    parser.add_argument("--employee-name", default="Default Employee")
    parser.add_argument("--employee-phone", required=True)
    parser.add_argument("--employee-password", required=True)
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before seeding.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Allow running against non-dev environments.",
    )
    return parser.parse_args()


def ensure_dev_target(*, force: bool) -> None:
    settings = get_settings()
    environment = settings.environment.lower()
    db_name = settings.db_name.lower()

    looks_like_dev = environment in {"development", "dev", "local"} or "dev" in db_name
    if looks_like_dev or force:
        return

    raise SystemExit(
        "Refusing to run outside a dev-like database target. "
        "Set ENVIRONMENT=development / DB_NAME containing 'dev', or pass --force."
    )


async def main() -> int:
    args = parse_args()
    ensure_dev_target(force=args.force)

    if args.create_tables:
        await create_tables()

    async with AsyncSessionLocal() as session:
        try:
            worker = await workers_service.create_worker(
                session,
                name=args.worker_name,
                primary_phone=args.worker_phone,
            )
            print(f"- worker {worker.id} created")
        except WorkerPhoneConflictError:
            print("- worker phone already registered, skipped")

        try:
            employee = await employees_service.create_employee(
                session,
                name=args.employee_name,
                phone_number=args.employee_phone,
                password=args.employee_password,
            )
            print(f"- employee {employee.id} created")
        except EmployeeConflictError:
            print("- employee phone already registered, skipped")

    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(asyncio.run(main()))
    finally:
        asyncio.run(async_engine.dispose())
