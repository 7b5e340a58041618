"""
Create the first administrator from the command line.

POST /admins needs a token, so the very first account has to be created
out of band:

    python -m busadmin.seed --name "Admin" --email admin@example.com
    python -m busadmin.seed --name "Admin" --email admin@example.com --password "s3cret" --create-schema

If --password is omitted, you will be prompted to enter it securely.
Database settings are read from the environment / .env like the server.
"""

import argparse
import asyncio
import getpass
import sys
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from busadmin.config import Settings
from busadmin.context import AppContext
from busadmin.exceptions import BusAdminError
from busadmin.schemas.auth import AdminCreate, AdminUser


async def create_first_admin(
    settings: Settings,
    payload: AdminCreate,
    create_schema: bool = False,
) -> AdminUser:
    context = AppContext.build(settings)
    try:
        if create_schema:
            await context.create_schema()
        async with context.session_factory() as session:
            return await context.auth_service.create_admin(session, payload)
    finally:
        await context.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Create a bus admin account.")
    ap.add_argument("--name", required=True, help="Display name of the admin")
    ap.add_argument("--email", required=True, help="Login email (must be unique)")
    ap.add_argument("--password", help="Password. If omitted, you'll be prompted securely.")
    ap.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables before inserting (development databases)",
    )
    args = ap.parse_args(argv)

    password = args.password or getpass.getpass("Enter password: ")
    if not password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        return 1

    try:
        payload = AdminCreate(name=args.name, email=args.email, password=password)
    except PydanticValidationError as e:
        print(f"[!] Invalid input: {e.errors()[0]['msg']}", file=sys.stderr)
        return 1

    try:
        admin = asyncio.run(create_first_admin(Settings(), payload, args.create_schema))
    except BusAdminError as e:
        print(f"[!] {e.message}", file=sys.stderr)
        return 1

    print(f"[+] Created admin {admin.email} ({admin.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
