#!/usr/bin/env python3
"""
Database management script.
Creates or drops tables and creates administrator accounts.
"""

import argparse
import asyncio
import logging
import sys

from marketplace.config import get_settings
from marketplace.database import Database
from marketplace.services.auth import AuthService
from marketplace.utils.auth import CredentialService
from marketplace.utils.exceptions import APIException

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class ManagementCommands:
    """Operator commands run against the configured database."""

    def __init__(self):
        self.settings = get_settings()
        self.database = Database(self.settings)

    async def create_tables(self) -> None:
        try:
            await self.database.create_tables()
        finally:
            await self.database.dispose()

    async def drop_tables(self) -> None:
        try:
            await self.database.drop_tables()
        finally:
            await self.database.dispose()

    async def create_admin(self, name: str, email: str, password: str) -> None:
        """Admins cannot self-register, so they are created here."""
        credentials = CredentialService(self.settings)
        try:
            async with self.database.session_factory() as session:
                user = await AuthService(session, credentials).create_admin(name, email, password)
                logger.info(f"Admin account ready: {user.email} (ID: {user.id})")
        finally:
            await self.database.dispose()


def main():
    """Main CLI interface."""
    parser = argparse.ArgumentParser(description="Property marketplace database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create-tables", help="Create all tables")

    drop_parser = subparsers.add_parser("drop-tables", help="Drop all tables (not in production)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping every table")

    admin_parser = subparsers.add_parser("create-admin", help="Create an administrator account")
    admin_parser.add_argument("--email", required=True, help="Admin email")
    admin_parser.add_argument("--name", required=True, help="Admin display name")
    admin_parser.add_argument("--password", required=True, help="Admin password (minimum 8 characters)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    commands = ManagementCommands()

    try:
        if args.command == "create-tables":
            asyncio.run(commands.create_tables())

        elif args.command == "drop-tables":
            if not args.confirm:
                logger.error("Dropping tables requires --confirm flag")
                sys.exit(1)
            asyncio.run(commands.drop_tables())

        elif args.command == "create-admin":
            asyncio.run(commands.create_admin(args.name, args.email, args.password))

    except (APIException, RuntimeError) as e:
        detail = e.detail if isinstance(e, APIException) else str(e)
        logger.error(f"Command failed: {detail}")
        sys.exit(1)


if __name__ == "__main__":
    main()
