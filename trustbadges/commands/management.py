#!/usr/bin/env python3
"""
Management CLI commands for the trust badges service.

Usage:
    python -m trustbadges.commands.management <command> [args...]

Commands:
    seed-defaults                    - Create the default badge groups that are missing
    create-admin <email> <password>  - Create an administrator, or promote an existing user
    help                             - Show this help message

Examples:
    python -m trustbadges.commands.management seed-defaults
    python -m trustbadges.commands.management create-admin admin@example.com s3cret-pass
"""

import asyncio
import sys
import logging
from typing import List

from trustbadges.core.auth import get_password_hash
from trustbadges.core.cache import get_settings_cache
from trustbadges.core.config import settings
from trustbadges.core.database import AsyncSessionLocal, create_tables
from trustbadges.models.user import User
from trustbadges.repositories.unit_of_work import SqlAlchemyUnitOfWork
from trustbadges.services.settings_store import SettingsStore

# Configure logging for CLI
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


async def seed_defaults(session_factory=AsyncSessionLocal) -> List[str]:
    """Insert the missing default groups and return their ids."""
    async with session_factory() as session:
        store = SettingsStore(SqlAlchemyUnitOfWork(session), get_settings_cache())
        return await store.seed_defaults()


async def create_admin(email: str, password: str, session_factory=AsyncSessionLocal) -> User:
    """Create an admin user, or grant admin rights and reset the password of an existing one."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    async with session_factory() as session, SqlAlchemyUnitOfWork(session) as uow:
        user = await uow.users.get_by_email(email)
        if user:
            user = await uow.users.apply(user, {
                "hashed_password": get_password_hash(password),
                "is_admin": True,
                "is_active": True,
            })
            logger.info(f"Promoted existing user {email} to admin")
        else:
            user = await uow.users.create_user(email, get_password_hash(password), is_admin=True)
            logger.info(f"Created admin user {email}")
    return user


async def main():
    """Main entry point for management commands."""
    if len(sys.argv) < 2:
        print_help()
        sys.exit(1)

    command = sys.argv[1].lower()

    if command == "help" or command == "--help" or command == "-h":
        print_help()
        return

    handlers = {
        "seed-defaults": handle_seed_defaults,
        "create-admin": handle_create_admin,
    }
    if command not in handlers:
        print(f"Unknown command: {command}")
        print_help()
        sys.exit(1)

    await create_tables()
    await handlers[command]()


async def handle_seed_defaults():
    """Handle the seed-defaults command."""
    print("Seeding default badge groups...")

    try:
        created = await seed_defaults()
    except Exception as e:
        print(f"Error while seeding: {e}")
        sys.exit(1)

    if created:
        print(f"Created: {', '.join(created)}")
    else:
        print("All default groups already exist")


async def handle_create_admin():
    """Handle the create-admin command."""
    if len(sys.argv) < 4:
        print("Error: create-admin requires an email and a password")
        print("Usage: python -m trustbadges.commands.management create-admin <email> <password>")
        sys.exit(1)

    email, password = sys.argv[2], sys.argv[3]

    try:
        user = await create_admin(email, password)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Admin ready: {user.email} (id {user.id})")


def print_help():
    """Print help message."""
    print(__doc__)
    print(f"Environment: {settings.ENVIRONMENT}")


if __name__ == "__main__":
    asyncio.run(main())
