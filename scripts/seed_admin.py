"""
Seed an administrator account.

Public registration accepts any role, but a fresh deployment still
needs a first admin to link users to accounts. This script creates one
through the regular registration service. It is idempotent: an existing
user with the same email is left untouched.

Usage:
    python scripts/seed_admin.py --email admin@example.com --password 'long-password'

Security:
    Pick a strong password; there is no default.
"""

import argparse
import asyncio
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from budget_planning.core.database import async_session_maker, close_db, init_db
from budget_planning.models.user import Role
from budget_planning.repositories.user import UserRepository
from budget_planning.services.registration import RegistrationService


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Create the first administrator account')
    parser.add_argument('--email', required=True, help='Login username of the admin')
    parser.add_argument('--password', required=True, help='Admin password')
    parser.add_argument('--name', default='admin', help='Display name (default: admin)')
    return parser.parse_args(argv)


async def seed_admin(name: str, email: str, password: str) -> bool:
    """
    Create the admin user unless the email is taken.

    Returns:
        True if a user was created, False if it already existed
    """
    await init_db()
    try:
        async with async_session_maker() as session:
            if await UserRepository(session).email_exists(email):
                print(f"User {email} already exists. Skipping...")
                return False

            user, _ = await RegistrationService(session).register(
                name=name,
                email=email,
                password=password,
                role=Role.ADMIN.value,
            )
            print(f"Admin user created (id={user.id}, username={user.email})")
            return True
    finally:
        await close_db()


if __name__ == "__main__":
    args = parse_args()
    print("Seeding admin user...")
    asyncio.run(seed_admin(args.name, args.email, args.password))
    print("Done!")
