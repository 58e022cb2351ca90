"""
Script to create an Admin (event organizer)
Signup only ever creates attendees, so organizers are created here
"""

import sys
import asyncio
from getpass import getpass
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from eventledger.auth import check_password_policy, generate_random_password
from eventledger.database import connect_db, disconnect_db, run_migrations
from eventledger.errors import DuplicateEmail, ValidationError
from eventledger.services.identity_service import identity_service


async def create_admin(email: str, name: str, password: str = None):
    """
    Create an admin user

    Args:
        email: Admin email
        name: Admin display name
        password: Password (if None, will generate random)
    """
    run_migrations()
    await connect_db()

    try:
        generated = password is None
        if generated:
            password = generate_random_password(12)

        try:
            user = await identity_service.create_user(name, email, password, role="admin")
        except DuplicateEmail:
            print(f"❌ An account with email {email} already exists!")
            return

        print("✅ Admin created successfully!")
        print(f"   Email: {user['email']}")
        print(f"   Name: {user['name']}")

        if generated:
            print(f"   Password: {password}")
            print("   ⚠️  IMPORTANT: Save this password, it is not shown again.")
        else:
            print("   Password: (custom password set)")

    finally:
        await disconnect_db()


async def main():
    """Main function"""
    print("\n" + "="*60)
    print("CREATE ADMIN")
    print("="*60 + "\n")

    email = input("Enter email: ").strip()
    name = input("Enter name: ").strip()

    use_custom = input("Set custom password? (y/n): ").strip().lower()

    if use_custom == 'y':
        password = getpass("Enter password: ").strip()
        confirm = getpass("Confirm password: ").strip()

        if password != confirm:
            print("❌ Passwords do not match!")
            return

        try:
            check_password_policy(password)
        except ValidationError as e:
            print(f"❌ {e.message}")
            return
    else:
        password = None

    print("\n")
    await create_admin(email, name, password)
    print("\n")


if __name__ == "__main__":
    asyncio.run(main())
