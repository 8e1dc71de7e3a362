"""
Script to create an Admin profile
Run this to create the first admin, who can then promote others
"""

import sys
import asyncio
import uuid
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.database import database, connect_db, disconnect_db
from app.auth import hash_password, generate_random_password


async def create_admin(email: str, name: str, password: str = None):
    """
    Create an ADMIN profile

    Args:
        email: Admin email
        name: Display name
        password: Password (if None, will generate random)
    """

    await connect_db()

    try:
        existing = await database.fetch_one(
            "SELECT id FROM profiles WHERE LOWER(email) = LOWER(:email)",
            {"email": email}
        )

        if existing:
            print(f"A profile with email {email} already exists!")
            return

        generated = password is None
        if generated:
            password = generate_random_password(12)

        await database.execute(
            """
            INSERT INTO profiles (id, name, email, password_hash, role, officer_org)
            VALUES (:id, :name, :email, :password_hash, 'ADMIN', NULL)
            """,
            {
                "id": str(uuid.uuid4()),
                "name": name,
                "email": email.lower(),
                "password_hash": hash_password(password)
            }
        )

        print("Admin created successfully!")
        print(f"   Email: {email}")
        print(f"   Name: {name}")

        if generated:
            print(f"   Password: {password}")
            print("   IMPORTANT: Save this password and change it after the first login.")
        else:
            print("   Password: (custom password set)")

    finally:
        await disconnect_db()


async def main():
    """Main function"""
    print("\n" + "=" * 60)
    print("CREATE ADMIN")
    print("=" * 60 + "\n")

    email = input("Enter email: ").strip()
    name = input("Enter name: ").strip()

    use_custom = input("Set custom password? (y/n): ").strip().lower()

    if use_custom == 'y':
        password = input("Enter password: ").strip()
        confirm = input("Confirm password: ").strip()

        if password != confirm:
            print("Passwords do not match!")
            return

        if len(password) < 8:
            print("Password must be at least 8 characters!")
            return
    else:
        password = None

    print("\n")
    await create_admin(email, name, password)
    print("\n")


if __name__ == "__main__":
    asyncio.run(main())
