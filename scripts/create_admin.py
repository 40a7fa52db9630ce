"""
Create an administrator account.

Creates the schema and the default settings if they are missing, then
registers a user with the admin role.

    python scripts/create_admin.py --username admin --email admin@example.com --password Admin!2026
"""

# Add project root to sys.path so `app.*` imports work even if CWD changes
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

from fastapi import HTTPException
from pydantic import ValidationError

from app.database.database import SessionLocal, Base, engine
from app.modules.auth.schemas import UserCreate
from app.modules.auth.service import AuthService
from app.modules.settings.service import SettingsService

# Register every table on Base.metadata
import app.modules.auth.models
import app.modules.customers.models
import app.modules.products.models
import app.modules.invoices.models
import app.modules.settings.models


def main():
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--email", default="admin@example.com")
    parser.add_argument("--password", required=True)
    args = parser.parse_args()

    try:
        user_data = UserCreate(username=args.username, email=args.email, password=args.password)
    except ValidationError as e:
        print(f"Invalid input: {e}")
        return 1

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        SettingsService(db).ensure_defaults()
        user = AuthService(db).create_user(user_data, role="admin")
        print(f"Admin user created: {user.username} (id={user.id})")
    except HTTPException as e:
        print(f"Could not create admin: {e.detail}")
        return 1
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
