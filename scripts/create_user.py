#!/usr/bin/env python3
"""Script to register a chat user and print an access token for it."""

import sys
from pathlib import Path

# Add parent directory to path so we can import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.database import SessionLocal
from app.core.security import create_access_token
from app.models.user import USER_ROLES, User


def create_user(
    user_id: str,
    email: str,
    role: str = "customer",
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    """Create a new user in the database."""
    db = SessionLocal()
    try:
        existing = db.query(User).filter(
            (User.id == user_id) | (User.email == email)
        ).first()
        if existing:
            print(f"User with id '{user_id}' or email '{email}' already exists!")
            sys.exit(1)

        user = User(
            id=user_id,
            email=email,
            role=role,
            first_name=first_name,
            last_name=last_name,
            is_active=True,
        )

        db.add(user)
        db.commit()
        db.refresh(user)

        print("User created successfully!")
        print(f"   Id: {user.id}")
        print(f"   Email: {user.email}")
        print(f"   Role: {user.role}")
        print(f"\nAccess token:\n{create_access_token(user.id)}")

        return user
    except Exception as e:
        db.rollback()
        print(f"Error creating user: {e}")
        sys.exit(1)
    finally:
        db.close()


def main():
    """Main entry point for the script."""
    if len(sys.argv) < 3:
        print("Usage: python create_user.py <user_id> <email> [role] [first_name] [last_name]")
        print("\nExample:")
        print("  python create_user.py admin1 admin1@example.com admin Ada Lovelace")
        print("  python create_user.py u1 u1@example.com customer")
        print(f"\nRoles: {', '.join(USER_ROLES)}")
        sys.exit(1)

    role = sys.argv[3] if len(sys.argv) > 3 else "customer"
    if role not in USER_ROLES:
        print(f"Invalid role '{role}'. Must be: {', '.join(USER_ROLES)}")
        sys.exit(1)

    create_user(
        user_id=sys.argv[1],
        email=sys.argv[2],
        role=role,
        first_name=sys.argv[4] if len(sys.argv) > 4 else None,
        last_name=sys.argv[5] if len(sys.argv) > 5 else None,
    )


if __name__ == "__main__":
    main()
