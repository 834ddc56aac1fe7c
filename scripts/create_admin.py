"""
Script to create an admin account, or promote an existing user to admin.
Run: python -m scripts.create_admin admin@example.edu --password 'S3curePass!' --name 'Admissions Office'
"""
import argparse
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from admissions.db.session import SessionLocal
from admissions.db.init_db import init_db
from admissions.db.models.user import User, UserRole
from admissions.core.security import hash_password
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def make_user_admin(db, email: str, password: str = None, full_name: str = "Admissions Admin") -> bool:
    """Create or promote a user to the admin role."""
    try:
        user = db.query(User).filter(User.email == email.lower()).first()

        if not user:
            if not password:
                logger.error(f"User {email} not found and no password provided. Cannot create user.")
                return False

            logger.info(f"Creating new admin user: {email}")
            user = User(
                email=email.lower(),
                full_name=full_name,
                password_hash=hash_password(password),
                role=UserRole.ADMIN.value,
            )
            db.add(user)
        else:
            logger.info(f"Promoting existing user to admin: {email} (ID: {user.id})")
            user.role = UserRole.ADMIN.value

        db.commit()
        return True

    except Exception as e:
        db.rollback()
        logger.error(f"Error creating admin user: {e}", exc_info=True)
        return False


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote an admissions admin")
    parser.add_argument("email")
    parser.add_argument("--password", default=None, help="Required when the user does not exist yet")
    parser.add_argument("--name", default="Admissions Admin")
    args = parser.parse_args(argv)

    init_db()
    db = SessionLocal()
    try:
        success = make_user_admin(db, args.email, args.password, args.name)
    finally:
        db.close()

    if success:
        print(f"\n[SUCCESS] {args.email} is now an admin")
        return 0
    print(f"\n[ERROR] Failed to set up admin {args.email}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
