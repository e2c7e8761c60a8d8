"""
Database setup script.
Creates tables if they don't exist and optionally the first admin user.

Usage:
    python setup_db.py
    python setup_db.py admin@crashify.com.au "Admin Name" 'Str0ngPassword'
"""
import sys

from crashify.db.base import Base, SessionLocal, engine
from crashify.core.security import get_password_hash
from crashify.core.validation import sanitize_email, validate_password_strength
from crashify.models import Assessment, AuditLog, EmailFilter, EmailLog, UploadedFile, User  # noqa: F401


def create_admin(email: str, name: str, password: str) -> None:
    errors = validate_password_strength(password)
    if errors:
        print(f"❌ {', '.join(errors)}")
        sys.exit(1)

    db = SessionLocal()
    try:
        email = sanitize_email(email)
        if db.query(User).filter(User.email == email).first():
            print(f"ℹ️  User {email} already exists, skipping")
            return
        db.add(User(
            email=email,
            name=name,
            hashed_password=get_password_hash(password),
            role="admin",
            is_active=True,
        ))
        db.commit()
        print(f"✅ Admin user {email} created")
    finally:
        db.close()


if __name__ == "__main__":
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✅ Database tables created successfully!")

    if len(sys.argv) == 4:
        create_admin(sys.argv[1], sys.argv[2], sys.argv[3])
