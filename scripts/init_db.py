import os
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.campusflow.models import Base, User
from app.campusflow.platform.modules import default_catalog, sync_registry
from scripts._db_utils import create_script_engine, resolve_database_url, script_session


def create_tables(database_url: str) -> None:
    """Create any missing tables straight from the models (local dev without alembic)."""
    engine = create_script_engine(database_url)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()


def seed_only(*, database_url: str | None = None) -> None:
    """
    Sync the module registry and seed the admin user in an idempotent way.
    Does NOT overwrite an existing admin user's password.
    """
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@campusflow.edu").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"

    db_url = resolve_database_url(database_url)

    # Direct engine/session so this can run in release without importing app.wsgi.
    with script_session(db_url) as s:
        n = sync_registry(s, default_catalog())

        user = s.query(User).filter(User.email == admin_email).one_or_none()
        if not user:
            user = User(
                email=admin_email,
                password_hash=generate_password_hash(admin_password),
                name="Platform Admin",
                role="admin",
                department="Administration",
                interests=[],
                is_active=True,
            )
            s.add(user)
        elif user.role != "admin":
            user.role = "admin"

    print(f"Initialized database (seed_only); {n} modules in registry.")
    print(f"Admin email: {admin_email}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    db_url = resolve_database_url()
    create_tables(db_url)
    seed_only(database_url=db_url)


if __name__ == "__main__":
    main()
