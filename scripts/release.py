"""
Release phase: migrate, then sync the module registry and seed the admin.

Runs before the web process starts (see scripts/start.py). Safe to re-run:
alembic only applies missing revisions and the seed never overwrites an
existing admin password.

Usage:
  python scripts/release.py [--skip-migrations] [--skip-seed]
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _release_database_url() -> str:
    load_dotenv(override=False)
    db_url = (os.environ.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("Missing required environment variable DATABASE_URL.")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and db_url.startswith("sqlite"):
        raise RuntimeError("Refusing to release against sqlite in production. Set DATABASE_URL to Postgres.")
    return db_url


def alembic_config(db_url: str):
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    # configparser interpolation: a literal % in a password must be doubled
    cfg.set_main_option("sqlalchemy.url", db_url.replace("%", "%%"))
    return cfg


def run_release(*, migrate: bool = True, seed: bool = True) -> None:
    db_url = _release_database_url()
    print("=== Campus Flow release ===", flush=True)

    if migrate:
        from alembic import command
        from alembic.script import ScriptDirectory

        cfg = alembic_config(db_url)
        head = ScriptDirectory.from_config(cfg).get_current_head()
        print(f"Upgrading schema to {head}...", flush=True)
        command.upgrade(cfg, "head")
    else:
        print("Skipping migrations.", flush=True)

    if seed:
        from scripts import init_db

        init_db.seed_only(database_url=db_url)
    else:
        print("Skipping registry sync and admin seed.", flush=True)

    print("=== Campus Flow release done ===", flush=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run migrations and idempotent seeding.")
    parser.add_argument("--skip-migrations", action="store_true")
    parser.add_argument("--skip-seed", action="store_true")
    args = parser.parse_args(argv)
    run_release(migrate=not args.skip_migrations, seed=not args.skip_seed)


if __name__ == "__main__":
    main()
