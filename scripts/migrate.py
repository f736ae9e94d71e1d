"""Run or create Alembic migrations."""

import sys

from alembic import command
from alembic.config import Config

ALEMBIC_INI = "alembic.ini"


def run_migrations(revision: str = "head") -> None:
    """Upgrade the database to the given revision."""
    alembic_cfg = Config(ALEMBIC_INI)

    try:
        print(f"Upgrading database to {revision}...")
        command.upgrade(alembic_cfg, revision)
        print("Migrations completed")
    except Exception as e:
        print(f"Migration failed: {e}", file=sys.stderr)
        sys.exit(1)


def create_migration(message: str) -> None:
    """Autogenerate a migration from the table metadata."""
    alembic_cfg = Config(ALEMBIC_INI)

    try:
        command.revision(alembic_cfg, message=message, autogenerate=True)
        print(f"Created migration: {message}")
    except Exception as e:
        print(f"Migration creation failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    args = sys.argv[1:]
    if not args:
        run_migrations()
    elif args[0] == "create" and len(args) > 1:
        create_migration(" ".join(args[1:]))
    elif args[0] == "upgrade" and len(args) == 2:
        run_migrations(args[1])
    else:
        print("Usage: python scripts/migrate.py [upgrade <revision> | create <message>]")
        sys.exit(2)
