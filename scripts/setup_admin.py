#!/usr/bin/env python3
"""
Bootstrap Script
================
Create (or reset) the default super admin and seed site settings and the
default tool catalog.

Usage:
    python scripts/setup_admin.py
    python scripts/setup_admin.py --email ops@aitoolshub.com --password s3cret!
    python scripts/setup_admin.py --db data/hub.db --reset-password
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import settings
from src.exceptions import HubError
from src.logging_config import get_logger
from src.repository import AdminRepo, SiteSettingsRepo, ToolRepo
from src.store import DocumentStore

logger = get_logger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Create the default super admin and seed defaults",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  ADMIN_EMAIL / ADMIN_PASSWORD override the default credentials.
  HUB_DB_PATH overrides the database location.

Change the default password after the first sign-in.
""",
    )
    parser.add_argument("--db", type=Path, default=settings.db_path, help=f"Database path (default: {settings.db_path})")
    parser.add_argument("--email", default=settings.default_admin_email, help="Super admin email")
    parser.add_argument("--password", default=settings.default_admin_password, help="Super admin password")
    parser.add_argument(
        "--reset-password",
        action="store_true",
        help="Overwrite the password when the admin already exists",
    )
    parser.add_argument("--skip-seed", action="store_true", help="Do not seed settings or tools")

    args = parser.parse_args()

    store = DocumentStore(args.db)
    admins = AdminRepo(store)

    try:
        existing = admins.get_by_email(args.email)
        if existing is None:
            admin = admins.create_admin(args.email, args.password, role="super_admin", display_name="Super Admin")
            print(f"✓ Created super admin {admin['email']} ({admin['id']})")
        else:
            admins.set_role(existing["id"], "super_admin")
            admins.set_status(existing["id"], True)
            if args.reset_password:
                admins.set_password(existing["id"], args.password)
                print(f"✓ Reset password for {existing['email']}")
            else:
                print(f"✓ Super admin {existing['email']} already exists; role and status refreshed")

        if not args.skip_seed:
            if SiteSettingsRepo(store).ensure_defaults():
                print("✓ Seeded default site settings")
            seeded = ToolRepo(store).seed_defaults()
            if seeded:
                print(f"✓ Seeded {seeded} default tools")
    except HubError as exc:
        logger.error("Setup failed: %s", exc)
        print(f"✗ Setup failed: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"\nDatabase: {args.db}")


if __name__ == "__main__":
    main()
