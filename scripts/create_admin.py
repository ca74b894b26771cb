#!/usr/bin/env python3
"""
Creates the first ADMIN account
Reads ADMIN_* from the environment (.env) unless given on the command line

    python scripts/create_admin.py --username sa001 --password 12345678
"""
import argparse
import sys
from pathlib import Path

# Make the project importable when run from scripts/
sys.path.insert(0, str(Path(__file__).parent.parent))

from lms_admin import create_app
from lms_admin.config import get_config
from lms_admin.seed import ensure_admin


def main(argv=None, config_object=None):
    parser = argparse.ArgumentParser(description="Create the first admin user")
    parser.add_argument("--email")
    parser.add_argument("--username")
    parser.add_argument("--employee-id")
    parser.add_argument("--password")
    parser.add_argument("--full-name", default="Administrator")
    args = parser.parse_args(argv)

    # No development seed: only the account described here is created
    class ScriptConfig(config_object or get_config()):
        SEED_ADMIN = False

    app = create_app(ScriptConfig)
    with app.app_context():
        user, created = ensure_admin(
            email=args.email,
            username=args.username,
            employee_id=args.employee_id,
            password=args.password,
            full_name=args.full_name,
        )

        if created:
            print(f"Admin created: {user.username} ({user.employee_id})")
        else:
            print(f"User already exists: {user.username} ({user.email})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
