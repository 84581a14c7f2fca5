"""
Create or update Firebase Auth accounts and their ``system_users`` profiles.

Reads ``ADMIN_*`` and ``VIEWER_*`` environment variables by default.
Existing Firebase Auth users get a new password and display name; new
ones are created pre-verified.  Role claims (``role``, ``isAdmin``) are
set on every run.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from arta_backend.scripts._bootstrap import build_services
from arta_backend.services.user_provisioning import ROLE_PREFIXES, users_from_env


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Provision Firebase Auth admin users")
    parser.add_argument(
        "--roles",
        nargs="+",
        choices=sorted(ROLE_PREFIXES),
        default=["ADMIN", "VIEWER"],
        help="Environment prefixes to read (default: ADMIN VIEWER)",
    )
    args = parser.parse_args(argv)

    requests = users_from_env(args.roles)
    if not requests:
        print("No users configured. Set ADMIN_EMAIL/ADMIN_PASSWORD or VIEWER_EMAIL/VIEWER_PASSWORD.")
        return 1

    services, _ = build_services()
    summary = services["user_provisioning_service"].provision_all(requests)

    for email in summary.created:
        print(f"Created: {email}")
    for email in summary.updated:
        print(f"Updated: {email}")
    for email, error in summary.errors.items():
        print(f"Error: {email}: {error}")
    return 1 if summary.has_errors else 0


if __name__ == "__main__":
    sys.exit(main())
