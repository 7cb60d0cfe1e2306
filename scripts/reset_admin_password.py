import argparse
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from voicebox_api.db_init import init_db
from voicebox_api.utils.admin_config import reset_admin_password
from voicebox_api.utils.db_tools import with_db


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Overwrite the stored admin password.")
    parser.add_argument(
        "password",
        nargs="?",
        help="New password (defaults to ADMIN_PASSWORD or the built-in seed)",
    )
    args = parser.parse_args(argv)

    if args.password is not None and len(args.password.strip()) < 8:
        print("[reset] password must be at least 8 characters")
        return 1

    init_db()
    with with_db() as db:
        reset_admin_password(db, args.password)
    print("[reset] admin password updated")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
