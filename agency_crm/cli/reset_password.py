# agency_crm/cli/reset_password.py
from __future__ import annotations
import argparse

from agency_crm.services.users import set_password
from agency_crm.store.db import init_db
from agency_crm.store.repository import unit_of_work

def main(argv=None):
    ap = argparse.ArgumentParser(description="Reset a user's password (Argon2)")
    ap.add_argument("--email", type=str, required=True, help="Login email of the user")
    ap.add_argument("--new-password", type=str, required=True, help="New plaintext password")
    ap.add_argument("--verify", action="store_true", help="Also mark the account as email-verified")
    args = ap.parse_args(argv)

    init_db()
    with unit_of_work() as uow:
        user = set_password(uow, args.email, args.new_password, verify=args.verify)
        print(f"[OK] Password reset for user_id={user.id} ({user.email}, argon2).")

if __name__ == "__main__":
    main()
