# agency_crm/cli/seed_demo.py
from __future__ import annotations
import argparse

from sqlalchemy import func, select

from agency_crm.store.db import init_db, reset_db, resolve_database_url
from agency_crm.store.repository import ALL_TABLES, unit_of_work

def main(argv=None):
    ap = argparse.ArgumentParser(description="Create the schema and load demo data")
    ap.add_argument("--reset", action="store_true", help="Drop and recreate every table first")
    args = ap.parse_args(argv)

    if args.reset:
        reset_db(seed=True)
    else:
        init_db(seed=True)

    print(f"[OK] Database ready: {resolve_database_url()}")
    with unit_of_work() as uow:
        for model in ALL_TABLES:
            print(f"  {model.__tablename__:<16} {uow.session.scalar(select(func.count()).select_from(model))}")

if __name__ == "__main__":
    main()
