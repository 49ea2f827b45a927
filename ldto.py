#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Linux Day Torino admin backend (SQLite)

Commands:
  init                Create the DB schema and default site settings
  seed                Import skills and users from CSV files
  ical                Print the iCal of a conference (or of one of its events)

The DB path comes from LDTO_DB_PATH, then config.yaml (db_path), then ./ldto.db.
"""

import argparse
import logging
import sys

from linuxday.db import ensure_schema, get_db_path
from linuxday.domain.errors import NotFound
from linuxday.logs import LogContext, ensure_log_schema
from linuxday.services.config_svc import ensure_default_config
from linuxday.services.ical_svc import tropical
from linuxday.services.seed_svc import seed_load


def cmd_init(args):
    ensure_schema()
    ensure_log_schema()
    ensure_default_config()
    print(f"initialized {get_db_path()}")


def cmd_seed(args):
    if not args.skills and not args.users:
        print("nothing to do: pass --skills and/or --users", file=sys.stderr)
        return 2
    log = LogContext("SEED_LOAD", "cli")
    res = seed_load(args.skills, args.users, log)
    log.write("OK")
    print({"message": "ok", **res})


def cmd_ical(args):
    try:
        _, text = tropical(args.conference, args.event)
    except NotFound as e:
        print(str(e), file=sys.stderr)
        return 1
    sys.stdout.write(text)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Linux Day Torino admin backend")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("init")
    sp.set_defaults(func=cmd_init)

    sp = sub.add_parser("seed")
    sp.add_argument("--skills", help="CSV with columns uid, phrase, type")
    sp.add_argument("--users", help="CSV with columns uid, name, surname, email, role")
    sp.set_defaults(func=cmd_seed)

    sp = sub.add_parser("ical")
    sp.add_argument("--conference", required=True)
    sp.add_argument("--event")
    sp.set_defaults(func=cmd_ical)

    args = ap.parse_args(argv)
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s",
                        level=logging.DEBUG if args.verbose else logging.INFO)
    return args.func(args) or 0


if __name__ == "__main__":
    sys.exit(main())
