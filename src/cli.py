# src/cli.py
from __future__ import annotations

import os
import sys
import json
import argparse
import traceback
from datetime import date

# Ensure our package is importable regardless of CWD
sys.path.insert(0, os.path.dirname(__file__))

# ---------------------------
# Commands
# ---------------------------

def cmd_serve(port: int, host: str, debug: bool):
    from agegate import create_app
    app = create_app()
    app.run(host=host, port=port, debug=debug)


def cmd_db_ping() -> None:
    from agegate.db.mongo import ping
    ok = ping()
    print("mongo ping:", "ok" if ok else "failed")
    if not ok:
        raise SystemExit(2)


def cmd_db_indexes() -> None:
    from agegate.db.mongo import ensure_indexes, SESSIONS_COLLECTION
    ensure_indexes()
    print(f"indexes ensured on {SESSIONS_COLLECTION}")


def cmd_config():
    # Pretty-print the effective gate settings to verify .env wiring
    from agegate import config
    print(json.dumps({
        "ok": True,
        "session_backend": config.SESSION_BACKEND,
        "api_prefix": config.API_PREFIX,
        "gate": config.gate_settings().to_dict(),
    }, indent=2))


def cmd_check_dob(value: str, date_format: str, min_age: int | None, today: str | None):
    """
    Run a DOB through the same normalizer/age logic as /verify.
    Exit code 3 when the value is rejected.
    """
    from agegate import config
    from agegate.gate.dob import InvalidDob, age_from_iso, normalize_dob

    if min_age is None:
        min_age = config.gate_settings().min_age
    on = date.fromisoformat(today) if today else date.today()
    try:
        iso = normalize_dob(value, date_format)
    except InvalidDob as e:
        print(json.dumps({"ok": False, "error": str(e)}))
        raise SystemExit(3)
    age = age_from_iso(iso, on)
    print(json.dumps({
        "ok": True,
        "dob": iso,
        "age": age,
        "min_age": min_age,
        "result": "passed" if age >= min_age else "denied",
    }))


def cmd_secret(action: str):
    if action == "gen-key":
        import secrets
        print(secrets.token_hex(32))
        return
    raise SystemExit("unknown secret action")


# ---------------------------
# Parser / main
# ---------------------------

def main(argv=None):
    p = argparse.ArgumentParser(description="Age gate CLI")
    sub = p.add_subparsers(dest="cmd", required=True)

    # serve
    sp = sub.add_parser("serve", help="Run Flask server")
    sp.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")))
    sp.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    sp.add_argument("--debug", action="store_true")
    sp.set_defaults(func=lambda a: cmd_serve(a.port, a.host, a.debug))

    # db
    sc = sub.add_parser("db", help="Database utilities")
    sc_sub = sc.add_subparsers(dest="dbcmd", required=True)
    scp = sc_sub.add_parser("ping", help="Ping MongoDB")
    scp.set_defaults(func=lambda a: cmd_db_ping())
    sci = sc_sub.add_parser("ensure-indexes", help="Create session indexes (sid, TTL)")
    sci.set_defaults(func=lambda a: cmd_db_indexes())

    # config
    cf = sub.add_parser("config", help="Print effective gate settings")
    cf.set_defaults(func=lambda a: cmd_config())

    # check-dob
    cd = sub.add_parser("check-dob", help="Normalize a DOB and compute the age verdict")
    cd.add_argument("value")
    cd.add_argument("--format", dest="date_format", default="mdy", choices=["mdy", "dmy"])
    cd.add_argument("--min-age", type=int, default=None)
    cd.add_argument("--today", default=None, help="YYYY-MM-DD, defaults to today")
    cd.set_defaults(func=lambda a: cmd_check_dob(a.value, a.date_format, a.min_age, a.today))

    # secret
    ss = sub.add_parser("secret", help="Secret helpers")
    ss_sub = ss.add_subparsers(dest="action", required=True)
    ss_sub.add_parser("gen-key", help="Hex key for SECRET_KEY")
    ss.set_defaults(func=lambda a: cmd_secret(a.action))

    args = p.parse_args(argv)
    try:
        return args.func(args)
    except SystemExit:
        raise
    except Exception as e:
        # Surface trace on CLI errors
        print("ERROR:", e)
        traceback.print_exc()
        raise SystemExit(1)


if __name__ == "__main__":
    main()
