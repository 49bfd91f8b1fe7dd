#!/usr/bin/env python3
"""
Operator commands for the docket portal.

    python backend/manage.py init-db
    python backend/manage.py create-admin --email ops@example.com --password '...'
    python backend/manage.py register-candidate --phone +15550001 --name "Jane Doe"
    python backend/manage.py purge-expired
"""

import argparse
import getpass
import sys
from pathlib import Path

from fastapi import HTTPException

# Add project root to path so `backend.portal` resolves when run as a script.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from backend.portal.database import SessionLocal, init_db  # noqa: E402
from backend.portal.services.admin_service import create_admin_account  # noqa: E402
from backend.portal.services.otp_service import purge_expired_otps  # noqa: E402
from backend.portal.services.session_service import purge_expired_sessions  # noqa: E402
from backend.portal.services.user_service import register_candidate  # noqa: E402
from backend.portal.utils.error_handlers import AppError  # noqa: E402
from backend.portal.utils.validation import normalize_phone, validate_password  # noqa: E402


def cmd_init_db(args: argparse.Namespace) -> int:
    print("Initializing database with all models...")
    init_db()
    print("✓ Database initialized successfully")
    return 0


def cmd_create_admin(args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Admin password: ")
    try:
        validate_password(password)
    except HTTPException as e:
        print(f"✗ {e.detail}")
        return 1
    init_db()
    db = SessionLocal()
    try:
        account = create_admin_account(db, email=args.email, password=password, name=args.name)
    except (AppError, ValueError) as e:
        print(f"✗ {getattr(e, 'message', e)}")
        return 1
    finally:
        db.close()
    print(f"✓ Admin account created: {account.email}")
    return 0


def cmd_register_candidate(args: argparse.Namespace) -> int:
    phone = normalize_phone(args.phone)
    if not phone:
        print(f"✗ Invalid phone number: {args.phone}")
        return 1
    init_db()
    db = SessionLocal()
    try:
        user = register_candidate(
            db,
            phone=phone,
            email=(args.email or "").strip().lower() or None,
            display_name=args.name,
        )
        print(f"✓ Candidate registered: id={user.id} uid={user.uid} phone={user.phone}")
    except AppError as e:
        print(f"✗ {e.message}")
        return 1
    finally:
        db.close()
    return 0


def cmd_purge_expired(args: argparse.Namespace) -> int:
    db = SessionLocal()
    try:
        otps = purge_expired_otps(db)
        sessions = purge_expired_sessions(db)
    finally:
        db.close()
    print(f"✓ Purged {otps} one-time codes and {sessions} sessions")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Docket portal operator commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create missing tables").set_defaults(func=cmd_init_db)

    p = sub.add_parser("create-admin", help="create an admin account")
    p.add_argument("--email", required=True)
    p.add_argument("--password", help="prompted for when omitted")
    p.add_argument("--name")
    p.set_defaults(func=cmd_create_admin)

    p = sub.add_parser("register-candidate", help="pre-register a candidate phone number")
    p.add_argument("--phone", required=True)
    p.add_argument("--email")
    p.add_argument("--name")
    p.set_defaults(func=cmd_register_candidate)

    sub.add_parser("purge-expired", help="delete expired codes and sessions").set_defaults(func=cmd_purge_expired)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
