"""
Maintenance commands -- database provisioning and admin accounts.

Usage:
    python manage.py init-db
    python manage.py apply-sql schema.sql policies.sql
    python manage.py create-admin --email admin@example.com --password 'S3cret!pw' --name Admin
    python manage.py set-admin someone@example.com
    python manage.py list-users
    python manage.py issue-token admin@example.com

``init-db`` and the account commands use DATABASE_URL (async driver);
``apply-sql`` runs raw SQL files through DATABASE_URL_SYNC, each file in
its own transaction.

Exit codes:
    0 - success
    1 - command failed
    2 - user not found
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from sqlalchemy import create_engine, update
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from vybgo.config import settings
from vybgo.infrastructure.database import Base, async_session_factory, engine
from vybgo.infrastructure.models import UserModel
from vybgo.infrastructure.repositories import UserRepository
from vybgo.infrastructure.security import create_access_token, hash_password

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SessionFactory = async_sessionmaker[AsyncSession]


class UserNotFound(Exception):
    pass


def _user_row(user: UserModel) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "is_admin": bool(user.is_admin),
    }


# ── Provisioning ──────────────────────────────────────────────────────


async def init_db(db_engine: AsyncEngine) -> None:
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema created")


def apply_sql_files(sync_engine: Engine, paths: Sequence[Path]) -> int:
    """Apply each file in its own transaction; stop at the first failure."""
    applied = 0
    for path in paths:
        sql = path.read_text(encoding="utf-8")
        logger.info("Applying %s", path.name)
        with sync_engine.begin() as conn:
            if sync_engine.dialect.name == "sqlite":
                # sqlite3 only runs multi-statement text via executescript
                conn.connection.driver_connection.executescript(sql)
            else:
                conn.exec_driver_sql(sql)
        applied += 1
        logger.info("Applied %s", path.name)
    return applied


# ── Accounts ──────────────────────────────────────────────────────────


async def create_admin(
    session_factory: SessionFactory,
    email: str,
    password: str,
    name: Optional[str] = None,
) -> dict:
    """Create the admin account, or reset its password if it exists."""
    async with session_factory() as session:
        repo = UserRepository(session)
        user = await repo.get_by_email(email)
        if user is None:
            user = await repo.create(
                UserModel(
                    email=email,
                    password_hash=hash_password(password),
                    name=name,
                    is_admin=True,
                )
            )
        else:
            user.password_hash = hash_password(password)
            user.is_admin = True
            if name:
                user.name = name
        await session.commit()
        return _user_row(user)


async def set_admin(session_factory: SessionFactory, email: str) -> int:
    async with session_factory() as session:
        result = await session.execute(
            update(UserModel).where(UserModel.email == email).values(is_admin=True)
        )
        await session.commit()
        return result.rowcount


async def list_users(session_factory: SessionFactory) -> list[dict]:
    async with session_factory() as session:
        return [_user_row(u) for u in await UserRepository(session).list_all()]


async def issue_token(session_factory: SessionFactory, email: str) -> dict:
    async with session_factory() as session:
        user = await UserRepository(session).get_by_email(email)
        if user is None:
            raise UserNotFound(email)
        return {"user": _user_row(user), "token": create_access_token(user.id)}


# ── CLI ───────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="VYBGO maintenance commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create all tables")

    p = sub.add_parser("apply-sql", help="Apply SQL files (one transaction each)")
    p.add_argument("files", nargs="+", type=Path)
    p.add_argument("--database-url", help="Override DATABASE_URL_SYNC")

    p = sub.add_parser("create-admin", help="Create or reset an admin account")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)
    p.add_argument("--name")

    p = sub.add_parser("set-admin", help="Flag an existing user as admin")
    p.add_argument("email")

    sub.add_parser("list-users", help="Print all users as JSON")

    p = sub.add_parser("issue-token", help="Print a 7-day access token for a user")
    p.add_argument("email")

    return parser


async def run(
    args: argparse.Namespace,
    session_factory: SessionFactory,
    db_engine: AsyncEngine,
) -> int:
    if args.command == "init-db":
        await init_db(db_engine)
    elif args.command == "create-admin":
        user = await create_admin(session_factory, args.email, args.password, args.name)
        print(json.dumps(user, indent=2))
    elif args.command == "set-admin":
        print(f"Rows updated: {await set_admin(session_factory, args.email)}")
    elif args.command == "list-users":
        print(json.dumps(await list_users(session_factory), indent=2))
    elif args.command == "issue-token":
        try:
            print(json.dumps(await issue_token(session_factory, args.email)))
        except UserNotFound:
            logger.error("User not found for email: %s", args.email)
            return 2
    return 0


async def _run_and_dispose(args: argparse.Namespace) -> int:
    try:
        return await run(args, async_session_factory, engine)
    finally:
        await engine.dispose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.command == "apply-sql":
            sync_engine = create_engine(args.database_url or settings.database_url_sync)
            try:
                apply_sql_files(sync_engine, args.files)
            finally:
                sync_engine.dispose()
            return 0
        return asyncio.run(_run_and_dispose(args))
    except Exception:
        logger.exception("Command %s failed", args.command)
        return 1


if __name__ == "__main__":
    sys.exit(main())
