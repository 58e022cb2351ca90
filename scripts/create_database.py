#!/usr/bin/env python
"""Create the PostgreSQL database from `DATABASE_URL` in .env.

Usage:
  python scripts/create_database.py [--password PASSWORD]

SQLite databases are created on first connection and need no setup.
"""
import argparse
import os
import sys
from getpass import getpass

# Ensure project root is on sys.path so `eventledger` package can be imported
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import psycopg2
from psycopg2 import sql
from psycopg2 import OperationalError
from sqlalchemy.engine import make_url

from eventledger.config import settings


def connect_admin_db(url, password):
    return psycopg2.connect(
        dbname="postgres",
        user=url.username,
        password=password,
        host=url.host or "localhost",
        port=url.port or 5432,
    )


def ensure_database(conn, target_db):
    conn.autocommit = True
    cur = conn.cursor()
    try:
        cur.execute("SELECT 1 FROM pg_database WHERE datname=%s", (target_db,))
        if cur.fetchone():
            print(f"Database '{target_db}' already exists.")
        else:
            cur.execute(sql.SQL("CREATE DATABASE {};").format(sql.Identifier(target_db)))
            print(f"Database '{target_db}' created.")
    finally:
        cur.close()
        conn.close()


def main():
    url = make_url(settings.DATABASE_URL)
    if not url.drivername.startswith("postgresql"):
        print("DATABASE_URL is not a PostgreSQL URL; nothing to do.")
        return

    target_db = url.database
    if not target_db:
        print("No database name found in DATABASE_URL")
        sys.exit(1)

    # Accept password from CLI or environment for non-interactive use
    parser = argparse.ArgumentParser()
    parser.add_argument("--password", "-p", help="Postgres admin password")
    args = parser.parse_args()

    pw_source = args.password or os.getenv("POSTGRES_PASSWORD") or url.password

    try:
        conn = connect_admin_db(url, pw_source)
    except OperationalError:
        if not sys.stdin.isatty():
            print("Password authentication failed. Provide the password via --password or POSTGRES_PASSWORD env var.")
            sys.exit(1)
        print("Password authentication failed. Please enter the Postgres password for user:", url.username)
        try:
            conn = connect_admin_db(url, getpass())
        except OperationalError as e:
            print("Error creating database:", e)
            sys.exit(1)

    ensure_database(conn, target_db)


if __name__ == "__main__":
    main()
