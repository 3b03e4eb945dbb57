#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the account store and MongoDB are reachable.
Usage: python scripts/check_connections.py
"""
from jobboard.core.config import get_settings
from jobboard.db.mongodb import test_mongo_connection
from jobboard.db.postgres import execute_raw_sql, test_postgres_connection


def main():
    settings = get_settings()
    print("=" * 50)
    print("JOB BOARD - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Account store...")
    if settings.database_url:
        print(f"    URL: {settings.database_url.split('@')[-1]}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if test_postgres_connection():
        print("    OK: CONNECTED")
        accounts = execute_raw_sql("SELECT COUNT(*) AS total FROM users")
        print(f"    Accounts: {accounts[0]['total']}")
    else:
        print("    FAILED")

    print("\n[2] MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    OK: CONNECTED")
    else:
        print("    FAILED")

    print("\n[3] Email...")
    if settings.smtp_host:
        print(f"    SMTP: {settings.smtp_host}:{settings.smtp_port}")
    else:
        print("    SMTP not configured, emails are logged")

    print("\n" + "=" * 50)


if __name__ == "__main__":
    main()
