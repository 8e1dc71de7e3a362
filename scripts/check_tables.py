"""
List public tables and row counts of the community schema
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import psycopg2

from app.config import settings

EXPECTED_TABLES = (
    "profiles", "workshops", "workshop_participants", "comments",
    "announcements", "announcement_likes", "announcement_comments",
    "badges", "certificates", "notifications", "activity_logs",
)


def main():
    conn = psycopg2.connect(settings.DATABASE_URL)
    cur = conn.cursor()
    cur.execute("select tablename from pg_tables where schemaname='public'")
    tables = {row[0] for row in cur.fetchall()}

    for table in EXPECTED_TABLES:
        if table not in tables:
            print(f"{table}: MISSING")
            continue
        cur.execute(f"select count(*) from {table}")
        print(f"{table}: {cur.fetchone()[0]} rows")

    cur.close()
    conn.close()


if __name__ == '__main__':
    main()
