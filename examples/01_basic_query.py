"""
Example 01: Basic Query Execution

This example demonstrates running inline SQL through rowmap's Engine and
mapping the rows onto a dataclass.
"""

from dataclasses import dataclass
from typing import Optional
import datetime
import sqlite3
import tempfile
from pathlib import Path

from rowmap import ConnectionConfig, Engine


@dataclass
class User:
    """User record; every field needs a default."""
    id: int = 0
    name: str = ""
    active: bool = False
    signed_up: Optional[datetime.date] = None


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    # Columns are TEXT on purpose: rowmap coerces the stored text
    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            active TEXT,
            signed_up TEXT
        )
    """)
    conn.execute("INSERT INTO users (name, active, signed_up) VALUES ('Alice', 'true', '2023-01-05')")
    conn.execute("INSERT INTO users (name, active, signed_up) VALUES ('Bob', '1', NULL)")
    conn.execute("INSERT INTO users (name, active, signed_up) VALUES ('Charlie', '0', '2024-11-30')")
    conn.commit()
    conn.close()

    config = ConnectionConfig(driver="sqlite", database=db_path, pool_size=1)
    engine = Engine.from_config(config)

    print("=== Basic Query Execution ===\n")

    # fetch_one: a single row as a dict
    row = engine.fetch_one("SELECT * FROM users WHERE id = :id", {"id": 1})
    print(f"fetch_one result: {row}\n")

    # fetch_all: rows mapped onto User
    users = engine.fetch_all("SELECT * FROM users ORDER BY id", record_type=User)
    print(f"fetch_all result ({len(users)} rows):")
    for user in users:
        print(f"  - {user.name}: active={user.active}, signed_up={user.signed_up}")
    print()

    # fetch_scalar: a single value converted to the target type
    count = engine.fetch_scalar("SELECT COUNT(*) FROM users WHERE active = :flag", {"flag": "0"}, int)
    print(f"fetch_scalar result: {count} inactive users\n")

    # query(): fluent parameter binding
    bob = engine.query("SELECT * FROM users WHERE name = :name").param("name", "Bob").fetch_one(User)
    print(f"query() result: {bob}\n")

    engine.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
