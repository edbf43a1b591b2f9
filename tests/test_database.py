"""
Database URL handling.
Covers: hosting-provider PostgreSQL URLs moved onto asyncpg, SQLite left alone.
"""
from guardroster.database import async_database_url


def test_postgres_urls_use_asyncpg():
    assert async_database_url("postgres://u:p@db:5432/roster") == "postgresql+asyncpg://u:p@db:5432/roster"
    assert async_database_url("postgresql://u:p@db/roster") == "postgresql+asyncpg://u:p@db/roster"
    assert async_database_url(" postgresql+psycopg2://u@db/roster ") == "postgresql+asyncpg://u@db/roster"


def test_other_urls_pass_through():
    assert async_database_url("sqlite+aiosqlite:///./guardroster.db") == "sqlite+aiosqlite:///./guardroster.db"
    assert async_database_url("postgresql+asyncpg://u@db/roster") == "postgresql+asyncpg://u@db/roster"
