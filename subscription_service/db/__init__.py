"""Database Declarations: SQLAlchemy Base shared by models and migrations.

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests; engine lives in
      infrastructure/database.py
"""
