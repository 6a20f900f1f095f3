"""Database Package — SQLAlchemy declarative base shared by all ORM models.

Invariants:
    - Tables are owned by Supabase; models map them, nothing here creates them in production
"""
