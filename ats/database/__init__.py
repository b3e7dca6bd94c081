"""
Database package.

- base: declarative base and the record/note/history mixins
- connection: the injected ``Database`` (engine, pool, session factory)
- models: ORM models for users, entities and custom field definitions
"""

__all__ = []
