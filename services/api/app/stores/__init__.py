"""Data stores for persistence and caching.

Stores handle:
- SQL database: engine, sessions, transaction scoping
- Redis: webhook delivery de-dup claims

No counting/ranking logic in stores - that belongs in services.
"""
