"""
Database Module
===============

Provides the document store connection lifecycle.
"""

from app.db.session import close_redis, get_redis, init_redis

__all__ = ["get_redis", "init_redis", "close_redis"]
