"""
Storage adapters for job status.

Redis components (optional):
- RedisStatusStore: SET/EX backed status store
"""

try:
    from .redis import RedisStatusStore, REDIS_AVAILABLE
    _REDIS_EXPORTS = [
        "RedisStatusStore",
        "REDIS_AVAILABLE",
    ]
except ImportError:
    _REDIS_EXPORTS = []

__all__ = [
    *_REDIS_EXPORTS,
]
