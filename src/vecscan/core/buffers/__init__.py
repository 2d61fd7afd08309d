"""Buffer pooling for chunked reads."""

from .pool import SHARED_POOL, BufferLease, BufferPool, round_capacity

__all__ = ["SHARED_POOL", "BufferLease", "BufferPool", "round_capacity"]
