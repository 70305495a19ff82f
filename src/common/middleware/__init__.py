"""Common middleware for Ticketbooth."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
