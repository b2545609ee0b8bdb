"""API route modules."""

from tunnelroute.api.routes import tunnel

__all__ = [
    "tunnel",
]
