"""Base exception for tunnelroute."""

from __future__ import annotations


class TunnelRouteError(Exception):
    """Base class for errors raised by tunnelroute."""

    pass
