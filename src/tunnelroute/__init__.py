"""tunnelroute - selective SOCKS5 tunnel routing for outbound HTTP."""

__version__ = "2.0.0"
