"""Routing decision and request augmentation."""

from tunnelroute.core.routing.augmenter import augment, default_ca_bundle
from tunnelroute.core.routing.decider import extract_host, should_route

__all__ = [
    "augment",
    "default_ca_bundle",
    "extract_host",
    "should_route",
]
