"""
Request coordination package.
"""

from .inflight import InFlightCoordinator

__all__ = ["InFlightCoordinator"]
