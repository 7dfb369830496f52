"""
API v1: session, catalog and meetup routers
"""

from . import endpoints

__all__ = ["endpoints"]
