"""
Dynamoscan API Package

HTTP surface over the analyzer:
- Transaction analysis
- Contract audit
- Health checks

The application factory lives in ``app``; this module stays import-light so
the analyzer can be used without the web framework loaded.
"""

from typing import List

__all__: List[str] = ['create_application']


def create_application(*args, **kwargs):
    """Lazy proxy for :func:`dynamoscan.api.app.create_application`."""
    from .app import create_application as factory
    return factory(*args, **kwargs)
