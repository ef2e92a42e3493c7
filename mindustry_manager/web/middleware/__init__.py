"""
Middleware package for the control surface.

This package contains middleware classes applied to every response.
"""

from .security import SecurityHeadersMiddleware

__all__ = ["SecurityHeadersMiddleware"]
