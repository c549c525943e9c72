"""
API Gateway Middleware Package

Provides the operator action audit middleware.
"""

from .audit import AuditMiddleware

__all__ = [
    "AuditMiddleware",
]
