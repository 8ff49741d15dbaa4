"""
Routers shared by the services
"""

from . import auth, health

__all__ = ["auth", "health"]
