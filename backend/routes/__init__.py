"""
Transit Hub - Routes Package

Modular API routers for the Transit Hub.
"""

from .auth import router as auth_router
from .catalog import router as catalog_router
from .transit_files import router as transit_files_router, set_service as set_transit_files_service
from .dashboard import router as dashboard_router, set_service as set_dashboard_service

__all__ = [
    'auth_router',
    'catalog_router',
    'transit_files_router', 'set_transit_files_service',
    'dashboard_router', 'set_dashboard_service',
]
