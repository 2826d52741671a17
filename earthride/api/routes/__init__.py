"""HTTP routers, one per entity."""

from .admins import router as admins_router
from .banner import router as banner_router
from .blog import router as blog_router
from .drives import router as drives_router

__all__ = ["admins_router", "banner_router", "blog_router", "drives_router"]
