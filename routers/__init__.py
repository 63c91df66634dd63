# Marketplace Routers Module
# Exports all modular API routers for the marketplace

from routers.auth import router as auth_router
from routers.influencers import router as influencers_router
from routers.brands import router as brands_router
from routers.campaigns import router as campaigns_router
from routers.chat import router as chat_router
from routers.admin import router as admin_router

__all__ = [
    'auth_router',
    'influencers_router',
    'brands_router',
    'campaigns_router',
    'chat_router',
    'admin_router',
]
