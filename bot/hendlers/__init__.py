from aiogram import Router

# Import routers
from .client import media, start, status, subscription


def setup_routers() -> Router:
    """Configure all routers."""
    router = Router()

    router.include_router(start.start_router())
    router.include_router(status.status_router())
    router.include_router(subscription.subscription_router())
    # Catches plain text, keep it last
    router.include_router(media.media_router())

    return router
