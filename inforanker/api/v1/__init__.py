"""Version 1 API routers."""

from inforanker.api.v1.collection import router as collection_router

__all__ = ["collection_router"]
