"""API routers for the grocerylist application."""

from grocerylist.routers.grocery import router as grocery_router

__all__ = [
    "grocery_router",
]
