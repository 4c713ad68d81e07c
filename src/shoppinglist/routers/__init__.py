"""API routers for the shoppinglist service."""

from shoppinglist.routers.data import router as data_router
from shoppinglist.routers.lists import router as lists_router
from shoppinglist.routers.meal_plans import router as meal_plans_router

__all__ = [
    "data_router",
    "lists_router",
    "meal_plans_router",
]
