"""
Main API router.
"""

from fastapi import APIRouter
from poprev.api import auth, categories, responses

api_router = APIRouter()

api_router.include_router(responses.router, prefix="/responses", tags=["responses"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
