"""Combined API router."""

from fastapi import APIRouter

from .routes.articles import router as articles_router
from .routes.models import router as models_router

router = APIRouter()

router.include_router(articles_router, tags=["articles"])
router.include_router(models_router, tags=["models"])
