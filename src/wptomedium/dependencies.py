"""Dependency injection providers for FastAPI.

Long-lived resources are created in the application lifespan and kept in
``app.state``; the providers below hand them to the route handlers.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from .translator import Translator

logger = logging.getLogger(__name__)


async def get_translator(request: Request) -> Translator:
    """
    Get the translator from app state.

    Raises:
        RuntimeError: If the translator was not initialized
    """
    if not hasattr(request.app.state, "translator"):
        raise RuntimeError("Translator not initialized. Check app lifespan configuration.")
    return request.app.state.translator


TranslatorDep = Annotated[Translator, Depends(get_translator)]
