"""AI model listing endpoint."""

import logging

from fastapi import APIRouter, Depends, Query

from ..auth import get_api_key
from ..dependencies import TranslatorDep
from ..models.responses import ModelListResponse

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_api_key)])


@router.get("/models", response_model=ModelListResponse)
async def list_models(
    translator: TranslatorDep,
    refresh: bool = Query(False, description="Bypass the cached model list"),
):
    """Models offered by the provider and the one currently configured."""
    models = await translator.available_models(force_refresh=refresh)
    return ModelListResponse(current=translator.config.model, models=models)
