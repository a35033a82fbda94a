"""COB engine settings router.

Exposes the process-wide engine configuration to the settings UI.
Updates are partial; an invalid update is rejected in full with a 422
and the previous configuration stays in effect.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from glucosemonitor.core.cob_engine import ConfigValidationError, EngineConfigUpdate
from glucosemonitor.schemas.cob_settings import (
    COBSettingsDefaults,
    COBSettingsExistsResponse,
    COBSettingsResponse,
)
from glucosemonitor.services.cob_settings import ConfigStore, get_config_store

router = APIRouter(prefix="/api/cob-settings", tags=["cob-settings"])


def _response(store: ConfigStore) -> COBSettingsResponse:
    return COBSettingsResponse.from_config(
        store.get_config(), customized=store.is_customized()
    )


@router.get("", response_model=COBSettingsResponse)
async def get_cob_settings(
    store: ConfigStore = Depends(get_config_store),
) -> COBSettingsResponse:
    """Get the engine configuration currently in effect."""
    return _response(store)


@router.patch("", response_model=COBSettingsResponse)
async def patch_cob_settings(
    body: EngineConfigUpdate,
    store: ConfigStore = Depends(get_config_store),
) -> COBSettingsResponse:
    """Update the engine configuration.

    Only provided fields are updated. Durations and factors must be
    positive and each peak must be below its duration.
    """
    try:
        store.update_config(body)
    except ConfigValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e), "errors": e.errors},
        ) from e

    return _response(store)


@router.delete("", response_model=COBSettingsResponse)
async def reset_cob_settings(
    store: ConfigStore = Depends(get_config_store),
) -> COBSettingsResponse:
    """Discard custom settings and restore the defaults."""
    store.reset_config()
    return _response(store)


@router.get("/exists", response_model=COBSettingsExistsResponse)
async def cob_settings_exist(
    store: ConfigStore = Depends(get_config_store),
) -> COBSettingsExistsResponse:
    """Whether custom settings are in effect."""
    return COBSettingsExistsResponse(exists=store.is_customized())


@router.get("/defaults", response_model=COBSettingsDefaults)
async def get_cob_settings_defaults(
    store: ConfigStore = Depends(get_config_store),
) -> COBSettingsDefaults:
    """Get the default engine configuration and accepted bounds."""
    return COBSettingsDefaults(defaults=store.defaults)
