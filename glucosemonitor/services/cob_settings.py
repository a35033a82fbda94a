"""COB engine configuration store.

Holds the single EngineConfig in effect for the process. Updates are
partial: only the supplied fields change. The merged configuration is
validated as a whole before it replaces the current one, so readers
always see either the old or the new configuration, never a mix.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from glucosemonitor.config import Settings, settings
from glucosemonitor.core.cob_engine.errors import ConfigValidationError
from glucosemonitor.core.cob_engine.models import EngineConfig, EngineConfigUpdate
from glucosemonitor.logging_config import get_logger

logger = get_logger(__name__)


def default_engine_config(source: Settings | None = None) -> EngineConfig:
    """Build the default engine configuration from application settings."""
    source = source or settings
    return EngineConfig(
        carb_absorption_minutes=source.cob_carb_absorption_minutes,
        insulin_action_minutes=source.cob_insulin_action_minutes,
        carb_peak_minutes=source.cob_carb_peak_minutes,
        insulin_peak_minutes=source.cob_insulin_peak_minutes,
        carb_to_glucose_factor=source.cob_carb_to_glucose_factor,
        insulin_to_glucose_factor=source.cob_insulin_to_glucose_factor,
    )


def _validation_errors(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]) or "config",
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


def _rejected(exc: ValidationError) -> ConfigValidationError:
    errors = _validation_errors(exc)
    summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
    return ConfigValidationError(f"Invalid COB engine configuration: {summary}", errors)


class ConfigStore:
    """Process-wide holder of the current EngineConfig.

    EngineConfig is immutable, so the object returned by ``get_config`` is
    a safe snapshot: later updates replace the store's reference and never
    touch a configuration a caller is already holding.
    """

    def __init__(self, defaults: EngineConfig | None = None) -> None:
        self._defaults = defaults or EngineConfig()
        self._config = self._defaults

    @property
    def defaults(self) -> EngineConfig:
        return self._defaults

    def get_config(self) -> EngineConfig:
        """Return the configuration currently in effect."""
        return self._config

    def update_config(
        self,
        updates: EngineConfigUpdate | Mapping[str, Any],
    ) -> EngineConfig:
        """Merge ``updates`` over the current configuration and commit it.

        Fields that are missing or None keep their current value.

        Args:
            updates: Partial update, as a model or a plain mapping.

        Returns:
            The newly committed configuration.

        Raises:
            ConfigValidationError: If any value is out of bounds, a peak is
                not below its duration, or an unknown field is supplied.
                The current configuration is left unchanged.
        """
        if not isinstance(updates, EngineConfigUpdate):
            try:
                updates = EngineConfigUpdate.model_validate(dict(updates))
            except ValidationError as e:
                logger.warning("Rejected COB engine config update", errors=_validation_errors(e))
                raise _rejected(e) from e

        changes = updates.model_dump(exclude_none=True)
        current = self._config

        try:
            candidate = EngineConfig.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            logger.warning(
                "Rejected COB engine config update",
                fields=list(changes),
                errors=_validation_errors(e),
            )
            raise _rejected(e) from e

        self._config = candidate
        logger.info("Updated COB engine config", fields=list(changes))
        return candidate

    def reset_config(self) -> EngineConfig:
        """Restore the default configuration."""
        self._config = self._defaults
        logger.info("Reset COB engine config to defaults")
        return self._config

    def is_customized(self) -> bool:
        """Whether the configuration in effect differs from the defaults."""
        return self._config != self._defaults


config_store = ConfigStore(default_engine_config())


def get_config_store() -> ConfigStore:
    """FastAPI dependency returning the process-wide store."""
    return config_store
