# src/cdapio/plugins/config_base.py
"""Typed hosted-plugin configurations and the parameter resolver.

Hosted plugins are configured with a flat, string-keyed parameter mapping
(usually all string values). PluginConfig subclasses declare the fields a
plugin accepts; the declared fields ARE the decoding schema (field name ->
annotation -> Pydantic lax-mode coercion). There is no reflection over
arbitrary classes.

Example usage:
    class SalesforceConfig(PluginConfig):
        username: str
        batch_size: int = 500

    cfg = resolve_config(SalesforceConfig, {"username": "bob", "batchSize": "100"})
    cfg.batch_size  # 100

Parameter names may be given either as the field name (batch_size) or in the
hosted platform's camelCase spelling (batchSize).
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import BaseModel, ValidationError
from pydantic.alias_generators import to_camel

from cdapio.contracts.errors import ConfigMappingError

ROOT_FIELD = "<root>"


class PluginConfig(BaseModel):
    """Base class for hosted-plugin configurations.

    Frozen after construction, so a config attached to a descriptor can be
    shared by several requests without one build mutating another.
    """

    model_config = {
        "extra": "forbid",  # Unknown parameters are caller typos
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
        "coerce_numbers_to_str": True,  # YAML turns "0042" style ids into ints
    }

    reference_name: str | None = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> Self:
        """Create config from a flat parameter mapping.

        Args:
            params: Mapping of field name (or camelCase alias) to value.

        Returns:
            Validated configuration instance.

        Raises:
            ConfigMappingError: Naming the first field that is missing,
                cannot be coerced, or is not declared by this class.
        """
        if not isinstance(params, Mapping):
            raise ConfigMappingError(
                ROOT_FIELD,
                f"parameters must be a mapping, got {type(params).__name__}",
                config_class=cls.__name__,
            )

        try:
            return cls.model_validate(dict(params))
        except ValidationError as e:
            field, reason = _first_error(cls, e)
            raise ConfigMappingError(field, reason, config_class=cls.__name__) from e

    @classmethod
    def field_names(cls) -> list[str]:
        """Declared field names, in declaration order."""
        return list(cls.model_fields)


def _first_error(config_class: type[PluginConfig], error: ValidationError) -> tuple[str, str]:
    """Translate the first Pydantic error into (field name, reason).

    Pydantic reports the alias in ``loc`` when the alias was used, so aliases
    are mapped back to the declared field name.
    """
    details = error.errors()[0]
    loc = details["loc"]
    if not loc:
        return ROOT_FIELD, details["msg"]

    name = str(loc[0])
    aliases = {info.alias: field for field, info in config_class.model_fields.items() if info.alias}
    field = aliases.get(name, name)

    if details["type"] == "missing":
        return field, "required field has no corresponding parameter"
    if details["type"] == "extra_forbidden":
        return field, "unknown parameter"
    return field, f"{details['msg']} (got {details.get('input')!r})"


def resolve_config[C: PluginConfig](config_class: type[C], params: Mapping[str, Any]) -> C:
    """Produce a populated config instance from a parameter mapping.

    Args:
        config_class: Target PluginConfig subclass
        params: Flat string-keyed parameters

    Returns:
        Validated config_class instance

    Raises:
        ConfigMappingError: If a parameter cannot be mapped (see PluginConfig.from_params)
    """
    if not (isinstance(config_class, type) and issubclass(config_class, PluginConfig)):
        raise TypeError(f"{config_class!r} is not a PluginConfig subclass")
    return config_class.from_params(params)


def load_params(path: Path) -> dict[str, Any]:
    """Load a flat parameter mapping from a YAML or JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigMappingError: If the document is not a flat mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Parameter file not found: {path}")

    with path.open(encoding="utf-8") as f:
        document = yaml.safe_load(f)

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigMappingError(ROOT_FIELD, f"parameter file must contain a mapping, got {type(document).__name__}")

    params: dict[str, Any] = {}
    for key, value in document.items():
        if not isinstance(key, str):
            raise ConfigMappingError(str(key), "parameter names must be strings")
        if isinstance(value, dict | list):
            raise ConfigMappingError(key, "parameter values must be scalars")
        params[key] = value
    return params
