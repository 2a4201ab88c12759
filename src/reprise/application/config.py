"""
Configuration for reprise.

Two layers:
- SchedulingConfig: the six tunable scheduling parameters. Values are clamped
  into their bounds on construction and persisted through ConfigProvider.
- AppSettings: process settings (storage location, backend, logging), loaded
  from environment variables (REPRISE_*), ~/.config/reprise/config.toml and
  CLI overrides.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from reprise.domain.constants import (
    CONFIG_STORAGE_KEY,
    DEFAULT_INITIAL_INTERVAL,
    DEFAULT_MAX_INTERVAL,
    DEFAULT_MAYBE_MULTIPLIER,
    DEFAULT_MIN_INTERVAL,
    DEFAULT_NG_INTERVAL,
    DEFAULT_OK_MULTIPLIER,
    INITIAL_INTERVAL_BOUNDS,
    MAX_INTERVAL_BOUNDS,
    MAYBE_MULTIPLIER_BOUNDS,
    MIN_INTERVAL_BOUNDS,
    NG_INTERVAL_BOUNDS,
    OK_MULTIPLIER_BOUNDS,
)
from reprise.domain.errors import ConfigOutOfRange
from reprise.domain.ports import KeyValueStore

logger = logging.getLogger(__name__)

FIELD_BOUNDS: dict[str, tuple[float, float]] = {
    "ok_multiplier": OK_MULTIPLIER_BOUNDS,
    "maybe_multiplier": MAYBE_MULTIPLIER_BOUNDS,
    "ng_interval": NG_INTERVAL_BOUNDS,
    "min_interval": MIN_INTERVAL_BOUNDS,
    "max_interval": MAX_INTERVAL_BOUNDS,
    "initial_interval": INITIAL_INTERVAL_BOUNDS,
}

INTEGER_FIELDS = {"ng_interval", "min_interval", "max_interval", "initial_interval"}

FIELD_ADAPTERS: dict[str, TypeAdapter] = {
    name: TypeAdapter(int if name in INTEGER_FIELDS else float) for name in FIELD_BOUNDS
}


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase storage keys to field names; unknown keys are dropped."""
    by_alias = {to_camel(name): name for name in FIELD_BOUNDS}
    out: dict[str, Any] = {}
    for key, value in data.items():
        name = by_alias.get(key, key)
        if name in FIELD_BOUNDS and value is not None:
            out[name] = value
    return out


def _as_number(name: str, value: Any) -> Any:
    # Leave unconvertible values alone so pydantic reports them.
    try:
        number = float(value)
        return int(number) if name in INTEGER_FIELDS else number
    except (TypeError, ValueError, OverflowError):
        return value


def usable_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Keep the fields whose values parse as numbers; drop the rest with a warning."""
    usable: dict[str, Any] = {}
    for name, value in _normalize_keys(data).items():
        try:
            usable[name] = FIELD_ADAPTERS[name].validate_python(_as_number(name, value))
        except ValidationError:
            logger.warning(f"Ignoring stored scheduling config field {name}={value!r}")
    return usable


def clamp_values(data: Mapping[str, Any], strict: bool = False) -> dict[str, Any]:
    """
    Clamp every known field into its bounds, then force min_interval <= max_interval.

    Args:
        data: Field values keyed by field name or camelCase alias.
        strict: Raise ConfigOutOfRange instead of clamping.

    Returns:
        A dict keyed by field name. Missing fields stay missing.
    """
    values = {name: _as_number(name, v) for name, v in _normalize_keys(data).items()}

    for name, (low, high) in FIELD_BOUNDS.items():
        value = values.get(name)
        if not isinstance(value, (int, float)):
            continue
        if low <= value <= high:
            continue
        if strict:
            raise ConfigOutOfRange(name, value, (low, high))
        clamped = max(low, min(high, value))
        if name in INTEGER_FIELDS:
            clamped = int(clamped)
        logger.warning(f"Config {name}={value} out of range [{low}, {high}]; using {clamped}")
        values[name] = clamped

    min_interval = values.get("min_interval", DEFAULT_MIN_INTERVAL)
    max_interval = values.get("max_interval", DEFAULT_MAX_INTERVAL)
    if (
        isinstance(min_interval, int)
        and isinstance(max_interval, int)
        and min_interval > max_interval
    ):
        if strict:
            raise ConfigOutOfRange("min_interval", min_interval, (MIN_INTERVAL_BOUNDS[0], max_interval))
        logger.warning(
            f"Config min_interval={min_interval} exceeds max_interval={max_interval}; "
            f"lowering min_interval to {max_interval}"
        )
        values["min_interval"] = max_interval

    return values


class SchedulingConfig(BaseModel):
    """
    Tunable parameters of the interval scheduler.

    Construction never fails on out-of-range numbers: each field is clamped into
    its bounds and min_interval is lowered to max_interval when it exceeds it.
    Use SchedulingConfig.validated(..., strict=True) to reject instead.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    ok_multiplier: float = DEFAULT_OK_MULTIPLIER
    maybe_multiplier: float = DEFAULT_MAYBE_MULTIPLIER
    ng_interval: int = DEFAULT_NG_INTERVAL
    min_interval: int = DEFAULT_MIN_INTERVAL
    max_interval: int = DEFAULT_MAX_INTERVAL
    initial_interval: int = DEFAULT_INITIAL_INTERVAL

    @model_validator(mode="before")
    @classmethod
    def clamp_into_bounds(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return clamp_values(data)
        return data

    @classmethod
    def validated(cls, data: Mapping[str, Any], strict: bool = False) -> "SchedulingConfig":
        """Build a config from a partial mapping merged over the defaults."""
        return cls(**clamp_values(data, strict=strict))

    def merged(self, overrides: Mapping[str, Any], strict: bool = False) -> "SchedulingConfig":
        """Return a copy with the given fields replaced, re-validated as a whole."""
        current = self.model_dump()
        current.update(_normalize_keys(overrides))
        return self.validated(current, strict=strict)

    def to_storage(self) -> dict[str, Any]:
        """Flat record with exactly the six fields, camelCase keys."""
        return self.model_dump(by_alias=True)


DEFAULT_SCHEDULING_CONFIG = SchedulingConfig()


class ConfigProvider:
    """
    Loads, validates and saves the process-wide SchedulingConfig.

    The stored record is merged over the defaults field by field. A field that
    cannot be parsed falls back to its default; the other fields are kept.
    """

    def __init__(self, store: KeyValueStore, key: str = CONFIG_STORAGE_KEY):
        self._store = store
        self._key = key

    async def load(self) -> SchedulingConfig:
        stored = await self._store.get(self._key)
        if stored is None:
            return DEFAULT_SCHEDULING_CONFIG

        if not isinstance(stored, Mapping):
            logger.warning(f"Ignoring stored scheduling config of type {type(stored).__name__}")
            return DEFAULT_SCHEDULING_CONFIG

        return SchedulingConfig.validated(usable_fields(stored))

    async def save(
        self, config: SchedulingConfig | Mapping[str, Any], strict: bool = False
    ) -> SchedulingConfig:
        """
        Validate and persist a config.

        Args:
            config: A SchedulingConfig, or a partial mapping merged over the defaults.
            strict: Raise ConfigOutOfRange instead of clamping.

        Returns:
            The config as stored.
        """
        if isinstance(config, SchedulingConfig):
            config = config.model_dump()
        validated = SchedulingConfig.validated(config, strict=strict)
        await self._store.set(self._key, validated.to_storage())
        logger.info(f"Saved scheduling config: {validated.to_storage()}")
        return validated

    async def update(self, overrides: Mapping[str, Any], strict: bool = False) -> SchedulingConfig:
        """Merge overrides over the currently stored config and save."""
        current = await self.load()
        return await self.save(current.merged(overrides, strict=strict), strict=strict)

    async def reset(self) -> None:
        """Drop the stored record so the defaults apply again."""
        await self._store.delete(self._key)
        logger.info("Scheduling config reset to defaults")


class AppSettings(BaseSettings):
    """
    Process settings for reprise.
    Supports loading from:
    1. Environment variables (REPRISE_*)
    2. Config file (~/.config/reprise/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="REPRISE_",
        extra="ignore",
    )

    data_dir: Path = Field(default_factory=lambda: Path.home() / ".config/reprise")
    deck_file: Path | None = None
    backend: Literal["memory", "file"] = "file"

    # Overrides the per-mode session sizes when set.
    default_count: int | None = None
    serialize_writes: bool = False
    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        toml_file = Path.home() / ".config/reprise/config.toml"

        # Init (CLI) overrides win, then env, then the file.
        if toml_file.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_data_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("deck_file", mode="before")
    @classmethod
    def resolve_deck_file(cls, v: Any) -> Path | None:
        if not v:
            return None
        return Path(v).expanduser().resolve()

    @field_validator("default_count")
    @classmethod
    def positive_count(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("default_count must be at least 1")
        return v

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"


def resolve_settings(cli_overrides: dict[str, Any] | None = None) -> AppSettings:
    """
    Multi-layered settings resolution.
    1. Defaults in AppSettings
    2. ~/.config/reprise/config.toml (if exists)
    3. Environment variables (REPRISE_*)
    4. cli_overrides (passed from Typer, None values dropped)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppSettings(**overrides)
