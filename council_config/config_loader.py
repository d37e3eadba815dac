"""Load settings.yaml into typed dataclasses. Reports which providers have API keys."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ProviderConfig:
    name: str
    sdk: str
    api_key_env: str
    prefixes: list[str] = field(default_factory=list)
    max_tokens: int = 4096
    base_url: str | None = None


@dataclass
class PromptsConfig:
    review: str | None = None        # None -> built-in template
    aggregation: str | None = None


@dataclass
class DefaultsConfig:
    participants: list[str]
    aggregator: str
    timeout_sec: float


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    providers: dict[str, ProviderConfig]
    prompts: PromptsConfig = field(default_factory=PromptsConfig)
    available_providers: set[str] = field(default_factory=set)


def _require(mapping: object, key: str, settings_path: Path, section: str = "") -> Any:
    name = f"{section}.{key}" if section else key
    if not isinstance(mapping, dict) or mapping.get(key) is None:
        raise ValueError(f"{settings_path}: missing required setting '{name}'")
    return mapping[key]


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError if a
    required section or key is absent.
    Logs missing API keys but does not raise; calls routed to a provider
    without a key fail individually at run time.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"{settings_path}: expected a mapping at the top level")

    defaults_raw = _require(raw, "defaults", settings_path)
    defaults = DefaultsConfig(
        participants=[str(p) for p in _require(defaults_raw, "participants", settings_path, "defaults")],
        aggregator=str(_require(defaults_raw, "aggregator", settings_path, "defaults")),
        timeout_sec=float(_require(defaults_raw, "timeout_sec", settings_path, "defaults")),
    )

    prompts_raw = raw.get("prompts") or {}
    prompts = PromptsConfig(
        review=prompts_raw.get("review"),
        aggregation=prompts_raw.get("aggregation"),
    )

    providers: dict[str, ProviderConfig] = {}
    available_providers: set[str] = set()

    for provider_name, provider_raw in _require(raw, "providers", settings_path).items():
        section = f"providers.{provider_name}"
        provider_cfg = ProviderConfig(
            name=provider_name,
            sdk=_require(provider_raw, "sdk", settings_path, section),
            api_key_env=_require(provider_raw, "api_key_env", settings_path, section),
            prefixes=[str(p) for p in provider_raw.get("prefixes", [])],
            max_tokens=int(provider_raw.get("max_tokens", 4096)),
            base_url=provider_raw.get("base_url"),
        )
        providers[provider_name] = provider_cfg

        api_key = os.environ.get(provider_cfg.api_key_env, "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.debug("Provider available: %s", provider_name)
        else:
            logger.debug(
                "Provider skipped (no API key): %s - set %s in .env",
                provider_name,
                provider_cfg.api_key_env,
            )

    return AppConfig(
        defaults=defaults,
        providers=providers,
        prompts=prompts,
        available_providers=available_providers,
    )
