"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_ENV_VAR = "NOTES_INDEX_CONFIG"
CONFIG_FILE_NAME = "notes_index.toml"

DEFAULT_INCLUDE_EXTENSIONS = (
    ".md",
    ".typ",
    ".c",
    ".h",
    ".cpp",
    ".hpp",
    ".rs",
    ".go",
    ".java",
    ".js",
    ".ts",
    ".cs",
)
DEFAULT_EXCLUDE_GLOBS = ("**/node_modules/**", "**/target/**", "**/__pycache__/**")


@dataclass(slots=True, frozen=True)
class IndexConfig:
    """Deterministic indexing settings."""

    include_extensions: tuple[str, ...]
    exclude_globs: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class AppConfig:
    """Fully merged application configuration."""

    config_dir: Path
    store_path: Path
    log_path: Path
    index: IndexConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for status output."""
        return {
            "config_dir": str(self.config_dir),
            "store_path": str(self.store_path),
            "log_path": str(self.log_path),
            "index": {
                "include_extensions": list(self.index.include_extensions),
                "exclude_globs": list(self.index.exclude_globs),
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    config_path: Path | None = None
    store_path: Path | None = None


def default_config_path() -> Path:
    """Return the config file location, honouring the environment override."""
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "notes_index" / CONFIG_FILE_NAME


def default_config(config_dir: Path) -> AppConfig:
    """Build default config rooted at a config directory."""
    resolved = config_dir.expanduser().resolve()
    return AppConfig(
        config_dir=resolved,
        store_path=resolved / "store.json",
        log_path=resolved / "runs.jsonl",
        index=IndexConfig(
            include_extensions=DEFAULT_INCLUDE_EXTENSIONS,
            exclude_globs=DEFAULT_EXCLUDE_GLOBS,
        ),
    )


def load_config_file(config_path: Path) -> dict[str, object]:
    """Load an optional TOML config file."""
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{config_path.name} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _normalize_extensions(extensions: tuple[str, ...]) -> tuple[str, ...]:
    output: list[str] = []
    for extension in extensions:
        normalized = extension.strip().lower()
        if not normalized:
            raise ValueError("Config field 'index.include_extensions' must not contain empty values.")
        if not normalized.startswith("."):
            normalized = f".{normalized}"
        if normalized not in output:
            output.append(normalized)
    return tuple(output)


def merge_config(base: AppConfig, payload: dict[str, object], overrides: CliOverrides) -> AppConfig:
    """Merge defaults, config file, then CLI overrides."""
    store_payload = _get_table(payload, "store")
    index_payload = _get_table(payload, "index")

    store_path = base.store_path
    if "path" in store_payload:
        raw_path = store_payload["path"]
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise ValueError("Config field 'store.path' must be a non-empty string.")
        store_path = _resolve_against(base.config_dir, raw_path)

    log_path = base.log_path
    if "log_path" in store_payload:
        raw_log_path = store_payload["log_path"]
        if not isinstance(raw_log_path, str) or not raw_log_path.strip():
            raise ValueError("Config field 'store.log_path' must be a non-empty string.")
        log_path = _resolve_against(base.config_dir, raw_log_path)

    include_extensions = base.index.include_extensions
    if "include_extensions" in index_payload:
        include_extensions = _normalize_extensions(
            _tuple_of_strings(index_payload["include_extensions"], "index", "include_extensions")
        )
    exclude_globs = base.index.exclude_globs
    if "exclude_globs" in index_payload:
        exclude_globs = _tuple_of_strings(index_payload["exclude_globs"], "index", "exclude_globs")

    merged = AppConfig(
        config_dir=base.config_dir,
        store_path=store_path,
        log_path=log_path,
        index=IndexConfig(
            include_extensions=include_extensions,
            exclude_globs=exclude_globs,
        ),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: AppConfig, overrides: CliOverrides) -> AppConfig:
    """Apply startup overrides at highest precedence."""
    if overrides.store_path is None:
        return config
    return AppConfig(
        config_dir=config.config_dir,
        store_path=overrides.store_path.expanduser().resolve(),
        log_path=config.log_path,
        index=config.index,
    )


def load_effective_config(overrides: CliOverrides | None = None) -> AppConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    effective_overrides = overrides or CliOverrides()
    config_path = effective_overrides.config_path or default_config_path()
    config_path = config_path.expanduser().resolve()
    base = default_config(config_path.parent)
    payload = load_config_file(config_path)
    return merge_config(base, payload, effective_overrides)


def _resolve_against(base_dir: Path, raw_path: str) -> Path:
    candidate = Path(raw_path).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return candidate.resolve()
