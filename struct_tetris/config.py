"""Run configuration (tetris.toml) loading and validation."""
from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from struct_tetris.internals.errors import ConfigError
from struct_tetris.layout.catalog import TypeCatalog, detect_word_size

CONFIG_NAME = "tetris.toml"
CONFIG_TABLE = "tetris"

STRATEGIES = ("greedy", "brute-force")


@dataclass(frozen=True)
class TetrisConfig:
    word_size: int = 8
    top_k: int = 3
    brute_force_limit: int = 9
    write_back: bool = True
    strategy: str = "greedy"
    verify_abi: bool = False
    explain: bool = False
    progress: bool = False
    struct_name: str | None = None

    def validate(self) -> None:
        if self.word_size not in (4, 8):
            raise ConfigError("TE0401", message=f"word_size must be 4 or 8, got {self.word_size!r}")
        if not isinstance(self.top_k, int) or self.top_k < 1:
            raise ConfigError("TE0401", message=f"top_k must be a positive integer, got {self.top_k!r}")
        if not isinstance(self.brute_force_limit, int) or self.brute_force_limit < 0:
            raise ConfigError("TE0401",
                              message=f"brute_force_limit must be a non-negative integer, got {self.brute_force_limit!r}")
        if self.strategy not in STRATEGIES:
            raise ConfigError("TE0401",
                              message=f"strategy must be one of {', '.join(STRATEGIES)}, got {self.strategy!r}")
        for name in ("write_back", "verify_abi", "explain", "progress"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError("TE0401", message=f"{name} must be true or false")

    @property
    def catalog(self) -> TypeCatalog:
        return TypeCatalog(self.word_size)

    def override(self, **changes: Any) -> TetrisConfig:
        """Copy with the given values replaced; None values are ignored."""
        config = replace(self, **{k: v for k, v in changes.items() if v is not None})
        config.validate()
        return config


def default_config() -> TetrisConfig:
    return TetrisConfig(word_size=detect_word_size())


def load_config(path: Path | None = None, search_dir: Path | None = None) -> TetrisConfig:
    """Load tetris.toml from `path`, else from `search_dir`, else use defaults.

    An explicit `path` must exist; the file in `search_dir` is optional.
    """
    if path is None and search_dir is not None:
        candidate = search_dir / CONFIG_NAME
        if candidate.exists():
            path = candidate
    if path is None:
        return default_config()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError("TE0402", path=str(path), reason=str(e)) from e
    return load_config_from_dict(_tetris_table(data))


def load_config_from_string(text: str) -> TetrisConfig:
    return load_config_from_dict(_tetris_table(tomllib.loads(text)))


def _tetris_table(data: dict) -> dict:
    table = data.get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigError("TE0401", message=f"'{CONFIG_TABLE}' must be a table, got {table!r}")
    return table


def load_config_from_dict(table: dict) -> TetrisConfig:
    known = {f.name for f in fields(TetrisConfig)}
    keys = {key.replace("-", "_"): value for key, value in table.items()}
    unknown = sorted(set(keys) - known)
    if unknown:
        raise ConfigError("TE0401", message=f"unknown key(s) in [{CONFIG_TABLE}]: {', '.join(unknown)}")

    keys.setdefault("word_size", detect_word_size())
    config = TetrisConfig(**keys)
    config.validate()
    return config
