"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Iterable, Mapping

from .constants import (
    DEFAULT_LABEL_NAME,
    DEFAULT_SENDER_ADDRESS,
    ENV_DENY_NAMES,
    ENV_DENY_NAMES_JSON,
    ENV_LABEL_NAME,
    ENV_MESSAGE_WORKERS,
    ENV_OCR_WORKERS,
    ENV_SENDER_ADDRESS,
    ENV_TARGET_NAMES,
    ENV_TARGET_NAMES_JSON,
)


class ConfigError(ValueError):
    """Raised when the configuration cannot be used to run the filter."""


def dedupe_names(names: Iterable[str]) -> list[str]:
    """Trim names and drop empty and case-insensitive duplicates.

    The first spelling of each name wins and order is preserved:
      ["Paul", "paul", " Paul "] -> ["Paul"]
    """
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        name = name.strip()
        if not name:
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result


@dataclass(frozen=True)
class NameSet:
    """Target names (keep signal) and deny names (disqualify an image)."""

    targets: tuple[str, ...]
    denies: tuple[str, ...] = ()

    @classmethod
    def from_lists(cls, targets: Iterable[str], denies: Iterable[str] = ()) -> NameSet:
        target_names = dedupe_names(targets)
        if not target_names:
            raise ConfigError(
                f"No target names configured. Set {ENV_TARGET_NAMES} or {ENV_TARGET_NAMES_JSON}."
            )
        return cls(targets=tuple(target_names), denies=tuple(dedupe_names(denies)))


@dataclass(frozen=True)
class FilterConfig:
    names: NameSet
    sender_address: str = DEFAULT_SENDER_ADDRESS
    label_name: str = DEFAULT_LABEL_NAME
    message_workers: int = 1
    ocr_workers: int = 1


def _parse_json_list(key: str, raw: str) -> list[str]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{key} is not valid JSON: {exc}") from exc
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a JSON array of strings.")
    return value


def load_name_list(env: Mapping[str, str], json_key: str, csv_key: str) -> list[str]:
    """Read a name list, preferring the JSON form over the comma-separated one."""
    raw_json = env.get(json_key, "")
    if raw_json:
        return dedupe_names(_parse_json_list(json_key, raw_json))
    raw_csv = env.get(csv_key, "")
    if raw_csv:
        return dedupe_names(raw_csv.split(","))
    return []


def _positive_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}.") from exc
    if value < 1:
        raise ConfigError(f"{key} must be at least 1, got {value}.")
    return value


def load_config(env: Mapping[str, str] | None = None) -> FilterConfig:
    """Build a FilterConfig from ``env`` (defaults to ``os.environ``).

    Raises ConfigError when no target names are configured or a value is
    malformed.
    """
    if env is None:
        env = os.environ

    names = NameSet.from_lists(
        load_name_list(env, ENV_TARGET_NAMES_JSON, ENV_TARGET_NAMES),
        load_name_list(env, ENV_DENY_NAMES_JSON, ENV_DENY_NAMES),
    )
    return FilterConfig(
        names=names,
        sender_address=env.get(ENV_SENDER_ADDRESS) or DEFAULT_SENDER_ADDRESS,
        label_name=env.get(ENV_LABEL_NAME) or DEFAULT_LABEL_NAME,
        message_workers=_positive_int(env, ENV_MESSAGE_WORKERS, 1),
        ocr_workers=_positive_int(env, ENV_OCR_WORKERS, 1),
    )
