# src/offchain/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from offchain.errors import ConfigError

Json = Dict[str, Any]

ACCESSOR_TYPES = {"in_memory", "ipfs", "http"}


def _truthy(v: str | None) -> bool:
    if v is None:
        return False
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        raw = str(os.environ.get(name, "")).strip()
        return int(raw) if raw else int(default)
    except ValueError:
        return int(default)


def _env_float(name: str, default: float) -> float:
    try:
        raw = str(os.environ.get(name, "")).strip()
        return float(raw) if raw else float(default)
    except ValueError:
        return float(default)


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return tuple(s.strip().lower() for s in raw.split(",") if s.strip())


@dataclass(frozen=True)
class AccessorSpec:
    scheme: str
    type: str  # "in_memory" | "ipfs" | "http"
    options: Json = field(default_factory=dict)


@dataclass(frozen=True)
class OffChainConfig:
    accessors: Tuple[AccessorSpec, ...]
    max_depth: int = 16
    accessors_path: Optional[str] = None

    def schemes(self) -> Tuple[str, ...]:
        return tuple(a.scheme for a in self.accessors)


def validate_offchain_config(cfg: OffChainConfig) -> None:
    """Fail fast on configuration that would leave the registry unusable."""
    if int(cfg.max_depth) < 1:
        raise ConfigError("bad_config", f"max_depth must be >= 1; got: {cfg.max_depth}")

    seen = set()
    for spec in cfg.accessors:
        if not spec.scheme or not spec.scheme.replace("_", "").isalnum():
            raise ConfigError("bad_config", f"invalid accessor scheme {spec.scheme!r}")
        if spec.scheme in seen:
            raise ConfigError("bad_config", f"scheme {spec.scheme!r} configured twice")
        seen.add(spec.scheme)
        if spec.type not in ACCESSOR_TYPES:
            raise ConfigError("bad_config", f"unknown accessor type {spec.type!r} for scheme {spec.scheme!r}")
        if not isinstance(spec.options, Mapping):
            raise ConfigError("bad_config", f"options for scheme {spec.scheme!r} must be a mapping")


def _env_accessors() -> Tuple[AccessorSpec, ...]:
    out = [AccessorSpec(scheme=s, type="in_memory") for s in _env_list("OFFCHAIN_IN_MEMORY_SCHEMES", ("json",))]

    if _truthy(os.environ.get("OFFCHAIN_IPFS_ENABLED")):
        out.append(
            AccessorSpec(
                scheme="ipfs",
                type="ipfs",
                options={
                    "api_base": (os.environ.get("OFFCHAIN_IPFS_API_BASE") or "http://127.0.0.1:5001").strip(),
                    "timeout_s": _env_float("OFFCHAIN_IPFS_TIMEOUT_S", 10.0),
                    "pin": _truthy(os.environ.get("OFFCHAIN_IPFS_PIN", "1")),
                },
            )
        )

    if _truthy(os.environ.get("OFFCHAIN_HTTP_ENABLED")):
        http_opts: Json = {
            "upload_url": (os.environ.get("OFFCHAIN_HTTP_UPLOAD_URL") or "").strip(),
            "timeout_s": _env_float("OFFCHAIN_HTTP_TIMEOUT_S", 10.0),
        }
        out.append(AccessorSpec(scheme="https", type="http", options=dict(http_opts)))
        if _truthy(os.environ.get("OFFCHAIN_HTTP_ALLOW_PLAINTEXT")):
            out.append(AccessorSpec(scheme="http", type="http", options=dict(http_opts)))

    return tuple(out)


def read_accessors_file(path: str) -> Json:
    """
    Read an accessor configuration YAML file.

    Expected shape:
      max_depth: 8
      accessors:
        json:  {type: in_memory}
        ipfs:  {type: ipfs, options: {api_base: "http://127.0.0.1:5001"}}
        https: {type: http, options: {upload_url: "https://docs.example.com/v1/documents"}}
    """
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError("bad_config", f"cannot read accessor config {path}", str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigError("bad_config", f"cannot parse accessor config {path}", str(e)) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("bad_config", "accessor config root must be a mapping")
    return raw


def _file_accessors(raw: Json) -> Tuple[AccessorSpec, ...]:
    entries = raw.get("accessors") or {}
    if not isinstance(entries, dict):
        raise ConfigError("bad_config", "'accessors' must be a mapping of scheme -> accessor")

    out = []
    for scheme, entry in entries.items():
        if not isinstance(entry, dict):
            raise ConfigError("bad_config", f"accessor entry for {scheme!r} must be a mapping")
        options = entry.get("options") or {}
        if not isinstance(options, dict):
            raise ConfigError("bad_config", f"options for scheme {scheme!r} must be a mapping")
        out.append(
            AccessorSpec(
                scheme=str(scheme).strip().lower(),
                type=str(entry.get("type") or "").strip().lower(),
                options=dict(options),
            )
        )
    return tuple(out)


def load_offchain_config(*, accessors_path: Optional[str] = None) -> OffChainConfig:
    """Build the configuration from OFFCHAIN_* env vars.

    When an accessor file is given (argument or OFFCHAIN_ACCESSORS_PATH),
    its accessors replace the env-derived ones entirely.
    """
    path = accessors_path or (os.environ.get("OFFCHAIN_ACCESSORS_PATH") or "").strip() or None
    max_depth = _env_int("OFFCHAIN_MAX_DEPTH", 16)

    if path:
        raw = read_accessors_file(path)
        accessors = _file_accessors(raw)
        if "max_depth" in raw:
            try:
                max_depth = int(raw["max_depth"])
            except (TypeError, ValueError) as e:
                raise ConfigError("bad_config", f"max_depth must be an integer; got: {raw['max_depth']!r}") from e
    else:
        accessors = _env_accessors()

    cfg = OffChainConfig(accessors=accessors, max_depth=max_depth, accessors_path=path)
    validate_offchain_config(cfg)
    return cfg
