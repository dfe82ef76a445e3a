from __future__ import annotations

import pytest

from offchain.accessors.in_memory import InMemoryAccessor, InMemoryStorage
from offchain.accessors.ipfs import IpfsAccessor
from offchain.accessors.web import HttpAccessor
from offchain.config import AccessorSpec, OffChainConfig
from offchain.errors import ConfigError, UnsupportedSchemeError
from offchain.registry import AccessorRegistry, build_registry


def test_resolve_accessor_by_scheme() -> None:
    acc = InMemoryAccessor(InMemoryStorage())
    reg = AccessorRegistry({"json": acc})
    assert reg.resolve_accessor("json://abc") is acc
    assert reg.resolve_accessor("JSON://abc") is acc
    assert reg.schemes() == ("json",)


def test_resolve_accessor_unknown_scheme() -> None:
    reg = AccessorRegistry({"json": InMemoryAccessor(InMemoryStorage())})
    with pytest.raises(UnsupportedSchemeError, match=r"(?i)unsupported data storage type: random") as e:
        reg.resolve_accessor("random://url")
    assert e.value.scheme == "random"


def test_resolve_accessor_no_scheme() -> None:
    reg = AccessorRegistry({"json": InMemoryAccessor(InMemoryStorage())})
    with pytest.raises(UnsupportedSchemeError, match=r"(?i)no scheme detected") as e:
        reg.resolve_accessor("bad-link-format")
    assert e.value.scheme is None


def test_register_rejects_non_accessors() -> None:
    reg = AccessorRegistry()
    with pytest.raises(TypeError):
        reg.register("json", object())  # type: ignore[arg-type]


def test_unregister_and_reset() -> None:
    reg = AccessorRegistry({"json": InMemoryAccessor(InMemoryStorage()), "mem": InMemoryAccessor(InMemoryStorage())})
    assert reg.unregister("JSON") is True
    assert reg.unregister("json") is False
    assert reg.schemes() == ("mem",)
    reg.reset()
    assert reg.schemes() == ()
    with pytest.raises(UnsupportedSchemeError):
        reg.resolve_accessor("mem://x")


def test_build_registry_from_config_shares_storage() -> None:
    storage = InMemoryStorage()
    cfg = OffChainConfig(
        accessors=(
            AccessorSpec("json", "in_memory"),
            AccessorSpec("mem", "in_memory"),
            AccessorSpec("ipfs", "ipfs", {"api_base": "http://ipfs.local:5001"}),
            AccessorSpec("https", "http", {"upload_url": "https://docs.example.com/v1/documents"}),
        ),
        max_depth=4,
    )
    reg = build_registry(cfg, storage=storage)

    assert reg.max_depth == 4
    assert isinstance(reg.get("ipfs"), IpfsAccessor)
    assert isinstance(reg.get("https"), HttpAccessor)
    json_acc = reg.get("json")
    mem_acc = reg.get("mem")
    assert isinstance(json_acc, InMemoryAccessor)
    assert json_acc.storage is storage
    assert mem_acc.storage is storage


def test_build_registry_rejects_bad_options() -> None:
    cfg = OffChainConfig(accessors=(AccessorSpec("ipfs", "ipfs", {"nope": 1}),))
    with pytest.raises(ConfigError):
        build_registry(cfg)
