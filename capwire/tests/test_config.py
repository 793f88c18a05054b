from __future__ import annotations

import json

import pytest

from capwire.config import DEFAULT_CONFIG, CodecLimits, Config, load_config

_ENV = ("CAPWIRE_CONFIG", "CAPWIRE_MAX_PAYLOAD_BYTES", "CAPWIRE_MAX_DEPTH")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = load_config()
    assert cfg == DEFAULT_CONFIG
    assert cfg.limits.max_payload_bytes == 16 * 1024 * 1024
    assert cfg.limits.max_depth == 64


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2048", 2048),
        ("4KB", 4000),
        ("4KiB", 4096),
        ("2MiB", 2 * 1024 * 1024),
        ("1gb", 1000**3),
    ],
)
def test_payload_size_suffixes(monkeypatch, raw, expected):
    monkeypatch.setenv("CAPWIRE_MAX_PAYLOAD_BYTES", raw)
    assert load_config().limits.max_payload_bytes == expected


def test_unparseable_env_keeps_default(monkeypatch):
    monkeypatch.setenv("CAPWIRE_MAX_PAYLOAD_BYTES", "lots")
    monkeypatch.setenv("CAPWIRE_MAX_DEPTH", "deep")
    assert load_config() == DEFAULT_CONFIG


def test_json_file_then_env(tmp_path, monkeypatch):
    p = tmp_path / "capwire.json"
    p.write_text(json.dumps({"limits": {"max_payload_bytes": 65536, "max_depth": 16}}))
    cfg = load_config(p)
    assert cfg.limits == CodecLimits(max_payload_bytes=65536, max_depth=16)

    monkeypatch.setenv("CAPWIRE_MAX_DEPTH", "8")
    cfg = load_config(p)
    assert cfg.limits == CodecLimits(max_payload_bytes=65536, max_depth=8)


def test_config_path_from_env(tmp_path, monkeypatch):
    p = tmp_path / "capwire.json"
    p.write_text(json.dumps({"limits": {"max_depth": 32}}))
    monkeypatch.setenv("CAPWIRE_CONFIG", str(p))
    assert load_config().limits.max_depth == 32


def test_yaml_file(tmp_path):
    pytest.importorskip("yaml")
    p = tmp_path / "capwire.yaml"
    p.write_text("limits:\n  max_depth: 10\n  max_payload_bytes: 4096\n")
    assert load_config(p).limits == CodecLimits(max_payload_bytes=4096, max_depth=10)


def test_missing_file_is_ignored(tmp_path):
    assert load_config(tmp_path / "absent.json") == DEFAULT_CONFIG


def test_overrides_win(monkeypatch):
    monkeypatch.setenv("CAPWIRE_MAX_DEPTH", "8")
    cfg = load_config(overrides={"limits": {"max_depth": 20}})
    assert cfg.limits.max_depth == 20
    assert cfg.limits.max_payload_bytes == DEFAULT_CONFIG.limits.max_payload_bytes


def test_limits_are_clamped():
    cfg = load_config(overrides={"limits": {"max_payload_bytes": 10, "max_depth": 10_000}})
    assert cfg.limits.max_payload_bytes == 1024
    assert cfg.limits.max_depth == 512

    cfg = load_config(overrides={"limits": {"max_depth": 0}})
    assert cfg.limits.max_depth == 1


def test_to_dict():
    assert Config().to_dict() == {
        "limits": {"max_payload_bytes": 16 * 1024 * 1024, "max_depth": 64}
    }
