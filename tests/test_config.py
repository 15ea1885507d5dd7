import json
from pathlib import Path

import pytest

from fixaugment.core.config import FixAugmentConfig, load_config_from_path
from fixaugment.core.errors import InvalidConfigurationError
from fixaugment.core.interfaces import ConfigProvider, MappingConfigProvider


def test_defaults_through_provider_view() -> None:
    cfg = FixAugmentConfig()

    assert isinstance(cfg, ConfigProvider)
    assert cfg.get("maxInputSize") == 10000
    assert cfg.get("preserve_code_blocks") is True
    assert cfg.get("outputFormat") == "enhanced"
    assert cfg.get("noSuchKey", 5) == 5


def test_from_provider_honors_explicit_false() -> None:
    provider = MappingConfigProvider(
        {"maxInputSize": 500, "smartChunking": False, "outputFormat": "HTML", "safeSizeLimit": None}
    )

    cfg = FixAugmentConfig.from_provider(provider)
    cfg.validate()

    assert cfg.chunk.policy.max_chunk_size == 500
    assert cfg.chunk.policy.smart_chunking is False
    assert cfg.chunk.policy.preserve_code_blocks is True
    assert cfg.output.format == "html"
    assert cfg.policy.size_limit == 8000


def test_set_unknown_key_raises() -> None:
    with pytest.raises(KeyError):
        FixAugmentConfig().set("bogus", 1)


def test_post_init_accepts_mappings() -> None:
    cfg = FixAugmentConfig(chunk={"policy": {"max_chunk_size": 42}}, output={"format": "markdown"})

    assert cfg.chunk.policy.max_chunk_size == 42
    assert cfg.output.format == "markdown"


def test_json_round_trip(tmp_path: Path) -> None:
    cfg = FixAugmentConfig()
    cfg.chunk.policy.max_chunk_size = 1234
    cfg.output.code_lang_backend = "none"
    path = tmp_path / "cfg.json"

    cfg.to_json(path)
    loaded = load_config_from_path(path)

    assert loaded.chunk.policy.max_chunk_size == 1234
    assert loaded.output.code_lang_backend == "none"
    assert loaded.to_dict() == cfg.to_dict()


def test_load_toml(tmp_path: Path) -> None:
    path = tmp_path / "cfg.toml"
    path.write_text(
        "[chunk.policy]\n"
        "max_chunk_size = 1200\n"
        "preserve_code_blocks = false\n"
        "\n"
        "[output]\n"
        'format = "Markdown"\n'
        'code_lang_backend = "none"\n'
        "\n"
        "[policy]\n"
        "size_limit = 4000\n",
        encoding="utf-8",
    )

    cfg = load_config_from_path(path)

    assert cfg.chunk.policy.max_chunk_size == 1200
    assert cfg.chunk.policy.preserve_code_blocks is False
    assert cfg.chunk.policy.smart_chunking is True
    assert cfg.output.format == "markdown"
    assert cfg.policy.size_limit == 4000


def test_unknown_keys_rejected() -> None:
    with pytest.raises(InvalidConfigurationError):
        FixAugmentConfig.from_dict({"chunk": {"policy": {"max_size": 1}}})


def test_bad_scalar_rejected() -> None:
    with pytest.raises(InvalidConfigurationError):
        FixAugmentConfig.from_dict({"chunk": {"policy": {"max_chunk_size": "lots"}}})


@pytest.mark.parametrize(
    "payload",
    [
        {"chunk": {"policy": {"max_chunk_size": 0}}},
        {"output": {"format": "pdf"}},
        {"output": {"code_lang_backend": "lingua"}},
        {"policy": {"size_limit": -1}},
    ],
)
def test_validation_failures(tmp_path: Path, payload) -> None:
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(InvalidConfigurationError):
        load_config_from_path(path)


def test_non_object_json_rejected(tmp_path: Path) -> None:
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(InvalidConfigurationError):
        load_config_from_path(path)


def test_malformed_toml_rejected(tmp_path: Path) -> None:
    path = tmp_path / "cfg.toml"
    path.write_text("[chunk.policy\nmax_chunk_size = 10\n", encoding="utf-8")

    with pytest.raises(InvalidConfigurationError):
        load_config_from_path(path)


def test_malformed_json_rejected(tmp_path: Path) -> None:
    path = tmp_path / "cfg.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(InvalidConfigurationError):
        load_config_from_path(path)


@pytest.mark.parametrize("section", ["chunk", "output", "policy", "logging"])
def test_unknown_section_keys_rejected_on_construction(section: str) -> None:
    with pytest.raises(InvalidConfigurationError):
        FixAugmentConfig(**{section: {"colour": "blue"}})


def test_unsupported_extension(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text("chunk: {}", encoding="utf-8")

    with pytest.raises(InvalidConfigurationError):
        load_config_from_path(path)
