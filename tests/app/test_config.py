from __future__ import annotations

from pathlib import Path

import pytest

from app.config import OutputFormat, load_settings
from domain.errors import InvalidConfiguration


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults_match_reference_geometry() -> None:
    settings = load_settings()

    grid = settings.layout.to_grid_spec()
    assert grid.width == 2
    assert (grid.box_width, grid.box_height) == (240, 60)
    assert grid.header_height == 100
    assert settings.output.formats == [OutputFormat.PNG]
    assert settings.output.directory is None


def test_environment_overrides_nested_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANCHORVIZ_LAYOUT__WIDTH", "3")
    monkeypatch.setenv("ANCHORVIZ_OUTPUT__FORMATS", '["png", "json"]')

    settings = load_settings()

    assert settings.layout.width == 3
    assert settings.output.formats == [OutputFormat.PNG, OutputFormat.JSON]


def test_yaml_file_is_read_and_env_wins(
    isolated_cwd: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config = isolated_cwd / "custom.yaml"
    config.write_text(
        "layout:\n  width: 4\n  buffer: 10\noutput:\n  formats: PNG, Excalidraw\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("ANCHORVIZ_LAYOUT__BUFFER", "6")

    settings = load_settings(config)

    assert settings.layout.width == 4
    assert settings.layout.buffer == 6
    assert settings.output.formats == [OutputFormat.PNG, OutputFormat.EXCALIDRAW]


def test_default_config_file_is_picked_from_cwd(isolated_cwd: Path) -> None:
    (isolated_cwd / "anchorviz.yaml").write_text("layout:\n  width: 5\n", encoding="utf-8")

    assert load_settings().layout.width == 5


def test_config_path_from_environment(
    isolated_cwd: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config = isolated_cwd / "env.yaml"
    config.write_text("output:\n  directory: diagrams\n", encoding="utf-8")
    monkeypatch.setenv("ANCHORVIZ_CONFIG_PATH", str(config))

    assert load_settings().output.directory == Path("diagrams")


def test_missing_config_file_is_reported(isolated_cwd: Path) -> None:
    with pytest.raises(FileNotFoundError, match="missing.yaml"):
        load_settings(isolated_cwd / "missing.yaml")


def test_width_override_is_validated() -> None:
    settings = load_settings()

    assert settings.layout.to_grid_spec(width=6).width == 6
    with pytest.raises(InvalidConfiguration):
        settings.layout.to_grid_spec(width=0)
