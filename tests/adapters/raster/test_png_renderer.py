from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from adapters.layout.grid import GridLayoutEngine
from adapters.raster.png_renderer import PillowDiagramRenderer
from domain.models import CATEGORY_COLORS, Category, ProgramDescription
from tests.helpers.idl_fixtures import load_idl_fixture


def test_png_matches_canvas_size(tmp_path: Path) -> None:
    plan = GridLayoutEngine().build_plan(load_idl_fixture("registry.json"))
    target = tmp_path / "nested" / "registry.png"

    PillowDiagramRenderer().render(plan, target)

    with Image.open(target) as image:
        assert image.format == "PNG"
        assert image.size == (plan.canvas.width, plan.canvas.height)


def test_boxes_are_filled_with_category_colors() -> None:
    plan = GridLayoutEngine().build_plan(load_idl_fixture("test_1.json"))
    image = PillowDiagramRenderer().rasterize(plan)

    # corner pixels of boxes stay clear of the centered labels
    assert image.getpixel((9, 185)) == CATEGORY_COLORS[Category.SIGNER]
    assert image.getpixel((9, 185 + 68)) == CATEGORY_COLORS[Category.IMMUTABLE]
    assert image.getpixel((133, 109)) == CATEGORY_COLORS[Category.OPERATION]
    assert image.getpixel((2, 2)) == (255, 255, 255)


def test_empty_canvas_cannot_be_rasterized() -> None:
    plan = GridLayoutEngine().build_plan(ProgramDescription(name="empty"))
    with pytest.raises(ValueError, match="empty canvas"):
        PillowDiagramRenderer().rasterize(plan)


def test_missing_explicit_font_falls_back(tmp_path: Path) -> None:
    plan = GridLayoutEngine().build_plan(load_idl_fixture("test_1.json"))
    renderer = PillowDiagramRenderer(font_path=tmp_path / "missing.ttf")
    image = renderer.rasterize(plan)
    assert image.size == (plan.canvas.width, plan.canvas.height)
