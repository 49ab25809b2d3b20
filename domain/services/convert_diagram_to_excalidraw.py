from __future__ import annotations

import random
import uuid
from typing import Dict, List

from domain.models import (
    BACKGROUND_COLOR,
    CUSTOM_DATA_KEY,
    METADATA_SCHEMA_VERSION,
    Color,
    DiagramPlan,
    ExcalidrawDocument,
    FilledRect,
    FontWeight,
    Point,
    Text,
)

# Excalidraw font families: 1 hand-drawn, 2 normal, 3 code.
MONOSPACE_FONT_FAMILY = 3
TEXT_LINE_HEIGHT = 1.25
TEXT_CHAR_WIDTH_RATIO = 0.6


def to_hex(color: Color) -> str:
    red, green, blue = color
    return f"#{red:02x}{green:02x}{blue:02x}"


class DiagramToExcalidrawConverter:
    def __init__(self) -> None:
        self.namespace = uuid.uuid5(uuid.NAMESPACE_DNS, "anchorviz")

    def convert(self, plan: DiagramPlan) -> ExcalidrawDocument:
        elements: List[dict] = []
        base_metadata = {
            "schema_version": METADATA_SCHEMA_VERSION,
            "program_name": plan.program_name,
            "program_version": plan.version,
        }
        for index, primitive in enumerate(plan.primitives):
            metadata = self._with_base_metadata({"primitive_index": index}, base_metadata)
            if isinstance(primitive, FilledRect):
                elements.append(
                    self._rectangle_element(
                        element_id=self._stable_id("rect", plan.program_name, str(index)),
                        rect=primitive,
                        metadata=metadata,
                    )
                )
            elif isinstance(primitive, Text):
                elements.append(
                    self._text_element(
                        element_id=self._stable_id("text", plan.program_name, str(index)),
                        text=primitive,
                        metadata=metadata,
                    )
                )

        app_state = {
            "viewBackgroundColor": to_hex(BACKGROUND_COLOR),
            "gridSize": None,
            "currentItemFontFamily": MONOSPACE_FONT_FAMILY,
            "currentItemFontSize": 20,
            "currentItemStrokeColor": "#000000",
        }
        return ExcalidrawDocument(elements=elements, app_state=app_state, files={})

    def _rectangle_element(self, element_id: str, rect: FilledRect, metadata: dict) -> dict:
        return self._base_shape(
            element_id=element_id,
            type_name="rectangle",
            position=rect.top_left,
            width=rect.bottom_right.x - rect.top_left.x,
            height=rect.bottom_right.y - rect.top_left.y,
            extra={
                "strokeColor": "transparent",
                "backgroundColor": to_hex(rect.fill_color),
                "fillStyle": "solid",
            },
            metadata={**metadata, "role": "rect"},
        )

    def _text_element(self, element_id: str, text: Text, metadata: dict) -> dict:
        size = float(text.font_size)
        width = max(size, len(text.content) * size * TEXT_CHAR_WIDTH_RATIO)
        height = size * TEXT_LINE_HEIGHT
        x = text.anchor.x - width / 2 if text.horizontal_center else float(text.anchor.x)
        y = text.anchor.y - height / 2 if text.vertical_center else float(text.anchor.y)
        return {
            **self._base_shape(
                element_id=element_id,
                type_name="text",
                position=Point(0, 0),
                width=width,
                height=height,
                extra={
                    "strokeColor": to_hex(text.color),
                    "backgroundColor": "transparent",
                    "fillStyle": "solid",
                    # Excalidraw has no bold flag; a heavier stroke stands in for it.
                    "strokeWidth": 2 if text.font_weight == FontWeight.BOLD else 1,
                },
                metadata={**metadata, "role": "text", "font_weight": text.font_weight.value},
            ),
            "x": x,
            "y": y,
            "text": text.content,
            "originalText": text.content,
            "fontSize": size,
            "fontFamily": MONOSPACE_FONT_FAMILY,
            "textAlign": "center" if text.horizontal_center else "left",
            "verticalAlign": "middle" if text.vertical_center else "top",
            "baseline": height / 2,
            "lineHeight": TEXT_LINE_HEIGHT,
            "containerId": None,
        }

    def _base_shape(
        self,
        element_id: str,
        type_name: str,
        position: Point,
        width: float,
        height: float,
        metadata: dict,
        extra: dict | None = None,
    ) -> dict:
        return {
            "id": element_id,
            "type": type_name,
            "x": position.x,
            "y": position.y,
            "width": width,
            "height": height,
            "angle": 0,
            "strokeWidth": 1,
            "strokeStyle": "solid",
            "roughness": 0,
            "opacity": 100,
            "groupIds": [],
            "roundness": None,
            "seed": self._rand_seed(),
            "version": 1,
            "versionNonce": self._rand_seed(),
            "isDeleted": False,
            "boundElements": [],
            "locked": False,
            "frameId": None,
            "customData": {CUSTOM_DATA_KEY: metadata},
            **(extra or {}),
        }

    def _stable_id(self, *parts: str) -> str:
        return str(uuid.uuid5(self.namespace, "|".join(parts)))

    def _rand_seed(self) -> int:
        return random.randint(1, 2**31 - 1)

    def _with_base_metadata(self, metadata: Dict[str, object], base: dict) -> dict:
        merged = dict(base)
        merged.update(metadata)
        return merged
