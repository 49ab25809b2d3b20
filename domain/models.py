from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    model_validator,
)

from domain.errors import InvalidConfiguration

METADATA_SCHEMA_VERSION = "1.0"
CUSTOM_DATA_KEY = "anchorviz"
DEFAULT_PROGRAM_VERSION = "0.0.0"


class ResourceLeaf(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    is_mutable: bool = Field(
        default=False, validation_alias=AliasChoices("is_mutable", "isMut", "writable")
    )
    is_signer: bool = Field(
        default=False, validation_alias=AliasChoices("is_signer", "isSigner", "signer")
    )


class ResourceGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    accounts: List[ResourceRequirement] = Field(default_factory=list)


def _requirement_kind(value: Any) -> str:
    if isinstance(value, ResourceGroup):
        return "group"
    if isinstance(value, dict) and "accounts" in value:
        return "group"
    return "leaf"


ResourceRequirement = Annotated[
    Union[
        Annotated[ResourceLeaf, Tag("leaf")],
        Annotated[ResourceGroup, Tag("group")],
    ],
    Discriminator(_requirement_kind),
]

ResourceGroup.model_rebuild()


def format_idl_type(value: Any) -> str:
    """Render an IDL type token the way it is shown on argument boxes.

    Primitive types are plain strings (``u64``, ``publicKey``). Compound types
    are single-key objects: ``{"vec": "u8"}``, ``{"option": ...}``,
    ``{"array": ["u8", 32]}``, ``{"defined": "Name"}`` or, in newer IDLs,
    ``{"defined": {"name": "Name"}}``.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ", ".join(format_idl_type(item) for item in value)
    if isinstance(value, dict) and len(value) == 1:
        key, inner = next(iter(value.items()))
        if key == "defined" and isinstance(inner, dict):
            return f"defined({inner.get('name', '')})"
        if key == "coption":
            key = "option"
        if key == "generic":
            return format_idl_type(inner)
        return f"{key}({format_idl_type(inner)})"
    if isinstance(value, dict) and "name" in value:
        return str(value["name"])
    return str(value)


class Argument(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    ty: Any = Field(default="", validation_alias=AliasChoices("ty", "type"))

    def type_label(self) -> str:
        return f"{format_idl_type(self.ty)}:".lower()


class OperationKind(str, Enum):
    INSTRUCTION = "instruction"
    STATE_METHOD = "state_method"


OPERATION_HEADINGS: Dict[OperationKind, str] = {
    OperationKind.INSTRUCTION: "Instruction:",
    OperationKind.STATE_METHOD: "State Method:",
}


class Operation(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    kind: OperationKind = OperationKind.INSTRUCTION
    owner: Optional[str] = None
    accounts: List[ResourceRequirement] = Field(default_factory=list)
    args: List[Argument] = Field(default_factory=list)

    def heading(self) -> str:
        return OPERATION_HEADINGS[self.kind]

    def title(self) -> str:
        if self.kind == OperationKind.STATE_METHOD and self.owner:
            return f"{self.owner}.{self.name}"
        return self.name


class ProgramState(BaseModel):
    model_config = ConfigDict(frozen=True)

    struct_name: str = ""
    methods: List[Operation] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def lift_struct_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and "struct_name" not in data:
            struct = data.get("struct")
            if isinstance(struct, dict):
                data = {**data, "struct_name": str(struct.get("name") or "")}
        return data


class ProgramDescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    version: str = DEFAULT_PROGRAM_VERSION
    instructions: List[Operation] = Field(default_factory=list)
    state: Optional[ProgramState] = None

    @model_validator(mode="before")
    @classmethod
    def lift_metadata(cls, data: Any) -> Any:
        # Anchor >= 0.30 moves name and version under "metadata".
        if not isinstance(data, dict):
            return data
        metadata = data.get("metadata")
        if not isinstance(metadata, dict):
            return data
        lifted = dict(data)
        for key in ("name", "version"):
            if not lifted.get(key) and metadata.get(key):
                lifted[key] = metadata[key]
        return lifted

    def operations(self) -> List[Operation]:
        """Instructions first, then state methods, in declaration order."""
        operations = list(self.instructions)
        if self.state is not None:
            operations.extend(
                method.model_copy(
                    update={"kind": OperationKind.STATE_METHOD, "owner": self.state.struct_name}
                )
                for method in self.state.methods
            )
        return operations


@dataclass(frozen=True)
class GridSpec:
    width: int = 2
    box_width: int = 240
    box_height: int = 60
    header_height: int = 100
    separator_width: int = 2
    buffer: int = 8
    title_font_size: int = 24
    text_font_size: int = 20

    def __post_init__(self) -> None:
        if isinstance(self.width, bool) or not isinstance(self.width, int) or self.width <= 0:
            msg = f"Grid width must be a positive integer, got {self.width!r}"
            raise InvalidConfiguration(msg)
        for name in (
            "box_width",
            "box_height",
            "header_height",
            "title_font_size",
            "text_font_size",
        ):
            if getattr(self, name) <= 0:
                msg = f"{name} must be positive, got {getattr(self, name)!r}"
                raise InvalidConfiguration(msg)
        for name in ("separator_width", "buffer"):
            if getattr(self, name) < 0:
                msg = f"{name} must not be negative, got {getattr(self, name)!r}"
                raise InvalidConfiguration(msg)

    @property
    def column_width(self) -> int:
        return self.box_width * self.width + self.buffer * (self.width + 1)

    @property
    def column_stride(self) -> int:
        return self.column_width + self.separator_width

    @property
    def row_pitch(self) -> int:
        return self.box_height + self.buffer

    @property
    def title_top(self) -> int:
        return self.header_height + self.buffer

    @property
    def rows_top(self) -> int:
        # header, buffer, title box, two buffers
        return self.header_height + 3 * self.buffer + self.box_height


class Category(str, Enum):
    OPERATION = "operation"
    SIGNER = "signer"
    MUTABLE = "mutable"
    IMMUTABLE = "immutable"
    ARGUMENT = "argument"


# Vertical stacking order inside a column.
CATEGORY_ORDER: Tuple[Category, ...] = (
    Category.SIGNER,
    Category.MUTABLE,
    Category.IMMUTABLE,
    Category.ARGUMENT,
)

CATEGORY_LABELS: Dict[Category, str] = {
    Category.SIGNER: "Signer:",
    Category.MUTABLE: "Mutable Account:",
    Category.IMMUTABLE: "Immutable Account:",
}

Color = Tuple[int, int, int]

CATEGORY_COLORS: Dict[Category, Color] = {
    Category.OPERATION: (255, 200, 200),
    Category.SIGNER: (0, 255, 163),
    Category.MUTABLE: (255, 100, 100),
    Category.IMMUTABLE: (3, 225, 255),
    Category.ARGUMENT: (220, 31, 255),
}
SEPARATOR_COLOR: Color = (0, 0, 0)
TEXT_COLOR: Color = (0, 0, 0)
BACKGROUND_COLOR: Color = (255, 255, 255)


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class LayoutPlacement:
    category: Category
    top_left: Point
    bottom_right: Point
    primary_label: str
    secondary_label: str

    @property
    def width(self) -> int:
        return self.bottom_right.x - self.top_left.x

    @property
    def height(self) -> int:
        return self.bottom_right.y - self.top_left.y


class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"


@dataclass(frozen=True)
class FilledRect:
    top_left: Point
    bottom_right: Point
    fill_color: Color


@dataclass(frozen=True)
class Text:
    content: str
    anchor: Point
    font_size: int
    font_weight: FontWeight = FontWeight.NORMAL
    color: Color = TEXT_COLOR
    horizontal_center: bool = True
    vertical_center: bool = True


DrawPrimitive = Union[FilledRect, Text]


@dataclass(frozen=True)
class ColumnRows:
    signers: int
    accounts: int
    arguments: int

    @property
    def total(self) -> int:
        return self.signers + self.accounts + self.arguments


@dataclass(frozen=True)
class CanvasPlan:
    width: int
    height: int
    rows: int
    column_origins: Tuple[int, ...] = ()

    @property
    def columns(self) -> int:
        return len(self.column_origins)


@dataclass(frozen=True)
class DiagramPlan:
    program_name: str
    version: str
    canvas: CanvasPlan
    primitives: Tuple[DrawPrimitive, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        primitives: List[dict] = []
        for primitive in self.primitives:
            kind = "rect" if isinstance(primitive, FilledRect) else "text"
            primitives.append({"kind": kind, **asdict(primitive)})
        return {
            "schema_version": METADATA_SCHEMA_VERSION,
            "program_name": self.program_name,
            "version": self.version,
            "canvas": asdict(self.canvas),
            "primitives": primitives,
        }


@dataclass(frozen=True)
class ExcalidrawDocument:
    elements: List[dict]
    app_state: dict
    files: dict

    def to_dict(self) -> dict:
        return {
            "type": "excalidraw",
            "version": 2,
            "source": "anchorviz",
            "elements": self.elements,
            "appState": self.app_state,
            "files": self.files,
        }
