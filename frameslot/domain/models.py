# frameslot/domain/models.py
from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TemplateType(str, Enum):
    SOLO = "solo"
    COLLAGE = "collage"
    CARD = "card"
    STRIP = "strip"


class PrintSize(str, Enum):
    R4 = "4R"
    R5 = "5R"
    A4 = "A4"


class PrintDimensions(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    dpi: int = 300
    width_inches: float
    height_inches: float


PRINT_DIMENSIONS: Dict[PrintSize, PrintDimensions] = {
    PrintSize.R4: PrintDimensions(width=1200, height=1800, width_inches=4, height_inches=6),
    PrintSize.R5: PrintDimensions(width=1500, height=2100, width_inches=5, height_inches=7),
    PrintSize.A4: PrintDimensions(width=2480, height=3508, width_inches=8.27, height_inches=11.69),
}


class Dimensions(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int
    height: int


class Hole(BaseModel):
    """Rectangular photo area of a template, in source-image pixels."""
    model_config = ConfigDict(frozen=True)

    id: str
    x: int
    y: int
    width: int
    height: int

    @property
    def last_x(self) -> int:
        return self.x + self.width - 1

    @property
    def last_y(self) -> int:
        return self.y + self.height - 1

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class TemplateDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    print_size: PrintSize = PrintSize.R4
    template_type: TemplateType
    holes: Tuple[Hole, ...]
    dimensions: Dimensions
    has_internal_branding: bool = False

    @property
    def hole_count(self) -> int:
        return len(self.holes)


# --- Transforms ---
# Tagged by `kind`; consumers must branch on the tag.

class PhotoTransform(BaseModel):
    """Zoom relative to cover fit plus the visible center, normalized to the photo (0..1)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["photo"] = "photo"
    photo_scale: float = Field(1.0, gt=0)
    center_x: float = 0.5
    center_y: float = 0.5


class ContainerTransform(BaseModel):
    """Zoom relative to cover fit plus the pixel offset of the photo center from the slot center."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["container"] = "container"
    scale: float = Field(1.0, gt=0)
    offset_x: float = 0.0
    offset_y: float = 0.0


Transform = Annotated[Union[PhotoTransform, ContainerTransform], Field(discriminator="kind")]


class Photo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    name: str
    width: Optional[int] = None
    height: Optional[int] = None


class TemplateSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    template_group_id: str
    template_id: str
    slot_index: int
    photo_id: Optional[str] = None
    transform: Optional[Transform] = None

    @model_validator(mode="after")
    def _photo_and_transform_together(self):
        if (self.photo_id is None) != (self.transform is None):
            raise ValueError("photo_id and transform must be set or cleared together")
        return self

    @property
    def is_filled(self) -> bool:
        return self.photo_id is not None


class SlotGroup(BaseModel):
    """Slots of one placed template (one print)."""
    model_config = ConfigDict(frozen=True)

    group_id: str
    template_id: str
    slots: Tuple[TemplateSlot, ...] = ()


class WorkingSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    groups: Tuple[SlotGroup, ...] = ()

    @property
    def slots(self) -> Tuple[TemplateSlot, ...]:
        return tuple(slot for group in self.groups for slot in group.slots)


class Selection(BaseModel):
    model_config = ConfigDict(frozen=True)

    slot_id: Optional[str] = None
    group_id: Optional[str] = None
    group_complete: bool = False

    @property
    def is_empty(self) -> bool:
        return self.slot_id is None
