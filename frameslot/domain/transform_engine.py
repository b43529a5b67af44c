# frameslot/domain/transform_engine.py
"""
Mapping of a photo onto a slot viewport.

Both transform kinds express zoom relative to the cover fit: at scale 1.0 the
photo is resized just enough to cover the whole hole. A photo transform stores
the visible center as a fraction of the photo, a container transform stores the
offset in slot pixels between the photo center and the slot center. Converting
between the two needs the photo size and is only done through `to_container` /
`to_photo`.
"""
import math
from typing import Optional, Tuple

from frameslot.config.settings import Settings, settings
from frameslot.domain.errors import InvalidTransform
from frameslot.domain.models import ContainerTransform, PhotoTransform

Size = Tuple[int, int]

def _unknown_kind(transform) -> InvalidTransform:
    return InvalidTransform(f"Unknown transform kind: {getattr(transform, 'kind', None)!r}", field="kind")

def _check_size(size: Size, what: str) -> None:
    width, height = size
    if width <= 0 or height <= 0:
        raise InvalidTransform(f"{what} size must be positive, got {width}x{height}.")

def _finite(value: float, field: str) -> float:
    if not math.isfinite(value):
        raise InvalidTransform(f"{field} must be a finite number, got {value}.", field=field)
    return value

def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))

def cover_scale(photo_size: Size, hole_size: Size) -> float:
    """Slot pixels per photo pixel when the photo exactly covers the hole."""
    _check_size(photo_size, "Photo")
    _check_size(hole_size, "Hole")
    (pw, ph), (hw, hh) = photo_size, hole_size
    return max(hw / pw, hh / ph)

def cover_fit(photo_size: Optional[Size] = None, hole_size: Optional[Size] = None) -> PhotoTransform:
    # Scale 1.0 is the cover fit by definition, so sizes only need to be sane.
    if photo_size is not None and hole_size is not None:
        cover_scale(photo_size, hole_size)
    return PhotoTransform(photo_scale=1.0, center_x=0.5, center_y=0.5)

def window_size(photo_size: Size, hole_size: Size, scale: float) -> Tuple[float, float]:
    factor = cover_scale(photo_size, hole_size) * scale
    return hole_size[0] / factor, hole_size[1] / factor

def _center_bounds(half_extent: float) -> Tuple[float, float]:
    if half_extent >= 0.5:
        return 0.5, 0.5
    return half_extent, 1.0 - half_extent

def normalize(transform, hole_size: Size, photo_size: Optional[Size] = None, config: Settings = settings):
    """
    Clamp a user supplied transform to the allowed zoom range and keep the photo
    covering the hole where the photo size is known. The result has the same
    kind as the input.
    """
    _check_size(hole_size, "Hole")
    low, high = config.TRANSFORM_MIN_SCALE, config.TRANSFORM_MAX_SCALE

    if transform.kind == "photo":
        scale = _clamp(_finite(transform.photo_scale, "photo_scale"), low, high)
        cx = _finite(transform.center_x, "center_x")
        cy = _finite(transform.center_y, "center_y")
        if photo_size is None:
            x_bounds = y_bounds = (0.0, 1.0)
        else:
            win_w, win_h = window_size(photo_size, hole_size, scale)
            x_bounds = _center_bounds(win_w / (2 * photo_size[0]))
            y_bounds = _center_bounds(win_h / (2 * photo_size[1]))
        return PhotoTransform(
            photo_scale=scale,
            center_x=_clamp(cx, *x_bounds),
            center_y=_clamp(cy, *y_bounds),
        )

    if transform.kind == "container":
        scale = _clamp(_finite(transform.scale, "scale"), low, high)
        ox = _finite(transform.offset_x, "offset_x")
        oy = _finite(transform.offset_y, "offset_y")
        hw, hh = hole_size
        if photo_size is None:
            max_x = max(0.0, scale - 1.0) * hw / 2
            max_y = max(0.0, scale - 1.0) * hh / 2
        else:
            factor = cover_scale(photo_size, hole_size) * scale
            max_x = max(0.0, (photo_size[0] * factor - hw) / 2)
            max_y = max(0.0, (photo_size[1] * factor - hh) / 2)
        return ContainerTransform(
            scale=scale,
            offset_x=_clamp(ox, -max_x, max_x),
            offset_y=_clamp(oy, -max_y, max_y),
        )

    raise _unknown_kind(transform)

def to_container(transform: PhotoTransform, photo_size: Size, hole_size: Size) -> ContainerTransform:
    if transform.kind != "photo":
        raise _unknown_kind(transform)
    factor = cover_scale(photo_size, hole_size) * transform.photo_scale
    return ContainerTransform(
        scale=transform.photo_scale,
        offset_x=(0.5 - transform.center_x) * photo_size[0] * factor,
        offset_y=(0.5 - transform.center_y) * photo_size[1] * factor,
    )

def to_photo(transform: ContainerTransform, photo_size: Size, hole_size: Size) -> PhotoTransform:
    if transform.kind != "container":
        raise _unknown_kind(transform)
    factor = cover_scale(photo_size, hole_size) * transform.scale
    return PhotoTransform(
        photo_scale=transform.scale,
        center_x=0.5 - transform.offset_x / (photo_size[0] * factor),
        center_y=0.5 - transform.offset_y / (photo_size[1] * factor),
    )

def visible_window(photo_size: Size, hole_size: Size, transform) -> Tuple[float, float, float, float]:
    """(left, top, width, height) of the photo area shown in the slot, in photo pixels."""
    if transform.kind == "container":
        transform = to_photo(transform, photo_size, hole_size)
    elif transform.kind != "photo":
        raise _unknown_kind(transform)

    win_w, win_h = window_size(photo_size, hole_size, transform.photo_scale)
    left = transform.center_x * photo_size[0] - win_w / 2
    top = transform.center_y * photo_size[1] - win_h / 2
    return left, top, win_w, win_h
