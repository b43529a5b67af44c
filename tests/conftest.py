import io

import numpy as np
import pytest
from PIL import Image

from frameslot.config.settings import Settings
from frameslot.domain.models import Dimensions, Hole, TemplateDefinition, TemplateType

MAGENTA = (255, 0, 255, 255)
WHITE = (255, 255, 255, 255)


@pytest.fixture
def config():
    return Settings()


@pytest.fixture
def make_template():
    """RGBA canvas with marker rectangles given as (x, y, width, height)."""
    def _make(width, height, rects=(), color=MAGENTA, background=WHITE):
        canvas = np.empty((height, width, 4), dtype=np.uint8)
        canvas[:] = background
        for x, y, w, h in rects:
            canvas[y:y + h, x:x + w] = color
        return canvas
    return _make


@pytest.fixture
def to_png():
    def _encode(pixels):
        buf = io.BytesIO()
        Image.fromarray(pixels).save(buf, format="PNG")
        return buf.getvalue()
    return _encode


@pytest.fixture
def make_definition():
    def _make(template_id, hole_count, hole_size=(100, 100), template_type=TemplateType.COLLAGE):
        w, h = hole_size
        holes = tuple(
            Hole(id=f"hole_{i + 1}", x=i * (w + 10), y=0, width=w, height=h)
            for i in range(hole_count)
        )
        return TemplateDefinition(
            id=template_id,
            name=template_id.title(),
            template_type=template_type,
            holes=holes,
            dimensions=Dimensions(width=max(1, hole_count) * (w + 10), height=h),
        )
    return _make
