# frameslot/domain/definition_builder.py
import re
from typing import List, Optional, Sequence, Tuple

from frameslot.config.settings import Settings, settings
from frameslot.domain.classifier import classify_template
from frameslot.domain.models import (
    Dimensions,
    Hole,
    PrintSize,
    TemplateDefinition,
    TemplateType,
)
from frameslot.infrastructure.cv.region_scan import Box

BRANDED_TYPES = (TemplateType.CARD, TemplateType.STRIP)

NAME_STOPWORDS = {"template", "png", "jpg", "jpeg", "1", "2", "3", "4", "5"}

FALLBACK_NAMES = {
    TemplateType.SOLO: "Solo Print",
    TemplateType.COLLAGE: "Collage Print",
    TemplateType.CARD: "Photo Card",
    TemplateType.STRIP: "Photo Strip",
}

def order_holes(boxes: Sequence[Box], row_band: int) -> Tuple[Hole, ...]:
    """Row-major order: boxes whose top edge is within `row_band` of the row's first box share a row."""
    rows: List[List[Box]] = []
    for box in sorted(boxes, key=lambda b: (b.y, b.x)):
        if rows and box.y - rows[-1][0].y < row_band:
            rows[-1].append(box)
        else:
            rows.append([box])

    ordered = [box for row in rows for box in sorted(row, key=lambda b: (b.x, b.y))]
    return tuple(
        Hole(id=f"hole_{i}", x=b.x, y=b.y, width=b.width, height=b.height)
        for i, b in enumerate(ordered, start=1)
    )

def generate_display_name(filename: Optional[str], template_type: TemplateType) -> str:
    if filename:
        name = re.sub(r"\.(png|jpg|jpeg)$", "", filename, flags=re.IGNORECASE)
        name = re.sub(r"[-_]", " ", name)
        words = [w for w in name.lower().split() if w not in NAME_STOPWORDS]
        if words:
            return " ".join(w[0].upper() + w[1:] for w in words)
    return FALLBACK_NAMES.get(template_type, "Custom Template")

def build_definition(
    template_id: str,
    holes: Sequence[Hole],
    dimensions: Tuple[int, int],
    filename: Optional[str] = None,
    print_size: PrintSize = PrintSize.R4,
    config: Settings = settings,
) -> TemplateDefinition:
    ordered = order_holes([Box(h.x, h.y, h.width, h.height) for h in holes], config.ROW_BAND)
    template_type = classify_template(ordered, filename, config)
    width, height = dimensions
    return TemplateDefinition(
        id=template_id,
        name=generate_display_name(filename, template_type),
        print_size=print_size,
        template_type=template_type,
        holes=ordered,
        dimensions=Dimensions(width=width, height=height),
        has_internal_branding=template_type in BRANDED_TYPES,
    )
