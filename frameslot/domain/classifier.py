# frameslot/domain/classifier.py
from typing import Dict, Optional, Sequence, Tuple

from frameslot.config.settings import Settings, settings
from frameslot.domain.models import Hole, TemplateType

# Checked in this order; the first keyword found in the filename wins.
FILENAME_KEYWORDS: Dict[TemplateType, Tuple[str, ...]] = {
    TemplateType.SOLO: ("solo", "single", "one"),
    TemplateType.COLLAGE: ("collage", "grid", "multi"),
    TemplateType.CARD: ("photocard", "photo-card", "card"),
    TemplateType.STRIP: ("photostrip", "photo-strip", "strip"),
}

def type_from_filename(filename: Optional[str]) -> Optional[TemplateType]:
    if not filename:
        return None
    name = filename.lower()
    for template_type, keywords in FILENAME_KEYWORDS.items():
        if any(keyword in name for keyword in keywords):
            return template_type
    return None

def type_from_holes(holes: Sequence[Hole], config: Settings = settings) -> TemplateType:
    count = len(holes)
    if count == 1:
        return TemplateType.SOLO
    if count == 4:
        avg_ratio = sum(h.aspect_ratio for h in holes) / count
        if config.CARD_ASPECT_MIN <= avg_ratio <= config.CARD_ASPECT_MAX:
            return TemplateType.CARD
        return TemplateType.COLLAGE
    if count == 6:
        return TemplateType.STRIP
    if count <= 2:
        return TemplateType.SOLO
    if count <= 4:
        return TemplateType.COLLAGE
    return TemplateType.STRIP

def classify_template(holes: Sequence[Hole], filename: Optional[str] = None, config: Settings = settings) -> TemplateType:
    return type_from_filename(filename) or type_from_holes(holes, config)
