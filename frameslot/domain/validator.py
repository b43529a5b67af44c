# frameslot/domain/validator.py
from enum import Enum
from typing import List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from frameslot.config.settings import Settings, settings
from frameslot.domain.models import Hole


class ViolationCode(str, Enum):
    NO_HOLES_DETECTED = "NoHolesDetected"
    HOLE_TOO_SMALL = "HoleTooSmall"
    HOLES_OVERLAP = "HolesOverlap"


class Violation(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: ViolationCode
    hole_ids: Tuple[str, ...] = ()
    message: str


class ValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    violations: Tuple[Violation, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> List[str]:
        return [v.message for v in self.violations]


def holes_overlap(a: Hole, b: Hole) -> bool:
    return not (
        a.last_x < b.x or
        b.last_x < a.x or
        a.last_y < b.y or
        b.last_y < a.y
    )


def validate_holes(holes: Sequence[Hole], config: Settings = settings, warnings: Sequence[str] = ()) -> ValidationReport:
    """Run every rule and collect all violations; nothing short-circuits."""
    violations: List[Violation] = []
    min_size = config.MIN_HOLE_SIZE

    if not holes:
        violations.append(Violation(
            code=ViolationCode.NO_HOLES_DETECTED,
            message="No photo placement areas detected. Ensure magenta (#FF00FF) regions are present.",
        ))

    for index, hole in enumerate(holes, start=1):
        if hole.width < min_size or hole.height < min_size:
            violations.append(Violation(
                code=ViolationCode.HOLE_TOO_SMALL,
                hole_ids=(hole.id,),
                message=f"Hole {index} is too small ({hole.width}x{hole.height}px). Minimum size is {min_size}px.",
            ))

    for i in range(len(holes)):
        for j in range(i + 1, len(holes)):
            if holes_overlap(holes[i], holes[j]):
                violations.append(Violation(
                    code=ViolationCode.HOLES_OVERLAP,
                    hole_ids=(holes[i].id, holes[j].id),
                    message=f"Holes {i + 1} and {j + 1} overlap. Ensure photo areas are separated.",
                ))

    return ValidationReport(violations=tuple(violations), warnings=tuple(warnings))
