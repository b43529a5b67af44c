# frameslot/domain/slot_model.py
from typing import Optional, Sequence, Tuple

from frameslot.domain.errors import HoleCountMismatch
from frameslot.domain.models import SlotGroup, TemplateDefinition, TemplateSlot


def slot_id_for(group_id: str, index: int) -> str:
    return f"{group_id}_slot_{index}"


def instantiate(definition: TemplateDefinition, group_id: str) -> SlotGroup:
    """One empty slot per hole, in hole order."""
    slots = tuple(
        TemplateSlot(
            id=slot_id_for(group_id, index),
            template_group_id=group_id,
            template_id=definition.id,
            slot_index=index,
        )
        for index in range(definition.hole_count)
    )
    return SlotGroup(group_id=group_id, template_id=definition.id, slots=slots)


def is_complete(slots: Sequence[TemplateSlot]) -> bool:
    return len(slots) > 0 and all(slot.is_filled for slot in slots)


def first_empty(slots: Sequence[TemplateSlot]) -> Optional[TemplateSlot]:
    return next((slot for slot in slots if not slot.is_filled), None)


def group_slots(slots: Sequence[TemplateSlot], group_id: str) -> Tuple[TemplateSlot, ...]:
    return tuple(slot for slot in slots if slot.template_group_id == group_id)


def rebind(group: SlotGroup, definition: TemplateDefinition) -> SlotGroup:
    """Pair an existing slot group with a definition; hole and slot counts must agree."""
    if len(group.slots) != definition.hole_count:
        raise HoleCountMismatch(expected=definition.hole_count, actual=len(group.slots))
    slots = tuple(
        slot.model_copy(update={"template_id": definition.id, "slot_index": index})
        for index, slot in enumerate(group.slots)
    )
    return group.model_copy(update={"template_id": definition.id, "slots": slots})
