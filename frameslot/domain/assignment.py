# frameslot/domain/assignment.py
"""
Slot selection and photo binding over caller-owned slot collections.

Every operation returns a new collection or session and leaves its inputs
untouched, so a caller can resolve each UI event against the latest value it
holds and serialize writes with a simple compare-and-swap.
"""
import logging
from typing import Annotated, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from frameslot.config.settings import Settings, settings
from frameslot.domain import slot_model
from frameslot.domain.errors import DuplicateGroup, GroupIndexOutOfRange, SlotNotFound
from frameslot.domain.models import (
    Hole,
    Selection,
    SlotGroup,
    TemplateDefinition,
    TemplateSlot,
    Transform,
    WorkingSession,
)
from frameslot.domain.registry import TemplateRegistry
from frameslot.domain.transform_engine import Size, cover_fit, normalize

logger = logging.getLogger(__name__)

Slots = Tuple[TemplateSlot, ...]


# --- Actions ---

class ApplyPhoto(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["apply_photo"] = "apply_photo"
    slot_id: str
    photo_id: str
    transform: Optional[Transform] = None
    photo_size: Optional[Tuple[int, int]] = None


class RemovePhoto(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["remove_photo"] = "remove_photo"
    slot_id: str


class AddTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["add_template"] = "add_template"
    definition: TemplateDefinition
    group_id: str


class RemoveTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["remove_template"] = "remove_template"
    group_index: int


class ReplaceTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["replace_template"] = "replace_template"
    group_index: int
    definition: TemplateDefinition


Action = Annotated[
    Union[ApplyPhoto, RemovePhoto, AddTemplate, RemoveTemplate, ReplaceTemplate],
    Field(discriminator="type"),
]


class AssignmentController:
    def __init__(self, registry: TemplateRegistry, config: Settings = settings):
        self.registry = registry
        self.config = config

    # --- lookups ---

    def _slot_position(self, slots: Sequence[TemplateSlot], slot_id: str) -> int:
        for index, slot in enumerate(slots):
            if slot.id == slot_id:
                return index
        raise SlotNotFound(slot_id)

    def _group_position(self, session: WorkingSession, group_index: int) -> int:
        if not 0 <= group_index < len(session.groups):
            raise GroupIndexOutOfRange(group_index, len(session.groups))
        return group_index

    def hole_for(self, slot: TemplateSlot) -> Hole:
        definition = self.registry.get(slot.template_id)
        return definition.holes[slot.slot_index]

    # --- slot collection operations ---

    def select_slot(self, slots: Sequence[TemplateSlot], slot_id: str) -> Selection:
        slot = slots[self._slot_position(slots, slot_id)]
        group = slot_model.group_slots(slots, slot.template_group_id)
        return Selection(
            slot_id=slot.id,
            group_id=slot.template_group_id,
            group_complete=slot_model.is_complete(group),
        )

    def apply_photo(
        self,
        slots: Sequence[TemplateSlot],
        slot_id: str,
        photo_id: str,
        transform: Optional[Transform] = None,
        photo_size: Optional[Size] = None,
    ) -> Slots:
        index = self._slot_position(slots, slot_id)
        slot = slots[index]

        if transform is not None:
            hole = self.hole_for(slot)
            transform = normalize(transform, (hole.width, hole.height), photo_size, self.config)
        elif slot.transform is not None:
            transform = slot.transform
        elif photo_size is not None:
            hole = self.hole_for(slot)
            transform = cover_fit(photo_size, (hole.width, hole.height))
        else:
            transform = cover_fit()

        updated = slot.model_copy(update={"photo_id": photo_id, "transform": transform})
        logger.debug(f"Photo {photo_id} applied to slot {slot_id} ({transform.kind} transform)")
        return tuple(updated if i == index else s for i, s in enumerate(slots))

    def auto_advance(self, slots: Sequence[TemplateSlot], just_filled_slot_id: str) -> Selection:
        slot = slots[self._slot_position(slots, just_filled_slot_id)]
        group_id = slot.template_group_id
        group = slot_model.group_slots(slots, group_id)

        if slot_model.is_complete(group):
            return Selection(group_id=group_id, group_complete=True)

        next_slot = slot_model.first_empty(group)
        return Selection(
            slot_id=next_slot.id if next_slot is not None else None,
            group_id=group_id,
            group_complete=False,
        )

    def remove_photo(self, slots: Sequence[TemplateSlot], slot_id: str) -> Slots:
        index = self._slot_position(slots, slot_id)
        slot = slots[index]
        if not slot.is_filled:
            return tuple(slots)
        cleared = slot.model_copy(update={"photo_id": None, "transform": None})
        return tuple(cleared if i == index else s for i, s in enumerate(slots))

    # --- session operations ---

    def with_slots(self, session: WorkingSession, slots: Sequence[TemplateSlot]) -> WorkingSession:
        """Write back an updated flat slot collection into the session's groups."""
        by_id = {slot.id: slot for slot in slots}
        groups = tuple(
            group.model_copy(update={"slots": tuple(by_id.get(s.id, s) for s in group.slots)})
            for group in session.groups
        )
        return session.model_copy(update={"groups": groups})

    def add_template(self, session: WorkingSession, definition: TemplateDefinition, group_id: str) -> WorkingSession:
        if any(group.group_id == group_id for group in session.groups):
            raise DuplicateGroup(group_id)
        self.registry.register(definition)
        group = slot_model.instantiate(definition, group_id)
        return session.model_copy(update={"groups": session.groups + (group,)})

    def attach_group(self, session: WorkingSession, definition: TemplateDefinition, group: SlotGroup) -> WorkingSession:
        """Adopt a previously built slot group under `definition`; counts must match."""
        bound = slot_model.rebind(group, definition)
        self.registry.register(definition)
        groups = tuple(g for g in session.groups if g.group_id != bound.group_id) + (bound,)
        return session.model_copy(update={"groups": groups})

    def remove_template(self, session: WorkingSession, group_index: int) -> WorkingSession:
        position = self._group_position(session, group_index)
        groups = tuple(g for i, g in enumerate(session.groups) if i != position)
        return session.model_copy(update={"groups": groups})

    def replace_template_at_position(
        self,
        session: WorkingSession,
        group_index: int,
        new_definition: TemplateDefinition,
    ) -> WorkingSession:
        """
        Swap the template of the group at `group_index`. Photos and transforms are
        carried over slot by slot at the same index; extra old photos are dropped
        and extra new slots start empty. Calling it twice with the same arguments
        gives the same session.
        """
        position = self._group_position(session, group_index)
        old = session.groups[position]
        self.registry.register(new_definition)

        slots = []
        for index in range(new_definition.hole_count):
            previous = old.slots[index] if index < len(old.slots) else None
            slots.append(TemplateSlot(
                id=slot_model.slot_id_for(old.group_id, index),
                template_group_id=old.group_id,
                template_id=new_definition.id,
                slot_index=index,
                photo_id=previous.photo_id if previous is not None else None,
                transform=previous.transform if previous is not None else None,
            ))

        dropped = sum(1 for s in old.slots[new_definition.hole_count:] if s.is_filled)
        logger.info(
            f"Template at position {group_index} replaced: {old.template_id} -> {new_definition.id} "
            f"({len(old.slots)} -> {new_definition.hole_count} slots, {dropped} photos dropped)"
        )

        new_group = SlotGroup(group_id=old.group_id, template_id=new_definition.id, slots=tuple(slots))
        groups = tuple(new_group if i == position else g for i, g in enumerate(session.groups))
        return session.model_copy(update={"groups": groups})

    def dispatch(self, session: WorkingSession, action: Action) -> WorkingSession:
        """Pure `(session, action) -> session` transition."""
        if action.type == "apply_photo":
            slots = self.apply_photo(session.slots, action.slot_id, action.photo_id, action.transform, action.photo_size)
            return self.with_slots(session, slots)
        if action.type == "remove_photo":
            return self.with_slots(session, self.remove_photo(session.slots, action.slot_id))
        if action.type == "add_template":
            return self.add_template(session, action.definition, action.group_id)
        if action.type == "remove_template":
            return self.remove_template(session, action.group_index)
        if action.type == "replace_template":
            return self.replace_template_at_position(session, action.group_index, action.definition)
        raise ValueError(f"Unknown action type: {getattr(action, 'type', None)!r}")
