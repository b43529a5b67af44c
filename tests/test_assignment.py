import pytest
from pydantic import TypeAdapter

from frameslot.domain import slot_model
from frameslot.domain.assignment import (
    Action,
    AddTemplate,
    ApplyPhoto,
    AssignmentController,
    RemovePhoto,
    RemoveTemplate,
    ReplaceTemplate,
)
from frameslot.domain.errors import (
    DuplicateGroup,
    GroupIndexOutOfRange,
    HoleCountMismatch,
    SlotNotFound,
    TemplateEngineError,
    TemplateNotFound,
)
from frameslot.domain.models import ContainerTransform, PhotoTransform, WorkingSession
from frameslot.domain.registry import TemplateRegistry


@pytest.fixture
def definitions(make_definition):
    return {
        "solo": make_definition("solo", 1),
        "duo": make_definition("duo", 2),
        "trio": make_definition("trio", 3),
        "quad": make_definition("quad", 4),
    }


@pytest.fixture
def controller(definitions, config):
    return AssignmentController(TemplateRegistry(definitions.values()), config)


@pytest.fixture
def session(controller, definitions):
    empty = WorkingSession(id="session-1")
    return controller.add_template(empty, definitions["trio"], "print-1")


def fill(controller, session, photos):
    slots = session.slots
    for slot_id, photo_id in photos.items():
        slots = controller.apply_photo(slots, slot_id, photo_id)
    return controller.with_slots(session, slots)


def test_select_slot_reports_group_state(controller, session):
    selection = controller.select_slot(session.slots, "print-1_slot_1")

    assert selection.slot_id == "print-1_slot_1"
    assert selection.group_id == "print-1"
    assert selection.group_complete is False


def test_select_unknown_slot_fails(controller, session):
    with pytest.raises(SlotNotFound) as exc:
        controller.select_slot(session.slots, "nope")
    assert exc.value.slot_id == "nope"
    assert str(exc.value) == "Slot 'nope' was not found."


def test_apply_photo_uses_cover_fit_by_default(controller, session):
    slots = controller.apply_photo(session.slots, "print-1_slot_0", "photo-a")

    assert slots[0].photo_id == "photo-a"
    assert slots[0].transform == PhotoTransform()
    assert slots[1:] == session.slots[1:]
    assert session.slots[0].photo_id is None


def test_apply_photo_normalizes_an_explicit_transform(controller, session):
    slots = controller.apply_photo(
        session.slots, "print-1_slot_0", "photo-a",
        transform=ContainerTransform(scale=40.0, offset_x=5000, offset_y=0),
    )

    transform = slots[0].transform
    assert transform.kind == "container"
    assert transform.scale == 10.0
    assert transform.offset_x == pytest.approx(450.0)


def test_replacing_a_photo_keeps_the_slot_transform(controller, session):
    zoomed = PhotoTransform(photo_scale=2.0, center_x=0.4, center_y=0.6)
    slots = controller.apply_photo(session.slots, "print-1_slot_0", "photo-a", transform=zoomed)

    slots = controller.apply_photo(slots, "print-1_slot_0", "photo-b")

    assert slots[0].photo_id == "photo-b"
    assert slots[0].transform == zoomed


def test_apply_then_remove_restores_the_empty_slot(controller, session):
    before = session.slots

    after = controller.remove_photo(controller.apply_photo(before, "print-1_slot_2", "photo-a"), "print-1_slot_2")

    assert after == before


def test_remove_photo_on_empty_slot_is_a_no_op(controller, session):
    assert controller.remove_photo(session.slots, "print-1_slot_0") == session.slots


def test_remove_photo_unknown_slot_fails(controller, session):
    with pytest.raises(SlotNotFound):
        controller.remove_photo(session.slots, "print-9_slot_0")


def test_apply_photo_to_unregistered_template_fails(config, session):
    bare = AssignmentController(TemplateRegistry(), config)

    with pytest.raises(TemplateNotFound):
        bare.apply_photo(session.slots, "print-1_slot_0", "photo-a", transform=PhotoTransform())


def test_auto_advance_moves_to_next_empty_slot(controller, session):
    slots = controller.apply_photo(session.slots, "print-1_slot_0", "photo-a")

    selection = controller.auto_advance(slots, "print-1_slot_0")

    assert selection.slot_id == "print-1_slot_1"
    assert selection.group_complete is False


def test_auto_advance_clears_selection_when_group_is_complete(controller, session):
    filled = fill(controller, session, {
        "print-1_slot_0": "a", "print-1_slot_1": "b", "print-1_slot_2": "c",
    })

    selection = controller.auto_advance(filled.slots, "print-1_slot_2")

    assert selection.is_empty
    assert selection.group_id == "print-1"
    assert selection.group_complete is True


def test_auto_advance_only_looks_inside_the_group(controller, session, definitions):
    session = controller.add_template(session, definitions["solo"], "print-2")
    filled = fill(controller, session, {"print-2_slot_0": "x"})

    selection = controller.auto_advance(filled.slots, "print-2_slot_0")

    assert selection.group_complete is True
    assert selection.slot_id is None


def test_add_template_rejects_duplicate_group(controller, session, definitions):
    with pytest.raises(DuplicateGroup) as exc:
        controller.add_template(session, definitions["duo"], "print-1")
    assert exc.value.group_id == "print-1"
    assert isinstance(exc.value, TemplateEngineError)


def test_remove_template_checks_the_index(controller, session):
    assert controller.remove_template(session, 0).groups == ()

    with pytest.raises(GroupIndexOutOfRange) as exc:
        controller.remove_template(session, 3)
    assert (exc.value.index, exc.value.size) == (3, 1)


def test_replace_with_fewer_holes_truncates(controller, session, definitions):
    session = fill(controller, session, {"print-1_slot_0": "a", "print-1_slot_1": "b"})

    replaced = controller.replace_template_at_position(session, 0, definitions["duo"])

    group = replaced.groups[0]
    assert group.group_id == "print-1"
    assert group.template_id == "duo"
    assert [s.photo_id for s in group.slots] == ["a", "b"]
    assert [s.id for s in group.slots] == ["print-1_slot_0", "print-1_slot_1"]


def test_replace_with_more_holes_extends_with_empty_slots(controller, session, definitions):
    session = fill(controller, session, {"print-1_slot_0": "a", "print-1_slot_1": "b"})

    replaced = controller.replace_template_at_position(session, 0, definitions["quad"])

    slots = replaced.groups[0].slots
    assert [s.photo_id for s in slots] == ["a", "b", None, None]
    assert [s.slot_index for s in slots] == [0, 1, 2, 3]
    assert all(s.template_id == "quad" for s in slots)
    assert slots[0].transform == session.slots[0].transform


def test_replace_is_idempotent(controller, session, definitions):
    session = fill(controller, session, {"print-1_slot_0": "a"})

    once = controller.replace_template_at_position(session, 0, definitions["quad"])
    again = controller.replace_template_at_position(session, 0, definitions["quad"])
    twice = controller.replace_template_at_position(once, 0, definitions["quad"])

    assert once == twice
    assert once == again


def test_replace_registers_new_definition(controller, session, make_definition):
    fresh = make_definition("fresh", 2)

    replaced = controller.replace_template_at_position(session, 0, fresh)

    assert "fresh" in controller.registry
    assert controller.hole_for(replaced.slots[1]) == fresh.holes[1]


def test_replace_out_of_range_fails(controller, session, definitions):
    with pytest.raises(GroupIndexOutOfRange):
        controller.replace_template_at_position(session, 1, definitions["duo"])
    with pytest.raises(GroupIndexOutOfRange):
        controller.replace_template_at_position(session, -1, definitions["duo"])


def test_attach_group_requires_matching_count(controller, definitions):
    group = slot_model.instantiate(definitions["trio"], "restored")
    session = WorkingSession(id="s")

    with pytest.raises(HoleCountMismatch):
        controller.attach_group(session, definitions["duo"], group)

    attached = controller.attach_group(session, definitions["trio"], group)
    assert [g.group_id for g in attached.groups] == ["restored"]


def test_dispatch_runs_each_action(controller, definitions):
    session = WorkingSession(id="s")
    actions = [
        AddTemplate(definition=definitions["duo"], group_id="g1"),
        AddTemplate(definition=definitions["solo"], group_id="g2"),
        ApplyPhoto(slot_id="g1_slot_1", photo_id="p1"),
        RemovePhoto(slot_id="g1_slot_1"),
        ApplyPhoto(slot_id="g2_slot_0", photo_id="p2", photo_size=(400, 300)),
        ReplaceTemplate(group_index=1, definition=definitions["duo"]),
        RemoveTemplate(group_index=0),
    ]

    for action in actions:
        session = controller.dispatch(session, action)

    assert [g.group_id for g in session.groups] == ["g2"]
    assert [s.photo_id for s in session.slots] == ["p2", None]
    assert session.groups[0].template_id == "duo"


def test_actions_parse_from_plain_data(definitions):
    adapter = TypeAdapter(Action)

    action = adapter.validate_python({"type": "remove_template", "group_index": 2})

    assert isinstance(action, RemoveTemplate)
    assert action.group_index == 2
