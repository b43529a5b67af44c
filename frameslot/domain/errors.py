# frameslot/domain/errors.py
from typing import Optional


class TemplateEngineError(Exception):
    """Base class for every failure raised by the template engine."""


class DecodeFailure(TemplateEngineError):
    """The template raster could not be read."""


class SlotNotFound(TemplateEngineError, LookupError):
    def __init__(self, slot_id: str):
        self.slot_id = slot_id
        super().__init__(f"Slot '{slot_id}' was not found.")


class GroupIndexOutOfRange(TemplateEngineError, IndexError):
    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"Template position {index} is out of range (session has {size} templates).")


class HoleCountMismatch(TemplateEngineError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Template defines {expected} holes but the slot group has {actual} slots.")


class TemplateNotFound(TemplateEngineError, LookupError):
    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template '{template_id}' is not registered in this session.")


class InvalidTransform(TemplateEngineError, ValueError):
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class DuplicateGroup(TemplateEngineError, ValueError):
    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__(f"Group '{group_id}' already exists in the session.")
