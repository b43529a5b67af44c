# frameslot/domain/registry.py
import threading
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, NamedTuple, Optional

from frameslot.domain.errors import TemplateNotFound
from frameslot.domain.models import TemplateDefinition

logger = logging.getLogger(__name__)

class TemplateRegistry:
    """Definitions known to one working session, looked up by template id."""

    def __init__(self, definitions: Iterable[TemplateDefinition] = ()):
        self._definitions: Dict[str, TemplateDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: TemplateDefinition) -> None:
        self._definitions[definition.id] = definition

    def get(self, template_id: str) -> TemplateDefinition:
        try:
            return self._definitions[template_id]
        except KeyError:
            raise TemplateNotFound(template_id) from None

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def as_utc(moment: datetime) -> datetime:
    # Naive timestamps are taken as UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class CacheEntry(NamedTuple):
    definition: TemplateDefinition
    last_modified: datetime


class DefinitionCache:
    """
    Detected definitions keyed by source image id. An entry stays valid while the
    source's last-modified time is not newer than the one recorded with it.
    """

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def lookup(self, source_id: str, last_modified: datetime) -> Optional[TemplateDefinition]:
        last_modified = as_utc(last_modified)
        with self._lock:
            entry = self._entries.get(source_id)
        if entry is None:
            return None
        if last_modified <= entry.last_modified:
            return entry.definition
        logger.info(f"Cache entry for '{source_id}' is stale ({last_modified} > {entry.last_modified}).")
        return None

    def store(self, source_id: str, last_modified: datetime, definition: TemplateDefinition) -> None:
        last_modified = as_utc(last_modified)
        with self._lock:
            self._entries[source_id] = CacheEntry(definition, last_modified)

    def invalidate(self, source_id: str) -> None:
        with self._lock:
            self._entries.pop(source_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
