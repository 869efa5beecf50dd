"""Abstract base class for ingredient record stores.

The randomizer never reads plugin data directly. It works with opaque
handles handed out by a RecordStore:

- record handles: one per ingredient record
- group handles: the complete effect list of one record
- occurrence handles: one effect entry of one record

Handles must keep pointing at the original data for the whole run, even
after writes to the patched copy.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from ..core.models import EffectData


class RecordStoreError(Exception):
    """Raised when records cannot be loaded, resolved or written."""

    pass


class RecordStore(ABC):
    """Source of ingredient records and sink for the patched effects.

    All implementations must provide these methods with the same signatures
    so the run can swap stores freely.
    """

    @abstractmethod
    def list_source_records(self) -> Sequence[Any]:
        """Return a handle for every ingredient record in the load order."""

    @abstractmethod
    def resolve_override(self, record: Any) -> Any:
        """Return the winning override of a record."""

    @abstractmethod
    def get_effect_group(self, record: Any) -> Any:
        """Return a handle to the record's complete original effect list."""

    @abstractmethod
    def get_effect_occurrences(self, record: Any) -> Sequence[Any]:
        """Return a handle for each original effect entry of the record."""

    @abstractmethod
    def read_effect_fields(self, occurrence: Any) -> EffectData:
        """Read the fields of one original effect entry."""

    @abstractmethod
    def read_group_fields(self, group: Any) -> list[EffectData]:
        """Read the fields of every effect in a group, in slot order."""

    @abstractmethod
    def write_effect_slot(self, record: Any, slot_index: int, occurrence: Any) -> None:
        """Overwrite one effect slot of the patched record with an occurrence."""

    @abstractmethod
    def write_effect_group(self, record: Any, group: Any) -> None:
        """Overwrite all effect slots of the patched record with a group."""

    @abstractmethod
    def set_output_flag(self, name: str, value: bool) -> None:
        """Set a header flag on the output patch."""

    def record_name(self, record: Any) -> str:
        """Label used in logs and reports."""
        return str(record)

    def record_form_id(self, record: Any) -> str:
        """Form id of a record handle."""
        return str(record)
