"""Record stores: where ingredient records come from and patches go to."""

from .base import RecordStore, RecordStoreError
from .yaml_store import YamlRecordStore, RecordRef, EffectGroupRef, EffectRef

__all__ = [
    "RecordStore",
    "RecordStoreError",
    "YamlRecordStore",
    "RecordRef",
    "EffectGroupRef",
    "EffectRef",
]
