"""Record store backed by YAML plugin dumps.

Plugins are given in load order. A record defined by several plugins
resolves to the copy from the last one (the winning override). Writes go to
a patch buffer of copied records; the loaded plugins are never modified, so
every handle keeps reading original data.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import yaml
from pydantic import ValidationError

from ..core.models import EffectData, IngredientRecord, PatchFile, PluginFile
from .base import RecordStore, RecordStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordRef:
    """A record as defined by one plugin."""

    plugin_index: int
    form_id: str


@dataclass(frozen=True)
class EffectGroupRef:
    """The original effect list of a record."""

    record: RecordRef


@dataclass(frozen=True)
class EffectRef:
    """One original effect entry of a record."""

    record: RecordRef
    slot_index: int


class YamlRecordStore(RecordStore):
    """In-memory store over a load order of plugin dumps.

    Args:
        plugins: Plugin dumps in load order
        patch_file_name: File name recorded in the generated patch
    """

    def __init__(
        self,
        plugins: Sequence[PluginFile],
        patch_file_name: str = "RandomAlchemyPatch.esp",
    ):
        self.plugins = list(plugins)
        self.patch_file_name = patch_file_name
        self.flags: dict[str, bool] = {}
        self._patched: dict[str, IngredientRecord] = {}
        self._records: dict[RecordRef, IngredientRecord] = {}
        self._winners: dict[str, RecordRef] = {}

        for plugin_index, plugin in enumerate(self.plugins):
            for record in plugin.ingredients:
                ref = RecordRef(plugin_index, record.form_id)
                if ref in self._records:
                    logger.warning(
                        "%s defines %s twice; keeping the last definition",
                        plugin.plugin,
                        record.form_id,
                    )
                self._records[ref] = record
                self._winners[record.form_id] = ref

    @classmethod
    def from_paths(
        cls,
        paths: Sequence[Path | str],
        patch_file_name: str = "RandomAlchemyPatch.esp",
    ) -> "YamlRecordStore":
        """Load plugin dumps from YAML files, in the given load order.

        Raises:
            RecordStoreError: If a file is missing, unreadable or malformed.
        """
        plugins = []
        for path in paths:
            path = Path(path)
            try:
                plugins.append(PluginFile.from_yaml(path))
            except FileNotFoundError:
                raise RecordStoreError(f"Plugin dump not found: {path}") from None
            except (OSError, yaml.YAMLError) as e:
                raise RecordStoreError(f"Failed to read {path}: {e}") from e
            except ValidationError as e:
                raise RecordStoreError(f"Invalid plugin dump {path}: {e}") from e
            logger.info(
                "Loaded %s (%d ingredients) from %s",
                plugins[-1].plugin,
                len(plugins[-1].ingredients),
                path,
            )
        return cls(plugins, patch_file_name=patch_file_name)

    # ── Reads ──

    def _record(self, ref: RecordRef) -> IngredientRecord:
        try:
            return self._records[ref]
        except KeyError:
            raise RecordStoreError(f"Unknown record handle: {ref}") from None

    def list_source_records(self) -> list[RecordRef]:
        return list(self._records)

    def resolve_override(self, record: RecordRef) -> RecordRef:
        self._record(record)
        return self._winners[record.form_id]

    def get_effect_group(self, record: RecordRef) -> EffectGroupRef:
        self._record(record)
        return EffectGroupRef(record)

    def get_effect_occurrences(self, record: RecordRef) -> list[EffectRef]:
        return [
            EffectRef(record, slot_index)
            for slot_index in range(len(self._record(record).effects))
        ]

    def read_effect_fields(self, occurrence: EffectRef) -> EffectData:
        effects = self._record(occurrence.record).effects
        try:
            return effects[occurrence.slot_index]
        except IndexError:
            raise RecordStoreError(f"Unknown effect handle: {occurrence}") from None

    def read_group_fields(self, group: EffectGroupRef) -> list[EffectData]:
        return list(self._record(group.record).effects)

    def record_name(self, record: RecordRef) -> str:
        return self._record(record).label

    def record_form_id(self, record: RecordRef) -> str:
        return record.form_id

    # ── Writes ──

    def _patched_copy(self, record: RecordRef) -> IngredientRecord:
        if record.form_id not in self._patched:
            self._patched[record.form_id] = self._record(record).model_copy(deep=True)
        return self._patched[record.form_id]

    def write_effect_slot(
        self, record: RecordRef, slot_index: int, occurrence: EffectRef
    ) -> None:
        patched = self._patched_copy(record)
        if not 0 <= slot_index < len(patched.effects):
            raise RecordStoreError(
                f"Slot {slot_index} out of range for {record.form_id}"
            )
        source = self.read_effect_fields(occurrence)
        patched.effects[slot_index] = source.model_copy()

    def write_effect_group(self, record: RecordRef, group: EffectGroupRef) -> None:
        patched = self._patched_copy(record)
        patched.effects = [e.model_copy() for e in self.read_group_fields(group)]

    def set_output_flag(self, name: str, value: bool) -> None:
        self.flags[name] = value

    # ── Patch output ──

    def patched_records(self) -> list[IngredientRecord]:
        """Patched copies, in the order they were first written."""
        return list(self._patched.values())

    def build_patch(self) -> PatchFile:
        """Assemble the patch plugin from the patched records."""
        return PatchFile(
            file_name=self.patch_file_name,
            flags=dict(self.flags),
            masters=[plugin.plugin for plugin in self.plugins],
            ingredients=self.patched_records(),
        )

    def save_patch(self, path: Path | str) -> PatchFile:
        """Write the patch plugin to a YAML file."""
        patch = self.build_patch()
        patch.to_yaml(path)
        logger.info("Wrote %d patched ingredients to %s", len(patch.ingredients), path)
        return patch
