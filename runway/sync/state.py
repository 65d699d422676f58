# Runway Sync State
# Persistent asset records per target, split into durable and local stores

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

import yaml

from runway.exceptions import CorruptStateError
from runway.utils.paths import atomic_write

logger = logging.getLogger(__name__)

STATE_VERSION = 1
DURABLE_STATE_FILENAME = "runway.lock.yaml"
LOCAL_STATE_DIRNAME = ".runway"
LOCAL_STATE_FILENAME = "state.yaml"


def utc_now() -> str:
    """Current time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass
class AssetRecord:
    """Result of the last successful sync of one asset to one target.

    ``hash`` always describes exactly the bytes that produced ``id``.
    """

    hash: str
    id: Optional[str] = None
    local_path: Optional[str] = None
    synced_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssetRecord":
        """Create from dictionary."""
        if not isinstance(data, dict) or not isinstance(data.get("hash"), str):
            raise ValueError(f"invalid asset record: {data!r}")
        return cls(
            hash=data["hash"],
            id=None if data.get("id") is None else str(data["id"]),
            local_path=data.get("local_path"),
            synced_at=data.get("synced_at"),
        )


@dataclass
class PendingUpload:
    """Marker for a dispatch that started but whose outcome is not yet recorded."""

    hash: str
    started_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PendingUpload":
        """Create from dictionary."""
        if not isinstance(data, dict) or not isinstance(data.get("hash"), str):
            raise ValueError(f"invalid pending marker: {data!r}")
        return cls(hash=data["hash"], started_at=data.get("started_at"))


@dataclass
class RecordSet:
    """
    All asset records of one target.

    Owned by a single sync pass; not thread-safe.
    """

    records: dict[str, AssetRecord] = field(default_factory=dict)

    def get(self, identity: str) -> Optional[AssetRecord]:
        """Get the record for an asset."""
        return self.records.get(identity)

    def upsert(self, identity: str, record: AssetRecord) -> AssetRecord:
        """Insert or replace the record for an asset."""
        self.records[identity] = record
        return record

    def remove(self, identity: str) -> bool:
        """Remove an asset's record."""
        if identity in self.records:
            del self.records[identity]
            return True
        return False

    def prune(self, keep: Iterable[str]) -> list[str]:
        """Remove every record whose identity is not in ``keep``.

        Returns:
            Sorted list of removed identities.
        """
        keep_set = set(keep)
        removed = sorted(identity for identity in self.records if identity not in keep_set)
        for identity in removed:
            del self.records[identity]
        return removed

    def identities(self) -> list[str]:
        """Sorted list of identities with a record."""
        return sorted(self.records)

    def __contains__(self, identity: object) -> bool:
        return identity in self.records

    def __iter__(self) -> Iterator[str]:
        return iter(self.identities())

    def __len__(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization, sorted by identity."""
        return {identity: self.records[identity].to_dict() for identity in self.identities()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordSet":
        """Create from dictionary."""
        return cls(records={str(identity): AssetRecord.from_dict(item) for identity, item in data.items()})


class StateStore:
    """
    Manages one state file.

    The file holds one section per target key, so several targets can share a
    store. Only the section being written is replaced on persist.
    """

    def __init__(self, path: Path, *, label: str = "state"):
        """
        Initialize state store.

        Args:
            path: Path to the YAML state file.
            label: Human-readable name used in log messages.
        """
        self.path = path
        self.label = label
        self.warnings: list[str] = []

    def _read_document(self) -> dict[str, Any]:
        """Read the raw document, raising CorruptStateError if unusable."""
        if not self.path.exists():
            return {"version": STATE_VERSION, "targets": {}}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise CorruptStateError(self.path, f"invalid YAML ({e})") from e

        if data is None:
            return {"version": STATE_VERSION, "targets": {}}

        if not isinstance(data, dict) or not isinstance(data.get("targets", {}), dict):
            raise CorruptStateError(self.path, "expected a mapping with a 'targets' section")

        data.setdefault("version", STATE_VERSION)
        data.setdefault("targets", {})
        return data

    def _read_document_or_empty(self) -> dict[str, Any]:
        try:
            return self._read_document()
        except CorruptStateError as e:
            self._warn(f"{e}; starting from empty {self.label}")
            return {"version": STATE_VERSION, "targets": {}}

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def _section(self, document: dict[str, Any], target_key: str, name: str) -> dict[str, Any]:
        target = document["targets"].get(target_key) or {}
        if not isinstance(target, dict):
            raise CorruptStateError(self.path, f"target '{target_key}' is not a mapping")
        section = target.get(name) or {}
        if not isinstance(section, dict):
            raise CorruptStateError(self.path, f"'{target_key}.{name}' is not a mapping")
        return section

    def load(self, target_key: str) -> RecordSet:
        """
        Load the record set of a target.

        Unparseable data is treated as empty and reported as a warning.
        """
        try:
            section = self._section(self._read_document(), target_key, "assets")
            records = RecordSet.from_dict(section)
        except (CorruptStateError, ValueError) as e:
            self._warn(f"{e}; treating {self.label} for target '{target_key}' as empty")
            return RecordSet()

        logger.debug(f"Loaded {len(records)} records for '{target_key}' from {self.path}")
        return records

    def persist(self, target_key: str, records: RecordSet) -> None:
        """Atomically write the record set of a target, keeping other sections."""
        document = self._read_document_or_empty()
        target = document["targets"].get(target_key)
        if not isinstance(target, dict):
            target = {}
        target["assets"] = records.to_dict()
        document["targets"][target_key] = target
        self._write_document(document)
        logger.debug(f"Saved {len(records)} records for '{target_key}' to {self.path}")

    def load_pending(self, target_key: str) -> dict[str, PendingUpload]:
        """Load in-progress markers left by an earlier pass."""
        try:
            section = self._section(self._read_document(), target_key, "pending")
            return {str(identity): PendingUpload.from_dict(item) for identity, item in section.items()}
        except (CorruptStateError, ValueError) as e:
            self._warn(f"{e}; ignoring pending uploads for target '{target_key}'")
            return {}

    def persist_pending(self, target_key: str, pending: dict[str, PendingUpload]) -> None:
        """Atomically write in-progress markers of a target."""
        document = self._read_document_or_empty()
        target = document["targets"].get(target_key)
        if not isinstance(target, dict):
            target = {}

        if pending:
            target["pending"] = {identity: pending[identity].to_dict() for identity in sorted(pending)}
        else:
            target.pop("pending", None)

        if target:
            document["targets"][target_key] = target
        else:
            document["targets"].pop(target_key, None)

        if document["targets"] or self.path.exists():
            self._write_document(document)

    def clear(self, target_key: str) -> bool:
        """Remove every record and marker of a target."""
        document = self._read_document_or_empty()
        if target_key not in document["targets"]:
            return False
        del document["targets"][target_key]
        self._write_document(document)
        return True

    def _write_document(self, document: dict[str, Any]) -> None:
        ordered = {
            "version": document.get("version", STATE_VERSION),
            "targets": {key: _ordered_target(document["targets"][key]) for key in sorted(document["targets"])},
        }
        content = yaml.safe_dump(ordered, default_flow_style=False, sort_keys=False, allow_unicode=True)
        atomic_write(self.path, content)


def _ordered_target(target: dict[str, Any]) -> dict[str, Any]:
    return {name: target[name] for name in ("assets", "pending") if name in target} | {
        name: value for name, value in sorted(target.items()) if name not in ("assets", "pending")
    }


def open_stores(root: Path) -> tuple[StateStore, StateStore]:
    """
    Open the two state stores of a project.

    Returns:
        Tuple of (durable store, local store). The durable store holds cloud
        records and is meant for version control; the local store holds local
        cache records and in-progress markers.
    """
    durable = StateStore(root / DURABLE_STATE_FILENAME, label="durable state")
    local = StateStore(root / LOCAL_STATE_DIRNAME / LOCAL_STATE_FILENAME, label="local state")
    return durable, local
