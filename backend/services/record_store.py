import json
import logging
import threading

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from backend.config import settings
from backend.errors import PersistenceError, RecordNotFoundError
from backend.schemas.record import MedicalRecord, PatientProfile
from backend.seed.record_seed import default_profile, seed_records
from backend.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

_records_adapter = TypeAdapter(list[MedicalRecord])


class RecordStore:
    """The single owner of the record collection and the patient profile.

    Every accepted mutation is applied in memory first and then written to the
    key-value store. A failed write raises ``PersistenceError`` but leaves the
    in-memory change in place.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        records_key: str | None = None,
        profile_key: str | None = None,
    ):
        self._kv = kv
        self._records_key = records_key or settings.records_storage_key
        self._profile_key = profile_key or settings.profile_storage_key
        self._lock = threading.RLock()
        self._records: list[MedicalRecord] = seed_records()
        self._profile: PatientProfile = default_profile()

    @property
    def records(self) -> list[MedicalRecord]:
        with self._lock:
            return [record.model_copy(deep=True) for record in self._records]

    @property
    def profile(self) -> PatientProfile:
        with self._lock:
            return self._profile.model_copy(deep=True)

    def get(self, record_id: str) -> MedicalRecord:
        with self._lock:
            for record in self._records:
                if record.id == record_id:
                    return record.model_copy(deep=True)
        raise RecordNotFoundError(record_id)

    def load(self) -> None:
        """Read persisted state, falling back to the seed data and default profile."""
        records = self._read(self._records_key, _records_adapter.validate_python)
        profile = self._read(self._profile_key, PatientProfile.model_validate)
        with self._lock:
            self._records = records if records is not None else seed_records()
            self._profile = profile if profile is not None else default_profile()
        logger.info("Loaded %d records for %s", len(self._records), self._profile.name)

    def _read(self, key: str, validate):
        try:
            raw = self._kv.get(key)
        except PersistenceError as exc:
            logger.warning("Falling back to defaults for '%s': %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return validate(json.loads(raw))
        except (json.JSONDecodeError, SchemaError) as exc:
            logger.warning("Ignoring malformed data stored under '%s': %s", key, exc)
            return None

    def upsert(self, record: MedicalRecord) -> list[MedicalRecord]:
        with self._lock:
            for index, existing in enumerate(self._records):
                if existing.id == record.id:
                    self._records[index] = record
                    break
            else:
                self._records.append(record)
            snapshot = self.records
            self._write_records()
        return snapshot

    def delete(self, record_id: str) -> list[MedicalRecord]:
        with self._lock:
            remaining = [record for record in self._records if record.id != record_id]
            if len(remaining) == len(self._records):
                return self.records
            self._records = remaining
            snapshot = self.records
            self._write_records()
        return snapshot

    def set_profile(self, profile: PatientProfile) -> PatientProfile:
        with self._lock:
            self._profile = profile
            self._kv.set(self._profile_key, profile.model_dump_json())
            return self.profile

    def _write_records(self) -> None:
        payload = _records_adapter.dump_json(self._records).decode("utf-8")
        self._kv.set(self._records_key, payload)
