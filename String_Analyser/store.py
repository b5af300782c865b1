import logging
import threading

from .exceptions import Conflict, InvalidInput, NotFound, TypeMismatch
from .models import StringRecord
from .utils import analyze_string, compute_sha256

logger = logging.getLogger(__name__)


class RecordStore:
    """
    In-memory collection of analyzed strings keyed by their SHA-256 fingerprint.

    Django may serve requests on several threads, so every operation holds
    the store lock for its whole check-then-write sequence.
    """

    def __init__(self):
        self._records = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._records)

    def __contains__(self, value):
        if not isinstance(value, str):
            return False
        with self._lock:
            return compute_sha256(value) in self._records

    def insert(self, value) -> StringRecord:
        if value is None:
            raise InvalidInput()
        if not isinstance(value, str):
            raise TypeMismatch()

        properties = analyze_string(value)
        with self._lock:
            if properties.sha256_hash in self._records:
                logger.debug("Rejected duplicate string id=%s", properties.sha256_hash)
                raise Conflict()
            record = StringRecord(value=value, properties=properties)
            self._records[record.id] = record

        logger.info("Stored string id=%s length=%s", record.id, properties.length)
        return record

    def get(self, value) -> StringRecord:
        key = self._key(value)
        with self._lock:
            record = self._records.get(key)
        if record is None:
            raise NotFound()
        return record

    def list_all(self):
        """Snapshot of every stored record, in insertion order."""
        with self._lock:
            return list(self._records.values())

    def delete(self, value):
        key = self._key(value)
        with self._lock:
            if key not in self._records:
                raise NotFound()
            del self._records[key]
        logger.info("Deleted string id=%s", key)

    @staticmethod
    def _key(value):
        if not isinstance(value, str):
            raise NotFound()
        return compute_sha256(value)
