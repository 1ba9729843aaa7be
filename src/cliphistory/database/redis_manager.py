import logging
from typing import Dict, List, Optional

import redis

from cliphistory.database.base import HistoryBackend, Record
from cliphistory.errors import HistoryLoadError, HistoryStorageError

logger = logging.getLogger(__name__)


class RedisHistoryBackend(HistoryBackend):
    """History kept in Redis.

    ``<prefix>:entries`` is a list of entry ids, newest first, and every
    entry lives in its own ``<prefix>:entry:<id>`` hash. The last copied
    marker is the ``<prefix>:last_copied`` hash.
    """

    name = "redis"

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, key_prefix: str = "cliphistory",
                 ssl: bool = False, client: Optional[redis.Redis] = None):
        self.client = client or redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password,
            ssl=ssl,
            decode_responses=True
        )
        self.key_prefix = key_prefix

    @property
    def list_key(self) -> str:
        return f"{self.key_prefix}:entries"

    @property
    def copied_key(self) -> str:
        return f"{self.key_prefix}:last_copied"

    def entry_key(self, entry_id: str) -> str:
        return f"{self.key_prefix}:entry:{entry_id}"

    def load(self) -> List[Record]:
        try:
            entry_ids = self.client.lrange(self.list_key, 0, -1)
            records = []
            for entry_id in entry_ids:
                data = self.client.hgetall(self.entry_key(entry_id))
                if not data:
                    logger.warning(f"History entry {entry_id} is listed but missing")
                    continue
                records.append(self._from_hash(data))
            return records
        except redis.RedisError as exc:
            raise HistoryLoadError(f"could not read history from Redis: {exc}") from exc

    def prepend(self, record: Record, max_entries: int) -> None:
        entry_id = record["id"]
        try:
            pipe = self.client.pipeline()
            pipe.hset(self.entry_key(entry_id), mapping=self._to_hash(record))
            pipe.lpush(self.list_key, entry_id)
            pipe.execute()

            evicted = self.client.lrange(self.list_key, max_entries, -1)
            if evicted:
                pipe = self.client.pipeline()
                pipe.ltrim(self.list_key, 0, max_entries - 1)
                for old_id in evicted:
                    pipe.delete(self.entry_key(old_id))
                pipe.execute()
        except redis.RedisError as exc:
            raise HistoryStorageError(f"could not store entry {entry_id}: {exc}") from exc

    def clear(self) -> None:
        try:
            entry_ids = self.client.lrange(self.list_key, 0, -1)
            for entry_id in entry_ids:
                self.client.delete(self.entry_key(entry_id))
            self.client.delete(self.list_key)
            self.client.delete(self.copied_key)
        except redis.RedisError as exc:
            raise HistoryStorageError(f"could not clear history: {exc}") from exc

    def mark_copied(self, marker: Record) -> None:
        try:
            pipe = self.client.pipeline()
            pipe.delete(self.copied_key)
            pipe.hset(self.copied_key, mapping=self._to_hash(marker))
            pipe.execute()
        except redis.RedisError as exc:
            raise HistoryStorageError(f"could not store the copy marker: {exc}") from exc

    def last_copied(self) -> Optional[Record]:
        try:
            data = self.client.hgetall(self.copied_key)
        except redis.RedisError as exc:
            raise HistoryLoadError(f"could not read the copy marker: {exc}") from exc
        return dict(data) if data else None

    def clear_copied(self) -> None:
        try:
            self.client.delete(self.copied_key)
        except redis.RedisError as exc:
            raise HistoryStorageError(f"could not clear the copy marker: {exc}") from exc

    def close(self):
        self.client.close()

    @staticmethod
    def _to_hash(record: Record) -> Dict[str, str]:
        # redis hashes hold flat strings, so an absent mime is stored as ""
        return {key: "" if value is None else str(value) for key, value in record.items()}

    @staticmethod
    def _from_hash(data: Dict[str, str]) -> Record:
        record: Record = dict(data)
        if not record.get("mime"):
            record.pop("mime", None)
        return record
