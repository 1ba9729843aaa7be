"""
Persistence backends for the clipboard history.
"""

import logging

from cliphistory.config import HistoryConfig
from cliphistory.database.base import HistoryBackend, Record
from cliphistory.database.json_store import JsonHistoryBackend
from cliphistory.database.memory import MemoryHistoryBackend

logger = logging.getLogger(__name__)


def create_history_backend(config: HistoryConfig) -> HistoryBackend:
    if config.backend == "redis":
        from cliphistory.database.redis_manager import RedisHistoryBackend
        logger.debug(f"Using Redis history at {config.redis.host}:{config.redis.port}/{config.redis.db}")
        return RedisHistoryBackend(
            host=config.redis.host,
            port=config.redis.port,
            db=config.redis.db,
            password=config.redis.password,
            key_prefix=config.redis.key_prefix,
            ssl=config.redis.ssl,
        )
    if config.backend == "memory":
        return MemoryHistoryBackend()
    return JsonHistoryBackend(config.data_dir)


__all__ = [
    'HistoryBackend',
    'JsonHistoryBackend',
    'MemoryHistoryBackend',
    'Record',
    'create_history_backend',
]
