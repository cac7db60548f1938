import asyncio
import json
import logging
from typing import Dict, List, Optional

import redis.asyncio as aioredis
from fastapi import Request
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncEngine

from linkforge.analytics import create_activity_log, simulate_click, simulate_scan
from linkforge.config import (ACTIVITIES_KEY, ACTIVITY_LOG_LIMIT, DARK_MODE_KEY, REDIS_URL,
                              STORAGE_BACKEND, URLS_KEY)
from linkforge.database import async_engine, async_session_maker, init_models
from linkforge.models import Blob
from linkforge.schemas import ActivityLogEntry, ActivityType, LinkRecord, QRCodeRecord

logger = logging.getLogger(__name__)

_links_adapter = TypeAdapter(List[LinkRecord])
_activities_adapter = TypeAdapter(List[ActivityLogEntry])


class MemoryBlobStore:
    def __init__(self):
        self.data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str):
        self.data[key] = value

    async def delete(self, key: str):
        self.data.pop(key, None)

    async def close(self):
        pass


class SqlBlobStore:
    def __init__(self, session_maker=async_session_maker, engine: Optional[AsyncEngine] = None):
        self.session_maker = session_maker
        self.engine = engine

    async def _find(self, db, key: str):
        result = await db.execute(select(Blob).filter(Blob.key == key))
        return result.scalar_one_or_none()

    async def get(self, key: str) -> Optional[str]:
        async with self.session_maker() as db:
            blob = await self._find(db, key)
            return blob.value if blob else None

    async def set(self, key: str, value: str):
        async with self.session_maker() as db:
            await db.merge(Blob(key=key, value=value))
            await db.commit()

    async def delete(self, key: str):
        async with self.session_maker() as db:
            blob = await self._find(db, key)
            if blob:
                await db.delete(blob)
                await db.commit()

    async def close(self):
        if self.engine is not None:
            await self.engine.dispose()


class RedisBlobStore:
    def __init__(self, client):
        self.client = client

    async def get(self, key: str) -> Optional[str]:
        value = await self.client.get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str):
        await self.client.set(key, value)

    async def delete(self, key: str):
        await self.client.delete(key)

    async def close(self):
        await self.client.close()


async def open_blob_store(backend: str = STORAGE_BACKEND):
    if backend == "memory":
        return MemoryBlobStore()
    if backend == "redis":
        client = await aioredis.from_url(REDIS_URL, encoding="utf-8", decode_responses=False)
        return RedisBlobStore(client)
    if backend != "sql":
        raise ValueError(f"Unknown storage backend: {backend}")
    await init_models()
    return SqlBlobStore(async_session_maker, async_engine)


def serialize_links(urls: List[LinkRecord]) -> str:
    return _links_adapter.dump_json(urls, by_alias=True).decode("utf-8")


def deserialize_links(raw: Optional[str]) -> List[LinkRecord]:
    if not raw:
        return []
    try:
        return _links_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning("Discarding malformed stored URLs: %s", e)
        return []


def serialize_activities(activities: List[ActivityLogEntry], limit: int = ACTIVITY_LOG_LIMIT) -> str:
    return _activities_adapter.dump_json(activities[:limit], by_alias=True).decode("utf-8")


def deserialize_activities(raw: Optional[str]) -> List[ActivityLogEntry]:
    if not raw:
        return []
    try:
        return _activities_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning("Discarding malformed stored activities: %s", e)
        return []


def deserialize_flag(raw: Optional[str]) -> bool:
    if not raw:
        return False
    try:
        return json.loads(raw) is True
    except ValueError:
        logger.warning("Discarding malformed stored flag: %r", raw)
        return False


class LinkStore:
    """In-memory link records, activity log and QR codes.

    The lists held here are authoritative. The blob store is a mirror that is
    rewritten after every state transition; a failed write is logged and
    the in-memory state is kept.
    """

    def __init__(self, blob_store, activity_log_limit: int = ACTIVITY_LOG_LIMIT):
        self.blob_store = blob_store
        self.activity_log_limit = activity_log_limit
        self.urls: List[LinkRecord] = []
        self.activities: List[ActivityLogEntry] = []
        self.qr_codes: List[QRCodeRecord] = []
        self.dark_mode = False
        self._save_lock = asyncio.Lock()

    async def load(self):
        try:
            self.urls = deserialize_links(await self.blob_store.get(URLS_KEY))
            self.activities = deserialize_activities(await self.blob_store.get(ACTIVITIES_KEY))
            self.dark_mode = deserialize_flag(await self.blob_store.get(DARK_MODE_KEY))
        except Exception:
            logger.exception("Failed to load stored data")
        logger.info("Loaded %d URLs and %d activities", len(self.urls), len(self.activities))

    async def save(self):
        # serialize under the lock so saves land in call order
        async with self._save_lock:
            try:
                await self.blob_store.set(URLS_KEY, serialize_links(self.urls))
                await self.blob_store.set(ACTIVITIES_KEY, serialize_activities(self.activities, self.activity_log_limit))
            except Exception:
                logger.exception("Failed to save URLs and activities")

    def _log(self, activity_type: ActivityType, details: str, url_id: Optional[str] = None) -> ActivityLogEntry:
        entry = create_activity_log(activity_type, details, url_id)
        self.activities.insert(0, entry)
        return entry

    def get_link(self, url_id: str) -> Optional[LinkRecord]:
        return next((u for u in self.urls if u.id == url_id), None)

    async def add_link(self, record: LinkRecord) -> LinkRecord:
        self.urls.insert(0, record)
        self._log(ActivityType.CREATED, f"Created short URL {record.short_url}", record.id)
        await self.save()
        return record

    async def delete_link(self, url_id: str) -> bool:
        record = self.get_link(url_id)
        if record is None:
            return False
        self.urls.remove(record)
        await self.save()
        logger.info("Link deleted: %s", record.short_code)
        return True

    async def record_click(self, url_id: str) -> Optional[LinkRecord]:
        record = self.get_link(url_id)
        if record is None:
            return None
        simulate_click(record)
        self._log(ActivityType.CLICKED, f"Clicked {record.short_url}", record.id)
        await self.save()
        return record

    async def record_scan(self, url_id: str) -> Optional[LinkRecord]:
        record = self.get_link(url_id)
        if record is None:
            return None
        simulate_scan(record)
        self._log(ActivityType.SCANNED, f"Scanned QR code for {record.short_url}", record.id)
        await self.save()
        return record

    def get_qr_code(self, qr_id: str) -> Optional[QRCodeRecord]:
        return next((q for q in self.qr_codes if q.id == qr_id), None)

    def add_qr_code(self, qr_code: QRCodeRecord) -> QRCodeRecord:
        self.qr_codes.insert(0, qr_code)
        logger.info("QR code added for: %s", qr_code.text)
        return qr_code

    async def record_qr_scan(self, qr_id: str) -> Optional[QRCodeRecord]:
        qr_code = self.get_qr_code(qr_id)
        if qr_code is None:
            return None
        qr_code.scan_count += 1
        record = self.get_link(qr_code.url_id) if qr_code.url_id else None
        if record is not None:
            simulate_scan(record)
            self._log(ActivityType.SCANNED, f"Scanned QR code for {record.short_url}", record.id)
        else:
            self._log(ActivityType.SCANNED, f"Scanned QR code for {qr_code.text}")
        await self.save()
        return qr_code

    async def set_dark_mode(self, enabled: bool) -> bool:
        self.dark_mode = enabled
        async with self._save_lock:
            try:
                await self.blob_store.set(DARK_MODE_KEY, json.dumps(enabled))
            except Exception:
                logger.exception("Failed to save display preference")
        return enabled

    async def clear(self):
        self.urls = []
        self.activities = []
        self.qr_codes = []
        async with self._save_lock:
            try:
                for key in (URLS_KEY, ACTIVITIES_KEY):
                    await self.blob_store.delete(key)
            except Exception:
                logger.exception("Failed to clear stored data")
        logger.info("All data cleared")


def get_store(request: Request) -> LinkStore:
    return request.app.state.store
