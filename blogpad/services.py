from __future__ import annotations
from datetime import UTC, datetime
from typing import Callable, Optional
import logging

from pydantic import TypeAdapter, ValidationError

from . import config
from .db import BlobStorage, SqliteBlobStorage
from .errors import PersistError
from .models import Blog

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_BLOG_LIST = TypeAdapter(list[Blog])
# placeholder for invalid dates; the flag in _recency_key puts them last
_OLDEST = datetime.min.replace(tzinfo=UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC)

def _recency_key(blog: Blog) -> tuple[bool, datetime]:
    return (blog.updated_at is not None, blog.updated_at or _OLDEST)


class BlogStore:
    """
    Owns every blog entry and mirrors the whole collection into one blob.

    - the blob is read once, at construction; a missing or corrupt blob
      yields an empty store
    - create/update/delete rewrite the full blob before returning; if that
      write fails the in-memory change is undone and PersistError is raised
    - unknown ids are never an error: get/update return None, delete is a no-op
    """

    def __init__(
        self,
        storage: BlobStorage,
        key: Optional[str] = None,
        clock: Clock = _utcnow,
    ) -> None:
        self._storage = storage
        self._key = key or config.blob_key()
        self._clock = clock
        self._blogs: list[Blog] = []
        self._last_id = 0
        self.load()

    @property
    def blogs(self) -> list[Blog]:
        return list(self._blogs)

    def __len__(self) -> int:
        return len(self._blogs)

    # ---------- persistence ----------
    def load(self) -> None:
        raw = self._storage.read(self._key)
        self._blogs = []
        if raw is None:
            logger.info("No blob stored under '%s'; starting empty", self._key)
            return
        try:
            blogs = _BLOG_LIST.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding unreadable blob '%s' (%d errors); starting empty",
                self._key, exc.error_count(),
            )
            return

        seen: set[int] = set()
        for blog in blogs:
            if blog.id in seen:
                logger.warning("Dropping duplicate blog id %d from '%s'", blog.id, self._key)
                continue
            seen.add(blog.id)
            self._blogs.append(blog)
        self._last_id = max(seen, default=0)
        logger.info("Loaded %d blogs from '%s'", len(self._blogs), self._key)

    def persist(self) -> None:
        try:
            payload = _BLOG_LIST.dump_json(self._blogs, by_alias=True).decode("utf-8")
            self._storage.write(self._key, payload)
        except Exception as exc:
            raise PersistError(f"Could not save blogs to '{self._key}': {exc}") from exc
        logger.debug("Persisted %d blogs to '%s'", len(self._blogs), self._key)

    def _commit(self, undo: Callable[[], None]) -> None:
        try:
            self.persist()
        except PersistError:
            undo()
            raise

    def _next_id(self, now: datetime) -> int:
        # millisecond timestamp, bumped when two entries land in the same ms
        self._last_id = max(int(now.timestamp() * 1000), self._last_id + 1)
        return self._last_id

    # ---------- mutations ----------
    def create(self, title: str, content: str, tags_text: str = "") -> Blog:
        now = self._clock()
        blog = Blog.create(self._next_id(now), title, content, tags_text, now=now)
        self._blogs.append(blog)

        def undo() -> None:
            self._blogs.remove(blog)

        self._commit(undo)
        logger.info("Created blog %d '%s'", blog.id, blog.title)
        return blog

    def update(self, id: int, title: str, content: str, tags_text: str = "") -> Optional[Blog]:
        """Rewrite an entry in place. Unknown ids are ignored and return None."""
        blog = self.get(id)
        if blog is None:
            logger.debug("Update ignored: no blog %s", id)
            return None
        before = blog.model_copy()
        blog.update(title, content, tags_text, now=self._clock())

        def undo() -> None:
            blog.title = before.title
            blog.content = before.content
            blog.tags = before.tags
            blog.updated_at = before.updated_at

        self._commit(undo)
        logger.info("Updated blog %d", blog.id)
        return blog

    def delete(self, id: int) -> bool:
        """Remove an entry; returns whether anything was removed. Always persists."""
        before = self._blogs
        self._blogs = [b for b in before if b.id != id]

        def undo() -> None:
            self._blogs = before

        self._commit(undo)
        removed = len(self._blogs) != len(before)
        if removed:
            logger.info("Deleted blog %s", id)
        return removed

    # ---------- queries ----------
    def get(self, id: int) -> Optional[Blog]:
        return next((b for b in self._blogs if b.id == id), None)

    def sort_by_recency(self) -> None:
        """Most recently updated first. The sort is stable, so ties keep their order."""
        self._blogs.sort(key=_recency_key, reverse=True)

    def filter_by_tag(self, tag: Optional[str] = None) -> list[Blog]:
        """Entries carrying exactly ``tag`` (case-sensitive); everything if tag is empty."""
        if not tag:
            return list(self._blogs)
        return [b for b in self._blogs if tag in b.tags]

    def all_tags(self) -> list[str]:
        return sorted({t for b in self._blogs for t in b.tags})


def open_store(clock: Clock = _utcnow) -> BlogStore:
    """Store backed by the configured SQLite database."""
    return BlogStore(SqliteBlobStorage(), clock=clock)
