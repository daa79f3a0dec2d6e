"""
Data Access Gateway.

이름 붙은 컬렉션(profiles, projects, project_members, project_applications,
skill_swaps, notifications)에 대한 read/insert/update/count 와, 행 단위 변경 이벤트
구독(subscribe) 을 제공합니다.

쓰기 함수는 flush 까지만 수행하며 commit 은 호출한 서비스의 트랜잭션이 결정한다.
변경 이벤트는 commit 이 끝난 뒤에만 발행되므로 롤백된 행은 구독자에게 전달되지 않는다.
"""

import asyncio
import logging
import queue
import threading
from typing import Any, Dict, List, Optional

from sqlalchemy import event
from sqlalchemy.orm import Session

from teamswap.models.application import ProjectApplication
from teamswap.models.notification import Notification
from teamswap.models.project import Project, ProjectMember
from teamswap.models.skill_swap import SkillSwap
from teamswap.models.user import Profile

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "profiles": Profile,
    "projects": Project,
    "project_members": ProjectMember,
    "project_applications": ProjectApplication,
    "skill_swaps": SkillSwap,
    "notifications": Notification,
}

EVENT_INSERT = "INSERT"
EVENT_UPDATE = "UPDATE"

# 변경 이벤트로 발행할 컬럼 (flush 직후 값이 확정된 것만)
_FEED_COLUMNS = {
    "notifications": ("noti_id", "user_id", "noti_type", "related_id"),
}


class UnknownCollectionError(KeyError):
    pass


def _model_for(collection: str):
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise UnknownCollectionError(collection)


class DataGateway:
    def __init__(self, db: Session):
        self.db = db

    def _query(self, collection: str, filters: Optional[Dict[str, Any]] = None):
        model = _model_for(collection)
        q = self.db.query(model)
        for name, value in (filters or {}).items():
            column = getattr(model, name)
            if value is None:
                q = q.filter(column.is_(None))
            elif isinstance(value, (list, tuple, set, frozenset)):
                q = q.filter(column.in_(list(value)))
            else:
                q = q.filter(column == value)
        return q

    def read(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Any]:
        q = self._query(collection, filters)
        if order_by:
            column = getattr(_model_for(collection), order_by)
            q = q.order_by(column.desc() if descending else column.asc())
        if limit:
            q = q.limit(limit)
        return q.all()

    def first(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        return self._query(collection, filters).first()

    def insert(self, collection: str, values: Dict[str, Any]) -> Any:
        row = _model_for(collection)(**values)
        self.db.add(row)
        self.db.flush()
        return row

    def update(self, collection: str, filters: Dict[str, Any], patch: Dict[str, Any]) -> int:
        """Apply ``patch`` to every row matching ``filters``; return the affected row count.

        The filter is evaluated by the store together with the write, so callers can use it
        as a compare-and-set: a zero count means the expected state no longer holds.
        """
        if not filters:
            raise ValueError("update requires at least one filter")
        self.db.flush()
        affected = self._query(collection, filters).update(patch, synchronize_session=False)
        if affected:
            self.db.expire_all()
        return affected

    def count(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int:
        return self._query(collection, filters).count()


class Subscription:
    """변경 이벤트 구독.

    loop 없이 만들면 스레드 안전한 queue.Queue 에 쌓이고 ``get`` 으로 꺼낸다.
    loop 를 주면 asyncio.Queue 에 쌓이며 ``next`` 로 기다린다. 발행은 commit 한
    스레드에서 일어나므로 loop 쪽 전달은 call_soon_threadsafe 로 넘긴다.
    """

    def __init__(
        self,
        feed: "ChangeFeed",
        collection: str,
        filters: Dict[str, Any],
        event_name: str,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._feed = feed
        self._loop = loop
        self._queue = asyncio.Queue() if loop is not None else queue.Queue()
        self.collection = collection
        self.filters = dict(filters)
        self.event = event_name
        self.closed = False

    def matches(self, collection: str, event_name: str, row: Dict[str, Any]) -> bool:
        if self.closed or collection != self.collection or event_name != self.event:
            return False
        return all(row.get(k) == v for k, v in self.filters.items())

    def deliver(self, payload: Dict[str, Any]):
        if self._loop is None:
            self._queue.put(payload)
            return
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, payload)
        except RuntimeError:
            # 구독한 이벤트 루프가 이미 닫혔다.
            logger.info("[gateway] dropping subscription on closed loop collection=%s", self.collection)
            self.cancel()

    def get(self, timeout: Optional[float] = None) -> Optional[Dict[str, Any]]:
        if self._loop is not None:
            raise RuntimeError("loop-bound subscription; use 'await next()'")
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    async def next(self, timeout: Optional[float] = None) -> Optional[Dict[str, Any]]:
        if self._loop is None:
            raise RuntimeError("thread subscription; use get()")
        try:
            return await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def cancel(self):
        if self.closed:
            return
        self.closed = True
        self._feed.remove(self)


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []

    def subscribe(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        event_name: str = EVENT_INSERT,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> Subscription:
        _model_for(collection)
        sub = Subscription(self, collection, filters or {}, event_name, loop=loop)
        with self._lock:
            self._subscriptions.append(sub)
        return sub

    def remove(self, sub: Subscription):
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, collection: str, event_name: str, row: Dict[str, Any]) -> int:
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(collection, event_name, row)]
        payload = {"collection": collection, "event": event_name, "row": dict(row)}
        for sub in targets:
            sub.deliver(payload)
        return len(targets)


change_feed = ChangeFeed()

_PENDING_KEY = "teamswap_pending_changes"


@event.listens_for(Session, "after_flush")
def _collect_inserts(session, flush_context):
    for obj in session.new:
        for collection, columns in _FEED_COLUMNS.items():
            if isinstance(obj, COLLECTIONS[collection]):
                row = {name: getattr(obj, name) for name in columns}
                session.info.setdefault(_PENDING_KEY, []).append((collection, EVENT_INSERT, row))


@event.listens_for(Session, "after_commit")
def _publish_committed(session):
    for collection, event_name, row in session.info.pop(_PENDING_KEY, []):
        change_feed.publish(collection, event_name, row)


@event.listens_for(Session, "after_rollback")
def _discard_rolled_back(session):
    dropped = session.info.pop(_PENDING_KEY, [])
    if dropped:
        logger.info("[gateway] discarded %d change event(s) after rollback", len(dropped))
