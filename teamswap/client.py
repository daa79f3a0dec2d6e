"""
TeamSwap API 클라이언트.

소비자(화면) 측에서 사용하는 httpx 기반 클라이언트입니다.
    - IdentityStore: 회원가입/로그인/로그아웃, 현재 사용자, 로그인 상태 변경 구독
    - ViewState: 뷰별 요청 세대(generation) 가드. 늦게 도착한 이전 요청 결과나
      더 낮은 state_version 의 스냅샷은 적용하지 않는다.
    - TeamSwapClient: REST API 래퍼. 4xx/5xx 응답은 TeamSwapError 로 올린다.
      watch_notifications 는 알림 스트림을 따라가며 푸시가 올 때마다 목록을 다시 조회한다.

http 인자로 httpx.Client 호환 객체(예: fastapi.testclient.TestClient)를 주입할 수 있다.
"""

import json
import logging
import threading
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

SNAPSHOT_VIEW = "snapshot"
NOTIFICATIONS_VIEW = "notifications"

IdentityListener = Callable[[Optional[Dict[str, Any]]], None]


class TeamSwapError(Exception):
    def __init__(self, status_code: int, detail: Any):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


def _unwrap(response: httpx.Response) -> Any:
    if response.status_code >= 400:
        try:
            body = response.json()
        except ValueError:
            body = response.text
        detail = body.get("detail") if isinstance(body, dict) else body
        raise TeamSwapError(response.status_code, detail)
    if not response.content:
        return None
    return response.json()


def _iter_events(lines: Iterable[str]) -> Iterator[Tuple[str, str]]:
    """text/event-stream 줄을 (event, data) 쌍으로 묶는다. 주석(':') 줄은 건너뛴다."""
    event_name, data = "message", []
    for line in lines:
        line = line.rstrip("\r\n")
        if not line:
            if data:
                yield event_name, "\n".join(data)
            event_name, data = "message", []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        value = value[1:] if value.startswith(" ") else value
        if field == "event":
            event_name = value
        elif field == "data":
            data.append(value)
    if data:
        yield event_name, "\n".join(data)


class IdentityStore:
    """로그인 상태를 보관하고 변경 시 리스너에게 현재 identity(또는 None)를 전달한다."""

    def __init__(self, http: httpx.Client):
        self._http = http
        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._identity: Optional[Dict[str, Any]] = None
        self._listeners: List[IdentityListener] = []

    @property
    def token(self) -> Optional[str]:
        return self._token

    def auth_headers(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def current_identity(self) -> Optional[Dict[str, Any]]:
        return self._identity

    def on_change(self, listener: IdentityListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _set(self, token: Optional[str], identity: Optional[Dict[str, Any]]):
        with self._lock:
            self._token = token
            self._identity = identity
            listeners = list(self._listeners)
        for listener in listeners:
            listener(identity)

    def sign_up(self, email: str, password: str, username: str, full_name: Optional[str] = None) -> Dict[str, Any]:
        body = {"email": email, "password": password, "username": username, "full_name": full_name}
        data = _unwrap(self._http.post("/api/auth/signup", json=body))
        self._set(data["access_token"], data["user"])
        logger.info("[client] signed up user_id=%s", data["user"]["user_id"])
        return data["user"]

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        data = _unwrap(self._http.post("/api/auth/login", json={"email": email, "password": password}))
        self._set(data["access_token"], data["user"])
        logger.info("[client] signed in user_id=%s", data["user"]["user_id"])
        return data["user"]

    def sign_out(self):
        if self._token is None:
            return
        headers = self.auth_headers()
        try:
            _unwrap(self._http.post("/api/auth/logout", headers=headers))
        finally:
            # 서버 응답과 무관하게 로컬 세션은 종료한다.
            self._set(None, None)


class ViewState:
    """뷰 키별 최신 요청 세대와 적용된 값을 보관한다."""

    def __init__(self):
        self._lock = threading.Lock()
        self._generations: Dict[str, int] = {}
        self._values: Dict[str, Any] = {}
        self._versions: Dict[str, int] = {}

    def begin(self, key: str) -> int:
        with self._lock:
            token = self._generations.get(key, 0) + 1
            self._generations[key] = token
            return token

    def apply(self, key: str, token: int, value: Any) -> bool:
        """Store ``value`` only if ``token`` is the latest generation for ``key``.

        Values carrying a ``state_version`` older than the one already held are dropped too.
        """
        with self._lock:
            if token != self._generations.get(key):
                return False
            version = value.get("state_version") if isinstance(value, dict) else None
            if version is not None:
                if version < self._versions.get(key, -1):
                    return False
                self._versions[key] = version
            self._values[key] = value
            return True

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def invalidate(self, key: Optional[str] = None):
        """Drop held values and make in-flight requests stale."""
        with self._lock:
            keys = [key] if key is not None else list(set(self._generations) | set(self._values))
            for k in keys:
                self._generations[k] = self._generations.get(k, 0) + 1
                self._values.pop(k, None)
                self._versions.pop(k, None)


class TeamSwapClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.identity = IdentityStore(self.http)
        self.view = ViewState()
        # 사용자 전환 시 이전 사용자 기준으로 조회 중이던 결과는 버린다.
        self._unsubscribe_identity = self.identity.on_change(lambda _identity: self.view.invalidate())

    def close(self):
        self._unsubscribe_identity()
        self.http.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(self.identity.auth_headers())
        return _unwrap(self.http.request(method, path, headers=headers, **kwargs))

    def refresh(self, key: str, fetch: Callable[[], Any]) -> Any:
        """Fetch a view and apply it only if no newer request for ``key`` started meanwhile."""
        token = self.view.begin(key)
        value = fetch()
        if not self.view.apply(key, token, value):
            logger.debug("[client] dropped stale result for view=%s generation=%s", key, token)
        return self.view.get(key)

    # Profiles
    def my_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/api/profiles/me")

    def update_profile(self, **fields) -> Dict[str, Any]:
        return self._request("PUT", "/api/profiles/me", json=fields)

    def get_profile(self, user_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/profiles/{user_id}")

    def snapshot(self) -> Dict[str, Any]:
        return self._request("GET", "/api/profiles/me/snapshot")

    def refresh_snapshot(self) -> Optional[Dict[str, Any]]:
        return self.refresh(SNAPSHOT_VIEW, self.snapshot)

    # Projects
    def list_projects(self, search: Optional[str] = None, category: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {k: v for k, v in {"search": search, "category": category}.items() if v}
        return self._request("GET", "/api/projects", params=params)

    def discover_projects(self, search: Optional[str] = None, category: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {k: v for k, v in {"search": search, "category": category}.items() if v}
        return self._request("GET", "/api/projects/discover", params=params)

    def discover_project_stats(self, search: Optional[str] = None, category: Optional[str] = None) -> Dict[str, int]:
        params = {k: v for k, v in {"search": search, "category": category}.items() if v}
        return self._request("GET", "/api/projects/discover/stats", params=params)

    def categories(self) -> List[str]:
        return self._request("GET", "/api/projects/categories")

    def get_project(self, project_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/projects/{project_id}")

    def create_project(self, title: str, description: str, category: str, **fields) -> Dict[str, Any]:
        body = {"title": title, "description": description, "category": category, **fields}
        return self._request("POST", "/api/projects", json=body)

    def change_project_status(self, project_id: int, status: str) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/projects/{project_id}/status", json={"status": status})

    def members(self, project_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/projects/{project_id}/members")

    def leave_project(self, project_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/api/projects/{project_id}/leave")

    def remove_member(self, project_id: int, user_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/api/projects/{project_id}/members/{user_id}")

    # Applications
    def apply(
        self,
        project_id: int,
        message: Optional[str] = None,
        skills_offered: Optional[Iterable[str]] = None,
        **fields,
    ) -> Dict[str, Any]:
        body = {"message": message, "skills_offered": list(skills_offered or []), **fields}
        return self._request("POST", f"/api/projects/{project_id}/applications", json=body)

    def project_applications(self, project_id: int, status: Optional[str] = "pending") -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/projects/{project_id}/applications", params={"status": status or ""})

    def my_applications(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"status": status} if status else {}
        return self._request("GET", "/api/applications/me", params=params)

    def review_application(
        self,
        application_id: int,
        decision: str,
        review_message: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {"decision": decision, "review_message": review_message}
        return self._request("POST", f"/api/applications/{application_id}/review", json=body)

    def withdraw_application(self, application_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/api/applications/{application_id}/withdraw")

    # Skill swaps
    def list_swaps(
        self,
        search: Optional[str] = None,
        status: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {}
        if search:
            params["search"] = search
        if status:
            params["status"] = list(status)
        if limit:
            params["limit"] = limit
        return self._request("GET", "/api/skill-swaps", params=params)

    def discover_swaps(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"search": search} if search else {}
        return self._request("GET", "/api/skill-swaps/discover", params=params)

    def discover_swap_stats(self, search: Optional[str] = None) -> Dict[str, int]:
        params = {"search": search} if search else {}
        return self._request("GET", "/api/skill-swaps/discover/stats", params=params)

    def propose_swap(self, offered_skill: str, requested_skill: str, **fields) -> Dict[str, Any]:
        body = {"offered_skill": offered_skill, "requested_skill": requested_skill, **fields}
        return self._request("POST", "/api/skill-swaps", json=body)

    def respond_swap(self, swap_id: int, decision: str) -> Dict[str, Any]:
        if decision not in ("accept", "reject"):
            raise ValueError(f"unknown swap decision: {decision}")
        return self._request("POST", f"/api/skill-swaps/{swap_id}/{decision}")

    def complete_swap(self, swap_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/api/skill-swaps/{swap_id}/complete")

    def cancel_swap(self, swap_id: int) -> Dict[str, Any]:
        return self._request("POST", f"/api/skill-swaps/{swap_id}/cancel")

    def rate_swap(self, swap_id: int, rating: int, feedback: Optional[str] = None) -> Dict[str, Any]:
        return self._request("POST", f"/api/skill-swaps/{swap_id}/rate", json={"rating": rating, "feedback": feedback})

    # Notifications
    def notifications(self, limit: Optional[int] = None, unread_only: bool = False) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"unread_only": unread_only}
        if limit:
            params["limit"] = limit
        return self._request("GET", "/api/notifications", params=params)

    def unread_count(self) -> int:
        return self._request("GET", "/api/notifications/unread-count")["unread_count"]

    def mark_read(self, noti_id: int) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/notifications/{noti_id}/read")

    def mark_all_read(self) -> int:
        return self._request("POST", "/api/notifications/read-all")["updated"]

    def refresh_notifications(self) -> Optional[List[Dict[str, Any]]]:
        return self.refresh(NOTIFICATIONS_VIEW, self.notifications)

    def watch_notifications(
        self,
        on_change: Callable[[List[Dict[str, Any]], Dict[str, Any]], None],
        max_events: Optional[int] = None,
    ) -> int:
        """Follow ``/api/notifications/stream`` and re-fetch the list on every pushed notification.

        ``on_change(notifications, pushed_row)`` receives the refreshed list held by the view state.
        Blocks until the server closes the stream or ``max_events`` notifications were handled.
        """
        params = {"max_events": max_events} if max_events else {}
        received = 0
        with self.http.stream(
            "GET", "/api/notifications/stream", params=params, headers=self.identity.auth_headers(),
        ) as response:
            if response.status_code >= 400:
                response.read()
                _unwrap(response)
            for event_name, data in _iter_events(response.iter_lines()):
                if event_name != "notification":
                    continue
                received += 1
                on_change(self.refresh_notifications(), json.loads(data))
                if max_events and received >= max_events:
                    break
        logger.info("[client] notification stream closed after %s event(s)", received)
        return received
