"""用药提醒远端存储：提醒定义与服药记录的读写。

远端为 HTTP JSON 服务，路径前缀 /medicine-reminders：
    GET    /user/{owner_id}?active_only=     提醒列表
    GET    /logs/user/{owner_id}?from=&to=   服药记录
    POST   /                                 新建提醒，返回 id
    PUT    /{id}                             修改提醒
    DELETE /{id}                             删除（服务端标记为无效）
    POST   /log-intake                       记录一次已服用
响应可能直接是数据，也可能包在 {"data": ...} 里。
"""
import json
import sys
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from health_tracker.config import API_BASE_URL, API_TOKEN, REQUEST_TIMEOUT
from health_tracker.medication.errors import (
    ConflictOnWrite,
    FieldError,
    TransientFetchError,
    ValidationError,
)
from health_tracker.medication.models import DateWindow, IntakeLog, ReminderDefinition

PREFIX = "/medicine-reminders"
_ID_FIELDS = ("id", "owner_id", "reminder_id")


def _log(msg: str) -> None:
    print(f"[用药提醒-接口] {msg}", file=sys.stderr, flush=True)


class ReminderStore(ABC):
    """远端存储边界。HttpReminderStore 为默认实现，测试中可替换。"""

    @abstractmethod
    def fetch_reminders(self, owner_id: str, active_only: bool = True) -> List[ReminderDefinition]:
        raise NotImplementedError

    @abstractmethod
    def fetch_logs(self, owner_id: str, window: DateWindow) -> List[IntakeLog]:
        raise NotImplementedError

    @abstractmethod
    def create_reminder(self, definition: ReminderDefinition) -> str:
        raise NotImplementedError

    @abstractmethod
    def update_reminder(self, reminder_id: str, definition: ReminderDefinition) -> str:
        raise NotImplementedError

    @abstractmethod
    def delete_reminder(self, reminder_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def log_intake(self, log: IntakeLog) -> IntakeLog:
        raise NotImplementedError


def _unwrap(data: Any) -> Any:
    if isinstance(data, dict) and "data" in data:
        return data["data"]
    return data


def _stringify_ids(item: dict) -> dict:
    # 服务端 ID 可能是整数
    out = dict(item)
    for key in _ID_FIELDS:
        if out.get(key) is not None:
            out[key] = str(out[key])
    return out


def _server_message(data: Any, fallback: str) -> str:
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or fallback)
    return fallback


def _field_errors(data: Any, status_code: int) -> List[FieldError]:
    """服务端校验错误：支持 {"errors": {"field": "msg"}} 或 [{"field":..., "message":...}]。"""
    errors = data.get("errors") if isinstance(data, dict) else None
    out: List[FieldError] = []
    if isinstance(errors, dict):
        for field, msg in errors.items():
            if isinstance(msg, list):
                msg = "; ".join(str(m) for m in msg)
            out.append(FieldError(str(field), str(msg)))
    elif isinstance(errors, list):
        for e in errors:
            if isinstance(e, dict):
                out.append(FieldError(str(e.get("field", "_server")), str(e.get("message", ""))))
    if not out:
        out.append(FieldError("_server", _server_message(data, f"HTTP {status_code}")))
    return out


class HttpReminderStore(ReminderStore):
    """基于 requests 的远端存储客户端。"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.token = token if token is not None else API_TOKEN
        self.timeout = timeout or REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        payload: Optional[dict] = None,
        write: bool = False,
    ) -> Any:
        """发送请求并返回解包后的 JSON。

        读请求的任何失败都是 TransientFetchError；写请求被拒绝时为
        ValidationError（400/422）或 ConflictOnWrite（其他 4xx）。
        """
        url = self.base_url + PREFIX + path
        _log(f"{method} {url}")
        try:
            r = self.session.request(
                method,
                url,
                headers=self._headers(),
                params=params,
                data=json.dumps(payload) if payload is not None else None,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            _log(f"请求失败: {e}")
            raise TransientFetchError(f"请求失败: {e}") from e
        _log(f"响应 HTTP {r.status_code}")
        data: Any = None
        if r.content:
            try:
                data = r.json()
            except ValueError as e:
                if r.ok:
                    raise TransientFetchError(f"响应非 JSON: {r.text[:200]}", r.status_code) from e
        if r.ok:
            return _unwrap(data)
        msg = f"HTTP {r.status_code}: {_server_message(data, r.text[:200])}"
        _log(msg)
        if r.status_code >= 500 or not write:
            raise TransientFetchError(msg, r.status_code)
        if r.status_code in (400, 422):
            raise ValidationError(_field_errors(data, r.status_code))
        raise ConflictOnWrite(msg, r.status_code)

    def fetch_reminders(self, owner_id: str, active_only: bool = True) -> List[ReminderDefinition]:
        data = self._request(
            "GET",
            f"/user/{owner_id}",
            params={"active_only": "true" if active_only else "false"},
        )
        if not isinstance(data, list):
            raise TransientFetchError("提醒列表格式异常")
        out = []
        for item in data:
            if not isinstance(item, dict):
                _log(f"跳过无法解析的提醒 {item!r}")
                continue
            try:
                out.append(ReminderDefinition.model_validate(_stringify_ids(item)))
            except (PydanticValidationError, TypeError) as e:
                # 无法解析的记录不参与生成，其余提醒照常展示
                _log(f"跳过无法解析的提醒 {item.get('id')}: {e}")
        _log(f"获取到 {len(out)} 条提醒")
        return out

    def fetch_logs(self, owner_id: str, window: DateWindow) -> List[IntakeLog]:
        data = self._request(
            "GET",
            f"/logs/user/{owner_id}",
            params={"from": window.start.isoformat(), "to": window.end.isoformat()},
        )
        if not isinstance(data, list):
            raise TransientFetchError("服药记录格式异常")
        out = []
        for item in data:
            if not isinstance(item, dict):
                _log(f"跳过无法解析的服药记录 {item!r}")
                continue
            try:
                out.append(IntakeLog.model_validate(_stringify_ids(item)))
            except (PydanticValidationError, TypeError) as e:
                _log(f"跳过无法解析的服药记录: {e}")
        _log(f"获取到 {len(out)} 条服药记录")
        return out

    def _returned_id(self, data: Any, fallback: Optional[str] = None) -> str:
        if isinstance(data, dict):
            record = data.get("reminder") if isinstance(data.get("reminder"), dict) else data
            if record.get("id") is not None:
                return str(record["id"])
        if fallback is not None:
            return fallback
        raise TransientFetchError("响应中没有提醒 ID")

    def create_reminder(self, definition: ReminderDefinition) -> str:
        data = self._request("POST", "", payload=definition.to_payload(), write=True)
        return self._returned_id(data)

    def update_reminder(self, reminder_id: str, definition: ReminderDefinition) -> str:
        data = self._request("PUT", f"/{reminder_id}", payload=definition.to_payload(), write=True)
        return self._returned_id(data, fallback=reminder_id)

    def delete_reminder(self, reminder_id: str) -> None:
        self._request("DELETE", f"/{reminder_id}", write=True)

    def log_intake(self, log: IntakeLog) -> IntakeLog:
        payload = log.model_dump(mode="json", exclude={"id"})
        data = self._request("POST", "/log-intake", payload=payload, write=True)
        if isinstance(data, dict) and data.get("id") is not None:
            return log.model_copy(update={"id": str(data["id"])})
        return log
