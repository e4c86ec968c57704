"""Langbase 聊天端点适配器。

主客服 Agent 与部门 Agent 使用同一种接口风格：
- URL: 配置中的 main_endpoint_url / department_endpoint_url
- 认证: Authorization: Bearer <api_key>
- 请求体: {"threadId"?: str, "messages": [{"role": "user", "content": str}]}

主端点以 SSE 流返回，会话 ID 放在响应头（默认 lb-thread-id）中；
部门端点返回普通 JSON，结果位于 completion 字段。
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from cs_agent.config.settings import settings
from cs_agent.domain.exceptions import ApiError, DispatchError, NetworkError, ValidationError
from cs_agent.domain.models import ChatMessage, ChatStreamResponse
from cs_agent.infrastructure.logging.logger import logger


class LangbaseClient:
    """主客服 / 部门 Agent 的 HTTP 客户端实现。"""

    name = "langbase"

    def __init__(self, cfg=settings):
        self._settings = cfg

    # ---- 主客服 Agent（流式） ----

    @asynccontextmanager
    async def chat_stream(self, query: str, thread_id: Optional[str]) -> AsyncIterator[ChatStreamResponse]:
        api_key = getattr(self._settings, "langbase_online_store_customer_service_api_key", None)
        if not api_key:
            raise ValidationError(
                code="MISSING_API_KEY",
                message="LANGBASE_ONLINE_STORE_CUSTOMER_SERVICE_API_KEY not set",
            )
        payload = self._build_payload(query, thread_id)
        logger.info("main_agent.request", extra={"extra": {"thread_id": thread_id}})
        try:
            async with httpx.AsyncClient(timeout=self._timeout(), trust_env=False) as client:
                async with client.stream(
                    "POST",
                    self._settings.main_endpoint_url,
                    json=payload,
                    headers=self._headers(api_key),
                ) as resp:
                    if resp.status_code >= 300:
                        await resp.aread()
                        raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
                    header = getattr(self._settings, "thread_id_header", "lb-thread-id")
                    yield ChatStreamResponse(
                        status_code=resp.status_code,
                        thread_id=resp.headers.get(header),
                        body=self._iter_body(resp) if self._has_body(resp) else None,
                    )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e))

    # ---- 部门 Agent（非流式） ----

    async def post_department(
        self,
        url: str,
        api_key: str,
        query: str,
        thread_id: Optional[str],
        department: str,
    ) -> Any:
        payload = self._build_payload(query, thread_id)
        try:
            async with httpx.AsyncClient(timeout=self._timeout(), trust_env=False) as client:
                resp = await client.post(url, json=payload, headers=self._headers(api_key))
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e), department=department)
        if not 200 <= resp.status_code < 300:
            raise DispatchError(
                code="DISPATCH_ERROR",
                message=f"Error: {resp.status_code} {resp.reason_phrase}",
                http_status=resp.status_code,
                department=department,
            )
        return resp.json()

    # ---- 辅助方法 ----

    def _timeout(self) -> Optional[float]:
        return getattr(self._settings, "http_timeout", None)

    @staticmethod
    def _headers(api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _build_payload(query: str, thread_id: Optional[str]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"messages": [ChatMessage(role="user", content=query).to_payload()]}
        if thread_id:
            payload["threadId"] = thread_id
        return payload

    @staticmethod
    def _has_body(resp) -> bool:
        if resp.status_code == 204:
            return False
        return resp.headers.get("content-length") != "0"

    @staticmethod
    async def _iter_body(resp) -> AsyncIterator[bytes]:
        try:
            async for data in resp.aiter_bytes():
                yield data
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e))
