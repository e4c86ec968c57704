"""部门分发器。

主客服 Agent 通过工具调用（如 call_sports_dept）请求把问题委派给某个部门。
DepartmentDispatcher 负责：

1. 根据工具调用名查找部门（未知名称直接忽略）。
2. 使用该部门自己的密钥，把客户问题与当前 thread id 发给部门端点。
3. 把部门返回的 completion 格式化为一段可直接输出的文本。
"""

import json
from typing import Any, Mapping, Optional

from cs_agent.config.settings import settings
from cs_agent.domain.exceptions import ValidationError
from cs_agent.domain.models import DepartmentResult, ToolCallInvocation
from cs_agent.infrastructure.logging.logger import logger
from cs_agent.providers.base import ChatTransport
from cs_agent.providers.registry import DepartmentConfig, get_department


def format_department_response(response: str) -> str:
    """把部门 completion 渲染为文本。

    completion 是 JSON 对象时取第一个键值对，输出 ``"<key> <value>"``；
    否则原样返回。
    """

    try:
        parsed = json.loads(response)
    except (TypeError, ValueError) as e:
        logger.warning("Error parsing department response: %s", e)
        return response
    if not isinstance(parsed, dict) or not parsed:
        logger.warning("Department response is not a JSON object, returned verbatim")
        return response
    key, value = next(iter(parsed.items()))
    if not isinstance(value, str):
        value = json.dumps(value, ensure_ascii=False)
    return f"{key} {value}"


def extract_customer_query(invocation: ToolCallInvocation) -> Optional[str]:
    """从工具调用参数中取出 customerQuery；参数不可用时返回 None。"""

    arguments: Any = invocation.arguments
    if isinstance(arguments, str):
        try:
            arguments = json.loads(arguments)
        except ValueError as e:
            logger.warning(
                "Error parsing tool call arguments: %s",
                e,
                extra={"extra": {"tool_call_id": invocation.id, "name": invocation.name}},
            )
            return None
    if not isinstance(arguments, Mapping):
        logger.warning("Tool call arguments are not an object", extra={"extra": {"name": invocation.name}})
        return None
    query = arguments.get("customerQuery")
    if not isinstance(query, str):
        logger.warning("Tool call without customerQuery", extra={"extra": {"name": invocation.name}})
        return None
    return query


class DepartmentDispatcher:
    """把工具调用委派给对应的部门 Agent。"""

    def __init__(self, transport: ChatTransport, cfg=settings):
        self._transport = transport
        self._settings = cfg

    def resolve(self, invocation_name: str) -> Optional[DepartmentConfig]:
        return get_department(invocation_name)

    async def dispatch(
        self,
        invocation_name: str,
        query_text: str,
        thread_id: Optional[str],
    ) -> Optional[DepartmentResult]:
        """执行一次委派；未知部门或响应体不可用时返回 None。

        网络错误（NetworkError）与非 2xx（DispatchError）直接抛给调用方。
        """

        department = self.resolve(invocation_name)
        if department is None:
            logger.info("dispatch.unknown_tool", extra={"extra": {"name": invocation_name}})
            return None

        api_key = getattr(self._settings, department.credential_field, None)
        if not api_key:
            raise ValidationError(code="MISSING_API_KEY", message=f"{department.env_var} not set")

        logger.info(
            "dispatch.start",
            extra={"extra": {"department": department.key, "thread_id": thread_id}},
        )
        try:
            data = await self._transport.post_department(
                self._settings.department_endpoint_url,
                api_key,
                query_text,
                thread_id,
                department.key,
            )
        except ValueError as e:
            logger.warning("Department response body is not JSON: %s", e, extra={"extra": {"department": department.key}})
            return None

        completion = data.get("completion") if isinstance(data, dict) else None
        if not isinstance(completion, str):
            logger.warning("Department response without completion", extra={"extra": {"department": department.key}})
            return None

        logger.info("dispatch.end", extra={"extra": {"department": department.key}})
        return DepartmentResult(key=department.key, text=format_department_response(completion))
