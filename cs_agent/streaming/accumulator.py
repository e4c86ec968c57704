"""工具调用片段拼装器。

流式回复中，一次工具调用的 arguments 会被拆成若干片段分多帧下发。
ToolCallAccumulator 只维护一个“进行中”的调用槽位：端点从不交错下发多个
工具调用；若交错，单槽位会把两个调用的参数拼在一起（已知限制）。

完成判定采用启发式：拼接后的文本以 ``}`` 结尾时尝试 JSON 解析，
解析成功即视为完成。字符串值中恰好出现 ``}`` 且前缀碰巧是合法 JSON 时
会提前完成，这一点不做修正。
"""

import json
from typing import Any, Dict, Optional

from cs_agent.domain.models import ToolCallInvocation
from cs_agent.infrastructure.logging.logger import logger


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class ToolCallAccumulator:
    """把 ``delta.tool_calls[0]`` 片段拼装为完整的 ToolCallInvocation。"""

    def __init__(self) -> None:
        self._current: Optional[ToolCallInvocation] = None

    @property
    def in_flight(self) -> bool:
        return self._current is not None

    def feed(self, delta: Dict[str, Any]) -> Optional[ToolCallInvocation]:
        """喂入一个片段；调用完成时返回它，否则返回 None。"""

        function = delta.get("function")
        if not isinstance(function, dict):
            function = {}
        fragment = function.get("arguments") or ""
        if not isinstance(fragment, str):
            fragment = json.dumps(fragment, ensure_ascii=False)
        if self._current is None:
            # 第一个片段决定 index/id/name
            self._current = ToolCallInvocation(
                index=delta.get("index", 0),
                id=_as_text(delta.get("id")),
                name=_as_text(function.get("name")),
                arguments=fragment,
            )
        else:
            self._current.arguments += fragment

        text = self._current.arguments
        if not text.endswith("}"):
            return None
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            # 可能只闭合了内层对象，继续等待后续片段
            logger.warning(
                "Error parsing tool call arguments: %s",
                e,
                extra={"extra": {"tool_call_id": self._current.id, "name": self._current.name}},
            )
            return None

        invocation = self._current
        invocation.arguments = parsed
        invocation.completed = True
        self._current = None
        logger.info(
            "tool_call.completed",
            extra={"extra": {"tool_call_id": invocation.id, "name": invocation.name}},
        )
        return invocation

    def flush(self) -> Optional[ToolCallInvocation]:
        """取出并清空进行中的调用（arguments 保持原始文本）。"""

        invocation, self._current = self._current, None
        return invocation
