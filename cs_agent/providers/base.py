"""传输层抽象接口。

对话循环与部门分发器不直接依赖 httpx，而是依赖此协议：

- chat_stream: 向主客服 Agent 发送一条用户消息，得到流式响应。
- post_department: 向某个部门 Agent 发送一次非流式请求，返回响应 JSON。

测试中用简单的假实现替换即可驱动完整的对话流程。
"""

from typing import Any, AsyncContextManager, Optional, Protocol

from cs_agent.domain.models import ChatStreamResponse


class ChatTransport(Protocol):
    """Langbase 风格聊天端点的客户端协议。"""

    name: str

    def chat_stream(self, query: str, thread_id: Optional[str]) -> AsyncContextManager[ChatStreamResponse]:
        ...

    async def post_department(
        self,
        url: str,
        api_key: str,
        query: str,
        thread_id: Optional[str],
        department: str,
    ) -> Any:
        ...
