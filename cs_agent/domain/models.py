"""统一的流式事件与会话数据模型。

本模块定义了客户端内部在解析器、分发器与对话循环之间共享的数据结构：

- ChatMessage: 一条发往端点的对话消息。
- ToolCallInvocation: 由若干流式片段拼装而成的一次工具调用。
- StreamChunk: 解析器产出的语义事件（content / tool_call / end）。
- DepartmentResult: 部门 Agent 返回并格式化后的结果。
- Session / TurnResult: 对话循环的会话状态与单轮结果。

HTTP 适配层（providers）负责在端点 JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Literal, Optional, Union


# 消息角色（端点只接收 user 消息，其余保留给上游扩展）
Role = Literal["system", "user", "assistant"]

# 流式事件类型
ChunkKind = Literal["content", "tool_call", "end"]


@dataclass
class ChatMessage:
    """一条对话消息。"""

    role: Role
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ToolCallInvocation:
    """模型在流式回复中发起的一次工具调用。

    - index/id/name: 取自第一个片段，后续片段中的同名字段被忽略。
    - arguments: 拼装过程中为原始 JSON 文本；完成解析后为结构化值。
    - completed: arguments 是否已经成功解析为 JSON。
    """

    index: int
    id: str
    name: str
    arguments: Union[str, Any] = ""
    completed: bool = False


@dataclass
class StreamChunk:
    """解析器逐个产出的语义事件，按帧到达顺序排列。"""

    kind: ChunkKind
    text: Optional[str] = None
    invocation: Optional[ToolCallInvocation] = None

    @classmethod
    def content(cls, text: str) -> "StreamChunk":
        return cls(kind="content", text=text)

    @classmethod
    def tool_call(cls, invocation: ToolCallInvocation) -> "StreamChunk":
        return cls(kind="tool_call", invocation=invocation)

    @classmethod
    def end(cls) -> "StreamChunk":
        return cls(kind="end")


@dataclass
class DepartmentResult:
    """部门 Agent 的结果文本，随后作为普通内容写回输出。"""

    key: str
    text: str


@dataclass
class ChatStreamResponse:
    """主端点的流式响应。

    - status_code: HTTP 状态码。
    - thread_id: 响应头中携带的会话 ID（可能缺失）。
    - body: 原始字节流；响应没有可读 body 时为 None。
    """

    status_code: int
    thread_id: Optional[str]
    body: Optional[AsyncIterator[bytes]]


@dataclass
class Session:
    """一次 CLI 进程内的会话状态。

    thread_id 由服务端在首次响应中分配，之后所有请求都复用它；
    pending_follow_up 是本轮待发送的跟进问题（没有则为 None）。
    """

    thread_id: Optional[str] = None
    pending_follow_up: Optional[str] = None

    def update_thread_id(self, thread_id: Optional[str]) -> Optional[str]:
        if thread_id:
            self.thread_id = thread_id
        return self.thread_id


@dataclass
class TurnResult:
    """处理完一个流式响应后的结果。"""

    tool_call_detected: bool
    thread_id: Optional[str]
