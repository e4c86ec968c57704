"""对话循环核心模块。

ConversationLoop 驱动多轮交互：

1. 等待用户输入（exit 退出）。
2. 把问题连同 thread id 发给主客服 Agent，解析其 SSE 流：
   - content 直接写到输出；
   - tool_call 交给 DepartmentDispatcher，部门结果同样写到输出；
   - end 结束当前流。
3. 若本轮出现过工具调用，用固定的跟进问题再请求一次主 Agent，
   让它基于部门结果给客户一个总结。跟进轮次有上限，保证循环终止。
"""

import sys
from contextlib import aclosing
from typing import Awaitable, Callable, Optional, Protocol, TextIO

from cs_agent.agents.dispatcher import DepartmentDispatcher, extract_customer_query
from cs_agent.config.settings import settings
from cs_agent.domain.exceptions import ApiError, BusinessError, MissingResponseBodyError, NetworkError
from cs_agent.domain.models import ChatStreamResponse, Session, ToolCallInvocation, TurnResult
from cs_agent.infrastructure.logging.logger import logger
from cs_agent.providers.base import ChatTransport
from cs_agent.streaming.frame_parser import stream_chunks

PROMPT = 'Enter your query (or type "exit" to quit): '
EXIT_COMMAND = "exit"

ReadLine = Callable[[str], Awaitable[Optional[str]]]


class OutputSink(Protocol):
    def write(self, text: str) -> None:
        ...


class StreamSink:
    """把内容写到文本流（默认 stdout），每次写入后立即 flush。"""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def write(self, text: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(text)
        stream.flush()


class ConversationLoop:
    def __init__(
        self,
        transport: ChatTransport,
        dispatcher: Optional[DepartmentDispatcher] = None,
        sink: Optional[OutputSink] = None,
        cfg=settings,
        session: Optional[Session] = None,
    ):
        self._transport = transport
        self._dispatcher = dispatcher or DepartmentDispatcher(transport, cfg)
        self._sink = sink or StreamSink()
        self._settings = cfg
        self.session = session or Session()

    async def run(self, read_line: ReadLine) -> None:
        """REPL 主循环：发送问候语后反复读取输入，直到 exit 或输入结束。"""

        greeting = getattr(self._settings, "greeting_query", "")
        if greeting and not await self.handle_turn(greeting, allow_follow_up=False):
            return

        while True:
            line = await read_line(PROMPT)
            if line is None:
                logger.info("input.eof")
                break
            if line.lower() == EXIT_COMMAND:
                break
            if not line.strip():
                continue
            if not await self.handle_turn(line):
                break

    async def handle_turn(self, query: str, allow_follow_up: bool = True) -> bool:
        """执行一轮对话并处理轮内错误；返回 False 表示应结束整个循环。"""

        try:
            await self.run_turn(query, allow_follow_up=allow_follow_up)
        except MissingResponseBodyError as e:
            logger.error("No readable stream found in response body", extra={"extra": {"code": e.code}})
            return False
        except (NetworkError, ApiError) as e:
            logger.error(
                "Error calling CS Agent: %s",
                e.message,
                extra={"extra": {"code": e.code, "http_status": e.http_status}},
            )
        return True

    async def run_turn(self, query: str, allow_follow_up: bool = True) -> TurnResult:
        result = await self._send(query)
        rounds = 0
        max_rounds = getattr(self._settings, "max_follow_up_rounds", 1) if allow_follow_up else 0
        while result.tool_call_detected and rounds < max_rounds:
            rounds += 1
            self.session.pending_follow_up = self._settings.follow_up_query
            logger.info("Calling department agents...", extra={"extra": {"round": rounds}})
            result = await self._send(self.session.pending_follow_up)
        self.session.pending_follow_up = None
        logger.info("CS Agent response completed", extra={"extra": {"thread_id": self.session.thread_id}})
        return result

    async def _send(self, query: str) -> TurnResult:
        async with self._transport.chat_stream(query, self.session.thread_id) as response:
            self.session.update_thread_id(response.thread_id)
            return await self.process_response(response)

    async def process_response(self, response: ChatStreamResponse) -> TurnResult:
        """消费一条流式响应，返回本次是否检测到工具调用。"""

        if response.body is None:
            raise MissingResponseBodyError(code="MISSING_BODY", message="No readable stream found in response body")

        tool_call_detected = False
        async with aclosing(stream_chunks(response.body)) as chunks:
            async for chunk in chunks:
                if chunk.kind == "content":
                    self._sink.write(chunk.text)
                elif chunk.kind == "tool_call":
                    tool_call_detected = True
                    await self._handle_tool_call(chunk.invocation)
                elif chunk.kind == "end":
                    self._sink.write("\n")
                    break
        return TurnResult(tool_call_detected=tool_call_detected, thread_id=self.session.thread_id)

    async def _handle_tool_call(self, invocation: ToolCallInvocation) -> None:
        if self._dispatcher.resolve(invocation.name) is None:
            logger.info("tool_call.ignored", extra={"extra": {"name": invocation.name}})
            return
        query = extract_customer_query(invocation)
        if query is None:
            return
        try:
            result = await self._dispatcher.dispatch(invocation.name, query, self.session.thread_id)
        except BusinessError as e:
            logger.error(
                "Error calling department: %s",
                e.message,
                extra={"extra": {"code": e.code, "name": invocation.name}},
            )
            return
        if result is not None:
            self._sink.write(result.text)
