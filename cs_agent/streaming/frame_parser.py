"""SSE 帧解析器。

把主端点返回的原始字节流转换为 StreamChunk 序列：

- ``data: {...}`` 帧中的 content 增量 -> content 事件；
- tool_calls 增量交给 ToolCallAccumulator，拼装完成后 -> tool_call 事件；
- ``data: [DONE]`` -> （先冲刷进行中的工具调用）end 事件。

一次 read 可能在行中间截断，也可能包含多帧，因此内部维护文本缓冲区，
只处理以换行结尾的完整行。输出顺序与帧到达顺序一致，且与字节流如何
被切分无关。
"""

import codecs
import json
from typing import Any, AsyncIterable, AsyncIterator, Dict, Iterator, List, Optional

from cs_agent.domain.models import StreamChunk
from cs_agent.infrastructure.logging.logger import logger
from cs_agent.streaming.accumulator import ToolCallAccumulator

DATA_PREFIX = "data: "
DONE_LINE = "data: [DONE]"


class SSEFrameParser:
    """增量式 SSE 解析器，一个实例只用于一条响应流。"""

    def __init__(self, accumulator: Optional[ToolCallAccumulator] = None):
        self._accumulator = accumulator or ToolCallAccumulator()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, data: bytes) -> List[StreamChunk]:
        """喂入一次 read 得到的字节，返回其中完整行对应的事件。"""

        self._buffer += self._decoder.decode(data)
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        chunks: List[StreamChunk] = []
        for line in lines:
            chunks.extend(self._parse_line(line))
        return chunks

    def close(self) -> List[StreamChunk]:
        """字节流结束：处理缓冲区中最后一行（若没有换行结尾）。"""

        self._buffer += self._decoder.decode(b"", final=True)
        tail, self._buffer = self._buffer, ""
        chunks = list(self._parse_line(tail)) if tail.strip() else []
        dangling = self._accumulator.flush()
        if dangling is not None:
            logger.warning(
                "Stream ended without [DONE], dropping unfinished tool call",
                extra={"extra": {"tool_call_id": dangling.id, "name": dangling.name}},
            )
        return chunks

    def _parse_line(self, line: str) -> Iterator[StreamChunk]:
        if line.strip() == DONE_LINE:
            pending = self._accumulator.flush()
            if pending is not None:
                yield StreamChunk.tool_call(pending)
            yield StreamChunk.end()
            return
        if not line.startswith(DATA_PREFIX):
            return
        try:
            data = json.loads(line[len(DATA_PREFIX):])
        except json.JSONDecodeError as e:
            logger.warning("Error parsing chunk: %s", e, extra={"extra": {"line": line[:200]}})
            return

        delta = self._first_delta(data)
        content = delta.get("content")
        if content:
            if isinstance(content, str):
                yield StreamChunk.content(content)
            else:
                logger.warning("Skipping non-text content delta", extra={"extra": {"line": line[:200]}})
            return
        tool_calls = delta.get("tool_calls")
        if not tool_calls:
            return
        if (
            not isinstance(tool_calls, list)
            or not isinstance(tool_calls[0], dict)
            or not isinstance(tool_calls[0].get("function") or {}, dict)
        ):
            logger.warning("Skipping malformed tool_calls delta", extra={"extra": {"line": line[:200]}})
            return
        invocation = self._accumulator.feed(tool_calls[0])
        if invocation is not None:
            yield StreamChunk.tool_call(invocation)

    @staticmethod
    def _first_delta(data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            return {}
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return {}
        delta = choices[0].get("delta")
        return delta if isinstance(delta, dict) else {}


async def stream_chunks(source: AsyncIterable[bytes]) -> AsyncIterator[StreamChunk]:
    """惰性地把异步字节流转换为 StreamChunk；每次调用都使用新的解析器。"""

    parser = SSEFrameParser()
    async for data in source:
        for chunk in parser.feed(data):
            yield chunk
    for chunk in parser.close():
        yield chunk
