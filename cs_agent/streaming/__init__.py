"""流式协议解码：SSE 帧解析与工具调用片段拼装。"""

from cs_agent.streaming.accumulator import ToolCallAccumulator
from cs_agent.streaming.frame_parser import SSEFrameParser, stream_chunks

__all__ = ["SSEFrameParser", "ToolCallAccumulator", "stream_chunks"]
