"""领域层模型与异常。

包含：
- models: StreamChunk / ToolCallInvocation / Session 等流式与会话模型。
- exceptions: 业务异常类型定义。
"""
