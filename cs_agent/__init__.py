"""CS Agent 顶层包。

该包提供在线商店客服 CLI 的核心实现，
包括配置加载、领域模型、SSE 流解析、工具调用拼装、
部门委派与多轮对话循环等能力。
"""

from cs_agent.agents import ConversationLoop, DepartmentDispatcher

__all__ = ["ConversationLoop", "DepartmentDispatcher"]
