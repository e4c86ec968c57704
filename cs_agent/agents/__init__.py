"""对话循环与部门分发。"""

from cs_agent.agents.conversation import ConversationLoop
from cs_agent.agents.dispatcher import DepartmentDispatcher, format_department_response

__all__ = ["ConversationLoop", "DepartmentDispatcher", "format_department_response"]
