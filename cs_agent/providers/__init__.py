"""聊天端点集成层。

该包下的模块负责：
- 定义传输层抽象接口 (base)。
- 维护工具调用名与部门的映射 (registry)。
- 提供 Langbase 端点的具体实现 (langbase_client)。
"""

from cs_agent.config.settings import settings
from cs_agent.providers.base import ChatTransport
from cs_agent.providers.langbase_client import LangbaseClient


def create_transport(cfg=None) -> ChatTransport:
    """根据配置创建传输层实例，默认使用全局 settings。"""

    return LangbaseClient(cfg or settings)
