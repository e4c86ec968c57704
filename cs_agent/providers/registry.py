"""部门 Agent 配置。

本模块将“工具调用名”与“部门”解耦：

- dispatch_name：主客服 Agent 在流式回复里发起的工具调用名，例如 "call_sports_dept"。
- key：部门标识，例如 "sports"，用于日志与 DepartmentResult。
- credential_field：settings 中保存该部门 API 密钥的字段名。

部门集合是固定的，新增部门只需要在这里登记。"""

from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class DepartmentConfig:
    """单个部门 Agent 的配置。"""

    key: str
    dispatch_name: str
    credential_field: str
    env_var: str


SPORTS_DEPARTMENT = DepartmentConfig(
    key="sports",
    dispatch_name="call_sports_dept",
    credential_field="langbase_sports_pipe_api_key",
    env_var="LANGBASE_SPORTS_PIPE_API_KEY",
)

ELECTRONICS_DEPARTMENT = DepartmentConfig(
    key="electronics",
    dispatch_name="call_electronics_dept",
    credential_field="langbase_electronics_pipe_api_key",
    env_var="LANGBASE_ELECTRONICS_PIPE_API_KEY",
)

TRAVEL_DEPARTMENT = DepartmentConfig(
    key="travel",
    dispatch_name="call_travel_dept",
    credential_field="langbase_travel_pipe_api_key",
    env_var="LANGBASE_TRAVEL_PIPE_API_KEY",
)


DEPARTMENT_REGISTRY: Mapping[str, DepartmentConfig] = {
    cfg.dispatch_name: cfg for cfg in (SPORTS_DEPARTMENT, ELECTRONICS_DEPARTMENT, TRAVEL_DEPARTMENT)
}


def get_department(dispatch_name: str) -> Optional[DepartmentConfig]:
    """根据工具调用名查找部门；未知名称返回 None（精确匹配）。"""

    return DEPARTMENT_REGISTRY.get(dispatch_name)
