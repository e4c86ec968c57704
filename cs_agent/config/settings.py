"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。

核心组件（解析器、分发器、对话循环）不直接读取环境变量，
而是在构造时接收这里生成的 settings 对象。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ENDPOINT_URL = "https://api.langbase.com/beta/chat"


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("AGENT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """客服 CLI 的配置设置（使用 Pydantic）。"""

    # ---- 凭证：主客服 Agent + 三个部门 Agent ----
    langbase_online_store_customer_service_api_key: Optional[str] = Field(
        default=None, description="主客服 Agent 的 API 密钥"
    )
    langbase_sports_pipe_api_key: Optional[str] = Field(default=None, description="体育部门 API 密钥")
    langbase_electronics_pipe_api_key: Optional[str] = Field(default=None, description="电子部门 API 密钥")
    langbase_travel_pipe_api_key: Optional[str] = Field(default=None, description="旅行部门 API 密钥")

    # ---- 端点 ----
    main_endpoint_url: str = Field(default=DEFAULT_ENDPOINT_URL, description="主客服 Agent 端点")
    department_endpoint_url: str = Field(default=DEFAULT_ENDPOINT_URL, description="部门 Agent 端点")
    thread_id_header: str = Field(default="lb-thread-id", description="携带会话 ID 的响应头")
    # 未设置时不加超时：交互式 CLI 允许挂起等待
    http_timeout: Optional[float] = Field(default=None, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 对话循环 ----
    follow_up_query: str = Field(
        default="summarize the current status for the customer",
        description="触发部门委派后自动发送的跟进问题",
    )
    max_follow_up_rounds: int = Field(
        default=1,
        ge=0,
        le=5,
        description="单轮对话内跟进请求的最大次数",
    )
    greeting_query: str = Field(default="Hello", description="启动时发送的问候语，空字符串表示不发送")

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_level: str = Field(default="INFO", description="文件日志级别")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator(
        "langbase_online_store_customer_service_api_key",
        "langbase_sports_pipe_api_key",
        "langbase_electronics_pipe_api_key",
        "langbase_travel_pipe_api_key",
    )
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )

    def credential_status(self) -> Dict[str, bool]:
        """返回四个凭证是否已配置，用于启动时的提示（不泄露密钥本身）。"""

        return {
            "LANGBASE_ONLINE_STORE_CUSTOMER_SERVICE_API_KEY": bool(
                self.langbase_online_store_customer_service_api_key
            ),
            "LANGBASE_SPORTS_PIPE_API_KEY": bool(self.langbase_sports_pipe_api_key),
            "LANGBASE_ELECTRONICS_PIPE_API_KEY": bool(self.langbase_electronics_pipe_api_key),
            "LANGBASE_TRAVEL_PIPE_API_KEY": bool(self.langbase_travel_pipe_api_key),
        }


settings = Settings()
