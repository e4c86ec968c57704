"""交互式命令行入口。

读取终端输入、打印凭证配置状态，其余逻辑全部交给 ConversationLoop。
"""

import asyncio
import sys
from typing import Optional, TextIO

from cs_agent.agents.conversation import ConversationLoop, ReadLine
from cs_agent.config.settings import settings
from cs_agent.domain.exceptions import BusinessError
from cs_agent.infrastructure.logging.logger import logger
from cs_agent.providers import create_transport
from cs_agent.providers.base import ChatTransport


def print_credential_status(cfg=settings, stream: Optional[TextIO] = None) -> None:
    """打印四个凭证是否已设置（不输出密钥本身）。"""

    out = stream or sys.stdout
    out.write("Environment Variables:\n")
    for key, is_set in cfg.credential_status().items():
        out.write(f"{key}: {'set' if is_set else 'Not set'}\n")


async def read_line(prompt: str) -> Optional[str]:
    try:
        return await asyncio.to_thread(input, prompt)
    except EOFError:
        return None


async def run_cli(cfg=settings, transport: Optional[ChatTransport] = None, reader: ReadLine = read_line) -> None:
    print_credential_status(cfg)
    loop = ConversationLoop(transport or create_transport(cfg), cfg=cfg)
    await loop.run(reader)


def main() -> int:
    try:
        asyncio.run(run_cli())
    except KeyboardInterrupt:
        return 130
    except BusinessError as e:
        logger.error("Fatal error: %s", e.message, extra={"extra": {"code": e.code}})
        return 1
    except Exception:
        logger.exception("Unexpected error")
        return 1
    return 0
