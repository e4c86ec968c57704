"""客服 CLI 的异常模型。

传输层把 httpx 错误与非 2xx 响应包装为 NetworkError / ApiError；
对话循环按类型决定放弃当前轮、跳过部门结果还是结束 REPL，
其余 BusinessError 交给 cli.main 记录后以状态码 1 退出。
"""


class BusinessError(Exception):
    """所有客户端异常的基类。

    Attributes:
        code: 写入日志的错误码（如 "NETWORK_ERROR"、"DISPATCH_ERROR"）。
        message: 人可读的错误描述。
        http_status: 端点返回的状态码；非 HTTP 错误保持默认 400。
        extra: 附加上下文，例如出错的 department。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、读取中断、超时等。"""


class ApiError(BusinessError):
    """端点返回非 2xx 状态码时抛出。"""


class DispatchError(ApiError):
    """部门端点返回非 2xx，委派请求失败。"""


class ValidationError(BusinessError):
    """参数或配置校验失败（例如缺少 API Key）。"""


class MissingResponseBodyError(BusinessError):
    """主端点响应中没有可读取的流式 body。"""
