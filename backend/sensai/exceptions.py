"""
业务异常模块

所有服务层异常都继承自 SensaiError，并携带一条可以直接返回给调用方的通用提示。
内部细节（SQL 错误、LLM 原始响应等）只写入日志，不放进异常消息。
"""


class SensaiError(Exception):
    """服务层异常基类"""

    default_message = "Something went wrong"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(SensaiError):
    """调用方没有有效身份"""

    default_message = "Unauthorized"


class NotFound(SensaiError):
    """身份没有对应的本地用户，或目标实体不存在"""

    default_message = "User not found"


class Conflict(SensaiError):
    """并发创建时触发唯一约束冲突"""

    default_message = "Conflicting update, please try again"


class TransactionTimeout(SensaiError):
    """事务超出时间预算"""

    default_message = "Operation timed out"


class StoreFailure(SensaiError):
    """数据库层通用失败"""

    default_message = "Database operation failed"


class SaveFailed(StoreFailure):
    """写入失败"""

    default_message = "Failed to save"


class ProviderFailure(SensaiError):
    """外部生成式文本服务调用失败或返回无法解析的内容"""

    default_message = "AI provider request failed"


class AssistFailed(ProviderFailure):
    """内容改写失败"""

    default_message = "Failed to improve content"
