"""
错误类型（Error Taxonomy）

说明：
- 所有业务错误继承 BioPeakError，携带 HTTP 状态码与面向客户端的消息；
- 由 biopeak/main.py 注册的异常处理器统一渲染为 {"success": false, "error": "..."}；
- "没有结果"（如不足 1 公里、没有历史数据）不是错误，由各计算函数以 None/零值表示。
"""

from typing import Optional


class BioPeakError(Exception):
    """业务错误基类"""
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(BioPeakError):
    """请求参数缺失或格式错误"""
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(BioPeakError):
    """缺少或无效的调用方凭证"""
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(BioPeakError):
    """调用方身份与目标用户不一致"""
    status_code = 403
    default_message = "Forbidden"


class NotFound(BioPeakError):
    """引用的活动或用户没有数据"""
    status_code = 404
    default_message = "Not found"


class UpstreamFailure(BioPeakError):
    """数据库或下游调用失败"""
    status_code = 500
    default_message = "Upstream failure"
