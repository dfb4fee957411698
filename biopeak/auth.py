"""
鉴权依赖（Authentication & Authorization）

说明：
- 调用方通过 `Authorization: Bearer <JWT>` 传递身份，令牌为 HS256 签名，
  与 Supabase 签发的 access token 兼容（sub = 用户ID，role = authenticated / service_role）；
- 缺少或无效的令牌返回 401；目标 user_id 与令牌 sub 不一致返回 403；
- role 为 service_role 的令牌（定时任务、批处理）可以代任意用户调用。
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .config import SERVICE_ROLE, get_jwt_algorithm, get_jwt_audience, get_jwt_secret
from .errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

# auto_error=False：缺少凭证时由我们返回 401，而不是 HTTPBearer 默认的 403
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """当前请求的调用方身份"""
    user_id: Optional[str]
    role: Optional[str] = None

    @property
    def is_service(self) -> bool:
        return self.role == SERVICE_ROLE


def create_access_token(
    subject: Optional[str],
    role: str = "authenticated",
    expires_delta: Optional[timedelta] = None,
    secret: Optional[str] = None,
) -> str:
    """签发令牌（测试与 crontab 脚本使用，线上令牌由认证服务签发）"""
    payload: Dict[str, Any] = {
        "role": role,
        "exp": datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1)),
    }
    if subject:
        payload["sub"] = subject
    audience = get_jwt_audience()
    if audience:
        payload["aud"] = audience
    return jwt.encode(payload, secret or get_jwt_secret(), algorithm=get_jwt_algorithm())


def decode_access_token(token: str) -> Dict[str, Any]:
    """校验签名与过期时间，返回 claims

    异常：
        Unauthorized: 密钥未配置或令牌无效
    """
    secret = get_jwt_secret()
    if not secret:
        logger.error("[auth][misconfigured] JWT_SECRET is not set")
        raise Unauthorized()
    audience = get_jwt_audience()
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[get_jwt_algorithm()],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError as e:
        logger.info("[auth][invalid-token] %s", e)
        raise Unauthorized("Invalid authentication credentials") from e


def get_caller(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Caller:
    """FastAPI 依赖项：解析当前调用方"""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authenticated")
    claims = decode_access_token(credentials.credentials)
    caller = Caller(user_id=claims.get("sub"), role=claims.get("role"))
    if not caller.user_id and not caller.is_service:
        raise Unauthorized("Invalid token payload")
    return caller


def ensure_same_user(caller: Caller, user_id: str) -> None:
    """目标用户必须是调用方本人（服务角色除外）"""
    if caller.is_service:
        return
    if caller.user_id != user_id:
        logger.warning("[auth][forbidden] caller=%s target=%s", caller.user_id, user_id)
        raise Forbidden()


def require_service_role(caller: Caller = Depends(get_caller)) -> Caller:
    """FastAPI 依赖项：仅允许服务角色调用"""
    if not caller.is_service:
        raise Forbidden("Service role required")
    return caller
