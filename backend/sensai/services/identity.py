"""
身份解析

把调用方携带的会话令牌（HS256 JWT）解析为身份提供方的稳定 ID。
服务层只信任这里给出的 external_id，从不信任请求里直接传来的数字 ID。
"""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from sensai.logger import logger

DEFAULT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    """已认证的调用方"""
    external_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None


class IdentityResolver:
    """
    会话令牌解析器

    使用示例：
        resolver = IdentityResolver()          # 从 AUTH_SECRET_KEY 读取密钥
        identity = resolver.resolve(token)     # 无效令牌返回 None
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        audience: Optional[str] = None
    ):
        self.secret_key = secret_key or os.getenv("AUTH_SECRET_KEY")
        if not self.secret_key:
            raise ValueError("环境变量 'AUTH_SECRET_KEY' 未设置或为空，无法校验会话令牌")
        self.algorithm = algorithm or os.getenv("AUTH_ALGORITHM", DEFAULT_ALGORITHM)
        self.audience = audience or os.getenv("AUTH_AUDIENCE") or None

    def resolve(self, token: Optional[str]) -> Optional[Identity]:
        """
        解析会话令牌

        Args:
            token: Bearer 令牌（不含 "Bearer " 前缀）

        Returns:
            Identity；令牌缺失、过期、签名不符或缺少 sub 时返回 None
        """
        if not token:
            return None

        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None}
            )
        except JWTError as e:
            logger.debug(f"[IdentityResolver] 令牌无效: {e}")
            return None

        subject = claims.get("sub")
        if not subject:
            return None

        return Identity(
            external_id=str(subject),
            email=claims.get("email"),
            name=claims.get("name"),
            image_url=claims.get("picture")
        )

    def issue_token(
        self,
        external_id: str,
        expires_minutes: int = 60,
        **claims
    ) -> str:
        """
        签发会话令牌（本地开发和测试用，生产环境由身份提供方签发）
        """
        payload = {
            **claims,
            "sub": external_id,
            "exp": datetime.now(tz=timezone.utc) + timedelta(minutes=expires_minutes),
        }
        if self.audience:
            payload["aud"] = self.audience
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
