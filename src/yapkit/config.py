"""FeedbackConfig -- 反馈 API 连接配置

支持直接构造，或通过 load_feedback_config() 从环境变量加载。
构造后只读，可在并发调用间安全共享。
"""

import os

import structlog
from pydantic import BaseModel, ConfigDict, Field, SecretStr

log = structlog.get_logger()

DEFAULT_API_BASE_URL = "https://yapback.dev"
DEFAULT_TIMEOUT_S = 30.0

FEEDBACK_PATH = "api/feedback"
UPLOAD_URL_PATH = "api/feedback/upload-url"


class FeedbackConfig(BaseModel):
    """反馈 API 配置

    环境变量（见 load_feedback_config）:
        YAPKIT_API_KEY: API 密钥（以 yb_live_ 开头）
        YAPKIT_API_BASE_URL: 服务基础 URL（默认 https://yapback.dev）
        YAPKIT_TIMEOUT_S: 单次 HTTP 请求超时（秒，默认 30）
    """

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr = Field(description="Bearer 认证密钥")
    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        min_length=1,
        description="反馈服务基础 URL",
    )
    timeout_s: float = Field(
        default=DEFAULT_TIMEOUT_S,
        gt=0,
        description="HTTP 请求超时（秒）",
    )

    def url_for(self, path: str) -> str:
        """拼接基础 URL 与路径，兼容末尾斜杠"""
        return f"{self.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    @property
    def feedback_url(self) -> str:
        return self.url_for(FEEDBACK_PATH)

    @property
    def upload_url_endpoint(self) -> str:
        return self.url_for(UPLOAD_URL_PATH)

    def auth_headers(self) -> dict[str, str]:
        """JSON 请求的通用头部"""
        return {
            "Authorization": f"Bearer {self.api_key.get_secret_value()}",
            "Content-Type": "application/json",
        }


def load_feedback_config(api_key: str | None = None) -> FeedbackConfig:
    """从环境变量加载反馈配置

    环境变量映射:
        YAPKIT_API_KEY -> api_key（参数 api_key 优先）
        YAPKIT_API_BASE_URL -> api_base_url (默认 "https://yapback.dev")
        YAPKIT_TIMEOUT_S -> timeout_s (默认 30)

    Returns:
        FeedbackConfig 实例
    """
    kwargs: dict = {
        "api_key": SecretStr(api_key or os.environ.get("YAPKIT_API_KEY", "")),
    }

    if val := os.environ.get("YAPKIT_API_BASE_URL"):
        kwargs["api_base_url"] = val

    if val := os.environ.get("YAPKIT_TIMEOUT_S"):
        try:
            timeout = float(val)
            if timeout <= 0:
                raise ValueError(val)
            kwargs["timeout_s"] = timeout
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="YAPKIT_TIMEOUT_S",
                value=val,
                fallback=DEFAULT_TIMEOUT_S,
            )

    return FeedbackConfig(**kwargs)
