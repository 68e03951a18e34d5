"""structlog 配置模块

库代码本身只调用 structlog.get_logger()，不在导入时配置日志；
宿主应用或命令行入口调用 setup_logging() 完成配置。

dev 模式：pretty print 可读输出
json 模式：结构化 JSON 输出
"""

import logging
import os

import structlog


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 配置

    参数为空时读取环境变量：
    - YAPKIT_LOG_FORMAT: "json" 或 "dev"（默认）
    - YAPKIT_LOG_LEVEL: 日志级别（默认 WARNING）
    """
    log_format = log_format or os.environ.get("YAPKIT_LOG_FORMAT", "dev")
    # 库默认保持安静，只输出 WARNING 及以上；调试时通过环境变量调低
    log_level = log_level or os.environ.get("YAPKIT_LOG_LEVEL", "WARNING")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))
