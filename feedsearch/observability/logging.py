"""日志配置

使用 structlog 实现结构化日志。
"""

import logging
import sys

import structlog


def configure_logging(
    environment: str = "development",
    log_level: str = "INFO",
    log_format: str = "console",
) -> None:
    """配置 structlog"""
    is_production = environment == "production"
    should_json = log_format == "json" or is_production

    if should_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    # structlog 负责渲染，stdlib 只做输出
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level, force=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            )
            if not is_production
            else structlog.processors.CallsiteParameterAdder([]),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **kwargs) -> structlog.stdlib.BoundLogger:
    """获取日志记录器

    Args:
        name: 日志记录器名称（通常使用 __name__）
        **kwargs: 额外的上下文变量

    Returns:
        BoundLogger 实例

    Examples:
        ```python
        log = get_logger(__name__)
        log.info("post_indexed", id="abc123")

        # 或者带上下文变量
        log = get_logger(__name__, index="posts")
        log.info("index_created")
        ```
    """
    if name:
        kwargs["name"] = name
    return structlog.get_logger(**kwargs)


def bind_context(**kwargs) -> None:
    """绑定上下文变量（所有日志自动包含）

    Args:
        **kwargs: 上下文变量

    Examples:
        ```python
        bind_context(command="ready")
        log = get_logger()
        log.info("elasticsearch_ready")  # 自动包含 command
        ```
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """清空所有上下文变量"""
    structlog.contextvars.clear_contextvars()
