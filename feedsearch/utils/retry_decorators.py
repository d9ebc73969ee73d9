"""
重试与容错工具模块

- create_poll_retrying: 基于 tenacity 的固定间隔轮询（用于启动时等待 Elasticsearch）
- run_best_effort: 尽力而为的执行包装器，失败只记录日志，不向调用方抛出
"""

from collections.abc import Awaitable, Callable
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_never,
    wait_fixed,
)

from feedsearch.observability.logging import get_logger

logger = get_logger(__name__)


def create_poll_retrying(
    interval: float,
    before_sleep: Callable[[RetryCallState], None] | None = None,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> AsyncRetrying:
    """
    创建固定间隔、无次数上限的异步重试器

    轮询本身不设超时，由调用方负责取消（例如与计时器竞争）。

    Args:
        interval: 两次尝试之间的间隔（秒）
        before_sleep: 每次失败、进入等待前的回调
        exceptions: 需要重试的异常类型元组

    Returns:
        AsyncRetrying 实例

    Example:
        ```python
        async for attempt in create_poll_retrying(0.5):
            with attempt:
                health = await client.cluster_health()
        ```
    """
    return AsyncRetrying(
        stop=stop_never,
        wait=wait_fixed(interval),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep,
        reraise=True,
    )


async def run_best_effort(
    operation: Awaitable[Any],
    event: str,
    **log_context: Any,
) -> None:
    """
    尽力而为地执行一个异步操作

    操作抛出的任何 Exception 都会被记录为 error 日志并吞掉，调用方总是正常返回。
    asyncio.CancelledError 不属于 Exception，照常向上传播。

    Args:
        operation: 待执行的协程
        event: 失败时的日志事件名
        **log_context: 附加到失败日志的上下文（如文档 ID）

    Example:
        ```python
        await run_best_effort(
            client.delete_document("posts", post_id),
            "post_delete_failed",
            id=post_id,
        )
        ```
    """
    try:
        await operation
    except Exception as e:
        logger.error(event, error=str(e), error_type=type(e).__name__, **log_context)
