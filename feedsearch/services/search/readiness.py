"""启动就绪检查

Elasticsearch 部署后需要一段时间才能对外服务。ReadinessGate 在启动阶段
同时运行两个任务：

- 计时任务：delay_ms 之后抛出 SearchConnectionError
- 轮询任务：每 poll_interval_ms 调用一次 cluster_health，成功即结束

先结束的一方胜出，另一方被取消并等待其退出。连接成功后创建 posts 索引（仅一次）。

状态只会从 PENDING 进入 READY 或 FAILED，进入后不再改变。
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

from tenacity import RetryCallState

from feedsearch.observability.logging import get_logger
from feedsearch.services.search.base import BaseSearchClient
from feedsearch.services.search.exceptions import SearchConnectionError
from feedsearch.services.search.indexer import PostIndexer
from feedsearch.utils.retry_decorators import create_poll_retrying

logger = get_logger(__name__)

DEFAULT_DELAY_MS = 10_000
DEFAULT_POLL_INTERVAL_MS = 500


class ReadinessState(str, Enum):
    """就绪状态"""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class ReadinessGate:
    """搜索引擎就绪检查"""

    def __init__(
        self,
        client: BaseSearchClient,
        indexer: PostIndexer,
        delay_ms: int = DEFAULT_DELAY_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ):
        """
        Args:
            client: 搜索客户端
            indexer: 连接成功后用于创建索引
            delay_ms: 最长等待时间（毫秒）
            poll_interval_ms: 轮询间隔（毫秒）
        """
        self.client = client
        self.indexer = indexer
        self.delay_ms = delay_ms
        self.poll_interval_ms = poll_interval_ms
        self.state = ReadinessState.PENDING
        self._lock = asyncio.Lock()

    async def wait_until_ready(self) -> None:
        """等待搜索引擎就绪并创建索引

        Raises:
            SearchConnectionError: delay_ms 内未能确认连通性
        """
        # 并发调用共享同一次检查
        async with self._lock:
            if self.state is ReadinessState.READY:
                return
            if self.state is ReadinessState.FAILED:
                raise SearchConnectionError(delay_ms=self.delay_ms)

            try:
                health = await self._race()
            except SearchConnectionError:
                self.state = ReadinessState.FAILED
                logger.error("elasticsearch_unavailable", delay_ms=self.delay_ms)
                raise

            logger.info("elasticsearch_connected", status=health.get("status"))
            await self.indexer.ensure_index()
            self.state = ReadinessState.READY

    async def _race(self) -> dict[str, Any]:
        poller = asyncio.create_task(self._poll(), name="elasticsearch-readiness-poll")
        timer = asyncio.create_task(self._expire(), name="elasticsearch-readiness-timer")
        try:
            done, _ = await asyncio.wait({poller, timer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            poller.cancel()
            timer.cancel()
            await asyncio.gather(poller, timer, return_exceptions=True)

        if poller in done:
            return poller.result()
        return timer.result()

    async def _poll(self) -> dict[str, Any]:
        async for attempt in create_poll_retrying(
            self.poll_interval_ms / 1000,
            before_sleep=self._log_retry,
        ):
            with attempt:
                return await self.client.cluster_health()

    async def _expire(self) -> dict[str, Any]:
        await asyncio.sleep(self.delay_ms / 1000)
        raise SearchConnectionError(delay_ms=self.delay_ms)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "elasticsearch_connect_retry",
            attempt=retry_state.attempt_number,
            error=str(error) if error else None,
        )
