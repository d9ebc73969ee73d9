"""文章搜索服务

对外的统一入口，组合搜索客户端、索引器与就绪检查：

- ensure_index / index_post / delete_post: 尽力而为，失败只记录日志
- search / check_connection: 失败向调用方传播
- wait_until_ready: 启动时等待搜索引擎可用，超时抛出 SearchConnectionError

使用示例:
    ```python
    from feedsearch.services.search import get_post_search_service

    service = await get_post_search_service()
    await service.wait_until_ready()

    await service.index_post({"id": "abc", "text": "hello world", ...})
    response = await service.search("hello world")
    response.to_dict()  # {"results": 1, "values": [{"id": "abc", "url": ".../abc"}]}
    ```
"""

from __future__ import annotations

from typing import Any

from feedsearch.config.settings import Settings, get_settings
from feedsearch.observability.logging import get_logger
from feedsearch.services.search.base import BaseSearchClient
from feedsearch.services.search.factory import get_search_client
from feedsearch.services.search.indexer import POSTS_INDEX, Post, PostIndexer
from feedsearch.services.search.query import (
    DEFAULT_FILTER,
    MAX_RESULT_WINDOW,
    SearchFilter,
    SearchQuery,
    SearchResponse,
)
from feedsearch.services.search.readiness import (
    DEFAULT_DELAY_MS,
    DEFAULT_POLL_INTERVAL_MS,
    ReadinessGate,
)

logger = get_logger(__name__)

DEFAULT_POSTS_URL = "http://localhost/v1/posts"


class PostSearchService:
    """文章搜索服务"""

    def __init__(
        self,
        client: BaseSearchClient,
        index: str = POSTS_INDEX,
        posts_url: str = DEFAULT_POSTS_URL,
        per_page: int = 5,
        max_result_window: int = MAX_RESULT_WINDOW,
        delay_ms: int = DEFAULT_DELAY_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ):
        """初始化文章搜索服务

        Args:
            client: 搜索客户端
            index: 索引名称
            posts_url: 结果链接前缀
            per_page: 默认每页数量
            max_result_window: 分页窗口上限
            delay_ms: 启动时最长等待时间（毫秒）
            poll_interval_ms: 启动时轮询间隔（毫秒）
        """
        self.client = client
        self.index = index
        self.posts_url = posts_url
        self.per_page = per_page
        self.max_result_window = max_result_window
        self.indexer = PostIndexer(client, index=index)
        self.readiness = ReadinessGate(
            client,
            self.indexer,
            delay_ms=delay_ms,
            poll_interval_ms=poll_interval_ms,
        )

    @classmethod
    def from_settings(cls, client: BaseSearchClient, settings: Settings | None = None) -> PostSearchService:
        """按配置创建服务"""
        settings = settings or get_settings()
        return cls(
            client,
            index=settings.elastic_index,
            posts_url=settings.posts_url,
            per_page=settings.elastic_max_results_per_page,
            max_result_window=settings.elastic_max_result_window,
            delay_ms=settings.elastic_delay_ms,
            poll_interval_ms=settings.elastic_poll_interval_ms,
        )

    # ============== 索引 ==============

    async def ensure_index(self) -> None:
        await self.indexer.ensure_index()

    async def index_post(self, post: Post | dict[str, Any]) -> None:
        await self.indexer.index_post(post)

    async def delete_post(self, post_id: str) -> None:
        await self.indexer.delete_post(post_id)

    # ============== 搜索 ==============

    async def search(
        self,
        text: str,
        filter: str | SearchFilter | None = DEFAULT_FILTER,
        page: int = 0,
        per_page: int | None = None,
    ) -> SearchResponse:
        """搜索文章

        Args:
            text: 搜索文本（所有词都必须匹配）
            filter: "post" 搜索标题与正文；"author" 搜索作者并按发布时间倒序
            page: 页码（从 0 开始）
            per_page: 每页数量，None 时使用默认值

        Returns:
            SearchResponse

        Raises:
            ValueError: per_page 小于 1
            搜索引擎的异常原样传播
        """
        query = SearchQuery(
            text=text,
            filter=filter,
            page=page,
            per_page=per_page if per_page is not None else self.per_page,
            max_result_window=self.max_result_window,
        )

        response = await self.client.search(
            self.index,
            query.to_dsl(),
            size=query.per_page,
            from_=query.offset,
            sort=query.sort,
            source=["id"],
        )

        result = SearchResponse.from_es_response(response, self.posts_url)
        logger.debug(
            "posts_searched",
            filter=query.filter.value,
            page=page,
            offset=query.offset,
            results=result.results,
        )
        return result

    # ============== 健康检查 ==============

    async def check_connection(self) -> dict[str, Any]:
        """检查搜索引擎连通性

        Returns:
            集群健康状态

        Raises:
            不可用时抛出底层异常
        """
        return await self.client.cluster_health()

    async def wait_until_ready(self) -> None:
        """等待搜索引擎就绪并创建索引

        Raises:
            SearchConnectionError: 超时
        """
        await self.readiness.wait_until_ready()


# ============== 全局服务实例 ==============

_service: PostSearchService | None = None


async def get_post_search_service(settings: Settings | None = None) -> PostSearchService:
    """获取文章搜索服务实例（单例）

    Args:
        settings: 配置，仅在首次创建时生效

    Returns:
        PostSearchService 实例
    """
    global _service

    if _service is None:
        client = await get_search_client(settings)
        _service = PostSearchService.from_settings(client, settings)

    return _service


def reset_post_search_service() -> None:
    """清除全局服务实例（不关闭客户端）"""
    global _service
    _service = None
