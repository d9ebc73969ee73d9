"""搜索客户端工厂

根据配置创建搜索客户端实例，并管理进程级单例。
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from feedsearch.config.settings import Settings, get_settings
from feedsearch.observability.logging import get_logger
from feedsearch.services.search.base import BaseSearchClient
from feedsearch.services.search.elasticsearch import ElasticsearchClient
from feedsearch.services.search.memory import MemorySearchClient

logger = get_logger(__name__)


class SearchClientFactory:
    """搜索客户端工厂"""

    @staticmethod
    def create(settings: Settings | None = None) -> BaseSearchClient:
        """创建搜索客户端实例（未连接）

        Args:
            settings: 配置，None 时使用全局配置

        Returns:
            mock_elastic 为真时返回 MemorySearchClient，否则返回 ElasticsearchClient
        """
        settings = settings or get_settings()

        if settings.mock_elastic:
            logger.info("search_client_mocked")
            return MemorySearchClient()

        return ElasticsearchClient(
            hosts=settings.elastic_hosts,
            username=settings.elastic_username,
            password=settings.elastic_password,
            api_key=settings.elastic_api_key,
            verify_certs=settings.elastic_verify_certs,
        )


# ============== 全局客户端实例 ==============

_client: BaseSearchClient | None = None


async def get_search_client(settings: Settings | None = None) -> BaseSearchClient:
    """获取搜索客户端实例（单例）

    Args:
        settings: 配置，仅在首次创建时生效

    Returns:
        已连接的客户端
    """
    global _client

    if _client is None:
        client = SearchClientFactory.create(settings)
        await client.connect()
        _client = client

    return _client


async def close_search_client() -> None:
    """关闭全局客户端"""
    global _client
    if _client is not None:
        await _client.close()
        _client = None


# ============== 上下文管理器 ==============


@asynccontextmanager
async def search_client_context(settings: Settings | None = None) -> AsyncIterator[BaseSearchClient]:
    """搜索客户端上下文管理器（不使用全局单例）

    Args:
        settings: 配置

    Yields:
        已连接的客户端
    """
    client = SearchClientFactory.create(settings)
    try:
        await client.connect()
        yield client
    finally:
        await client.close()
