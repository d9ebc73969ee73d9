"""搜索模块

提供 Elasticsearch 文章索引与搜索功能。

模块结构:
- base: 搜索客户端抽象基类
- elasticsearch: Elasticsearch 客户端封装
- memory: 内存客户端（mock 模式）
- factory: 客户端工厂与全局实例
- query: 查询构建器
- indexer: 文章索引器
- readiness: 启动就绪检查
- service: 文章搜索服务
"""

from feedsearch.services.search.base import BaseSearchClient
from feedsearch.services.search.elasticsearch import ElasticsearchClient
from feedsearch.services.search.exceptions import (
    DocumentNotFoundError,
    SearchConnectionError,
    SearchError,
)
from feedsearch.services.search.factory import (
    SearchClientFactory,
    close_search_client,
    get_search_client,
    search_client_context,
)
from feedsearch.services.search.indexer import (
    POSTS_INDEX,
    POSTS_INDEX_MAPPINGS,
    POSTS_INDEX_SETTINGS,
    Post,
    PostIndexer,
)
from feedsearch.services.search.memory import MemorySearchClient
from feedsearch.services.search.query import (
    FILTER_RULES,
    MAX_RESULT_WINDOW,
    SearchFilter,
    SearchHit,
    SearchQuery,
    SearchResponse,
    fields_for_filter,
    pagination_offset,
    sort_for_filter,
)
from feedsearch.services.search.readiness import ReadinessGate, ReadinessState
from feedsearch.services.search.service import (
    PostSearchService,
    get_post_search_service,
    reset_post_search_service,
)

__all__ = [
    # 客户端
    "BaseSearchClient",
    "ElasticsearchClient",
    "MemorySearchClient",
    "SearchClientFactory",
    "get_search_client",
    "close_search_client",
    "search_client_context",
    # 异常
    "SearchError",
    "SearchConnectionError",
    "DocumentNotFoundError",
    # 查询构建
    "SearchFilter",
    "FILTER_RULES",
    "MAX_RESULT_WINDOW",
    "SearchQuery",
    "SearchHit",
    "SearchResponse",
    "fields_for_filter",
    "sort_for_filter",
    "pagination_offset",
    # 索引
    "POSTS_INDEX",
    "POSTS_INDEX_SETTINGS",
    "POSTS_INDEX_MAPPINGS",
    "Post",
    "PostIndexer",
    # 就绪检查
    "ReadinessGate",
    "ReadinessState",
    # 服务
    "PostSearchService",
    "get_post_search_service",
    "reset_post_search_service",
]
