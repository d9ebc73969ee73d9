"""Elasticsearch 客户端封装

提供异步 Elasticsearch 客户端，支持：
- 索引管理（存在性检查、创建）
- 文档写入与删除
- 全文搜索
- 集群健康检查

所有方法都会把底层异常原样抛出，由调用方决定吞掉（写入类操作）还是传播（搜索）。

使用示例:
    ```python
    from feedsearch.services.search.elasticsearch import ElasticsearchClient

    es = ElasticsearchClient(hosts=["http://localhost:9200"])
    await es.connect()

    if not await es.index_exists("posts"):
        await es.create_index("posts", mappings={"properties": {"title": {"type": "text"}}})

    await es.index_document("posts", "1", {"title": "Hello", "text": "World"})

    response = await es.search("posts", {"match": {"text": "world"}})
    ```
"""

from __future__ import annotations

from typing import Any

from elasticsearch import AsyncElasticsearch

from feedsearch.observability.logging import get_logger
from feedsearch.services.search.base import BaseSearchClient

logger = get_logger(__name__)


def _body(response: Any) -> dict[str, Any]:
    """取出 elasticsearch-py 响应对象中的响应体"""
    return getattr(response, "body", response)


class ElasticsearchClient(BaseSearchClient):
    """Elasticsearch 异步客户端封装

    内部持有一个 AsyncElasticsearch 实例，连接池由 elasticsearch-py 管理，
    可被多个协程并发使用。
    """

    def __init__(
        self,
        hosts: str | list[str] | None = None,
        username: str | None = None,
        password: str | None = None,
        api_key: str | None = None,
        verify_certs: bool = True,
        **kwargs,
    ):
        """初始化 Elasticsearch 客户端

        Args:
            hosts: Elasticsearch 主机地址，支持多个
            username: 用户名
            password: 密码
            api_key: API Key（替代用户名密码）
            verify_certs: 是否验证证书
            **kwargs: 其他 elasticsearch-py 参数
        """
        self.hosts = hosts or ["http://localhost:9200"]
        self.username = username
        self.password = password
        self.api_key = api_key
        self.verify_certs = verify_certs
        self._client: AsyncElasticsearch | None = None
        self._extra_kwargs = kwargs

    async def connect(self) -> None:
        """创建底层客户端（幂等）

        不发起网络请求：启动阶段 Elasticsearch 可能尚未就绪，
        连通性由 ReadinessGate 通过 cluster_health 轮询确认。
        """
        if self._client is not None:
            return

        # 构建认证信息
        if self.api_key:
            auth = {"api_key": self.api_key}
        elif self.username and self.password:
            auth = {"basic_auth": (self.username, self.password)}
        else:
            auth = {}

        self._client = AsyncElasticsearch(
            hosts=self.hosts,
            verify_certs=self.verify_certs,
            **auth,
            **self._extra_kwargs,
        )
        logger.debug("elasticsearch_client_created", hosts=self.hosts)

    async def close(self) -> None:
        """关闭客户端连接"""
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("elasticsearch_closed")

    @property
    def client(self) -> AsyncElasticsearch:
        """获取底层客户端（确保已连接）"""
        if self._client is None:
            raise RuntimeError("Elasticsearch client is not connected. Call connect() first.")
        return self._client

    # ============== 索引管理 ==============

    async def index_exists(self, index: str) -> bool:
        """检查索引是否存在

        Args:
            index: 索引名称

        Returns:
            是否存在（HEAD 请求返回 404 时为 False）
        """
        return bool(await self.client.indices.exists(index=index))

    async def create_index(
        self,
        index: str,
        settings: dict[str, Any] | None = None,
        mappings: dict[str, Any] | None = None,
    ) -> None:
        """创建索引

        Args:
            index: 索引名称
            settings: 索引设置（分析器、分词器等）
            mappings: 字段映射
        """
        await self.client.indices.create(index=index, settings=settings, mappings=mappings)
        logger.info("index_created", index=index)

    # ============== 文档操作 ==============

    async def index_document(self, index: str, id: str, document: dict[str, Any]) -> None:
        """索引单个文档（存在则覆盖）

        Args:
            index: 索引名称
            id: 文档 ID
            document: 文档内容
        """
        await self.client.index(index=index, id=id, document=document)
        logger.debug("document_indexed", index=index, id=id)

    async def delete_document(self, index: str, id: str) -> None:
        """删除文档

        Args:
            index: 索引名称
            id: 文档 ID

        Raises:
            elasticsearch.NotFoundError: 文档不存在
        """
        await self.client.delete(index=index, id=id)
        logger.debug("document_deleted", index=index, id=id)

    # ============== 搜索操作 ==============

    async def search(
        self,
        index: str,
        query: dict[str, Any],
        size: int = 10,
        from_: int = 0,
        sort: list[dict[str, Any]] | None = None,
        source: bool | list[str] | None = None,
    ) -> dict[str, Any]:
        """执行搜索

        Args:
            index: 索引名称
            query: 搜索查询 DSL
            size: 返回结果数
            from_: 偏移量
            sort: 排序（None 时按相关度）
            source: 返回字段配置

        Returns:
            搜索结果
        """
        params: dict[str, Any] = {}
        if sort:
            params["sort"] = sort
        if source is not None:
            params["source"] = source

        response = _body(
            await self.client.search(
                index=index,
                query=query,
                size=size,
                from_=from_,
                **params,
            )
        )

        logger.debug(
            "search_executed",
            index=index,
            hits=len(response.get("hits", {}).get("hits", [])),
        )
        return response

    # ============== 健康检查 ==============

    async def cluster_health(self) -> dict[str, Any]:
        """获取集群健康状态

        Returns:
            健康状态信息
        """
        return _body(await self.client.cluster.health())
