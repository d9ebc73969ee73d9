"""搜索客户端抽象基类

定义搜索引擎客户端的通用接口，Elasticsearch 与内存实现都必须遵循。
接口方法不吞异常：容错策略由上层服务决定。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BaseSearchClient(ABC):
    """搜索客户端抽象基类"""

    @abstractmethod
    async def connect(self) -> None:
        """建立连接（幂等）"""

    @abstractmethod
    async def close(self) -> None:
        """关闭连接"""

    # ============== 索引管理 ==============

    @abstractmethod
    async def index_exists(self, index: str) -> bool:
        """检查索引是否存在"""

    @abstractmethod
    async def create_index(
        self,
        index: str,
        settings: dict[str, Any] | None = None,
        mappings: dict[str, Any] | None = None,
    ) -> None:
        """创建索引"""

    # ============== 文档操作 ==============

    @abstractmethod
    async def index_document(self, index: str, id: str, document: dict[str, Any]) -> None:
        """按 ID 写入（覆盖）文档"""

    @abstractmethod
    async def delete_document(self, index: str, id: str) -> None:
        """按 ID 删除文档"""

    # ============== 搜索 ==============

    @abstractmethod
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

        Returns:
            Elasticsearch 格式的响应体，至少包含 hits.total.value 与 hits.hits
        """

    # ============== 健康检查 ==============

    @abstractmethod
    async def cluster_health(self) -> dict[str, Any]:
        """获取集群健康状态（不可用时抛出异常）"""
