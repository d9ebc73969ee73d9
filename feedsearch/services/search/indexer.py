"""文章索引器

负责 posts 索引的创建，以及单篇文章的写入与删除。

文章的原始数据由上游存储负责，这里只维护可搜索的投影，
所以所有操作都是尽力而为：失败只记录日志，不影响调用方。

使用示例:
    ```python
    from feedsearch.services.search.indexer import Post, PostIndexer

    indexer = PostIndexer(client)
    await indexer.ensure_index()
    await indexer.index_post(Post(id="abc", text="...", title="...", published=..., author="..."))
    await indexer.delete_post("abc")
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from feedsearch.observability.logging import get_logger
from feedsearch.services.search.base import BaseSearchClient
from feedsearch.utils.retry_decorators import run_best_effort

logger = get_logger(__name__)

POSTS_INDEX = "posts"

# 自动补全：索引时用 edge n-gram 展开前缀，搜索时只做小写，不再展开用户输入
POSTS_INDEX_SETTINGS: dict[str, Any] = {
    "analysis": {
        "analyzer": {
            "autocomplete_analyzer": {
                "tokenizer": "autocomplete",
                "filter": ["lowercase", "remove_duplicates"],
            },
            "autocomplete_search_analyzer": {
                "tokenizer": "lowercase",
            },
        },
        "tokenizer": {
            "autocomplete": {
                "type": "edge_ngram",
                "min_gram": 1,
                "max_gram": 20,
                "token_chars": ["letter", "digit"],
            },
        },
    },
}

# author 使用标准分析器，author.autocomplete 子字段用于前缀补全
POSTS_INDEX_MAPPINGS: dict[str, Any] = {
    "properties": {
        "author": {
            "type": "text",
            "analyzer": "standard",
            "fields": {
                "autocomplete": {
                    "type": "text",
                    "analyzer": "autocomplete_analyzer",
                    "search_analyzer": "autocomplete_search_analyzer",
                },
            },
        },
    },
}


@dataclass
class Post:
    """文章的可搜索投影

    Attributes:
        id: 上游存储分配的文章 ID
        text: 正文
        title: 标题
        published: 发布时间
        author: 作者
    """

    id: str
    text: str | None = None
    title: str | None = None
    published: datetime | str | None = None
    author: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Post:
        return cls(
            id=str(data["id"]),
            text=data.get("text"),
            title=data.get("title"),
            published=data.get("published"),
            author=data.get("author"),
        )

    def to_document(self) -> dict[str, Any]:
        """转换为索引文档（ID 作为文档 _id，不写入文档体）"""
        published = self.published
        if isinstance(published, datetime):
            published = published.isoformat()
        return {
            "text": self.text,
            "title": self.title,
            "published": published,
            "author": self.author,
        }


class PostIndexer:
    """文章索引器

    - ensure_index: 索引不存在时按 POSTS_INDEX_SETTINGS / POSTS_INDEX_MAPPINGS 创建
    - index_post / delete_post: 单篇文章写入与删除
    """

    def __init__(self, client: BaseSearchClient, index: str = POSTS_INDEX):
        """初始化文章索引器

        Args:
            client: 搜索客户端
            index: 索引名称
        """
        self.client = client
        self.index = index

    async def ensure_index(self) -> None:
        """确保索引存在（幂等）

        已存在的索引不会被修改。检查或创建失败时只记录日志。
        """
        await run_best_effort(self._create_index_if_missing(), "posts_index_setup_failed", index=self.index)

    async def _create_index_if_missing(self) -> None:
        if await self.client.index_exists(self.index):
            logger.debug("posts_index_exists", index=self.index)
            return

        await self.client.create_index(
            self.index,
            settings=POSTS_INDEX_SETTINGS,
            mappings=POSTS_INDEX_MAPPINGS,
        )

    async def index_post(self, post: Post | dict[str, Any]) -> None:
        """索引单篇文章（存在则覆盖），失败只记录日志

        Args:
            post: 文章或包含 id/text/title/published/author 的字典
        """
        if isinstance(post, dict):
            post = Post.from_dict(post)

        await run_best_effort(
            self.client.index_document(self.index, post.id, post.to_document()),
            "post_index_failed",
            index=self.index,
            id=post.id,
        )

    async def delete_post(self, post_id: str) -> None:
        """删除已索引的文章，失败（包括文档不存在）只记录日志

        Args:
            post_id: 文章 ID
        """
        await run_best_effort(
            self.client.delete_document(self.index, post_id),
            "post_delete_failed",
            index=self.index,
            id=post_id,
        )
