"""内存搜索客户端

在没有 Elasticsearch 的环境下（本地开发、测试）模拟 feedsearch 用到的那部分接口：
- 索引存在性检查与创建
- 文档写入、删除
- simple_query_string 查询（AND/OR、末尾 * 前缀匹配）
- 排序、分页、_source 过滤

不做任何分析器处理，只按小写的字母数字切词。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from feedsearch.observability.logging import get_logger
from feedsearch.services.search.base import BaseSearchClient
from feedsearch.services.search.exceptions import DocumentNotFoundError, SearchError

logger = get_logger(__name__)

_TOKEN_RE = re.compile(r"[^\W_]+\*?")


def tokenize(text: Any) -> list[str]:
    """按字母数字切词并转小写（保留查询词末尾的 *）"""
    if text is None:
        return []
    return _TOKEN_RE.findall(str(text).lower())


@dataclass
class MemoryIndex:
    """内存索引"""

    name: str
    settings: dict[str, Any] = field(default_factory=dict)
    mappings: dict[str, Any] = field(default_factory=dict)
    documents: dict[str, dict[str, Any]] = field(default_factory=dict)


class MemorySearchClient(BaseSearchClient):
    """内存搜索客户端

    FEEDSEARCH_MOCK_ELASTIC=1 时替代 ElasticsearchClient。
    """

    def __init__(self) -> None:
        self._indices: dict[str, MemoryIndex] = {}

    async def connect(self) -> None:
        logger.info("memory_search_client_ready")

    async def close(self) -> None:
        self._indices.clear()

    def _get_index(self, index: str) -> MemoryIndex:
        try:
            return self._indices[index]
        except KeyError:
            raise SearchError(f"no such index [{index}]") from None

    # ============== 索引管理 ==============

    async def index_exists(self, index: str) -> bool:
        return index in self._indices

    async def create_index(
        self,
        index: str,
        settings: dict[str, Any] | None = None,
        mappings: dict[str, Any] | None = None,
    ) -> None:
        if index in self._indices:
            raise SearchError(f"index [{index}] already exists")
        self._indices[index] = MemoryIndex(
            name=index,
            settings=settings or {},
            mappings=mappings or {},
        )
        logger.info("index_created", index=index)

    # ============== 文档操作 ==============

    async def index_document(self, index: str, id: str, document: dict[str, Any]) -> None:
        # 与 Elasticsearch 的默认行为一致：写入时自动创建索引
        target = self._indices.setdefault(index, MemoryIndex(name=index))
        target.documents[str(id)] = dict(document)

    async def delete_document(self, index: str, id: str) -> None:
        target = self._get_index(index)
        if target.documents.pop(str(id), None) is None:
            raise DocumentNotFoundError(index, str(id))

    # ============== 搜索 ==============

    async def search(
        self,
        index: str,
        query: dict[str, Any],
        size: int = 10,
        from_: int = 0,
        sort: list[dict[str, Any]] | None = None,
        source: bool | list[str] | None = None,
    ) -> dict[str, Any]:
        target = self._get_index(index)

        matched = [
            (doc_id, doc)
            for doc_id, doc in target.documents.items()
            if _matches(query, doc)
        ]
        for clause in reversed(sort or []):
            for sort_field, options in clause.items():
                descending = (options or {}).get("order", "asc") == "desc"
                matched.sort(key=lambda item: str(item[1].get(sort_field) or ""), reverse=descending)

        page = matched[from_ : from_ + size]
        return {
            "hits": {
                "total": {"value": len(matched), "relation": "eq"},
                "hits": [
                    {"_index": index, "_id": doc_id, "_source": _filter_source(doc, source)}
                    for doc_id, doc in page
                ],
            }
        }

    # ============== 健康检查 ==============

    async def cluster_health(self) -> dict[str, Any]:
        return {
            "cluster_name": "memory",
            "status": "green",
            "number_of_nodes": 1,
        }


def _filter_source(document: dict[str, Any], source: bool | list[str] | None) -> dict[str, Any]:
    if source is False:
        return {}
    if isinstance(source, list):
        return {key: value for key, value in document.items() if key in source}
    return dict(document)


def _matches(query: dict[str, Any], document: dict[str, Any]) -> bool:
    if "match_all" in query:
        return True
    if "simple_query_string" not in query:
        raise SearchError(f"unsupported query: {sorted(query)}")

    options = query["simple_query_string"]
    terms = tokenize(options.get("query", ""))
    if not terms:
        return False

    fields = options.get("fields") or list(document)
    tokens: set[str] = set()
    for name in fields:
        # 子字段（author.autocomplete）按父字段处理
        tokens.update(tokenize(document.get(name.split(".", 1)[0])))

    hits = [_term_matches(term, tokens) for term in terms]
    if options.get("default_operator", "or").lower() == "and":
        return all(hits)
    return any(hits)


def _term_matches(term: str, tokens: set[str]) -> bool:
    if term.endswith("*"):
        prefix = term[:-1]
        return any(token.startswith(prefix) for token in tokens)
    return term in tokens
