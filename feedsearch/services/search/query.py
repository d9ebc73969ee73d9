"""查询构建器

把 (text, filter, page, per_page) 转换成 Elasticsearch 查询：
- filter 决定搜索字段与排序（查表，未知 filter 回落到默认项）
- page/per_page 决定偏移量（受 max_result_window 限制）

使用示例:
    ```python
    from feedsearch.services.search.query import SearchQuery

    query = SearchQuery(text="hello world", filter="author", page=2, per_page=5)
    query.fields   # ["author"]
    query.sort     # [{"published": {"order": "desc"}}]
    query.offset   # 10
    query.to_dsl() # {"simple_query_string": {...}}
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from feedsearch.observability.logging import get_logger

logger = get_logger(__name__)

# Elasticsearch 默认的 index.max_result_window
MAX_RESULT_WINDOW = 10_000


class SearchFilter(str, Enum):
    """搜索过滤类型"""

    POST = "post"
    AUTHOR = "author"


@dataclass(frozen=True)
class FilterRule:
    """过滤规则

    Attributes:
        fields: 搜索字段
        sort: 排序，None 表示按相关度
    """

    fields: tuple[str, ...]
    sort: tuple[dict[str, Any], ...] | None = None


FILTER_RULES: dict[SearchFilter, FilterRule] = {
    SearchFilter.POST: FilterRule(fields=("text", "title")),
    SearchFilter.AUTHOR: FilterRule(
        fields=("author",),
        sort=({"published": {"order": "desc"}},),
    ),
}

DEFAULT_FILTER = SearchFilter.POST


def resolve_filter(filter: str | SearchFilter | None) -> SearchFilter:
    """解析过滤类型，未知值回落到 DEFAULT_FILTER（不报错）"""
    if isinstance(filter, SearchFilter):
        return filter
    try:
        return SearchFilter(filter)
    except ValueError:
        logger.debug("unknown_search_filter", filter=filter, fallback=DEFAULT_FILTER.value)
        return DEFAULT_FILTER


def fields_for_filter(filter: str | SearchFilter | None) -> list[str]:
    """获取 filter 对应的搜索字段"""
    return list(FILTER_RULES[resolve_filter(filter)].fields)


def sort_for_filter(filter: str | SearchFilter | None) -> list[dict[str, Any]] | None:
    """获取 filter 对应的排序，None 表示使用相关度排序"""
    sort = FILTER_RULES[resolve_filter(filter)].sort
    if sort is None:
        return None
    return [dict(clause) for clause in sort]


def pagination_offset(
    page: int,
    per_page: int,
    max_result_window: int = MAX_RESULT_WINDOW,
) -> int:
    """计算分页偏移量

    offset = page * per_page；若 offset + per_page 超出 max_result_window，
    则返回窗口内的最后一页（max_result_window - per_page）。

    超深分页因此会静默返回较早的一页，而不是报错。

    Args:
        page: 页码（从 0 开始）
        per_page: 每页数量
        max_result_window: 搜索引擎允许的 from + size 上限

    Returns:
        偏移量（不小于 0）
    """
    wanted = max(page, 0) * per_page
    if wanted + per_page <= max_result_window:
        return wanted
    return max(max_result_window - per_page, 0)


def build_simple_query(text: str, fields: list[str]) -> dict[str, Any]:
    """构建 simple_query_string 查询（所有词都必须匹配）"""
    return {
        "simple_query_string": {
            "query": text,
            "default_operator": "and",
            "fields": list(fields),
        }
    }


# ============== 查询与结果 ==============


@dataclass
class SearchQuery:
    """一次搜索请求"""

    text: str
    filter: str | SearchFilter | None = DEFAULT_FILTER
    page: int = 0
    per_page: int = 5
    max_result_window: int = MAX_RESULT_WINDOW

    def __post_init__(self) -> None:
        if self.per_page < 1:
            raise ValueError(f"per_page must be at least 1, got {self.per_page}")
        self.filter = resolve_filter(self.filter)

    @property
    def fields(self) -> list[str]:
        return fields_for_filter(self.filter)

    @property
    def sort(self) -> list[dict[str, Any]] | None:
        return sort_for_filter(self.filter)

    @property
    def offset(self) -> int:
        return pagination_offset(self.page, self.per_page, self.max_result_window)

    def to_dsl(self) -> dict[str, Any]:
        """生成查询 DSL（不含分页与排序）"""
        return build_simple_query(self.text, self.fields)


@dataclass
class SearchHit:
    """搜索命中项"""

    id: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "url": self.url}


@dataclass
class SearchResponse:
    """搜索响应

    Attributes:
        results: 匹配的文档总数（不受分页影响）
        values: 当前页的命中项
    """

    results: int
    values: list[SearchHit] = field(default_factory=list)

    @classmethod
    def from_es_response(cls, response: dict[str, Any], base_url: str) -> SearchResponse:
        """从 Elasticsearch 响应构建

        Args:
            response: Elasticsearch 搜索响应
            base_url: 结果链接前缀，链接为 f"{base_url}/{id}"
        """
        hits = response.get("hits", {})
        total = hits.get("total", 0)
        # track_total_hits 关闭时 total 可能是整数
        results = total.get("value", 0) if isinstance(total, dict) else int(total)

        values = [
            SearchHit(id=hit["_id"], url=f"{base_url}/{hit['_id']}")
            for hit in hits.get("hits", [])
        ]
        return cls(results=results, values=values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": self.results,
            "values": [hit.to_dict() for hit in self.values],
        }
