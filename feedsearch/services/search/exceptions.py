"""搜索模块异常定义"""

ELASTIC_UNAVAILABLE_MESSAGE = (
    "Unable to connect to Elasticsearch. Use `FEEDSEARCH_MOCK_ELASTIC=1` in your `.env` "
    "to mock Elasticsearch, or install and start Elasticsearch before running feedsearch."
)


class SearchError(Exception):
    """搜索模块异常基类"""


class SearchConnectionError(SearchError, ConnectionError):
    """在限定时间内无法连接到搜索引擎"""

    def __init__(self, message: str = ELASTIC_UNAVAILABLE_MESSAGE, *, delay_ms: int | None = None):
        """
        Args:
            message: 错误消息
            delay_ms: 已等待的时长（毫秒）
        """
        super().__init__(message)
        self.delay_ms = delay_ms


class DocumentNotFoundError(SearchError, LookupError):
    """文档不存在（内存模式删除不存在的文档时抛出）"""

    def __init__(self, index: str, id: str):
        super().__init__(f"document {id!r} not found in index {index!r}")
        self.index = index
        self.id = id
