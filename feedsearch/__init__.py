"""feedsearch: 博客/订阅聚合系统的 Elasticsearch 文章搜索"""

__version__ = "0.1.0"
