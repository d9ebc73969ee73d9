"""测试配置"""

from unittest.mock import MagicMock

import pytest

from feedsearch.config import settings as settings_module
from feedsearch.config.settings import Settings
from feedsearch.services.search import factory, service
from feedsearch.services.search.base import BaseSearchClient
from feedsearch.services.search.memory import MemorySearchClient


@pytest.fixture(autouse=True)
def reset_singletons():
    """每个测试前后清空全局单例"""
    settings_module._settings = None
    factory._client = None
    service._service = None
    yield
    settings_module._settings = None
    factory._client = None
    service._service = None


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """测试配置（内存模式）"""
    monkeypatch.setenv("FEEDSEARCH_MOCK_ELASTIC", "1")
    monkeypatch.setenv("FEEDSEARCH_POSTS_URL", "http://feeds.test/v1/posts")
    return Settings()


@pytest.fixture
def mock_client() -> MagicMock:
    """异步方法全部为 AsyncMock 的搜索客户端"""
    client = MagicMock(spec=BaseSearchClient)
    client.index_exists.return_value = False
    client.cluster_health.return_value = {"status": "green"}
    client.search.return_value = {"hits": {"total": {"value": 0}, "hits": []}}
    return client


@pytest.fixture
def memory_client() -> MemorySearchClient:
    """内存搜索客户端（connect 不做任何事，可直接使用）"""
    return MemorySearchClient()


@pytest.fixture
def post_data() -> dict:
    """测试文章"""
    return {
        "id": "a1b2c3",
        "text": "hello world",
        "title": "First post",
        "published": "2024-03-01T12:00:00Z",
        "author": "Jane Doe",
    }
