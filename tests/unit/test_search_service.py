"""文章搜索服务测试"""

import pytest

from feedsearch.services.search import (
    MemorySearchClient,
    PostSearchService,
    get_post_search_service,
)


# ============== 搜索执行 ==============


class TestSearch:
    """search"""

    @pytest.mark.asyncio
    async def test_default_post_search(self, mock_client) -> None:
        service = PostSearchService(mock_client)

        await service.search("hello world")

        mock_client.search.assert_awaited_once_with(
            "posts",
            {
                "simple_query_string": {
                    "query": "hello world",
                    "default_operator": "and",
                    "fields": ["text", "title"],
                }
            },
            size=5,
            from_=0,
            sort=None,
            source=["id"],
        )

    @pytest.mark.asyncio
    async def test_author_search_is_sorted_and_paginated(self, mock_client) -> None:
        service = PostSearchService(mock_client, per_page=10)

        await service.search("jane", filter="author", page=3)

        kwargs = mock_client.search.await_args.kwargs
        assert kwargs["from_"] == 30
        assert kwargs["size"] == 10
        assert kwargs["sort"] == [{"published": {"order": "desc"}}]
        assert mock_client.search.await_args.args[1]["simple_query_string"]["fields"] == ["author"]

    @pytest.mark.asyncio
    async def test_deep_page_is_clamped(self, mock_client) -> None:
        service = PostSearchService(mock_client)

        await service.search("hello", page=2000, per_page=10)

        assert mock_client.search.await_args.kwargs["from_"] == 9990

    @pytest.mark.asyncio
    async def test_results_are_normalized(self, mock_client) -> None:
        mock_client.search.return_value = {
            "hits": {"total": {"value": 42}, "hits": [{"_id": "x1", "_source": {}}]}
        }
        service = PostSearchService(mock_client, posts_url="https://feeds.example/v1/posts")

        response = await service.search("hello")

        assert response.to_dict() == {
            "results": 42,
            "values": [{"id": "x1", "url": "https://feeds.example/v1/posts/x1"}],
        }

    @pytest.mark.asyncio
    async def test_engine_failure_propagates(self, mock_client) -> None:
        mock_client.search.side_effect = ConnectionError("engine down")
        service = PostSearchService(mock_client)

        with pytest.raises(ConnectionError, match="engine down"):
            await service.search("hello")

    @pytest.mark.asyncio
    async def test_invalid_per_page_is_rejected(self, mock_client) -> None:
        service = PostSearchService(mock_client)

        with pytest.raises(ValueError):
            await service.search("hello", per_page=0)

        mock_client.search.assert_not_awaited()


class TestSearchAgainstMemoryIndex:
    """端到端：内存索引"""

    @pytest.mark.asyncio
    async def test_single_matching_document(self, memory_client, post_data) -> None:
        service = PostSearchService(memory_client, posts_url="http://localhost/v1/posts")
        await service.ensure_index()
        await service.index_post(post_data)

        response = await service.search("hello world")

        assert response.to_dict() == {
            "results": 1,
            "values": [{"id": "a1b2c3", "url": "http://localhost/v1/posts/a1b2c3"}],
        }

    @pytest.mark.asyncio
    async def test_all_terms_must_match(self, memory_client, post_data) -> None:
        service = PostSearchService(memory_client)
        await service.ensure_index()
        await service.index_post(post_data)

        response = await service.search("hello mars")

        assert response.results == 0
        assert response.values == []

    @pytest.mark.asyncio
    async def test_author_results_newest_first(self, memory_client) -> None:
        service = PostSearchService(memory_client)
        await service.ensure_index()
        for id, published in [("old", "2023-01-01"), ("new", "2024-06-01"), ("mid", "2023-09-01")]:
            await service.index_post(
                {"id": id, "text": "post", "title": id, "published": published, "author": "Jane Doe"}
            )
        await service.index_post(
            {"id": "other", "text": "post", "title": "x", "published": "2025-01-01", "author": "Bob"}
        )

        response = await service.search("jane", filter="author")

        assert response.results == 3
        assert [hit.id for hit in response.values] == ["new", "mid", "old"]

    @pytest.mark.asyncio
    async def test_deleted_post_is_not_found(self, memory_client, post_data) -> None:
        service = PostSearchService(memory_client)
        await service.ensure_index()
        await service.index_post(post_data)
        await service.delete_post(post_data["id"])

        response = await service.search("hello")

        assert response.results == 0


# ============== 健康检查与全局实例 ==============


class TestConnection:
    """check_connection"""

    @pytest.mark.asyncio
    async def test_returns_health(self, mock_client) -> None:
        service = PostSearchService(mock_client)

        assert await service.check_connection() == {"status": "green"}

    @pytest.mark.asyncio
    async def test_failure_propagates(self, mock_client) -> None:
        mock_client.cluster_health.side_effect = ConnectionError("refused")
        service = PostSearchService(mock_client)

        with pytest.raises(ConnectionError):
            await service.check_connection()


class TestGetPostSearchService:
    """get_post_search_service"""

    @pytest.mark.asyncio
    async def test_uses_settings(self, settings) -> None:
        service = await get_post_search_service(settings)

        assert isinstance(service.client, MemorySearchClient)
        assert service.posts_url == "http://feeds.test/v1/posts"
        assert service.per_page == 5
        assert service.readiness.delay_ms == 10_000
        assert await get_post_search_service() is service
