"""文章索引器测试"""

from datetime import datetime, timezone

import pytest
from structlog.testing import capture_logs

from feedsearch.services.search.indexer import (
    POSTS_INDEX_MAPPINGS,
    POSTS_INDEX_SETTINGS,
    Post,
    PostIndexer,
)


# ============== 索引创建 ==============


class TestEnsureIndex:
    """索引创建"""

    @pytest.mark.asyncio
    async def test_creates_missing_index(self, mock_client) -> None:
        indexer = PostIndexer(mock_client)

        await indexer.ensure_index()

        mock_client.index_exists.assert_awaited_once_with("posts")
        mock_client.create_index.assert_awaited_once_with(
            "posts",
            settings=POSTS_INDEX_SETTINGS,
            mappings=POSTS_INDEX_MAPPINGS,
        )

    @pytest.mark.asyncio
    async def test_existing_index_is_left_alone(self, mock_client) -> None:
        mock_client.index_exists.return_value = True
        indexer = PostIndexer(mock_client)

        await indexer.ensure_index()

        mock_client.create_index.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_is_idempotent(self, memory_client) -> None:
        """第二次调用不再创建索引"""
        indexer = PostIndexer(memory_client)

        await indexer.ensure_index()
        with capture_logs() as logs:
            await indexer.ensure_index()

        assert await memory_client.index_exists("posts")
        assert not [log for log in logs if log["event"] == "index_created"]
        assert not [log for log in logs if log["log_level"] == "error"]

    @pytest.mark.asyncio
    async def test_existence_check_failure_is_logged(self, mock_client) -> None:
        mock_client.index_exists.side_effect = ConnectionError("refused")
        indexer = PostIndexer(mock_client)

        with capture_logs() as logs:
            await indexer.ensure_index()

        mock_client.create_index.assert_not_awaited()
        assert logs[-1]["event"] == "posts_index_setup_failed"
        assert logs[-1]["log_level"] == "error"
        assert logs[-1]["error"] == "refused"

    @pytest.mark.asyncio
    async def test_create_failure_is_logged(self, mock_client) -> None:
        mock_client.create_index.side_effect = RuntimeError("resource_already_exists_exception")
        indexer = PostIndexer(mock_client)

        with capture_logs() as logs:
            await indexer.ensure_index()

        assert logs[-1]["event"] == "posts_index_setup_failed"
        assert logs[-1]["index"] == "posts"

    def test_autocomplete_analysis(self) -> None:
        analysis = POSTS_INDEX_SETTINGS["analysis"]
        tokenizer = analysis["tokenizer"]["autocomplete"]

        assert tokenizer == {
            "type": "edge_ngram",
            "min_gram": 1,
            "max_gram": 20,
            "token_chars": ["letter", "digit"],
        }
        assert analysis["analyzer"]["autocomplete_analyzer"]["filter"] == [
            "lowercase",
            "remove_duplicates",
        ]
        assert analysis["analyzer"]["autocomplete_search_analyzer"] == {"tokenizer": "lowercase"}

    def test_author_mapping_has_autocomplete_subfield(self) -> None:
        author = POSTS_INDEX_MAPPINGS["properties"]["author"]

        assert author["analyzer"] == "standard"
        assert author["fields"]["autocomplete"] == {
            "type": "text",
            "analyzer": "autocomplete_analyzer",
            "search_analyzer": "autocomplete_search_analyzer",
        }


# ============== 文档写入与删除 ==============


class TestPost:
    """Post 投影"""

    def test_to_document_excludes_id(self, post_data) -> None:
        post = Post.from_dict(post_data)

        assert post.to_document() == {
            "text": "hello world",
            "title": "First post",
            "published": "2024-03-01T12:00:00Z",
            "author": "Jane Doe",
        }

    def test_datetime_is_serialized(self) -> None:
        post = Post(id="1", published=datetime(2024, 3, 1, 12, tzinfo=timezone.utc))

        assert post.to_document()["published"] == "2024-03-01T12:00:00+00:00"


class TestIndexPost:
    """文档写入"""

    @pytest.mark.asyncio
    async def test_index_post(self, mock_client, post_data) -> None:
        indexer = PostIndexer(mock_client)

        await indexer.index_post(post_data)

        mock_client.index_document.assert_awaited_once_with(
            "posts",
            "a1b2c3",
            {
                "text": "hello world",
                "title": "First post",
                "published": "2024-03-01T12:00:00Z",
                "author": "Jane Doe",
            },
        )

    @pytest.mark.asyncio
    async def test_index_failure_is_swallowed(self, mock_client, post_data) -> None:
        mock_client.index_document.side_effect = ConnectionError("index_not_found_exception")
        indexer = PostIndexer(mock_client)

        with capture_logs() as logs:
            result = await indexer.index_post(Post.from_dict(post_data))

        assert result is None
        mock_client.index_document.assert_awaited_once()
        assert logs[-1]["event"] == "post_index_failed"
        assert logs[-1]["id"] == "a1b2c3"
        assert logs[-1]["log_level"] == "error"


class TestDeletePost:
    """文档删除"""

    @pytest.mark.asyncio
    async def test_delete_post(self, mock_client) -> None:
        indexer = PostIndexer(mock_client)

        await indexer.delete_post("a1b2c3")

        mock_client.delete_document.assert_awaited_once_with("posts", "a1b2c3")

    @pytest.mark.asyncio
    async def test_delete_missing_post_is_swallowed(self, memory_client) -> None:
        indexer = PostIndexer(memory_client)
        await indexer.ensure_index()

        with capture_logs() as logs:
            await indexer.delete_post("never-indexed")

        assert logs[-1]["event"] == "post_delete_failed"
        assert logs[-1]["error_type"] == "DocumentNotFoundError"

    @pytest.mark.asyncio
    async def test_indexed_post_can_be_deleted(self, memory_client, post_data) -> None:
        indexer = PostIndexer(memory_client)
        await indexer.ensure_index()
        await indexer.index_post(post_data)

        with capture_logs() as logs:
            await indexer.delete_post("a1b2c3")

        assert not logs
        response = await memory_client.search("posts", {"match_all": {}})
        assert response["hits"]["total"]["value"] == 0
