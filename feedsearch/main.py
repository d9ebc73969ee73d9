"""feedsearch 命令行入口

Usage:
    feedsearch ready                      # 等待 Elasticsearch 就绪并创建 posts 索引
    feedsearch health                     # 输出集群健康状态
    feedsearch search "hello world"       # 搜索文章
    feedsearch search tony --filter author --page 1 --per-page 10

Environment Variables:
    FEEDSEARCH_ELASTIC_URL       Elasticsearch 地址（默认 http://localhost）
    FEEDSEARCH_ELASTIC_PORT      Elasticsearch 端口（默认 9200）
    FEEDSEARCH_ELASTIC_DELAY_MS  启动最长等待时间（默认 10000）
    FEEDSEARCH_MOCK_ELASTIC      使用内存实现代替 Elasticsearch
    FEEDSEARCH_POSTS_URL         结果链接前缀
"""

import argparse
import asyncio
import json
import sys

from elasticsearch import ApiError, TransportError

from feedsearch import __version__
from feedsearch.config.settings import get_settings
from feedsearch.observability.logging import bind_context, configure_logging, get_logger
from feedsearch.services.search import (
    SearchConnectionError,
    SearchError,
    SearchFilter,
    close_search_client,
    get_post_search_service,
    reset_post_search_service,
)

logger = get_logger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        prog="feedsearch",
        description="Elasticsearch post search for the feed aggregator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"feedsearch {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("ready", help="Wait for Elasticsearch and set up the posts index")
    commands.add_parser("health", help="Print Elasticsearch cluster health")

    search = commands.add_parser("search", help="Search indexed posts")
    search.add_argument("text", help="Text to search, all terms must match")
    search.add_argument(
        "--filter",
        default=SearchFilter.POST.value,
        choices=[f.value for f in SearchFilter],
        help="Search post text/title or author",
    )
    search.add_argument("--page", type=int, default=0, help="Page number, starting at 0")
    search.add_argument("--per-page", type=int, default=None, help="Results per page")

    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    """执行命令，返回退出码"""
    bind_context(command=args.command)
    service = await get_post_search_service()

    try:
        if args.command == "ready":
            await service.wait_until_ready()
        elif args.command == "health":
            print(json.dumps(await service.check_connection(), indent=2))
        elif args.command == "search":
            response = await service.search(
                args.text,
                filter=args.filter,
                page=args.page,
                per_page=args.per_page,
            )
            print(json.dumps(response.to_dict(), indent=2))
    except SearchConnectionError as e:
        logger.error("startup_aborted", error=str(e))
        return 1
    except (SearchError, ApiError, TransportError) as e:
        logger.error("command_failed", error=str(e), error_type=type(e).__name__)
        return 1
    finally:
        await close_search_client()
        reset_post_search_service()

    return 0


def main(argv: list[str] | None = None) -> int:
    """命令行主函数"""
    args = parse_arguments(argv)
    settings = get_settings()

    configure_logging(
        environment=settings.environment.value,
        log_level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
    )

    return asyncio.run(run(args))


def sync_main() -> None:
    """console_scripts 入口"""
    sys.exit(main())


if __name__ == "__main__":
    sync_main()
