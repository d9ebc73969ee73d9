"""
工具模块

包含重试与容错相关的辅助函数。
"""

from feedsearch.utils.retry_decorators import create_poll_retrying, run_best_effort

__all__ = [
    "create_poll_retrying",
    "run_best_effort",
]
