"""
Categorized application logging.

    from scisubmit.utils.logging_utils import get_logger, log_context

    log = get_logger("paper")
    with log_context(action="submit", actor_id=user.id):
        log.info("paper submitted id=%s", paper.id)
"""

from .manager import (
    CATEGORY_FILES,
    ContextFormatter,
    LoggerManager,
    clear_log_context,
    get_log_context,
    get_logger,
    init_logger,
    log_context,
    update_log_context,
)

__all__ = [
    "CATEGORY_FILES",
    "ContextFormatter",
    "LoggerManager",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "init_logger",
    "log_context",
    "update_log_context",
]
