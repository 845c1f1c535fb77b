import json
import logging

from scisubmit.models.enumerations import Role
from scisubmit.utils.logging_utils import (
    ContextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    log_context,
    update_log_context,
)
from scisubmit.utils.model_utils.base import REDACTED, _sanitize_payload


def _record(msg="hello", **extra):
    record = logging.LogRecord("scisubmit.paper", logging.INFO, __file__, 1, msg, None, None)
    record.__dict__.update(extra)
    return record


class TestLogContext:

    def test_nested_blocks_restore_previous_fields(self):
        clear_log_context()
        with log_context(actor_id="a1", action="submit"):
            with log_context(action="edit", skipped=None):
                assert get_log_context() == {"actor_id": "a1", "action": "edit"}
            assert get_log_context() == {"actor_id": "a1", "action": "submit"}
        assert get_log_context() == {}

    def test_update_and_clear(self):
        clear_log_context()
        update_log_context(request_id="r1", user="u1")
        update_log_context(user=None)
        assert get_log_context() == {"request_id": "r1"}
        clear_log_context("request_id")
        assert get_log_context() == {}


class TestContextFormatter:

    def test_text_appends_sorted_context(self):
        clear_log_context()
        with log_context(b="2", a="1"):
            line = ContextFormatter().format(_record())
        assert line.endswith("hello | a=1 b=2")

    def test_json_carries_extra_and_context(self):
        formatter = ContextFormatter(as_json=True, app_name="SciSubmit")
        clear_log_context()
        with log_context(actor_id="a1"):
            payload = json.loads(formatter.format(_record(paper_id="p1")))
        assert payload["message"] == "hello"
        assert payload["app"] == "SciSubmit"
        assert payload["paper_id"] == "p1"
        assert payload["context"] == {"actor_id": "a1"}


class TestCategorizedLoggers:

    def test_loggers_are_namespaced_and_isolated(self, app):
        log = get_logger("Review")
        assert log.name == "scisubmit.review"
        assert log.propagate is False
        assert get_logger("review") is log


class TestSanitizePayload:

    def test_masks_credentials_and_flattens_enums(self):
        cleaned = _sanitize_payload({"password_hash": "x", "refresh_jti": "y", "role": Role.ADMIN, "email": "a@b.c"})
        assert cleaned == {"password_hash": REDACTED, "refresh_jti": REDACTED, "role": "admin", "email": "a@b.c"}

    def test_matches_whole_words_of_field_names(self):
        cleaned = _sanitize_payload({
            "keywords": ["graphs", "nlp"],
            "api_key": "k",
            "verification_token_hash": "h",
            "monkey": "m",
        })
        assert cleaned["keywords"] == "['graphs', 'nlp']"
        assert cleaned["monkey"] == "m"
        assert cleaned["api_key"] == REDACTED
        assert cleaned["verification_token_hash"] == REDACTED
