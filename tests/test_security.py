"""
Tests for wechat_minapp.security module.

Covers:
- MsgSecCheckArgs validation and body
- Scene / Suggest / Label helpers
- MsgSecCheckResult parsing and verdicts
"""

import pytest

from wechat_minapp.errors import ArgumentError
from wechat_minapp.security import (
    Label,
    MsgSecCheckArgs,
    MsgSecCheckResult,
    Scene,
    Suggest,
)


class TestMsgSecCheckArgs:

    def test_defaults(self):
        args = MsgSecCheckArgs(content="hi", scene=Scene.COMMENT, openid="o1")
        assert args.version == 2
        assert args.to_body() == {
            "content": "hi", "version": 2, "scene": 2, "openid": "o1",
        }

    @pytest.mark.parametrize("missing", ["content", "scene", "openid"])
    def test_missing_required_field(self, missing):
        kwargs = {"content": "hi", "scene": Scene.COMMENT, "openid": "o1"}
        del kwargs[missing]

        with pytest.raises(ArgumentError) as exc_info:
            MsgSecCheckArgs(**kwargs)

        assert exc_info.value.field == missing

    def test_content_too_long(self):
        with pytest.raises(ArgumentError):
            MsgSecCheckArgs(content="a" * 2501, scene=Scene.COMMENT, openid="o1")

    def test_content_at_limit(self):
        args = MsgSecCheckArgs(content="a" * 2500, scene=Scene.COMMENT, openid="o1")
        assert len(args.content) == 2500

    def test_signature_outside_profile(self):
        with pytest.raises(ArgumentError) as exc_info:
            MsgSecCheckArgs(
                content="x", scene=Scene.COMMENT, openid="o1", signature="s"
            )

        assert exc_info.value.field == "signature"

    def test_signature_in_profile(self):
        args = MsgSecCheckArgs(
            content="x", scene=Scene.PROFILE, openid="o1",
            nickname="n", signature="s",
        )
        body = args.to_body()
        assert body["signature"] == "s"
        assert body["nickname"] == "n"

    def test_int_scene_coerced(self):
        assert MsgSecCheckArgs(content="x", scene=4, openid="o").scene is (
            Scene.SOCIAL_LOG
        )

    def test_unknown_scene(self):
        with pytest.raises(ArgumentError):
            MsgSecCheckArgs(content="x", scene=9, openid="o")


class TestEnums:

    def test_scene_description(self):
        assert Scene.PROFILE.description == "profile"
        assert int(Scene.FORUM) == 3

    @pytest.mark.parametrize(
        "raw, expected",
        [("risky", Suggest.RISKY), ("PASS", Suggest.PASS),
         ("ReViEw", Suggest.REVIEW), ("invalid", Suggest.REVIEW)],
    )
    def test_suggest_parse(self, raw, expected):
        assert Suggest.parse(raw) is expected

    @pytest.mark.parametrize("raw", [5, ["pass"], {"v": 1}])
    def test_suggest_parse_non_string(self, raw):
        assert Suggest.parse(raw) is Suggest.REVIEW

    def test_suggest_priority(self):
        assert Suggest.RISKY.priority < Suggest.REVIEW.priority < Suggest.PASS.priority

    def test_label_helpers(self):
        assert Label.NORMAL.is_normal()
        assert Label.POLITICS.is_violation()
        assert Label.from_value(20013) is Label.COPYRIGHT
        assert Label.from_value(1) is None


class TestMsgSecCheckResult:

    def test_pass(self, mock_msg_sec_check_response):
        result = MsgSecCheckResult.from_dict(mock_msg_sec_check_response)

        assert result.is_success()
        assert result.is_pass()
        assert not result.is_risky()
        assert not result.needs_review()
        assert len(result.valid_details()) == 1
        assert result.detail[0].prob == 90.5

    def test_risky(self):
        result = MsgSecCheckResult.from_dict({
            "errcode": 0,
            "errmsg": "ok",
            "detail": [
                {"strategy": "keyword", "errcode": 0, "suggest": "risky",
                 "label": 20001, "keyword": "word"},
                {"strategy": "content_model", "errcode": 1},
            ],
            "result": {"suggest": "risky", "label": 20001},
        })

        assert result.is_risky()
        assert result.label is Label.POLITICS
        assert [d.keyword for d in result.valid_details()] == ["word"]

    def test_review(self):
        result = MsgSecCheckResult.from_dict(
            {"errcode": 0, "errmsg": "ok", "result": {"suggest": "review", "label": 20012}}
        )
        assert result.needs_review()

    def test_non_string_suggest_needs_review(self):
        result = MsgSecCheckResult.from_dict(
            {"errcode": 0, "errmsg": "ok", "result": {"suggest": 1, "label": 100}}
        )
        assert result.suggest is Suggest.REVIEW

    def test_without_result(self):
        result = MsgSecCheckResult.from_dict({"errcode": 0, "errmsg": "ok"})
        assert result.suggest is None
        assert not result.is_pass()
        assert result.detail == []

    def test_to_dict(self, mock_msg_sec_check_response):
        assert MsgSecCheckResult.from_dict(mock_msg_sec_check_response).to_dict() == {
            "errcode": 0,
            "errmsg": "ok",
            "suggest": "pass",
            "label": 100,
            "trace_id": "trace-001",
        }
