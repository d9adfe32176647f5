"""
End-to-end webhook tests: signed HTTP API event in, Slack calls out.

AWS and Slack are replaced by in-memory fakes wired in conftest.py.
"""

import base64
import json
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from conftest import sign_request, slack_api_error, slack_event
from handlers import main, slack_events
from services import command_handlers, config_service


def _mention(text, ts="100.1", **extra):
    event = {"type": "app_mention", "text": text, "channel": "C1", "user": "U1", "ts": ts}
    event.update(extra)
    return event


def test_hello_mention_replies_hello_world(wired):
    resp = main.lambda_handler(slack_event(_mention("@bot hello")), None)

    assert resp["statusCode"] == 200
    assert resp["headers"]["Content-Type"] == "application/json"
    assert json.loads(resp["body"]) == {"result": "ok"}
    assert [c["text"] for c in wired["slack"].posted] == ["Hello, World!"]
    assert "C1-100.1-U1" in wired["table"].items


def test_duplicate_ask_delivery_queries_kb_once(wired, monkeypatch):
    kb = MagicMock()
    kb.ask.return_value = "X is documented in the handbook."
    monkeypatch.setattr(command_handlers, "_get_bedrock_service", lambda: kb)

    first = slack_events.lambda_handler(slack_event(_mention("@bot ask what is X")), None)
    second = slack_events.lambda_handler(slack_event(_mention("@bot ask what is X")), None)

    assert first["statusCode"] == 200
    assert second["statusCode"] == 200
    assert json.loads(second["body"]) == {"result": "duplicate_ignored"}
    kb.ask.assert_called_once_with("what is X")
    assert len(wired["slack"].posted) == 1
    assert len(wired["slack"].updated) == 1


def test_list_files_end_to_end_uses_configured_bucket(wired, monkeypatch):
    s3 = MagicMock()
    s3.list_objects_v2.return_value = {"Contents": []}
    monkeypatch.setattr("repositories.s3_repo.boto3.client", lambda name: s3)

    resp = slack_events.lambda_handler(slack_event(_mention("@bot list-files")), None)

    assert resp["statusCode"] == 200
    s3.list_objects_v2.assert_called_once_with(Bucket="test-docs-bucket", MaxKeys=20)
    assert wired["slack"].updated[0]["text"] == "No files found in the bucket."


def test_deleted_progress_message_still_returns_200(wired, monkeypatch):
    s3 = MagicMock()
    s3.list_objects_v2.return_value = {"Contents": []}
    monkeypatch.setattr("repositories.s3_repo.boto3.client", lambda name: s3)
    wired["slack"].update_error = slack_api_error("message_not_found")

    resp = slack_events.lambda_handler(slack_event(_mention("@bot list-files")), None)

    assert resp["statusCode"] == 200
    assert json.loads(resp["body"]) == {"result": "ok"}
    assert wired["slack"].posted[-1]["text"] == "No files found in the bucket."


def test_invalid_signature_is_rejected_before_dispatch(wired):
    event = slack_event(
        _mention("@bot hello"),
        headers=sign_request("something else entirely"),
    )

    resp = slack_events.lambda_handler(event, None)

    assert resp["statusCode"] == 401
    assert json.loads(resp["body"]) == {"error": "invalid signature"}
    assert wired["slack"].posted == []
    assert wired["table"].put_calls == 0


def test_missing_signature_headers_are_rejected(wired):
    resp = slack_events.lambda_handler(slack_event(_mention("@bot hello"), headers={}), None)

    assert resp["statusCode"] == 401


def test_stale_timestamp_is_rejected(wired):
    body = json.dumps({"type": "event_callback", "event": _mention("@bot hello")})
    event = {"headers": sign_request(body, timestamp=1_000_000), "body": body}

    resp = slack_events.lambda_handler(event, None)

    assert resp["statusCode"] == 401


def test_base64_body_is_verified_on_decoded_bytes(wired):
    body = json.dumps({"type": "event_callback", "event": _mention("@bot hello")})
    event = {
        "headers": sign_request(body),
        "body": base64.b64encode(body.encode("utf-8")).decode("ascii"),
        "isBase64Encoded": True,
    }

    resp = slack_events.lambda_handler(event, None)

    assert resp["statusCode"] == 200
    assert wired["slack"].posted[0]["text"] == "Hello, World!"


def test_url_verification_returns_challenge(wired):
    body = json.dumps({"type": "url_verification", "challenge": "abc123"})
    event = {"headers": sign_request(body), "body": body}

    resp = slack_events.lambda_handler(event, None)

    assert resp["statusCode"] == 200
    assert json.loads(resp["body"]) == {"challenge": "abc123"}


def test_bot_messages_are_ignored(wired):
    event = slack_event(_mention("@bot hello", bot_id="B1"))

    resp = slack_events.lambda_handler(event, None)

    assert json.loads(resp["body"]) == {"result": "ignored"}
    assert wired["slack"].posted == []
    assert wired["table"].put_calls == 0


def test_channel_messages_without_mention_are_ignored(wired):
    event = slack_event(
        {"type": "message", "text": "hello", "channel": "C1", "user": "U1", "ts": "1.0"}
    )

    resp = slack_events.lambda_handler(event, None)

    assert json.loads(resp["body"]) == {"result": "ignored"}


def test_direct_messages_are_handled(wired):
    event = slack_event(
        {
            "type": "message",
            "channel_type": "im",
            "text": "hello",
            "channel": "D1",
            "user": "U1",
            "ts": "1.0",
        }
    )

    resp = slack_events.lambda_handler(event, None)

    assert json.loads(resp["body"]) == {"result": "ok"}
    assert wired["slack"].posted[0]["channel"] == "D1"


def test_configuration_failure_returns_500(wired):
    wired["ssm"].fail_on = {"/slack-kb-agent/signing-secret"}

    resp = slack_events.lambda_handler(slack_event(_mention("@bot hello")), None)

    assert resp["statusCode"] == 500
    assert json.loads(resp["body"]) == {"error": "Internal server error"}
    assert config_service.is_loaded() is False
    assert wired["slack"].posted == []


def test_unsigned_request_does_not_learn_parameter_names(wired):
    wired["ssm"].fail_on = {"/slack-kb-agent/signing-secret"}

    resp = slack_events.lambda_handler({"body": "{}", "headers": {}}, None)

    assert resp["statusCode"] == 500
    assert json.loads(resp["body"]) == {"error": "Internal server error"}
    assert "signing-secret" not in resp["body"]


def test_dedup_store_failure_returns_500_without_reply(wired, monkeypatch):
    def broken_put(**kwargs):
        raise ClientError(
            {"Error": {"Code": "InternalServerError", "Message": "down"}}, "PutItem"
        )

    monkeypatch.setattr(wired["table"], "put_item", broken_put)

    resp = slack_events.lambda_handler(slack_event(_mention("@bot hello")), None)

    assert resp["statusCode"] == 500
    assert json.loads(resp["body"]) == {"error": "Internal server error"}
    assert "test-dedup-table" not in resp["body"]
    assert wired["slack"].posted == []


def test_unexpected_error_becomes_fixed_500(wired, monkeypatch):
    def explode(event, responder):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(slack_events, "dispatch", explode)

    resp = slack_events.lambda_handler(slack_event(_mention("@bot hello")), None)

    assert resp["statusCode"] == 500
    assert json.loads(resp["body"]) == {"error": "Internal server error"}
    # The claim is kept; a redelivery is skipped.
    assert "C1-100.1-U1" in wired["table"].items
