"""Tests for github_api module: request building, sending, response parsing."""

import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from hubpr.lib.github_api import (
    ApiErrorKind,
    ApiResponse,
    GitHubApiError,
    GitHubClient,
    classify_error,
    describe_error,
    extract_pull_url,
)
from hubpr.lib.pull_request import PullRequestRequest

PR_JSON = json.dumps(
    {
        "number": 7,
        "url": "https://api.github.com/repos/alice/widgets/pulls/7",
        "html_url": "https://github.com/alice/widgets/pull/7",
    }
)


def _urlopen_returning(status: int, text: str) -> MagicMock:
    resp = MagicMock()
    resp.status = status
    resp.read.return_value = text.encode("utf-8")
    opener = MagicMock()
    opener.return_value.__enter__.return_value = resp
    return opener


class TestRequestBuilding:
    def test_pulls_request(self):
        client = GitHubClient("secret")
        pr = PullRequestRequest(head="bob:topic", base="master", title="T")
        request = client.pulls_request("alice", "widgets", pr)
        assert request.method == "POST"
        assert request.url == "https://api.github.com/repos/alice/widgets/pulls"
        assert json.loads(request.body) == {"head": "bob:topic", "base": "master", "title": "T"}

    def test_labels_request(self):
        client = GitHubClient("secret")
        request = client.labels_request("alice", "widgets", "42", ["wip"])
        assert request.url == "https://api.github.com/repos/alice/widgets/issues/42/labels"
        assert request.body == '["wip"]'

    def test_custom_api_url(self):
        client = GitHubClient("secret", api_url="https://ghe.example.com/api/v3/")
        request = client.labels_request("a", "b", "1", ["wip"])
        assert request.url == "https://ghe.example.com/api/v3/repos/a/b/issues/1/labels"

    def test_describe(self):
        client = GitHubClient("secret")
        request = client.labels_request("a", "b", "1", ["wip"])
        assert request.describe() == 'POST https://api.github.com/repos/a/b/issues/1/labels\n["wip"]'


class TestSend:
    def test_sends_headers_and_body(self):
        client = GitHubClient("secret")
        request = client.labels_request("a", "b", "1", ["wip"])
        opener = _urlopen_returning(200, "[]")

        with patch("hubpr.lib.github_api.urllib.request.urlopen", opener):
            response = client.send(request)

        assert response == ApiResponse(200, "[]")
        sent = opener.call_args.args[0]
        assert sent.get_method() == "POST"
        assert sent.data == b'["wip"]'
        assert sent.get_header("Authorization") == "token secret"
        assert sent.get_header("Content-type") == "application/json"

    def test_no_timeout_by_default(self):
        client = GitHubClient("secret")
        opener = _urlopen_returning(201, PR_JSON)
        with patch("hubpr.lib.github_api.urllib.request.urlopen", opener):
            client.send(client.labels_request("a", "b", "1", ["wip"]))
        assert "timeout" not in opener.call_args.kwargs

    def test_configured_timeout_passed(self):
        client = GitHubClient("secret", timeout=5)
        opener = _urlopen_returning(201, PR_JSON)
        with patch("hubpr.lib.github_api.urllib.request.urlopen", opener):
            client.send(client.labels_request("a", "b", "1", ["wip"]))
        assert opener.call_args.kwargs["timeout"] == 5

    def test_undecodable_success_body_replaced(self):
        client = GitHubClient("secret")
        resp = MagicMock()
        resp.status = 200
        resp.read.return_value = b"\xff\xfe not utf-8"
        opener = MagicMock()
        opener.return_value.__enter__.return_value = resp

        with patch("hubpr.lib.github_api.urllib.request.urlopen", opener):
            response = client.send(client.labels_request("a", "b", "1", ["wip"]))

        assert response.status == 200
        assert "�" in response.text
        assert response.text.endswith("not utf-8")

    def test_http_error_returned_as_response(self):
        client = GitHubClient("secret")
        body = '{"message": "Bad credentials"}'
        error = urllib.error.HTTPError(
            "https://api.github.com", 401, "Unauthorized", {}, io.BytesIO(body.encode("utf-8"))
        )
        with patch("hubpr.lib.github_api.urllib.request.urlopen", side_effect=error):
            response = client.send(client.labels_request("a", "b", "1", ["wip"]))
        assert response.status == 401
        assert response.text == body
        assert not response.ok

    def test_network_failure_raises(self):
        client = GitHubClient("secret")
        error = urllib.error.URLError("Name or service not known")
        with patch("hubpr.lib.github_api.urllib.request.urlopen", side_effect=error):
            with pytest.raises(GitHubApiError) as exc_info:
                client.send(client.labels_request("a", "b", "1", ["wip"]))
        assert exc_info.value.kind is ApiErrorKind.NETWORK


class TestExtractPullUrl:
    def test_created_pull_request(self):
        assert extract_pull_url(ApiResponse(201, PR_JSON)) == "https://github.com/alice/widgets/pull/7"

    def test_error_body(self):
        assert extract_pull_url(ApiResponse(422, '{"message": "Validation Failed"}')) is None

    def test_non_json_body(self):
        assert extract_pull_url(ApiResponse(502, "<html>Bad gateway</html>")) is None

    def test_html_url_that_is_not_a_pull(self):
        body = json.dumps({"html_url": "https://github.com/alice/widgets/issues/7"})
        assert extract_pull_url(ApiResponse(200, body)) is None


class TestClassifyError:
    @pytest.mark.parametrize(
        "status,text,kind",
        [
            (401, '{"message": "Bad credentials"}', ApiErrorKind.AUTHENTICATION),
            (403, '{"message": "Resource not accessible"}', ApiErrorKind.AUTHENTICATION),
            (403, '{"message": "API rate limit exceeded"}', ApiErrorKind.RATE_LIMITED),
            (404, '{"message": "Not Found"}', ApiErrorKind.NOT_FOUND),
            (422, '{"message": "Validation Failed"}', ApiErrorKind.VALIDATION),
            (500, "oops", ApiErrorKind.UNEXPECTED),
        ],
    )
    def test_kinds(self, status, text, kind):
        assert classify_error(ApiResponse(status, text)) is kind


class TestDescribeError:
    def test_validation_details_joined(self):
        body = json.dumps(
            {
                "message": "Validation Failed",
                "errors": [{"message": "A pull request already exists for bob:topic."}],
            }
        )
        assert describe_error(ApiResponse(422, body)) == (
            "Validation Failed: A pull request already exists for bob:topic."
        )

    def test_non_json(self):
        assert describe_error(ApiResponse(502, "gateway")) == "GitHub API returned HTTP 502"
