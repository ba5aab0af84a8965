"""GitHub REST API client for creating pull requests and labelling issues.

Requests are described first (ApiRequest) and sent second, so a dry run
can print exactly what would have gone over the wire. HTTP error statuses
come back as ordinary ApiResponse values; only transport failures raise.
"""

import json
import logging
import re
import urllib.error
import urllib.request
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from hubpr.lib.errors import HubPrError
from hubpr.lib.pull_request import PullRequestRequest

logger = logging.getLogger(__name__)

USER_AGENT = "hubpr"

_PULL_URL_RE = re.compile(r"/pull/\d+$")


class ApiErrorKind(str, Enum):
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    UNEXPECTED = "unexpected"


class GitHubApiError(HubPrError):
    """Raised when the API cannot be reached or did not create the pull request."""

    def __init__(self, message: str, kind: ApiErrorKind, status: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status = status


@dataclass(frozen=True)
class ApiRequest:
    method: str
    url: str
    body: str

    def describe(self) -> str:
        return f"{self.method} {self.url}\n{self.body}"


@dataclass(frozen=True)
class ApiResponse:
    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Return the decoded body, or None if it is not JSON."""
        try:
            return json.loads(self.text)
        except ValueError:
            return None


class GitHubClient:
    """Thin urllib wrapper authenticated with a personal access token."""

    def __init__(self, token: str, api_url: str = "https://api.github.com", timeout: Optional[float] = None):
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout

    def pulls_request(self, owner: str, repo: str, pull: PullRequestRequest) -> ApiRequest:
        return ApiRequest("POST", f"{self._api_url}/repos/{owner}/{repo}/pulls", pull.to_json())

    def labels_request(self, owner: str, repo: str, issue: str, labels: list[str]) -> ApiRequest:
        return ApiRequest(
            "POST",
            f"{self._api_url}/repos/{owner}/{repo}/issues/{issue}/labels",
            json.dumps(labels),
        )

    def send(self, request: ApiRequest) -> ApiResponse:
        """Send request and return the response, whatever its status.

        Raises:
            GitHubApiError: If the server could not be reached.
        """
        req = urllib.request.Request(request.url, data=request.body.encode("utf-8"), method=request.method)
        req.add_header("Authorization", f"token {self._token}")
        req.add_header("Content-Type", "application/json")
        req.add_header("Accept", "application/vnd.github+json")
        req.add_header("User-Agent", USER_AGENT)

        logger.debug(f"{request.method} {request.url}")
        kwargs = {} if self._timeout is None else {"timeout": self._timeout}
        try:
            with urllib.request.urlopen(req, **kwargs) as resp:
                response = ApiResponse(resp.status, resp.read().decode("utf-8", errors="replace"))
        except urllib.error.HTTPError as e:
            response = ApiResponse(e.code, e.read().decode("utf-8", errors="replace"))
        except urllib.error.URLError as e:
            raise GitHubApiError(
                f"Could not reach {request.url}: {e.reason}", ApiErrorKind.NETWORK
            ) from e

        logger.debug(f"HTTP {response.status}: {response.text[:500]}")
        return response


def extract_pull_url(response: ApiResponse) -> Optional[str]:
    """Return html_url from a created pull request, or None."""
    data = response.json()
    if not isinstance(data, dict):
        return None
    url = data.get("html_url")
    if isinstance(url, str) and _PULL_URL_RE.search(url):
        return url
    return None


def classify_error(response: ApiResponse) -> ApiErrorKind:
    """Map a response that carried no pull request URL to an error kind."""
    if response.status == 401:
        return ApiErrorKind.AUTHENTICATION
    if response.status in (403, 429):
        if "rate limit" in response.text.lower() or response.status == 429:
            return ApiErrorKind.RATE_LIMITED
        return ApiErrorKind.AUTHENTICATION
    if response.status == 404:
        return ApiErrorKind.NOT_FOUND
    if response.status == 422:
        return ApiErrorKind.VALIDATION
    return ApiErrorKind.UNEXPECTED


def describe_error(response: ApiResponse) -> str:
    """Human-readable summary of an API error body."""
    data = response.json()
    if not isinstance(data, dict):
        return f"GitHub API returned HTTP {response.status}"

    message = data.get("message") or f"HTTP {response.status}"
    details = []
    for err in data.get("errors") or []:
        if isinstance(err, dict):
            details.append(err.get("message") or err.get("code") or str(err))
        else:
            details.append(str(err))
    if details:
        message = f"{message}: {'; '.join(details)}"
    return message
