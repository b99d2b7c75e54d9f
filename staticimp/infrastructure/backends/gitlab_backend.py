"""GitLab REST v4 backend (httpx).

Uses the shared httpx.AsyncClient from the app runtime so connections are
pooled across submissions; each driver instance only carries the host,
token, and timeout of its backend config.
"""

from __future__ import annotations

import base64
from typing import Any
from urllib.parse import quote

import httpx

from staticimp.application.dtos.entry import (
    BranchResult,
    CommitResult,
    MergeRequestResult,
)
from staticimp.domain.exceptions import (
    BackendAuthException,
    BackendConflictException,
    BackendException,
    BackendNotFoundException,
    BackendUnavailableException,
    BranchAlreadyExistsException,
)
from staticimp.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_ALREADY_EXISTS = "already exists"


def _quote(value: str) -> str:
    """Percent-encode a project path or file path as one URL segment."""
    return quote(value, safe="")


def _error_message(response: httpx.Response) -> str:
    """GitLab puts errors in `message` (str, list, or dict) or `error`."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        message = body.get("message", body.get("error", ""))
        return message if isinstance(message, str) else str(message)
    return str(body)[:200]


def _raise_for_status(response: httpx.Response, action: str) -> None:
    """Map a GitLab error response to a BackendException subclass."""
    if response.is_success:
        return
    status = response.status_code
    message = _error_message(response)
    details: dict[str, Any] = {"action": action, "status": status}
    if message:
        details["reason"] = message
    if status in (401, 403):
        raise BackendAuthException(f"GitLab rejected credentials ({action})", details)
    if status == 404:
        raise BackendNotFoundException(f"GitLab resource not found ({action})", details)
    if status == 409:
        raise BackendConflictException(f"GitLab reported a conflict ({action})", details)
    if status == 429 or status >= 500:
        raise BackendUnavailableException(f"GitLab unavailable ({action})", details)
    raise BackendException(f"GitLab request failed ({action})", details=details)


class GitLabBackend:
    """IRepositoryBackend for GitLab (gitlab.com or self-hosted).

    Args:
        client: Shared async HTTP client.
        host: GitLab hostname, no scheme.
        token: Personal/project access token (PRIVATE-TOKEN header).
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        host: str,
        token: str,
        timeout: float = 30.0,
    ) -> None:
        self._client = client
        self.base_url = f"https://{host}/api/v4"
        self._token = token
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"<GitLabBackend {self.base_url}>"

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one API request; transport failures and timeouts become Unavailable."""
        try:
            return await self._client.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                params=params,
                headers={"PRIVATE-TOKEN": self._token},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise BackendUnavailableException(
                f"GitLab timed out ({action})", {"action": action}
            ) from e
        except httpx.TransportError as e:
            raise BackendUnavailableException(
                f"GitLab unreachable ({action})", {"action": action}
            ) from e

    async def commit_file(
        self,
        project: str,
        branch: str,
        path: str,
        filename: str,
        content: bytes,
        commit_message: str,
    ) -> CommitResult:
        """Create the file; update it instead when GitLab says it already exists."""
        file_path = "/".join(p for p in f"{path}/{filename}".split("/") if p)
        url = f"/projects/{_quote(project)}/repository/files/{_quote(file_path)}"
        body = {
            "branch": branch,
            "content": base64.b64encode(content).decode("ascii"),
            "encoding": "base64",
            "commit_message": commit_message,
        }
        response = await self._request("POST", url, "create_file", json=body)
        if response.status_code == 400 and _ALREADY_EXISTS in _error_message(response).lower():
            logger.debug("File %s exists on %s; updating", file_path, branch)
            response = await self._request("PUT", url, "update_file", json=body)
            _raise_for_status(response, "update_file")
        else:
            _raise_for_status(response, "create_file")
        return CommitResult(branch=branch, file_path=file_path)

    async def create_branch(
        self, project: str, new_branch: str, from_branch: str
    ) -> BranchResult:
        response = await self._request(
            "POST",
            f"/projects/{_quote(project)}/repository/branches",
            "create_branch",
            params={"branch": new_branch, "ref": from_branch},
        )
        if response.status_code == 400 and _ALREADY_EXISTS in _error_message(response).lower():
            raise BranchAlreadyExistsException(new_branch)
        _raise_for_status(response, "create_branch")
        return BranchResult(name=new_branch, created=True)

    async def open_merge_request(
        self,
        project: str,
        source_branch: str,
        target_branch: str,
        description: str,
        *,
        title: str | None = None,
    ) -> MergeRequestResult:
        response = await self._request(
            "POST",
            f"/projects/{_quote(project)}/merge_requests",
            "open_merge_request",
            json={
                "source_branch": source_branch,
                "target_branch": target_branch,
                "title": title or f"staticimp: {source_branch}",
                "description": description,
                "remove_source_branch": True,
            },
        )
        _raise_for_status(response, "open_merge_request")
        try:
            data = response.json()
        except ValueError as e:
            raise BackendException(
                "GitLab returned an unreadable merge request response",
                details={"action": "open_merge_request", "status": response.status_code},
            ) from e
        if not isinstance(data, dict):
            raise BackendException(
                "GitLab returned an unreadable merge request response",
                details={"action": "open_merge_request", "status": response.status_code},
            )
        return MergeRequestResult(
            iid=data.get("iid", ""),
            source_branch=source_branch,
            target_branch=target_branch,
            web_url=data.get("web_url"),
        )

    async def get_file(self, project: str, ref: str, path: str) -> bytes:
        response = await self._request(
            "GET",
            f"/projects/{_quote(project)}/repository/files/{_quote(path)}/raw",
            "get_file",
            params={"ref": ref},
        )
        _raise_for_status(response, "get_file")
        return response.content
