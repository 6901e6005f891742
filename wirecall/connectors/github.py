# SPDX-License-Identifier: Apache-2.0
"""GitHub repository actions.

Targets are relative to ``https://api.github.com``; pair the actions with
:func:`github_config` or a YAML connector using ``auth: {type: bearer,
scheme: token}``.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from wirecall.actions.base import Action
from wirecall.actions.dispatcher import DispatcherConfig
from wirecall.auth import BearerAuth
from wirecall.auth.base import CredentialsProvider
from wirecall.auth.credentials import env_token
from wirecall.classifier import decode_with, no_content
from wirecall.messages import WireRequest, WireResponse
from wirecall.result import RemoteFailure, Result
from wirecall.serialization import JsonCodec
from wirecall.transport import Transport

API = "https://api.github.com"
MEDIA_TYPE = "application/vnd.github+json"

_BODY = JsonCodec()


@dataclass(frozen=True, slots=True)
class GitRef:
    ref: str
    sha: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "GitRef":
        return cls(ref=data["ref"], sha=data["object"]["sha"])


@dataclass(frozen=True, slots=True)
class Commit:
    sha: str
    message: str
    author: Optional[str]

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Commit":
        detail = data["commit"]
        return cls(sha=data["sha"], message=detail["message"], author=(detail.get("author") or {}).get("name"))


@dataclass(frozen=True, slots=True)
class PullRequest:
    number: int
    title: str
    state: str
    head: str
    base: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "PullRequest":
        return cls(
            number=int(data["number"]),
            title=data["title"],
            state=data["state"],
            head=data["head"]["ref"],
            base=data["base"]["ref"],
        )


@dataclass(frozen=True, slots=True)
class MergeResult:
    sha: str
    merged: bool
    message: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "MergeResult":
        return cls(sha=data["sha"], merged=bool(data["merged"]), message=data["message"])


@dataclass(frozen=True, slots=True)
class UploadedContent:
    path: str
    sha: str
    commit_sha: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UploadedContent":
        return cls(path=data["content"]["path"], sha=data["content"]["sha"], commit_sha=data["commit"]["sha"])


@dataclass(frozen=True, slots=True)
class Person:
    name: str
    email: str

    def to_json(self) -> Dict[str, str]:
        return {"name": self.name, "email": self.email}


def _pull_requests(data: Any) -> List[PullRequest]:
    if not isinstance(data, list):
        raise TypeError("expected a list of pull requests")
    return [PullRequest.from_json(item) for item in data]


def _drop_none(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


def _request(method: str, target: str, body: Optional[Dict[str, Any]] = None) -> WireRequest:
    if body is None:
        return WireRequest.of(method, target)
    return WireRequest.of(method, target, {"Content-Type": _BODY.content_type}, _BODY.encode(body))


@dataclass(frozen=True)
class GetGitRef(Action[GitRef]):
    repo: str
    branch: str = "main"
    codec = JsonCodec(GitRef.from_json)

    @property
    def target(self) -> str:
        return f"/repos/{self.repo}/git/refs/heads/{self.branch}"

    def build_request(self) -> WireRequest:
        return _request("GET", self.target)

    def decode_response(self, response: WireResponse) -> Result[GitRef, RemoteFailure]:
        return decode_with(self.codec, "GET", self.target, response)


@dataclass(frozen=True)
class CreateRef(Action[GitRef]):
    repo: str
    ref: str
    sha: str
    codec = JsonCodec(GitRef.from_json)

    @property
    def target(self) -> str:
        return f"/repos/{self.repo}/git/refs"

    def build_request(self) -> WireRequest:
        return _request("POST", self.target, {"ref": f"refs/heads/{self.ref}", "sha": self.sha})

    def decode_response(self, response: WireResponse) -> Result[GitRef, RemoteFailure]:
        return decode_with(self.codec, "POST", self.target, response)


@dataclass(frozen=True)
class GetCommit(Action[Commit]):
    repo: str
    ref: str
    codec = JsonCodec(Commit.from_json)

    @property
    def target(self) -> str:
        return f"/repos/{self.repo}/commits/{self.ref}"

    def build_request(self) -> WireRequest:
        return _request("GET", self.target)

    def decode_response(self, response: WireResponse) -> Result[Commit, RemoteFailure]:
        return decode_with(self.codec, "GET", self.target, response)


@dataclass(frozen=True)
class GetPullRequests(Action[List[PullRequest]]):
    repo: str
    codec = JsonCodec(_pull_requests)

    @property
    def target(self) -> str:
        return f"/repos/{self.repo}/pulls"

    def build_request(self) -> WireRequest:
        return _request("GET", self.target)

    def decode_response(self, response: WireResponse) -> Result[List[PullRequest], RemoteFailure]:
        return decode_with(self.codec, "GET", self.target, response)


@dataclass(frozen=True)
class CreatePullRequest(Action[PullRequest]):
    repo: str
    head: str
    base: str
    title: Optional[str] = None
    body: Optional[str] = None
    head_repo: Optional[str] = None
    maintainer_can_modify: Optional[bool] = None
    draft: Optional[bool] = None
    issue: Optional[int] = None
    codec = JsonCodec(PullRequest.from_json)

    @property
    def target(self) -> str:
        return f"/repos/{self.repo}/pulls"

    def build_request(self) -> WireRequest:
        fields = _drop_none(
            {
                "title": self.title,
                "head": self.head,
                "head_repo": self.head_repo,
                "base": self.base,
                "body": self.body,
                "maintainer_can_modify": self.maintainer_can_modify,
                "draft": self.draft,
                "issue": self.issue,
            }
        )
        return _request("POST", self.target, fields)

    def decode_response(self, response: WireResponse) -> Result[PullRequest, RemoteFailure]:
        return decode_with(self.codec, "POST", self.target, response)


@dataclass(frozen=True)
class MergePullRequest(Action[MergeResult]):
    repo: str
    number: int
    commit_title: Optional[str] = None
    commit_message: Optional[str] = None
    sha: Optional[str] = None
    merge_method: Optional[str] = None
    codec = JsonCodec(MergeResult.from_json)

    @property
    def target(self) -> str:
        return f"/repos/{self.repo}/pulls/{self.number}/merge"

    def build_request(self) -> WireRequest:
        fields = _drop_none(
            {
                "commit_title": self.commit_title,
                "commit_message": self.commit_message,
                "sha": self.sha,
                "merge_method": self.merge_method,
            }
        )
        return _request("PUT", self.target, fields or None)

    def decode_response(self, response: WireResponse) -> Result[MergeResult, RemoteFailure]:
        return decode_with(self.codec, "PUT", self.target, response)


@dataclass(frozen=True)
class UploadContent(Action[UploadedContent]):
    repo: str
    path: str
    message: str
    content: bytes
    branch: str = "main"
    sha: Optional[str] = None
    committer: Optional[Person] = None
    author: Optional[Person] = None
    codec = JsonCodec(UploadedContent.from_json)

    @property
    def target(self) -> str:
        return f"/repos/{self.repo}/contents/{self.path}"

    def build_request(self) -> WireRequest:
        author = self.author or self.committer
        fields = _drop_none(
            {
                "message": self.message,
                "content": base64.b64encode(self.content).decode("ascii"),
                "sha": self.sha,
                "branch": self.branch,
                "committer": self.committer.to_json() if self.committer else None,
                "author": author.to_json() if author else None,
            }
        )
        return _request("PUT", self.target, fields)

    def decode_response(self, response: WireResponse) -> Result[UploadedContent, RemoteFailure]:
        return decode_with(self.codec, "PUT", self.target, response)


@dataclass(frozen=True)
class DeleteRef(Action[None]):
    """Delete a ref such as ``heads/feature``; the response body is ignored."""

    repo: str
    ref: str

    @classmethod
    def branch(cls, repo: str, branch: str) -> "DeleteRef":
        return cls(repo=repo, ref=f"heads/{branch}")

    @property
    def target(self) -> str:
        return f"/repos/{self.repo}/git/refs/{self.ref}"

    def build_request(self) -> WireRequest:
        return _request("DELETE", self.target)

    def decode_response(self, response: WireResponse) -> Result[None, RemoteFailure]:
        return no_content("DELETE", self.target, response)


def github_config(
    transport: Transport,
    credentials: Optional[CredentialsProvider] = None,
    *,
    base_url: str = API,
) -> DispatcherConfig:
    return DispatcherConfig(
        transport=transport,
        auth=BearerAuth(credentials or env_token("GITHUB_TOKEN", scheme="token")),
        base_url=base_url,
        headers={"Accept": MEDIA_TYPE},
        codec=JsonCodec(),
        name="github",
    )
