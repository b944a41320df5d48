"""GitHub webhook payload models.

Only the fields the relay renders are modelled; everything else GitHub sends
is ignored. The entity an event is about is an explicit tagged value on
``WebhookPayload.entity`` rather than something each consumer re-derives from
whichever optional key happens to be present.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EntityKind(str, Enum):
    ISSUE = "issue"
    PULL_REQUEST = "pull_request"
    RELEASE = "release"


class _GitHubModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class GitHubUser(_GitHubModel):
    login: str


class Repository(_GitHubModel):
    full_name: str
    name: str = ""
    owner: GitHubUser | None = None

    @property
    def short_name(self) -> str:
        """Repository name without the owner prefix."""
        return self.full_name.rsplit("/", 1)[-1]


class Issue(_GitHubModel):
    kind: ClassVar[EntityKind] = EntityKind.ISSUE

    title: str
    user: GitHubUser
    html_url: str
    number: int | None = None

    @property
    def author(self) -> str:
        return self.user.login


class PullRequest(_GitHubModel):
    kind: ClassVar[EntityKind] = EntityKind.PULL_REQUEST

    title: str
    user: GitHubUser
    html_url: str
    number: int | None = None
    merged: bool = False

    @property
    def author(self) -> str:
        return self.user.login


class Release(_GitHubModel):
    kind: ClassVar[EntityKind] = EntityKind.RELEASE

    tag_name: str
    html_url: str
    # GitHub names the publisher ``author`` on releases; ``user`` is accepted
    # for payloads shaped like issues.
    publisher: GitHubUser = Field(validation_alias=AliasChoices("author", "user"))
    name: str | None = None
    body: str | None = None

    @property
    def author(self) -> str:
        return self.publisher.login


Entity = Union[Issue, PullRequest, Release]


class WebhookPayload(_GitHubModel):
    action: str = ""
    repository: Repository
    entity: Entity | None = None

    @property
    def entity_kind(self) -> EntityKind | None:
        return self.entity.kind if self.entity is not None else None
