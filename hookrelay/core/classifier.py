"""Event classification and message formatting.

Maps ``(action, entity kind)`` to a rendered notification and a delivery
target. ``opened``/``reopened``/``closed`` apply to issues and pull requests;
``created`` applies to releases only. Any other combination renders nothing,
which is not an error.
"""

from __future__ import annotations

from hookrelay.config import RepoRoute
from hookrelay.models import ChannelNotification, ForumThreadNotification, NotificationIntent
from hookrelay.webhooks.models import EntityKind, Issue, PullRequest, Release, WebhookPayload

# (action, kind) -> headline template; {repo} is the short repository name
_HEADLINES: dict[tuple[str, EntityKind], str] = {
    ("opened", EntityKind.ISSUE): "🆕 New issue opened in {repo}",
    ("reopened", EntityKind.ISSUE): "🆕 Issue reopened in {repo}",
    ("closed", EntityKind.ISSUE): "✅ Issue closed in {repo}",
    ("opened", EntityKind.PULL_REQUEST): "🔄 New Pull Request opened in {repo}",
    ("reopened", EntityKind.PULL_REQUEST): "🔄 Pull Request reopened in {repo}",
    ("closed", EntityKind.PULL_REQUEST): "✅ Pull Request closed in {repo}",
}

RELEASE_ACTION = "created"


def format_item_message(headline: str, item: Issue | PullRequest) -> str:
    return (
        f"{headline}\n"
        f"Title: {item.title}\n"
        f"By: {item.author}\n"
        f"URL: {item.html_url}"
    )


def format_release_message(release: Release, repo: str) -> str:
    return (
        f"🚀 Release {release.tag_name} created in {repo}\n"
        f"By: {release.author}\n"
        f"URL: {release.html_url}"
    )


def format_release_thread_body(release: Release) -> str:
    footer = f"By: {release.author}\nURL: {release.html_url}"
    notes = (release.body or "").strip()
    return f"{notes}\n\n{footer}" if notes else footer


def _classify_item(
    action: str, item: Issue | PullRequest, repo: str, route: RepoRoute
) -> NotificationIntent | None:
    template = _HEADLINES.get((action, item.kind))
    if template is None:
        return None
    return ChannelNotification(
        channel_id=route.channel_id,
        text=format_item_message(template.format(repo=repo), item),
    )


def _classify_release(
    action: str, release: Release, repo: str, route: RepoRoute
) -> NotificationIntent | None:
    if action != RELEASE_ACTION:
        return None
    if route.forum_id:
        return ForumThreadNotification(
            forum_id=route.forum_id,
            title=release.tag_name,
            body=format_release_thread_body(release),
        )
    return ChannelNotification(
        channel_id=route.channel_id,
        text=format_release_message(release, repo),
    )


def classify(payload: WebhookPayload, route: RepoRoute) -> NotificationIntent | None:
    """Render the notification for a webhook, or None if it is not relayed."""
    entity = payload.entity
    repo = payload.repository.short_name
    if isinstance(entity, Release):
        return _classify_release(payload.action, entity, repo, route)
    if isinstance(entity, (Issue, PullRequest)):
        return _classify_item(payload.action, entity, repo, route)
    return None
