"""Article lifecycle transition rules."""

from dataclasses import dataclass
from enum import Enum

from newsroom.errors import FailureKind, ServiceError, forbidden
from newsroom.schemas.article import ArticleStatus
from newsroom.schemas.auth import Role

INITIAL_STATUS = ArticleStatus.PENDING


class ArticleAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    UNPUBLISH = "unpublish"
    RESUBMIT = "resubmit"


@dataclass(frozen=True, slots=True)
class Transition:
    action: ArticleAction
    source: ArticleStatus
    target: ArticleStatus
    role: Role


_TRANSITIONS: dict[ArticleAction, Transition] = {
    ArticleAction.APPROVE: Transition(
        ArticleAction.APPROVE, ArticleStatus.PENDING, ArticleStatus.PUBLISHED, Role.ADMIN
    ),
    ArticleAction.REJECT: Transition(
        ArticleAction.REJECT, ArticleStatus.PENDING, ArticleStatus.REJECTED, Role.ADMIN
    ),
    ArticleAction.UNPUBLISH: Transition(
        ArticleAction.UNPUBLISH, ArticleStatus.PUBLISHED, ArticleStatus.REJECTED, Role.ADMIN
    ),
    # Triggered by an owner edit, never requested directly.
    ArticleAction.RESUBMIT: Transition(
        ArticleAction.RESUBMIT, ArticleStatus.REJECTED, ArticleStatus.PENDING, Role.USER
    ),
}

_SOURCE_MESSAGES: dict[ArticleAction, str] = {
    ArticleAction.APPROVE: "Only pending articles can be approved",
    ArticleAction.REJECT: "Only pending articles can be rejected",
    ArticleAction.UNPUBLISH: "Only published articles can be unpublished",
    ArticleAction.RESUBMIT: "Only rejected articles can be resubmitted",
}


def allowed_actions(status: ArticleStatus, role: Role | None = None) -> list[ArticleAction]:
    """Return deterministically ordered actions available from a status."""
    return sorted(
        (
            transition.action
            for transition in _TRANSITIONS.values()
            if transition.source is status and (role is None or transition.role is role)
        ),
        key=lambda action: action.value,
    )


def ensure_transition(status: ArticleStatus, action: ArticleAction, role: Role) -> ArticleStatus:
    """Validate an action against the transition table and return the target status."""
    transition = _TRANSITIONS[action]
    if role is not transition.role:
        raise forbidden(
            f"Only {transition.role.value}s may {action.value} articles",
            code="ACTION_FORBIDDEN",
        )

    if status is not transition.source:
        raise ServiceError(
            FailureKind.INVALID_TRANSITION,
            _SOURCE_MESSAGES[action],
            code="INVALID_TRANSITION",
            details={
                "current_status": status.value,
                "attempted_action": action.value,
                "allowed_actions": [item.value for item in allowed_actions(status, role)],
            },
        )
    return transition.target


def ensure_editable(status: ArticleStatus) -> None:
    """Published content is immutable to its author."""
    if status is ArticleStatus.PUBLISHED:
        raise forbidden("Published articles cannot be edited", code="ARTICLE_IMMUTABLE")


def status_after_edit(status: ArticleStatus) -> ArticleStatus:
    ensure_editable(status)
    if status is ArticleStatus.REJECTED:
        return ensure_transition(status, ArticleAction.RESUBMIT, Role.USER)
    return status
