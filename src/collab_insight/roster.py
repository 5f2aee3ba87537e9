"""Team rosters: map commit emails to team members.

Students commit under several aliases of the same institutional address
(x@tum.de, x@mytum.de, x@in.tum.de). Emails are lower-cased and every
sub-domain of a configured institutional domain collapses to that domain.
Commits by anyone outside the roster are attributed to a synthetic
``external:<email>`` author and kept out of every score. Members may list
further git emails as aliases. Course-template commits belong to nobody
and are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from .logging_config import get_logger
from .models import RawCommit

logger = get_logger(__name__)

EXTERNAL_PREFIX = "external:"


def normalize_email(email: str, institutional_domains: Iterable[str] = ("tum.de",)) -> str:
    lower = email.strip().lower()
    local, sep, domain = lower.partition("@")
    if not sep or not local:
        return lower
    for inst in institutional_domains:
        if domain.endswith(inst):
            return f"{local}@{inst}"
    return lower


def external_id(email: str) -> str:
    return f"{EXTERNAL_PREFIX}{email.strip().lower()}"


def is_external(author_id: Optional[str]) -> bool:
    return author_id is not None and author_id.startswith(EXTERNAL_PREFIX)


@dataclass(frozen=True)
class TeamMember:
    """A student; ``aliases`` are further git emails they commit under."""

    id: str
    email: str
    name: Optional[str] = None
    aliases: tuple[str, ...] = ()

    @property
    def emails(self) -> tuple[str, ...]:
        return (self.email, *self.aliases)


@dataclass
class TeamRoster:
    """A team's members and the email lookup built from them."""

    name: str
    members: list[TeamMember]
    institutional_domains: tuple[str, ...] = ("tum.de",)
    template_author_email: Optional[str] = None
    _by_email: dict[str, str] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self) -> None:
        for member in self.members:
            for email in member.emails:
                self._by_email[email.strip().lower()] = member.id
                self._by_email[normalize_email(email, self.institutional_domains)] = member.id

    @property
    def size(self) -> int:
        return len(self.members)

    def resolve(self, email: str) -> Optional[str]:
        """Member id for an email, trying the normalised form first."""
        normalized = normalize_email(email, self.institutional_domains)
        member_id = self._by_email.get(normalized)
        if member_id is None:
            member_id = self._by_email.get(email.strip().lower())
        return member_id

    def is_template(self, commit: RawCommit, member_id: Optional[str]) -> bool:
        """Course-template commits: everything by the template author, or,
        without one configured, root commits by nobody on the roster.
        """
        if self.template_author_email:
            template = self.template_author_email.strip().lower()
            return commit.author_email.strip().lower() == template
        return commit.is_root and member_id is None

    def partition(
        self, commits: Iterable[RawCommit]
    ) -> tuple[list[RawCommit], list[RawCommit]]:
        """Split commits into (team, external), assigning author ids to both.

        Template commits are dropped from both.
        """
        team: list[RawCommit] = []
        external: list[RawCommit] = []
        outsiders: set[str] = set()
        templates = 0

        for commit in commits:
            member_id = self.resolve(commit.author_email)
            if self.is_template(commit, member_id):
                templates += 1
            elif member_id is not None:
                team.append(commit.with_author(member_id))
            else:
                external.append(commit.with_author(external_id(commit.author_email)))
                outsiders.add(commit.author_email)

        if templates:
            logger.info(f"Team {self.name}: excluded {templates} template commit(s)")
        if outsiders:
            logger.info(
                f"Team {self.name}: {len(outsiders)} external contributor(s): "
                f"{', '.join(sorted(outsiders))}"
            )
        return team, external
