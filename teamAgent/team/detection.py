"""Detect explicit team requests in a prompt and extract requested roles."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

TEAM_KEYWORDS = (
    "agent team",
    "create a team",
    "build a team",
    "spawn",
    "team of agents",
    "collaborate",
    "collaboration",
    "work together",
    "multiple agents",
    "from different angles",
    "from multiple angles",
    "different perspectives",
    "multiple perspectives",
    "in parallel",
    "reviewers",
    "teammates",
)

_ONE_ON_RE = re.compile(r"one\s+(?:on|focused on|checking|validating|playing)\s+([^,.\n]+)", re.IGNORECASE)
_DASH_LIST_RE = re.compile(
    r"^\s*[-•]\s*(?:one\s+)?(?:focused on\s+|checking\s+|validating\s+)?([^-•\n]+)",
    re.IGNORECASE | re.MULTILINE,
)
_NUMBERED_RE = re.compile(r"\d\)\s*(?:an?\s+)?([^,\d)]+)", re.IGNORECASE)
_ROLE_WORD_RE = re.compile(
    r"\b(researcher|writer|reviewer|analyst|designer|developer|tester|architect|manager|"
    r"strategist|qa|devops|security|frontend|backend|database)\b",
    re.IGNORECASE,
)
_COUNT_RE = re.compile(
    r"\b(\d+|two|three|four|five|six|seven|eight|nine|ten)\s+(?:agent\s+)?(?:reviewers?|teammates?|agents?|members?)\b",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class TeamDetectionResult:
    is_team_request: bool
    suggested_roles: List[str] = field(default_factory=list)
    team_goal: Optional[str] = None


def _add_role(roles: List[str], role: str) -> None:
    role = role.strip().rstrip(":;").strip().lower()
    if 2 < len(role) < 100 and role not in roles:
        roles.append(role)


def detect_team_from_prompt(prompt: str) -> TeamDetectionResult:
    """Decide whether ``prompt`` asks for a team and which roles it names.

    Signals: team keywords, "one on X" phrases, dash or bullet role lists,
    "1) a X" numbered lists, two or more known role words, and counted
    members such as "three reviewers".
    """
    lower = prompt.lower()
    has_team_keyword = any(keyword in lower for keyword in TEAM_KEYWORDS)

    roles: List[str] = []
    for pattern in (_ONE_ON_RE, _DASH_LIST_RE, _NUMBERED_RE):
        for match in pattern.finditer(prompt):
            _add_role(roles, match.group(1))

    role_words: List[str] = []
    for match in _ROLE_WORD_RE.finditer(prompt):
        word = match.group(1).lower()
        if word not in role_words:
            role_words.append(word)
    if len(role_words) >= 2:
        for word in role_words:
            if word not in roles:
                roles.append(word)

    has_count = _COUNT_RE.search(lower) is not None

    is_team_request = (
        has_team_keyword
        or len(roles) >= 2
        or (len(role_words) >= 2 and (" and " in lower or "," in lower))
        or has_count
    )
    return TeamDetectionResult(
        is_team_request=is_team_request,
        suggested_roles=roles,
        team_goal=prompt if is_team_request else None,
    )
