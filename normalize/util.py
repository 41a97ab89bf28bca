"""
Normalization utility helpers.
Convert raw provider payloads (Linear, JIRA, GitHub, Bitbucket) into normalize.models entities.
Missing fields are filled with None/defaults rather than rejected.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from dateutil import parser as dtparser

from normalize.models import (
    CANCELED,
    COMPLETED,
    STARTED,
    UNSTARTED,
    Commit,
    CommitAuthor,
    Issue,
    Label,
    PullRequest,
    Status,
    Team,
    User,
)

logger = logging.getLogger(__name__)

ISSUE_SOURCES = ('linear', 'jira', 'normalized')
SCM_SOURCES = ('github', 'bitbucket', 'normalized')

JIRA_PRIORITY_ORDINALS = {
    'highest': 1,
    'blocker': 1,
    'critical': 1,
    'urgent': 1,
    'high': 2,
    'major': 2,
    'medium': 3,
    'normal': 3,
    'low': 4,
    'lowest': 4,
    'minor': 4,
    'trivial': 4,
}

JIRA_CATEGORY_MAP = {'new': UNSTARTED, 'indeterminate': STARTED, 'done': COMPLETED}
COMPLETED_STATUS_NAMES = {'done', 'closed', 'resolved'}
CANCELED_STATUS_NAMES = {'canceled', 'cancelled', "won't do", 'wont do'}

_RAW_AUTHOR = re.compile(r'^\s*(?P<name>[^<]*?)\s*<(?P<email>[^>]+)>\s*$')


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or pass through a datetime); naive values are treated as UTC.
    Unparseable values return None.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = dtparser.isoparse(str(value))
        except (ValueError, OverflowError):
            logger.debug("Unparseable timestamp %r", value)
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


def normalize_user(raw: Optional[Dict[str, Any]]) -> Optional[User]:
    """Create a normalized User from a raw provider dict.
    Expected keys vary by provider; function extracts common fields.
    """
    if not isinstance(raw, dict) or not raw:
        return None
    user_id = raw.get('user_id') or raw.get('accountId') or raw.get('id') or raw.get('uuid') or raw.get('login') or raw.get('username') or ''
    display_name = raw.get('display_name') or raw.get('displayName') or raw.get('name') or raw.get('login') or ''
    email = raw.get('email') or raw.get('emailAddress') or None
    avatars = raw.get('avatarUrls') if isinstance(raw.get('avatarUrls'), dict) else {}
    avatar_url = raw.get('avatar_url') or raw.get('avatarUrl') or avatars.get('48x48')
    # Linear `name` is the handle; JIRA only has displayName, which doubles as the handle there
    name = raw.get('login') or raw.get('nickname') or raw.get('username') or raw.get('name') or raw.get('displayName')
    return User(user_id=str(user_id), display_name=display_name, email=email, avatar_url=avatar_url, name=name)


def _normalize_team(raw: Optional[Dict[str, Any]]) -> Optional[Team]:
    if not isinstance(raw, dict):
        return None
    team_id = raw.get('team_id') or raw.get('id') or raw.get('key')
    if not team_id:
        return None
    return Team(team_id=str(team_id), key=raw.get('key'), name=raw.get('name'))


def _label_nodes(labels: Any) -> List[Any]:
    """Return label entries from Linear connections (nodes/edges) or plain lists."""
    if isinstance(labels, dict):
        if 'nodes' in labels:
            return list(labels.get('nodes') or [])
        return [edge.get('node') for edge in labels.get('edges') or [] if isinstance(edge, dict)]
    if isinstance(labels, (list, tuple)):
        return list(labels)
    return []


def _normalize_labels(labels: Any) -> tuple:
    result = []
    for node in _label_nodes(labels):
        if isinstance(node, str) and node:
            result.append(Label(name=node))
        elif isinstance(node, dict) and node.get('name'):
            result.append(Label(name=node['name'], color=node.get('color')))
    return tuple(result)


def _linear_priority(value: Any) -> Optional[int]:
    priority = _to_int(value)
    # Linear uses 0 for "no priority"
    return priority if priority in (1, 2, 3, 4) else None


def normalize_linear_issue(raw: Dict[str, Any]) -> Issue:
    """Create a normalized Issue from a Linear GraphQL issue node."""
    state = raw.get('state') or {}
    category = (state.get('type') or raw.get('statusType') or UNSTARTED).lower()
    status = Status(name=state.get('name') or raw.get('status') or category, category=category)
    return Issue(
        issue_id=str(raw.get('id') or raw.get('identifier') or ''),
        identifier=raw.get('identifier') or raw.get('key') or str(raw.get('id') or ''),
        title=raw.get('title') or '',
        description=raw.get('description'),
        estimate=_to_float(raw.get('estimate', raw.get('storyPoints'))),
        priority=_linear_priority(raw.get('priority')),
        assignee=normalize_user(raw.get('assignee')),
        team=_normalize_team(raw.get('team')),
        labels=_normalize_labels(raw.get('labels')),
        status=status,
        created_at=parse_timestamp(raw.get('createdAt')),
        updated_at=parse_timestamp(raw.get('updatedAt')),
        completed_at=parse_timestamp(raw.get('completedAt')),
    )


def _adf_text(node: Any) -> str:
    """Flatten an Atlassian Document Format node into plain text."""
    if isinstance(node, str):
        return node
    if not isinstance(node, dict):
        return ''
    if node.get('type') == 'text':
        return node.get('text') or ''
    parts = [_adf_text(child) for child in node.get('content') or []]
    return ' '.join(p for p in parts if p)


def _jira_priority(priority: Any) -> Optional[int]:
    name = priority.get('name') if isinstance(priority, dict) else priority
    if not name:
        return None
    if isinstance(name, (int, float)):
        return int(name) if int(name) in (1, 2, 3, 4) else None
    return JIRA_PRIORITY_ORDINALS.get(str(name).strip().lower())


def _jira_status(status: Any) -> Status:
    if not isinstance(status, dict):
        return Status(name=str(status or 'To Do'), category=UNSTARTED)
    name = status.get('name') or ''
    lowered = name.lower()
    if lowered in CANCELED_STATUS_NAMES:
        return Status(name=name, category=CANCELED)
    if lowered in COMPLETED_STATUS_NAMES:
        return Status(name=name, category=COMPLETED)
    key = ((status.get('statusCategory') or {}).get('key') or '').lower()
    return Status(name=name or key, category=JIRA_CATEGORY_MAP.get(key, key or UNSTARTED))


def normalize_jira_issue(raw: Dict[str, Any]) -> Issue:
    """Create a normalized Issue from a raw JIRA REST issue dict.
    The project stands in for the team, since JIRA has no team concept of its own.
    """
    fields = raw.get('fields') or {}
    key = raw.get('key') or fields.get('key') or ''
    story_points = fields.get('customfield_10016')
    if story_points is None:
        story_points = fields.get('storyPoints')
    description = fields.get('description')
    return Issue(
        issue_id=str(raw.get('id') or key),
        identifier=key or str(raw.get('id') or ''),
        title=fields.get('summary') or raw.get('title') or '',
        description=_adf_text(description) if description else None,
        estimate=_to_float(story_points),
        priority=_jira_priority(fields.get('priority')),
        assignee=normalize_user(fields.get('assignee')),
        team=_normalize_team(fields.get('project')),
        labels=_normalize_labels(fields.get('labels')),
        status=_jira_status(fields.get('status')),
        created_at=parse_timestamp(fields.get('created')),
        updated_at=parse_timestamp(fields.get('updated')),
        completed_at=parse_timestamp(fields.get('resolutiondate')),
    )


def normalize_issue_record(raw: Dict[str, Any]) -> Issue:
    """Rebuild an Issue from its own as_dict() form (re-loading a saved export)."""
    status = raw.get('status') or {}
    return Issue(
        issue_id=str(raw.get('issue_id') or raw.get('identifier') or ''),
        identifier=raw.get('identifier') or str(raw.get('issue_id') or ''),
        title=raw.get('title') or '',
        description=raw.get('description'),
        estimate=_to_float(raw.get('estimate')),
        priority=_linear_priority(raw.get('priority')),
        assignee=normalize_user(raw.get('assignee')),
        team=_normalize_team(raw.get('team')),
        labels=_normalize_labels(raw.get('labels')),
        status=Status(name=status.get('name') or '', category=(status.get('category') or UNSTARTED).lower()),
        created_at=parse_timestamp(raw.get('created_at')),
        updated_at=parse_timestamp(raw.get('updated_at')),
        completed_at=parse_timestamp(raw.get('completed_at')),
    )


def normalize_github_commit(raw: Dict[str, Any]) -> Commit:
    """Create a normalized Commit from a GitHub REST commit object."""
    inner = raw.get('commit') or {}
    author = inner.get('author') or {}
    stats = raw.get('stats') or {}
    files = tuple(f.get('filename') for f in raw.get('files') or [] if isinstance(f, dict) and f.get('filename'))
    return Commit(
        sha=raw.get('sha') or '',
        message=inner.get('message') or raw.get('message') or '',
        author=CommitAuthor(
            name=author.get('name') or '',
            email=author.get('email'),
            date=parse_timestamp(author.get('date')),
            login=(raw.get('author') or {}).get('login'),
        ),
        additions=_to_int(stats.get('additions')),
        deletions=_to_int(stats.get('deletions')),
        files=files,
    )


def normalize_github_pull(raw: Dict[str, Any]) -> PullRequest:
    """Create a normalized PullRequest from a GitHub REST pull object."""
    return PullRequest(
        number=_to_int(raw.get('number')) or 0,
        title=raw.get('title') or '',
        body=raw.get('body'),
        author=(raw.get('user') or {}).get('login'),
        state=(raw.get('state') or 'open').lower(),
        created_at=parse_timestamp(raw.get('created_at')),
        updated_at=parse_timestamp(raw.get('updated_at')),
        merged_at=parse_timestamp(raw.get('merged_at')),
        closed_at=parse_timestamp(raw.get('closed_at')),
    )


def _split_raw_author(raw_author: str):
    match = _RAW_AUTHOR.match(raw_author or '')
    if not match:
        return (raw_author or '').strip(), None
    return match.group('name'), match.group('email')


def normalize_bitbucket_commit(raw: Dict[str, Any]) -> Commit:
    """Create a normalized Commit from a Bitbucket Cloud commit object (`author.raw` is "Name <email>")."""
    author = raw.get('author') or {}
    user = author.get('user') or {}
    raw_name, raw_email = _split_raw_author(author.get('raw') or '')
    return Commit(
        sha=raw.get('hash') or '',
        message=raw.get('message') or '',
        author=CommitAuthor(
            name=user.get('display_name') or raw_name,
            email=user.get('email') or raw_email,
            date=parse_timestamp(raw.get('date')),
            login=user.get('nickname') or user.get('username'),
        ),
    )


def normalize_bitbucket_pull(raw: Dict[str, Any]) -> PullRequest:
    """Create a normalized PullRequest from a Bitbucket Cloud pull request object."""
    author = raw.get('author') or {}
    state = (raw.get('state') or 'OPEN').upper()
    updated = parse_timestamp(raw.get('updated_on'))
    return PullRequest(
        number=_to_int(raw.get('id')) or 0,
        title=raw.get('title') or '',
        body=raw.get('description'),
        author=author.get('nickname') or author.get('username') or author.get('display_name'),
        state=state.lower(),
        created_at=parse_timestamp(raw.get('created_on')),
        updated_at=updated,
        merged_at=updated if state == 'MERGED' else None,
        closed_at=updated if state in ('MERGED', 'DECLINED', 'SUPERSEDED') else None,
    )


def normalize_commit_record(raw: Dict[str, Any]) -> Commit:
    """Rebuild a Commit from its own as_dict() form."""
    author = raw.get('author') or {}
    return Commit(
        sha=raw.get('sha') or '',
        message=raw.get('message') or '',
        author=CommitAuthor(
            name=author.get('name') or '',
            email=author.get('email'),
            date=parse_timestamp(author.get('date')),
            login=author.get('login'),
        ),
        additions=_to_int(raw.get('additions')),
        deletions=_to_int(raw.get('deletions')),
        files=tuple(raw.get('files') or ()),
    )


def normalize_pull_record(raw: Dict[str, Any]) -> PullRequest:
    """Rebuild a PullRequest from its own as_dict() form."""
    return PullRequest(
        number=_to_int(raw.get('number')) or 0,
        title=raw.get('title') or '',
        body=raw.get('body'),
        author=raw.get('author'),
        state=raw.get('state') or 'open',
        created_at=parse_timestamp(raw.get('created_at')),
        updated_at=parse_timestamp(raw.get('updated_at')),
        merged_at=parse_timestamp(raw.get('merged_at')),
        closed_at=parse_timestamp(raw.get('closed_at')),
    )


_ISSUE_NORMALIZERS: Dict[str, Callable[[Dict[str, Any]], Issue]] = {
    'linear': normalize_linear_issue,
    'jira': normalize_jira_issue,
    'normalized': normalize_issue_record,
}

_COMMIT_NORMALIZERS: Dict[str, Callable[[Dict[str, Any]], Commit]] = {
    'github': normalize_github_commit,
    'bitbucket': normalize_bitbucket_commit,
    'normalized': normalize_commit_record,
}

_PULL_NORMALIZERS: Dict[str, Callable[[Dict[str, Any]], PullRequest]] = {
    'github': normalize_github_pull,
    'bitbucket': normalize_bitbucket_pull,
    'normalized': normalize_pull_record,
}


def _pick(table: Dict[str, Callable], source: str, what: str) -> Callable:
    normalizer = table.get((source or '').lower())
    if normalizer is None:
        raise ValueError(f"Unsupported {what} source '{source}'; expected one of: {', '.join(table)}")
    return normalizer


def normalize_issues(raws: Iterable[Any], source: str) -> List[Issue]:
    """Normalize a list of raw issue payloads from the named tracker; non-dict entries are skipped."""
    normalizer = _pick(_ISSUE_NORMALIZERS, source, 'issue')
    return [normalizer(r) for r in raws or [] if isinstance(r, dict)]


def normalize_commits(raws: Iterable[Any], source: str) -> List[Commit]:
    normalizer = _pick(_COMMIT_NORMALIZERS, source, 'commit')
    return [normalizer(r) for r in raws or [] if isinstance(r, dict)]


def normalize_pulls(raws: Iterable[Any], source: str) -> List[PullRequest]:
    normalizer = _pick(_PULL_NORMALIZERS, source, 'pull request')
    return [normalizer(r) for r in raws or [] if isinstance(r, dict)]
