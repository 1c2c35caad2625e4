"""
Configuration data model for sfind.

This module defines the immutable search configuration shared by every walker:
the earliest modification time, the filename globs, the excluded path components,
the root paths and the case-folding switch. Globs are validated and compiled once
when the configuration is built so that traversal never deals with bad patterns.
"""

import re
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from ..dates import EPOCH, coerce_from


MATCH_ALL = '*'
DEFAULT_PATH = '.'


def _as_list(value: Any) -> List[str]:
    """Accept a single string or an iterable of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable):
        return [str(item) for item in value]
    raise ValueError(f"Expected a string or a list of strings, got {type(value).__name__}")


def _unique(items: Iterable[str]) -> Tuple[str, ...]:
    """Drop blank and repeated items, keeping the first occurrence."""
    seen = set()
    result = []
    for item in items:
        if not item or not item.strip() or item in seen:
            continue
        seen.add(item)
        result.append(item)
    return tuple(result)


def _unterminated(pattern: str) -> ValueError:
    return ValueError(f"Invalid glob pattern {pattern!r}: unterminated bracket expression")


def _translate_bracket(pattern: str, i: int) -> Tuple[str, int]:
    """Translate the bracket expression whose body starts at ``pattern[i]``."""
    n = len(pattern)
    negated = i < n and pattern[i] in '!^'
    if negated:
        i += 1

    ranges = []
    first = True
    while True:
        if i >= n:
            raise _unterminated(pattern)
        c = pattern[i]
        # A leading ']' is a member of the set, not its end
        if c == ']' and not first:
            i += 1
            break
        first = False
        if c == '\\':
            i += 1
            if i >= n:
                raise _unterminated(pattern)
            c = pattern[i]
        i += 1
        lo = hi = c
        if i + 1 < n and pattern[i] == '-' and pattern[i + 1] != ']':
            hi = pattern[i + 1]
            i += 2
            if hi == '\\':
                if i >= n:
                    raise _unterminated(pattern)
                hi = pattern[i]
                i += 1
        ranges.append((lo, hi))

    body = ''.join(
        re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}"
        for lo, hi in ranges
        if lo <= hi
    )
    if not body:
        # Only reversed ranges: nothing can match, or anything when negated
        return ('.' if negated else '(?!)'), i
    return ('[^' if negated else '[') + body + ']', i


def glob_to_regex(pattern: str) -> str:
    """
    Translate a shell glob into an anchored regular expression.

    Supports ``*``, ``?``, bracket expressions (``[abc]``, ``[a-z]``, negated
    with ``!`` or ``^``) and backslash escapes, where ``\\c`` matches ``c``
    literally both inside and outside brackets.

    Args:
        pattern: Glob pattern as supplied by the user

    Returns:
        Regex source matching whole names only

    Raises:
        ValueError: If a bracket expression is unterminated or the pattern ends
            with a lone backslash
    """
    parts = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c == '*':
            if not parts or parts[-1] != '.*':
                parts.append('.*')
        elif c == '?':
            parts.append('.')
        elif c == '\\':
            if i >= n:
                raise ValueError(f"Invalid glob pattern {pattern!r}: trailing backslash")
            parts.append(re.escape(pattern[i]))
            i += 1
        elif c == '[':
            bracket, i = _translate_bracket(pattern, i)
            parts.append(bracket)
        else:
            parts.append(re.escape(c))

    return r'(?s:' + ''.join(parts) + r')\Z'


class SearchConfig(BaseModel):
    """
    Immutable description of one search.

    Attributes:
        from_time: Earliest accepted modification time (alias ``from``)
        globs: Filename patterns, a file qualifies if it matches any of them
        excludes: Path component names that prune a directory and its subtree
        paths: Root paths searched independently
        casefold: Compare names and patterns in lower case
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='forbid')

    from_time: datetime = Field(EPOCH, alias='from', description="Earliest accepted modification time")
    globs: Tuple[str, ...] = Field((MATCH_ALL,), description="Filename glob patterns")
    excludes: Tuple[str, ...] = Field((), description="Excluded path component names")
    paths: Tuple[str, ...] = Field((DEFAULT_PATH,), description="Root paths to search")
    casefold: bool = Field(False, description="Case-insensitive name comparison")

    _glob_matchers: List[re.Pattern] = PrivateAttr(default_factory=list)
    _folded_excludes: FrozenSet[str] = PrivateAttr(default_factory=frozenset)

    @field_validator('from_time', mode='before')
    @classmethod
    def validate_from_time(cls, v) -> datetime:
        """Resolve relative and date-only values to an aware instant."""
        return coerce_from(v)

    @field_validator('globs', mode='before')
    @classmethod
    def validate_globs(cls, v) -> Tuple[str, ...]:
        """Reject malformed globs and fall back to matching everything."""
        globs = _unique(_as_list(v))
        for glob in globs:
            glob_to_regex(glob)
        return globs or (MATCH_ALL,)

    @field_validator('excludes', mode='before')
    @classmethod
    def validate_excludes(cls, v) -> Tuple[str, ...]:
        return _unique(_as_list(v))

    @field_validator('paths', mode='before')
    @classmethod
    def validate_paths(cls, v) -> Tuple[str, ...]:
        """Keep roots exactly as given so output preserves their prefix."""
        return _unique(_as_list(v)) or (DEFAULT_PATH,)

    def model_post_init(self, __context) -> None:
        """Compile globs and fold excludes once for all walkers."""
        self._glob_matchers = [
            re.compile(glob_to_regex(self.fold(glob)))
            for glob in self.globs
        ]
        self._folded_excludes = frozenset(self.fold(name) for name in self.excludes)

    def fold(self, text: str) -> str:
        """Lower-case ``text`` when case folding is enabled."""
        return text.lower() if self.casefold else text

    def matches_glob(self, name: str) -> bool:
        """Check a base name against the globs (anchored at both ends)."""
        name = self.fold(name)
        return any(matcher.match(name) for matcher in self._glob_matchers)

    def is_excluded(self, component: str) -> bool:
        """Check a single, already folded, path component against the excludes."""
        return component in self._folded_excludes

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump(by_alias=True)
        data['from'] = self.from_time.isoformat()
        data['globs'] = list(self.globs)
        data['excludes'] = list(self.excludes)
        data['paths'] = list(self.paths)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """Debug dump, one setting per line."""
        return "\n".join([
            f"from={self.from_time.isoformat(sep=' ')}",
            f"globs=[{' '.join(self.globs)}]",
            f"excludes=[{' '.join(self.excludes)}]",
            f"paths=[{' '.join(self.paths)}]",
            f"casefold={str(self.casefold).lower()}",
        ])
