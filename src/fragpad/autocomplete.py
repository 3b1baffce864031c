"""Dotted-path completion against a live namespace.

The resolver walks the namespace through an :class:`Introspector`, so any
object graph that can list and fetch members can be completed.
"""

from __future__ import annotations

import builtins
import re
from collections import ChainMap
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Protocol

_TOKEN_RE = re.compile(r"[A-Za-z0-9_.]*$")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class Introspector(Protocol):
    """Lists and fetches the members of arbitrary objects."""

    def list_keys(self, obj: Any) -> Iterable[str]: ...

    def get(self, obj: Any, key: str) -> Any:
        """Return the member, or :data:`MISSING` when there is none."""
        ...


class PythonIntrospector:
    """Members as Python code reaches them.

    The root mapping (the namespace) is walked by its string keys; every
    object below it by attribute, so ``d.`` on a dict offers ``d.keys``
    rather than the dict's entries.
    """

    def __init__(self, root: Any = None) -> None:
        self.root = root

    def _is_root_mapping(self, obj: Any) -> bool:
        return obj is self.root and isinstance(obj, Mapping)

    def list_keys(self, obj: Any) -> Iterable[str]:
        if self._is_root_mapping(obj):
            return [key for key in obj.keys() if isinstance(key, str)]
        try:
            return dir(obj)
        except Exception:
            return []

    def get(self, obj: Any, key: str) -> Any:
        if self._is_root_mapping(obj):
            try:
                return obj[key]
            except KeyError:
                return MISSING
        try:
            return getattr(obj, key)
        except Exception:
            return MISSING


def namespace_view(namespace: Mapping[str, Any]) -> Mapping[str, Any]:
    """Names visible to fragment code: the namespace, then builtins."""
    return ChainMap(dict(namespace), vars(builtins))


@dataclass
class Completion:
    """Outcome of resolving the token before the cursor.

    ``path`` holds the segments that resolved, ``prefix`` the unresolved
    last segment (replaced on accept) and ``candidates`` the members
    starting with it, shortest first.
    """

    token: str
    path: list[str] = field(default_factory=list)
    prefix: str = ""
    candidates: list[str] = field(default_factory=list)
    exact: bool = False

    @property
    def staged(self) -> str | None:
        return self.candidates[0] if self.candidates else None

    @property
    def offset(self) -> int:
        """Characters left of the cursor that the staged candidate replaces."""
        return len(self.prefix)


def completion_token(text_before_cursor: str) -> str:
    """Trailing run of identifier characters and dots."""
    match = _TOKEN_RE.search(text_before_cursor)
    return match.group() if match else ""


def resolve(
    text_before_cursor: str,
    root: Any,
    introspector: Introspector | None = None,
) -> Completion:
    introspector = introspector or PythonIntrospector(root)
    token = completion_token(text_before_cursor)
    completion = Completion(token=token)
    if not token:
        return completion

    current = root
    segments = token.split(".")
    for index, segment in enumerate(segments):
        value = introspector.get(current, segment) if segment else MISSING
        if value is MISSING:
            completion.prefix = segment
            completion.candidates = _candidates(introspector, current, segment)
            return completion
        completion.path.append(segment)
        if index + 1 < len(segments):
            current = value

    completion.exact = True
    return completion


def _candidates(introspector: Introspector, obj: Any, prefix: str) -> list[str]:
    names = {
        name
        for name in introspector.list_keys(obj)
        if name.startswith(prefix) and (prefix.startswith("_") or not name.startswith("_"))
    }
    return sorted(names, key=lambda name: (len(name), name))
