"""Index page rendering.

The page template is parsed once at startup into an immutable PageTemplate
and handed to the router factory; handlers never reach for a global.
"""
from __future__ import annotations

from dataclasses import dataclass
from html import escape
from pathlib import Path
from string import Template
from typing import Iterable

from shortener.app.domain.models import User

_ROW = "            <tr><td>{id}</td><td>{name}</td></tr>"


@dataclass(frozen=True)
class PageTemplate:
    source: str
    title: str = "URL Shortener"

    def __post_init__(self) -> None:
        # Fail at load time, not on the first request.
        if "$rows" not in self.source and "${rows}" not in self.source:
            raise ValueError("page template must contain a $rows placeholder")

    @classmethod
    def from_path(cls, path: Path, *, title: str = "URL Shortener") -> "PageTemplate":
        return cls(source=Path(path).read_text(encoding="utf-8"), title=title)

    def render(self, users: Iterable[User]) -> str:
        rows = "\n".join(_ROW.format(id=user.id, name=escape(user.name)) for user in users)
        return Template(self.source).safe_substitute(title=escape(self.title), rows=rows)
