"""Data models for extracted import references."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class SpecifierKind(Enum):
    """How a module specifier is written."""

    RELATIVE = "relative"  # ./x.js, ../x.js
    ABSOLUTE = "absolute"  # /x.js
    BARE = "bare"  # lodash, https://..., node:fs

    @property
    def actionable(self) -> bool:
        return self is not SpecifierKind.BARE


class ImportForm(Enum):
    """Syntactic form of the module reference."""

    STATIC = "static"  # import x from 'X'
    SIDE_EFFECT = "side_effect"  # import 'X'
    DYNAMIC = "dynamic"  # import('X')
    REEXPORT = "reexport"  # export ... from 'X'


class EdgeStatus(Enum):
    """Resolution state of an import edge."""

    PENDING = "pending"
    RESOLVED = "resolved"
    EXCLUDED = "excluded"
    UNRESOLVED = "unresolved"


@dataclass
class ImportEdge:
    """A module reference found in a source file.

    ``start`` and ``end`` are byte offsets of the specifier text (inside the
    quotes) in the importer's content as it was when extracted.
    """

    specifier: str
    kind: SpecifierKind
    form: ImportForm
    path: str
    start: int
    end: int
    version: str | None = None  # Existing ?v= value
    query: str = ""  # Raw query string without the leading '?'
    fragment: str = ""
    line: int = 0
    target: Path | None = None
    status: EdgeStatus = EdgeStatus.PENDING

    @property
    def actionable(self) -> bool:
        return self.kind.actionable

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "specifier": self.specifier,
            "kind": self.kind.value,
            "form": self.form.value,
            "path": self.path,
            "span": [self.start, self.end],
            "status": self.status.value,
        }
        if self.version:
            result["version"] = self.version
        if self.target:
            result["target"] = str(self.target)
        if self.line:
            result["line"] = self.line
        return result
