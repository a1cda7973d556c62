"""
Application token sources.

A token is an application-scoped configuration string. The `token` function
resolves it through an explicit context handle rather than global state.
"""
from __future__ import annotations

import collections.abc
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

from exprfn.exprfn_datatypes import DefinitionNotReady, InvalidApplication
from exprfn.exprfn_serialize import deserialize, serialize, detect_format
from exprfn.exprfn_stringify import stringify

INVALID_APPLICATION = "EXPRFN: INVALID APPLICATION"

_EXT_FORMATS = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".xml": "xml",
    ".tokens": "xml",
}


def _dbg(*parts):
    if os.environ.get("EXPRFN_DEBUG"):
        print("[DBG]", *parts, file=sys.stderr)


@dataclass(frozen=True)
class TokenResult:
    """The outcome of resolving a token, collapsed to a string at the boundary."""
    status: Literal['found', 'empty', 'invalid']
    value: Optional[str] = None

    def collapse(self) -> str:
        if self.status == 'found':
            return self.value
        if self.status == 'invalid':
            return INVALID_APPLICATION
        return ""


@dataclass
class ApplicationDefinition:
    """An application definition owning an optional token map."""
    name: str
    tokens: Optional[Mapping[str, str]] = None

    @classmethod
    def from_file(cls, path, name: Optional[str] = None) -> 'ApplicationDefinition':
        p = Path(path)
        return cls(name or p.stem, load_token_map(p))


class ContextTokenSource:
    """Holds application definitions and the name of the current application."""

    def __init__(self, definitions: Optional[Dict[str, Any]] = None, current: Optional[str] = None):
        self.definitions: Dict[str, Any] = dict(definitions or {})
        self.current = current

    def register(self, definition: ApplicationDefinition, make_current: bool = False) -> None:
        self.definitions[definition.name] = definition
        if make_current:
            self.current = definition.name

    def get_current_definition(self) -> ApplicationDefinition:
        if self.current is None:
            raise DefinitionNotReady("no current application")
        if self.current not in self.definitions:
            raise DefinitionNotReady(f"application {self.current!r} is not loaded")
        definition = self.definitions[self.current]
        if not isinstance(definition, ApplicationDefinition):
            raise InvalidApplication(
                f"{self.current!r} resolved to {type(definition).__name__}, not an application"
            )
        return definition

    def get_current_token_map(self) -> Optional[Mapping[str, str]]:
        return self.get_current_definition().tokens


def _current_token_map(context: Any) -> Any:
    if hasattr(context, "get_current_token_map"):
        return context.get_current_token_map()
    if callable(context):
        return context()
    return context


def resolve_token(context: Any, key: Any) -> TokenResult:
    """Looks up `key` in the token map supplied by `context`.

    `context` is a token source, a zero-argument callable returning a token
    map, a token map itself, or None.
    """
    if context is None:
        return TokenResult('empty')
    try:
        tokens = _current_token_map(context)
    except TypeError as e:
        # InvalidApplication, or a provider reporting a definition of the wrong kind
        _dbg("token", repr(key), "invalid application:", e)
        return TokenResult('invalid')
    except DefinitionNotReady as e:
        _dbg("token", repr(key), "definition not ready:", e)
        return TokenResult('empty')
    if tokens is None:
        return TokenResult('empty')
    if not isinstance(tokens, collections.abc.Mapping):
        _dbg("token", repr(key), "token map has type", type(tokens).__name__)
        return TokenResult('invalid')
    if key is None or not isinstance(key, collections.abc.Hashable) or key not in tokens:
        return TokenResult('empty')
    value = stringify(tokens[key])
    return TokenResult('found', "" if value is None else value)


def _tokens_from_xml(parsed: Any) -> Dict[str, str]:
    # <tokens><token name="a" value="b"/>...</tokens>
    root = next(iter(parsed.values()), None) if isinstance(parsed, dict) else None
    entries = (root or {}).get("token") if isinstance(root, dict) else None
    if entries is None:
        return {}
    if isinstance(entries, dict):
        entries = [entries]
    out: Dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, dict) or "@name" not in entry:
            raise ValueError(f"token entry without a name: {entry!r}")
        out[entry["@name"]] = entry.get("@value", "")
    return out


def load_token_map(path, *, fmt: Optional[str] = None) -> Dict[str, str]:
    """Reads a token file (JSON, YAML, TOML or XML) into a flat str → str map.

    The format is `fmt`, else the one implied by the extension, else sniffed.
    """
    p = Path(path)
    text = p.read_bytes().decode("utf-8", errors="replace")
    f = fmt or _EXT_FORMATS.get(p.suffix.lower()) or detect_format(text)
    data = deserialize(text, fmt=f)
    if f == "xml":
        data = _tokens_from_xml(data)
    if data is None:
        return {}
    if not isinstance(data, collections.abc.Mapping):
        raise ValueError(f"token file {str(p)!r} must contain a mapping, got {type(data).__name__}")
    tokens = {}
    for k, v in data.items():
        s = stringify(v)
        tokens[str(k)] = "" if s is None else s
    _dbg("loaded", len(tokens), "token(s) from", str(p))
    return tokens


def save_token_map(path, tokens: Mapping[str, str], *, fmt: Optional[str] = None) -> None:
    """Writes a token map in the format given by `fmt` or the file extension."""
    p = Path(path)
    f = fmt or _EXT_FORMATS.get(p.suffix.lower()) or "json"
    data: Any = dict(tokens)
    if f == "xml":
        data = {"tokens": {"token": [{"@name": k, "@value": v} for k, v in tokens.items()]}}
    p.write_text(serialize(data, fmt=f), encoding="utf-8")


__all__ = [
    "INVALID_APPLICATION",
    "TokenResult",
    "ApplicationDefinition",
    "ContextTokenSource",
    "resolve_token",
    "load_token_map",
    "save_token_map",
]
