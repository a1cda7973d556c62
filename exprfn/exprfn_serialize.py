from __future__ import annotations

import json
from typing import Any, Optional
import collections.abc

import yaml

# TOML: prefer stdlib tomllib (3.11+), else the 'toml' package
try:
    import tomllib as _toml_loader  # type: ignore[attr-defined]
    _HAS_TOMLLIB = True
except ImportError:
    _HAS_TOMLLIB = False
    _toml_loader = None
try:
    import toml as _toml  # type: ignore[no-redef]
except ImportError:
    _toml = None  # type: ignore[assignment]

import xmltodict


# --------------------------
# Helpers
# --------------------------

def _norm_text(data: bytes | bytearray | str) -> str:
    if isinstance(data, (bytes, bytearray)):
        return data.decode('utf-8', errors='replace')
    if isinstance(data, str):
        return data
    return str(data)


def _to_builtin(obj: Any) -> Any:
    # xmltodict returns nested mappings; convert them to plain dicts
    if isinstance(obj, list):
        return [_to_builtin(x) for x in obj]
    if isinstance(obj, collections.abc.Mapping):
        return {k: _to_builtin(v) for k, v in obj.items()}
    return obj


def _load_toml(text: str) -> Any:
    if _HAS_TOMLLIB:
        return _toml_loader.loads(text)
    if _toml is None:
        raise RuntimeError("TOML support requires Python 3.11+ (tomllib) or the 'toml' package")
    return _toml.loads(text)


_LOADERS = {
    'json': json.loads,
    'yaml': yaml.safe_load,
    'toml': _load_toml,
    'xml': lambda text: _to_builtin(xmltodict.parse(text)),
}


def detect_format(data_hint: Optional[str]) -> Optional[str]:
    """
    Returns a canonical format name among: 'json', 'yaml', 'xml'
    by sniffing the data. TOML is never sniffed; pass fmt explicitly.
    """
    if data_hint is not None:
        s = data_hint.lstrip()
        if s.startswith('{'):
            return 'json'
        if s.startswith('<'):
            return 'xml'
        if s:
            # YAML is a superset of JSON and covers plain key: value files
            return 'yaml'
    return None


# --------------------------
# Public API
# --------------------------

def deserialize(data: bytes | bytearray | str,
                *,
                fmt: Optional[str] = None) -> Any:
    """
    Convert file data (bytes/string) to native Python structures.
    Supported fmt: 'json', 'yaml', 'toml', 'xml'.
    If fmt is None, the format is sniffed from the text.
    Declared JSON that fails to parse is retried as YAML; other parse
    errors propagate. Unknown formats return the text unchanged.
    """
    text = _norm_text(data)
    f = fmt or detect_format(text)
    if f == 'json':
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return yaml.safe_load(text)
    loader = _LOADERS.get(f)
    if loader is None:
        return text
    return loader(text)


def serialize(value: Any,
              *,
              fmt: str,
              pretty: bool = True,
              xml_root: str = "tokens") -> str:
    """
    Convert a native Python value into a textual representation.
    - fmt: 'json' | 'yaml' | 'toml' | 'xml'
    - For XML, if value is not a single-rooted dict, it is wrapped under {xml_root: value}
    """
    f = (fmt or '').lower()
    built = _to_builtin(value)
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(built, sort_keys=False, allow_unicode=True)
    if f == 'toml':
        if _toml is None:
            raise RuntimeError("TOML serialization requires the 'toml' package")
        return _toml.dumps(built)  # type: ignore[union-attr]
    if f == 'xml':
        root = built if isinstance(built, dict) and len(built) == 1 else {xml_root: built}
        return xmltodict.unparse(root, pretty=pretty)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


__all__ = [
    "deserialize",
    "serialize",
    "detect_format",
]
