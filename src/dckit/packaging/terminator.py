"""Terminator tokens that bound each embedded payload.

A token is derived from the payload's path (`devcontainer.json` becomes
`EOF_devcontainer_json`). A token must not occur anywhere in its own payload
and must be unique within one installer; otherwise extraction would stop
early or pick up the wrong block. When the derived token breaks either rule a
salted variant is chosen instead, deterministically.
"""

import hashlib
import logging
import re
from collections.abc import Sequence

from dckit.packaging.manifest import SourceFile

logger = logging.getLogger(__name__)

TERMINATOR_PREFIX = "EOF_"

_SEPARATOR = re.compile(r"[^A-Za-z0-9]")


def base_terminator(path: str) -> str:
    return TERMINATOR_PREFIX + _SEPARATOR.sub("_", path)


def salted_terminator(path: str, counter: int) -> str:
    digest = hashlib.sha256(f"{path}:{counter}".encode()).hexdigest()[:8]
    return f"{base_terminator(path)}_{digest}"


def is_unambiguous(token: str, content: bytes, issued: set[str]) -> bool:
    return token not in issued and token.encode("utf-8") not in content


def choose_terminator(source: SourceFile, issued: set[str]) -> str:
    """Pick the first unambiguous token for source, trying salted variants in order."""
    token = base_terminator(source.path)
    counter = 0
    while not is_unambiguous(token, source.content, issued):
        counter += 1
        logger.debug("Terminator %s is ambiguous for %s; salting", token, source.path)
        token = salted_terminator(source.path, counter)
    return token


def assign_terminators(files: Sequence[SourceFile]) -> tuple[str, ...]:
    """Assign one unambiguous terminator per file, in manifest order."""
    issued: set[str] = set()
    tokens: list[str] = []
    for source in files:
        token = choose_terminator(source, issued)
        issued.add(token)
        tokens.append(token)
    return tuple(tokens)
