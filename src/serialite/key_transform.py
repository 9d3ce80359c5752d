"""
Key transformation strategies for output keys.

Every strategy splits a key into words (on ``_``, ``-``, whitespace and case boundaries, in any
script), lower cases each word and re-joins them. Because the split is insensitive to the joined
form, applying a strategy to its own output is a no-op.

Examples:
    >>> transform_key("user_name", "camel")
    'UserName'
    >>> transform_key("user_name", "lower_camel")
    'userName'
    >>> transform_key("userName", "snake")
    'user_name'
    >>> transform_key("user_name", "dash")
    'user-name'
    >>> transform_key("user_name", None)
    'user_name'
"""

from __future__ import annotations

import re
from typing import Literal

KeyTransform = Literal["none", "camel", "lower_camel", "snake", "dash"]

KEY_TRANSFORMS: tuple[str, ...] = ("none", "camel", "lower_camel", "snake", "dash")

_ALIASES = {
    "lowerCamel": "lower_camel",
    "lower_camel_case": "lower_camel",
    "camel_case": "camel",
    "kebab": "dash",
}

# Runs of letters and digits in any script; separators are everything else.
_CHUNK_PATTERN = re.compile(r"[^\W_]+")


def normalize_strategy(strategy: str | None) -> str | None:
    """
    Resolve a strategy name (or alias) to its canonical name.

    Returns None for absent or unknown strategies, both of which mean "leave keys unchanged".
    """
    if strategy is None:
        return None
    name = _ALIASES.get(str(strategy), str(strategy))
    if name not in KEY_TRANSFORMS or name == "none":
        return None
    return name


def split_words(key: str) -> list[str]:
    """
    Split a key into lower-cased words.

    Words break on separators, between letters and digits, before an upper-case letter that
    follows a non-upper-case one, and before the last letter of an acronym run followed by a
    lower-case letter ("HTMLParser" -> "html", "parser").

    Examples:
        >>> split_words("größeWert")
        ['größe', 'wert']
        >>> split_words("HTMLParser_v2")
        ['html', 'parser', 'v', '2']
    """
    words = []
    for chunk in _CHUNK_PATTERN.findall(key):
        current = ""
        for index, char in enumerate(chunk):
            if current:
                previous = current[-1]
                following = chunk[index + 1 : index + 2]
                if (
                    previous.isdigit() != char.isdigit()
                    or (char.isupper() and not previous.isupper())
                    or (char.isupper() and following.islower())
                ):
                    words.append(current)
                    current = ""
            current += char
        if current:
            words.append(current)
    return [word.lower() for word in words]


def transform_key(key: str, strategy: str | None) -> str:
    """
    Transform a single key under the named strategy.

    Leading and trailing underscores are kept, so ``_id`` and ``id`` stay distinct keys.

    Args:
        key: The raw output key.
        strategy: One of `KEY_TRANSFORMS` (or an alias). Unknown or absent strategies return the
            key unchanged.

    Returns:
        The transformed key.

    Examples:
        >>> transform_key("_id", "camel")
        '_Id'
        >>> transform_key("café_name", "lower_camel")
        'caféName'
    """
    name = normalize_strategy(strategy)
    if name is None:
        return key

    words = split_words(key)
    if not words:
        return key

    stripped = key.strip("_")
    prefix = key[: len(key) - len(key.lstrip("_"))]
    suffix = key[len(prefix) + len(stripped) :]

    if name == "camel":
        joined = "".join(word.capitalize() for word in words)
    elif name == "lower_camel":
        joined = words[0] + "".join(word.capitalize() for word in words[1:])
    elif name == "snake":
        joined = "_".join(words)
    else:
        joined = "-".join(words)
    return f"{prefix}{joined}{suffix}"


__all__ = ["KEY_TRANSFORMS", "KeyTransform", "normalize_strategy", "transform_key"]
