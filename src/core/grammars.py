"""
Field grammars for the registration form.

Each grammar is a small tagged policy describing which characters may be typed
at a given position, which pasted strings are acceptable, and which values are
complete. Grammars are stateless; the current field value is always passed in
by the caller.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class FieldId(Enum):
    """Identifiers of the guarded registration fields."""

    NAME = "name"
    USERNAME = "username"
    DOCUMENT_NUMBER = "document_number"
    PHONE_PREFIX = "phone_prefix"
    PHONE_NUMBER = "phone_number"


class PasteMode(Enum):
    """How an accepted paste is applied to the current value."""

    REPLACE = "replace"  # Pasted text becomes the whole value
    APPEND = "append"  # Pasted text is added after the current value


# Latin letters, accented vowels, Ñ/ñ and space
LETTERS_PATTERN = re.compile(r"^[A-Za-zÁÉÍÓÚáéíóúÑñ ]+$")

USERNAME_CHAR_PATTERN = re.compile(r"^[A-Za-z0-9._Ññ]$")
USERNAME_PASTE_PATTERN = re.compile(r"^[A-Za-z0-9Ññ](?!.*[._]{2})[A-Za-z0-9._Ññ]*[A-Za-z0-9Ññ]$")
USERNAME_SEPARATORS = (".", "_")

DOCUMENT_NUMBER_PATTERN = re.compile(r"^[1-9][0-9]*$")

PHONE_PREFIX = "+57"
PHONE_NUMBER_LENGTH = 10
PHONE_NUMBER_PATTERN = re.compile(r"^3[0-9]{9}$")

DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class Grammar:
    """
    Acceptance policy for one field.

    Attributes:
        kind: Field the grammar guards
        char_allowed: Predicate on (position, char) for a single appended character
        extends: Predicate on the candidate value after appending (run-length rules)
        max_length: Upper bound on the value length, None when unbounded
        paste_allowed: Predicate on a pasted string taken as a whole
        paste_mode: Whether an accepted paste replaces or extends the value
        complete: Predicate for values acceptable at submission time
        paste_normalizer: Applied to pasted text before it becomes part of the value
    """

    kind: FieldId
    char_allowed: Callable[[int, str], bool]
    extends: Callable[[str], bool]
    max_length: int | None
    paste_allowed: Callable[[str], bool]
    paste_mode: PasteMode
    complete: Callable[[str], bool]
    paste_normalizer: Callable[[str], str] = str


def _always(_candidate: str) -> bool:
    return True


# Letters-only


def _letter_allowed(_position: int, char: str) -> bool:
    return bool(LETTERS_PATTERN.fullmatch(char))


def _letters_complete(value: str) -> bool:
    return bool(value.strip()) and bool(LETTERS_PATTERN.fullmatch(value))


LETTERS_ONLY = Grammar(
    kind=FieldId.NAME,
    char_allowed=_letter_allowed,
    extends=_always,
    max_length=None,
    paste_allowed=lambda text: bool(LETTERS_PATTERN.fullmatch(text)),
    paste_mode=PasteMode.APPEND,
    complete=_letters_complete,
)


# Username


def _username_char_allowed(position: int, char: str) -> bool:
    if position == 0 and char in USERNAME_SEPARATORS:
        return False
    return bool(USERNAME_CHAR_PATTERN.fullmatch(char))


def _username_extends(candidate: str) -> bool:
    # Only doubled separators are blocked while typing; "._" is left to the paste rule
    return not (candidate.endswith("..") or candidate.endswith("__"))


def _username_complete(value: str) -> bool:
    if not value or value.endswith(USERNAME_SEPARATORS) or value.startswith(USERNAME_SEPARATORS):
        return False
    if not all(USERNAME_CHAR_PATTERN.fullmatch(char) for char in value):
        return False
    return ".." not in value and "__" not in value


USERNAME = Grammar(
    kind=FieldId.USERNAME,
    char_allowed=_username_char_allowed,
    extends=_username_extends,
    max_length=None,
    paste_allowed=lambda text: bool(USERNAME_PASTE_PATTERN.fullmatch(text)),
    paste_mode=PasteMode.APPEND,
    complete=_username_complete,
)


# Document number


def _document_char_allowed(position: int, char: str) -> bool:
    if char not in DIGITS:
        return False
    return not (position == 0 and char == "0")


DOCUMENT_NUMBER = Grammar(
    kind=FieldId.DOCUMENT_NUMBER,
    char_allowed=_document_char_allowed,
    extends=_always,
    max_length=None,
    paste_allowed=lambda text: bool(DOCUMENT_NUMBER_PATTERN.fullmatch(text)),
    paste_mode=PasteMode.REPLACE,
    complete=lambda value: bool(DOCUMENT_NUMBER_PATTERN.fullmatch(value)),
)


# Phone prefix


def _prefix_char_allowed(position: int, char: str) -> bool:
    return position < len(PHONE_PREFIX) and char == PHONE_PREFIX[position]


PHONE_PREFIX_GRAMMAR = Grammar(
    kind=FieldId.PHONE_PREFIX,
    char_allowed=_prefix_char_allowed,
    extends=_always,
    max_length=len(PHONE_PREFIX),
    paste_allowed=lambda text: text == PHONE_PREFIX,
    paste_mode=PasteMode.REPLACE,
    complete=lambda value: value == PHONE_PREFIX,
)


# Phone number


def _phone_char_allowed(position: int, char: str) -> bool:
    if char not in DIGITS:
        return False
    return not (position == 0 and char != "3")


PHONE_NUMBER = Grammar(
    kind=FieldId.PHONE_NUMBER,
    char_allowed=_phone_char_allowed,
    extends=_always,
    max_length=PHONE_NUMBER_LENGTH,
    paste_allowed=lambda text: bool(PHONE_NUMBER_PATTERN.fullmatch(text.strip())),
    paste_mode=PasteMode.REPLACE,
    complete=lambda value: bool(PHONE_NUMBER_PATTERN.fullmatch(value)),
    paste_normalizer=str.strip,
)


GRAMMARS: dict[FieldId, Grammar] = {
    FieldId.NAME: LETTERS_ONLY,
    FieldId.USERNAME: USERNAME,
    FieldId.DOCUMENT_NUMBER: DOCUMENT_NUMBER,
    FieldId.PHONE_PREFIX: PHONE_PREFIX_GRAMMAR,
    FieldId.PHONE_NUMBER: PHONE_NUMBER,
}


def grammar_for(field: FieldId | str) -> Grammar:
    """
    Look up the grammar guarding a field.

    Args:
        field: FieldId or its string value (e.g. "phone_number")

    Returns:
        The grammar for that field

    Raises:
        ValueError: If the field is not a guarded field
    """
    return GRAMMARS[FieldId(field)]
