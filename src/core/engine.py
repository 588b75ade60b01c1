"""
Incremental validation engine for guarded text fields.

Given a field grammar, the field's current value and a proposed insertion, the
engine decides whether the insertion may be applied. Insertions are always
appended at the end of the current value. Every function here is pure: the
caller applies an Accept result to its stored value and ignores a Reject.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar

from .grammars import Grammar, PasteMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Accept:
    """Accepted insertion carrying the resulting field value."""

    new_value: str

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Reject:
    """Rejected insertion; the field keeps its current value."""

    _instance: ClassVar[Reject | None] = None

    def __new__(cls) -> Reject:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False


REJECT = Reject()

Evaluation = Accept | Reject


@dataclass(frozen=True)
class Keystroke:
    """Single character typed at the end of the field."""

    char: str


@dataclass(frozen=True)
class Paste:
    """Contiguous text pasted into the field."""

    text: str


Insertion = Keystroke | Paste


def evaluate_keystroke(grammar: Grammar, current_value: str, char: str) -> Evaluation:
    """
    Decide whether a typed character may be appended to the field.

    Args:
        grammar: Grammar guarding the field
        current_value: Field value before the keystroke
        char: The typed character

    Returns:
        Accept with the new value, or REJECT
    """
    if len(char) != 1:
        return _reject(grammar, current_value, char, "not a single character")

    position = len(current_value)
    if not grammar.char_allowed(position, char):
        return _reject(grammar, current_value, char, f"character not allowed at position {position}")

    candidate = current_value + char
    if not grammar.extends(candidate):
        return _reject(grammar, current_value, char, "positional rule violated")

    if grammar.max_length is not None and len(candidate) > grammar.max_length:
        return _reject(grammar, current_value, char, f"exceeds {grammar.max_length} characters")

    return Accept(candidate)


def evaluate_paste(grammar: Grammar, current_value: str, pasted_text: str) -> Evaluation:
    """
    Decide whether pasted text may be inserted into the field.

    The pasted text is checked as a whole against the grammar's paste rule.
    Replacing grammars discard the current value; appending grammars add the
    text after it.

    Args:
        grammar: Grammar guarding the field
        current_value: Field value before the paste
        pasted_text: Clipboard text proposed for insertion

    Returns:
        Accept with the new value, or REJECT
    """
    if not grammar.paste_allowed(pasted_text):
        return _reject(grammar, current_value, pasted_text, "paste rule violated")

    text = grammar.paste_normalizer(pasted_text)
    if grammar.paste_mode is PasteMode.REPLACE:
        return Accept(text)
    return Accept(current_value + text)


def evaluate(grammar: Grammar, current_value: str, insertion: Insertion) -> Evaluation:
    """Dispatch an insertion event to the keystroke or paste evaluation."""
    if isinstance(insertion, Keystroke):
        return evaluate_keystroke(grammar, current_value, insertion.char)
    return evaluate_paste(grammar, current_value, insertion.text)


def is_valid_prefix(grammar: Grammar, value: str) -> bool:
    """
    Check that a value can be typed from an empty field one key at a time.

    Args:
        grammar: Grammar guarding the field
        value: Value to check

    Returns:
        True if every character would have been accepted in sequence
    """
    current = ""
    for char in value:
        result = evaluate_keystroke(grammar, current, char)
        if not isinstance(result, Accept):
            return False
        current = result.new_value
    return True


def is_complete(grammar: Grammar, value: str) -> bool:
    """Check the grammar's complete-value predicate (used at submission time)."""
    return grammar.complete(value)


def _reject(grammar: Grammar, current_value: str, proposed: str, reason: str) -> Reject:
    logger.debug(f"Rejected insertion for {grammar.kind.value}: {reason} (length={len(current_value)}, proposed={proposed!r})")
    return REJECT
