"""
Line edit that vetoes edits its grammar would reject.

Typed characters and pasted text are evaluated by the incremental engine
before they reach the widget, and accepted insertions are applied at the end
of the text. Deletions go to QLineEdit only when the text they leave behind is
still a valid prefix, so a guarded field never holds a value that could not
have been typed.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QGuiApplication, QInputMethodEvent, QKeyEvent, QKeySequence
from PySide6.QtWidgets import QLineEdit, QWidget

from core.engine import Accept, Evaluation, evaluate_keystroke, evaluate_paste, is_valid_prefix
from core.grammars import FieldId, Grammar, grammar_for

logger = logging.getLogger(__name__)

# Shortcuts whose key event may still carry a printable character
_EDITING_SHORTCUTS = (
    QKeySequence.StandardKey.Copy,
    QKeySequence.StandardKey.Cut,
    QKeySequence.StandardKey.SelectAll,
    QKeySequence.StandardKey.Undo,
    QKeySequence.StandardKey.Redo,
)

# Backspace/Delete with these held delete whole words
_WORD_MODIFIERS = (
    Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.AltModifier | Qt.KeyboardModifier.MetaModifier
)


class GuardedLineEdit(QLineEdit):
    """QLineEdit whose edits are guarded by a field grammar."""

    insertionRejected = Signal(str)  # proposed insertion, or text a deletion would leave

    def __init__(self, grammar: Grammar | FieldId | str, parent: QWidget | None = None):
        super().__init__(parent)
        self.grammar = grammar if isinstance(grammar, Grammar) else grammar_for(grammar)

        # Only key presses and the paste shortcut are modeled
        self.setAcceptDrops(False)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.NoContextMenu)

    def insert_char(self, char: str) -> bool:
        """
        Append a typed character if the grammar accepts it.

        Returns:
            True if the character was applied
        """
        result = evaluate_keystroke(self.grammar, self.text(), char)
        return self._apply(result, char)

    def paste_text(self, text: str) -> bool:
        """
        Insert pasted text if the grammar accepts it as a whole.

        Returns:
            True if the text was applied
        """
        result = evaluate_paste(self.grammar, self.text(), text)
        return self._apply(result, text)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Route insertions through the grammar and check deletions."""
        if event.matches(QKeySequence.StandardKey.Paste):
            self.paste_text(self._clipboard_text())
            event.accept()
            return

        remaining = self._deletion_result(event)
        if remaining is not None:
            if is_valid_prefix(self.grammar, remaining):
                super().keyPressEvent(event)
            else:
                self._veto(remaining)
                event.accept()
            return

        # AltGr arrives as Ctrl+Alt on Windows, so modifiers alone do not mark a shortcut
        text = event.text()
        if len(text) == 1 and text.isprintable() and not any(event.matches(key) for key in _EDITING_SHORTCUTS):
            self.insert_char(text)
            event.accept()
            return

        self._forward_checked(event)

    def inputMethodEvent(self, event: QInputMethodEvent) -> None:
        """Treat committed input method text as a run of keystrokes."""
        commit = event.commitString()
        if not commit:
            super().inputMethodEvent(event)
            return

        value = self.text()
        for char in commit:
            result = evaluate_keystroke(self.grammar, value, char)
            if not isinstance(result, Accept):
                self.insertionRejected.emit(commit)
                event.accept()
                return
            value = result.new_value

        self._set_value(value)
        event.accept()

    def _deletion_result(self, event: QKeyEvent) -> str | None:
        """Text left by a single-character or selection delete, None for other keys."""
        is_cut = event.matches(QKeySequence.StandardKey.Cut)
        key = event.key()
        plain = not (event.modifiers() & _WORD_MODIFIERS)
        if not is_cut and not (plain and key in (Qt.Key.Key_Backspace, Qt.Key.Key_Delete)):
            return None

        text = self.text()
        if self.hasSelectedText():
            start = self.selectionStart()
            return text[:start] + text[start + len(self.selectedText()) :]
        if is_cut:
            return None

        pos = self.cursorPosition()
        if key == Qt.Key.Key_Backspace:
            return text[: pos - 1] + text[pos:] if pos > 0 else None
        return text[:pos] + text[pos + 1 :] if pos < len(text) else None

    def _forward_checked(self, event: QKeyEvent) -> None:
        """Let QLineEdit handle the event, undoing it if the text stops being a prefix."""
        before, cursor = self.text(), self.cursorPosition()
        super().keyPressEvent(event)

        after = self.text()
        if after != before and not is_valid_prefix(self.grammar, after):
            self._veto(after)
            self._set_value(before)
            self.setCursorPosition(cursor)

    def _clipboard_text(self) -> str:
        return QGuiApplication.clipboard().text()

    def _apply(self, result: Evaluation, proposed: str) -> bool:
        if isinstance(result, Accept):
            self._set_value(result.new_value)
            return True

        self._veto(proposed)
        return False

    def _veto(self, proposed: str) -> None:
        logger.debug(f"Vetoed edit of {self.grammar.kind.value} field")
        self.insertionRejected.emit(proposed)

    def _set_value(self, value: str) -> None:
        # Replace through the editing API so undo history is kept
        self.selectAll()
        self.insert(value)
        self.end(False)
