"""Terminal prompts for the categorization review (prompt_toolkit-based).

The prompts are kept apart from :mod:`spend_tracker.pending` so the queue
logic can be driven without a terminal and the prompts can be tested with a
pipe input in isolation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style
from prompt_toolkit.validation import ValidationError, Validator

from .categories import validate_name as _validate_name
from .models import TransactionView

CREATE_SENTINEL = "+ Create new category..."
TOP_LEVEL_SENTINEL = "(top level)"

_CREATE_HINT = "  [Create '"
_STYLE = Style.from_dict({"auto-suggestion": "fg:#888888"})


class CreateCategoryRequest:
    """Returned by the selector when the user asked for a category that does
    not exist yet; carries the typed name (may be empty)."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> bool:
        return isinstance(other, CreateCategoryRequest) and other.name == self.name

    def __repr__(self) -> str:  # pragma: no cover - trivial repr
        return f"CreateCategoryRequest(name={self.name!r})"


def _session_for(session: PromptSession | None, kb: KeyBindings) -> PromptSession:
    # Tests pass a session bound to a pipe input; reuse its I/O only.
    if session is None:
        return PromptSession(key_bindings=kb)
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
        key_bindings=kb,
    )


def _first_prefix_match(vocab: Sequence[str], text: str) -> str | None:
    if not text:
        return None
    lower = text.lower()
    for w in vocab:
        wl = w.lower()
        if wl == lower:
            return None
        if wl.startswith(lower):
            return w
    return None


class _CategorySuggest(AutoSuggest):
    """Ghost-text the remainder of the first category matching the prefix."""

    def __init__(self, vocab: Sequence[str], allow_create: bool) -> None:
        self._vocab = list(vocab)
        self._allow_create = allow_create

    def get_suggestion(self, buffer, document):
        text = document.text
        if not text:
            return None
        match = _first_prefix_match(self._vocab, text)
        if match is not None:
            return Suggestion(match[len(text) :]) if len(match) > len(text) else None
        if any(w.lower() == text.lower() for w in self._vocab):
            return None
        if self._allow_create:
            return Suggestion(f"{_CREATE_HINT}{text}'?]")
        return None


def format_transaction(view: TransactionView) -> str:
    """One-line summary shown above the category prompt."""

    return f"{view.date}  {view.vendor_name}  {view.amount:.2f}  ({view.description})"


def select_category_or_create(
    categories: Iterable[str],
    *,
    default: str = "",
    message: str = "Category (Enter to accept): ",
    session: PromptSession | None = None,
    allow_create: bool = True,
) -> str | CreateCategoryRequest:
    """Prompt for an existing category name, or signal a creation request.

    Returns the canonical spelling of the chosen category. When creation is
    allowed, an unknown name or the ``CREATE_SENTINEL`` option yields a
    :class:`CreateCategoryRequest` instead.
    """

    names = list(categories)
    words = names + [CREATE_SENTINEL] if allow_create else list(names)
    canonical = {w.lower(): w for w in names}

    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=False)
    kb = KeyBindings()

    def _pending_suggestion(buffer) -> str | None:
        s = getattr(buffer, "suggestion", None)
        text = getattr(s, "text", None)
        if text and text.startswith(_CREATE_HINT):
            text = None
        if not text:
            match = _first_prefix_match(names, buffer.document.text)
            if match:
                text = match[len(buffer.document.text) :]
        return text or None

    def _open_or_cycle(buffer) -> None:
        if buffer.complete_state is None:
            buffer.start_completion(select_first=True)
        else:
            buffer.complete_next()

    @kb.add("down", eager=True)
    def _(event) -> None:  # pragma: no cover - interactive path
        _open_or_cycle(event.app.current_buffer)

    @kb.add("tab", eager=True)
    def _(event) -> None:
        b = event.app.current_buffer
        suggestion = _pending_suggestion(b)
        if suggestion:
            b.insert_text(suggestion)
        else:
            _open_or_cycle(b)

    @kb.add("enter", eager=True)
    def _(event) -> None:
        b = event.app.current_buffer
        state = b.complete_state
        if state is not None and state.current_completion is not None:
            b.apply_completion(state.current_completion)
        else:
            suggestion = _pending_suggestion(b)
            if suggestion:
                b.insert_text(suggestion)
        b.validate_and_handle()

    result = _session_for(session, kb).prompt(
        message,
        completer=completer,
        default=default or "",
        key_bindings=kb,
        auto_suggest=_CategorySuggest(names, allow_create),
        style=_STYLE,
    )

    result = result.strip() or (default or "")
    if result.lower() in canonical:
        return canonical[result.lower()]
    if allow_create:
        return CreateCategoryRequest("" if result == CREATE_SENTINEL else result)
    return result


def prompt_new_category_name(
    *,
    initial: str = "",
    session: PromptSession | None = None,
    message: str = "New category name (Enter to save, Esc to cancel): ",
) -> str | None:
    """Collect a new category name with inline validation; ``None`` on cancel."""

    kb = KeyBindings()

    @kb.add("escape", eager=True)
    @kb.add("c-c", eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    class _NameValidator(Validator):
        def validate(self, document) -> None:
            v = _validate_name(document.text)
            if not v.ok:
                raise ValidationError(message=v.reason or "Invalid category name")

    return _session_for(session, kb).prompt(
        message,
        default=initial,
        validator=_NameValidator(),
        validate_while_typing=False,
        key_bindings=kb,
    )


def prompt_select_parent(
    parents: Sequence[str],
    *,
    session: PromptSession | None = None,
    message: str = "Parent category: ",
) -> str | None:
    """Pick a parent among ``parents`` or ``TOP_LEVEL_SENTINEL``; Esc cancels."""

    kb = KeyBindings()

    @kb.add("escape", eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    words = [TOP_LEVEL_SENTINEL, *parents]
    canonical = {w.lower(): w for w in words}

    class _ParentValidator(Validator):
        def validate(self, document) -> None:
            if document.text.strip().lower() not in canonical:
                raise ValidationError(message="Pick a parent from the list or keep top level.")

    value = _session_for(session, kb).prompt(
        message,
        default=TOP_LEVEL_SENTINEL,
        completer=WordCompleter(words, ignore_case=True, match_middle=True, sentence=False),
        validator=_ParentValidator(),
        validate_while_typing=False,
        key_bindings=kb,
    )
    if value is None:
        return None
    return canonical.get(value.strip().lower(), value)


_YES = {"y", "yes", "true", "1"}
_NO = {"n", "no", "false", "0"}


def prompt_recurring(
    *,
    default: bool = False,
    session: PromptSession | None = None,
    message: str | None = None,
) -> bool:
    """Ask whether the transaction is recurring; empty input keeps ``default``."""

    class _YesNoValidator(Validator):
        def validate(self, document) -> None:
            text = document.text.strip().lower()
            if text and text not in _YES | _NO:
                raise ValidationError(message="Answer y or n")

    prompt_text = message or ("Recurring? [Y/n]: " if default else "Recurring? [y/N]: ")
    answer = _session_for(session, KeyBindings()).prompt(
        prompt_text,
        validator=_YesNoValidator(),
        validate_while_typing=False,
    )
    text = answer.strip().lower()
    if not text:
        return default
    return text in _YES


__all__ = [
    "select_category_or_create",
    "prompt_new_category_name",
    "prompt_select_parent",
    "prompt_recurring",
    "format_transaction",
    "CreateCategoryRequest",
    "CREATE_SENTINEL",
    "TOP_LEVEL_SENTINEL",
]
