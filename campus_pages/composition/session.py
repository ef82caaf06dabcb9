"""Single-owner edit buffer for one page.

An :class:`EditingSession` loads a page through a
:class:`~.repository.PageRepository`, applies section-level edits to a private
copy, and commits the whole page back, reconciling with the canonical page the
store returns. State moves through::

    IDLE -> LOADING -> READY <-> DIRTY -> SAVING -> READY
                    \\-> LOAD_FAILED        SAVING -> ERROR -> DIRTY

Saves are last-write-wins; no revision conflict detection is performed. A
session is not safe for concurrent use: one caller owns it for the lifetime of
the edit, ending with :meth:`EditingSession.discard`.

Example
-------
>>> from campus_pages.composition.repository import PageRepository
>>> from campus_pages.composition.stores import InMemoryPageStore
>>> from campus_pages.sections import default_registry
>>> store = InMemoryPageStore({"home": {"id": "home", "title": "Home"}})
>>> session = EditingSession(PageRepository(store), default_registry())
>>> session.open("home")
<SessionState.READY: 'ready'>
>>> key = session.add_section("hero")
>>> session.state
<SessionState.DIRTY: 'dirty'>
>>> session.commit().revision
1
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import enum
import logging
import typing as typ

from .errors import PageError, SessionStateError, ValidationError
from .models import Section
from .stores import mint_key

if typ.TYPE_CHECKING:
    from .models import Page
    from .registry import SectionRegistry
    from .repository import PageRepository

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    """Lifecycle states of an :class:`EditingSession`."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    DIRTY = "dirty"
    SAVING = "saving"
    ERROR = "error"
    LOAD_FAILED = "load_failed"
    CLOSED = "closed"


_EDITABLE = frozenset({SessionState.READY, SessionState.DIRTY, SessionState.ERROR})


class EditingSession:
    """Own the in-memory copy of a page while a user edits it."""

    def __init__(self, repository: PageRepository, registry: SectionRegistry) -> None:
        """Bind the session to its collaborators.

        Parameters
        ----------
        repository : PageRepository
            Source of truth used by :meth:`open` and :meth:`commit`.
        registry : SectionRegistry
            Consulted by :meth:`add_section` for known types and default props.
        """
        self._repository = repository
        self._registry = registry
        self._page: Page | None = None
        self._state = SessionState.IDLE
        self._error: PageError | None = None
        self._epoch = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def error(self) -> PageError | None:
        """Return the failure behind ``LOAD_FAILED`` or ``ERROR``, if any."""
        return self._error

    @property
    def is_dirty(self) -> bool:
        return self._state in (SessionState.DIRTY, SessionState.ERROR)

    @property
    def page(self) -> Page:
        """Return a snapshot copy of the page being edited."""
        return self._require_page().copy()

    def open(self, page_id: str) -> SessionState:
        """Load ``page_id`` into the session.

        Load failures are not raised: the session moves to ``LOAD_FAILED`` and
        exposes the cause through :attr:`error`.
        """
        if self._state is not SessionState.IDLE:
            msg = f"Cannot open a page while the session is {self._state.value}."
            raise SessionStateError(msg)
        self._epoch += 1
        epoch = self._epoch
        self._transition(SessionState.LOADING)
        try:
            loaded = self._repository.get_by_id(page_id)
        except PageError as exc:
            if epoch == self._epoch:
                logger.info("failed to open page %s: %s", page_id, exc)
                self._error = exc
                self._transition(SessionState.LOAD_FAILED)
            return self._state
        except Exception:
            if epoch == self._epoch:
                logger.exception("unexpected failure opening page %s", page_id)
                self._transition(SessionState.LOAD_FAILED)
            raise
        if epoch != self._epoch:
            logger.debug("dropping load of %s for a discarded session", page_id)
            return self._state
        self._page = loaded.copy()
        self._transition(SessionState.READY)
        return self._state

    def update_section_props(
        self, key: str, new_props: cabc.Mapping[str, typ.Any]
    ) -> None:
        """Replace the props of the section keyed ``key`` with ``new_props``."""
        page = self._require_editable()
        if not isinstance(new_props, cabc.Mapping):
            msg = f"Props for section '{key}' must be a mapping."
            raise ValidationError(msg)
        index = self._require_index(page, key)
        page.sections[index].props = copy.deepcopy(dict(new_props))
        self._mark_dirty()

    def add_section(self, section_type: str, at_index: int | None = None) -> str:
        """Insert a new section of ``section_type`` and return its minted key.

        ``at_index`` may range from ``0`` to the current section count; None
        appends. Props start from the registry's default props.

        Raises
        ------
        ValidationError
            If the type is not registered or ``at_index`` is out of range.
        """
        page = self._require_editable()
        if section_type not in self._registry:
            msg = f"Section type '{section_type}' is not registered."
            raise ValidationError(msg)
        size = len(page.sections)
        index = size if at_index is None else at_index
        if not 0 <= index <= size:
            msg = f"Insert position {at_index} is outside 0..{size}."
            raise ValidationError(msg)
        key = self._mint_unique_key(page)
        section = Section(
            key=key,
            type=section_type,
            props=self._registry.default_props(section_type),
        )
        page.sections.insert(index, section)
        self._mark_dirty()
        return key

    def duplicate_section(self, key: str) -> str:
        """Insert a copy of the section keyed ``key`` right after it.

        Returns the key minted for the copy.
        """
        page = self._require_editable()
        index = self._require_index(page, key)
        new_key = self._mint_unique_key(page)
        page.sections.insert(index + 1, page.sections[index].clone(key=new_key))
        self._mark_dirty()
        return new_key

    def remove_section(self, key: str) -> None:
        """Remove the section keyed ``key``."""
        page = self._require_editable()
        index = self._require_index(page, key)
        del page.sections[index]
        self._mark_dirty()

    def move_section(self, key: str, to_index: int) -> int:
        """Move the section keyed ``key`` to ``to_index`` and return its new index.

        Targets outside the valid range are clamped to the first or last
        position instead of failing.
        """
        page = self._require_editable()
        index = self._require_index(page, key)
        target = max(0, min(to_index, len(page.sections) - 1))
        section = page.sections.pop(index)
        page.sections.insert(target, section)
        self._mark_dirty()
        return target

    def commit(self) -> Page:
        """Save the page and reconcile with the canonical stored page.

        Returns a copy of the canonical page. On failure the session moves to
        ``ERROR``, keeps every uncommitted edit, and re-raises the error so the
        caller may retry.
        """
        page = self._require_editable()
        self._epoch += 1
        epoch = self._epoch
        self._transition(SessionState.SAVING)
        try:
            saved = self._repository.save(page.copy())
        except PageError as exc:
            if epoch == self._epoch:
                logger.info("failed to save page %s: %s", page.id, exc)
                self._error = exc
                self._transition(SessionState.ERROR)
            raise
        except Exception:
            if epoch == self._epoch:
                logger.exception("unexpected failure saving page %s", page.id)
                self._transition(SessionState.ERROR)
            raise
        if epoch != self._epoch:
            logger.debug("dropping save result of %s for a discarded session", page.id)
            return saved
        self._page = saved.copy()
        self._error = None
        self._transition(SessionState.READY)
        return saved

    def discard(self) -> None:
        """Close the session, dropping edits and any in-flight result."""
        self._epoch += 1
        self._page = None
        self._transition(SessionState.CLOSED)

    def _transition(self, state: SessionState) -> None:
        if state is not self._state:
            logger.debug("session %s -> %s", self._state.value, state.value)
        self._state = state

    def _mark_dirty(self) -> None:
        self._transition(SessionState.DIRTY)

    def _require_page(self) -> Page:
        if self._page is None:
            msg = f"No page is loaded; the session is {self._state.value}."
            raise SessionStateError(msg)
        return self._page

    def _require_editable(self) -> Page:
        if self._state not in _EDITABLE:
            msg = f"Cannot edit while the session is {self._state.value}."
            raise SessionStateError(msg)
        return self._require_page()

    @staticmethod
    def _require_index(page: Page, key: str) -> int:
        index = page.index_of(key)
        if index is None:
            msg = f"Page '{page.id}' has no section keyed '{key}'."
            raise ValidationError(msg)
        return index

    @staticmethod
    def _mint_unique_key(page: Page) -> str:
        used = set(page.keys())
        key = mint_key()
        while key in used:
            key = mint_key()
        return key


__all__ = ["EditingSession", "SessionState"]
