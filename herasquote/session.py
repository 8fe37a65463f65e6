"""Per-visitor quote state: form, wind, location sync and selection."""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from collections.abc import Callable
from typing import Optional

from herasquote.catalog import FENCE_OPTIONS, get_option
from herasquote.eligibility import is_eligible, option_views
from herasquote.errors import InputError
from herasquote.geocoding import Geocoder
from herasquote.mapview import MapProvider, default_map_factory
from herasquote.schemas import (
    DownloadSummary,
    FenceOption,
    OptionView,
    QuoteSnapshot,
    SiteInput,
    WindEstimate,
)
from herasquote.sync import DEFAULT_ZOOM, GeocodeSynchronizer
from herasquote.validation import check_site
from herasquote.wind import estimate_wind, wind_for_postcode

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(SiteInput.model_fields)


class QuoteSession:
    """Owns one visitor's form and everything derived from it."""

    def __init__(
        self,
        geocoder: Geocoder,
        map_factory: Optional[Callable[[], MapProvider]] = None,
        *,
        zoom: int = DEFAULT_ZOOM,
        catalog: tuple[FenceOption, ...] = FENCE_OPTIONS,
    ):
        self.form = SiteInput()
        self.errors: dict[str, str] = {}
        self.submitted = False
        self.wind: Optional[WindEstimate] = None
        self.selected: set[str] = set()
        self.catalog = catalog
        self.sync = GeocodeSynchronizer(
            geocoder,
            map_factory or default_map_factory(),
            zoom=zoom,
            on_postcode=self.set_postcode,
        )

    async def update(self, field: str, value: str) -> None:
        """Apply a single field edit.

        Raises
        ------
        KeyError
            If ``field`` is not a form field.
        """
        if field not in EDITABLE_FIELDS:
            raise KeyError(field)
        if field == "postcode":
            await self.set_postcode(value.upper())
            return
        self.form = self.form.model_copy(update={field: value})
        self._prune_selection()

    async def set_postcode(self, value: str) -> None:
        self.form = self.form.model_copy(update={"postcode": value})
        self.wind = wind_for_postcode(value)
        self._prune_selection()
        await self.sync.set_postcode(value)

    def _prune_selection(self) -> None:
        dropped = {
            o.id for o in self.catalog if o.id in self.selected and not self.is_eligible(o)
        }
        if dropped:
            logger.info("Deselected inapplicable option(s): %s", ", ".join(sorted(dropped)))
            self.selected -= dropped

    def submit(self) -> bool:
        """Validate the form and start a fresh selection.

        Invalid input leaves the previous wind estimate and location
        untouched.
        """
        try:
            check_site(self.form)
        except InputError as exc:
            self.errors = exc.errors
            logger.info("Submission rejected: %s", ", ".join(sorted(self.errors)))
            return False
        self.errors = {}
        self.wind = estimate_wind(self.form.postcode)
        self.submitted = True
        self.selected.clear()
        return True

    def is_eligible(self, option: FenceOption) -> bool:
        return is_eligible(option, self.wind, self.form.required_height_m)

    def toggle(self, option_id: str) -> bool:
        """Toggle an option in the selection; returns whether it is now selected.

        Unknown and not-applicable options are left unselected.
        """
        option = get_option(option_id)
        if option is None or not self.is_eligible(option):
            return False
        if option_id in self.selected:
            self.selected.discard(option_id)
            return False
        self.selected.add(option_id)
        return True

    def option_views(self) -> list[OptionView]:
        return option_views(
            self.catalog, self.wind, self.form.required_height_m, self.selected
        )

    def selected_options(self) -> list[FenceOption]:
        return [o for o in self.catalog if o.id in self.selected and self.is_eligible(o)]

    def download_summary(self) -> DownloadSummary:
        return DownloadSummary(
            project_name=self.form.project_name,
            postcode=self.form.postcode,
            wind=self.wind,
            options=self.selected_options(),
        )

    def snapshot(self) -> QuoteSnapshot:
        return QuoteSnapshot(
            form=self.form,
            errors=self.errors,
            submitted=self.submitted,
            wind=self.wind,
            location=self.sync.snapshot(),
            options=self.option_views(),
            selected=sorted(self.selected),
        )


class SessionStore:
    """In-memory quote sessions keyed by an opaque id.

    At most ``max_sessions`` are held; creating one more evicts the least
    recently used session.
    """

    def __init__(self, session_factory: Callable[[], QuoteSession], max_sessions: int = 1000):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._factory = session_factory
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, QuoteSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> tuple[str, QuoteSession]:
        session_id = uuid.uuid4().hex
        session = self._factory()
        self._sessions[session_id] = session
        logger.debug("Created quote session %s", session_id)
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("Evicted idle quote session %s", evicted)
        return session_id, session

    def get(self, session_id: Optional[str]) -> Optional[QuoteSession]:
        if not session_id or session_id not in self._sessions:
            return None
        self._sessions.move_to_end(session_id)
        return self._sessions[session_id]

    def discard(self, session_id: Optional[str]) -> None:
        if session_id and self._sessions.pop(session_id, None) is not None:
            logger.debug("Discarded quote session %s", session_id)

    def clear(self) -> None:
        self._sessions.clear()


__all__ = ["EDITABLE_FIELDS", "QuoteSession", "SessionStore"]
