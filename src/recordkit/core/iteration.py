# iteration.py
# SPDX-License-Identifier: MIT
"""Cursor and shuffle state shared by every record reader.

Each reader owns one :class:`TraversalState`. The RNG is seeded once per
state, so two states built with the same seed walk the same orders, and
nothing depends on the global :mod:`random` module.
"""

from __future__ import annotations

import random
import time
from collections.abc import Iterable, Sequence
from typing import Optional

from .errors import IllegalState, NoSuchElement
from .log import get_logger

__all__ = ["ReshufflePolicy", "TraversalState"]

log = get_logger(__name__)


class ReshufflePolicy:
    """What a shuffled traversal does on reset.

    Policies:
    * ``ADVANCE``: shuffle the current order again with the same RNG, so
      successive resets keep producing new orders (the default).
    * ``REPLAY``: reseed and reproduce the order drawn at initialization.
    """

    ADVANCE = "advance"
    REPLAY = "replay"
    ALL = {ADVANCE, REPLAY}

    @classmethod
    def normalize(cls, value: Optional[str]) -> str:
        policy = (value or cls.ADVANCE).strip().lower()
        if policy not in cls.ALL:
            raise ValueError(f"Invalid reshuffle policy: {value!r}. Expected one of {sorted(cls.ALL)}")
        return policy


class TraversalState:
    """Traversal order plus cursor over a split's locations.

    Args:
        shuffle: Permute the order on load and on every reset.
        seed: RNG seed; a time-based seed is drawn when omitted.
        reshuffle: A :class:`ReshufflePolicy` value.
    """

    def __init__(
        self,
        *,
        shuffle: bool = False,
        seed: Optional[int] = None,
        reshuffle: str = ReshufflePolicy.ADVANCE,
    ) -> None:
        if seed is None:
            seed = time.time_ns()
            if shuffle:
                log.debug("No shuffle seed given; using %d", seed)
        self.shuffle = bool(shuffle)
        self.seed = int(seed)
        self.reshuffle = ReshufflePolicy.normalize(reshuffle)
        self._rng = random.Random(self.seed)
        self._base: Optional[tuple[str, ...]] = None
        self._order: list[str] = []
        self.cursor = 0
        self.shuffle_count = 0

    @property
    def loaded(self) -> bool:
        return self._base is not None

    @property
    def order(self) -> Sequence[str]:
        """The current traversal order (read-only view)."""
        return tuple(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def load(self, locations: Iterable[str]) -> None:
        """Capture locations, rewind, and shuffle once when enabled."""
        self._base = tuple(locations)
        self._order = list(self._base)
        self.cursor = 0
        if self.shuffle:
            self._permute()

    def _permute(self) -> None:
        if self.reshuffle == ReshufflePolicy.REPLAY:
            self._rng = random.Random(self.seed)
            self._order = list(self._base or ())
        self._rng.shuffle(self._order)
        self.shuffle_count += 1

    def has_next(self) -> bool:
        return self._base is not None and self.cursor < len(self._order)

    def advance(self) -> str:
        """Return the location under the cursor and move past it.

        Raises:
            IllegalState: If nothing was loaded yet.
            NoSuchElement: If the traversal is exhausted.
        """
        if self._base is None:
            raise IllegalState("Locations are not loaded. Was the reader initialized?")
        if self.cursor >= len(self._order):
            raise NoSuchElement("No next element")
        location = self._order[self.cursor]
        self.cursor += 1
        return location

    def reset(self) -> None:
        """Rewind to the first location, reshuffling when enabled."""
        if self._base is None:
            raise IllegalState("Cannot reset before the reader is initialized")
        self.cursor = 0
        if self.shuffle:
            self._permute()
        log.debug("Traversal reset (shuffles=%d, n=%d)", self.shuffle_count, len(self._order))
