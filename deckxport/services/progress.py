"""
Deck import progress tracking.

The tracker owns the import's stage state machine and publishes an immutable
DeckImportProgress snapshot to every listener after each change.

    idle -> fetch-deck -> enrich-cards -> enrich-tags -> complete
    (any non-terminal stage) -> error
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import Any

from deckxport.models.card_aggregate import DeckImportProgress, ImportErrorEntry, ImportStage

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[DeckImportProgress], None]

_NEXT_STAGE: dict[ImportStage, ImportStage | None] = {
    ImportStage.IDLE: ImportStage.FETCH_DECK,
    ImportStage.FETCH_DECK: ImportStage.ENRICH_CARDS,
    ImportStage.ENRICH_CARDS: ImportStage.ENRICH_TAGS,
    ImportStage.ENRICH_TAGS: ImportStage.COMPLETE,
    ImportStage.COMPLETE: None,
    ImportStage.ERROR: None,
}


class InvalidStageTransitionError(RuntimeError):
    """Raised when the pipeline tries to move to a stage out of order."""

    def __init__(self, current: ImportStage, target: ImportStage):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move from {current.value} to {target.value}")


class ProgressTracker:
    """Mutable progress state behind immutable snapshots."""

    def __init__(self, listeners: Iterable[ProgressCallback] = ()) -> None:
        self._listeners: list[ProgressCallback] = list(listeners)
        self._snapshot = DeckImportProgress()

    @property
    def snapshot(self) -> DeckImportProgress:
        return self._snapshot

    @property
    def errors(self) -> list[ImportErrorEntry]:
        return list(self._snapshot.errors)

    def subscribe(self, listener: ProgressCallback) -> None:
        self._listeners.append(listener)

    def enter_stage(self, stage: ImportStage) -> None:
        """Move to the next stage, resetting the per-stage counter."""
        current = self._snapshot.stage
        if stage == ImportStage.ERROR:
            if current.is_terminal:
                raise InvalidStageTransitionError(current, stage)
        elif _NEXT_STAGE[current] != stage:
            raise InvalidStageTransitionError(current, stage)

        logger.info("Import stage: %s -> %s", current.value, stage.value)
        self.update(stage=stage, cards_processed=0, current_card=None)

    def update(self, **changes: Any) -> None:
        self._snapshot = replace(self._snapshot, **changes)
        self._publish()

    def advance(self, cards_processed: int, current_card: str | None = None) -> None:
        if cards_processed < self._snapshot.cards_processed:
            raise ValueError(
                f"cards_processed went backwards: {self._snapshot.cards_processed} -> "
                f"{cards_processed}"
            )
        self.update(cards_processed=cards_processed, current_card=current_card)

    def record_error(self, card_name: str, stage: ImportStage, error: str) -> None:
        entry = ImportErrorEntry(card_name=card_name, stage=stage, error=error)
        self.update(errors=(*self._snapshot.errors, entry))

    def fail(self, card_name: str, error: str) -> None:
        """Record a fatal error and move to the error stage."""
        stage = self._snapshot.stage
        entry = ImportErrorEntry(card_name=card_name, stage=stage, error=error)
        self._snapshot = replace(self._snapshot, errors=(*self._snapshot.errors, entry))
        self.enter_stage(ImportStage.ERROR)

    def _publish(self) -> None:
        for listener in self._listeners:
            try:
                listener(self._snapshot)
            except Exception:
                # Listeners observe the import; they cannot stop it
                logger.exception("Progress listener failed")
