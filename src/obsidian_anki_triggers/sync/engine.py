"""Synchronization run: probe AnkiConnect, route cards, reconcile each deck."""

from __future__ import annotations

import contextvars
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from obsidian_anki_triggers.anki.field_mapper import NoteFieldMapper
from obsidian_anki_triggers.config import Config
from obsidian_anki_triggers.domain.interfaces.anki_client import IAnkiClient
from obsidian_anki_triggers.exceptions import AnkiConnectError, AnkiUnavailableError
from obsidian_anki_triggers.models import Card
from obsidian_anki_triggers.utils.logging import get_logger

from .reconciler import DeckReconciler
from .report import SyncReport
from .router import route
from .similarity import SimilarityStrategy

logger = get_logger(__name__)

MIN_ANKICONNECT_VERSION = 6


class SyncEngine:
    """Pushes cards into Anki, one deck per trigger word.

    Only the initial connectivity probe can abort a run; everything after it
    is reported through the returned ``SyncReport``.
    """

    def __init__(
        self,
        config: Config,
        anki: IAnkiClient,
        similarity: SimilarityStrategy | None = None,
    ):
        self.config = config
        self.anki = anki
        self.similarity = similarity
        self.mapper = NoteFieldMapper(config)

    def probe(self) -> int:
        """Check that AnkiConnect answers with a supported API version.

        Raises:
            AnkiUnavailableError: If AnkiConnect is unreachable or too old
        """
        url = self.config.anki_connect_url
        try:
            version = self.anki.version()
        except AnkiConnectError as e:
            logger.error("anki_unavailable", url=url, error=e.message)
            msg = f"AnkiConnect is not available at {url}"
            raise AnkiUnavailableError(
                msg,
                suggestion="Start Anki and make sure the AnkiConnect add-on is installed",
                context={"url": url},
            ) from e

        if not isinstance(version, int) or version < MIN_ANKICONNECT_VERSION:
            logger.error("anki_unavailable", url=url, version=version)
            msg = f"AnkiConnect API version {version} is not supported"
            raise AnkiUnavailableError(
                msg,
                suggestion=f"Update AnkiConnect to API version {MIN_ANKICONNECT_VERSION} or later",
                context={"url": url, "version": version},
            )
        return version

    def _model_names(self) -> list[str] | None:
        try:
            return self.anki.get_model_names()
        except AnkiConnectError as e:
            logger.warning("model_names_unavailable", error=e.message)
            return None

    def sync(self, cards: Sequence[Card]) -> SyncReport:
        """Synchronize ``cards`` and return the aggregated report.

        Raises:
            AnkiUnavailableError: If the connectivity probe fails
        """
        self.probe()
        start_time = time.time()

        routing = route(cards, self.config.triggers, self.config.fallback_deck)
        logger.info(
            "sync_started",
            cards=len(cards),
            decks=len(routing.buckets),
            policy=self.config.existing_note_behavior,
        )

        reconciler = DeckReconciler(
            self.anki,
            self.config,
            similarity=self.similarity,
            mapper=self.mapper,
            model_names=self._model_names(),
        )

        bucket_reports = self._reconcile_buckets(reconciler, routing.buckets)

        report = SyncReport.combine(bucket_reports)
        report.record_unattributed(len(routing.unattributed))

        logger.info(
            "sync_completed",
            created=report.created,
            updated=report.updated,
            skipped=report.skipped,
            failed=report.failed,
            unattributed=report.unattributed,
            decks_created=sorted(report.decks_created),
            duration=round(time.time() - start_time, 2),
        )
        return report

    def _reconcile_buckets(
        self, reconciler: DeckReconciler, buckets: dict[str, list[Card]]
    ) -> list[SyncReport]:
        """Reconcile buckets and return their reports in bucket order."""
        names = list(buckets)
        max_workers = min(self.config.max_parallel_decks, len(names))

        if max_workers <= 1:
            return [
                self._reconcile_safely(reconciler, name, buckets[name]) for name in names
            ]

        results: dict[str, SyncReport] = {}
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_bucket = {
                executor.submit(
                    contextvars.copy_context().run,
                    self._reconcile_safely,
                    reconciler,
                    name,
                    buckets[name],
                ): name
                for name in names
            }
            for future in as_completed(future_to_bucket):
                results[future_to_bucket[future]] = future.result()

        return [results[name] for name in names]

    def _reconcile_safely(
        self, reconciler: DeckReconciler, bucket: str, cards: list[Card]
    ) -> SyncReport:
        try:
            return reconciler.reconcile(bucket, cards)
        except Exception as e:
            deck_name = self.config.deck_name_for(bucket)
            logger.exception("bucket_failed", deck=deck_name, cards=len(cards))
            report = SyncReport()
            report.record_failed(f"Failed to process {deck_name}: {e}", count=len(cards))
            return report

    def anki_info(self) -> dict[str, Any]:
        """Connection status, API version, decks and note types.

        ``missing_fields`` maps each configured note type to the configured
        field names it lacks (all of them when the note type is absent).
        """
        info: dict[str, Any] = {
            "url": self.config.anki_connect_url,
            "connected": False,
            "version": None,
            "decks": [],
            "models": [],
            "missing_fields": {},
        }
        try:
            info["version"] = self.anki.version()
            info["connected"] = True
            info["decks"] = sorted(self.anki.get_deck_names())
            info["models"] = sorted(self.anki.get_model_names())
            for model_name, wanted in self._configured_fields().items():
                present = (
                    self.anki.get_model_field_names(model_name)
                    if model_name in info["models"]
                    else []
                )
                missing = [name for name in wanted if name not in present]
                if missing:
                    info["missing_fields"][model_name] = missing
        except AnkiConnectError as e:
            logger.warning("anki_info_failed", url=self.config.anki_connect_url, error=e.message)
            info["error"] = e.message
        return info

    def _configured_fields(self) -> dict[str, list[str]]:
        config = self.config
        return {
            config.note_type: [config.front_field, config.back_field],
            config.cloze_note_type: [config.cloze_text_field, config.cloze_extra_field],
        }
