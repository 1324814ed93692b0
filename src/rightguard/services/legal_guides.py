"""Cache-aside lookup and creation of legal rights guides."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from rightguard.constants import LANGUAGES, TABLES
from rightguard.errors import ValidationFailure
from rightguard.models import LegalGuide
from rightguard.observability import Observability, get_observability
from rightguard.services.factories import build_guide_generator, build_record_store
from rightguard.services.guide_generator import GuideGenerator
from rightguard.store.records import RecordStore

LOGGER = logging.getLogger(__name__)


@dataclass
class GuideLookup:
    """A guide plus where it came from.

    ``generated`` is true when the guide was produced by the LLM for this
    request; ``cached`` is true when the returned guide is stored.
    """

    guide: LegalGuide
    cached: bool
    generated: bool

    @property
    def message(self) -> Optional[str]:
        if not self.generated:
            return None
        if self.cached:
            return "Guide generated and cached successfully"
        return "Guide generated successfully (not cached)"


class LegalGuideService:
    """Serve one authoritative guide per (state, language), generating on a miss."""

    def __init__(
        self,
        *,
        store: Optional[RecordStore] = None,
        generator: Optional[GuideGenerator] = None,
        observability: Optional[Observability] = None,
    ) -> None:
        self._store = store or build_record_store(TABLES["legal_guides"])
        self._generator = generator
        self._observability = observability or get_observability(component="legal_guides")

    @property
    def generator(self) -> GuideGenerator:
        if self._generator is None:
            self._generator = build_guide_generator()
        return self._generator

    def get_guide(self, state: str, language: str) -> GuideLookup:
        """Return the stored guide or generate, store, and return a new one."""

        if not state or not language:
            raise ValidationFailure("State and language are required")
        if language not in LANGUAGES:
            raise ValidationFailure(f"Unsupported language '{language}'")

        try:
            existing = self._store.find_one(state=state, language=language)
        except SQLAlchemyError:
            LOGGER.warning("Guide lookup failed for %s/%s; generating instead", state, language, exc_info=True)
            existing = None
        if existing:
            return GuideLookup(guide=LegalGuide(**existing), cached=True, generated=False)

        with self._observability.timed("guides.generation_ms", tags={"language": language}):
            generated = self.generator.generate(state, language)
        now = datetime.now(timezone.utc)
        guide = LegalGuide(
            guide_id=str(uuid.uuid4()),
            state=state,
            language=language,
            title=generated.title,
            content=generated.content,
            script=generated.script,
            created_at=now,
            updated_at=now,
        )

        cached = True
        try:
            stored = self._store.insert(guide.model_dump())
            guide = LegalGuide(**stored)
        except SQLAlchemyError:
            LOGGER.exception("Failed to save generated guide for %s/%s", state, language)
            cached = False

        self._observability.emit_event("guide.generated", state=state, language=language, cached=cached)
        self._observability.increment("guides.generated", tags={"language": language})
        return GuideLookup(guide=guide, cached=cached, generated=True)

    def create_guide(self, state: str, language: str, title: str, content: str, script: str) -> LegalGuide:
        if not all((state, language, title, content, script)):
            raise ValidationFailure("All fields are required")
        if language not in LANGUAGES:
            raise ValidationFailure(f"Unsupported language '{language}'")

        now = datetime.now(timezone.utc)
        stored = self._store.insert(
            {
                "guide_id": str(uuid.uuid4()),
                "state": state,
                "language": language,
                "title": title,
                "content": content,
                "script": script,
                "created_at": now,
                "updated_at": now,
            }
        )
        return LegalGuide(**stored)


__all__ = ["GuideLookup", "LegalGuideService"]
