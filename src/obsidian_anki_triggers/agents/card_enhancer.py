"""LLM-backed best-effort card enhancement."""

import json
import time

from pydantic import BaseModel, Field, ValidationError

from obsidian_anki_triggers.domain.interfaces.card_enhancer import ICardEnhancer
from obsidian_anki_triggers.exceptions import EnhancementError
from obsidian_anki_triggers.models import Card, CardKind
from obsidian_anki_triggers.providers.base import BaseLLMProvider
from obsidian_anki_triggers.utils.logging import get_logger

logger = get_logger(__name__)

MIN_OPTIONS = 2

SYSTEM_PROMPT = """You improve flashcards generated from a person's notes.
You return JSON only. You never change what a card's answer is."""

ENHANCE_PROMPT = """Enhance these flashcards by improving the questions and adding brief explanations.
Use the document context to make the questions more specific and relevant.

Document context:
{context}

Current cards:
{cards}

Instructions:
- Use the file name and section shown in each prompt to make the question specific
- Improve question clarity; never reveal the answer in the question
- Add a brief explanation (1-2 sentences) that references the source
- For "short-answer" cards you may add "options": 3-4 plausible choices that include the exact answer text
- For "cloze" cards only add an explanation
- Keep the "index" of every card

Return a JSON object of the form:
{{"cards": [{{"index": 0, "prompt": "...", "explanation": "...", "options": ["..."]}}]}}"""


class EnhancedCard(BaseModel):
    """One card of the model's response; absent fields keep the original."""

    index: int
    prompt: str | None = None
    explanation: str | None = None
    options: list[str] | None = None


class EnhancementResponse(BaseModel):
    cards: list[EnhancedCard] = Field(default_factory=list)


class LLMCardEnhancer(ICardEnhancer):
    """Enhances a batch of cards with a single JSON-mode LLM call.

    Answers and cloze bodies are never changed. If the call or its response
    fails in any way, the input cards are returned unchanged.
    """

    def __init__(
        self,
        provider: BaseLLMProvider,
        model: str,
        temperature: float = 0.2,
        context_chars: int = 2000,
    ):
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.context_chars = context_chars

    def build_prompt(self, cards: list[Card], context: str) -> str:
        if len(context) > self.context_chars:
            context = context[: self.context_chars] + "..."
        payload = [
            {
                "index": index,
                "kind": card.kind.value,
                "prompt": card.prompt,
                "answer": card.answer,
            }
            for index, card in enumerate(cards)
        ]
        return ENHANCE_PROMPT.format(
            context=context, cards=json.dumps(payload, indent=2, ensure_ascii=False)
        )

    def enhance(self, cards: list[Card], context: str) -> list[Card]:
        if not cards:
            return cards

        start_time = time.time()
        try:
            response = self._request(cards, context)
        except Exception as e:
            logger.warning(
                "enhancement_failed",
                cards=len(cards),
                error=str(e),
                error_type=type(e).__name__,
            )
            return list(cards)

        enhanced = list(cards)
        applied = 0
        for item in response.cards:
            if not 0 <= item.index < len(cards):
                continue
            updated = self.apply(cards[item.index], item)
            if updated is not cards[item.index]:
                enhanced[item.index] = updated
                applied += 1

        logger.info(
            "cards_enhanced",
            cards=len(cards),
            enhanced=applied,
            duration=round(time.time() - start_time, 2),
        )
        return enhanced

    def _request(self, cards: list[Card], context: str) -> EnhancementResponse:
        data = self.provider.generate_json(
            model=self.model,
            prompt=self.build_prompt(cards, context),
            system=SYSTEM_PROMPT,
            temperature=self.temperature,
        )
        try:
            return EnhancementResponse.model_validate(data)
        except ValidationError as e:
            msg = f"Malformed enhancement response: {e.error_count()} validation errors"
            raise EnhancementError(msg) from e

    @staticmethod
    def apply(card: Card, item: EnhancedCard) -> Card:
        """Return a new card with the usable parts of ``item`` applied.

        Returns ``card`` itself when nothing applies.
        """
        changes: dict[str, object] = {}

        explanation = (item.explanation or "").strip()
        if explanation:
            changes["explanation"] = explanation

        if not card.is_cloze:
            prompt = (item.prompt or "").strip()
            if prompt:
                changes["prompt"] = prompt

            options = tuple(
                option.strip() for option in item.options or [] if option.strip()
            )
            if (
                card.kind is CardKind.SHORT_ANSWER
                and len(options) >= MIN_OPTIONS
                and card.answer in options
            ):
                changes["kind"] = CardKind.MULTIPLE_CHOICE
                changes["options"] = options

        if not changes:
            return card

        try:
            return card.evolve(**changes)
        except ValueError as e:
            logger.debug("enhancement_rejected", error=str(e))
            return card
