"""
Best-effort parser for plain currency mentions.

Used for manually entered text ("paid 250 birr for lunch") when no
institution template matches. Results carry the Unknown institution, the
``is_fallback`` flag and a reduced confidence.
"""

import logging
from typing import Optional

from txnflow.parsers.base import BaseParser
from txnflow.parsers.confidence import ConfidenceScorer
from txnflow.parsers.extraction import first_amount, first_date, first_match, first_narrative
from txnflow.parsers.language import detect_language
from txnflow.parsers.primitives import clean_text
from txnflow.parsers.templates import TemplateBank
from txnflow.schemas.parsed_message import Direction, Institution, Language, ParsedMessage

logger = logging.getLogger(__name__)


class GenericParser(BaseParser):
    """Keyword-driven fallback parser."""

    def __init__(
        self,
        bank: Optional[TemplateBank] = None,
        scorer: Optional[ConfidenceScorer] = None,
        primary_language: Language = Language.en,
    ):
        self.bank = bank or TemplateBank.from_config()
        self.scorer = scorer or ConfidenceScorer()
        self.primary_language = Language(primary_language)

    def can_parse(self, text: str) -> bool:
        return first_amount(self.bank.fallback.get("amount", []), clean_text(text)) is not None

    def parse(self, text: str) -> Optional[ParsedMessage]:
        cleaned = clean_text(text)
        if not cleaned:
            return None

        amount = first_amount(self.bank.fallback.get("amount", []), cleaned)
        if amount is None:
            return None

        detected = detect_language(cleaned)
        language = self.primary_language if detected == Language.mixed else detected
        direction = self._direction(cleaned)

        def shared(name):
            return self.bank.templates_for(None, language, name)

        merchant = first_narrative(shared("merchant"), cleaned)
        reason = first_narrative(shared("reason"), cleaned)

        confidence = self.scorer.score(
            institution=False,
            amount=True,
            merchant=merchant is not None,
            reason=reason is not None,
            direction=direction,
            alternate_script=language != self.primary_language,
            fallback=True,
        )
        logger.debug("Fallback parse produced %s %s", direction.value, amount)

        return ParsedMessage(
            institution=Institution.unknown,
            direction=direction,
            amount=amount,
            merchant=merchant,
            reason=reason,
            occurred_at=first_date(shared("date"), cleaned),
            language=detected,
            extraction_language=language,
            confidence=confidence,
            raw_text=cleaned,
            is_fallback=True,
        )

    def _direction(self, text: str) -> Direction:
        keywords = self.bank.fallback
        if first_match(keywords.get("expense", []), text):
            return Direction.expense
        if first_match(keywords.get("income", []), text):
            return Direction.income
        if first_match(keywords.get("transfer", []), text):
            return Direction.transfer
        return Direction.expense
