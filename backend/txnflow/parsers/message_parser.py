"""
Structured message parser.

Runs language detection, institution identification, field extraction and
confidence scoring over one text. Text that matches no institution template
or carries no positive amount yields None.
"""

import logging
from typing import Optional

from txnflow.parsers.base import BaseParser
from txnflow.parsers.confidence import ConfidenceScorer
from txnflow.parsers.extraction import (
    first_amount,
    first_capture,
    first_date,
    first_match,
    first_narrative,
)
from txnflow.parsers.institution import InstitutionIdentifier, InstitutionMatch
from txnflow.parsers.language import detect_language, other_language
from txnflow.parsers.primitives import clean_text, normalize_amount
from txnflow.parsers.templates import TemplateBank
from txnflow.schemas.parsed_message import Direction, Language, ParsedMessage

logger = logging.getLogger(__name__)


class MessageParser(BaseParser):
    """Template-driven parser for institution notification messages."""

    def __init__(
        self,
        bank: Optional[TemplateBank] = None,
        scorer: Optional[ConfidenceScorer] = None,
        primary_language: Language = Language.en,
        fallback: Optional[BaseParser] = None,
    ):
        self.bank = bank or TemplateBank.from_config()
        self.scorer = scorer or ConfidenceScorer()
        self.primary_language = Language(primary_language)
        self.identifier = InstitutionIdentifier(self.bank)
        self.fallback = fallback

    def can_parse(self, text: str) -> bool:
        return self.parse(text) is not None

    def parse(
        self,
        text: str,
        hint_language: Optional[Language] = None,
        allow_fallback: bool = False,
    ) -> Optional[ParsedMessage]:
        """
        Parse a message.

        ``hint_language`` replaces script detection. With ``allow_fallback``
        the generic parser gets a chance when structured parsing finds
        nothing.
        """
        cleaned = clean_text(text)
        if not cleaned:
            return None

        detected = Language(hint_language) if hint_language else detect_language(cleaned)
        language = self.primary_language if detected == Language.mixed else detected

        match = self.identifier.identify(cleaned, language)
        if match is None and detected != Language.mixed:
            language = other_language(language)
            match = self.identifier.identify(cleaned, language)

        result = None
        if match is None:
            logger.debug("No institution template matched")
        else:
            result = self._extract(cleaned, match, detected, language)

        if result is None and allow_fallback and self.fallback is not None:
            return self.fallback.parse(cleaned)
        return result

    def _extract(
        self,
        text: str,
        match: InstitutionMatch,
        detected: Language,
        language: Language,
    ) -> Optional[ParsedMessage]:
        entry = match.templates
        def templates(name):
            return self.bank.templates_for(entry, language, name)

        debit = first_match(templates("debit"), text)
        credit = None if debit else first_match(templates("credit"), text)
        marker = debit or credit

        amount = None
        if marker is not None:
            amount = normalize_amount(marker.group(1))
            if amount is not None and amount <= 0:
                amount = None
        if amount is None:
            amount = first_amount(templates("amount"), text)
        if amount is None:
            logger.debug("Matched %s but found no positive amount", entry.institution.value)
            return None

        if debit:
            direction = Direction.expense
        elif credit:
            direction = Direction.income
        elif self._mentions_transfer(text):
            direction = Direction.transfer
        else:
            direction = Direction.expense

        balance = first_amount(templates("balance"), text, positive=False)
        reference = first_capture(templates("reference"), text)
        merchant = first_narrative(templates("merchant"), text)
        reason = first_narrative(templates("reason"), text)
        occurred_at = first_date(templates("date"), text)

        confidence = self.scorer.score(
            institution=True,
            amount=True,
            balance=balance is not None,
            reference=reference is not None,
            merchant=merchant is not None,
            reason=reason is not None,
            direction=direction,
            alternate_script=language != self.primary_language,
        )

        return ParsedMessage(
            institution=entry.institution,
            direction=direction,
            amount=amount,
            balance=balance,
            merchant=merchant,
            reference=reference,
            reason=reason,
            occurred_at=occurred_at,
            language=detected,
            extraction_language=language,
            confidence=confidence,
            raw_text=text,
        )

    def _mentions_transfer(self, text: str) -> bool:
        return any(
            p.search(text)
            for patterns in self.bank.transfer_keywords.values()
            for p in patterns
        )
