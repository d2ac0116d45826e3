"""
Institution identification from name patterns and marker templates.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from txnflow.parsers.templates import InstitutionTemplates, TemplateBank
from txnflow.schemas.parsed_message import Language


class InstitutionMatch(BaseModel):
    """Which institution matched, and by what kind of template."""

    model_config = ConfigDict(frozen=True)

    templates: InstitutionTemplates
    matched_by: str


class InstitutionIdentifier:
    """
    Selects the template subset for a message.

    An institution's own debit or credit template in the given language is
    the strongest signal, so a mobile-money message that mentions a linked
    bank still belongs to the mobile-money provider. Name patterns, checked
    in every language so alternate-script aliases are honored, decide only
    when no marker matches. Bank order breaks ties.
    """

    def __init__(self, bank: TemplateBank):
        self.bank = bank

    def identify(self, text: str, language: Language) -> Optional[InstitutionMatch]:
        named = [entry for entry in self.bank.institutions if self._named(entry, text)]
        marked = self._marked(text, language)

        named_ids = {entry.institution for entry in named}
        for entry, marker in marked:
            if entry.institution in named_ids:
                return InstitutionMatch(templates=entry, matched_by=marker)
        if marked:
            entry, marker = marked[0]
            return InstitutionMatch(templates=entry, matched_by=marker)
        if named:
            return InstitutionMatch(templates=named[0], matched_by="name")
        return None

    @staticmethod
    def _named(entry: InstitutionTemplates, text: str) -> bool:
        return any(
            p.search(text)
            for patterns in entry.names.values()
            for p in patterns
        )

    def _marked(self, text: str, language: Language) -> List[Tuple[InstitutionTemplates, str]]:
        found = []
        for entry in self.bank.institutions:
            for marker in ("debit", "credit"):
                if any(p.search(text) for p in entry.field_templates(language, marker)):
                    found.append((entry, marker))
                    break
        return found
