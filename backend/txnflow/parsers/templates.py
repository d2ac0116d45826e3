"""
Template bank: recognition templates per institution, language and field.

The default table is plain data (regex strings). ``TemplateBank.from_config``
compiles it once at construction, so tests and deployments can inject their
own tables without touching parser logic. Two placeholders are expanded
before compiling: ``<AMOUNT>`` (a capturing number group) and ``<CUR>``
(currency words).
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Pattern

from pydantic import BaseModel, Field

from txnflow.schemas.parsed_message import Institution, Language


AMOUNT_FRAGMENT = r"([\d፩-፲](?:[\d፩-፲,.]*[\d፩-፲])?)"
CURRENCY_FRAGMENT = r"(?:ETB|Birr|ብር)"

FIELDS = ("debit", "credit", "amount", "balance", "reference", "merchant", "reason", "date")

DEFAULT_TEMPLATE_CONFIG: Dict[str, Any] = {
    # Templates every institution falls back to, per language
    "shared": {
        "en": {
            "debit": [
                r"\bdebit(?:ed)?(?:\s+with)?\s*:?\s*<CUR>\s*<AMOUNT>",
                r"\bwithdrawal\s*(?:of)?\s*<CUR>\s*<AMOUNT>",
                r"\bpaid\s*<CUR>\s*<AMOUNT>",
                r"\bsent\s*<CUR>\s*<AMOUNT>",
            ],
            "credit": [
                r"\bcredit(?:ed)?(?:\s+with)?\s*:?\s*<CUR>\s*<AMOUNT>",
                r"\bdeposit\s*(?:of)?\s*<CUR>\s*<AMOUNT>",
                r"\breceived\s*<CUR>\s*<AMOUNT>",
            ],
            "amount": [
                r"<CUR>\s*<AMOUNT>",
                r"<AMOUNT>\s*<CUR>",
            ],
            "balance": [
                r"\b(?:Avl\.?\s*|Available\s+|Current\s+)?Bal(?:ance)?\s*:\s*(?:<CUR>\s*)?<AMOUNT>",
            ],
            "reference": [
                r"\bRef(?:erence)?(?:\s*No\.?)?\s*[:#]\s*([A-Za-z0-9][A-Za-z0-9-]*)",
                r"\bTxn\s*ID\s*:\s*([A-Za-z0-9][A-Za-z0-9-]*)",
                r"\bTrans(?:action)?\s*ID\s*:\s*([A-Za-z0-9][A-Za-z0-9-]*)",
            ],
            "merchant": [
                r"\bto\s+([^.]+?)(?:\.|$)",
                r"\bfrom\s+([^.]+?)(?:\.|$)",
                r"\bat\s+([^.]+?)(?:\.|$)",
                r"\bmerchant\s*:\s*([^.]+?)(?:\.|$)",
            ],
            "reason": [
                r"\breason\s*:\s*([^.]+?)(?:\.|$)",
                r"\bpurpose\s*:\s*([^.]+?)(?:\.|$)",
                r"\bnote\s*:\s*([^.]+?)(?:\.|$)",
                r"\bfor\s+([^.]+?)(?:\.|$)",
            ],
            "date": [
                r"(\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}(?::\d{2})?)?)",
                r"(\d{1,2}-[A-Za-z]{3}-\d{4})",
                r"(\d{1,2}/\d{1,2}/\d{4})",
            ],
        },
        "am": {
            "debit": [
                r"ተክፋይ\s*:?\s*<CUR>\s*<AMOUNT>",
                r"ተወጪ\s*:?\s*<CUR>\s*<AMOUNT>",
                r"ከተከፈለ\s*<CUR>\s*<AMOUNT>",
                r"ተላከ\s*<CUR>\s*<AMOUNT>",
            ],
            "credit": [
                r"ተቀሪይ\s*:?\s*<CUR>\s*<AMOUNT>",
                r"ገቢ\s*:?\s*<CUR>\s*<AMOUNT>",
                r"ወደ\s+ተገባ\s*<CUR>\s*<AMOUNT>",
                r"ተቀበለ\s*<CUR>\s*<AMOUNT>",
            ],
            "amount": [
                r"<CUR>\s*<AMOUNT>",
                r"<AMOUNT>\s*<CUR>",
            ],
            "balance": [
                r"ቀሪ\s+ሂሳብ\s*:?\s*(?:<CUR>\s*)?<AMOUNT>",
                r"ቀሪ\s+ብር\s*:?\s*<AMOUNT>",
                r"(?:የአሁኑ|አሁን)\s+ቀሪ\s*:?\s*(?:<CUR>\s*)?<AMOUNT>",
            ],
            "reference": [
                r"ሪፍ\s*:\s*([A-Za-z0-9][A-Za-z0-9-]*)",
                r"(?:ተመሳሳይ\s+|ሽፋን\s+)?ቁጥር\s*:\s*([A-Za-z0-9][A-Za-z0-9-]*)",
            ],
            "merchant": [
                r"አካል\s*:\s*([^።.]+?)(?:።|\.|$)",
                r"(?<!\S)ወደ\s+(?!ተገባ)([^።.]+?)(?:።|\.|$)",
                r"(?<!\S)ከ\s+([^።.]+?)(?:።|\.|$)",
                r"(?<!\S)በ\s+([^።.]+?)(?:።|\.|$)",
            ],
            "reason": [
                r"ምክን?ያት\s*:\s*([^።.]+?)(?:።|\.|$)",
                r"ምክኒያት\s*:\s*([^።.]+?)(?:።|\.|$)",
                r"ዓላማ\s*:\s*([^።.]+?)(?:።|\.|$)",
                r"ማስታወሻ\s*:\s*([^።.]+?)(?:።|\.|$)",
                r"(?<!\S)ለ\s+([^።.]+?)(?:።|\.|$)",
            ],
            "date": [
                r"(\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}(?::\d{2})?)?)",
                r"(\d{1,2}/\d{1,2}/\d{4})",
            ],
        },
    },
    # Institution-specific templates; "names" identify the institution,
    # other fields are tried before the shared ones.
    "institutions": {
        "CBE": {
            "en": {
                "names": [r"\bCBE\b", r"commercial\s+bank\s+of\s+ethiopia"],
                "debit": [
                    r"^Debit\s*:\s*<CUR>\s*<AMOUNT>",
                    r"account\s+\S+\s+has\s+been\s+debited\s+with\s+<CUR>\s*<AMOUNT>",
                ],
                "credit": [
                    r"^Credit\s*:\s*<CUR>\s*<AMOUNT>",
                    r"account\s+\S+\s+has\s+been\s+credited\s+with\s+<CUR>\s*<AMOUNT>",
                ],
            },
            "am": {
                "names": [r"ንግድ\s+ባንክ"],
            },
        },
        "Telebirr": {
            "en": {
                "names": [r"\btele\s?birr\b"],
                "debit": [
                    r"you\s+have\s+paid\s+<CUR>\s*<AMOUNT>",
                    r"you\s+have\s+transferred\s+<CUR>\s*<AMOUNT>",
                ],
                "credit": [
                    r"you\s+have\s+received\s+<CUR>\s*<AMOUNT>",
                ],
                "merchant": [
                    r"\bto\s+\+?\d+\s*\(([^)]+)\)",
                    r"\bfrom\s+\+?\d+\s*\(([^)]+)\)",
                ],
            },
            "am": {
                "names": [r"ቴሌ\s?ብር"],
            },
        },
        "Dashen": {
            "en": {
                "names": [r"\bdashen\s+bank\b"],
                "debit": [r"\bdashen\b.*?\bwithdrawal\s*(?:of)?\s*<CUR>\s*<AMOUNT>"],
                "credit": [r"\bdashen\b.*?\bdeposit\s*(?:of)?\s*<CUR>\s*<AMOUNT>"],
            },
            "am": {
                "names": [r"ዳሽን\s+ባንክ"],
            },
        },
        "Awash": {
            "en": {
                "names": [r"\bawash\s+bank\b"],
                "debit": [r"\bawash\b.*?\bdebit\s*<CUR>\s*<AMOUNT>"],
                "credit": [r"\bawash\b.*?\bcredit\s*<CUR>\s*<AMOUNT>"],
                "balance": [r"\bAvl\.?\s*Bal\s*:\s*(?:<CUR>\s*)?<AMOUNT>"],
                "merchant": [r"\bTXN\s*:\s*([^.]+?)(?:\.|$)"],
            },
            "am": {
                "names": [r"አዋሽ\s+ባንክ"],
            },
        },
        "NIB": {
            "en": {"names": [r"\bnib\b.*?\binternational\s+bank\b", r"\bnib\s+bank\b"]},
            "am": {"names": [r"ኒብ\s+(?:አለምአቀፍ\s+)?ባንክ"]},
        },
        "Lion": {
            "en": {"names": [r"\blion\b.*?\binternational\s+bank\b", r"\blion\s+bank\b"]},
            "am": {"names": [r"አንበሳ\s+(?:አለምአቀፍ\s+)?ባንክ"]},
        },
        "Zemen": {
            "en": {"names": [r"\bzemen\b.*?\bbank\b"]},
            "am": {"names": [r"ዘመን\s+ባንክ"]},
        },
        "Cooperative": {
            "en": {"names": [r"\bcooperative\b.*?\bbank\b.*?\boromia\b", r"\bcoop\s*bank\b", r"\bcooperative\s+bank\b"]},
            "am": {"names": [r"ህብረት\s+ስራ\s+ባንክ"]},
        },
    },
    "transfer_keywords": {
        "en": [r"\btransfer(?:red)?\b", r"\bsent\b", r"\bremitted\b"],
        "am": [r"ተላከ", r"ተለወጠ", r"ተቀየረ"],
    },
    # Best-effort path for plain currency mentions with no institution
    "fallback": {
        "amount": [r"<CUR>\s*<AMOUNT>", r"<AMOUNT>\s*<CUR>"],
        "income": [r"\breceived\b", r"\bcredit(?:ed)?\b", r"\bdeposit(?:ed)?\b", r"\bgot\b", r"ገቢ", r"ተቀበል"],
        "expense": [r"\bpaid\b", r"\bdebit(?:ed)?\b", r"\bwithdr[ae]w\w*", r"\bspent\b", r"\bbought\b", r"\bpurchase\w*", r"ከፈል", r"ተክፋይ"],
        "transfer": [r"\btransfer(?:red)?\b", r"\bsent\b", r"\bremitted\b", r"ተላከ"],
    },
}


def _compile(template: str) -> Pattern:
    expanded = template.replace("<AMOUNT>", AMOUNT_FRAGMENT).replace("<CUR>", CURRENCY_FRAGMENT)
    return re.compile(expanded, re.IGNORECASE)


def _compile_fields(raw: Mapping[str, List[str]]) -> Dict[str, List[Pattern]]:
    return {name: [_compile(t) for t in templates] for name, templates in raw.items()}


class InstitutionTemplates(BaseModel):
    """Name patterns and field templates for one institution."""
    institution: Institution
    names: Dict[Language, List[Pattern]] = Field(default_factory=dict)
    fields: Dict[Language, Dict[str, List[Pattern]]] = Field(default_factory=dict)

    def field_templates(self, language: Language, name: str) -> List[Pattern]:
        return self.fields.get(language, {}).get(name, [])


class TemplateBank(BaseModel):
    """Compiled template table consulted by the parsers."""
    institutions: List[InstitutionTemplates]
    shared: Dict[Language, Dict[str, List[Pattern]]]
    transfer_keywords: Dict[Language, List[Pattern]]
    fallback: Dict[str, List[Pattern]]

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]] = None) -> "TemplateBank":
        """Compile a template configuration (defaults to DEFAULT_TEMPLATE_CONFIG)."""
        config = config if config is not None else DEFAULT_TEMPLATE_CONFIG

        shared = {
            Language(lang): _compile_fields(fields)
            for lang, fields in config.get("shared", {}).items()
        }

        institutions = []
        for name, per_language in config.get("institutions", {}).items():
            names = {}
            fields_by_language = {}
            for lang, fields in per_language.items():
                language = Language(lang)
                compiled = _compile_fields(fields)
                names[language] = compiled.pop("names", [])
                fields_by_language[language] = compiled
            institutions.append(InstitutionTemplates(
                institution=Institution(name),
                names=names,
                fields=fields_by_language,
            ))

        transfer_keywords = {
            Language(lang): [_compile(t) for t in templates]
            for lang, templates in config.get("transfer_keywords", {}).items()
        }

        return cls(
            institutions=institutions,
            shared=shared,
            transfer_keywords=transfer_keywords,
            fallback=_compile_fields(config.get("fallback", {})),
        )

    def templates_for(
        self,
        institution: Optional[InstitutionTemplates],
        language: Language,
        name: str,
    ) -> List[Pattern]:
        """Institution-specific templates first, then the shared ones."""
        specific = institution.field_templates(language, name) if institution else []
        return specific + self.shared.get(language, {}).get(name, [])

    def get(self, institution: Institution) -> Optional[InstitutionTemplates]:
        for entry in self.institutions:
            if entry.institution == institution:
                return entry
        return None
