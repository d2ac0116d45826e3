"""
Rule-based suggestions for incomplete transactions.

Each field is checked independently and gets at most one suggestion. A
suggestion is only produced from a table match; nothing is invented.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from txnflow.schemas.transaction import (
    OTHER_CATEGORY,
    Suggestion,
    SuggestionKind,
    SuggestionSource,
    Transaction,
)
from txnflow.services.categorization_service import CategoryTable


CATEGORY_WEIGHT = 0.8
REASON_WEIGHT = 0.7
LOCATION_WEIGHT = 0.6
MERCHANT_WEIGHT = 0.5

# Keyword -> common reasons, most common first
REASON_TABLE: Dict[str, List[str]] = {
    "taxi": ["Daily commute", "Airport transport", "City tour", "Business travel"],
    "bus": ["Public transport", "Inter-city travel", "Daily commute"],
    "uber": ["Ride sharing", "Convenient transport", "Late night travel"],
    "feres": ["Local taxi", "Short distance travel", "Quick transport"],
    "transport": ["Daily commute", "Business travel"],
    "restaurant": ["Business lunch", "Family dinner", "Date night", "Celebration"],
    "coffee": ["Morning coffee", "Business meeting", "Study session", "Social gathering"],
    "food": ["Lunch", "Dinner", "Snacks"],
    "grocery": ["Weekly shopping", "Monthly provisions", "Daily essentials"],
    "groceries": ["Weekly shopping", "Monthly provisions", "Daily essentials"],
    "electricity": ["Monthly bill", "Late payment", "New connection"],
    "water": ["Monthly bill", "Late payment", "New connection"],
    "phone": ["Monthly bill", "Top up", "Data package", "International call"],
    "telecom": ["Monthly bill", "Top up", "Data package"],
    "internet": ["Monthly bill", "Installation fee", "Upgrade"],
    "bills": ["Monthly bill", "Late payment"],
    "hospital": ["Medical consultation", "Emergency visit", "Routine checkup", "Medicine"],
    "pharmacy": ["Prescription medicine", "Daily medication", "Emergency medicine"],
    "health": ["Medical consultation", "Medicine"],
    "school": ["Tuition fee", "School supplies", "Transportation", "Meal"],
    "university": ["Semester fee", "Research material", "Conference", "Workshop"],
    "education": ["Tuition fee", "School supplies"],
    "movie": ["Weekend entertainment", "Family time", "Date night"],
    "entertainment": ["Weekend entertainment", "Subscription"],
    "shopping": ["Clothes", "Electronics", "Gifts", "Personal items"],
    "church": ["Tithe", "Offering", "Special service", "Festival"],
    "mosque": ["Charity", "Special prayer", "Festival"],
    "religious": ["Offering", "Charity"],
    "office": ["Business expense", "Client meeting", "Office supplies", "Professional service"],
    "supplies": ["Office supplies", "Business equipment", "Work material"],
    "insurance": ["Monthly premium"],
    "cash": ["Cash withdrawal"],
}

# Keyword -> Addis Ababa district
LOCATION_TABLE: Sequence[Tuple[str, str]] = (
    ("bole", "Bole"),
    ("airport", "Bole"),
    ("edna", "Bole"),
    ("piassa", "Piassa"),
    ("piazza", "Piassa"),
    ("tomoca", "Piassa"),
    ("mercato", "Mercato"),
    ("merkato", "Mercato"),
    ("mexico", "Mexico"),
    ("arada", "Arada"),
    ("lideta", "Lideta"),
    ("kazanchis", "Kazanchis"),
    ("sarbet", "Sarbet"),
    ("megenagna", "Megenagna"),
)

# Keyword -> canonical merchant name
MERCHANT_DIRECTORY: Sequence[Tuple[str, str]] = (
    ("tomoca", "Tomoca Coffee"),
    ("kaldi", "Kaldi's Coffee"),
    ("floral", "Floral Hotel"),
    ("queen of sheba", "Queen of Sheba Restaurant"),
    ("fantu", "Fantu Restaurant"),
    ("edna", "Edna Mall"),
    ("shoa", "Shoa Supermarket"),
    ("safeway", "Safeway Supermarket"),
    ("ethio telecom", "Ethio Telecom"),
    ("ethiotelecom", "Ethio Telecom"),
    ("netflix", "Netflix"),
    ("dstv", "DStv"),
    ("feres", "Feres"),
    ("eelpa", "Ethiopian Electric Utility"),
)


def _lower(value) -> str:
    return str(value).lower() if value else ""


class SuggestionEngine:
    """Proposes category, merchant, reason and location completions."""

    def __init__(
        self,
        categories: Optional[CategoryTable] = None,
        reasons: Optional[Dict[str, List[str]]] = None,
        locations: Optional[Sequence[Tuple[str, str]]] = None,
        merchants: Optional[Sequence[Tuple[str, str]]] = None,
    ):
        self.categories = categories or CategoryTable()
        self.reasons = REASON_TABLE if reasons is None else reasons
        self.locations = LOCATION_TABLE if locations is None else locations
        self.merchants = MERCHANT_DIRECTORY if merchants is None else merchants

    def suggest(self, transaction: Transaction) -> List[Suggestion]:
        suggestions = []
        for rule in (
            self.suggest_category,
            self.suggest_merchant,
            self.suggest_reason,
            self.suggest_location,
        ):
            suggestion = rule(transaction)
            if suggestion is not None:
                suggestions.append(suggestion)
        return suggestions

    def suggest_category(self, transaction: Transaction) -> Optional[Suggestion]:
        current = transaction.category
        if current and current != OTHER_CATEGORY:
            return None
        name = transaction.merchant or _institution_name(transaction)
        category = self.categories.match(name)
        if category is None or category == current:
            return None
        return Suggestion(
            kind=SuggestionKind.category,
            field="category",
            suggested_value=category,
            confidence=CATEGORY_WEIGHT,
            description=f"'{name}' usually belongs to {category}",
        )

    def suggest_merchant(self, transaction: Transaction) -> Optional[Suggestion]:
        if transaction.merchant:
            return None
        haystack = f"{_lower(transaction.reason)} {_lower(transaction.raw_text)}"
        for keyword, merchant in self.merchants:
            if keyword in haystack:
                return Suggestion(
                    kind=SuggestionKind.merchant,
                    field="merchant",
                    suggested_value=merchant,
                    confidence=MERCHANT_WEIGHT,
                    description=f"Message mentions '{keyword}'",
                )
        return None

    def suggest_reason(self, transaction: Transaction) -> Optional[Suggestion]:
        if transaction.reason:
            return None
        merchant = _lower(transaction.merchant)
        category = _lower(transaction.category)
        for keyword, reasons in self.reasons.items():
            if reasons and (keyword in merchant or keyword in category):
                return Suggestion(
                    kind=SuggestionKind.reason,
                    field="reason",
                    suggested_value=reasons[0],
                    confidence=REASON_WEIGHT,
                    description=f"Common reason for {keyword} transactions",
                )
        return None

    def suggest_location(self, transaction: Transaction) -> Optional[Suggestion]:
        if transaction.location:
            return None
        haystack = f"{_lower(transaction.merchant)} {_lower(transaction.reason)}"
        for keyword, district in self.locations:
            if keyword in haystack:
                return Suggestion(
                    kind=SuggestionKind.completion,
                    field="location",
                    suggested_value=district,
                    confidence=LOCATION_WEIGHT,
                    description=f"'{keyword}' is in {district}",
                )
        return None


def _institution_name(transaction: Transaction) -> str:
    institution = transaction.institution
    return getattr(institution, "value", institution) or ""
