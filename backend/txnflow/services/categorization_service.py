"""
Keyword-based category assignment.

Rules are checked in order and the first match wins. Patterns match
anywhere in the lowercased merchant (or institution) name.
"""

import re
from typing import List, Optional, Pattern, Sequence, Tuple

from txnflow.schemas.transaction import OTHER_CATEGORY


DEFAULT_CATEGORY_RULES: List[Tuple[str, str]] = [
    (r"netflix|spotify|youtube|dstv|canal|cinema|movie", "Entertainment"),
    (r"taxi|ride|uber|feres|zay|\bbus\b|total|\bnoc\b|\boil\b|petrol|fuel", "Transport"),
    (r"shoa|friendship|queen|fantu|safeway|supermarket|grocery", "Groceries"),
    (r"restaurant|hotel|cafe|coffee|tomoca|kaldi|food|pizza|burger", "Food"),
    (r"ethio\s*telecom|safaricom|electric|water|eelpa|internet", "Bills"),
    (r"insurance", "Insurance"),
    (r"pharmacy|hospital|clinic|medical", "Health"),
    (r"school|university|college|tuition", "Education"),
    (r"\bmall\b|shopping|boutique", "Shopping"),
    (r"church|mosque", "Religious"),
    (r"\batm\b|withdrawal|cash", "Cash"),
    (r"salary|payroll", "Income"),
]


class CategoryTable:
    """Ordered keyword -> category lookup."""

    def __init__(self, rules: Optional[Sequence[Tuple[str, str]]] = None):
        rules = DEFAULT_CATEGORY_RULES if rules is None else rules
        self.rules: List[Tuple[Pattern, str]] = [
            (re.compile(pattern, re.IGNORECASE), category) for pattern, category in rules
        ]

    def match(self, name: Optional[str]) -> Optional[str]:
        """Category of the first matching rule, or None."""
        if not name:
            return None
        lowered = name.lower()
        for pattern, category in self.rules:
            if pattern.search(lowered):
                return category
        return None

    def categorize(self, name: Optional[str]) -> str:
        """Like match, but defaults to "Other"."""
        return self.match(name) or OTHER_CATEGORY
