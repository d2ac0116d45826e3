"""Tests for transaction normalization and categorization."""

from datetime import datetime
from decimal import Decimal

from txnflow.schemas import Direction, Institution, Language, ParsedMessage
from txnflow.services.categorization_service import CategoryTable
from txnflow.services.normalization_service import TransactionNormalizer, generate_tags


FIXED = datetime(2025, 6, 1, 8, 0)


def parsed(**overrides) -> ParsedMessage:
    data = dict(
        institution=Institution.cbe,
        direction=Direction.expense,
        amount=Decimal("250.00"),
        language=Language.en,
        extraction_language=Language.en,
        confidence=0.9,
        raw_text="Debit: ETB 250.00",
    )
    data.update(overrides)
    return ParsedMessage(**data)


class TestCategoryTable:
    """Test ordered keyword categorization."""

    def test_known_merchants(self):
        table = CategoryTable()
        assert table.categorize("Tomoca Coffee") == "Food"
        assert table.categorize("Shoa Supermarket") == "Groceries"
        assert table.categorize("Ethio Telecom") == "Bills"
        assert table.categorize("Feres ride") == "Transport"
        assert table.categorize("CBE ATM") == "Cash"

    def test_default_other(self):
        table = CategoryTable()
        assert table.categorize("Abebe Kebede") == "Other"
        assert table.categorize(None) == "Other"
        assert table.match("Abebe Kebede") is None

    def test_first_match_wins(self):
        table = CategoryTable([(r"coffee", "Food"), (r"tomoca", "Shopping")])
        assert table.categorize("Tomoca Coffee") == "Food"


class TestTags:
    """Test tag generation."""

    def test_high_confidence(self):
        assert generate_tags("en", 0.95, "Food", "CBE") == [
            "en", "high-confidence", "category:food", "institution:cbe",
        ]

    def test_low_confidence(self):
        assert "low-confidence" in generate_tags("am", 0.4, "Other", "Unknown")

    def test_middle_confidence_untagged(self):
        tags = generate_tags("en", 0.8, "Other", "CBE")
        assert "high-confidence" not in tags
        assert "low-confidence" not in tags


class TestTransactionNormalizer:
    """Test ParsedMessage to Transaction conversion."""

    def test_fields_are_carried_over(self):
        normalizer = TransactionNormalizer(clock=lambda: FIXED, id_factory=lambda: "txn-1")
        txn = normalizer.normalize(parsed(
            merchant="Tomoca Coffee", reference="TXN9", balance=Decimal("900"),
        ))

        assert txn.id == "txn-1"
        assert txn.amount == Decimal("250.00")
        assert txn.institution == Institution.cbe
        assert txn.merchant == "Tomoca Coffee"
        assert txn.reference == "TXN9"
        assert txn.balance == Decimal("900")
        assert txn.category == "Food"
        assert txn.tags == ["en", "high-confidence", "category:food", "institution:cbe"]
        assert txn.provenance["parsed"]["reference"] == "TXN9"

    def test_timestamp_defaults_to_processing_time(self):
        txn = TransactionNormalizer(clock=lambda: FIXED).normalize(parsed())
        assert txn.timestamp == FIXED

    def test_timestamp_from_message(self):
        when = datetime(2025, 12, 12)
        txn = TransactionNormalizer(clock=lambda: FIXED).normalize(parsed(occurred_at=when))
        assert txn.timestamp == when

    def test_institution_used_without_merchant(self):
        """Telebirr has no category rule, so it falls to Other."""
        txn = TransactionNormalizer().normalize(parsed(institution=Institution.telebirr))
        assert txn.category == "Other"
        assert txn.merchant is None

    def test_unique_ids(self):
        normalizer = TransactionNormalizer()
        assert normalizer.normalize(parsed()).id != normalizer.normalize(parsed()).id

    def test_provenance_is_merged(self):
        txn = TransactionNormalizer().normalize(parsed(), provenance={"source": "clipboard"})
        assert txn.provenance["source"] == "clipboard"
        assert "parsed" in txn.provenance
