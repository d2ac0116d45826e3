"""
Base parser class for message parsing.
"""

from abc import ABC, abstractmethod
from typing import Optional

from txnflow.schemas.parsed_message import ParsedMessage


class BaseParser(ABC):
    """Base class for message parsers"""

    @abstractmethod
    def can_parse(self, text: str) -> bool:
        """Check if this parser recognizes the text"""
        pass

    @abstractmethod
    def parse(self, text: str) -> Optional[ParsedMessage]:
        """
        Parse text into a ParsedMessage.
        Returns None when nothing can be extracted.
        """
        pass
