"""
Message parsers package.
"""

from txnflow.parsers.base import BaseParser
from txnflow.parsers.confidence import ConfidenceScorer, ConfidenceWeights
from txnflow.parsers.generic_parser import GenericParser
from txnflow.parsers.message_parser import MessageParser
from txnflow.parsers.templates import DEFAULT_TEMPLATE_CONFIG, TemplateBank

__all__ = [
    'BaseParser',
    'ConfidenceScorer',
    'ConfidenceWeights',
    'GenericParser',
    'MessageParser',
    'DEFAULT_TEMPLATE_CONFIG',
    'TemplateBank',
]
