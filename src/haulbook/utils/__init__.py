"""Utility functions for haulbook."""

from haulbook.utils.date_parser import parse_date
from haulbook.utils.amount_parser import parse_amount, to_money
from haulbook.utils.ids import new_document_id, posting_key

__all__ = ["parse_date", "parse_amount", "to_money", "new_document_id", "posting_key"]
