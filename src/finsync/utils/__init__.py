"""Utility functions for finsync."""

from finsync.utils.date_parser import parse_statement_date
from finsync.utils.amount_parser import parse_money
from finsync.utils.fingerprint import content_hash

__all__ = ["parse_statement_date", "parse_money", "content_hash"]
