"""Utility functions for fincontrol."""

from fincontrol.utils.date_parser import parse_date
from fincontrol.utils.amount_parser import parse_amount
from fincontrol.utils.user_resolver import resolve_current_user

__all__ = ["parse_date", "parse_amount", "resolve_current_user"]
