"""Parsers for coverage tool output."""

from covcomment.parsing.text_summary import get_total_record, parse_coverage

__all__ = ["get_total_record", "parse_coverage"]
