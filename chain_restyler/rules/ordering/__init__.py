"""
Ordering rules.

Rules in this module:
- ORDER.CATEGORY_SORT - Stable-sorts component calls by configured category rank
"""
