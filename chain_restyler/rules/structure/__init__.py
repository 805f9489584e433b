"""
Structural rules over sibling declarations.

Rules in this module:
- STRUCTURE.SECTION_GROUPING - Wraps configured field clusters in a section
- STRUCTURE.DUPLICATE_EXTRACTION - Flags near-identical siblings (advisory only)
"""
