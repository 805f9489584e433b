"""
Closure simplification rules.

Rules in this module:
- CLOSURE.EXPRESSION_BODY - Turns single-return block closures into arrow functions
"""
