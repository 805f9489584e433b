"""
Builtin-feature substitution rules.

Each rule recognizes one exact manual-implementation template and
replaces it with the equivalent builtin modifier call.

Rules in this module:
- SUBSTITUTE.RELATIONSHIP_BINDING - options(Model::pluck(...)) -> relationship(...)
- SUBSTITUTE.CONFIRMATION_MODIFIER - inline confirm() guard -> requiresConfirmation()
- SUBSTITUTE.DATE_FORMAT - formatStateUsing($state->format(...)) -> date(...)
- SUBSTITUTE.CHARACTER_LIMIT - formatStateUsing(Str::limit(...)) -> limit(...)
"""
