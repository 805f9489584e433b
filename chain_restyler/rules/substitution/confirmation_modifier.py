"""
Confirmation-modifier substitution.

An action whose body opens with a manual confirmation guard

    ->action(function ($record) {
        if (! confirm('Delete this post?')) {
            return;
        }
        $record->delete();
    })

is rewritten to the builtin modifier plus the unguarded body:

    ->requiresConfirmation()
    ->modalDescription('Delete this post?')
    ->action(function ($record) {
        $record->delete();
    })

The guard must be exactly ``if (! confirm(<message>?)) { return; }``
with no else branch, and ``<message>`` (if present) a single string.
"""

from dataclasses import replace

from ...syntax.nodes import (
    Argument,
    Block,
    Call,
    ChainExpression,
    Closure,
    FunctionCall,
    IfStatement,
    Node,
    ReturnStatement,
    StringLiteral,
    UnaryOp,
)
from ..base import RewriteContext, RewriteRule, Substitution
from ..config import StyleConfig


def confirmation_message(statement: object) -> StringLiteral | None | bool:
    """Inspect a guard statement.

    Returns:
        False if ``statement`` is not the guard template; otherwise the
        message literal, or None for a bare ``confirm()``.
    """
    if not isinstance(statement, IfStatement) or statement.otherwise is not None:
        return False
    if statement.then != Block((ReturnStatement(None),)):
        return False

    condition = statement.condition
    if not (isinstance(condition, UnaryOp) and condition.op == "!"):
        return False
    check = condition.operand
    if not (isinstance(check, FunctionCall) and check.name == "confirm"):
        return False

    if check.args == ():
        return None
    if (
        len(check.args) == 1
        and check.args[0].name is None
        and isinstance(check.args[0].value, StringLiteral)
    ):
        return check.args[0].value
    return False


class ConfirmationModifierRule(RewriteRule):
    """Replace an inline confirm() guard with requiresConfirmation()."""

    @property
    def rule_id(self) -> str:
        return "SUBSTITUTE.CONFIRMATION_MODIFIER"

    @property
    def name(self) -> str:
        return "Confirmation Modifier"

    @property
    def family(self) -> str:
        return "substitution"

    @property
    def target(self) -> type[Node]:
        return ChainExpression

    @property
    def priority(self) -> int:
        return 20

    @property
    def description(self) -> str:
        return (
            "Replaces an 'if (! confirm(...)) { return; }' guard at the top "
            "of an action body with requiresConfirmation()."
        )

    def substitution(self, config: StyleConfig) -> Substitution:
        return Substitution(
            removed=("confirm()",),
            added=("requiresConfirmation", "modalDescription"),
            rewritten=("action",),
        )

    def _plan(self, node: Node, context: RewriteContext):
        if not context.config.is_component(node):
            return None
        if node.find("requiresConfirmation") or node.find("modalDescription"):
            return None

        indexes = node.find("action")
        if len(indexes) != 1:
            return None
        args = node.calls[indexes[0]].positional()
        if len(args) != 1:
            return None

        closure = args[0]
        if not isinstance(closure, Closure) or closure.is_arrow:
            return None
        statements = closure.body.statements
        if not statements:
            return None

        message = confirmation_message(statements[0])
        if message is False:
            return None
        return indexes[0], closure, message

    def matches(self, node: Node, context: RewriteContext) -> bool:
        return self._plan(node, context) is not None

    def rewrite(self, node: Node, context: RewriteContext) -> Node:
        index, closure, message = self._plan(node, context)

        unguarded = replace(closure, body=Block(closure.body.statements[1:]))
        inserted = [Call("requiresConfirmation", ())]
        if message is not None:
            inserted.append(Call("modalDescription", (Argument(message),)))
        action = Call("action", (Argument(unguarded),))

        calls = list(node.calls)
        calls[index : index + 1] = [*inserted, action]
        return node.with_calls(tuple(calls))
