"""
Precedence — When does an inlined initializer need parentheses?

One general rule: wrap the initializer when its precedence is lower than
the precedence its new position requires. Both sides come from tables:

- expression_precedence(): how tightly an expression binds
- required_precedence(): the minimum a position accepts

Levels follow the ECMAScript operator table (higher binds tighter):

    1  sequence             a, b
    2  assignment, arrow    a = b, x => y, yield
    3  conditional          a ? b : c
    4  ??                   5  ||        6  &&
    7  |     8  ^     9  &
    10 equality      11 relational, in, instanceof, as, satisfies
    12 shift         13 additive      14 multiplicative    15 **
    16 unary, await, <T>cast, update
    18 new without arguments, optional chains
    19 member access, call, new with arguments, x!
    20 primary

A few positions are not about precedence: statement starts that would be
read as a block or declaration, `??` mixed with `||`/`&&`, and `- -x`.
"""

from typing import Optional, TYPE_CHECKING

from .nodes import is_field

if TYPE_CHECKING:
    from tree_sitter import Node


SEQUENCE = 1
ASSIGNMENT = 2
CONDITIONAL = 3
UNARY = 16
NEW_WITHOUT_ARGS = 18
MEMBER = 19
PRIMARY = 20

BINARY_PRECEDENCE = {
    '??': 4,
    '||': 5,
    '&&': 6,
    '|': 7,
    '^': 8,
    '&': 9,
    '==': 10, '!=': 10, '===': 10, '!==': 10,
    '<': 11, '>': 11, '<=': 11, '>=': 11, 'instanceof': 11, 'in': 11,
    '<<': 12, '>>': 12, '>>>': 12,
    '+': 13, '-': 13,
    '*': 14, '/': 14, '%': 14,
    '**': 15,
}

_FIXED_PRECEDENCE = {
    'sequence_expression': SEQUENCE,
    'assignment_expression': ASSIGNMENT,
    'augmented_assignment_expression': ASSIGNMENT,
    'arrow_function': ASSIGNMENT,
    'yield_expression': ASSIGNMENT,
    'ternary_expression': CONDITIONAL,
    'as_expression': 11,
    'satisfies_expression': 11,
    'unary_expression': UNARY,
    'await_expression': UNARY,
    'type_assertion': UNARY,
    'update_expression': UNARY,
    'non_null_expression': MEMBER,
}

PRIMARY_TYPES = frozenset({
    'identifier', 'this', 'super', 'number', 'string', 'template_string',
    'regex', 'true', 'false', 'null', 'undefined', 'array', 'object',
    'parenthesized_expression', 'function_expression', 'function',
    'generator_function', 'class', 'jsx_element', 'jsx_self_closing_element',
    'meta_property', 'import', 'private_property_identifier',
})

_CHAIN_TYPES = ('member_expression', 'subscript_expression', 'call_expression')

# Texts that change meaning at the start of a statement or arrow body
_AMBIGUOUS_STARTS = ('{', 'function', 'class', 'async function', 'let [')


def operator_of(node: 'Node') -> Optional[str]:
    """Operator token of a binary or unary expression."""
    operator = node.child_by_field_name('operator')
    return operator.type if operator is not None else None


def _chain_has_optional(node: 'Node') -> bool:
    """True when a member/call chain contains `?.` at its own level."""
    while node is not None and node.type in _CHAIN_TYPES:
        if any(child.type == 'optional_chain' for child in node.children):
            return True
        field_name = 'function' if node.type == 'call_expression' else 'object'
        node = node.child_by_field_name(field_name)
    return False


def _chain_has_call(node: 'Node') -> bool:
    """True when a member chain is rooted in (or is) a call."""
    while node is not None and node.type in _CHAIN_TYPES:
        if node.type == 'call_expression':
            return True
        node = node.child_by_field_name('object')
    return False


def expression_precedence(node: Optional['Node']) -> int:
    """
    How tightly an expression binds.

    Unknown node types get 0 so they are parenthesized in any position
    that cares.
    """
    if node is None:
        return PRIMARY
    node_type = node.type
    if node_type in PRIMARY_TYPES:
        return PRIMARY
    if node_type == 'binary_expression':
        return BINARY_PRECEDENCE.get(operator_of(node), 0)
    if node_type in _FIXED_PRECEDENCE:
        return _FIXED_PRECEDENCE[node_type]
    if node_type == 'new_expression':
        if node.child_by_field_name('arguments') is None:
            return NEW_WITHOUT_ARGS
        return MEMBER
    if node_type in _CHAIN_TYPES:
        return NEW_WITHOUT_ARGS if _chain_has_optional(node) else MEMBER
    return 0


def required_precedence(use: 'Node') -> int:
    """
    Minimum precedence an expression needs to stand where `use` stands.

    Args:
        use: The identifier being replaced
    """
    parent = use.parent
    if parent is None:
        return SEQUENCE
    parent_type = parent.type

    if parent_type in ('member_expression', 'subscript_expression'):
        # Computed indexes are wrapped too, keeping `obj[(a ? b : c)]` readable
        return MEMBER
    if parent_type == 'call_expression':
        return MEMBER if is_field(parent, 'function', use) else ASSIGNMENT
    if parent_type in ('new_expression', 'non_null_expression'):
        return MEMBER
    if parent_type == 'binary_expression':
        operator = operator_of(parent)
        level = BINARY_PRECEDENCE.get(operator, PRIMARY)
        on_left = is_field(parent, 'left', use)
        if operator == '**':
            # Right associative; a unary operand on the left is a syntax error
            return level if not on_left else UNARY + 1
        return level if on_left else level + 1
    if parent_type in ('unary_expression', 'await_expression', 'type_assertion', 'update_expression'):
        return UNARY
    if parent_type in ('as_expression', 'satisfies_expression'):
        return 12
    if parent_type == 'ternary_expression':
        if is_field(parent, 'condition', use):
            return BINARY_PRECEDENCE['??']
        return ASSIGNMENT
    if parent_type in ('parenthesized_expression', 'template_substitution',
                       'expression_statement', 'return_statement', 'throw_statement',
                       'jsx_expression', 'switch_case'):
        return SEQUENCE
    if parent_type in ('arguments', 'array', 'pair', 'spread_element', 'variable_declarator',
                       'assignment_expression', 'augmented_assignment_expression',
                       'arrow_function', 'computed_property_name', 'assignment_pattern',
                       'export_statement', 'yield_expression', 'sequence_expression'):
        return ASSIGNMENT
    return MEMBER


def _mixes_nullish(initializer: 'Node', use: 'Node') -> bool:
    """`a ?? b` may not appear unparenthesized inside `||` / `&&` and vice versa."""
    parent = use.parent
    if parent is None or parent.type != 'binary_expression':
        return False
    if initializer.type != 'binary_expression':
        return False
    outer, inner = operator_of(parent), operator_of(initializer)
    logical = ('||', '&&')
    return (outer == '??' and inner in logical) or (outer in logical and inner == '??')


def _signed_twice(text: str, use: 'Node') -> bool:
    """`-v` with v = `-x` would read as `--x`."""
    parent = use.parent
    if parent is None or parent.type != 'unary_expression':
        return False
    operator = operator_of(parent)
    return operator in ('-', '+') and text.lstrip()[:1] == operator


def starts_ambiguously(text: str) -> bool:
    """Text that would be read as a block or declaration at a statement start."""
    stripped = text.lstrip()
    return any(stripped.startswith(start) for start in _AMBIGUOUS_STARTS)


def at_statement_start(use: 'Node') -> bool:
    """
    True when `use` is the leftmost token of an expression statement, an
    arrow function's expression body or an `export default` value.
    """
    node = use
    parent = node.parent
    while parent is not None:
        if parent.type == 'expression_statement':
            return True
        if parent.type == 'arrow_function':
            return is_field(parent, 'body', node)
        if parent.type == 'export_statement':
            return True
        if parent.start_byte != node.start_byte:
            return False
        node, parent = parent, parent.parent
    return False


def needs_parentheses(initializer: Optional['Node'], text: str, use: 'Node',
                      precedence: Optional[int] = None) -> bool:
    """
    Decide whether `text` must be wrapped when it replaces `use`.

    Args:
        initializer: Node the text was taken from (None for synthesized text)
        text: The replacement text
        use: The identifier being replaced
        precedence: Precedence of the replacement, when it is not simply
            the initializer's (e.g. `init.key` is a member access)
    """
    if precedence is None:
        precedence = expression_precedence(initializer)
    if precedence < required_precedence(use):
        return True
    parent = use.parent
    if parent is not None and parent.type == 'new_expression' and initializer is not None:
        if precedence == MEMBER and _chain_has_call(initializer):
            return True
    if initializer is not None and _mixes_nullish(initializer, use):
        return True
    if _signed_twice(text, use):
        return True
    return starts_ambiguously(text) and at_statement_start(use)


def parenthesize(text: str) -> str:
    return f"({text})"


