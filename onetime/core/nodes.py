"""
Nodes — Closed categorisation of tree-sitter syntax nodes

The analyzer never branches on raw tree-sitter type strings. Every node is
first mapped to a NodeKind, and traversal dispatches on that enumeration.
Supporting a new syntax form means adding its type string to NODE_KINDS.

Also provides the small tree helpers shared by the rest of the core:
- node_text(): literal source text of a node
- is_field(): "is this child the <field> of its parent?"
- unwrap_expression(): strip parentheses and TypeScript casts
- pattern_targets(): identifiers declared by a binding pattern
"""

from enum import Enum
from typing import Dict, Iterator, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from tree_sitter import Node


class NodeKind(Enum):
    """Syntax categories the engine distinguishes."""
    PROGRAM = "program"
    DECLARATION = "declaration"          # let/const/var statement
    DECLARATOR = "declarator"            # one `name = value` entry
    IDENTIFIER = "identifier"            # any identifier-like leaf
    BRANCH = "branch"                    # else arm (the then arm is found by field)
    SWITCH_CASE = "switch_case"
    LOOP = "loop"                        # for / for-in / for-of
    WHILE_LOOP = "while_loop"            # while / do-while
    FUNCTION = "function"
    FIELD = "field"                      # class field; its value runs per instance
    BLOCK = "block"
    CATCH = "catch"
    CLASS = "class"
    NAMED_DECLARATION = "named_declaration"  # enum, namespace, overload signature
    ASSIGNMENT = "assignment"
    UPDATE = "update"
    EXPORT = "export"
    IMPORT = "import"
    AWAIT = "await"
    ARRAY = "array"
    OBJECT = "object"
    PATTERN_ELEMENT = "pattern_element"   # array destructuring pattern
    PATTERN_PROPERTY = "pattern_property"  # object destructuring pattern
    LITERAL = "literal"
    ERROR = "error"
    OTHER = "other"


NODE_KINDS: Dict[str, NodeKind] = {
    'program': NodeKind.PROGRAM,
    # Declarations
    'lexical_declaration': NodeKind.DECLARATION,
    'variable_declaration': NodeKind.DECLARATION,
    'variable_declarator': NodeKind.DECLARATOR,
    # Identifier-like leaves
    'identifier': NodeKind.IDENTIFIER,
    'shorthand_property_identifier': NodeKind.IDENTIFIER,
    'shorthand_property_identifier_pattern': NodeKind.IDENTIFIER,
    'property_identifier': NodeKind.IDENTIFIER,
    # Control flow
    'else_clause': NodeKind.BRANCH,
    'switch_case': NodeKind.SWITCH_CASE,
    'switch_default': NodeKind.SWITCH_CASE,
    'for_statement': NodeKind.LOOP,
    'for_in_statement': NodeKind.LOOP,
    'while_statement': NodeKind.WHILE_LOOP,
    'do_statement': NodeKind.WHILE_LOOP,
    'statement_block': NodeKind.BLOCK,
    'class_static_block': NodeKind.BLOCK,
    'catch_clause': NodeKind.CATCH,
    # Functions (grammar versions differ on `function` vs `function_expression`)
    'function_declaration': NodeKind.FUNCTION,
    'function_expression': NodeKind.FUNCTION,
    'function': NodeKind.FUNCTION,
    'generator_function': NodeKind.FUNCTION,
    'generator_function_declaration': NodeKind.FUNCTION,
    'arrow_function': NodeKind.FUNCTION,
    'method_definition': NodeKind.FUNCTION,
    # Class fields (JavaScript and TypeScript grammars)
    'field_definition': NodeKind.FIELD,
    'public_field_definition': NodeKind.FIELD,
    # Classes
    'class_declaration': NodeKind.CLASS,
    'abstract_class_declaration': NodeKind.CLASS,
    'class': NodeKind.CLASS,
    # TypeScript declarations that only introduce a name
    'enum_declaration': NodeKind.NAMED_DECLARATION,
    'function_signature': NodeKind.NAMED_DECLARATION,
    'method_signature': NodeKind.NAMED_DECLARATION,
    'abstract_method_signature': NodeKind.NAMED_DECLARATION,
    'internal_module': NodeKind.NAMED_DECLARATION,
    'module': NodeKind.NAMED_DECLARATION,
    # Writes
    'assignment_expression': NodeKind.ASSIGNMENT,
    'augmented_assignment_expression': NodeKind.ASSIGNMENT,
    'update_expression': NodeKind.UPDATE,
    # Modules
    'export_statement': NodeKind.EXPORT,
    'import_statement': NodeKind.IMPORT,
    # Expressions the policy looks at
    'await_expression': NodeKind.AWAIT,
    'array': NodeKind.ARRAY,
    'object': NodeKind.OBJECT,
    'array_pattern': NodeKind.PATTERN_ELEMENT,
    'object_pattern': NodeKind.PATTERN_PROPERTY,
    'string': NodeKind.LITERAL,
    'number': NodeKind.LITERAL,
    'template_string': NodeKind.LITERAL,
    'regex': NodeKind.LITERAL,
    'true': NodeKind.LITERAL,
    'false': NodeKind.LITERAL,
    'null': NodeKind.LITERAL,
    'undefined': NodeKind.LITERAL,
    'ERROR': NodeKind.ERROR,
}

# Node types that evaluate to a function value
FUNCTION_VALUE_TYPES = frozenset({
    'arrow_function', 'function_expression', 'function', 'generator_function',
})

# Wrappers that do not change which expression is being initialised
WRAPPER_TYPES = frozenset({
    'parenthesized_expression', 'as_expression', 'satisfies_expression',
    'non_null_expression', 'type_assertion',
})

# Elements whose `name` field holds a JSX tag name
JSX_NAME_PARENTS = frozenset({
    'jsx_opening_element', 'jsx_closing_element', 'jsx_self_closing_element',
})


def classify(node: 'Node') -> NodeKind:
    """Map a tree-sitter node to its NodeKind."""
    if node.is_missing:
        return NodeKind.ERROR
    if not node.is_named:
        # Keyword tokens share type strings with real nodes ("function", "class")
        return NodeKind.OTHER
    return NODE_KINDS.get(node.type, NodeKind.OTHER)


# =============================================================================
# Tree Helpers
# =============================================================================

def node_text(node: 'Node', source: bytes) -> str:
    """Literal source text of a node."""
    return source[node.start_byte:node.end_byte].decode('utf-8', errors='replace')


def same_node(a: Optional['Node'], b: Optional['Node']) -> bool:
    """Structural identity: same type over the same byte span."""
    if a is None or b is None:
        return False
    return (a.start_byte == b.start_byte and a.end_byte == b.end_byte
            and a.type == b.type)


def is_field(parent: Optional['Node'], field_name: str, child: 'Node') -> bool:
    """Check whether `child` is the node stored in `parent`'s named field."""
    if parent is None:
        return False
    for candidate in parent.children_by_field_name(field_name):
        if same_node(candidate, child):
            return True
    return False


def significant_children(node: 'Node') -> list:
    """Named children, without comments."""
    return [c for c in node.named_children if c.type != 'comment']


def unwrap_expression(node: Optional['Node']) -> Optional['Node']:
    """
    Strip parentheses and TypeScript type wrappers.

    `(await x)`, `await x as T` and `x!` all unwrap to the inner expression.
    """
    while node is not None and node.type in WRAPPER_TYPES:
        inner = significant_children(node)
        if not inner:
            return node
        if node.type == 'type_assertion':
            # <T>expr: the expression follows the type arguments
            node = inner[-1]
        else:
            node = inner[0]
    return node


def is_function_value(node: Optional['Node']) -> bool:
    """True when the (unwrapped) expression evaluates to a function."""
    inner = unwrap_expression(node)
    return inner is not None and inner.is_named and inner.type in FUNCTION_VALUE_TYPES


def pattern_targets(node: Optional['Node']) -> Iterator['Node']:
    """
    Yield the identifier nodes a binding pattern declares or assigns.

    Default values and computed keys are expressions, not targets, and are
    never yielded. Member expressions (`a.b = 1`) declare nothing.

    Args:
        node: identifier, object/array pattern, parameter list or parameter
    """
    if node is None:
        return
    node_type = node.type
    if node_type in ('identifier', 'shorthand_property_identifier_pattern'):
        yield node
    elif node_type in ('object_pattern', 'array_pattern', 'formal_parameters'):
        for child in significant_children(node):
            yield from pattern_targets(child)
    elif node_type == 'pair_pattern':
        yield from pattern_targets(node.child_by_field_name('value'))
    elif node_type in ('assignment_pattern', 'object_assignment_pattern'):
        yield from pattern_targets(node.child_by_field_name('left'))
    elif node_type == 'rest_pattern':
        for child in significant_children(node):
            yield from pattern_targets(child)
    elif node_type in ('required_parameter', 'optional_parameter'):
        yield from pattern_targets(node.child_by_field_name('pattern'))
