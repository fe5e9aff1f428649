"""
Canonical type and signature strings.

Types are kept as references to their syntax (a type expression node and the
file it lives in) or, for inferred constants and literals, as the name of a
predeclared type. Rendering follows go/types conventions: one line, struct
and interface members separated by ``; `` and every parameter name paired
with its own type.
"""

from dataclasses import dataclass, replace
from typing import Any, List, Optional, Tuple

# Default types of untyped constants and literals
LITERAL_TYPES = {
    'int_literal': 'int',
    'float_literal': 'float64',
    'imaginary_literal': 'complex128',
    'rune_literal': 'rune',
    'interpreted_string_literal': 'string',
    'raw_string_literal': 'string',
    'true': 'bool',
    'false': 'bool',
}


@dataclass(frozen=True)
class TypeRef:
    """A type known either by its syntax or by a predeclared name."""
    node: Any = None
    file: Any = None
    basic: str = ""
    pointer: int = 0
    variadic: bool = False

    @property
    def is_known(self) -> bool:
        return self.node is not None or bool(self.basic)

    def pointer_to(self) -> "TypeRef":
        return replace(self, pointer=self.pointer + 1)

    def deref(self) -> "TypeRef":
        if self.pointer:
            return replace(self, pointer=self.pointer - 1)
        if self.node is not None and self.node.type == 'pointer_type':
            return TypeRef(node=_pointee(self.node), file=self.file)
        return self


def basic_type(name: str) -> TypeRef:
    return TypeRef(basic=name)


def type_string(ref: Optional[TypeRef]) -> str:
    """Render a TypeRef on a single line."""
    if ref is None or not ref.is_known:
        return ""
    prefix = '*' * ref.pointer + ('[]' if ref.variadic else '')
    if ref.basic:
        return prefix + ref.basic
    return prefix + node_type_string(ref.file, ref.node)


def node_type_string(source, node) -> str:
    kind = node.type
    if kind in ('type_identifier', 'identifier', 'qualified_type'):
        return source.text(node)
    if kind == 'pointer_type':
        return '*' + node_type_string(source, _pointee(node))
    if kind == 'parenthesized_type':
        inner = node.named_children[0] if node.named_children else None
        return '(' + node_type_string(source, inner) + ')' if inner is not None else source.text(node)
    if kind == 'slice_type':
        return '[]' + node_type_string(source, node.child_by_field_name('element'))
    if kind == 'array_type':
        length = _collapse(source.text(node.child_by_field_name('length')))
        return f"[{length}]" + node_type_string(source, node.child_by_field_name('element'))
    if kind == 'implicit_length_array_type':
        return '[...]' + node_type_string(source, node.child_by_field_name('element'))
    if kind == 'map_type':
        key = node_type_string(source, node.child_by_field_name('key'))
        value = node_type_string(source, node.child_by_field_name('value'))
        return f"map[{key}]{value}"
    if kind == 'channel_type':
        value = node_type_string(source, node.child_by_field_name('value'))
        text = source.text(node)
        if text.startswith('<-'):
            return '<-chan ' + value
        if text.replace(' ', '').startswith('chan<-'):
            return 'chan<- ' + value
        return 'chan ' + value
    if kind in ('function_type', 'func_literal', 'function_declaration', 'method_declaration',
                'method_elem', 'method_spec'):
        return 'func' + signature_string(
            source, node.child_by_field_name('parameters'), node.child_by_field_name('result'))
    if kind == 'struct_type':
        return 'struct{' + '; '.join(struct_field_strings(source, node)) + '}'
    if kind == 'interface_type':
        return 'interface{' + '; '.join(interface_member_strings(source, node)) + '}'
    return _collapse(source.text(node))


def struct_field_strings(source, struct_node) -> List[str]:
    fields = []
    body = _field_list(struct_node)
    if body is None:
        return fields
    for decl in body.named_children:
        if decl.type != 'field_declaration':
            continue
        names = [source.text(n) for n in decl.children_by_field_name('name')]
        type_node = decl.child_by_field_name('type')
        rendered = node_type_string(source, type_node) if type_node is not None else ""
        if not names:
            star = any(child.type == '*' for child in decl.children)
            rendered = ('*' if star else '') + rendered
        else:
            rendered = f"{', '.join(names)} {rendered}"
        tag = decl.child_by_field_name('tag')
        if tag is not None:
            rendered += ' ' + source.text(tag)
        fields.append(rendered)
    return fields


def interface_member_strings(source, interface_node) -> List[str]:
    members = []
    for child in interface_node.named_children:
        if child.type in ('method_elem', 'method_spec'):
            name = source.text(child.child_by_field_name('name'))
            members.append(name + signature_string(
                source, child.child_by_field_name('parameters'), child.child_by_field_name('result')))
        elif child.type in ('type_elem', 'constraint_elem', 'struct_elem'):
            members.append(_collapse(source.text(child)))
    return members


def parameters(source, params_node) -> List[Tuple[str, Any, bool]]:
    """Expand a parameter list into (name, type node, variadic) triples."""
    expanded = []
    if params_node is None:
        return expanded
    if params_node.type != 'parameter_list':
        # A single unparenthesised result type
        return [("", params_node, False)]
    for decl in params_node.named_children:
        if decl.type not in ('parameter_declaration', 'variadic_parameter_declaration'):
            continue
        variadic = decl.type == 'variadic_parameter_declaration'
        type_node = decl.child_by_field_name('type')
        names = list(decl.children_by_field_name('name'))
        if not names:
            expanded.append(("", type_node, variadic))
        for name in names:
            expanded.append((source.text(name), type_node, variadic))
    return expanded


def _param_string(source, name: str, type_node, variadic: bool) -> str:
    rendered = node_type_string(source, type_node) if type_node is not None else ""
    if variadic:
        rendered = '...' + rendered
    return f"{name} {rendered}" if name else rendered


def signature_string(source, params_node, result_node) -> str:
    """``(x string, y string) (n int, err error)`` style signature."""
    params = ', '.join(_param_string(source, *p) for p in parameters(source, params_node))
    rendered = f"({params})"
    results = parameters(source, result_node)
    if not results:
        return rendered
    if len(results) == 1 and not results[0][0]:
        return rendered + ' ' + _param_string(source, *results[0])
    return rendered + ' (' + ', '.join(_param_string(source, *r) for r in results) + ')'


def result_types(source, result_node) -> List[TypeRef]:
    return [TypeRef(node=type_node, file=source) for _, type_node, _ in parameters(source, result_node)
            if type_node is not None]


def element_of(ref: TypeRef) -> Optional[TypeRef]:
    """Element type of a slice, array, pointer-to-array, channel or map value."""
    if ref.variadic:
        return replace(ref, variadic=False)
    if ref.basic == 'string':
        return basic_type('byte')
    node = ref.node
    if node is None or ref.pointer > 1:
        return None
    if node.type == 'pointer_type':
        inner = _pointee(node)
        if inner is not None and inner.type == 'array_type':
            node = inner
        else:
            return None
    if node.type in ('slice_type', 'array_type', 'implicit_length_array_type'):
        return TypeRef(node=node.child_by_field_name('element'), file=ref.file)
    if node.type == 'map_type':
        return TypeRef(node=node.child_by_field_name('value'), file=ref.file)
    if node.type == 'channel_type':
        return TypeRef(node=node.child_by_field_name('value'), file=ref.file)
    return None


def key_of(ref: TypeRef) -> Optional[TypeRef]:
    """Key type produced by ranging over ``ref``."""
    if ref.node is not None and ref.node.type == 'map_type':
        return TypeRef(node=ref.node.child_by_field_name('key'), file=ref.file)
    if ref.node is not None and ref.node.type == 'channel_type':
        return element_of(ref)
    return basic_type('int')


def _pointee(node):
    inner = node.child_by_field_name('type')
    if inner is None:
        named = node.named_children
        inner = named[-1] if named else None
    return inner


def _field_list(struct_node):
    for child in struct_node.named_children:
        if child.type == 'field_declaration_list':
            return child
    return None


def _collapse(text: str) -> str:
    return ' '.join(text.split())
