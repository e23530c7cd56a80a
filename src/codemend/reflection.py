"""
Call reflection - resolve the signature variants a call site may be dispatched to.

Resolution is deliberately conservative and local to one module: module-level
functions (with ``@overload`` variants), methods of module classes reached through
``self``/``cls``/``ClassName``/annotated parameters, and builtins with an
introspectable signature. Anything else resolves to ``None``.
"""
from __future__ import annotations

import ast
import builtins
import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Union

from .syntax_tree import SyntaxTree

_FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]

# decorators that do not change the positional signature
_NEUTRAL_DECORATORS = {"overload", "staticmethod", "classmethod", "abstractmethod"}


class CallKind(Enum):
    FUNCTION = "function"
    METHOD = "method"
    STATIC = "static"


@dataclass
class Variant:
    """One signature a callable accepts (a ParametersAcceptor)."""

    parameters: List[str] = field(default_factory=list)
    is_variadic: bool = False


@dataclass
class FunctionReflection:
    name: str
    variants: List[Variant] = field(default_factory=list)


@dataclass
class MethodReflection:
    class_name: str
    name: str
    variants: List[Variant] = field(default_factory=list)


@dataclass
class UnionTypeMethodReflection:
    """Method looked up on a receiver typed as a union of several classes."""

    name: str
    members: List[MethodReflection] = field(default_factory=list)

    @property
    def variants(self) -> List[Variant]:
        out: List[Variant] = []
        for member in self.members:
            out.extend(member.variants)
        return out


Reflection = Union[FunctionReflection, MethodReflection, UnionTypeMethodReflection]


@dataclass
class _ClassInfo:
    name: str
    node: ast.ClassDef
    bases: List[str] = field(default_factory=list)
    methods: Dict[str, List[_FunctionNode]] = field(default_factory=dict)
    # names bound in the class body by anything but a method def
    assigned: Set[str] = field(default_factory=set)


def is_super_call(expr: ast.AST) -> bool:
    return isinstance(expr, ast.Call) and isinstance(expr.func, ast.Name) and expr.func.id == "super"


def decorator_name(dec: ast.AST) -> str:
    if isinstance(dec, ast.Call):
        dec = dec.func
    if isinstance(dec, ast.Name):
        return dec.id
    if isinstance(dec, ast.Attribute):
        return dec.attr
    return ""


def _variant_of(func: _FunctionNode, drop_first: bool) -> Variant:
    args = func.args
    params = [a.arg for a in list(args.posonlyargs) + list(args.args)]
    if drop_first and params:
        params = params[1:]
    return Variant(parameters=params, is_variadic=args.vararg is not None)


def _variants_of(defs: List[_FunctionNode], drop_first: bool) -> List[Variant]:
    overloads = [d for d in defs if any(decorator_name(x) == "overload" for x in d.decorator_list)]
    chosen = overloads if overloads else defs[-1:]
    return [_variant_of(d, drop_first) for d in chosen]


def _parameter_names(args: ast.arguments) -> Set[str]:
    names = {a.arg for a in list(args.posonlyargs) + list(args.args) + list(args.kwonlyargs)}
    for extra in (args.vararg, args.kwarg):
        if extra is not None:
            names.add(extra.arg)
    return names


def _is_neutral(func: _FunctionNode) -> bool:
    return all(decorator_name(d) in _NEUTRAL_DECORATORS for d in func.decorator_list)


def _kind_of(func: _FunctionNode) -> str:
    names = {decorator_name(d) for d in func.decorator_list}
    if "staticmethod" in names:
        return "static"
    if "classmethod" in names:
        return "class"
    return "instance"


class CallReflectionResolver:
    """Resolve ``ast.Call`` nodes of one module to reflections."""

    def __init__(self, tree: SyntaxTree):
        self.tree = tree
        self.functions: Dict[str, List[_FunctionNode]] = {}
        self.classes: Dict[str, _ClassInfo] = {}
        self.rebound: Set[str] = set()
        self._index_module(tree.module)

    # --- indexing ---
    def _index_module(self, module: ast.Module) -> None:
        for stmt in module.body:
            if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self.functions.setdefault(stmt.name, []).append(stmt)
            elif isinstance(stmt, ast.ClassDef):
                self.classes[stmt.name] = self._index_class(stmt)

        # module-level names rebound by anything other than their def/class statement
        for node in ast.walk(module):
            if isinstance(node, ast.Name) and isinstance(node.ctx, (ast.Store, ast.Del)):
                self.rebound.add(node.id)
            elif isinstance(node, ast.alias):
                self.rebound.add((node.asname or node.name).split(".")[0])
            elif isinstance(node, ast.Global):
                self.rebound.update(node.names)
        for stmt in ast.walk(module):
            if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                if self.tree.parent_of(stmt) is not module:
                    # nested definitions shadow module-level names in their scope
                    self.rebound.add(stmt.name)

    def _index_class(self, node: ast.ClassDef) -> _ClassInfo:
        info = _ClassInfo(name=node.name, node=node)
        for base in node.bases:
            if isinstance(base, ast.Name):
                info.bases.append(base.id)
            else:
                info.bases.append("")
        for stmt in node.body:
            if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
                info.methods.setdefault(stmt.name, []).append(stmt)
                continue
            for sub in ast.walk(stmt):
                if isinstance(sub, ast.Name) and isinstance(sub.ctx, (ast.Store, ast.Del)):
                    info.assigned.add(sub.id)
                elif isinstance(sub, ast.alias):
                    info.assigned.add((sub.asname or sub.name).split(".")[0])
                elif isinstance(sub, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                    info.assigned.add(sub.name)
        return info

    # --- classification ---
    def classify(self, call: ast.Call) -> CallKind:
        func = call.func
        if not isinstance(func, ast.Attribute):
            return CallKind.FUNCTION
        value = func.value
        if isinstance(value, ast.Name) and value.id in self.classes and value.id not in self.rebound:
            return CallKind.STATIC
        if isinstance(value, ast.Call) and isinstance(value.func, ast.Name) and value.func.id in {"super", "type"}:
            return CallKind.STATIC
        return CallKind.METHOD

    # --- resolution ---
    def resolve_call(self, call: ast.Call) -> Optional[Reflection]:
        func = call.func
        if isinstance(func, ast.Name):
            if self._is_local_name(call, func.id):
                return None
            return self._resolve_name_call(func.id)
        if isinstance(func, ast.Attribute):
            return self._resolve_attribute_call(call, func)
        return None

    def _is_local_name(self, node: ast.AST, name: str) -> bool:
        """True when an enclosing function or lambda binds ``name`` itself."""
        scope = self.tree.find_parent_of_type(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda))
        while scope is not None:
            if name in _parameter_names(scope.args) or self._is_reassigned(scope, name):
                return True
            scope = self.tree.find_parent_of_type(scope, (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda))
        return False

    def _resolve_name_call(self, name: str) -> Optional[Reflection]:
        if name in self.rebound:
            return None
        if name in self.functions:
            defs = self.functions[name]
            if not all(_is_neutral(d) for d in defs):
                return None
            return FunctionReflection(name=name, variants=_variants_of(defs, drop_first=False))
        if name in self.classes:
            # class decorators (dataclass, attrs, ...) may generate __init__
            if self.classes[name].node.decorator_list or self.classes[name].node.keywords:
                return None
            return self._method_reflection(name, "__init__", bound=True)
        return self._builtin_reflection(name)

    def _builtin_reflection(self, name: str) -> Optional[FunctionReflection]:
        target = getattr(builtins, name, None)
        if target is None or isinstance(target, type) or not callable(target):
            return None
        try:
            signature = inspect.signature(target)
        except (TypeError, ValueError):
            return None
        params: List[str] = []
        variadic = False
        for param in signature.parameters.values():
            if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
                params.append(param.name)
            elif param.kind is param.VAR_POSITIONAL:
                variadic = True
        return FunctionReflection(name=name, variants=[Variant(parameters=params, is_variadic=variadic)])

    def _resolve_attribute_call(self, call: ast.Call, func: ast.Attribute) -> Optional[Reflection]:
        value = func.value
        if not isinstance(value, ast.Name):
            return None

        # ClassName.method(...)
        if value.id in self.classes and value.id not in self.rebound:
            return self._method_reflection(value.id, func.attr, bound=False)

        owner = self.tree.find_parent_of_type(call, (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda))
        if owner is None or isinstance(owner, ast.Lambda):
            return None

        # self.method(...) / cls.method(...)
        if value.id in {"self", "cls"}:
            cls_node = self.tree.parent_of(owner)
            if not isinstance(cls_node, ast.ClassDef) or cls_node.name not in self.classes:
                return None
            if self.classes[cls_node.name].node is not cls_node:
                return None
            first = (owner.args.posonlyargs + owner.args.args)[:1]
            if not first or first[0].arg != value.id:
                return None
            if self._is_overridden(cls_node.name, func.attr):
                return None
            return self._method_reflection(cls_node.name, func.attr, bound=True)

        # param.method(...) with a class annotation
        annotation = self._annotation_of(owner, value.id)
        if annotation is None or self._is_reassigned(owner, value.id):
            return None
        type_names = [n for n in _type_names_from_annotation(annotation) if n != "None"]
        if not type_names or any(n not in self.classes or n in self.rebound for n in type_names):
            return None
        members: List[MethodReflection] = []
        for type_name in dict.fromkeys(type_names):
            if self._is_overridden(type_name, func.attr):
                return None
            reflection = self._method_reflection(type_name, func.attr, bound=True)
            if reflection is None:
                return None
            members.append(reflection)
        if len(members) > 1:
            return UnionTypeMethodReflection(name=func.attr, members=members)
        return members[0]

    def _method_reflection(self, class_name: str, method: str, bound: bool) -> Optional[MethodReflection]:
        defs = self._lookup_method(class_name, method, set())
        if not defs or not all(_is_neutral(d) for d in defs):
            return None
        kind = _kind_of(defs[-1])
        if kind == "static":
            drop_first = False
        elif kind == "class":
            drop_first = True
        else:
            drop_first = bound
        return MethodReflection(class_name=class_name, name=method, variants=_variants_of(defs, drop_first))

    def _lookup_method(self, class_name: str, method: str, seen: Set[str]) -> Optional[List[_FunctionNode]]:
        info = self.classes.get(class_name)
        if info is None or class_name in seen:
            return None
        seen.add(class_name)
        if method in info.assigned:
            return None
        if method in info.methods:
            return info.methods[method]
        if method == "__init__" and info.node.decorator_list:
            return None
        for base in info.bases:
            if base == "object":
                continue
            # unknown base: the method may live outside this module
            if base not in self.classes:
                return None
            found = self._lookup_method(base, method, seen)
            if found is not None:
                return found
        return None

    def _is_overridden(self, class_name: str, method: str) -> bool:
        """True when a subclass defined in this module redefines ``method``."""
        for info in self.classes.values():
            if info.name == class_name or class_name not in self._ancestors(info.name, set()):
                continue
            if method in info.methods or method in info.assigned:
                return True
        return False

    def _ancestors(self, class_name: str, seen: Set[str]) -> Set[str]:
        info = self.classes.get(class_name)
        if info is None or class_name in seen:
            return seen
        seen.add(class_name)
        for base in info.bases:
            if base in self.classes:
                self._ancestors(base, seen)
        return seen

    def _annotation_of(self, func: _FunctionNode, name: str) -> Optional[ast.AST]:
        args = func.args
        for arg in list(args.posonlyargs) + list(args.args) + list(args.kwonlyargs):
            if arg.arg == name:
                return arg.annotation
        return None

    def _is_reassigned(self, func: ast.AST, name: str) -> bool:
        for node in ast.walk(func):
            if isinstance(node, ast.Name) and node.id == name and isinstance(node.ctx, ast.Store):
                return True
        return False


def _type_names_from_annotation(ann: Optional[ast.AST]) -> List[str]:
    """Extract class names from an annotation.

    Supports ``Optional[T]``, ``Union[A, B]``, PEP 604 ``A | B`` and string forward references.
    """
    out: List[str] = []
    if ann is None:
        return out
    if isinstance(ann, ast.Name):
        out.append(ann.id)
    elif isinstance(ann, ast.Attribute):
        out.append(f"{decorator_name(ann.value)}.{ann.attr}")
    elif isinstance(ann, ast.Subscript):
        base = decorator_name(ann.value)
        items = list(ann.slice.elts) if isinstance(ann.slice, ast.Tuple) else [ann.slice]
        if base == "Optional":
            for item in items[:1]:
                out.extend(_type_names_from_annotation(item))
        elif base == "Union":
            for item in items:
                out.extend(_type_names_from_annotation(item))
        elif base:
            out.append(base)
    elif isinstance(ann, ast.BinOp) and isinstance(ann.op, ast.BitOr):
        out.extend(_type_names_from_annotation(ann.left))
        out.extend(_type_names_from_annotation(ann.right))
    elif isinstance(ann, ast.Constant):
        if ann.value is None:
            out.append("None")
        elif isinstance(ann.value, str) and ann.value.strip():
            try:
                parsed = ast.parse(ann.value.strip(), mode="eval").body
            except SyntaxError:
                return out
            out.extend(_type_names_from_annotation(parsed))
    return out
