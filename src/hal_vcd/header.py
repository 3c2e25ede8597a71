"""VCD header model: scope tree, variables and identifier codes.

Shared by the reader, which builds it from header tokens, and the writer
builder, which builds it from pin registrations.
"""
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from vcd.common import ScopeType, Timescale, VarType

from .errors import HeaderParseError

# Printable ASCII range usable in VCD identifier codes
ID_CODE_FIRST = ord('!')
ID_CODE_LAST = ord('~')
ID_CODE_BASE = ID_CODE_LAST - ID_CODE_FIRST + 1


def id_code(index: int) -> str:
    """Return the identifier code for the index'th variable.

    Codes count through ``!``..``~`` with the first character varying
    fastest: ``!``, ``"``, ..., ``~``, ``!!``, ``"!``, ...
    """
    if index < 0:
        raise ValueError(f"Negative identifier index {index}")
    chars = []
    while True:
        chars.append(chr(ID_CODE_FIRST + index % ID_CODE_BASE))
        index = index // ID_CODE_BASE - 1
        if index < 0:
            break
    return ''.join(chars)


class IdCodeGenerator:
    """Hands out identifier codes in declaration order."""

    def __init__(self):
        self._next = 0

    def __iter__(self):
        return self

    def __next__(self) -> str:
        code = id_code(self._next)
        self._next += 1
        return code


@dataclass
class Var:
    """A declared variable."""
    var_type: VarType
    size: int
    id_code: str
    reference: str

    def declaration(self) -> str:
        return f"$var {self.var_type} {self.size} {self.id_code} {self.reference} $end"


@dataclass
class Scope:
    """A named scope holding nested scopes and variables in declaration order."""
    scope_type: ScopeType
    name: str
    items: List[Union['Scope', Var]] = field(default_factory=list)

    def declaration(self) -> str:
        return f"$scope {self.scope_type.value} {self.name} $end"

    def find_scope(self, name: str) -> Optional['Scope']:
        for item in self.items:
            if isinstance(item, Scope) and item.name == name:
                return item
        return None

    def find_var(self, reference: str) -> Optional[Var]:
        for item in self.items:
            if isinstance(item, Var) and item.reference == reference:
                return item
        return None


@dataclass
class Header:
    """Parsed or generated VCD header."""
    timescale: Optional[Timescale] = None
    items: List[Union[Scope, Var]] = field(default_factory=list)

    def find_scope(self, path: Sequence[str]) -> Optional[Scope]:
        """Find a scope by the names of its enclosing scopes and its own name."""
        if not path:
            return None
        scope = None
        for name in path:
            items = self.items if scope is None else scope.items
            scope = next(
                (s for s in items if isinstance(s, Scope) and s.name == name),
                None)
            if scope is None:
                return None
        return scope

    def find_var(self, path: Sequence[str]) -> Optional[Var]:
        """Find a variable by scope names followed by the variable name."""
        if not path:
            return None
        *scope_path, reference = path
        if scope_path:
            scope = self.find_scope(scope_path)
            if scope is None:
                return None
            return scope.find_var(reference)
        for item in self.items:
            if isinstance(item, Var) and item.reference == reference:
                return item
        return None

    def variables(self) -> Iterator[Tuple[Tuple[str, ...], Var]]:
        """Iterate all variables with their full paths, depth first."""
        def walk(items, prefix):
            for item in items:
                if isinstance(item, Scope):
                    yield from walk(item.items, prefix + (item.name,))
                else:
                    yield prefix + (item.reference,), item
        yield from walk(self.items, ())


class HeaderBuilder:
    """Builds a Header one declaration at a time."""

    def __init__(self, header: Optional[Header] = None):
        self.header = header if header is not None else Header()
        self._scopes: List[Scope] = []

    @property
    def depth(self) -> int:
        return len(self._scopes)

    def add_scope(self, name: str, scope_type: ScopeType = ScopeType.module) -> Scope:
        scope = Scope(scope_type, name)
        self._current_items().append(scope)
        self._scopes.append(scope)
        return scope

    def upscope(self) -> Scope:
        if not self._scopes:
            raise HeaderParseError("$upscope without an open scope")
        return self._scopes.pop()

    def add_var(self, var: Var) -> Var:
        self._current_items().append(var)
        return var

    def _current_items(self) -> List[Union[Scope, Var]]:
        if self._scopes:
            return self._scopes[-1].items
        return self.header.items
