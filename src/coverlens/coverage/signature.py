"""Decomposition of mangled method names.

The instrumentation tool names methods as
``<returnType> <declaringType>::<methodName>(<argumentList>)``, e.g.
``System.Void Foo.Bar::Baz(System.Int32)``. Names that do not fit this shape
are skipped by the tree builder rather than reported.
"""

import re
from dataclasses import dataclass

_METHOD_NAME_RE = re.compile(
    r"^(?P<return_type>[^ ]*) [^:]*::(?P<method_name>[^(]*)\((?P<argument_list>[^)]*)\)$"
)


@dataclass(frozen=True, slots=True)
class MethodSignature:
    return_type: str
    method_name: str
    argument_list: str

    @property
    def display_name(self) -> str:
        return f"{self.method_name}({self.argument_list}) : {self.return_type}"


def parse_method_name(name: str) -> MethodSignature | None:
    match = _METHOD_NAME_RE.match(name)
    if match is None:
        return None
    return MethodSignature(
        return_type=match.group("return_type"),
        method_name=match.group("method_name"),
        argument_list=match.group("argument_list"),
    )
