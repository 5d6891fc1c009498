from typing import Any, Dict, Optional

from calcscript.errors import CalcError
from calcscript.types import ErrorVal


class Scope:
    """A scope mapping identifiers to runtime values, chained to a parent.

    Scopes are shared, never copied: `if`/`while` bodies run in the scope
    they appear in, and a function call chains a fresh scope to the
    caller's scope.
    """
    def __init__(self, parent: Optional['Scope'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def get(self, name: str) -> Any:
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope.values:
                return scope.values[name]
            scope = scope.parent
        raise CalcError(ErrorVal('NameError', f'undefined variable {name}'))

    def set(self, name: str, value: Any):
        # Writes always land in this scope; a parent binding is shadowed, not updated
        self.values[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.values

