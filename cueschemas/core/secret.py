"""Opaque secret values that never render their content."""


class Secret:
    """Wraps a credential so it cannot leak through str(), repr() or logging.

    The raw value is only available through ``reveal()``, which callers use
    at the point of injecting it into a tool's environment.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str):
        if not value:
            raise ValueError("Secret value must not be empty")
        self._value = value

    def reveal(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return "Secret('***')"

    __str__ = __repr__

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Secret) and other._value == self._value

    def __hash__(self) -> int:
        return hash(self._value)
