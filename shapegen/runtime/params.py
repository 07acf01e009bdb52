"""Named-parameter container used to build query-protocol requests."""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping

__all__ = ['Params']


class Params(MutableMapping[str, str]):
    """Insertion-ordered mapping of dotted parameter keys to text values.

    Example:
        >>> params = Params()
        >>> params.put('Action', 'DescribeVolumes')
        >>> params.put('VolumeId.1', 'vol-1')
        >>> list(params.items())
        [('Action', 'DescribeVolumes'), ('VolumeId.1', 'vol-1')]
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = {}
        if initial:
            for key, value in initial.items():
                self.put(key, value)

    def put(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(
                f'Parameter {key!r} must be text, got {type(value).__name__}'
            )
        self._values[key] = value

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __setitem__(self, key: str, value: str) -> None:
        self.put(key, value)

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f'Params({self._values!r})'

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)
