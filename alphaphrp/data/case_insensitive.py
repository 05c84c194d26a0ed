"""Dictionary with case-insensitive string keys.

Score names, protein names, column names and parameter names are all
compared without regard to case in PHRP files. Keys keep the casing they
were first inserted with.
"""

from collections.abc import MutableMapping


class CaseInsensitiveDict(MutableMapping):
    """MutableMapping keyed by ``str.casefold()`` of the key.

    Examples
    --------
    >>> scores = CaseInsensitiveDict()
    >>> scores["SpecEValue"] = "1.2E-10"
    >>> scores["specevalue"]
    '1.2E-10'
    >>> list(scores)
    ['SpecEValue']
    """

    def __init__(self, data=None, **kwargs):
        self._store = {}
        if data is not None:
            self.update(data)
        if kwargs:
            self.update(kwargs)

    def __setitem__(self, key, value):
        folded = key.casefold()
        if folded in self._store:
            original_key = self._store[folded][0]
        else:
            original_key = key
        self._store[folded] = (original_key, value)

    def __getitem__(self, key):
        return self._store[key.casefold()][1]

    def __delitem__(self, key):
        del self._store[key.casefold()]

    def __contains__(self, key):
        return isinstance(key, str) and key.casefold() in self._store

    def __iter__(self):
        return (original_key for original_key, _ in self._store.values())

    def __len__(self):
        return len(self._store)

    def copy(self) -> 'CaseInsensitiveDict':
        return CaseInsensitiveDict(self.items())

    def __repr__(self):
        return f"{type(self).__name__}({dict(self.items())!r})"
