"""
Error Aggregator for Colibri

Collects independent failures under path keys (selector names, followed
URLs) so that one failing branch never aborts its siblings.
"""

import json
from typing import Any, Dict, Iterator, List, Optional, Tuple

from colibri.core.base import ColibriError


class Errs(ColibriError):
    """
    Ordered mapping of key to error or nested Errs.

    Adding under an existing key never overwrites: the first error keeps
    the bare key and later ones are stored as ``key#1``, ``key#2``, ...
    """

    def __init__(self):
        super().__init__("errors")
        self._errors: Dict[str, BaseException] = {}

    def add(self, key: str, err: Optional[BaseException]) -> "Errs":
        """
        Add an error under key

        Args:
            key: Path key of the failure
            err: Error to store, an Errs is nested as a sub-object

        Returns:
            The aggregate itself, for chaining
        """
        if not key or err is None:
            return self

        name = key
        count = 0
        while name in self._errors:
            count += 1
            name = f"{key}#{count}"

        self._errors[name] = err
        return self

    def get(self, key: str) -> Optional[BaseException]:
        return self._errors.get(key)

    def keys(self) -> List[str]:
        return list(self._errors.keys())

    def items(self) -> List[Tuple[str, BaseException]]:
        return list(self._errors.items())

    def to_dict(self) -> Dict[str, Any]:
        """Render the aggregate as nested key -> message mappings"""
        result: Dict[str, Any] = {}
        for key, err in self._errors.items():
            if isinstance(err, Errs):
                result[key] = err.to_dict()
            else:
                result[key] = str(err) or type(err).__name__
        return result

    def __getitem__(self, key: str) -> BaseException:
        return self._errors[key]

    def __contains__(self, key: object) -> bool:
        return key in self._errors

    def __iter__(self) -> Iterator[str]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __repr__(self) -> str:
        return f"Errs({self})"


def add_error(errs: Optional[BaseException], key: str, err: Optional[BaseException]) -> Optional[BaseException]:
    """
    Add err under key, creating the aggregate when needed.

    A plain error already held in errs is kept under the key "#".
    """
    if not key or err is None:
        return errs

    if errs is None:
        errs = Errs()
    elif not isinstance(errs, Errs):
        errs = Errs().add("#", errs)

    return errs.add(key, err)
