# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from collections import Counter, OrderedDict
from collections.abc import Iterable, Iterator, Mapping, Sequence
from copy import deepcopy
from http import HTTPMethod
from typing import TypeAlias

QueryParams: TypeAlias = Mapping[str, str | Sequence[str]]
"""Query parameters keyed by name, each with a single value or a list of values."""


class Field:
    """A header name with one or more values.

    Field names are case insensitive. The name is preserved as given for
    transmission and lower-cased only when the request is canonicalized.
    """

    def __init__(self, *, name: str, values: Iterable[str] | None = None):
        self.name = name
        self.values: list[str] = list(values) if values is not None else []

    def add(self, value: str) -> None:
        """Append a value to a field."""
        self.values.append(value)

    def set(self, values: list[str]) -> None:
        """Overwrite existing field values."""
        self.values = values

    def remove(self, value: str) -> None:
        """Remove all matching entries from list."""
        self.values = [val for val in self.values if val != value]

    def as_string(self, delimiter: str = ", ") -> str:
        """Get the field values joined by ``delimiter``.

        If the ``Field`` has zero values, the empty string is returned.
        """
        return delimiter.join(self.values)

    def as_tuples(self) -> list[tuple[str, str]]:
        """Get list of ``name``, ``value`` tuples where each tuple represents one
        value."""
        return [(self.name, val) for val in self.values]

    def __eq__(self, other: object) -> bool:
        """Name and values must match.

        Values order must match.
        """
        if not isinstance(other, Field):
            return False
        return self.name == other.name and self.values == other.values

    def __repr__(self) -> str:
        return f"Field(name={self.name!r}, values={self.values!r})"


class Fields:
    def __init__(self, initial: Iterable[Field] | None = None):
        """Collection of header entries mapped by case-insensitive name.

        :param initial: Initial list of ``Field`` objects. Names must be unique once
        lower-cased.
        """
        init_fields = list(initial) if initial is not None else []
        init_field_names = [self._normalize_field_name(fld.name) for fld in init_fields]
        non_unique_names = [
            name for name, num in Counter(init_field_names).items() if num > 1
        ]
        if non_unique_names:
            raise ValueError(
                "Field names of the initial list of fields must be unique. The "
                "following normalized field names appear more than once: "
                f"{', '.join(non_unique_names)}."
            )
        self.entries: OrderedDict[str, Field] = OrderedDict(
            zip(init_field_names, init_fields)
        )

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str | Iterable[str]]) -> Fields:
        """Build ``Fields`` from a plain header mapping.

        Values may be a single string or an iterable of strings. Names that differ
        only in case are merged, in mapping order.
        """
        fields = cls()
        for name, value in headers.items():
            values = [value] if isinstance(value, str) else list(value)
            fields.extend(cls([Field(name=name, values=values)]))
        return fields

    def set_field(self, field: Field) -> None:
        """Alias for __setitem__ to utilize the field.name for the entry key."""
        self.__setitem__(field.name, field)

    def __setitem__(self, name: str, field: Field) -> None:
        """Set or override entry for a Field name."""
        normalized_name = self._normalize_field_name(name)
        normalized_field_name = self._normalize_field_name(field.name)
        if normalized_name != normalized_field_name:
            raise ValueError(
                f"Supplied key {name} does not match Field.name "
                f"provided: {normalized_field_name}"
            )
        self.entries[normalized_name] = field

    def get(self, key: str, default: Field | None = None) -> Field | None:
        return self[key] if key in self else default

    def __getitem__(self, name: str) -> Field:
        """Retrieve Field entry."""
        return self.entries[self._normalize_field_name(name)]

    def __delitem__(self, name: str) -> None:
        """Delete entry from collection."""
        del self.entries[self._normalize_field_name(name)]

    def extend(self, other: Fields) -> None:
        """Merges ``entries`` of ``other`` into the current ``entries``.

        Values of a name already present are appended; new names are added.
        """
        for other_field in other:
            if other_field.name in self:
                cur_field = self[other_field.name]
                for other_value in other_field.values:
                    cur_field.add(other_value)
            else:
                self.set_field(Field(name=other_field.name, values=other_field.values))

    def _normalize_field_name(self, name: str) -> str:
        return name.lower()

    def __eq__(self, other: object) -> bool:
        """Entries must match in values and order."""
        if not isinstance(other, Fields):
            return False
        return self.entries == other.entries

    def __iter__(self) -> Iterator[Field]:
        yield from self.entries.values()

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"Fields({self.entries})"

    def __contains__(self, key: str) -> bool:
        return self._normalize_field_name(key) in self.entries


class AWSRequest:
    """A snapshot of the request parts covered by a SigV4 signature.

    :param method: The HTTP verb, as ``http.HTTPMethod`` or a verb string.
    :param host: The host the request will be sent to, including a non-default
        port if one is used.
    :param path: The path exactly as it will appear on the wire, already
        percent-escaped. Must be at least ``/``.
    :param query: Unencoded query parameters.
    :param fields: The request headers.
    """

    def __init__(
        self,
        *,
        method: HTTPMethod | str,
        host: str,
        path: str = "/",
        query: QueryParams | None = None,
        fields: Fields | None = None,
    ):
        self.method = method
        self.host = host
        self.path = path
        self.query: QueryParams = query if query is not None else {}
        self.fields = fields if fields is not None else Fields()

    def __deepcopy__(self, memo: dict[int, AWSRequest] | None = None) -> AWSRequest:
        if memo is None:
            memo = {}

        if id(self) in memo:
            return memo[id(self)]

        new_instance = self.__class__(
            method=self.method,
            host=self.host,
            path=self.path,
            query=deepcopy(self.query, memo),
            fields=deepcopy(self.fields, memo),
        )
        memo[id(self)] = new_instance
        return new_instance

    def __repr__(self) -> str:
        return (
            f"AWSRequest(method={self.method!r}, host={self.host!r}, "
            f"path={self.path!r}, query={self.query!r}, fields={self.fields!r})"
        )
