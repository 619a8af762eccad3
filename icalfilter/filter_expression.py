"""
Filter expressions over event summaries.

A filter string is a list of clauses separated by ``~``. Each clause has
the form ``[!]condition:pattern``; the expression accepts a summary when
every clause matches. Examples::

    contains:meeting
    startsWith:[Team]~!contains:cancelled
    !regex:this:can:have:colons.*
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from .errors import InvalidFilterCondition, InvalidFilterPattern, InvalidFilterSyntax


CLAUSE_SEPARATOR = "~"
NEGATION_PREFIX = "!"


class FilterCondition(Enum):
    """Conditions a clause can test. Values are the names used in filter strings."""
    EQUALS = "equals"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    CONTAINS = "contains"
    TRUE = "true"
    REGEX = "regex"


_PREDICATES: dict[FilterCondition, Callable[[str, object], bool]] = {
    FilterCondition.EQUALS: lambda s, p: s == p,
    FilterCondition.STARTS_WITH: lambda s, p: s.startswith(p),
    FilterCondition.ENDS_WITH: lambda s, p: s.endswith(p),
    FilterCondition.CONTAINS: lambda s, p: p in s,
    FilterCondition.TRUE: lambda s, p: True,
    FilterCondition.REGEX: lambda s, p: p.search(s) is not None,
}

_CONDITION_NAMES = ", ".join(c.value for c in FilterCondition)


@dataclass(frozen=True)
class FilterClause:
    """One parsed ``[!]condition:pattern`` unit."""
    condition: FilterCondition
    pattern: Union[str, re.Pattern] = ""
    negated: bool = False

    @classmethod
    def parse(cls, segment: str) -> 'FilterClause':
        """
        Parse a single clause.

        Args:
            segment: Non-empty clause text, e.g. ``!startsWith:Lecture``

        Returns:
            The parsed FilterClause.

        Raises:
            InvalidFilterSyntax: double negation or no ``:`` separator
            InvalidFilterCondition: unknown condition name
            InvalidFilterPattern: regex pattern that does not compile
        """
        negated = segment.startswith(NEGATION_PREFIX)
        body = segment[1:] if negated else segment

        if body.startswith(NEGATION_PREFIX):
            raise InvalidFilterSyntax(segment, "only a single leading '!' is allowed")

        name, colon, pattern = body.partition(":")
        if not colon:
            raise InvalidFilterSyntax(segment, "expected [!]condition:pattern")

        try:
            condition = FilterCondition(name)
        except ValueError:
            raise InvalidFilterCondition(
                segment, f"unknown filter condition; options are {_CONDITION_NAMES}"
            ) from None

        if condition is FilterCondition.TRUE:
            return cls(condition=condition, negated=negated)

        if condition is FilterCondition.REGEX:
            try:
                compiled = re.compile(pattern)
            except re.error as e:
                raise InvalidFilterPattern(segment, f"invalid regular expression ({e})") from e
            return cls(condition=condition, pattern=compiled, negated=negated)

        return cls(condition=condition, pattern=pattern, negated=negated)

    def matches(self, summary: str) -> bool:
        """Whether the summary satisfies this clause, negation applied."""
        return _PREDICATES[self.condition](summary, self.pattern) != self.negated

    @property
    def pattern_text(self) -> str:
        """The pattern as written in the filter string."""
        if isinstance(self.pattern, re.Pattern):
            return self.pattern.pattern
        return self.pattern

    def __str__(self) -> str:
        prefix = NEGATION_PREFIX if self.negated else ""
        return f"{prefix}{self.condition.value}:{self.pattern_text}"


@dataclass(frozen=True)
class FilterExpression:
    """Ordered, AND-combined clauses. An empty expression accepts everything."""
    clauses: tuple[FilterClause, ...] = ()

    @classmethod
    def parse(cls, raw: Optional[str]) -> 'FilterExpression':
        """
        Parse a raw filter string.

        Empty segments are skipped, so ``None`` and ``""`` both give the
        empty expression. Parsing stops at the first invalid segment.
        """
        if not raw:
            return cls()
        clauses = tuple(
            FilterClause.parse(segment)
            for segment in raw.split(CLAUSE_SEPARATOR)
            if segment
        )
        return cls(clauses=clauses)

    def accepts(self, summary: str) -> bool:
        """Evaluate all clauses against an event summary."""
        return all(clause.matches(summary) for clause in self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)

    def __str__(self) -> str:
        return CLAUSE_SEPARATOR.join(str(c) for c in self.clauses)
