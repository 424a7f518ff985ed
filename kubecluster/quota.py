"""Resource quantities, resource lists and quota usage calculation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

_BINARY_SUFFIXES = {
    "Ki": 2**10,
    "Mi": 2**20,
    "Gi": 2**30,
    "Ti": 2**40,
    "Pi": 2**50,
    "Ei": 2**60,
}
_DECIMAL_SUFFIXES = {
    "n": Fraction(1, 10**9),
    "u": Fraction(1, 10**6),
    "m": Fraction(1, 10**3),
    "": Fraction(1),
    "k": Fraction(10**3),
    "M": Fraction(10**6),
    "G": Fraction(10**9),
    "T": Fraction(10**12),
    "P": Fraction(10**15),
    "E": Fraction(10**18),
}
_NUMBER = re.compile(r"([+-]?)(\d+(?:\.\d*)?|\.\d+)(.*)")
_EXPONENT = re.compile(r"[eE]([+-]?\d+)")


def _multiplier(suffix: str) -> Fraction:
    if suffix in _BINARY_SUFFIXES:
        return Fraction(_BINARY_SUFFIXES[suffix])
    if suffix in _DECIMAL_SUFFIXES:
        return _DECIMAL_SUFFIXES[suffix]
    match = _EXPONENT.fullmatch(suffix)
    if match:
        return Fraction(10) ** int(match.group(1))
    raise ValueError(f"unknown quantity suffix: {suffix!r}")


@dataclass(frozen=True, order=True)
class Quantity:
    """An exact amount of a resource, such as 500m of CPU or 1Gi of memory."""

    value: Fraction = Fraction(0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", Fraction(self.value))

    def __add__(self, other: Quantity) -> Quantity:
        if not isinstance(other, Quantity):
            return NotImplemented
        return Quantity(self.value + other.value)

    def __sub__(self, other: Quantity) -> Quantity:
        if not isinstance(other, Quantity):
            return NotImplemented
        return Quantity(self.value - other.value)

    def __neg__(self) -> Quantity:
        return Quantity(-self.value)

    def __str__(self) -> str:
        if self.value.denominator == 1:
            return str(self.value.numerator)
        milli = self.value * 1000
        if milli.denominator == 1:
            return f"{milli.numerator}m"
        nano = self.value * 10**9
        if nano.denominator == 1:
            return f"{nano.numerator}n"
        return str(Decimal(self.value.numerator) / Decimal(self.value.denominator))


ZERO = Quantity(0)

ResourceList = dict[str, Quantity]


def parse_quantity(text: str) -> Quantity:
    """Parse a quantity such as "2", "500m", "1.5Gi" or "1e3".

    Raises ValueError for text that is not a quantity.
    """
    match = _NUMBER.fullmatch(text.strip())
    if not match:
        raise ValueError(f"quantities must match the regular expression: {text!r}")
    sign, digits, suffix = match.groups()
    try:
        number = Fraction(Decimal(digits))
    except InvalidOperation as err:
        raise ValueError(f"invalid quantity: {text!r}") from err
    value = number * _multiplier(suffix)
    return Quantity(-value if sign == "-" else value)


def equals(a: Mapping[str, Quantity], b: Mapping[str, Quantity]) -> bool:
    """Whether the two lists hold the same resources with equal amounts."""
    if len(a) != len(b):
        return False
    return all(key in b and value == b[key] for key, value in a.items())


def less_than_or_equal(
    a: Mapping[str, Quantity], b: Mapping[str, Quantity]
) -> tuple[bool, list[str]]:
    """Check a <= b for each key of b found in a; also return the keys that exceed."""
    exceeded = [key for key, value in b.items() if key in a and a[key] > value]
    return not exceeded, exceeded


def resource_max(a: Mapping[str, Quantity], b: Mapping[str, Quantity]) -> ResourceList:
    """The larger amount of each named resource."""
    result: ResourceList = {}
    for key, value in a.items():
        other = b.get(key)
        result[key] = other if other is not None and value <= other else value
    for key, value in b.items():
        result.setdefault(key, value)
    return result


def add(a: Mapping[str, Quantity], b: Mapping[str, Quantity]) -> ResourceList:
    """The sum a + b of each named resource."""
    result: ResourceList = {}
    for key, value in a.items():
        other = b.get(key)
        result[key] = value + other if other is not None else value
    for key, value in b.items():
        result.setdefault(key, value)
    return result


def subtract_with_non_negative_result(
    a: Mapping[str, Quantity], b: Mapping[str, Quantity]
) -> ResourceList:
    """The difference a - b of each named resource, floored at zero."""
    result: ResourceList = {}
    for key, value in a.items():
        other = b.get(key)
        quantity = value - other if other is not None else value
        result[key] = quantity if quantity > ZERO else ZERO
    for key in b:
        result.setdefault(key, ZERO)
    return result


def subtract(a: Mapping[str, Quantity], b: Mapping[str, Quantity]) -> ResourceList:
    """The difference a - b of each named resource."""
    result: ResourceList = {}
    for key, value in a.items():
        other = b.get(key)
        result[key] = value - other if other is not None else value
    for key, value in b.items():
        if key not in result:
            result[key] = -value
    return result


def mask(resources: Mapping[str, Quantity], names: Iterable[str]) -> ResourceList:
    """Only the entries whose names are listed."""
    name_set = to_set(names)
    return {key: value for key, value in resources.items() if key in name_set}


def resource_names(resources: Mapping[str, Quantity]) -> list[str]:
    """All resource names of the list."""
    return list(resources)


def contains(items: Iterable[str], item: str) -> bool:
    return item in items


def contains_prefix(prefix_set: Iterable[str], item: str) -> bool:
    """Whether the item starts with one of the prefixes."""
    return any(item.startswith(prefix) for prefix in prefix_set)


def intersection(a: Iterable[str], b: Iterable[str]) -> list[str]:
    """Names found in both lists, deduplicated and sorted."""
    b_set = set(b)
    return sorted({item for item in a if item in b_set})


def difference(a: Iterable[str], b: Iterable[str]) -> list[str]:
    """Names of a not found in b, deduplicated and sorted."""
    b_set = set(b)
    return sorted({item for item in a if item not in b_set})


def is_zero(a: Mapping[str, Quantity]) -> bool:
    """Whether every amount is zero."""
    return all(value == ZERO for value in a.values())


def is_negative(a: Mapping[str, Quantity]) -> list[str]:
    """Names of the resources with a negative amount."""
    return [key for key, value in a.items() if value < ZERO]


def to_set(resource_names: Iterable[str]) -> set[str]:
    return set(resource_names)


@dataclass
class UsageStatsOptions:
    """How usage statistics are to be calculated."""

    namespace: str = ""
    scopes: list[str] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)
    scope_selector: Optional[Any] = None


@dataclass
class UsageStats:
    """Observed resource use."""

    used: ResourceList = field(default_factory=dict)


class Evaluator(Protocol):
    """Knows how to evaluate quota usage for one group resource."""

    def group_resource(self) -> str:
        """The group resource this evaluator handles."""

    def matching_resources(self, names: Sequence[str]) -> list[str]:
        """The subset of the given resource names this evaluator measures."""

    def usage(self, item: Any) -> ResourceList:
        """The resource usage of one object."""

    def usage_stats(self, options: UsageStatsOptions) -> UsageStats:
        """The latest observed usage of all objects."""


class Registry:
    """A set of evaluators keyed by the group resource they handle."""

    def __init__(self, evaluators: Iterable[Evaluator] = ()) -> None:
        self._evaluators: dict[str, Evaluator] = {}
        for evaluator in evaluators:
            self.add(evaluator)

    def add(self, evaluator: Evaluator) -> None:
        self._evaluators[evaluator.group_resource()] = evaluator

    def remove(self, evaluator: Evaluator) -> None:
        self._evaluators.pop(evaluator.group_resource(), None)

    def get(self, group_resource: str) -> Optional[Evaluator]:
        return self._evaluators.get(group_resource)

    def evaluators(self) -> list[Evaluator]:
        return list(self._evaluators.values())


class QuotaCalculationError(Exception):
    """Some evaluators failed; usage holds what the others measured."""

    def __init__(self, usage: ResourceList, errors: list[Exception]) -> None:
        super().__init__("; ".join(str(err) for err in errors))
        self.usage = usage
        self.errors = errors


def calculate_usage(
    namespace_name: str,
    scopes: Iterable[str],
    hard_limits: Mapping[str, Quantity],
    registry: Registry,
    scope_selector: Optional[Any] = None,
) -> ResourceList:
    """Measure the usage of the resources that the hard limits name.

    Raises QuotaCalculationError if any evaluator fails; its usage attribute
    then holds only the resources that were measured without error.
    """
    hard_resources = resource_names(hard_limits)
    evaluators = registry.evaluators()
    potential = [
        name for evaluator in evaluators for name in evaluator.matching_resources(hard_resources)
    ]
    matched = intersection(hard_resources, potential)
    scope_list = list(scopes)

    errors: list[Exception] = []
    usage: ResourceList = {}
    for evaluator in evaluators:
        wanted = evaluator.matching_resources(matched)
        if not wanted:
            continue
        options = UsageStatsOptions(
            namespace=namespace_name,
            scopes=scope_list,
            resources=wanted,
            scope_selector=scope_selector,
        )
        try:
            stats = evaluator.usage_stats(options)
        except Exception as err:  # each evaluator's failure is collected
            errors.append(err)
            matched = difference(matched, wanted)
            continue
        usage = add(usage, stats.used)

    usage = mask(usage, matched)
    if errors:
        raise QuotaCalculationError(usage, errors)
    return usage