import pytest

from kubecluster.quota import (
    QuotaCalculationError,
    Quantity,
    Registry,
    UsageStats,
    add,
    calculate_usage,
    contains,
    contains_prefix,
    difference,
    equals,
    intersection,
    is_negative,
    is_zero,
    less_than_or_equal,
    mask,
    parse_quantity,
    resource_max,
    resource_names,
    subtract,
    subtract_with_non_negative_result,
    to_set,
)

q = parse_quantity


class FakeEvaluator:
    def __init__(self, name, resources, used=None, error=None):
        self.name = name
        self.resources = resources
        self.used = used or {}
        self.error = error
        self.seen = []

    def group_resource(self):
        return self.name

    def matching_resources(self, names):
        return [n for n in names if n in self.resources]

    def usage(self, item):
        return dict(self.used)

    def usage_stats(self, options):
        self.seen.append(options)
        if self.error is not None:
            raise self.error
        return UsageStats(used=dict(self.used))


def test_parse_binary_and_decimal_suffixes():
    assert q("1Ki") == q("1024")
    assert q("1k") == q("1e3")
    assert q("500m") + q("500m") == q("1")


@pytest.mark.parametrize("text", ["2", "500m", "1Gi"])
def test_quantity_string_round_trip(text):
    assert q(str(q(text))) == q(text)


@pytest.mark.parametrize("text", ["abc", "", "1x", "--1"])
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        parse_quantity(text)


def test_negative_quantity():
    assert q("-2") == -q("2")


def test_equals():
    a = {"cpu": q("1"), "memory": q("1Gi")}
    assert equals(a, dict(a))
    assert not equals(a, {"cpu": q("1")})
    assert not equals(a, {"cpu": q("1"), "pods": q("1Gi")})
    assert not equals(a, {"cpu": q("2"), "memory": q("1Gi")})


def test_less_than_or_equal():
    ok, names = less_than_or_equal({"cpu": q("1")}, {"cpu": q("2"), "memory": q("1")})
    assert ok is True
    assert names == []
    ok, names = less_than_or_equal({"cpu": q("3"), "memory": q("1")}, {"cpu": q("2")})
    assert ok is False
    assert names == ["cpu"]


def test_resource_max_takes_larger_of_each():
    a = {"cpu": q("1"), "memory": q("2Gi")}
    b = {"cpu": q("2"), "pods": q("5")}
    result = resource_max(a, b)
    assert set(result) == {"cpu", "memory", "pods"}
    assert result["cpu"] == b["cpu"]
    assert result["memory"] == a["memory"]
    assert result["pods"] == b["pods"]


def test_add_is_commutative_and_inverts_subtract():
    a = {"cpu": q("1"), "memory": q("1Gi")}
    b = {"cpu": q("250m"), "memory": q("512Mi")}
    assert add(a, b) == add(b, a)
    assert equals(subtract(add(a, b), b), a)


def test_add_keeps_keys_of_both():
    result = add({"cpu": q("1")}, {"pods": q("3")})
    assert result == {"cpu": q("1"), "pods": q("3")}


def test_subtract_negates_keys_only_in_b():
    result = subtract({}, {"pods": q("3")})
    assert result["pods"] == -q("3")
    assert is_negative(result) == ["pods"]


def test_subtract_with_non_negative_result():
    a = {"cpu": q("1"), "memory": q("1Gi")}
    b = {"cpu": q("2"), "pods": q("3")}
    result = subtract_with_non_negative_result(a, b)
    assert is_negative(result) == []
    assert result["cpu"] == Quantity(0)
    assert result["pods"] == Quantity(0)
    assert result["memory"] == a["memory"]


def test_mask_keeps_only_named():
    resources = {"cpu": q("1"), "memory": q("1Gi"), "pods": q("2")}
    result = mask(resources, ["cpu", "pods", "gpu"])
    assert result == {"cpu": q("1"), "pods": q("2")}


def test_resource_names():
    assert sorted(resource_names({"cpu": q("1"), "memory": q("2")})) == ["cpu", "memory"]


def test_contains_and_prefix():
    assert contains(["cpu", "memory"], "cpu")
    assert not contains(["cpu"], "pods")
    assert contains_prefix(["requests."], "requests.cpu")
    assert not contains_prefix(["limits."], "requests.cpu")


def test_intersection_dedupes_and_sorts():
    assert intersection(["b", "a", "a", "c"], ["a", "b"]) == ["a", "b"]


def test_difference_dedupes_and_sorts():
    assert difference(["c", "a", "b", "a"], ["b"]) == ["a", "c"]


def test_is_zero():
    assert is_zero({})
    assert is_zero({"cpu": q("0"), "memory": q("0Gi")})
    assert not is_zero({"cpu": q("1m")})


def test_to_set():
    assert to_set(["cpu", "cpu", "pods"]) == {"cpu", "pods"}


def test_registry_add_get_remove():
    ev = FakeEvaluator("pods", ["pods"])
    registry = Registry()
    registry.add(ev)
    assert registry.get("pods") is ev
    assert registry.evaluators() == [ev]
    registry.remove(ev)
    assert registry.get("pods") is None
    assert registry.evaluators() == []


def test_calculate_usage_masks_to_hard_limits():
    pods = FakeEvaluator("pods", ["pods"], used={"pods": q("3"), "other": q("1")})
    registry = Registry([pods])
    usage = calculate_usage("ns", ["scope"], {"pods": q("10"), "cpu": q("4")}, registry)
    assert usage == {"pods": q("3")}
    assert pods.seen[0].namespace == "ns"
    assert pods.seen[0].resources == ["pods"]
    assert pods.seen[0].scopes == ["scope"]


def test_calculate_usage_skips_unmatched_evaluators():
    unrelated = FakeEvaluator("gpus", ["gpu"], used={"gpu": q("1")})
    usage = calculate_usage("ns", [], {"pods": q("10")}, Registry([unrelated]))
    assert usage == {}
    assert unrelated.seen == []


def test_calculate_usage_collects_errors():
    pods = FakeEvaluator("pods", ["pods"], used={"pods": q("3")})
    broken = FakeEvaluator("cpu", ["cpu"], error=RuntimeError("boom"))
    registry = Registry([pods, broken])
    with pytest.raises(QuotaCalculationError) as info:
        calculate_usage("ns", [], {"pods": q("10"), "cpu": q("4")}, registry)
    assert info.value.usage == {"pods": q("3")}
    assert [str(e) for e in info.value.errors] == ["boom"]