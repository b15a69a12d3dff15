import pytest

from volume_forge.budgets.size_allocator import (
    AllocationDecision,
    AllocationPolicy,
    SizeBudgetAllocator,
)
from volume_forge.errors import EmptyInputError
from volume_forge.models.specs import BYTES_PER_MB, FileSpec, gb_to_bytes


def test_mixed_specs_split_remaining_budget():
    allocator = SizeBudgetAllocator()
    specs = [FileSpec(path="a", size_mb=3000), FileSpec(path="b"), FileSpec(path="c")]

    result = allocator.allocate(specs, gb_to_bytes(10))

    sizes = {f.path: f.size_bytes for f in result.files}
    assert sizes["a"] == 3_145_728_000
    assert result.remaining == 7_591_690_240
    assert sizes["b"] == 3_795_845_120
    assert sizes["c"] == 3_795_845_120
    assert result.decision == AllocationDecision.SPLIT
    assert result.warnings == []


def test_unspecified_only_never_exceeds_budget():
    allocator = SizeBudgetAllocator()
    for count in (1, 2, 3, 7, 10):
        for budget in (0, 1, 9, 100, 1_000_003):
            specs = [FileSpec(path=f"f{i}") for i in range(count)]
            if budget < count:
                continue
            result = allocator.allocate(specs, budget)
            assert result.total_bytes <= budget
            assert budget - result.total_bytes <= count - 1


def test_explicit_sizes_are_exact_megabytes():
    allocator = SizeBudgetAllocator()
    specs = [FileSpec(path="x", size_mb=1), FileSpec(path="y", size_mb=2.5), FileSpec(path="z", size_mb=250)]

    result = allocator.allocate(specs, gb_to_bytes(100))

    assert [f.size_bytes for f in result.files] == [
        BYTES_PER_MB,
        int(2.5 * BYTES_PER_MB),
        250 * BYTES_PER_MB,
    ]
    assert all(f.explicit for f in result.files)
    assert result.decision is None


def test_exhausted_budget_floors_unspecified_to_one_byte():
    allocator = SizeBudgetAllocator()
    specs = [FileSpec(path="big", size_mb=2048), FileSpec(path="d")]

    result = allocator.allocate(specs, gb_to_bytes(1))

    assert result.files[1].path == "d"
    assert result.files[1].size_bytes == 1
    assert result.decision == AllocationDecision.FLOOR
    assert len(result.warnings) == 1


def test_budget_exactly_used_by_explicit_sizes_also_floors():
    allocator = SizeBudgetAllocator()
    specs = [FileSpec(path="a", size_mb=1024), FileSpec(path="b"), FileSpec(path="c")]

    result = allocator.allocate(specs, gb_to_bytes(1))

    assert [f.size_bytes for f in result.files[1:]] == [1, 1]


def test_output_preserves_input_order():
    allocator = SizeBudgetAllocator()
    specs = [FileSpec(path="u1"), FileSpec(path="e1", size_mb=1), FileSpec(path="u2"), FileSpec(path="e2", size_mb=2)]

    result = allocator.allocate(specs, 10 * BYTES_PER_MB)

    assert [f.path for f in result.files] == ["u1", "e1", "u2", "e2"]
    assert [f.explicit for f in result.files] == [False, True, False, True]
    assert result.files[0].size_bytes == result.files[2].size_bytes == (7 * BYTES_PER_MB) // 2


def test_non_positive_size_is_treated_as_unspecified():
    allocator = SizeBudgetAllocator()
    specs = [FileSpec(path="neg", size_mb=-5), FileSpec(path="zero", size_mb=0)]

    result = allocator.allocate(specs, 1000)

    assert [f.size_bytes for f in result.files] == [500, 500]
    assert not any(f.explicit for f in result.files)
    assert len(result.warnings) == 2


def test_empty_input_raises():
    with pytest.raises(EmptyInputError):
        SizeBudgetAllocator().allocate([], 1000)


def test_negative_budget_is_rejected():
    with pytest.raises(ValueError):
        SizeBudgetAllocator().allocate([FileSpec(path="a")], -1)


def test_custom_floor_policy():
    allocator = SizeBudgetAllocator(AllocationPolicy(floor_bytes=4096))

    result = allocator.allocate([FileSpec(path="a", size_mb=1), FileSpec(path="b")], 10)

    assert result.files[1].size_bytes == 4096
