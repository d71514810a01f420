import copy

import pytest

from evrhash.progpow_kernel import (
    REGS,
    KernelType,
    MixRngState,
    get_kern,
    random_math,
    random_math_src,
    random_merge,
    random_merge_src,
)


def test_dst_sequence_is_permutation_and_cycles():
    state = MixRngState(12345)
    first = [state.next_dst() for _ in range(REGS)]
    assert sorted(first) == list(range(REGS))
    assert state.next_dst() == first[0]


def test_src_sequence_is_permutation():
    state = MixRngState(0)
    values = [state.next_src() for _ in range(REGS)]
    assert sorted(values) == list(range(REGS))


def test_same_seed_same_state():
    a = MixRngState(987654321)
    b = MixRngState(987654321)
    assert [a.next_dst() for _ in range(40)] == [b.next_dst() for _ in range(40)]
    assert [a.rng() for _ in range(10)] == [b.rng() for _ in range(10)]


def test_copy_is_independent():
    state = MixRngState(77)
    clone = copy.copy(state)
    expected = [state.rng() for _ in range(5)]
    assert [clone.rng() for _ in range(5)] == expected
    state.next_dst()
    fresh = MixRngState(77)
    assert copy.copy(fresh).next_dst() == fresh.next_dst()


def test_random_merge_basic_cases():
    assert random_merge(1, 2, 0) == 35
    assert random_merge(1, 2, 1) == 99
    assert random_merge(0xFFFFFFFF, 0, 0) < 2**32


@pytest.mark.parametrize("k", [0, 5, 30, 100])
def test_random_merge_rotations_invert(k):
    a = 0xDEADBEEF
    rotated = random_merge(a, 0, 2 | (k << 16))
    assert random_merge(rotated, 0, 3 | (k << 16)) == a


@pytest.mark.parametrize(
    "a,b", [(0x12345678, 0x9ABCDEF0), (7, 3), (0xFFFFFFFF, 1)]
)
def test_random_math_bit_ops(a, b):
    assert random_math(a, b, 3) == min(a, b)
    assert random_math(a, b, 6) == a & b
    assert random_math(a, b, 7) == a | b
    assert random_math(a, b, 8) == a ^ b
    assert random_math(a, b, 11) == random_math(a, b, 0)
    assert random_math(a, b, 0) == random_math(b, a, 0)


def test_random_math_counts():
    assert random_math(0, 0, 9) == 64
    assert random_math(0xFFFFFFFF, 0xFFFFFFFF, 10) == 64


def test_random_merge_src_lines():
    assert random_merge_src("mix[0]", "data", 0) == "mix[0] = (mix[0] * 33) + data;\n"
    assert random_merge_src("mix[0]", "data", 1) == "mix[0] = (mix[0] ^ data) * 33;\n"
    assert random_merge_src("mix[0]", "data", 2) == "mix[0] = ROTL32(mix[0], 1) ^ data;\n"


def test_random_math_src_lines():
    assert random_math_src("d", "a", "b", 4) == "d = ROTL32(a, b % 32);\n"
    assert random_math_src("d", "a", "b", 2) == "d = mul_hi(a, b);\n"
    assert random_math_src("d", "a", "b", 21) == "d = popcount(a) + popcount(b);\n"


def test_cuda_kernel_contents():
    source = get_kern(42, KernelType.CUDA)
    assert "#define PROGPOW_LANES           16\n" in source
    assert "#define PROGPOW_CACHE_WORDS     4096\n" in source
    assert "// Inner loop for prog_seed 42\n" in source
    assert "__shfl_sync" in source
    assert source.count("// cache load ") == 12
    assert source.count("// random math ") == 5
    assert source.endswith("}\n\n")


def test_opencl_kernel_contents():
    source = get_kern(42, KernelType.OPENCL)
    assert "#define GROUP_SHARE (GROUP_SIZE / 16)\n" in source
    assert "mix_arg[i] = mix[i];" in source
    assert "__shfl_sync" not in source
    assert source.count("data_dag.s[") == 4


def test_kernel_is_deterministic_and_seed_dependent():
    assert get_kern(7, KernelType.CUDA) == get_kern(7, KernelType.CUDA)
    assert get_kern(7, KernelType.CUDA) != get_kern(8, KernelType.CUDA)


def test_kernel_type_from_value():
    assert get_kern(1, "cuda") == get_kern(1, KernelType.CUDA)
    with pytest.raises(ValueError):
        get_kern(1, "metal")