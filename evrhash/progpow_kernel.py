"""ProgPoW program generation: the mix RNG, random operations and kernel source."""

from __future__ import annotations

import copy
import enum

from .bitwise import (
    FNV_OFFSET_BASIS,
    MASK32,
    MASK64,
    clz32,
    fnv1a,
    mul_hi32,
    popcnt32,
    rotl32,
    rotr32,
)
from .kiss99 import Kiss99

PERIOD_LENGTH = 3
"""Number of blocks before the random program changes."""
LANES = 16
REGS = 32
DAG_LOADS = 4
CACHE_BYTES = 16 * 1024
DAG_COUNT = 32
CACHE_COUNT = 12
MATH_COUNT = 5
WORDS_PER_LANE = 256 // (4 * LANES)


class KernelType(enum.Enum):
    """Target language of a generated kernel."""

    CUDA = "cuda"
    OPENCL = "opencl"


class MixRngState:
    """KISS99 generator plus random permutations of mix destinations and sources."""

    def __init__(self, seed: int) -> None:
        seed &= MASK64
        seed_lo = seed & MASK32
        seed_hi = seed >> 32

        z = fnv1a(FNV_OFFSET_BASIS, seed_lo)
        w = fnv1a(z, seed_hi)
        jsr = fnv1a(w, seed_lo)
        jcong = fnv1a(jsr, seed_hi)
        self.rng = Kiss99(z, w, jsr, jcong)

        dst = list(range(REGS))
        src = list(range(REGS))
        for i in range(REGS, 1, -1):
            j = self.rng() % i
            dst[i - 1], dst[j] = dst[j], dst[i - 1]
            j = self.rng() % i
            src[i - 1], src[j] = src[j], src[i - 1]

        self._dst_seq = tuple(dst)
        self._src_seq = tuple(src)
        self._dst_counter = 0
        self._src_counter = 0

    def next_dst(self) -> int:
        value = self._dst_seq[self._dst_counter % REGS]
        self._dst_counter += 1
        return value

    def next_src(self) -> int:
        value = self._src_seq[self._src_counter % REGS]
        self._src_counter += 1
        return value

    def __copy__(self) -> "MixRngState":
        clone = MixRngState.__new__(MixRngState)
        clone.rng = copy.copy(self.rng)
        clone._dst_seq = self._dst_seq
        clone._src_seq = self._src_seq
        clone._dst_counter = self._dst_counter
        clone._src_counter = self._src_counter
        return clone


def random_merge(a: int, b: int, sel: int) -> int:
    """Merge ``b`` into ``a`` with an entropy-preserving operation chosen by ``sel``."""
    a &= MASK32
    b &= MASK32
    x = (sel >> 16) % 31 + 1
    op = sel % 4
    if op == 0:
        return (a * 33 + b) & MASK32
    if op == 1:
        return ((a ^ b) * 33) & MASK32
    if op == 2:
        return rotl32(a, x) ^ b
    return rotr32(a, x) ^ b


def random_math(a: int, b: int, sel: int) -> int:
    """Apply one of eleven 32-bit operations to ``a`` and ``b``, chosen by ``sel``."""
    a &= MASK32
    b &= MASK32
    op = sel % 11
    if op == 0:
        return (a + b) & MASK32
    if op == 1:
        return (a * b) & MASK32
    if op == 2:
        return mul_hi32(a, b)
    if op == 3:
        return min(a, b)
    if op == 4:
        return rotl32(a, b)
    if op == 5:
        return rotr32(a, b)
    if op == 6:
        return a & b
    if op == 7:
        return a | b
    if op == 8:
        return a ^ b
    if op == 9:
        return clz32(a) + clz32(b)
    return popcnt32(a) + popcnt32(b)


def random_merge_src(a: str, b: str, r: int) -> str:
    """Kernel source line performing :func:`random_merge` of ``b`` into ``a``."""
    x = (r >> 16) % 31 + 1
    op = r % 4
    if op == 0:
        return f"{a} = ({a} * 33) + {b};\n"
    if op == 1:
        return f"{a} = ({a} ^ {b}) * 33;\n"
    if op == 2:
        return f"{a} = ROTL32({a}, {x}) ^ {b};\n"
    return f"{a} = ROTR32({a}, {x}) ^ {b};\n"


_MATH_TEMPLATES = (
    "{d} = {a} + {b};\n",
    "{d} = {a} * {b};\n",
    "{d} = mul_hi({a}, {b});\n",
    "{d} = min({a}, {b});\n",
    "{d} = ROTL32({a}, {b} % 32);\n",
    "{d} = ROTR32({a}, {b} % 32);\n",
    "{d} = {a} & {b};\n",
    "{d} = {a} | {b};\n",
    "{d} = {a} ^ {b};\n",
    "{d} = clz({a}) + clz({b});\n",
    "{d} = popcount({a}) + popcount({b});\n",
)


def random_math_src(d: str, a: str, b: str, r: int) -> str:
    """Kernel source line performing :func:`random_math` of ``a`` and ``b`` into ``d``."""
    return _MATH_TEMPLATES[r % 11].format(d=d, a=a, b=b)


def _cuda_prelude() -> list:
    return [
        "typedef unsigned int       uint32_t;\n",
        "typedef unsigned long long uint64_t;\n",
        "#if __CUDA_ARCH__ < 350\n",
        "#define ROTL32(x,n) (((x) << (n % 32)) | ((x) >> (32 - (n % 32))))\n",
        "#define ROTR32(x,n) (((x) >> (n % 32)) | ((x) << (32 - (n % 32))))\n",
        "#else\n",
        "#define ROTL32(x,n) __funnelshift_l((x), (x), (n))\n",
        "#define ROTR32(x,n) __funnelshift_r((x), (x), (n))\n",
        "#endif\n",
        "#define min(a,b) ((a<b) ? a : b)\n",
        "#define mul_hi(a, b) __umulhi(a, b)\n",
        "#define clz(a) __clz(a)\n",
        "#define popcount(a) __popc(a)\n\n",
        "#define DEV_INLINE __device__ __forceinline__\n",
        "#if (__CUDACC_VER_MAJOR__ > 8)\n",
        "#define SHFL(x, y, z) __shfl_sync(0xFFFFFFFF, (x), (y), (z))\n",
        "#else\n",
        "#define SHFL(x, y, z) __shfl((x), (y), (z))\n",
        "#endif\n\n",
        "\n",
    ]


def _opencl_prelude() -> list:
    return [
        "#ifndef GROUP_SIZE\n",
        "#define GROUP_SIZE 128\n",
        "#endif\n",
        f"#define GROUP_SHARE (GROUP_SIZE / {LANES})\n",
        "\n",
        "typedef unsigned int       uint32_t;\n",
        "typedef unsigned long      uint64_t;\n",
        "#define ROTL32(x, n) rotate((x), (uint32_t)(n))\n",
        "#define ROTR32(x, n) rotate((x), (uint32_t)(32-n))\n",
        "\n",
    ]


def get_kern(prog_seed: int, kern) -> str:
    """Source of the ProgPoW inner loop for ``prog_seed`` in the given kernel language."""
    kern = KernelType(kern)
    cuda = kern is KernelType.CUDA
    state = MixRngState(prog_seed)
    out = _cuda_prelude() if cuda else _opencl_prelude()

    out += [
        f"#define PROGPOW_LANES           {LANES}\n",
        f"#define PROGPOW_REGS            {REGS}\n",
        f"#define PROGPOW_DAG_LOADS       {DAG_LOADS}\n",
        f"#define PROGPOW_CACHE_WORDS     {CACHE_BYTES // 4}\n",
        f"#define PROGPOW_CNT_DAG         {DAG_COUNT}\n",
        f"#define PROGPOW_CNT_MATH        {MATH_COUNT}\n",
        "\n",
    ]

    if cuda:
        out += [
            "typedef struct __align__(16) {uint32_t s[PROGPOW_DAG_LOADS];} dag_t;\n",
            "\n",
            f"// Inner loop for prog_seed {prog_seed}\n",
            "__device__ __forceinline__ void progPowLoop(const uint32_t loop,\n",
            "        uint32_t mix[PROGPOW_REGS],\n",
            "        const dag_t *g_dag,\n",
            "        const uint32_t c_dag[PROGPOW_CACHE_WORDS],\n",
            "        const bool hack_false)\n",
        ]
    else:
        out += [
            "typedef struct __attribute__ ((aligned (16))) {uint32_t s[PROGPOW_DAG_LOADS];} "
            "dag_t;\n",
            "\n",
            f"// Inner loop for prog_seed {prog_seed}\n",
            "inline void progPowLoop(const uint32_t loop,\n",
            "        volatile uint32_t mix_arg[PROGPOW_REGS],\n",
            "        __global const dag_t *g_dag,\n",
            "        __local const uint32_t c_dag[PROGPOW_CACHE_WORDS],\n",
            "        __local uint64_t share[GROUP_SHARE],\n",
            "        const bool hack_false)\n",
        ]
    out += ["{\n", "dag_t data_dag;\n", "uint32_t offset, data;\n"]

    if not cuda:
        # Copy through a private array to sidestep an OpenCL compiler bug.
        out += [
            "uint32_t mix[PROGPOW_REGS];\n",
            "for(int i=0; i<PROGPOW_REGS; i++)\n",
            "    mix[i] = mix_arg[i];\n",
        ]

    if cuda:
        out.append("const uint32_t lane_id = threadIdx.x & (PROGPOW_LANES-1);\n")
    else:
        out += [
            "const uint32_t lane_id = get_local_id(0) & (PROGPOW_LANES-1);\n",
            "const uint32_t group_id = get_local_id(0) / PROGPOW_LANES;\n",
        ]

    out.append("// global load\n")
    if cuda:
        out.append("offset = SHFL(mix[0], loop%PROGPOW_LANES, PROGPOW_LANES);\n")
    else:
        out += [
            "if(lane_id == (loop % PROGPOW_LANES))\n",
            "    share[group_id] = mix[0];\n",
            "barrier(CLK_LOCAL_MEM_FENCE);\n",
            "offset = share[group_id];\n",
        ]
    fence = (
        "if (hack_false) __threadfence_block();\n"
        if cuda
        else "if (hack_false) barrier(CLK_LOCAL_MEM_FENCE);\n"
    )
    out += [
        "offset %= PROGPOW_DAG_ELEMENTS;\n",
        "offset = offset * PROGPOW_LANES + (lane_id ^ loop) % PROGPOW_LANES;\n",
        "data_dag = g_dag[offset];\n",
        "// hack to prevent compiler from reordering LD and usage\n",
        fence,
    ]

    for i in range(max(CACHE_COUNT, MATH_COUNT)):
        if i < CACHE_COUNT:
            src = f"mix[{state.next_src()}]"
            dest = f"mix[{state.next_dst()}]"
            sel = state.rng()
            out += [
                f"// cache load {i}\n",
                f"offset = {src} % PROGPOW_CACHE_WORDS;\n",
                "data = c_dag[offset];\n",
                random_merge_src(dest, "data", sel),
            ]
        if i < MATH_COUNT:
            src_rnd = state.rng() % (REGS * (REGS - 1))
            src1 = src_rnd % REGS
            src2 = src_rnd // REGS
            if src2 >= src1:
                src2 += 1
            sel1 = state.rng()
            sel2 = state.rng()
            dest = f"mix[{state.next_dst()}]"
            out += [
                f"// random math {i}\n",
                random_math_src("data", f"mix[{src1}]", f"mix[{src2}]", sel1),
                random_merge_src(dest, "data", sel2),
            ]

    out += [
        "// consume global load data\n",
        "// hack to prevent compiler from reordering LD and usage\n",
        fence,
        random_merge_src("mix[0]", "data_dag.s[0]", state.rng()),
    ]
    for i in range(1, DAG_LOADS):
        dst = f"mix[{state.next_dst()}]"
        out.append(random_merge_src(dst, f"data_dag.s[{i}]", state.rng()))

    if not cuda:
        out += [
            "for(int i=0; i<PROGPOW_REGS; i++)\n",
            "    mix_arg[i] = mix[i];\n",
        ]
    out += ["}\n", "\n"]
    return "".join(out)