import struct
import threading
from collections import Counter

import numpy as np
import pytest

from isaac64.config import RngConfig
from isaac64.errors import CharsetError
from isaac64.rng import DIGITS, LOWER, UPPER, Isaac64, build_charset


def mixed_draws(rng, n):
    out = []
    for i in range(n):
        step = i % 6
        if step == 0:
            out.append(rng.rand8())
        elif step == 1:
            out.append(rng.rand16())
        elif step == 2:
            out.append(rng.rand32())
        elif step == 3:
            out.append(rng.rand64())
        elif step == 4:
            out.append(rng.ranged_rand16s(-300, 300))
        else:
            out.append(rng.rand_double())
    return out


def test_clone_produces_identical_sequence():
    original = Isaac64(123456789)
    clone = original.clone()
    assert [original.rand64() for _ in range(1000)] == [clone.rand64() for _ in range(1000)]


def test_clone_carries_partially_drained_banks():
    original = Isaac64(0xC0FFEE)
    original.rand8()
    original.rand8()
    original.rand16()
    original.rand32()
    clone = original.clone()
    assert clone.words_consumed == original.words_consumed
    assert mixed_draws(original, 3000) == mixed_draws(clone, 3000)


def test_clone_is_independent():
    original = Isaac64(11)
    clone = original.clone()
    expected = Isaac64(11).rand64()
    for _ in range(500):
        clone.rand8()
    assert original.rand64() == expected
    assert original.words_consumed == 1


def test_for_testing_matches_testing_flag():
    assert Isaac64.for_testing().rand64() == Isaac64(testing=True).rand64()


def test_concurrent_narrow_draws_account_exactly():
    rng = Isaac64(2718)
    reference = Isaac64(2718)
    per_thread, threads = 2000, 4
    results = [[] for _ in range(threads)]

    def worker(out):
        for _ in range(per_thread):
            out.append(rng.rand8())

    pool = [threading.Thread(target=worker, args=(results[i],)) for i in range(threads)]
    for t in pool:
        t.start()
    for t in pool:
        t.join()

    total = per_thread * threads
    assert rng.words_consumed == total // 8
    seen = Counter(v for out in results for v in out)
    assert seen == Counter(reference.rand8() for _ in range(total))


def test_concurrent_clone_and_draw():
    rng = Isaac64(31415)
    clones = []

    def drawer():
        for _ in range(3000):
            rng.rand16()

    def cloner():
        for _ in range(50):
            clones.append(rng.clone())

    t1, t2 = threading.Thread(target=drawer), threading.Thread(target=cloner)
    t1.start()
    t2.start()
    t1.join()
    t2.join()
    for c in clones:
        twin = c.clone()
        assert [c.rand16() for _ in range(20)] == [twin.rand16() for _ in range(20)]


# ---------- alfanuméricos ----------

def test_build_charset_order():
    assert build_charset() == list(DIGITS + UPPER + LOWER)
    assert build_charset(False, False, True, "!?") == list(DIGITS) + ["!", "?"]


def test_empty_charset_raises_without_drawing():
    rng = Isaac64(123)
    with pytest.raises(CharsetError):
        rng.rand_alphanum(False, False, False)
    with pytest.raises(CharsetError):
        rng.rand_alphanum(False, False, False, [])
    with pytest.raises(CharsetError):
        rng.rand_alphanum(extra_symbols=[chr(0x100 + i) for i in range(300)])
    assert rng.words_consumed == 0


@pytest.mark.parametrize("kwargs,alphabet", [
    (dict(upper=False, lower=False), DIGITS),
    (dict(numeric=False, lower=False), UPPER),
    (dict(numeric=False, upper=False), LOWER),
    (dict(upper=False, lower=False, numeric=False, extra_symbols="#$%"), "#$%"),
    (dict(), DIGITS + UPPER + LOWER),
])
def test_alphanum_classes(kwargs, alphabet):
    rng = Isaac64(55)
    chars = {rng.rand_alphanum(**kwargs) for _ in range(3000)}
    assert chars == set(alphabet)


def test_alphanum_rejection_sampling():
    a = Isaac64(8080)
    b = a.clone()
    charset = build_charset()
    limit = 256 - 256 % len(charset)  # 62 -> 248
    expected = []
    while len(expected) < 500:
        r = b.rand8()
        if r < limit:
            expected.append(charset[r % len(charset)])
    assert [a.rand_alphanum() for _ in range(500)] == expected


# ---------- lotes ----------

def test_random_bytes_layout():
    a = Isaac64(64)
    b = a.clone()
    data = a.random_bytes(19)
    assert len(data) == 19
    w1, w2 = b.rand64(), b.rand64()
    tail = bytes(b.rand8() for _ in range(3))
    assert data == struct.pack("<QQ", w1, w2) + tail
    assert a.random_bytes(0) == b""


def test_batch_arrays_follow_scalar_stream():
    a = Isaac64(65)
    b = a.clone()
    arr64 = a.rand64_array(300)
    assert arr64.dtype == np.uint64
    assert arr64.tolist() == [b.rand64() for _ in range(300)]
    arr32 = a.rand32_array(9)
    assert arr32.dtype == np.uint32
    assert arr32.tolist() == [b.rand32() for _ in range(9)]
    assert a.rand32_array(0).size == 0 and a.rand64_array(-1).size == 0


# ---------- configuración ----------

def test_config_from_env(monkeypatch):
    monkeypatch.setenv("ISAAC64_SEED_BYTES", "64")
    monkeypatch.setenv("ISAAC64_MIN_ZERO", "0.01")
    cfg = RngConfig.from_env()
    assert cfg.seed_bytes == 64 and cfg.min_zero == 0.01
    rng = Isaac64(config=cfg)
    assert rng.config is cfg


def test_config_defaults(monkeypatch):
    monkeypatch.delenv("ISAAC64_SEED_BYTES", raising=False)
    monkeypatch.delenv("ISAAC64_MIN_ZERO", raising=False)
    assert RngConfig.from_env() == RngConfig()


@pytest.mark.parametrize("kwargs", [dict(seed_bytes=0), dict(seed_bytes=4096), dict(min_zero=0.0),
                                    dict(min_zero=float("inf"))])
def test_config_validation(kwargs):
    with pytest.raises(ValueError):
        RngConfig(**kwargs)


def test_counters_wait_for_the_lock():
    rng = Isaac64(4096)
    seen = []
    reader = threading.Thread(target=lambda: seen.append((rng.words_consumed, rng.shuffles)))
    with rng._lock:
        reader.start()
        reader.join(timeout=0.2)
        assert reader.is_alive()
        rng.rand64()
    reader.join()
    assert seen == [(1, 1)]
