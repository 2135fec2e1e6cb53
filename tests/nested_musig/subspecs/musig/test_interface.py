"""Tests for the nested MuSig2 primitives."""

import hashlib

import pytest
from pydantic import ValidationError

from nested_musig.subspecs.musig import (
    DEFAULT_PARAMS,
    TEST_SCHEME,
    NestedMusigScheme,
    Params,
    Rand,
    Round1Out,
)
from nested_musig.subspecs.musig.hashes import key_agg_coeff, tagged_hash
from nested_musig.subspecs.secp256k1 import G, Point, Scalar

MESSAGE = b"test tx message"


@pytest.fixture
def scheme() -> NestedMusigScheme:
    return NestedMusigScheme(params=DEFAULT_PARAMS, rand=Rand(seed=1234))


def test_tagged_hash_matches_bip340_construction() -> None:
    tag = hashlib.sha256(b"BIP0340/challenge").digest()
    expected = hashlib.sha256(tag + tag + b"msg").digest()

    assert tagged_hash("BIP0340/challenge", b"msg") == expected
    assert tagged_hash("a", b"x") != tagged_hash("b", b"x")


def test_key_gen_public_key_matches_secret(scheme: NestedMusigScheme) -> None:
    keypair = scheme.key_gen()
    assert not keypair.secret_key.is_zero()
    assert keypair.public_key == G * keypair.secret_key


def test_seeded_rand_is_reproducible() -> None:
    first = Rand(seed=42).scalars(4)
    second = Rand(seed=42).scalars(4)
    assert first == second
    assert Rand(seed=43).scalars(4) != first


def test_unseeded_rand_draws_non_zero_scalars() -> None:
    rand = Rand()
    assert all(not s.is_zero() for s in rand.scalars(8))


def test_params_reject_fewer_than_two_nonces() -> None:
    with pytest.raises(ValidationError):
        Params(NONCE_COUNT=1)


def test_params_reject_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        Params(NONCE=2)  # type: ignore[call-arg]


def test_domains_separate_hash_contexts() -> None:
    assert Params().tag("challenge") != Params(DOMAIN="Other").tag("challenge")


# -------------------------
# Key aggregation
# -------------------------


def test_key_agg_is_order_independent(scheme: NestedMusigScheme) -> None:
    a, b, c = (scheme.key_gen().public_key for _ in range(3))
    assert scheme.key_agg([a, b, c]) == scheme.key_agg([c, a, b]) == scheme.key_agg([b, c, a])


def test_key_agg_single_key_is_scaled(scheme: NestedMusigScheme) -> None:
    key = scheme.key_gen().public_key
    coeff = key_agg_coeff(scheme.params, [key], key)
    assert scheme.key_agg([key]) == key * coeff


def test_key_agg_rejects_empty_set(scheme: NestedMusigScheme) -> None:
    with pytest.raises(ValueError, match="empty"):
        scheme.key_agg([])


def test_key_agg_coeff_rejects_foreign_key(scheme: NestedMusigScheme) -> None:
    a, b, c = (scheme.key_gen().public_key for _ in range(3))
    with pytest.raises(ValueError, match="not part"):
        key_agg_coeff(scheme.params, [a, b], c)


def test_key_agg_depends_on_domain(scheme: NestedMusigScheme) -> None:
    a, b = (scheme.key_gen().public_key for _ in range(2))
    other = scheme.model_copy(update={"params": Params(DOMAIN="Other")})
    assert scheme.key_agg([a, b]) != other.key_agg([a, b])


# -------------------------
# Round 1
# -------------------------


def test_sign_round1_commits_to_nonces(scheme: NestedMusigScheme) -> None:
    out, state = scheme.sign_round1(2)
    assert len(out) == len(state) == 2
    assert out.commitments == tuple(G * r for r in state.nonces)


def test_sign_round1_rejects_wrong_nonce_count(scheme: NestedMusigScheme) -> None:
    with pytest.raises(ValueError, match="Expected 2 nonces"):
        scheme.sign_round1(3)


def test_sign_agg_sums_component_wise(scheme: NestedMusigScheme) -> None:
    first, _ = scheme.sign_round1(2)
    second, _ = scheme.sign_round1(2)
    aggregate = scheme.sign_agg([first, second])
    assert aggregate.commitments == tuple(
        x + y for x, y in zip(first.commitments, second.commitments, strict=True)
    )


def test_sign_agg_rejects_empty_and_mismatched(scheme: NestedMusigScheme) -> None:
    with pytest.raises(ValueError):
        scheme.sign_agg([])

    narrow = Round1Out(commitments=(G, G))
    wide = Round1Out(commitments=(G, G, G))
    with pytest.raises(ValueError, match="different nonce counts"):
        scheme.sign_agg([narrow, wide])


def test_sign_agg_ext_keeps_width_and_binds_key(scheme: NestedMusigScheme) -> None:
    out, _ = scheme.sign_round1(2)
    key_a = scheme.key_gen().public_key
    key_b = scheme.key_gen().public_key

    extended = scheme.sign_agg_ext(out, key_a)
    assert len(extended) == 2
    assert extended != out
    assert scheme.sign_agg_ext(out, key_a) == extended
    assert scheme.sign_agg_ext(out, key_b) != extended


def test_sign_agg_ext_rejects_wrong_width(scheme: NestedMusigScheme) -> None:
    with pytest.raises(ValueError, match="commitments"):
        scheme.sign_agg_ext(Round1Out(commitments=(G, G, G)), G)


# -------------------------
# Round 2 and verification
# -------------------------


def test_single_signer_is_plain_schnorr(scheme: NestedMusigScheme) -> None:
    keypair = scheme.key_gen()
    _, state = scheme.sign_round1(2)

    signature = scheme.sign_prime(state, (), keypair.secret_key, MESSAGE, ())

    assert scheme.verify(keypair.public_key, MESSAGE, signature)
    assert not scheme.verify(keypair.public_key, b"other message", signature)


def test_two_signers_under_one_node(scheme: NestedMusigScheme) -> None:
    alice, bob = scheme.key_gen(), scheme.key_gen()
    out_a, state_a = scheme.sign_round1(2)
    out_b, state_b = scheme.sign_round1(2)
    aggregate = scheme.sign_agg([out_a, out_b])
    root_key = scheme.key_agg([alice.public_key, bob.public_key])

    part_a = scheme.sign_prime(
        state_a, (aggregate,), alice.secret_key, MESSAGE, ((bob.public_key,),)
    )
    part_b = scheme.sign_prime(
        state_b, (aggregate,), bob.secret_key, MESSAGE, ((alice.public_key,),)
    )

    # Both leaves derive the same final nonce independently.
    assert part_a[0] == part_b[0]

    signature = scheme.sign_agg_prime([part_a, part_b])
    assert scheme.verify(root_key, MESSAGE, signature)
    assert not scheme.verify(alice.public_key, MESSAGE, signature)


def test_sign_prime_rejects_context_path_mismatch(scheme: NestedMusigScheme) -> None:
    keypair = scheme.key_gen()
    out, state = scheme.sign_round1(2)
    with pytest.raises(ValueError, match="Outer context"):
        scheme.sign_prime(state, (out,), keypair.secret_key, MESSAGE, ())


def test_sign_prime_rejects_zero_secret_key(scheme: NestedMusigScheme) -> None:
    _, state = scheme.sign_round1(2)
    with pytest.raises(ValueError, match="non-zero"):
        scheme.sign_prime(state, (), Scalar.zero(), MESSAGE, ())


def test_sign_prime_rejects_state_of_other_width(scheme: NestedMusigScheme) -> None:
    wide = scheme.model_copy(update={"params": Params(NONCE_COUNT=3)})
    _, state = wide.sign_round1(3)
    with pytest.raises(ValueError, match="Expected 2 nonces"):
        scheme.sign_prime(state, (), scheme.key_gen().secret_key, MESSAGE, ())


def test_sign_agg_prime_sums_responses(scheme: NestedMusigScheme) -> None:
    nonce = G * Scalar(value=5)
    parts = [(nonce, Scalar(value=3)), (nonce, Scalar(value=4))]
    assert scheme.sign_agg_prime(parts) == (nonce, Scalar(value=7))

    with pytest.raises(ValueError):
        scheme.sign_agg_prime([])


def test_sign_agg_prime_keeps_first_nonce_without_comparing() -> None:
    parts = [(G, Scalar.one()), (G + G, Scalar.one())]
    assert TEST_SCHEME.sign_agg_prime(parts) == (G, Scalar(value=2))


def test_wrong_key_share_aggregates_then_fails_verification(
    scheme: NestedMusigScheme,
) -> None:
    alice, bob, mallory = scheme.key_gen(), scheme.key_gen(), scheme.key_gen()
    out_a, state_a = scheme.sign_round1(2)
    out_b, state_b = scheme.sign_round1(2)
    aggregate = scheme.sign_agg([out_a, out_b])
    root_key = scheme.key_agg([alice.public_key, bob.public_key])

    part_a = scheme.sign_prime(
        state_a, (aggregate,), alice.secret_key, MESSAGE, ((bob.public_key,),)
    )
    # Bob's slot is signed with an unrelated key.
    part_b = scheme.sign_prime(
        state_b, (aggregate,), mallory.secret_key, MESSAGE, ((alice.public_key,),)
    )
    assert part_a[0] != part_b[0]

    signature = scheme.sign_agg_prime([part_a, part_b])

    assert signature[0] == part_a[0]
    assert not scheme.verify(root_key, MESSAGE, signature)


def test_verify_rejects_infinity() -> None:
    signature = (Point.infinity(), Scalar.one())
    assert not TEST_SCHEME.verify(G, MESSAGE, signature)
    assert not TEST_SCHEME.verify(Point.infinity(), MESSAGE, (G, Scalar.one()))


def test_scheme_rejects_param_subclass() -> None:
    class WideParams(Params):
        pass

    with pytest.raises((TypeError, ValidationError)):
        NestedMusigScheme(params=WideParams(), rand=Rand(seed=0))
