from __future__ import annotations

import random

import pytest

from playmusic.auth.signing_key import derive_signing_key
from playmusic.auth.stream_signer import (
    SALT_ALPHABET,
    StreamParams,
    compute_signature,
    is_all_access_id,
    make_salt,
    sign_stream_request,
)


@pytest.mark.parametrize(
    ("key", "track_id", "salt", "expected"),
    [
        (None, "Tabc123", "abcdefghij012", "U-RlCBIlLLmHHeydiaAc4UJKi9g"),
        (None, "abc-123", "abcdefghij012", "b3rQknIGcS5ElS4fDh1gAZpIiA4"),
        (None, "Tabc123", "zyxwvutsrq987", "ItSfwvuzqnIl_DsmUJcRpQytfw4"),
        (b"secret", "Tabc123", "abcdefghij012", "gkmGfC_fYMey0V-5YbLW5e57jCA"),
    ],
)
def test_signature_matches_known_vectors(key, track_id, salt, expected):
    signing_key = key if key is not None else derive_signing_key()

    assert compute_signature(signing_key, track_id, salt) == expected


def test_signature_is_unpadded_urlsafe():
    signature = compute_signature(derive_signing_key(), "Tabc123", "zyxwvutsrq987")

    assert "=" not in signature
    assert "+" not in signature and "/" not in signature
    assert len(signature) == 27


def test_salt_shape():
    salt = make_salt()

    assert len(salt) == 13
    assert set(salt) <= set(SALT_ALPHABET)


def test_salt_uses_supplied_generator():
    assert make_salt(rng=random.Random(7)) == make_salt(rng=random.Random(7))


def test_random_salts_do_not_collide():
    salts = {make_salt() for _ in range(1000)}

    assert len(salts) == 1000


def test_signatures_differ_across_salts():
    key = derive_signing_key()
    signatures = {sign_stream_request("Tabc123", key).signature for _ in range(1000)}

    assert len(signatures) == 1000


@pytest.mark.parametrize(
    ("track_id", "present", "absent"),
    [
        ("Tabc123", "mjck", "songid"),
        ("abc-123", "songid", "mjck"),
        ("T", "mjck", "songid"),
        ("tabc123", "songid", "mjck"),
    ],
)
def test_track_id_routing(track_id, present, absent):
    signed = sign_stream_request(track_id, derive_signing_key())

    assert signed.query_params[present] == track_id
    assert absent not in signed.query_params
    assert signed.id_param == present


def test_query_params_carry_fixed_fields_salt_and_signature():
    key = derive_signing_key()
    signed = sign_stream_request("Tabc123", key, salt="abcdefghij012")

    assert signed.query_params == {
        "u": "0",
        "net": "wifi",
        "pt": "e",
        "targetkbps": "8310",
        "slt": "abcdefghij012",
        "sig": "U-RlCBIlLLmHHeydiaAc4UJKi9g",
        "mjck": "Tabc123",
    }


def test_stream_params_override():
    signed = sign_stream_request(
        "abc-123",
        b"k",
        params=StreamParams(account_index=1, network_type="mob", target_kbps=320),
    )

    assert signed.query_params["u"] == "1"
    assert signed.query_params["net"] == "mob"
    assert signed.query_params["targetkbps"] == "320"


def test_each_request_draws_a_new_salt():
    key = derive_signing_key()

    assert sign_stream_request("Tabc123", key).salt != sign_stream_request("Tabc123", key).salt


def test_empty_track_id_rejected():
    with pytest.raises(ValueError):
        sign_stream_request("", derive_signing_key())


def test_all_access_predicate():
    assert is_all_access_id("Tx")
    assert not is_all_access_id("5d1c2b3a-0000")
