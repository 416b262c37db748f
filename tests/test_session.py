from datetime import datetime, timedelta, timezone

import jwt

from bistro.services.session import ANONYMOUS, SessionCodec

SECRET = "unit-test-secret-abcdef"


def make_codec(max_age_seconds=3600):
    return SessionCodec(secret=SECRET, max_age_seconds=max_age_seconds)


def test_round_trip_carries_user_id_and_expiry():
    codec = make_codec()
    now = datetime.now(timezone.utc).replace(microsecond=0)

    session = codec.decode(codec.encode(42, now=now))

    assert session.is_authenticated
    assert session.user_id == 42
    assert session.issued_at == now
    assert session.expires_at == now + timedelta(hours=1)


def test_missing_token_is_anonymous():
    codec = make_codec()
    assert codec.decode(None) is ANONYMOUS
    assert codec.decode("") is ANONYMOUS
    assert not ANONYMOUS.is_authenticated


def test_token_signed_with_other_secret_is_rejected():
    forged = SessionCodec(secret="some-other-secret-123", max_age_seconds=3600).encode(1)
    assert make_codec().decode(forged) is ANONYMOUS


def test_tampered_token_is_rejected():
    token = make_codec().encode(7)
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    assert make_codec().decode(tampered) is ANONYMOUS


def test_expired_token_is_rejected():
    codec = make_codec(max_age_seconds=60)
    issued = datetime.now(timezone.utc) - timedelta(minutes=5)
    assert codec.decode(codec.encode(3, now=issued)) is ANONYMOUS


def test_token_without_expiry_is_rejected():
    token = jwt.encode({"sub": "3", "iat": datetime.now(timezone.utc)}, SECRET, algorithm="HS256")
    assert make_codec().decode(token) is ANONYMOUS


def test_non_numeric_subject_is_rejected():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "admin", "iat": now, "exp": now + timedelta(hours=1)},
        SECRET,
        algorithm="HS256",
    )
    assert make_codec().decode(token) is ANONYMOUS


def test_garbage_is_rejected():
    assert make_codec().decode("definitely.not.a-jwt") is ANONYMOUS
