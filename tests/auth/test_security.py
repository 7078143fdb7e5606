from datetime import datetime, timedelta, timezone

from jose import jwt

from deals.auth.config import JWT_ALGORITHM, JWT_SECRET_KEY
from deals.auth.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

def test_access_token_carries_user_id():
    token = create_access_token(7)
    assert decode_access_token(token) == 7

def test_expired_token_is_rejected():
    token = create_access_token(7, expires_delta=timedelta(seconds=-1))
    assert decode_access_token(token) is None

def test_token_of_other_type_is_rejected():
    claims = {
        "sub": "7",
        "typ": "refresh",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
    }
    token = jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
    assert decode_access_token(token) is None

def test_token_with_non_numeric_subject_is_rejected():
    claims = {
        "sub": "buyer@example.com",
        "typ": "access",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
    }
    token = jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
    assert decode_access_token(token) is None

def test_token_signed_with_other_key_is_rejected():
    claims = {"sub": "7", "typ": "access", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
    token = jwt.encode(claims, JWT_SECRET_KEY + "-autre", algorithm=JWT_ALGORITHM)
    assert decode_access_token(token) is None

def test_password_hash_round_trip():
    hashed = get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong-pass", hashed)

def test_unreadable_hash_does_not_verify():
    assert verify_password("s3cret-pass", "pas-un-hash-bcrypt") is False
