from jobboard.utils.security import generate_reset_token, get_password_hash, hash_reset_token, verify_password


def test_password_hash_roundtrip():
    hashed = get_password_hash("s3cret")

    assert hashed != "s3cret"
    assert hashed.startswith("$argon2")
    assert verify_password("s3cret", hashed)
    assert not verify_password("S3cret", hashed)


def test_reset_token_stores_only_the_digest():
    token, digest = generate_reset_token()

    assert len(token) == 40
    assert digest == hash_reset_token(token)
    assert digest != token
    assert generate_reset_token()[0] != token
