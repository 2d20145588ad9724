"""Password hashing tests — bcrypt round trip with cheap rounds."""

from crudcore.infrastructure.passwords import hash_password, verify_password


def test_hash_verifies():
    hashed = hash_password("correct horse", rounds=4)
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)


def test_wrong_password_fails():
    assert not verify_password("wrong", hash_password("correct horse", rounds=4))


def test_same_password_hashes_differently():
    assert hash_password("pw123456", rounds=4) != hash_password("pw123456", rounds=4)


def test_garbage_hash_is_not_an_error():
    assert verify_password("anything", "not-a-bcrypt-hash") is False
