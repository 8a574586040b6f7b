from interview_booking.auth.passwords import hash_password, verify_password


def test_hash_password_is_salted() -> None:
    first = hash_password('correct-horse')
    second = hash_password('correct-horse')

    assert first != second
    assert first.startswith('$2b$10$')


def test_verify_password_accepts_only_the_original_password() -> None:
    password_hash = hash_password('correct-horse')

    assert verify_password('correct-horse', password_hash)
    assert not verify_password('battery-staple', password_hash)


def test_verify_password_rejects_malformed_hash() -> None:
    assert not verify_password('correct-horse', 'not-a-bcrypt-hash')


def test_verify_password_rejects_password_over_bcrypt_limit() -> None:
    password_hash = hash_password('correct-horse')

    assert not verify_password('x' * 100, password_hash)
