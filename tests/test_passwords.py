"""Tests for the bcrypt password hasher."""

from services.passwords import PasswordHasher


def test_hash_is_salted_and_verifiable():
    hasher = PasswordHasher(rounds=4)

    first = hasher.hash("Abc12345!")
    second = hasher.hash("Abc12345!")

    assert first != "Abc12345!"
    assert first != second
    assert hasher.verify("Abc12345!", first)
    assert hasher.verify("Abc12345!", second)


def test_verify_rejects_wrong_password():
    hasher = PasswordHasher(rounds=4)
    hashed = hasher.hash("Abc12345!")

    assert hasher.verify("abc12345!", hashed) is False
    assert hasher.verify("", hashed) is False


def test_verify_never_raises_on_malformed_hash():
    hasher = PasswordHasher(rounds=4)

    assert hasher.verify("Abc12345!", "not-a-bcrypt-hash") is False
    assert hasher.verify("Abc12345!", None) is False


def test_default_work_factor_is_twelve():
    hasher = PasswordHasher()

    assert hasher.rounds == 12


def test_verify_rejects_non_string_input():
    hasher = PasswordHasher(rounds=4)
    hashed = hasher.hash("Abc12345!")

    assert hasher.verify(12345678, hashed) is False
    assert hasher.verify(["Abc12345!"], hashed) is False
    assert hasher.verify("Abc12345!", b"bytes-hash") is False
