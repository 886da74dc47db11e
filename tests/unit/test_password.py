"""Unit tests for password hashing."""

from openalpha.kernel.identity.password import (
    PasswordHasher,
    hash_password,
    verify_password,
)


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    hasher = PasswordHasher(rounds=4)

    def test_hash_creates_different_hashes(self):
        """Same password should create different hashes (due to salt)."""
        hash1 = self.hasher.hash("TestPassword123")
        hash2 = self.hasher.hash("TestPassword123")

        assert hash1 != hash2
        assert hash1.startswith("$2b$")  # bcrypt prefix

    def test_verify_correct_password(self):
        hashed = self.hasher.hash("TestPassword123")
        assert self.hasher.verify("TestPassword123", hashed) is True

    def test_verify_wrong_password(self):
        hashed = self.hasher.hash("TestPassword123")
        assert self.hasher.verify("WrongPassword", hashed) is False

    def test_malformed_hash_is_a_mismatch(self):
        assert self.hasher.verify("TestPassword123", "not-a-bcrypt-hash") is False

    def test_convenience_functions(self):
        """Test hash_password and verify_password functions."""
        hashed = hash_password("TestPassword123")

        assert verify_password("TestPassword123", hashed) is True
        assert verify_password("wrong", hashed) is False
