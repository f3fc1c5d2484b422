"""
Tests for shortcode allocation.
"""

from datetime import timedelta

import pytest

from shortener.core.exceptions import (
    InvalidShortcodeFormatError,
    InvalidValidityError,
    ShortcodeCollisionError,
    ShortcodeGenerationError,
)
from shortener.services.shortcode_allocator import BASE62_CHARS, ShortcodeAllocator, generate_shortcode
from shortener.store.memory import InMemoryMappingStore


class TestGenerateShortcode:
    """Random base62 candidates."""

    def test_default_length_and_alphabet(self):
        for _ in range(200):
            code = generate_shortcode()
            assert len(code) == 6
            assert all(c in BASE62_CHARS for c in code)

    def test_custom_length(self):
        assert len(generate_shortcode(10)) == 10

    def test_alphabet_has_62_symbols(self):
        assert len(set(BASE62_CHARS)) == 62


class TestSuppliedShortcode:
    """Caller-chosen shortcodes."""

    def test_supplied_code_is_used(self, allocator, store, clock):
        record = allocator.allocate("https://example.com/page", validity_minutes=1, shortcode="abc123")

        assert record.shortcode == "abc123"
        assert record.created_at == clock()
        assert record.expires_at == clock() + timedelta(minutes=1)
        assert store.get("abc123") == record

    @pytest.mark.parametrize("shortcode", ["ab", "a" * 21, "abc-12", "abc 12", "ab_cd", "ünï"])
    def test_malformed_code_rejected(self, allocator, store, shortcode):
        with pytest.raises(InvalidShortcodeFormatError):
            allocator.allocate("https://example.com", shortcode=shortcode)
        assert store.count() == 0

    def test_boundary_lengths_accepted(self, allocator):
        allocator.allocate("https://example.com", shortcode="abc")
        allocator.allocate("https://example.com", shortcode="a" * 20)

    def test_taken_code_is_collision(self, allocator, store):
        allocator.allocate("https://first.example.com", shortcode="abc123")

        with pytest.raises(ShortcodeCollisionError):
            allocator.allocate("https://second.example.com", shortcode="abc123")

        assert store.get("abc123").original_url == "https://first.example.com"

    def test_empty_code_falls_back_to_generation(self, allocator):
        record = allocator.allocate("https://example.com", shortcode="")

        assert len(record.shortcode) == 6
        assert all(c in BASE62_CHARS for c in record.shortcode)

    @pytest.mark.parametrize("shortcode", ["health", "docs", "redoc"])
    def test_route_names_are_reserved(self, allocator, store, shortcode):
        with pytest.raises(ShortcodeCollisionError):
            allocator.allocate("https://example.com", shortcode=shortcode)
        assert store.count() == 0

    def test_expired_code_still_collides(self, allocator, clock):
        allocator.allocate("https://example.com", validity_minutes=1, shortcode="abc123")
        clock.advance(minutes=10)

        with pytest.raises(ShortcodeCollisionError):
            allocator.allocate("https://example.com", shortcode="abc123")

    def test_lost_insert_race_is_collision(self, clock):
        class BlindStore(InMemoryMappingStore):
            """Presence check that always misses, as if another writer raced us."""

            def exists(self, shortcode):
                return False

        store = BlindStore(clock=clock)
        allocator = ShortcodeAllocator(store)
        allocator.allocate("https://first.example.com", shortcode="abc123")

        with pytest.raises(ShortcodeCollisionError):
            allocator.allocate("https://second.example.com", shortcode="abc123")
        assert store.get("abc123").original_url == "https://first.example.com"


class TestGeneratedShortcode:
    """Allocator-generated shortcodes."""

    def test_generated_code_shape(self, allocator):
        record = allocator.allocate("https://example.com")

        assert len(record.shortcode) == 6
        assert all(c in BASE62_CHARS for c in record.shortcode)

    def test_taken_candidates_are_skipped(self, store):
        candidates = iter(["taken1", "taken2", "free01"])
        allocator = ShortcodeAllocator(store, generator=lambda length: next(candidates))
        allocator.allocate("https://example.com", shortcode="taken1")
        allocator.allocate("https://example.com", shortcode="taken2")

        record = allocator.allocate("https://example.com")

        assert record.shortcode == "free01"

    def test_reserved_candidates_are_skipped(self, store):
        candidates = iter(["health", "free01"])
        allocator = ShortcodeAllocator(store, generator=lambda length: next(candidates))

        assert allocator.allocate("https://example.com").shortcode == "free01"

    def test_exhaustion_raises_after_budget(self, store):
        drawn = []

        def constant(length):
            drawn.append(length)
            return "same01"

        allocator = ShortcodeAllocator(store, generator=constant)
        allocator.allocate("https://example.com")
        drawn.clear()

        with pytest.raises(ShortcodeGenerationError):
            allocator.allocate("https://example.com")
        assert len(drawn) == 10
        assert store.count() == 1

    def test_generated_codes_are_distinct(self, allocator):
        codes = {allocator.allocate("https://example.com").shortcode for _ in range(100)}
        assert len(codes) == 100


class TestValidity:
    """Validity defaults and checks."""

    def test_default_validity_is_thirty_minutes(self, allocator, clock):
        record = allocator.allocate("https://example.com")

        assert record.validity_minutes == 30
        assert record.expires_at - record.created_at == timedelta(minutes=30)

    def test_explicit_validity(self, allocator):
        record = allocator.allocate("https://example.com", validity_minutes=120)
        assert record.expires_at - record.created_at == timedelta(hours=2)

    @pytest.mark.parametrize("validity", [0, -5, 1.5, 5.0, "10", True])
    def test_invalid_validity_rejected(self, allocator, store, validity):
        with pytest.raises(InvalidValidityError):
            allocator.allocate("https://example.com", validity_minutes=validity)
        assert store.count() == 0
