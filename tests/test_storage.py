import re
from datetime import timedelta
from uuid import uuid4

import pytest

from snaplink.schemas import ShortUrlCreate
from snaplink.services import (
    CodeGenerationError,
    DuplicateCodeError,
    MemStorage,
    generate_short_code,
    resolve_expiry,
)
from snaplink.services import storage as storage_module

CODE_RE = re.compile(r"^[a-zA-Z0-9]{5,10}$")


def make(original_url: str = "https://example.com/a", **kwargs) -> ShortUrlCreate:
    return ShortUrlCreate(original_url=original_url, **kwargs)


class TestCodeGeneration:
    def test_generated_code_is_eight_unambiguous_characters(self):
        for _ in range(200):
            code = generate_short_code()
            assert len(code) == 8
            assert CODE_RE.match(code)
            assert not set(code) & set("0O1lI")

    async def test_create_without_code_generates_one(self, storage):
        url = await storage.create_url(make())
        assert CODE_RE.match(url.code)
        assert url.clicks == 0

    async def test_gives_up_after_repeated_collisions(self, storage, monkeypatch):
        monkeypatch.setattr(storage_module, "generate_short_code", lambda: "abcde234")
        await storage.create_url(make())

        with pytest.raises(CodeGenerationError):
            await storage.create_url(make())


class TestCreate:
    async def test_explicit_code_is_used(self, storage, clock):
        url = await storage.create_url(make(code="abc12"))
        assert url.code == "abc12"
        assert url.original_url == "https://example.com/a"
        assert url.created_at == clock.now

    async def test_duplicate_code_conflicts(self, storage):
        await storage.create_url(make(code="abc12"))

        with pytest.raises(DuplicateCodeError) as exc_info:
            await storage.create_url(make("https://example.com/b", code="abc12"))
        assert exc_info.value.code == "abc12"

    async def test_deleted_code_can_be_reused_once(self, storage):
        await storage.create_url(make(code="abc12"))
        assert await storage.delete_url("abc12")

        await storage.create_url(make(code="abc12"))
        with pytest.raises(DuplicateCodeError):
            await storage.create_url(make(code="abc12"))

    async def test_expired_code_still_occupies_its_code(self, storage, clock):
        await storage.create_url(make(code="abc12", expires_at="1h"))
        clock.advance(hours=2)

        with pytest.raises(DuplicateCodeError):
            await storage.create_url(make(code="abc12"))

    @pytest.mark.parametrize(
        ("token", "delta"),
        [
            ("1h", timedelta(hours=1)),
            ("24h", timedelta(hours=24)),
            ("7d", timedelta(days=7)),
            ("30d", timedelta(days=30)),
            ("1y", timedelta(days=365)),
        ],
    )
    async def test_expiry_token_resolves_from_creation_time(self, storage, clock, token, delta):
        url = await storage.create_url(make(expires_at=token))
        assert url.expires_at == clock.now + delta

    async def test_never_and_missing_expiry_mean_no_expiry(self, storage):
        never = await storage.create_url(make(expires_at="never"))
        missing = await storage.create_url(make(expires_at=None))
        assert never.expires_at is None
        assert missing.expires_at is None

    def test_resolve_expiry(self, clock):
        assert resolve_expiry("never", clock.now) is None
        assert resolve_expiry("24h", clock.now) == clock.now + timedelta(days=1)


class TestLookup:
    async def test_get_url_by_code(self, storage):
        created = await storage.create_url(make(code="abc12"))
        assert await storage.get_url_by_code("abc12") is created
        assert await storage.get_url_by_code("zzz99") is None

    async def test_past_expiry_hides_url_without_deleting_it(self, storage, clock):
        url = await storage.create_url(make(code="abc12", expires_at="never"))
        url.expires_at = clock.now - timedelta(seconds=1)

        assert await storage.get_url_by_code("abc12") is None
        assert await storage.get_total_urls() == 1

    async def test_url_is_visible_until_expiry_passes(self, storage, clock):
        await storage.create_url(make(code="abc12", expires_at="1h"))

        clock.advance(hours=1)
        assert await storage.get_url_by_code("abc12") is not None

        clock.advance(seconds=1)
        assert await storage.get_url_by_code("abc12") is None

    async def test_get_all_urls_is_newest_first_and_skips_expired(self, storage, clock):
        await storage.create_url(make(code="first", expires_at="1h"))
        clock.advance(minutes=30)
        await storage.create_url(make(code="second", expires_at="never"))
        clock.advance(minutes=30)
        await storage.create_url(make(code="third", expires_at="30d"))

        assert [u.code for u in await storage.get_all_urls()] == ["third", "second", "first"]

        clock.advance(minutes=1)
        assert [u.code for u in await storage.get_all_urls()] == ["third", "second"]


class TestClicks:
    async def test_increment_clicks_counts_each_call(self, storage):
        await storage.create_url(make(code="abc12"))

        for _ in range(5):
            await storage.increment_clicks("abc12")

        url = await storage.get_url_by_code("abc12")
        assert url.clicks == 5

    async def test_increment_unknown_code_is_a_noop(self, storage):
        await storage.increment_clicks("nothere")
        assert await storage.get_total_clicks() == 0

    async def test_increment_expired_url_is_a_noop(self, storage, clock):
        url = await storage.create_url(make(code="abc12", expires_at="1h"))
        clock.advance(hours=2)

        await storage.increment_clicks("abc12")
        assert url.clicks == 0

    async def test_clicks_are_returned_newest_first(self, storage, clock):
        url = await storage.create_url(make())
        first = await storage.record_click(url.id)
        clock.advance(seconds=10)
        second = await storage.record_click(url.id, user_agent="curl/8.0")

        clicks = await storage.get_clicks_by_url_id(url.id)
        assert clicks == [second, first]
        assert clicks[0].user_agent == "curl/8.0"

    async def test_record_click_accepts_unknown_url_id(self, storage):
        orphan_id = uuid4()
        await storage.record_click(orphan_id)

        assert await storage.get_total_clicks() == 1
        assert len(await storage.get_clicks_by_url_id(orphan_id)) == 1

    async def test_counter_and_click_rows_are_independent(self, storage):
        url = await storage.create_url(make(code="abc12"))
        await storage.increment_clicks("abc12")
        await storage.increment_clicks("abc12")
        await storage.record_click(url.id)

        assert url.clicks == 2
        assert len(await storage.get_clicks_by_url_id(url.id)) == 1


class TestDelete:
    async def test_delete_cascades_to_clicks(self, storage):
        url = await storage.create_url(make(code="abc12"))
        other = await storage.create_url(make(code="xyz34"))
        await storage.record_click(url.id)
        await storage.record_click(url.id)
        await storage.record_click(other.id)

        assert await storage.delete_url("abc12") is True

        assert await storage.get_url_by_code("abc12") is None
        assert "abc12" not in [u.code for u in await storage.get_all_urls()]
        assert await storage.get_clicks_by_url_id(url.id) == []
        assert await storage.get_total_clicks() == 1

    async def test_delete_unknown_code(self, storage):
        assert await storage.delete_url("nothere") is False

    async def test_delete_expired_code_reports_nothing_deleted(self, storage, clock):
        await storage.create_url(make(code="abc12", expires_at="1h"))
        clock.advance(hours=2)

        assert await storage.delete_url("abc12") is False
        assert await storage.get_total_urls() == 1


class TestStatistics:
    async def test_empty_storage(self, storage):
        assert await storage.get_total_urls() == 0
        assert await storage.get_total_clicks() == 0
        assert await storage.get_active_urls() == 0

    async def test_total_urls_counts_expired_but_active_does_not(self, storage, clock):
        await storage.create_url(make(code="short", expires_at="1h"))
        await storage.create_url(make(code="longer", expires_at="7d"))
        await storage.create_url(make(code="forever", expires_at="never"))
        clock.advance(hours=2)

        assert await storage.get_total_urls() == 3
        assert await storage.get_active_urls() == 2

    async def test_active_count_matches_listing(self, storage, clock):
        for i, token in enumerate(["1h", "24h", "never", "1h"]):
            await storage.create_url(make(code=f"code{i}x", expires_at=token))

        start = clock.now
        for hours in (0, 1, 2, 25):
            clock.now = start + timedelta(hours=hours)
            assert await storage.get_active_urls() == len(await storage.get_all_urls())

    async def test_total_clicks_survive_expiry(self, storage, clock):
        url = await storage.create_url(make(expires_at="1h"))
        await storage.record_click(url.id)
        clock.advance(days=1)

        assert await storage.get_total_clicks() == 1

    async def test_stats_property(self):
        storage = MemStorage()
        url = await storage.create_url(make())
        await storage.record_click(url.id)
        assert storage.stats == {"urls_stored": 1, "clicks_stored": 1}
