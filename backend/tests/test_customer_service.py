"""Unit tests for CustomerService.

Chạy trên một repository giả lập trong bộ nhớ, có cùng hợp đồng với
CustomerRepository (kể cả ràng buộc unique platform + external_id).
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import (
    DuplicateEntity,
    InvalidReference,
    NotFound,
    StorageFailure,
)
from app.models.channel import Channel
from app.models.customer import Customer
from app.models.shop import Shop
from app.schemas.customer import CustomerCreate, CustomerUpdate, CustomerListQuery
from app.services.customer import CustomerService


# ── Fakes ────────────────────────────────────────────────────────────────────

class FakeCustomerRepository:
    """In-memory customer store. ``add`` enforces the unique pair like the DB."""

    def __init__(self, tick: timedelta = timedelta(seconds=1)):
        self.rows: dict[int, Customer] = {}
        self._seq = 0
        self._now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self._tick = tick

    def _clock(self) -> datetime:
        self._now += self._tick
        return self._now

    async def get(self, customer_id):
        return self.rows.get(customer_id)

    async def get_by_external_id(self, platform, external_id, exclude_id=None):
        for c in self.rows.values():
            if c.platform == platform and c.external_id == external_id and c.id != exclude_id:
                return c
        return None

    async def find(self, *, offset=None, limit=None, platform=None, shop_id=None,
                   channel_id=None, name=None):
        rows = [
            c for c in self.rows.values()
            if (not platform or c.platform == platform)
            and (shop_id is None or c.shop_id == shop_id)
            and (channel_id is None or c.channel_id == channel_id)
            and (not name or (c.name is not None and name in c.name))
        ]
        rows.sort(key=lambda c: (c.created_at, c.id), reverse=True)
        start = offset or 0
        end = start + limit if limit is not None else None
        return rows[start:end]

    async def page(self, *, page, limit, **filters):
        total = len(await self.find(**filters))
        return await self.find(offset=(page - 1) * limit, limit=limit, **filters), total

    async def add(self, customer):
        if await self.get_by_external_id(customer.platform, customer.external_id):
            raise DuplicateEntity(customer.platform, customer.external_id)
        self._seq += 1
        customer.id = self._seq
        customer.created_at = customer.updated_at = self._clock()
        self.rows[customer.id] = customer
        return customer

    async def save(self, customer):
        customer.updated_at = self._clock()
        return customer

    async def delete(self, customer):
        del self.rows[customer.id]


class FakeShops:
    def __init__(self, *shops):
        self.shops = {s.id: s for s in shops}
        self.lookups: list[str] = []

    async def find_one(self, shop_id):
        self.lookups.append(shop_id)
        if shop_id not in self.shops:
            raise NotFound("Shop", shop_id)
        return self.shops[shop_id]


class FakeChannels:
    def __init__(self, *channels):
        self.channels = {c.id: c for c in channels}
        self.lookups: list[int] = []

    async def get_one(self, channel_id):
        self.lookups.append(channel_id)
        if channel_id not in self.channels:
            raise NotFound("Channel", channel_id)
        return self.channels[channel_id]


# ── Helpers ──────────────────────────────────────────────────────────────────

def _make_service(repo=None):
    """Two shops (S1, S2) and two channels (1 on S1, 2 on S2)."""
    shops = FakeShops(Shop(id="S1", name="Cửa hàng 1"), Shop(id="S2", name="Cửa hàng 2"))
    channels = FakeChannels(
        Channel(id=1, name="Zalo OA", type="zalo", shop_id="S1"),
        Channel(id=2, name="Fanpage", type="fb", shop_id="S2"),
    )
    repo = repo or FakeCustomerRepository()
    return CustomerService(repo, shops, channels), repo, shops, channels


def _create(platform="zalo", external_id="u1", shop_id="S1", channel_id=1, name=None):
    return CustomerCreate(
        platform=platform,
        external_id=external_id,
        shop_id=shop_id,
        channel_id=channel_id,
        name=name,
    )


# ── Create ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_returns_flattened_view():
    service, repo, _, _ = _make_service()

    view = await service.create(_create(name="Lan"))

    assert view.id == 1
    assert view.platform == "zalo"
    assert view.external_id == "u1"
    assert view.name == "Lan"
    assert view.shop_id == "S1"
    assert view.channel_id == 1
    assert view.shop.model_dump() == {"id": "S1", "name": "Cửa hàng 1"}
    assert view.channel.model_dump() == {"id": 1, "name": "Zalo OA"}
    assert len(repo.rows) == 1


@pytest.mark.asyncio
async def test_create_same_pair_twice_is_duplicate():
    """Second create with the same platform/external_id fails whatever else differs."""
    service, repo, _, _ = _make_service()
    await service.create(_create(platform="zalo", external_id="u1", shop_id="S1", channel_id=1))

    with pytest.raises(DuplicateEntity) as exc_info:
        await service.create(_create(platform="zalo", external_id="u1", shop_id="S2", channel_id=2))

    assert exc_info.value.platform == "zalo"
    assert exc_info.value.external_id == "u1"
    assert len(repo.rows) == 1


@pytest.mark.asyncio
async def test_create_same_external_id_on_other_platform_is_allowed():
    service, repo, _, _ = _make_service()
    await service.create(_create(platform="zalo", external_id="u1"))
    await service.create(_create(platform="fb", external_id="u1"))

    assert len(repo.rows) == 2


@pytest.mark.asyncio
async def test_create_unknown_shop_persists_nothing():
    service, repo, _, channels = _make_service()

    with pytest.raises(InvalidReference) as exc_info:
        await service.create(_create(shop_id="S404"))

    assert exc_info.value.kind == "shop"
    assert exc_info.value.ref_id == "S404"
    assert repo.rows == {}
    # Shop is resolved before the channel
    assert channels.lookups == []


@pytest.mark.asyncio
async def test_create_unknown_channel_persists_nothing():
    service, repo, _, _ = _make_service()

    with pytest.raises(InvalidReference) as exc_info:
        await service.create(_create(channel_id=99))

    assert exc_info.value.kind == "channel"
    assert exc_info.value.ref_id == 99
    assert repo.rows == {}


@pytest.mark.asyncio
async def test_create_lost_race_surfaces_as_duplicate():
    """Pre-check misses the row but the store's unique constraint rejects it."""
    service, repo, _, _ = _make_service()
    repo.get_by_external_id = AsyncMock(return_value=None)
    repo.add = AsyncMock(side_effect=DuplicateEntity("zalo", "u1"))

    with pytest.raises(DuplicateEntity):
        await service.create(_create())


@pytest.mark.asyncio
async def test_create_unexpected_storage_error_is_wrapped():
    service, repo, _, _ = _make_service()
    boom = ConnectionError("connection reset")
    repo.add = AsyncMock(side_effect=boom)

    with pytest.raises(StorageFailure) as exc_info:
        await service.create(_create())

    assert exc_info.value.cause is boom
    assert exc_info.value.__cause__ is boom
    assert "connection reset" in str(exc_info.value)


# ── Update ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_update_name_only_leaves_other_fields():
    service, _, _, _ = _make_service()
    created = await service.create(_create(platform="fb", external_id="u9"))

    view = await service.update(created.id, CustomerUpdate(name="Alice"))

    assert view.name == "Alice"
    assert view.platform == "fb"
    assert view.external_id == "u9"
    assert view.shop_id == "S1"
    assert view.channel_id == 1


@pytest.mark.asyncio
async def test_update_with_own_identity_is_not_a_duplicate():
    service, _, _, _ = _make_service()
    created = await service.create(_create(platform="zalo", external_id="u1"))

    view = await service.update(
        created.id, CustomerUpdate(platform="zalo", external_id="u1", name="Bình")
    )

    assert view.name == "Bình"


@pytest.mark.asyncio
async def test_update_to_pair_held_by_another_customer_fails():
    service, repo, _, _ = _make_service()
    await service.create(_create(platform="zalo", external_id="u1"))
    other = await service.create(_create(platform="zalo", external_id="u2"))

    with pytest.raises(DuplicateEntity) as exc_info:
        await service.update(other.id, CustomerUpdate(external_id="u1"))

    # Effective pair uses the stored platform
    assert (exc_info.value.platform, exc_info.value.external_id) == ("zalo", "u1")
    assert repo.rows[other.id].external_id == "u2"


@pytest.mark.asyncio
async def test_update_platform_only_checks_against_current_external_id():
    service, _, _, _ = _make_service()
    await service.create(_create(platform="fb", external_id="u1"))
    target = await service.create(_create(platform="zalo", external_id="u1"))

    with pytest.raises(DuplicateEntity):
        await service.update(target.id, CustomerUpdate(platform="fb"))


@pytest.mark.asyncio
async def test_update_can_clear_name():
    service, _, _, _ = _make_service()
    first = await service.create(_create(external_id="u1", name="Lan"))
    second = await service.create(_create(external_id="u2", name="Huệ"))

    cleared = await service.update(first.id, CustomerUpdate.model_validate({"name": None}))
    emptied = await service.update(second.id, CustomerUpdate(name=""))

    assert cleared.name is None
    assert emptied.name == ""


@pytest.mark.asyncio
async def test_update_omitting_name_keeps_it():
    service, _, _, _ = _make_service()
    created = await service.create(_create(name="Lan"))

    view = await service.update(created.id, CustomerUpdate(external_id="u1-new"))

    assert view.name == "Lan"
    assert view.external_id == "u1-new"


@pytest.mark.asyncio
async def test_update_moves_customer_to_other_shop_and_channel():
    service, _, _, _ = _make_service()
    created = await service.create(_create())

    view = await service.update(created.id, CustomerUpdate(shop_id="S2", channel_id=2))

    assert view.shop_id == "S2"
    assert view.shop.name == "Cửa hàng 2"
    assert view.channel_id == 2
    assert view.channel.name == "Fanpage"


@pytest.mark.asyncio
async def test_update_unchanged_references_are_not_resolved_again():
    service, _, shops, channels = _make_service()
    created = await service.create(_create())
    shops.lookups.clear()
    channels.lookups.clear()

    await service.update(created.id, CustomerUpdate(shop_id="S1", channel_id=1))

    assert shops.lookups == []
    assert channels.lookups == []


@pytest.mark.asyncio
async def test_update_unknown_shop_leaves_record_untouched():
    service, repo, _, _ = _make_service()
    created = await service.create(_create(name="Lan"))

    with pytest.raises(InvalidReference) as exc_info:
        await service.update(created.id, CustomerUpdate(shop_id="S404", name="Khác"))

    assert exc_info.value.kind == "shop"
    stored = repo.rows[created.id]
    assert stored.shop_id == "S1"
    assert stored.name == "Lan"


@pytest.mark.asyncio
async def test_update_unknown_channel_is_invalid_reference():
    service, _, _, _ = _make_service()
    created = await service.create(_create())

    with pytest.raises(InvalidReference) as exc_info:
        await service.update(created.id, CustomerUpdate(channel_id=42))

    assert exc_info.value.kind == "channel"
    assert exc_info.value.ref_id == 42


@pytest.mark.asyncio
async def test_update_missing_customer_not_found():
    service, _, _, _ = _make_service()

    with pytest.raises(NotFound) as exc_info:
        await service.update(123, CustomerUpdate(name="x"))

    assert exc_info.value.key == 123


@pytest.mark.asyncio
async def test_update_unexpected_storage_error_is_wrapped():
    service, repo, _, _ = _make_service()
    created = await service.create(_create())
    repo.save = AsyncMock(side_effect=RuntimeError("deadlock detected"))

    with pytest.raises(StorageFailure) as exc_info:
        await service.update(created.id, CustomerUpdate(name="x"))

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert f"ID {created.id}" in str(exc_info.value)


@pytest.mark.asyncio
async def test_update_lost_race_surfaces_as_duplicate():
    """Pre-check passes but the unique constraint rejects the save."""
    service, repo, _, _ = _make_service()
    created = await service.create(_create(external_id="u2"))
    repo.get_by_external_id = AsyncMock(return_value=None)
    repo.save = AsyncMock(side_effect=DuplicateEntity("zalo", "u1"))

    with pytest.raises(DuplicateEntity) as exc_info:
        await service.update(created.id, CustomerUpdate(external_id="u1"))

    assert (exc_info.value.platform, exc_info.value.external_id) == ("zalo", "u1")


# ── Remove ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_remove_twice_fails_and_record_is_gone():
    service, repo, _, _ = _make_service()
    created = await service.create(_create())

    await service.remove(created.id)
    assert repo.rows == {}

    with pytest.raises(NotFound):
        await service.remove(created.id)
    with pytest.raises(NotFound):
        await service.find_one(created.id)


@pytest.mark.asyncio
async def test_removed_identity_can_be_reused():
    service, repo, _, _ = _make_service()
    created = await service.create(_create())
    await service.remove(created.id)

    again = await service.create(_create())

    assert again.id != created.id
    assert len(repo.rows) == 1


# ── Reads ────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_find_one_returns_view():
    service, _, _, _ = _make_service()
    created = await service.create(_create(name="Lan"))

    view = await service.find_one(created.id)

    assert view == created


@pytest.mark.asyncio
async def test_read_errors_are_not_wrapped():
    service, repo, _, _ = _make_service()
    repo.get = AsyncMock(side_effect=RuntimeError("db down"))

    with pytest.raises(RuntimeError):
        await service.find_one(1)


@pytest.mark.asyncio
async def test_find_all_second_page_of_25():
    service, _, _, _ = _make_service()
    for i in range(1, 26):
        await service.create(_create(external_id=f"u{i}"))

    result = await service.find_all(CustomerListQuery(page=2, limit=10))

    assert result.total == 25
    assert result.page == 2
    assert result.limit == 10
    assert result.total_pages == 3
    # Newest first: positions 10..19 are the 15th..6th created
    assert [c.external_id for c in result.data] == [f"u{i}" for i in range(15, 5, -1)]


@pytest.mark.asyncio
async def test_find_all_last_partial_page_and_empty_result():
    service, _, _, _ = _make_service()
    for i in range(1, 26):
        await service.create(_create(external_id=f"u{i}"))

    last = await service.find_all(CustomerListQuery(page=3, limit=10))
    empty = await service.find_all(CustomerListQuery(platform="tiktok"))

    assert len(last.data) == 5
    assert empty.data == []
    assert empty.total == 0
    assert empty.total_pages == 0


@pytest.mark.asyncio
async def test_find_all_equal_timestamps_keep_insertion_order():
    service, _, _, _ = _make_service(FakeCustomerRepository(tick=timedelta(0)))
    for i in range(1, 4):
        await service.create(_create(external_id=f"u{i}"))

    result = await service.find_all(CustomerListQuery())

    assert [c.external_id for c in result.data] == ["u3", "u2", "u1"]


@pytest.mark.asyncio
async def test_find_all_filters():
    service, _, _, _ = _make_service()
    await service.create(_create(platform="zalo", external_id="a", name="Alice Nguyen"))
    await service.create(_create(platform="fb", external_id="b", shop_id="S2", channel_id=2, name="alice tran"))
    await service.create(_create(platform="zalo", external_id="c", name="Bob"))

    by_platform = await service.find_all(CustomerListQuery(platform="zalo"))
    by_shop = await service.find_all(CustomerListQuery(shop_id="S2"))
    by_name = await service.find_all(CustomerListQuery(name="Alice"))

    assert {c.external_id for c in by_platform.data} == {"a", "c"}
    assert [c.external_id for c in by_shop.data] == ["b"]
    # Case-sensitive substring match
    assert [c.external_id for c in by_name.data] == ["a"]


@pytest.mark.asyncio
async def test_find_all_unknown_shop_fails_fast():
    service, _, _, _ = _make_service()

    with pytest.raises(NotFound) as exc_info:
        await service.find_all(CustomerListQuery(shop_id="S404"))

    assert exc_info.value.entity == "Shop"


@pytest.mark.asyncio
async def test_find_all_unknown_channel_fails_fast():
    service, _, _, _ = _make_service()

    with pytest.raises(NotFound) as exc_info:
        await service.find_all(CustomerListQuery(channel_id=77))

    assert exc_info.value.entity == "Channel"


@pytest.mark.asyncio
async def test_find_all_channel_id_zero_is_checked_not_ignored():
    service, _, _, channels = _make_service()
    await service.create(_create(external_id="a"))
    await service.create(_create(external_id="b", shop_id="S2", channel_id=2))

    with pytest.raises(NotFound) as exc_info:
        await service.find_all(CustomerListQuery(channel_id=0))

    assert exc_info.value.entity == "Channel"
    assert channels.lookups == [1, 2, 0]


@pytest.mark.asyncio
async def test_find_all_empty_shop_id_is_checked_not_ignored():
    service, _, shops, _ = _make_service()
    await service.create(_create(external_id="a"))
    await service.create(_create(external_id="b", shop_id="S2", channel_id=2))

    with pytest.raises(NotFound) as exc_info:
        await service.find_all(CustomerListQuery(shop_id=""))

    assert exc_info.value.entity == "Shop"
    assert shops.lookups == ["S1", "S2", ""]


@pytest.mark.asyncio
async def test_find_by_external_id():
    service, _, _, _ = _make_service()
    created = await service.create(_create(platform="zalo", external_id="u1"))

    found = await service.find_by_external_id("zalo", "u1")
    assert found.id == created.id

    with pytest.raises(NotFound) as exc_info:
        await service.find_by_external_id("fb", "u1")
    assert "fb:u1" in str(exc_info.value)


@pytest.mark.asyncio
async def test_unpaginated_listings():
    service, _, _, _ = _make_service()
    await service.create(_create(platform="zalo", external_id="a", name="Minh Anh"))
    await service.create(_create(platform="fb", external_id="b", shop_id="S2", channel_id=2, name="Anh Thư"))
    await service.create(_create(platform="zalo", external_id="c", name="Quân"))

    assert [c.external_id for c in await service.find_by_platform("zalo")] == ["c", "a"]
    assert [c.external_id for c in await service.find_by_shop_id("S1")] == ["c", "a"]
    assert [c.external_id for c in await service.find_by_channel_id(2)] == ["b"]
    assert [c.external_id for c in await service.search_by_name("Anh")] == ["b", "a"]


@pytest.mark.asyncio
async def test_reference_listings_validate_reference():
    service, _, _, _ = _make_service()

    with pytest.raises(NotFound):
        await service.find_by_shop_id("S404")
    with pytest.raises(NotFound):
        await service.find_by_channel_id(404)
