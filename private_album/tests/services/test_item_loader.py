import asyncio

import pytest

from private_album.config import AlbumConfig
from private_album.crypto.cipher import seal_blob
from private_album.crypto.key_material import KeyMaterial
from private_album.exceptions import AuthenticationError, NotFoundError
from private_album.services.item_loader import ItemLoader

ALBUM_ID = "abc123"


@pytest.fixture
def item_loader(blob_store, config: AlbumConfig) -> ItemLoader:
    return ItemLoader(blob_store, config)


@pytest.mark.asyncio
async def test_load_decrypts_item(item_loader: ItemLoader, blob_store, key: KeyMaterial) -> None:
    blob_store.blobs[f"{ALBUM_ID}/a.jpg"] = seal_blob(key.derive(), b"\xff\xd8jpeg")

    image = await item_loader.load(ALBUM_ID, key, "a.jpg", index=3)

    assert image.data == b"\xff\xd8jpeg"
    assert image.name == "a.jpg"
    assert image.index == 3
    assert image.mime_type == "image/jpeg"


@pytest.mark.asyncio
async def test_load_missing_item_raises_not_found(item_loader: ItemLoader, key: KeyMaterial) -> None:
    with pytest.raises(NotFoundError):
        await item_loader.load(ALBUM_ID, key, "missing.jpg")


@pytest.mark.asyncio
async def test_load_with_wrong_key_raises_authentication_error(
    item_loader: ItemLoader, blob_store, key: KeyMaterial, other_key: KeyMaterial
) -> None:
    blob_store.blobs[f"{ALBUM_ID}/a.jpg"] = seal_blob(key.derive(), b"data")

    with pytest.raises(AuthenticationError):
        await item_loader.load(ALBUM_ID, other_key, "a.jpg")


@pytest.mark.asyncio
async def test_load_all_isolates_failures(
    item_loader: ItemLoader, blob_store, key: KeyMaterial
) -> None:
    blob_store.blobs[f"{ALBUM_ID}/a.jpg"] = seal_blob(key.derive(), b"A")
    blob_store.blobs[f"{ALBUM_ID}/corrupt.jpg"] = b"\x00" * 40
    blob_store.blobs[f"{ALBUM_ID}/c.jpg"] = seal_blob(key.derive(), b"C")

    images = await item_loader.load_all(
        ALBUM_ID, key, ["a.jpg", "missing.jpg", "corrupt.jpg", None, "c.jpg"]
    )

    assert [None if i is None else i.data for i in images] == [b"A", None, None, None, b"C"]


@pytest.mark.asyncio
async def test_load_all_keeps_duplicate_names_at_their_positions(
    item_loader: ItemLoader, blob_store, key: KeyMaterial
) -> None:
    blob_store.blobs[f"{ALBUM_ID}/a.jpg"] = seal_blob(key.derive(), b"A")

    images = await item_loader.load_all(ALBUM_ID, key, ["a.jpg", "a.jpg"])

    assert [i.index for i in images if i is not None] == [0, 1]


@pytest.mark.asyncio
async def test_load_all_bounds_concurrency(blob_store, key: KeyMaterial) -> None:
    loader = ItemLoader(blob_store, AlbumConfig(max_concurrent_loads=2))
    in_flight = 0
    peak = 0
    fetch = blob_store.fetch

    async def slow_fetch(path: str) -> bytes:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return await fetch(path)

    blob_store.fetch = slow_fetch
    names = [f"{i}.jpg" for i in range(6)]
    for name in names:
        blob_store.blobs[f"{ALBUM_ID}/{name}"] = seal_blob(key.derive(), name.encode())

    images = await loader.load_all(ALBUM_ID, key, names)

    assert peak == 2
    assert [i.data for i in images if i is not None] == [n.encode() for n in names]
