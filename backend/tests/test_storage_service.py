"""
Storefront Edge API — Storage Service Tests
============================================

What we test:
    ✅ Blob naming for each upload kind
    ✅ Upload validation (missing name, empty, too large)
    ✅ Asset and raw bucket uploads, listing and removal
"""

import pytest

from storefront.exceptions import RemoteError, ValidationError
from storefront.services.storage_service import (
    StorageService,
    asset_name,
    extension_of,
    hero_image_name,
    prefixed_name,
    product_image_name,
)

NOW_MS = 1700000000500


class TestNaming:

    def test_extension_is_lowercased(self):
        assert extension_of("Photo.JPEG") == "jpeg"

    def test_extension_defaults_when_missing(self):
        assert extension_of("README") == "bin"

    def test_names(self):
        assert product_image_name(7, "a.png", NOW_MS) == "product-7-1700000000500.png"
        assert hero_image_name("b.webp", NOW_MS) == "hero-1700000000500.webp"
        assert asset_name("logo final.svg", NOW_MS) == "1700000000500-logo final.svg"
        assert prefixed_name("qr", "code.PNG", NOW_MS) == "qr-1700000000500.png"

    def test_asset_name_drops_directories(self):
        assert asset_name("../../etc/passwd", NOW_MS) == "1700000000500-passwd"


class TestValidation:

    def setup_method(self):
        self.service = StorageService(admin=None, max_upload_size=10)

    def test_missing_filename(self):
        with pytest.raises(ValidationError, match="No file provided"):
            self.service.validate_upload(None, b"x")

    def test_empty_file(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_upload("a.png", b"")

    def test_too_large(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_upload("a.png", b"x" * 11)
        assert exc_info.value.field == "file"

    def test_at_limit_is_accepted(self):
        self.service.validate_upload("a.png", b"x" * 10)


class TestBucketOperations:

    def make(self, store, **kwargs):
        return StorageService(store, reader=store, clock=lambda: NOW_MS / 1000, **kwargs)

    @pytest.mark.asyncio
    async def test_upload_asset(self, store):
        result = await self.make(store).upload_asset("logo.svg", b"<svg/>", "image/svg+xml")

        assert result == {
            "success": True,
            "fileName": "1700000000500-logo.svg",
            "path": "1700000000500-logo.svg",
        }
        assert "1700000000500-logo.svg" in store.blobs["assets"]

    @pytest.mark.asyncio
    async def test_upload_asset_failure(self, store):
        store.failing.add("assets")
        with pytest.raises(RemoteError, match="Failed to upload asset"):
            await self.make(store).upload_asset("logo.svg", b"<svg/>", "image/svg+xml")

    @pytest.mark.asyncio
    async def test_upload_to_qr_bucket(self, store):
        result = await self.make(store).upload_to_bucket("qr-codes", "pay.png", b"png", "image/png")

        assert result["fileName"] == "qr-1700000000500.png"
        assert result["url"].endswith("/qr-codes/qr-1700000000500.png")

    @pytest.mark.asyncio
    async def test_list_assets_respects_limit(self, store):
        for i in range(5):
            store.blobs["assets"][f"{i}.png"] = b"x"

        files = await self.make(store, asset_list_limit=3).list_assets()

        assert [f["name"] for f in files] == ["0.png", "1.png", "2.png"]

    @pytest.mark.asyncio
    async def test_remove_requires_name(self, store):
        with pytest.raises(ValidationError, match="File name is required"):
            await self.make(store).remove("product-images", None)

    @pytest.mark.asyncio
    async def test_remove(self, store):
        store.blobs["product-images"]["a.png"] = b"x"

        await self.make(store).remove("product-images", "a.png")

        assert store.blobs["product-images"] == {}

    @pytest.mark.asyncio
    async def test_list_failure(self, store):
        store.failing.add("qr-codes")
        with pytest.raises(RemoteError, match="Failed to list files"):
            await self.make(store).list_bucket("qr-codes")
