"""Tests for the object store backends and factory."""

import time
from pathlib import Path
from unittest.mock import patch

import cloudinary.exceptions
import pytest

from inkpost.config import CloudinaryConfig, LocalMediaConfig, MediaConfig
from inkpost.lib.errors import ObjectNotFoundError, ProviderError
from inkpost.lib.media_url import extract_storage_key
from inkpost.lib.storage import LocalObjectStore, create_object_store
from inkpost.lib.storage.cloudinary import CloudinaryObjectStore

from fakes import PNG_BYTES

CREDENTIALS = CloudinaryConfig(cloud_name="demo", api_key="key", api_secret="secret")


class TestLocalObjectStore:
    @pytest.fixture
    def local_store(self, tmp_path):
        return LocalObjectStore(base_path=tmp_path, public_base_url="http://localhost:8000/media/")

    @pytest.mark.asyncio
    async def test_upload_writes_file(self, local_store, tmp_path):
        result = await local_store.upload(PNG_BYTES, "inkpost/assets", "My Photo.PNG")

        assert result.key.startswith("inkpost/assets/my-photo-")
        assert result.url == f"http://localhost:8000/media/upload/{result.key}.png"
        assert (result.width, result.height, result.format) == (1, 1, "png")
        assert (tmp_path / f"{result.key}.png").read_bytes() == PNG_BYTES

    @pytest.mark.asyncio
    async def test_url_maps_back_to_key(self, local_store):
        result = await local_store.upload(PNG_BYTES, "inkpost/assets")

        assert extract_storage_key(result.url) == result.key

    @pytest.mark.asyncio
    async def test_rejects_non_image(self, local_store):
        with pytest.raises(ProviderError):
            await local_store.upload(b"plain text", "inkpost/assets")

    @pytest.mark.asyncio
    async def test_destroy_removes_file(self, local_store, tmp_path):
        result = await local_store.upload(PNG_BYTES, "inkpost/assets")

        await local_store.destroy(result.key)

        assert not (tmp_path / f"{result.key}.png").exists()

    @pytest.mark.asyncio
    async def test_destroy_unknown_key(self, local_store):
        with pytest.raises(ObjectNotFoundError):
            await local_store.destroy("inkpost/assets/missing")

    @pytest.mark.asyncio
    async def test_destroy_outside_base_path(self, local_store, tmp_path):
        outside = tmp_path.parent / "escape.png"
        outside.write_bytes(PNG_BYTES)

        with pytest.raises(ObjectNotFoundError):
            await local_store.destroy("../escape")

        assert outside.exists()


class TestCloudinaryObjectStore:
    @pytest.mark.asyncio
    async def test_upload_maps_response(self):
        response = {
            "public_id": "inkpost/assets/abc",
            "secure_url": "https://res.cloudinary.com/demo/image/upload/v1/inkpost/assets/abc.png",
            "bytes": 68,
            "width": 1,
            "height": 1,
            "format": "png",
            "original_filename": "photo",
        }
        store = CloudinaryObjectStore(CREDENTIALS)

        with patch("cloudinary.uploader.upload", return_value=response) as upload:
            result = await store.upload(PNG_BYTES, "inkpost/assets", "photo.png")

        assert result.key == "inkpost/assets/abc"
        assert result.url == response["secure_url"]
        assert result.bytes == 68
        kwargs = upload.call_args.kwargs
        assert kwargs["folder"] == "inkpost/assets"
        assert kwargs["resource_type"] == "image"
        assert kwargs["cloud_name"] == "demo"

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        store = CloudinaryObjectStore(CloudinaryConfig())

        with pytest.raises(ProviderError, match="not configured"):
            await store.upload(PNG_BYTES, "inkpost/assets")

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_provider_error(self):
        store = CloudinaryObjectStore(CREDENTIALS)

        with patch("cloudinary.uploader.upload", side_effect=cloudinary.exceptions.Error("bad key")):
            with pytest.raises(ProviderError, match="bad key"):
                await store.upload(PNG_BYTES, "inkpost/assets")

    @pytest.mark.asyncio
    async def test_upload_timeout_is_retryable(self):
        store = CloudinaryObjectStore(CREDENTIALS, timeout=0.05)

        def slow_upload(*args, **kwargs):
            time.sleep(0.3)
            return {}

        with patch("cloudinary.uploader.upload", side_effect=slow_upload):
            with pytest.raises(ProviderError) as exc_info:
                await store.upload(PNG_BYTES, "inkpost/assets")

        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_destroy_ok(self):
        store = CloudinaryObjectStore(CREDENTIALS)

        with patch("cloudinary.uploader.destroy", return_value={"result": "ok"}) as destroy:
            await store.destroy("inkpost/assets/abc")

        assert destroy.call_args.args == ("inkpost/assets/abc",)

    @pytest.mark.asyncio
    async def test_destroy_not_found(self):
        store = CloudinaryObjectStore(CREDENTIALS)

        with patch("cloudinary.uploader.destroy", return_value={"result": "not found"}):
            with pytest.raises(ObjectNotFoundError):
                await store.destroy("inkpost/assets/abc")

    @pytest.mark.asyncio
    async def test_destroy_unexpected_result(self):
        store = CloudinaryObjectStore(CREDENTIALS)

        with patch("cloudinary.uploader.destroy", return_value={"result": "error"}):
            with pytest.raises(ProviderError) as exc_info:
                await store.destroy("inkpost/assets/abc")

        assert not isinstance(exc_info.value, ObjectNotFoundError)


class TestCreateObjectStore:
    def test_local(self, tmp_path):
        config = MediaConfig(backend="local", local=LocalMediaConfig(path=str(tmp_path)))

        store = create_object_store(config)

        assert isinstance(store, LocalObjectStore)
        assert store.base_path == Path(str(tmp_path))

    def test_cloudinary(self):
        store = create_object_store(MediaConfig(cloudinary=CREDENTIALS))

        assert isinstance(store, CloudinaryObjectStore)
        assert store.provider == "cloudinary"

    def test_dynamic_backend(self):
        store = create_object_store(MediaConfig(backend="fakes:FakeObjectStore"))

        assert store.provider == "cloudinary"

    def test_backend_with_two_colons(self):
        with pytest.raises(ValueError, match="exactly one colon"):
            create_object_store(MediaConfig(backend="a:b:c"))

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown media backend"):
            create_object_store(MediaConfig(backend="s3"))
