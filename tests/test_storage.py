"""Tests for core/storage.py — static site buckets and objects."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from core import storage


@pytest.mark.asyncio
async def test_create_bucket_enables_uniform_access(storage_client):
    bucket = MagicMock(name="Bucket")
    storage_client.create_bucket.return_value = bucket

    result = await storage.create_static_site_bucket("test-project", "site-bucket")

    assert result.is_error is False
    assert result.text == "# Bucket Created\n\nBucket site-bucket created in US"
    storage_client.factory.assert_called_with("test-project")
    storage_client.create_bucket.assert_called_once_with("site-bucket", location="US")
    assert bucket.iam_configuration.uniform_bucket_level_access_enabled is True
    bucket.patch.assert_called_once_with()


@pytest.mark.asyncio
async def test_create_bucket_in_custom_location(storage_client):
    result = await storage.create_static_site_bucket("test-project", "eu-site", "EU")

    assert "created in EU" in result.text
    storage_client.create_bucket.assert_called_once_with("eu-site", location="EU")


@pytest.mark.asyncio
async def test_create_bucket_is_removed_when_uniform_access_fails(storage_client):
    bucket = MagicMock(name="Bucket")
    bucket.patch.side_effect = RuntimeError("412 uniform access blocked by org policy")
    storage_client.create_bucket.return_value = bucket

    result = await storage.create_static_site_bucket("test-project", "site-bucket")

    assert result.is_error is True
    assert "Failed to create bucket site-bucket: 412 uniform access blocked by org policy" in result.text
    storage_client.bucket.assert_called_once_with("site-bucket")
    storage_client.bucket.return_value.delete.assert_called_once_with(force=True)


@pytest.mark.asyncio
async def test_failed_cleanup_keeps_original_error(storage_client):
    bucket = MagicMock(name="Bucket")
    bucket.patch.side_effect = RuntimeError("412 uniform access blocked by org policy")
    storage_client.create_bucket.return_value = bucket
    storage_client.bucket.return_value.delete.side_effect = RuntimeError("403 delete denied")

    result = await storage.create_static_site_bucket("test-project", "site-bucket")

    assert result.is_error is True
    assert "412 uniform access blocked by org policy" in result.text
    assert "delete denied" not in result.text


@pytest.mark.asyncio
async def test_upload_and_delete_work_without_a_project(storage_client):
    uploaded = await storage.upload_static_site_html(None, "site-bucket", "<p/>")
    deleted = await storage.delete_static_site_bucket(None, "site-bucket")

    assert uploaded.is_error is False
    assert deleted.is_error is False
    assert [c.args for c in storage_client.factory.call_args_list] == [(None,), (None,)]


@pytest.mark.asyncio
async def test_create_bucket_failure(storage_client):
    storage_client.create_bucket.side_effect = RuntimeError("name already taken")

    result = await storage.create_static_site_bucket("test-project", "site-bucket")

    assert result.is_error is True
    assert "Failed to create bucket site-bucket: name already taken" in result.text


@pytest.mark.asyncio
async def test_upload_html_is_public(storage_client):
    blob = storage_client.bucket.return_value.blob.return_value

    result = await storage.upload_static_site_html("test-project", "site-bucket", "<h1>Hi</h1>")

    assert result.is_error is False
    assert result.text == (
        "# Upload Successful\n\n"
        "File uploaded and public at https://storage.googleapis.com/site-bucket/index.html"
    )
    storage_client.bucket.assert_called_with("site-bucket")
    storage_client.bucket.return_value.blob.assert_called_with("index.html")
    blob.upload_from_string.assert_called_once_with("<h1>Hi</h1>", content_type="text/html")
    blob.make_public.assert_called_once_with()


@pytest.mark.asyncio
async def test_upload_custom_file_name(storage_client):
    result = await storage.upload_static_site_html(
        "test-project", "site-bucket", "<p/>", file_name="about.html"
    )

    assert result.text.endswith("https://storage.googleapis.com/site-bucket/about.html")


@pytest.mark.asyncio
async def test_upload_failure_names_object(storage_client):
    blob = storage_client.bucket.return_value.blob.return_value
    blob.make_public.side_effect = RuntimeError("public access prevention")

    result = await storage.upload_static_site_html("test-project", "site-bucket", "<p/>")

    assert result.is_error is True
    assert "Failed to upload index.html to site-bucket: public access prevention" in result.text


@pytest.mark.asyncio
async def test_list_buckets(storage_client):
    storage_client.list_buckets.return_value = [
        SimpleNamespace(name="alpha", location="US"),
        SimpleNamespace(name="beta", location="EU"),
    ]

    result = await storage.list_static_site_buckets("test-project")

    assert result.text == "# Buckets\n\nalpha\nbeta"
    storage_client.list_buckets.assert_called_once_with(project="test-project")


@pytest.mark.asyncio
async def test_list_buckets_empty(storage_client):
    result = await storage.list_static_site_buckets("test-project")

    assert result.is_error is False
    assert result.text == "# Buckets\n\n(none)"


@pytest.mark.asyncio
async def test_delete_bucket(storage_client):
    result = await storage.delete_static_site_bucket("test-project", "site-bucket")

    assert result.text == "# Bucket Deleted\n\nBucket site-bucket deleted"
    storage_client.bucket.assert_called_once_with("site-bucket")
    storage_client.bucket.return_value.delete.assert_called_once_with(force=False)


@pytest.mark.asyncio
async def test_delete_non_empty_bucket_fails(storage_client):
    storage_client.bucket.return_value.delete.side_effect = RuntimeError("bucket not empty")

    result = await storage.delete_static_site_bucket("test-project", "site-bucket")

    assert result.is_error is True
    assert result.text.startswith("# Error Deleting Bucket")
    assert "bucket not empty" in result.text
