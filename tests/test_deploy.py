"""Tests for core/deploy.py — the saga runner and the bucket + VM deploy."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from core import compute, deploy
from core.deploy import DeploymentFailed, SagaStep, run_saga


# ---------------------------------------------------------------------------
# run_saga
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_run_saga_runs_every_step_in_order():
    order = []

    def step(name):
        return SagaStep(name, action=AsyncMock(side_effect=lambda: order.append(name)))

    report = await run_saga([step("a"), step("b"), step("c")])

    assert order == ["a", "b", "c"]
    assert report.completed == ["a", "b", "c"]
    assert report.compensated == []


@pytest.mark.asyncio
async def test_run_saga_unwinds_completed_steps_newest_first():
    undone = []
    first = SagaStep("first", AsyncMock(), AsyncMock(side_effect=lambda: undone.append("first")))
    second = SagaStep("second", AsyncMock(), AsyncMock(side_effect=lambda: undone.append("second")))
    failing = SagaStep("third", AsyncMock(side_effect=RuntimeError("kaboom")), AsyncMock())

    with pytest.raises(DeploymentFailed) as excinfo:
        await run_saga([first, second, failing])

    assert undone == ["second", "first"]
    failing.compensate.assert_not_awaited()
    assert excinfo.value.step == "third"
    assert excinfo.value.report.completed == ["first", "second"]
    assert "Step 'third' failed: kaboom" in str(excinfo.value)
    assert "Rolled back: second, first" in str(excinfo.value)


@pytest.mark.asyncio
async def test_run_saga_keeps_original_error_when_compensation_fails():
    first = SagaStep("first", AsyncMock(), AsyncMock(side_effect=RuntimeError("undo broke")))
    failing = SagaStep("second", AsyncMock(side_effect=RuntimeError("original")))

    with pytest.raises(DeploymentFailed) as excinfo:
        await run_saga([first, failing])

    message = str(excinfo.value)
    assert "Step 'second' failed: original" in message
    assert "Rollback errors: first: undo broke" in message
    assert excinfo.value.report.compensated == []


# ---------------------------------------------------------------------------
# deploy-static-site-from-html
# ---------------------------------------------------------------------------
@pytest.fixture
def recorded_calls(storage_client, instances_client):
    """Record every cloud call of the deploy, in the order it happens."""
    calls = []
    bucket = MagicMock(name="Bucket")
    bucket.patch.side_effect = lambda: calls.append(
        ("patch", bucket.iam_configuration.uniform_bucket_level_access_enabled)
    )

    def create_bucket(name, location):
        calls.append(("create_bucket", name, location))
        return bucket

    def insert(**kwargs):
        calls.append(("insert", kwargs["project"], kwargs["zone"], kwargs["instance_resource"]))
        return SimpleNamespace(name="operation-42")

    blob = storage_client.bucket.return_value.blob.return_value
    blob.upload_from_string.side_effect = lambda data, content_type: calls.append(
        ("upload", data, content_type)
    )
    blob.make_public.side_effect = lambda: calls.append(("make_public",))
    storage_client.create_bucket.side_effect = create_bucket
    instances_client.insert.side_effect = insert
    return calls


@pytest.mark.asyncio
async def test_deploy_runs_steps_in_order(recorded_calls, storage_client):
    html = "<h1>x</h1>"

    result = await deploy.deploy_static_site_from_html(
        "p", "us-central1-a", "site-vm", "b", html
    )

    assert result.is_error is False
    assert [c[0] for c in recorded_calls] == [
        "create_bucket", "patch", "upload", "make_public", "insert",
    ]
    assert recorded_calls[0] == ("create_bucket", "b", "US")
    assert recorded_calls[1] == ("patch", True)
    assert recorded_calls[2] == ("upload", html, "text/html")

    _, project, zone, instance = recorded_calls[4]
    assert (project, zone) == ("p", "us-central1-a")
    assert instance.name == "site-vm"
    assert list(instance.service_accounts[0].scopes) == [compute.STORAGE_READ_ONLY_SCOPE]
    script = {item.key: item.value for item in instance.metadata.items}["startup-script"]
    assert "gs://b " in script

    storage_client.factory.assert_called_with("p")
    assert "create-bucket → enable-uniform-access → upload-html → create-vm" in result.text
    assert "https://storage.googleapis.com/b/index.html" in result.text
    assert '"operation": "operation-42"' in result.text


@pytest.mark.asyncio
async def test_deploy_rolls_back_when_vm_creation_fails(recorded_calls, storage_client, instances_client):
    instances_client.insert.side_effect = RuntimeError("ZONE_RESOURCE_POOL_EXHAUSTED")

    result = await deploy.deploy_static_site_from_html(
        "test-project", "us-central1-a", "site-vm", "site-bucket", "<p/>"
    )

    assert result.is_error is True
    assert result.text.startswith("# Error Deploying Static Site")
    assert "Step 'create-vm' failed: ZONE_RESOURCE_POOL_EXHAUSTED" in result.text
    assert "Rolled back: upload-html, create-bucket" in result.text

    bucket = storage_client.bucket.return_value
    bucket.blob.return_value.delete.assert_called_once_with()
    bucket.delete.assert_called_once_with(force=True)


@pytest.mark.asyncio
async def test_deploy_stops_at_first_failed_step(recorded_calls, storage_client, instances_client):
    storage_client.create_bucket.side_effect = RuntimeError("bucket name taken")

    result = await deploy.deploy_static_site_from_html(
        "test-project", "us-central1-a", "site-vm", "site-bucket", "<p/>"
    )

    assert result.is_error is True
    assert "Step 'create-bucket' failed: bucket name taken" in result.text
    assert "Rolled back" not in result.text
    storage_client.bucket.return_value.blob.return_value.upload_from_string.assert_not_called()
    instances_client.insert.assert_not_called()


@pytest.mark.asyncio
async def test_deploy_deletes_bucket_when_uniform_access_fails(recorded_calls, storage_client, instances_client):
    rejected = MagicMock(name="Bucket")
    rejected.patch.side_effect = RuntimeError("412 uniform access blocked by org policy")
    storage_client.create_bucket.side_effect = None
    storage_client.create_bucket.return_value = rejected

    result = await deploy.deploy_static_site_from_html("p", "us-central1-a", "site-vm", "b", "<p/>")

    assert result.is_error is True
    assert "Step 'enable-uniform-access' failed: 412 uniform access blocked by org policy" in result.text
    assert "Rolled back: create-bucket" in result.text
    storage_client.bucket.assert_called_with("b")
    storage_client.bucket.return_value.delete.assert_called_once_with(force=True)
    storage_client.bucket.return_value.blob.return_value.upload_from_string.assert_not_called()
    instances_client.insert.assert_not_called()


@pytest.mark.asyncio
async def test_deploy_rolls_back_bucket_when_upload_fails(recorded_calls, storage_client, instances_client):
    bucket = storage_client.bucket.return_value
    bucket.blob.return_value.upload_from_string.side_effect = RuntimeError("403 storage.objects.create denied")

    result = await deploy.deploy_static_site_from_html("p", "us-central1-a", "site-vm", "b", "<p/>")

    assert result.is_error is True
    assert "Step 'upload-html' failed: 403 storage.objects.create denied" in result.text
    assert "Rolled back: create-bucket" in result.text
    bucket.delete.assert_called_once_with(force=True)
    bucket.blob.return_value.delete.assert_not_called()
    instances_client.insert.assert_not_called()
