# =============================================================================
# core/deploy.py  —  Orchestrated static-site deploy (bucket + object + VM)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   deploy_static_site_from_html() performs four dependent cloud operations
#   as ONE user-facing action:
#
#     create-bucket → enable-uniform-access → upload-html → create-vm
#
#   The steps run strictly in that order.  The VM's startup script pulls the
#   bucket contents with gsutil, so the VM gets the storage read-only scope.
#
# THE SAGA RUNNER:
#   Cloud APIs give no multi-resource transaction, so each step may carry a
#   compensating action.  If a step fails, run_saga() undoes the steps that
#   already completed, newest first, then raises DeploymentFailed.
#
#     create-bucket          ↔  delete bucket (force: also removes objects)
#     enable-uniform-access  ↔  (covered by deleting the bucket)
#     upload-html            ↔  delete the uploaded object
#     create-vm              ↔  (last step, nothing to undo)
#
#   Bucket creation and its uniform-access PATCH are separate steps so a
#   rejected PATCH still finds a completed create-bucket step to undo.
#
#   A compensation that itself fails is logged and listed in the error; it
#   never replaces the original failure.
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from core import compute, storage
from core.models import ToolResult
from core.results import error_message, reports_errors

logger = logging.getLogger(__name__)


@dataclass
class SagaStep:
    name: str
    action: Callable[[], Awaitable[Any]]
    compensate: Optional[Callable[[], Awaitable[Any]]] = None


@dataclass
class SagaReport:
    completed: list[str] = field(default_factory=list)
    compensated: list[str] = field(default_factory=list)
    compensation_errors: list[str] = field(default_factory=list)


class DeploymentFailed(RuntimeError):
    """A saga step failed; completed steps have been unwound where possible."""

    def __init__(self, step: str, cause: BaseException, report: SagaReport):
        self.step = step
        self.cause = cause
        self.report = report

        message = f"Step '{step}' failed: {error_message(cause)}"
        if report.compensated:
            message += f"\nRolled back: {', '.join(report.compensated)}"
        if report.compensation_errors:
            message += "\nRollback errors: " + "; ".join(report.compensation_errors)
        super().__init__(message)


async def run_saga(steps: list[SagaStep]) -> SagaReport:
    """Run steps in order; on failure unwind completed steps in reverse."""
    report = SagaReport()
    done: list[SagaStep] = []

    for step in steps:
        try:
            await step.action()
        except Exception as e:
            logger.warning("Saga step %s failed: %s", step.name, error_message(e))
            for finished in reversed(done):
                if finished.compensate is None:
                    continue
                try:
                    await finished.compensate()
                    report.compensated.append(finished.name)
                except Exception as undo_error:
                    logger.warning(
                        "Compensation for %s failed: %s", finished.name, error_message(undo_error)
                    )
                    report.compensation_errors.append(
                        f"{finished.name}: {error_message(undo_error)}"
                    )
            raise DeploymentFailed(step.name, e, report) from e

        done.append(step)
        report.completed.append(step.name)

    return report


@reports_errors("Deploying Static Site")
async def deploy_static_site_from_html(
    project: str, zone: str, vm_name: str, bucket_name: str, html_content: str
) -> ToolResult:
    state: dict[str, Any] = {}

    async def create_bucket() -> None:
        state["bucket"] = await storage.create_bucket(project, bucket_name, storage.DEFAULT_LOCATION)

    async def create_vm() -> None:
        instance = compute.static_site_instance(
            vm_name,
            zone,
            compute.bucket_sync_startup_script(bucket_name),
            scopes=[compute.STORAGE_READ_ONLY_SCOPE],
        )
        state["vm"] = await compute.insert_instance(project, zone, instance)

    steps = [
        SagaStep(
            "create-bucket",
            action=create_bucket,
            compensate=lambda: storage.delete_bucket(project, bucket_name, force=True),
        ),
        SagaStep("enable-uniform-access", action=lambda: storage.enable_uniform_access(state["bucket"])),
        SagaStep(
            "upload-html",
            action=lambda: storage.upload_site_html(project, bucket_name, html_content),
            compensate=lambda: storage.delete_object(project, bucket_name, storage.DEFAULT_FILE_NAME),
        ),
        SagaStep("create-vm", action=create_vm),
    ]
    report = await run_saga(steps)

    echo = compute.operation_echo(
        state.get("vm"), instance=vm_name, zone=zone, bucket=bucket_name
    )
    return ToolResult.ok(
        f"# Deploy Started\n\n"
        f"Steps: {' → '.join(report.completed)}\n"
        f"Site object: {storage.public_url(bucket_name, storage.DEFAULT_FILE_NAME)}\n\n"
        f"Operation: {echo}"
    )
