"""Command execution pipeline shared by every remote operation.

The pipeline is a small state machine::

    start -> [dry-run: simulate, stop] -> [risky: confirm] -> resolve credentials
          -> [operation secret] -> invoke -> result | error

Dry-run stops before anything that needs credentials, prompts, or the network.
The risk gate always runs before the network call, and a failed attempt is
final: nothing here retries.
"""
from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace

from .catalog import OperationDescriptor
from .client import CallFailure, CallOutcome, CallRequest, compact_payload, invoke
from .credentials import EffectiveCredentials
from .errors import UsageError
from .interaction import Interaction, acquire_secret, confirm_risk, interaction_allowed
from .logging import REDACTED, OperationScope, redact

Invoker = Callable[[EffectiveCredentials, CallRequest], CallOutcome]
CredentialLoader = Callable[[], EffectiveCredentials]


@dataclass(frozen=True)
class PipelineOptions:
    """Per-invocation switches that steer the pipeline."""

    dry_run: bool = False
    assume_yes: bool = False
    no_input: bool = False


def simulate(descriptor: OperationDescriptor, request: CallRequest) -> dict[str, object]:
    """Return the dry-run description of *request*; secrets are masked."""
    payload = compact_payload(request.input_data)
    if payload is not None:
        payload = dict(redact(payload))  # type: ignore[arg-type]
    if descriptor.secret is not None:
        payload = dict(payload or {})
        payload[descriptor.secret.field] = REDACTED
    query = {key: value for key, value in (request.query or {}).items() if value is not None}
    return {
        "dryRun": True,
        "simulated": True,
        "action": descriptor.action,
        "section": request.section,
        "method": request.method,
        "inputData": payload,
        "query": query or None,
    }


def execute(
    descriptor: OperationDescriptor,
    request: CallRequest,
    *,
    options: PipelineOptions,
    interaction: Interaction,
    load_credentials: CredentialLoader,
    invoker: Invoker = invoke,
    op: OperationScope | None = None,
    env: Mapping[str, str] | None = None,
) -> object:
    """Run *request* through the pipeline and return its result.

    Returns the simulated description in dry-run mode, otherwise the remote
    ``answer.result``. Every failure is raised as a
    :class:`~begetctl.errors.BegetError` subclass.
    """
    if descriptor.mutates and options.dry_run:
        _step(op, "dry-run", detail=descriptor.address)
        return simulate(descriptor, request)

    allow_interactive = interaction_allowed(interaction, no_input=options.no_input)

    if descriptor.risky:
        try:
            confirm_risk(
                descriptor.risk_label or descriptor.address,
                interaction,
                bypass=options.assume_yes,
                allow_interactive=allow_interactive,
            )
        except UsageError as exc:
            _step(op, "risk.confirm", status="failed", detail=exc.message)
            raise
        _step(op, "risk.confirm", detail="bypassed" if options.assume_yes else "confirmed")

    credentials = load_credentials()
    _step(op, "credentials.resolve", detail=credentials.source_profile or "environment")

    if descriptor.secret is not None:
        spec = descriptor.secret
        secret = acquire_secret(
            spec.env_names,
            spec.prompt,
            interaction,
            allow_interactive=allow_interactive,
            env=os.environ if env is None else env,
        )
        input_data = dict(request.input_data or {})
        input_data[spec.field] = secret
        request = replace(request, input_data=input_data)
        _step(op, "secret.acquire", detail=spec.field)

    outcome = invoker(credentials, request)
    if isinstance(outcome, CallFailure):
        _step(op, "remote.call", status="failed", detail=outcome.message)
        raise outcome.to_error()
    _step(op, "remote.call", detail=request.address)
    return outcome.result


def _step(
    op: OperationScope | None,
    name: str,
    *,
    status: str = "success",
    detail: str | None = None,
) -> None:
    if op is not None:
        op.add_step(name, status=status, detail=detail)


__all__ = [
    "CredentialLoader",
    "Invoker",
    "PipelineOptions",
    "execute",
    "simulate",
]
