"""Command execution pipeline tests."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from begetctl.catalog import get_operation
from begetctl.client import CallFailure, CallRequest, CallSuccess
from begetctl.credentials import EffectiveCredentials
from begetctl.errors import ApiMethodError, AuthError, ErrorKind, UsageError
from begetctl.interaction import ScriptedInteraction
from begetctl.logging import StructuredLogger
from begetctl.pipeline import PipelineOptions, execute, simulate

CREDS = EffectiveCredentials(login="u", secret="s", base_url="https://api.example.test/api")


class FakeInvoker:
    """Records calls and returns a fixed outcome."""

    def __init__(self, outcome: CallSuccess | CallFailure | None = None) -> None:
        self.outcome = outcome or CallSuccess(result={"ok": 1})
        self.calls: list[CallRequest] = []

    def __call__(self, credentials: EffectiveCredentials, request: CallRequest) -> object:
        self.calls.append(request)
        return self.outcome


class CredentialLoader:
    """Counts credential resolutions."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls = 0

    def __call__(self) -> EffectiveCredentials:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return CREDS


def _request(group: str, name: str, **kwargs: object) -> CallRequest:
    descriptor = get_operation(group, name)
    return CallRequest(descriptor.section, descriptor.method, **kwargs)  # type: ignore[arg-type]


def test_dry_run_needs_no_credentials_or_network() -> None:
    """Dry-run succeeds with nothing configured and touches nothing."""
    invoker = FakeInvoker()
    loader = CredentialLoader(error=AuthError("no credentials"))
    interaction = ScriptedInteraction(interactive=False)

    result = execute(
        get_operation("sites", "delete"),
        _request("sites", "delete", input_data={"id": 42}),
        options=PipelineOptions(dry_run=True),
        interaction=interaction,
        load_credentials=loader,
        invoker=invoker,
    )

    assert result == {
        "dryRun": True,
        "simulated": True,
        "action": "site.delete",
        "section": "site",
        "method": "delete",
        "inputData": {"id": 42},
        "query": None,
    }
    assert invoker.calls == []
    assert loader.calls == 0
    assert interaction.prompts == []


def test_dry_run_masks_operation_secret_without_acquiring_it() -> None:
    """Secret fields appear masked and no secret is requested."""
    interaction = ScriptedInteraction(interactive=False)

    result = execute(
        get_operation("ftp", "add"),
        _request("ftp", "add", input_data={"suffix": "dev", "homedir": "/site"}),
        options=PipelineOptions(dry_run=True, no_input=True),
        interaction=interaction,
        load_credentials=CredentialLoader(),
        invoker=FakeInvoker(),
        env={},
    )

    assert isinstance(result, dict)
    assert result["inputData"] == {"suffix": "dev", "homedir": "/site", "password": "***"}


def test_dry_run_is_ignored_for_read_operations() -> None:
    """Only mutating operations are simulated."""
    invoker = FakeInvoker(CallSuccess(result=[1, 2]))

    result = execute(
        get_operation("domains", "list"),
        _request("domains", "list"),
        options=PipelineOptions(dry_run=True),
        interaction=ScriptedInteraction(),
        load_credentials=CredentialLoader(),
        invoker=invoker,
    )

    assert result == [1, 2]
    assert len(invoker.calls) == 1


def test_risky_without_bypass_non_interactive_never_calls() -> None:
    """The gate fails closed before credentials or the network are used."""
    invoker = FakeInvoker()
    loader = CredentialLoader()

    with pytest.raises(UsageError) as excinfo:
        execute(
            get_operation("domains", "delete"),
            _request("domains", "delete", input_data={"id": 1}),
            options=PipelineOptions(),
            interaction=ScriptedInteraction(interactive=False),
            load_credentials=loader,
            invoker=invoker,
        )

    assert excinfo.value.exit_code == 2
    assert "Delete domain is risky" in excinfo.value.message
    assert invoker.calls == []
    assert loader.calls == 0


def test_risky_with_bypass_reaches_invoker() -> None:
    """--yes passes the gate without prompting."""
    invoker = FakeInvoker()
    interaction = ScriptedInteraction(interactive=False)

    result = execute(
        get_operation("domains", "delete"),
        _request("domains", "delete", input_data={"id": 1}),
        options=PipelineOptions(assume_yes=True),
        interaction=interaction,
        load_credentials=CredentialLoader(),
        invoker=invoker,
    )

    assert result == {"ok": 1}
    assert len(invoker.calls) == 1
    assert interaction.prompts == []


def test_risky_interactive_prompt_then_cancel() -> None:
    """A declined confirmation stops the pipeline."""
    invoker = FakeInvoker()
    interaction = ScriptedInteraction(answers=["n"])

    with pytest.raises(UsageError, match="Cancelled by user"):
        execute(
            get_operation("mysql", "db-drop"),
            _request("mysql", "db-drop", input_data={"suffix": "db"}),
            options=PipelineOptions(),
            interaction=interaction,
            load_credentials=CredentialLoader(),
            invoker=invoker,
        )

    assert interaction.prompts == ["Drop MySQL database. Continue? [y/N]: "]
    assert invoker.calls == []


def test_operation_secret_injected_from_environment() -> None:
    """Operation secrets are merged into the payload under their field."""
    invoker = FakeInvoker()

    execute(
        get_operation("mail", "mailbox-create"),
        _request("mail", "mailbox-create", input_data={"domain": "d", "mailbox": "m"}),
        options=PipelineOptions(no_input=True),
        interaction=ScriptedInteraction(interactive=False),
        load_credentials=CredentialLoader(),
        invoker=invoker,
        env={"BEGET_MAILBOX_PASSWORD": "mb-secret"},
    )

    assert invoker.calls[0].input_data == {
        "domain": "d",
        "mailbox": "m",
        "mailbox_password": "mb-secret",
    }


def test_missing_operation_secret_non_interactive_fails_before_call() -> None:
    """Without the variable and without a terminal the call is refused."""
    invoker = FakeInvoker()

    with pytest.raises(UsageError, match="BEGET_MYSQL_PASSWORD"):
        execute(
            get_operation("mysql", "db-add"),
            _request("mysql", "db-add", input_data={"suffix": "db"}),
            options=PipelineOptions(),
            interaction=ScriptedInteraction(interactive=False),
            load_credentials=CredentialLoader(),
            invoker=invoker,
            env={},
        )

    assert invoker.calls == []


def test_credential_failure_aborts_before_call() -> None:
    """Resolution errors propagate unchanged."""
    invoker = FakeInvoker()

    with pytest.raises(AuthError):
        execute(
            get_operation("account", "info"),
            _request("account", "info"),
            options=PipelineOptions(),
            interaction=ScriptedInteraction(),
            load_credentials=CredentialLoader(error=AuthError("missing")),
            invoker=invoker,
        )

    assert invoker.calls == []


def test_failure_outcome_is_raised_with_provider_code() -> None:
    """Remote failures surface as the matching error class."""
    invoker = FakeInvoker(CallFailure(ErrorKind.API_METHOD, "x", provider_code="Y"))

    with pytest.raises(ApiMethodError) as excinfo:
        execute(
            get_operation("account", "info"),
            _request("account", "info"),
            options=PipelineOptions(),
            interaction=ScriptedInteraction(),
            load_credentials=CredentialLoader(),
            invoker=invoker,
        )

    assert excinfo.value.message == "x"
    assert excinfo.value.provider_code == "Y"
    assert len(invoker.calls) == 1


def test_steps_are_recorded_in_operation_log(tmp_path: Path) -> None:
    """Each pipeline stage adds a step to the operation scope."""
    logger = StructuredLogger(tmp_path)

    with logger.operation("sites delete") as op:
        execute(
            get_operation("sites", "delete"),
            _request("sites", "delete", input_data={"id": 3}),
            options=PipelineOptions(assume_yes=True),
            interaction=ScriptedInteraction(),
            load_credentials=CredentialLoader(),
            invoker=FakeInvoker(),
            op=op,
        )
        op.success("done")

    record = json.loads((tmp_path / "operations.jsonl").read_text(encoding="utf-8"))
    assert [step["name"] for step in record["steps"]] == [
        "risk.confirm",
        "credentials.resolve",
        "remote.call",
    ]


def test_simulate_masks_secret_keys_in_payload() -> None:
    """Secret-looking keys supplied by the caller are masked too."""
    descriptor = get_operation("domains", "php-version-get")
    request = CallRequest(
        descriptor.section,
        descriptor.method,
        input_data={"password": "p"},
        query={"full_fqdn": "a.example"},
    )

    result = simulate(descriptor, request)

    assert result["inputData"] == {"password": "***"}
    assert result["query"] == {"full_fqdn": "a.example"}
