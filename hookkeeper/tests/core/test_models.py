"""Unit tests for domain models."""

import pytest

from hookkeeper.core.models import (
    Credential,
    HookConfiguration,
    HookMode,
    JobFailure,
    ProbeResponse,
    ReRegistrationReport,
    ValidationResult,
    ValidationStatus,
)


class TestCredential:
    def test_from_dict_accepts_form_keys(self) -> None:
        credential = Credential.from_dict(
            {"apiUrl": "https://api.github.com", "username": "bot", "oauthAccessToken": "t"}
        )
        assert credential == Credential("https://api.github.com", "bot", "t")

    def test_empty_api_url_rejected(self) -> None:
        with pytest.raises(ValueError):
            Credential(api_url=" ", username="bot")

    def test_token_hidden_from_repr(self) -> None:
        credential = Credential("https://api.github.com", "bot", "ghp_secret")
        assert "ghp_secret" not in repr(credential)

    def test_to_dict_redacts_token(self) -> None:
        credential = Credential("https://api.github.com", "bot", "ghp_secret")
        assert credential.to_dict(redact=True)["oauth_access_token"] == "****"
        assert credential.to_dict()["oauth_access_token"] == "ghp_secret"


class TestHookConfiguration:
    def test_defaults(self) -> None:
        config = HookConfiguration()
        assert config.manage_hook is True
        assert config.mode is HookMode.AUTO
        assert not config.has_override
        assert config.credentials == ()

    def test_list_credentials_become_tuple(self) -> None:
        credential = Credential("https://api.github.com", "bot")
        config = HookConfiguration(True, None, [credential])  # type: ignore[arg-type]
        assert config.credentials == (credential,)

    def test_manual_mode(self) -> None:
        assert HookConfiguration(manage_hook=False).mode is HookMode.MANUAL


class TestValidationResult:
    def test_constructors(self) -> None:
        assert ValidationResult.ok().status is ValidationStatus.OK
        assert ValidationResult.warning("hm").is_warning
        assert ValidationResult.error("no", reason="network_error").is_error

    def test_to_dict(self) -> None:
        result = ValidationResult.error("Got 500 from x", reason="unexpected_status")
        assert result.to_dict() == {
            "status": "error",
            "message": "Got 500 from x",
            "reason": "unexpected_status",
        }


class TestProbeResponse:
    def test_headers_are_case_insensitive_and_read_only(self) -> None:
        response = ProbeResponse(200, {"X-Instance-Identity": "abc"})
        assert response.header("x-instance-identity") == "abc"
        assert response.header("X-INSTANCE-IDENTITY") == "abc"
        with pytest.raises(TypeError):
            response.headers["new"] = "value"  # type: ignore[index]


class TestReRegistrationReport:
    def test_negative_count_rejected(self) -> None:
        with pytest.raises(ValueError):
            ReRegistrationReport(jobs_triggered=-1)

    def test_more_failures_than_jobs_rejected(self) -> None:
        with pytest.raises(ValueError):
            ReRegistrationReport(
                jobs_triggered=0, failures=(JobFailure("a", "boom"),)
            )

    def test_succeeded(self) -> None:
        report = ReRegistrationReport(3, (JobFailure("a", "boom"),))
        assert report.succeeded == 2
