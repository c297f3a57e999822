"""Unit tests for credential records."""

import pytest
from pydantic import ValidationError

from tickbooks.models.credentials import Credentials, CredentialSet


class TestCredentials:
    """Test Credentials."""

    def test_trailing_slash_removed(self):
        credentials = Credentials(base_url=" https://acme.tickspot.com/ ", identity="a@b.c")

        assert credentials.base_url == "https://acme.tickspot.com"
        assert credentials.secret == ""

    def test_blank_url_rejected(self):
        with pytest.raises(ValidationError):
            Credentials(base_url="   ", identity="a@b.c")

    def test_identity_required(self):
        with pytest.raises(ValidationError):
            Credentials(base_url="https://acme.tickspot.com", identity="")

    def test_repr_hides_secret(self, tick_credentials):
        assert "tick-secret" not in repr(tick_credentials)
        assert "tick-secret" not in str(tick_credentials)
        assert "billing@acme.test" in repr(tick_credentials)

    def test_credential_set(self, credential_set):
        assert isinstance(credential_set, CredentialSet)
        assert credential_set.invoicing.identity == "fb-token"
