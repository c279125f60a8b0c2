"""Tests for authorization request and callback models."""

from urllib.parse import parse_qs, urlparse

from graphlogin.models.flow import AuthorizationRequest, CallbackParameters


class TestAuthorizationRequest:
    """Test login dialog URL construction."""

    def setup_method(self):
        # Arrange
        self.request = AuthorizationRequest(
            dialog_base_url="https://www.facebook.com",
            api_version="v2.0",
            client_id="123",
            redirect_url="https://app.example/cb",
            state="a" * 32,
            sdk="python-sdk-0.1.0",
            scope=("email", "public_profile"),
        )

    def test_builds_dialog_url(self):
        """Test the dialog URL carries every required parameter."""
        # Act
        url = self.request.build_authorization_url()

        # Assert
        parsed = urlparse(url)
        assert parsed.netloc == "www.facebook.com"
        assert parsed.path == "/v2.0/dialog/oauth"
        assert parse_qs(parsed.query) == {
            "client_id": ["123"],
            "redirect_uri": ["https://app.example/cb"],
            "state": ["a" * 32],
            "sdk": ["python-sdk-0.1.0"],
            "scope": ["email,public_profile"],
        }

    def test_parameter_order(self):
        """Test parameters come out in the documented order."""
        assert list(self.request.to_params()) == [
            "client_id",
            "redirect_uri",
            "state",
            "sdk",
            "scope",
        ]

    def test_empty_scope_is_sent_empty(self):
        """Test an empty scope still produces the scope parameter."""
        request = AuthorizationRequest(
            dialog_base_url="https://www.facebook.com",
            api_version="v2.0",
            client_id="123",
            redirect_url="https://app.example/cb",
            state="s",
            sdk="sdk",
        )

        assert request.to_params()["scope"] == ""


class TestCallbackParameters:
    """Test parsing of the redirect back from the login dialog."""

    def test_from_url(self):
        """Test code and state are read from a callback URL."""
        # Act
        callback = CallbackParameters.from_url(
            "https://app.example/cb?code=abc&state=xyz&foo=bar"
        )

        # Assert
        assert callback.code == "abc"
        assert callback.state == "xyz"
        assert callback.is_success()
        assert not callback.is_error()

    def test_from_query_takes_first_of_multiple_values(self):
        """Test multi-valued entries use their first value."""
        callback = CallbackParameters.from_query({"code": ["one", "two"]})

        assert callback.code == "one"

    def test_duplicate_params_agree_across_constructors(self):
        """Test from_url and from_query pick the same duplicate value."""
        # Arrange
        url = "https://app.example/cb?code=c&state=a&state=b"

        # Act
        from_url = CallbackParameters.from_url(url)
        from_query = CallbackParameters.from_query(parse_qs(urlparse(url).query))

        # Assert
        assert from_url.state == "a"
        assert from_url == from_query

    def test_empty_values_are_absent(self):
        """Test empty strings and empty lists count as missing."""
        callback = CallbackParameters.from_query({"code": "", "state": []})

        assert callback.code is None
        assert callback.state is None

    def test_error_callback(self):
        """Test a declined login exposes the provider's error fields."""
        # Act
        callback = CallbackParameters.from_query(
            {
                "error": "access_denied",
                "error_code": "200",
                "error_reason": "user_denied",
                "error_description": "Permissions error",
            }
        )

        # Assert
        assert callback.is_error()
        assert not callback.is_success()
        assert callback.error_reason == "user_denied"
        assert callback.error_code == "200"
