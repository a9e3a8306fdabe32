"""
Tests for the rule catalog

Each rule is exercised directly through the catalog, without a Validator.
"""
import re

import pytest

from field_validation.errors import RuleConfigurationError, UnknownRuleError
from field_validation.messages import MESSAGES
from field_validation.rules import RULE_CATALOG, get_rule, is_empty, strictly_equal


def passes(rule_name, value, argument=None, **other_fields):
    """Run one rule against {"field": value, **other_fields}."""
    rule = get_rule(rule_name)
    data = dict(other_fields)
    if value is not _ABSENT:
        data["field"] = value
    return rule.passes("field", data, rule.prepare(argument))


_ABSENT = object()


class TestCatalog:
    """Test catalog construction and lookup."""

    def test_catalog_contents(self):
        """Test that the catalog holds exactly the fixed rule set."""
        assert set(RULE_CATALOG) == {
            "required", "strong", "min", "max", "email", "alfa", "alfa_num",
            "confirmed", "same", "accepted", "url", "regex", "ip", "boolean",
        }

    def test_string_is_a_message_not_a_rule(self):
        """Test that 'string' is only a message key."""
        assert "string" in MESSAGES
        with pytest.raises(UnknownRuleError):
            get_rule("string")

    def test_unknown_rule(self):
        """Test that unknown names raise a lookup error."""
        with pytest.raises(LookupError) as exc_info:
            get_rule("frobnicate")
        assert exc_info.value.rule == "frobnicate"

    def test_catalog_is_read_only(self):
        """Test that rules cannot be registered at runtime."""
        with pytest.raises(TypeError):
            RULE_CATALOG["custom"] = get_rule("required")

    def test_every_rule_has_a_message(self):
        """Test that every rule points at an existing message."""
        for rule in RULE_CATALOG.values():
            assert rule.message_key in MESSAGES

    def test_alfa_uses_string_message(self):
        """Test the alfa/alfa_num message key mapping."""
        assert get_rule("alfa").message_key == "string"
        assert get_rule("alfa_num").message_key == "alpha_num"


class TestHelpers:
    """Test emptiness and strict equality helpers."""

    @pytest.mark.parametrize("value", [None, False, "", "0", 0, 0.0, [], {}])
    def test_empty_values(self, value):
        """Test values treated as empty."""
        assert is_empty(value)

    @pytest.mark.parametrize("value", [True, "a", " ", "false", "00", 1, -1, 0.5, [0]])
    def test_non_empty_values(self, value):
        """Test values treated as present."""
        assert not is_empty(value)

    def test_strictly_equal_requires_same_type(self):
        """Test that strict equality compares types."""
        assert strictly_equal("1", "1")
        assert not strictly_equal("1", 1)
        assert not strictly_equal(True, 1)
        assert not strictly_equal(None, "")


class TestArguments:
    """Test argument checking in prepare()."""

    @pytest.mark.parametrize("rule_name", ["min", "max", "same", "regex"])
    def test_missing_argument(self, rule_name):
        """Test that parameterized rules need an argument."""
        with pytest.raises(RuleConfigurationError):
            get_rule(rule_name).prepare(None)

    @pytest.mark.parametrize("rule_name", ["min", "max", "same", "regex"])
    def test_empty_argument(self, rule_name):
        """Test that 'min:' counts as a missing argument."""
        with pytest.raises(RuleConfigurationError):
            get_rule(rule_name).prepare("")

    @pytest.mark.parametrize("bound", ["abc", "-1", "8.5", " 8"])
    def test_length_bound_must_be_integer(self, bound):
        """Test that min/max bounds must be digits."""
        with pytest.raises(RuleConfigurationError):
            get_rule("min").prepare(bound)

    def test_length_bound_converted(self):
        """Test that bounds become ints."""
        assert get_rule("max").prepare("50") == 50

    def test_unexpected_argument(self):
        """Test that argument-less rules reject an argument."""
        with pytest.raises(RuleConfigurationError):
            get_rule("required").prepare("yes")

    def test_invalid_regex(self):
        """Test that a broken pattern is a configuration error."""
        with pytest.raises(RuleConfigurationError):
            get_rule("regex").prepare("/([a-z/")

    @pytest.mark.parametrize("pattern", [r"^\d{3}$", "abc", "^abc$"])
    def test_undelimited_regex(self, pattern):
        """Test that a pattern without delimiters is a configuration error."""
        with pytest.raises(RuleConfigurationError):
            get_rule("regex").prepare(pattern)

    def test_path_pattern_needs_escaped_slashes(self):
        """Test that an unescaped slash inside /.../ is reported, not guessed."""
        with pytest.raises(RuleConfigurationError, match="escape '/'"):
            get_rule("regex").prepare("/home/user")

    def test_unsupported_regex_flag(self):
        """Test that unknown delimiter flags are rejected."""
        with pytest.raises(RuleConfigurationError):
            get_rule("regex").prepare("/abc/q")

    def test_delimited_regex_flags(self):
        """Test that /pattern/i compiles case-insensitively."""
        pattern = get_rule("regex").prepare("/^abc$/i")
        assert pattern.pattern == "^abc$"
        assert pattern.flags & re.IGNORECASE


class TestRequired:
    """Test the required rule."""

    def test_missing_key(self):
        """Test that an absent field fails."""
        assert not passes("required", _ABSENT)

    @pytest.mark.parametrize("value", ["", 0, "0", False, [], None])
    def test_empty_values_fail(self, value):
        """Test that empty-like values fail."""
        assert not passes("required", value)

    @pytest.mark.parametrize("value", ["john", " ", 1, True, "false", ["a"]])
    def test_present_values_pass(self, value):
        """Test that non-empty values pass."""
        assert passes("required", value)


class TestLength:
    """Test the min and max rules."""

    def test_min_boundary(self):
        """Test that min:8 accepts exactly 8 characters."""
        assert passes("min", "abcdefgh", "8")
        assert not passes("min", "abcdefg", "8")

    def test_max_boundary(self):
        """Test that max:8 rejects exactly 8 characters."""
        assert not passes("max", "abcdefgh", "8")
        assert passes("max", "abcdefg", "8")

    def test_empty_values_skip(self):
        """Test that empty values pass both bounds."""
        for value in ("", None, "0", _ABSENT):
            assert passes("min", value, "2")
            assert passes("max", value, "0")

    def test_counts_characters_not_bytes(self):
        """Test that multibyte characters count once."""
        assert passes("max", "ééé", "4")
        assert not passes("min", "ééé", "4")

    def test_numbers_measured_as_text(self):
        """Test that numeric values are measured by their digits."""
        assert passes("min", 12345, "5")
        assert not passes("max", 12345, "5")


class TestStrong:
    """Test the strong rule."""

    def test_strong_password(self):
        """Test a password with all required classes."""
        assert passes("strong", "Passw0rd")

    @pytest.mark.parametrize("value", [
        "password1",      # no uppercase
        "PASSWORD1",      # no lowercase
        "Password",       # no digit
        "Pa55w0r",        # too short
        "Pass w0rd1",     # whitespace
        "123456789",      # digits only
    ])
    def test_weak_passwords(self, value):
        """Test passwords missing a requirement."""
        assert not passes("strong", value)

    def test_empty_skips(self):
        """Test that an empty value passes."""
        assert passes("strong", "")
        assert passes("strong", _ABSENT)


class TestEmail:
    """Test the email rule."""

    def test_valid_address(self):
        """Test a plain valid address."""
        assert passes("email", "test@gmail.com")

    @pytest.mark.parametrize("value", [
        "not-an-email", "a@", "@gmail.com", "a b@gmail.com", "user@localhost", "a@b.local",
    ])
    def test_invalid_addresses(self, value):
        """Test syntactically invalid addresses."""
        assert not passes("email", value)

    @pytest.mark.parametrize("value", ["user@mail.test", "user@test"])
    def test_test_domains(self, value):
        """Test that .test domains are accepted."""
        assert passes("email", value)

    def test_empty_skips(self):
        """Test that empty values pass."""
        assert passes("email", "")
        assert passes("email", None)


class TestAlfa:
    """Test the alfa and alfa_num rules."""

    def test_letters_pass(self):
        """Test ASCII letters."""
        assert passes("alfa", "John")

    @pytest.mark.parametrize("value", ["John1", "John Doe", "Jöhn", "", None, _ABSENT])
    def test_alfa_failures(self, value):
        """Test that anything but letters fails, including empty."""
        assert not passes("alfa", value)

    def test_alfa_num_passes(self):
        """Test letters and digits."""
        assert passes("alfa_num", "abc123")
        assert passes("alfa_num", "123")

    @pytest.mark.parametrize("value", ["abc 123", "abc_123", "", None])
    def test_alfa_num_failures(self, value):
        """Test that symbols and empty values fail."""
        assert not passes("alfa_num", value)


class TestComparison:
    """Test the confirmed and same rules."""

    def test_confirmed_matches(self):
        """Test a matching confirmation."""
        assert passes("confirmed", "secret", password_confirmation="secret")

    def test_confirmed_mismatch(self):
        """Test a differing confirmation."""
        assert not passes("confirmed", "secret", password_confirmation="Secret")

    def test_confirmed_references_confirmation_field(self):
        """Test that confirmed reads password_confirmation."""
        assert get_rule("confirmed").references(None) == ["password_confirmation"]

    def test_same_matches(self):
        """Test equal values."""
        assert passes("same", "abc", "other", other="abc")

    def test_same_is_strict(self):
        """Test that "1" and 1 differ."""
        assert not passes("same", "1", "other", other=1)

    @pytest.mark.parametrize("value", ["", None, _ABSENT])
    def test_same_skips_empty(self, value):
        """Test that an empty or absent value passes."""
        assert passes("same", value, "other", other="abc")

    def test_same_against_empty_other(self):
        """Test that a filled value still fails against an empty field."""
        assert not passes("same", "abc", "other", other="")

    @pytest.mark.parametrize("value", ["", None, _ABSENT])
    def test_confirmed_skips_empty(self, value):
        """Test that an empty or absent value passes."""
        assert passes("confirmed", value, password_confirmation="secret")

    def test_same_message_value_is_field_name(self):
        """Test that the message receives the other field's name."""
        assert get_rule("same").message_value("password_confirm") == "password_confirm"


class TestAccepted:
    """Test the accepted rule."""

    @pytest.mark.parametrize("value", ["1", "yes", True, "on"])
    def test_accepted_values(self, value):
        """Test the exact accepted tokens."""
        assert passes("accepted", value)

    @pytest.mark.parametrize("value", ["true", 1, "Yes", "ON", "", None, "0", False, _ABSENT])
    def test_rejected_values(self, value):
        """Test near misses."""
        assert not passes("accepted", value)


class TestUrl:
    """Test the url rule."""

    @pytest.mark.parametrize("value", [
        "https://example.com/path?q=1",
        "http://localhost:8080",
        "ftp://files.example.org/pub",
        "mailto:user@example.com",
        "file:///tmp/report.txt",
    ])
    def test_valid_urls(self, value):
        """Test well-formed URLs."""
        assert passes("url", value)

    @pytest.mark.parametrize("value", [
        "example.com",
        "http://",
        "not a url",
        "http://exa mple.com",
        "http://example.com:99999",
    ])
    def test_invalid_urls(self, value):
        """Test malformed URLs."""
        assert not passes("url", value)

    @pytest.mark.parametrize("value", ["", None, _ABSENT])
    def test_empty_skips(self, value):
        """Test that empty or absent values pass."""
        assert passes("url", value)


class TestRegex:
    """Test the regex rule."""

    def test_delimited_pattern(self):
        """Test a /.../ pattern."""
        assert passes("regex", "abc", "/^[a-z]+$/")
        assert not passes("regex", "abc1", "/^[a-z]+$/")

    def test_escaped_slashes(self):
        """Test a path pattern with escaped slashes."""
        assert passes("regex", "/home/user", r"/^\/home\/user$/")
        assert not passes("regex", "/home/other", r"/^\/home\/user$/")

    def test_hash_delimiter(self):
        """Test that # delimiters keep slashes literal."""
        assert passes("regex", "/home/user", "#^/home/#")
        assert passes("regex", "/HOME/user", "#^/home/#i")

    @pytest.mark.parametrize("value", ["", None, _ABSENT])
    def test_empty_skips(self, value):
        """Test that empty or absent values pass."""
        assert passes("regex", value, "/^[a-z]+$/")

    def test_case_insensitive_flag(self):
        """Test the i flag."""
        assert passes("regex", "ABC", "/^abc$/i")

    def test_pattern_with_colon(self):
        """Test that colons inside the pattern survive parsing."""
        assert passes("regex", "10:30", r"/^\d\d:\d\d$/")

    def test_message_value_is_pattern(self):
        """Test that the compiled pattern text feeds the message."""
        rule = get_rule("regex")
        assert rule.message_value(rule.prepare("/^a$/")) == "^a$"


class TestIp:
    """Test the ip rule."""

    @pytest.mark.parametrize("value", ["192.168.0.1", "::1", "2001:db8::1"])
    def test_valid_addresses(self, value):
        """Test IPv4 and IPv6 addresses."""
        assert passes("ip", value)

    @pytest.mark.parametrize("value", ["256.1.1.1", "abc", 1])
    def test_invalid_addresses(self, value):
        """Test malformed addresses and non-strings."""
        assert not passes("ip", value)

    @pytest.mark.parametrize("value", ["", None, _ABSENT])
    def test_empty_skips(self, value):
        """Test that empty or absent values pass."""
        assert passes("ip", value)


class TestBoolean:
    """Test the boolean rule."""

    @pytest.mark.parametrize("value", [
        True, False, 1, 0, "1", "0", "true", "FALSE", "on", "off", "yes", "no",
    ])
    def test_boolean_like(self, value):
        """Test accepted boolean tokens."""
        assert passes("boolean", value)

    @pytest.mark.parametrize("value", ["maybe", 2, 1.0])
    def test_not_boolean(self, value):
        """Test values outside the token set."""
        assert not passes("boolean", value)

    @pytest.mark.parametrize("value", ["", None, _ABSENT])
    def test_empty_skips(self, value):
        """Test that empty or absent values pass."""
        assert passes("boolean", value)
