"""Tests for media type parsing and codec dispatch."""

import io
import json
from dataclasses import dataclass, field

import pytest
from mediahttp import CodecNotFound, CodecRegistry, DecodeError, EncodeError, ParseError, parse
from pydantic import BaseModel


class User(BaseModel):
    id: int = 0
    login: str = ""


class Wrapped(BaseModel):
    user: User = User()
    tags: list[str] = []


@dataclass
class Inner:
    value: int = 0


@dataclass
class Outer:
    name: str = ""
    inner: Inner = field(default_factory=Inner)


class TestParse:
    """Tests for parse()."""

    def test_bare_json(self):
        """Test that a bare subtype is its own format."""
        mt = parse("application/json")
        assert mt.main_type == "application"
        assert mt.sub_type == "json"
        assert mt.suffix == ""
        assert mt.format == "json"
        assert mt.is_vendor() is False

    def test_vendor_type_with_suffix(self):
        """Test vendor, version, param and suffix extraction."""
        mt = parse("application/vnd.github.v3.raw+json")
        assert mt.vendor == "github"
        assert mt.version == "v3"
        assert mt.param == "raw"
        assert mt.suffix == "json"
        assert mt.format == "json"
        assert mt.is_vendor() is True

    def test_vendor_without_version(self):
        """Test that a non-version segment becomes the param."""
        mt = parse("application/vnd.foo.full+json")
        assert mt.vendor == "foo"
        assert mt.version == ""
        assert mt.param == "full"

    def test_last_plus_segment_is_suffix(self):
        """Test that the suffix follows the last '+'."""
        mt = parse("application/vnd.a+b+yaml")
        assert mt.suffix == "yaml"
        assert mt.format == "yaml"

    def test_unregistered_suffix_is_format(self):
        """Test format extraction for unknown suffixes."""
        assert parse("application/booya+booya").format == "booya"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("application/x-yaml", "yaml"),
            ("text/yaml", "yaml"),
            ("application/yml", "yaml"),
            ("application/x-json", "json"),
            ("application/x-msgpack", "msgpack"),
        ],
    )
    def test_format_aliases(self, raw, expected):
        """Test well-known aliases for bare subtypes."""
        assert parse(raw).format == expected

    def test_case_insensitive(self):
        """Test that type, subtype and parameter names are lower-cased."""
        mt = parse("Application/VND.Foo+JSON; Charset=UTF-8")
        assert mt.base_type == "application/vnd.foo+json"
        assert mt.format == "json"
        assert mt.params == {"charset": "UTF-8"}

    def test_parameters(self):
        """Test token and quoted-string parameters."""
        mt = parse('text/plain; charset=utf-8; title="a; \\"b\\""')
        assert mt.params == {"charset": "utf-8", "title": 'a; "b"'}

    def test_string_is_canonical(self):
        """Test that equivalent inputs render identically."""
        first = parse("application/json;charset=utf-8;q=1")
        second = parse("APPLICATION/JSON;  q=1 ; charset=utf-8")
        assert str(first) == "application/json; charset=utf-8; q=1"
        assert str(first) == str(second)
        assert first == second

    def test_string_quotes_non_token_values(self):
        """Test that values with separators are quoted on render."""
        mt = parse('text/plain; title="hello world"')
        assert str(mt) == 'text/plain; title="hello world"'
        assert parse(str(mt)) == mt

    def test_parse_is_cached(self):
        """Test that repeated headers reuse the parsed value."""
        assert parse("application/json") is parse("application/json")

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "json",
            "application/",
            "/json",
            "application/json/x",
            "app lication/json",
            "application/+json",
            "application/vnd.foo+",
            "application/json; charset",
            "application/json; =utf-8",
        ],
    )
    def test_malformed_raises(self, raw):
        """Test that malformed strings fail with ParseError."""
        with pytest.raises(ParseError):
            parse(raw)

    def test_parse_error_is_value_error(self):
        """Test that ParseError can be caught as ValueError."""
        with pytest.raises(ValueError, match="Invalid media type"):
            parse("nonsense")


class TestEncode:
    """Tests for MediaType.encode()."""

    def test_encode_dict(self, registry):
        """Test encoding a dict as JSON."""
        data = parse("application/json").encode({"login": "sawyer"}, registry)
        assert json.loads(data) == {"login": "sawyer"}

    def test_encode_model(self, registry):
        """Test encoding a pydantic model."""
        data = parse("application/vnd.api+json").encode(User(id=1, login="sawyer"), registry)
        assert json.loads(data) == {"id": 1, "login": "sawyer"}

    def test_encode_does_not_mutate(self, registry):
        """Test that the encoded value is left untouched."""
        value = {"user": User(id=2, login="x"), "tags": ("a", "b")}
        parse("application/x-yaml").encode(value, registry)
        assert value == {"user": User(id=2, login="x"), "tags": ("a", "b")}

    def test_encode_unregistered_format(self, registry):
        """Test that a missing encoder names the format."""
        with pytest.raises(CodecNotFound, match="^No encoder found for format booya$"):
            parse("application/booya+booya").encode({}, registry)

    def test_encode_failure(self, registry):
        """Test that codec failures become EncodeError."""
        with pytest.raises(EncodeError):
            parse("application/json").encode({"when": object()}, registry)

    def test_uses_default_registry(self):
        """Test that the process-wide registry is used by default."""
        assert json.loads(parse("application/json").encode([1, 2])) == [1, 2]


class TestDecode:
    """Tests for MediaType.decode()."""

    def test_decode_into_model_class(self, registry):
        """Test decoding into a new model instance."""
        user = parse("application/json").decode(User, io.BytesIO(b'{"id": 1, "login": "sawyer"}'), registry)
        assert user == User(id=1, login="sawyer")

    def test_decode_into_instance(self, registry):
        """Test that an instance target is populated in place."""
        user = User()
        result = parse("application/json").decode(user, io.BytesIO(b'{"id": 1, "login": "sawyer"}'), registry)
        assert result is user
        assert user.id == 1
        assert user.login == "sawyer"

    def test_none_target_skips_decode(self, registry):
        """Test that no target leaves the stream unread."""
        stream = io.BytesIO(b'{"id": 1}')
        assert parse("application/json").decode(None, stream, registry) is None
        assert stream.tell() == 0

    def test_none_target_skips_codec_lookup(self, registry):
        """Test that an unknown format is not an error when nothing is decoded."""
        assert parse("application/booya+booya").decode(None, io.BytesIO(b""), registry) is None

    def test_decode_unregistered_format(self, registry):
        """Test the caller-visible missing decoder message."""
        with pytest.raises(CodecNotFound) as exc_info:
            parse("application/booya+booya").decode(User(), io.BytesIO(b"{}"), registry)
        assert str(exc_info.value) == "No decoder found for format booya"
        assert exc_info.value.format == "booya"

    def test_decode_invalid_body(self, registry):
        """Test that malformed bodies become DecodeError."""
        with pytest.raises(DecodeError):
            parse("application/json").decode(User(), io.BytesIO(b"{not json"), registry)

    def test_yaml_decode(self, registry):
        """Test decoding a YAML body."""
        user = parse("application/x-yaml").decode(User, io.BytesIO(b"id: 3\nlogin: yam\n"), registry)
        assert user == User(id=3, login="yam")

    @pytest.mark.parametrize("content_type", ["application/json", "application/x-yaml"])
    def test_round_trip(self, registry, content_type):
        """Test that decode(encode(value)) restores the value."""
        mt = parse(content_type)
        original = User(id=42, login="round")
        assert mt.decode(User, io.BytesIO(mt.encode(original, registry)), registry) == original

    @pytest.mark.parametrize("content_type", ["application/json", "application/x-yaml"])
    @pytest.mark.parametrize(
        "target, original",
        [
            (Outer, Outer(name="o", inner=Inner(value=7))),
            (Wrapped, Wrapped(user=User(id=1, login="w"), tags=["a", "b"])),
            (int, 12),
            (str, "text"),
            (float, 1.5),
            (bool, False),
        ],
    )
    def test_round_trip_types(self, registry, content_type, target, original):
        """Test round trips for nested dataclasses, models and scalars."""
        mt = parse(content_type)
        assert mt.decode(target, io.BytesIO(mt.encode(original, registry)), registry) == original

    def test_custom_codec(self):
        """Test dispatch to a codec registered for a new format."""
        registry = CodecRegistry()
        registry.register(
            "csv",
            lambda value: ",".join(value).encode(),
            lambda stream: stream.read().decode().split(","),
        )
        mt = parse("text/csv")
        assert mt.encode(["a", "b"], registry) == b"a,b"
        assert mt.decode(list, io.BytesIO(b"x,y"), registry) == ["x", "y"]
