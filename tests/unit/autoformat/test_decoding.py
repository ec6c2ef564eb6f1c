"""Unit tests for request body decoding."""

import pytest
from pydantic import BaseModel, Field

from autoformat.decoding import decode_input, form_fields, parse_form
from autoformat.exceptions import ErrorCode, FormDecodeError, JsonDecodeError, UnsupportedContentType
from autoformat.middleware.error_handlers import rejection_response


class Shape(BaseModel):
    a: int


class Comment(BaseModel):
    author: str
    body: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    pinned: bool = False


class TestJson:
    """application/json bodies."""

    @pytest.mark.asyncio
    async def test_decodes_into_simple_shape(self):
        assert await decode_input(b'{"a":1}', "application/json", Shape) == Shape(a=1)

    @pytest.mark.asyncio
    async def test_content_type_case_insensitive(self):
        assert await decode_input(b'{"a":1}', "Application/JSON", Shape) == Shape(a=1)

    @pytest.mark.asyncio
    async def test_decodes_into_model(self):
        comment = await decode_input(b'{"author": "ann", "body": "hi", "tags": ["x"]}', "application/json", Comment)

        assert comment == Comment(author="ann", body="hi", tags=["x"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"{not json", b"", b'{"a": 1'])
    async def test_malformed_json_is_400(self, body):
        with pytest.raises(JsonDecodeError) as exc_info:
            await decode_input(body, "application/json", Shape)

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == ErrorCode.JSON_DECODE_ERROR

    @pytest.mark.asyncio
    async def test_wrong_shape_is_422(self):
        with pytest.raises(JsonDecodeError) as exc_info:
            await decode_input(b'{"a": "not a number"}', "application/json", Shape)

        assert exc_info.value.status_code == 422
        assert "a:" in exc_info.value.message
        assert exc_info.value.details["errors"][0]["loc"] == ["a"]

    @pytest.mark.asyncio
    async def test_numeric_string_is_not_coerced(self):
        """JSON types must match the shape exactly."""
        with pytest.raises(JsonDecodeError) as exc_info:
            await decode_input(b'{"a": "1"}', "application/json", Shape)

        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_field_is_422(self):
        with pytest.raises(JsonDecodeError) as exc_info:
            await decode_input(b"{}", "application/json", Comment)

        assert exc_info.value.status_code == 422


class TestForm:
    """application/x-www-form-urlencoded bodies."""

    @pytest.mark.asyncio
    async def test_decodes_into_simple_shape(self):
        assert await decode_input(b"a=1", "application/x-www-form-urlencoded", Shape) == Shape(a=1)

    @pytest.mark.asyncio
    async def test_decodes_into_model(self):
        body = b"author=ann&body=hello+world%21&tags=a&tags=b&pinned=true"

        comment = await decode_input(body, "application/x-www-form-urlencoded", Comment)

        assert comment == Comment(author="ann", body="hello world!", tags=["a", "b"], pinned=True)

    @pytest.mark.asyncio
    async def test_single_value_for_list_field(self):
        comment = await decode_input(b"author=ann&body=x&tags=only", "application/x-www-form-urlencoded", Comment)

        assert comment.tags == ["only"]

    @pytest.mark.asyncio
    async def test_percent_encoded_utf8(self):
        comment = await decode_input(b"author=J%C3%BCrgen&body=%E2%9C%93", "application/x-www-form-urlencoded", Comment)

        assert comment.author == "Jürgen"
        assert comment.body == "✓"

    @pytest.mark.asyncio
    async def test_content_type_case_insensitive(self):
        assert await decode_input(b"a=7", "APPLICATION/X-WWW-FORM-URLENCODED", Shape) == Shape(a=7)

    @pytest.mark.asyncio
    async def test_wrong_shape_is_422(self):
        with pytest.raises(FormDecodeError) as exc_info:
            await decode_input(b"a=abc", "application/x-www-form-urlencoded", Shape)

        assert exc_info.value.status_code == 422
        assert exc_info.value.code == ErrorCode.FORM_DECODE_ERROR

    @pytest.mark.asyncio
    async def test_repeated_scalar_key_is_422(self):
        with pytest.raises(FormDecodeError) as exc_info:
            await decode_input(b"a=1&a=2", "application/x-www-form-urlencoded", Shape)

        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_non_ascii_body_is_400(self):
        with pytest.raises(FormDecodeError) as exc_info:
            await decode_input(b"a=\xff\xfe", "application/x-www-form-urlencoded", Shape)

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_parse_form_repeated_and_blank_keys(self):
        form = await parse_form(b"x=1&x=2&x=3&y=&z=q")

        assert form.getlist("x") == ["1", "2", "3"]
        assert form["y"] == ""
        assert form["z"] == "q"

    @pytest.mark.asyncio
    async def test_form_fields_uses_every_value_for_sequences(self):
        form = await parse_form(b"author=ann&tags=a&tags=b&body=x")

        assert form_fields(form, Comment) == {"author": "ann", "tags": ["a", "b"], "body": "x"}


class TestUnsupportedContentType:
    """Anything other than the two supported media types."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content_type",
        [
            "text/plain",
            None,
            "",
            "multipart/form-data; boundary=xyz",
            "application/json; charset=utf-8",
            "application/xml",
        ],
    )
    async def test_rejected(self, content_type):
        with pytest.raises(UnsupportedContentType) as exc_info:
            await decode_input(b'{"a":1}', content_type, Shape)

        assert exc_info.value.status_code == 400
        assert exc_info.value.details["content_type"] == content_type

    @pytest.mark.asyncio
    async def test_response_is_plain_text_400(self):
        with pytest.raises(UnsupportedContentType) as exc_info:
            await decode_input(b"a=1", "text/plain", Shape)

        response = rejection_response(exc_info.value)

        assert response.status_code == 400
        assert response.headers["content-type"] == "text/plain; charset=utf-8"
        assert b"content type" in response.body


@pytest.mark.asyncio
async def test_json_rejection_response_uses_status():
    with pytest.raises(JsonDecodeError) as exc_info:
        await decode_input(b'{"a": []}', "application/json", Shape)

    response = rejection_response(exc_info.value)

    assert response.status_code == 422
    assert response.body.startswith(b"Failed to deserialize the JSON body")
