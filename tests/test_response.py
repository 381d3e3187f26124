# tests/test_response.py

from __future__ import annotations

from types import SimpleNamespace

from taskchat.llm.response import ResponseShape, read_completion


def test_bare_string() -> None:
    got = read_completion('{"reply": "ok"}')
    assert got.shape is ResponseShape.TEXT
    assert got.text == '{"reply": "ok"}'


def test_response_field_and_nested_result() -> None:
    assert read_completion({"response": "a"}).shape is ResponseShape.RESPONSE_FIELD
    nested = read_completion({"result": {"response": "b"}})
    assert nested.shape is ResponseShape.RESULT_RESPONSE
    assert nested.text == "b"


def test_text_field() -> None:
    got = read_completion({"text": "c"})
    assert got.shape is ResponseShape.TEXT_FIELD
    assert got.text == "c"


def test_openai_style_object_and_mapping() -> None:
    obj = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="d"))])
    assert read_completion(obj) == read_completion({"choices": [{"message": {"content": "d"}}]})
    assert read_completion(obj).shape is ResponseShape.CHAT_CHOICES


def test_unknown_shapes_are_serialized_not_raised() -> None:
    got = read_completion({"something": {"else": 1}})
    assert got.shape is ResponseShape.UNKNOWN
    assert got.text == '{"something": {"else": 1}}'

    assert read_completion(None).shape is ResponseShape.UNKNOWN
    assert read_completion({"choices": []}).shape is ResponseShape.UNKNOWN
    assert read_completion(object()).text
