"""Encoders for tierscope result types."""

from tierscope.core.encoding.json_encoder import encode_json, to_jsonable

__all__ = ["encode_json", "to_jsonable"]
