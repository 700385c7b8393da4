import json
from typing import Any

import yaml

from respbridge.core.models import wire
from respbridge.core.models.wire import WireValue
from respbridge.core.ports.render import Renderer


def _normalize(obj: Any) -> Any:
    if isinstance(obj, bytes):
        try:
            return obj.decode("utf-8")
        except UnicodeDecodeError:
            return {"hex": obj.hex()}

    if isinstance(obj, dict):
        return {str(_normalize(k)): _normalize(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_normalize(x) for x in obj]

    return obj


def wire_tree(value: WireValue) -> dict[str, Any]:
    """
    Plain dict view of a wire value, tagged with its variant name, e.g.
    ``{"type": "integer", "value": 5}``.
    """
    node: dict[str, Any] = {"type": value.kind.name.lower()}

    match value:
        case wire.Null():
            pass
        case wire.BulkString(_, null=True):
            node["null"] = True
        case wire.Array(_, null=True) | wire.Set(_, null=True) | wire.Push(_, null=True):
            node["null"] = True
        case wire.Array(items) | wire.Set(items) | wire.Push(items):
            node["items"] = [wire_tree(item) for item in items]
        case wire.Map(pairs) | wire.Attribute(pairs):
            node["items"] = [
                {"key": wire_tree(key), "value": wire_tree(item)}
                for key, item in pairs
            ]
        case wire.VerbatimString(tag, payload):
            node["format"] = tag.decode("ascii")
            node["value"] = payload
        case wire.BigNumber(text):
            node["value"] = text
        case (
            wire.SimpleString(payload)
            | wire.SimpleError(payload)
            | wire.BulkString(payload)
            | wire.BulkError(payload)
            | wire.Integer(payload)
            | wire.Boolean(payload)
            | wire.Double(payload)
        ):
            node["value"] = payload

    return node


class JsonRenderer(Renderer):
    def render(self, data: Any) -> str:
        return json.dumps(_normalize(data), indent=2, sort_keys=False)


class YamlRenderer(Renderer):
    def render(self, data: Any) -> str:
        return yaml.safe_dump(_normalize(data), sort_keys=False)
