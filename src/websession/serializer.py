"""Session data serialization.

Session values must survive a round trip through a byte-oriented backend.
JSONSerializer encodes the supported value shapes as UTF-8 JSON, tagging the
shapes JSON cannot express natively:

    bytes        -> {"__ws__": "bytes", "v": "<base64>"}
    tuple        -> {"__ws__": "tuple", "v": [...]}
    registered   -> {"__ws__": "type", "t": "<name>", "v": {...}}

Unsupported shapes are rejected with SerializationError instead of being
silently coerced to strings.
"""

import base64
import binascii
import dataclasses
import json
import math
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel

from .errors import CorruptSessionError, SerializationError

TAG = "__ws__"

Encoder = Callable[[Any], Dict[str, Any]]
Decoder = Callable[[Dict[str, Any]], Any]


class SessionSerializer(ABC):
    """Abstract interface for session data serializers.

    Implementations:
        - JSONSerializer: Self-describing JSON with a type registry
    """

    @abstractmethod
    def dumps(self, data: Dict[str, Any]) -> bytes:
        """Encode session data.

        Raises:
            SerializationError: If a value cannot be encoded
        """
        pass

    @abstractmethod
    def loads(self, payload: bytes) -> Dict[str, Any]:
        """Decode session data.

        Raises:
            CorruptSessionError: If the payload cannot be decoded
        """
        pass

    def register_type(self, cls: type, name: Optional[str] = None) -> None:
        """Register a concrete type for polymorphic reconstruction.

        Default implementation does nothing (self-describing encodings).
        """
        return None


class JSONSerializer(SessionSerializer):
    """JSON serializer with tagged bytes, tuples and registered types.

    Registered types may be dataclasses or pydantic models. Their fields are
    encoded recursively, so they may themselves contain bytes or other
    registered types.

    Example:
        >>> @dataclass
        ... class Cart:
        ...     items: list
        >>> serializer = JSONSerializer()
        >>> serializer.register_type(Cart)
        >>> serializer.loads(serializer.dumps({"cart": Cart(items=[1])}))
        {'cart': Cart(items=[1])}
    """

    def __init__(self):
        self._names: Dict[type, str] = {}
        self._codecs: Dict[str, Tuple[Encoder, Decoder]] = {}

    def register_type(self, cls: type, name: Optional[str] = None) -> None:
        """Register a dataclass or pydantic model.

        Args:
            cls: Class to register
            name: Stable name stored in payloads (default: module.qualname)

        Raises:
            TypeError: If cls is neither a dataclass nor a pydantic model
            ValueError: If name is already bound to a different class
        """
        if isinstance(cls, type) and issubclass(cls, BaseModel):
            encoder: Encoder = lambda obj: obj.model_dump(mode="python")
            decoder: Decoder = cls.model_validate
        elif isinstance(cls, type) and dataclasses.is_dataclass(cls):
            encoder = lambda obj: {
                f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)
            }
            decoder = lambda fields: cls(**fields)
        else:
            raise TypeError(
                f"Cannot register {cls!r}: only dataclasses and pydantic "
                "models are supported"
            )

        type_name = name or f"{cls.__module__}.{cls.__qualname__}"
        existing = self._codecs.get(type_name)
        if existing is not None and self._names.get(cls) != type_name:
            raise ValueError(f"Type name '{type_name}' is already registered")

        self._names[cls] = type_name
        self._codecs[type_name] = (encoder, decoder)

    def registered_types(self) -> Dict[str, type]:
        """Get registered classes keyed by payload name."""
        return {name: cls for cls, name in self._names.items()}

    def _encode(self, value: Any, path: str) -> Any:
        if value is None or isinstance(value, (str, bool, int)):
            return value
        if isinstance(value, float):
            if not math.isfinite(value):
                raise SerializationError(
                    f"Cannot serialize non-finite float at '{path}'",
                    details={"path": path},
                )
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            return {TAG: "bytes", "v": base64.b64encode(bytes(value)).decode("ascii")}
        if isinstance(value, list):
            return [self._encode(item, f"{path}[{i}]") for i, item in enumerate(value)]
        if isinstance(value, tuple):
            return {
                TAG: "tuple",
                "v": [self._encode(item, f"{path}[{i}]") for i, item in enumerate(value)],
            }
        if isinstance(value, dict):
            encoded = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise SerializationError(
                        f"Mapping keys must be strings at '{path}', "
                        f"got {type(key).__name__}",
                        details={"path": path},
                    )
                if key == TAG:
                    raise SerializationError(
                        f"Mapping key '{TAG}' is reserved at '{path}'",
                        details={"path": path},
                    )
                encoded[key] = self._encode(item, f"{path}.{key}")
            return encoded

        type_name = self._names.get(type(value))
        if type_name is not None:
            encoder, _ = self._codecs[type_name]
            return {
                TAG: "type",
                "t": type_name,
                "v": self._encode(encoder(value), f"{path}<{type_name}>"),
            }

        raise SerializationError(
            f"Cannot serialize value of type {type(value).__name__} at '{path}'; "
            "register the type first",
            details={"path": path, "type": type(value).__name__},
        )

    def _decode(self, value: Any) -> Any:
        if isinstance(value, list):
            return [self._decode(item) for item in value]
        if not isinstance(value, dict):
            return value

        tag = value.get(TAG)
        if tag is None:
            return {key: self._decode(item) for key, item in value.items()}
        if tag == "bytes":
            return base64.b64decode(value["v"].encode("ascii"), validate=True)
        if tag == "tuple":
            return tuple(self._decode(item) for item in value["v"])
        if tag == "type":
            type_name = value["t"]
            codec = self._codecs.get(type_name)
            if codec is None:
                raise CorruptSessionError(
                    f"Payload references unregistered type '{type_name}'",
                    details={"type": type_name},
                )
            _, decoder = codec
            return decoder(self._decode(value["v"]))
        raise CorruptSessionError(f"Unknown payload tag '{tag}'", details={"tag": tag})

    def dumps(self, data: Dict[str, Any]) -> bytes:
        """Encode session data to UTF-8 JSON bytes.

        Args:
            data: Session key/value mapping

        Returns:
            JSON payload

        Raises:
            SerializationError: If any value (or nested value) is unsupported
        """
        encoded = self._encode(data, "$")
        return json.dumps(encoded, separators=(",", ":"), allow_nan=False).encode(
            "utf-8"
        )

    def loads(self, payload: bytes) -> Dict[str, Any]:
        """Decode JSON bytes into session data.

        Args:
            payload: Bytes previously produced by dumps()

        Returns:
            Session key/value mapping

        Raises:
            CorruptSessionError: If payload is not a valid encoded mapping
        """
        try:
            raw = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptSessionError(
                "Session payload is not valid JSON", details={"error": str(e)}
            ) from e

        if not isinstance(raw, dict) or TAG in raw:
            raise CorruptSessionError("Session payload is not a mapping")

        try:
            return self._decode(raw)
        except CorruptSessionError:
            raise
        except (KeyError, TypeError, ValueError, binascii.Error, AttributeError) as e:
            raise CorruptSessionError(
                "Session payload has malformed tagged values",
                details={"error": str(e)},
            ) from e
