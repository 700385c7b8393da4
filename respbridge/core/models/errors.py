class RespError(Exception):
    """
    Base class of every failure raised while converting between Python
    values and RESP bytes.

    An error carries the context needed to act on it:
    - offset: byte position in the input buffer (decoder failures)
    - path: location inside the value tree, e.g. ``$.people[2].age``
      (type bridge failures)
    Both are optional and set by the layer that detects the problem.
    """
    def __init__(
        self,
        message: str,
        *,
        offset: int | None = None,
        path: str | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.path = path

    def __str__(self) -> str:
        where = []
        if self.offset is not None:
            where.append(f"at byte {self.offset}")
        if self.path is not None:
            where.append(f"at {self.path}")
        if not where:
            return self.message
        return f"{self.message} ({', '.join(where)})"


class DecodeError(RespError):
    """Raised when bytes cannot be parsed or reconstructed into the target."""


class EncodeError(RespError):
    """Raised when a value cannot be represented as RESP."""


# Decoder failures

class UnexpectedEof(DecodeError):
    pass


class UnknownTypePrefix(DecodeError):
    pass


class MalformedLength(DecodeError):
    pass


class MalformedInteger(DecodeError):
    pass


class MalformedFloat(DecodeError):
    pass


class MalformedNumber(DecodeError):
    pass


class FramingError(DecodeError):
    pass


# Type bridge failures

class InvalidUtf8(DecodeError):
    pass


class OutOfRange(DecodeError):
    pass


class UnexpectedType(DecodeError):
    """The wire value variant is not accepted by the requested target."""


class MixedTypeSequence(DecodeError):
    pass


class UnknownField(DecodeError):
    pass


class MissingField(DecodeError):
    pass


class UnknownVariant(DecodeError):
    pass


class InvalidValue(DecodeError):
    """The target type rejected the decoded fields (constructor/validator error)."""


# Encoder failures

class InvalidFormatTag(EncodeError):
    pass


class InvalidSimpleString(EncodeError):
    pass


class UnsupportedType(EncodeError):
    pass


# Failures that can happen in both directions

class IntegerOverflow(EncodeError, DecodeError):
    pass


class UnsupportedKeyType(EncodeError, DecodeError):
    pass


class NestingTooDeep(EncodeError, DecodeError):
    pass
