"""Protocol definitions for body codecs."""

from typing import IO, Any, Protocol


class Encoder(Protocol):
    """
    Protocol for body encoders.

    Implementations turn a Python value into the wire bytes of one format.
    They must not modify the value they are given.
    """

    def __call__(self, value: Any) -> bytes:
        """
        Serialize a value.

        Args:
            value: Object to serialize

        Returns:
            Encoded bytes
        """
        ...


class Decoder(Protocol):
    """
    Protocol for body decoders.

    Implementations read a binary stream and return plain Python data
    (dicts, lists, scalars) that is later bound to a caller target.
    """

    def __call__(self, stream: IO[bytes]) -> Any:
        """
        Deserialize a body.

        Args:
            stream: Binary stream positioned at the start of the body

        Returns:
            Decoded payload
        """
        ...
