from .codec import DecodeResult, decode, encode_command, encode_error, encode_reading

__all__ = [
    "DecodeResult",
    "decode",
    "encode_command",
    "encode_error",
    "encode_reading",
]
