"""Compact, URL-safe build codes for three-tree skill builds"""

from buildlink.codec import BuildCodec, BuildState, decode, encode

__all__ = ["BuildCodec", "BuildState", "decode", "encode"]
