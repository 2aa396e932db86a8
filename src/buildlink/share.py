"""Share links: the build code travels as the last path segment of a URL"""

from typing import Optional

from buildlink import codec
from buildlink.frame import FRAME_ALPHABET

MIN_CODE_LENGTH = 2


def create_share_url(base_url: str, state: codec.BuildState,
                     build_codec: Optional[codec.BuildCodec] = None) -> str:
    """Append the build code to base_url as a new path segment."""
    code = (build_codec or codec.default_codec()).encode(state)
    return f"{base_url.rstrip('/')}/{code}"


def looks_like_build_code(segment: str) -> bool:
    """Cheap pre-check run before any real parsing of an arbitrary path segment."""
    return len(segment) >= MIN_CODE_LENGTH and all(c in FRAME_ALPHABET for c in segment)


def extract_build_code(path: str, base_path: str = "/") -> Optional[str]:
    """Return the last segment of path if it can be a build code, else None."""
    segments = [s for s in path.split("/") if s]
    if not segments:
        return None
    last = segments[-1]
    if last == base_path.strip("/"):
        return None
    return last if looks_like_build_code(last) else None


def load_build_from_path(path: str, base_path: str = "/",
                         build_codec: Optional[codec.BuildCodec] = None) -> Optional[codec.BuildState]:
    code = extract_build_code(path, base_path)
    if code is None:
        return None
    return (build_codec or codec.default_codec()).decode(code)
