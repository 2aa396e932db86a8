"""Command line encode/decode of build codes"""

import json
import sys

from buildlink import codec
from buildlink.exceptions import BuildCodeError


def encode_main(argv=None):
    argv = sys.argv if argv is None else argv
    if len(argv) != 2:
        print(f"Usage: {argv[0]} '<json_string>'", file=sys.stderr)
        sys.exit(1)
    try:
        state = codec.BuildState.from_dict(json.loads(argv[1]))
    except (ValueError, TypeError, AttributeError) as e:
        print(f"Invalid build JSON: {e}", file=sys.stderr)
        sys.exit(1)
    print(codec.encode(state))


def decode_main(argv=None):
    argv = sys.argv if argv is None else argv
    if len(argv) != 2:
        print(f"Usage: {argv[0]} <build_code>", file=sys.stderr)
        sys.exit(1)
    try:
        state = codec.default_codec().decode_or_raise(argv[1])
    except BuildCodeError as e:
        print(f"Not a build code: {e}", file=sys.stderr)
        sys.exit(2)
    print(json.dumps(state.to_dict(), separators=(",", ":")))
