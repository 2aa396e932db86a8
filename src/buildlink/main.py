"""Build code service"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import RedirectResponse

from buildlink import share
from buildlink.branches import ORPHAN_FALLBACK
from buildlink.codec import BuildCodec, BuildState
from buildlink.exceptions import BuildCodeError
from buildlink.schema import DEFAULT_NODES, DEFAULT_ROOTS, load_nodes


# Define log format
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL = os.getenv("BUILDLINK_LOG_LEVEL", "INFO").upper()
NODES_FILE = os.getenv("BUILDLINK_NODES_FILE")
ORPHAN_POLICY = os.getenv("BUILDLINK_ORPHAN_POLICY", ORPHAN_FALLBACK)
BASE_PATH = os.getenv("BUILDLINK_BASE_PATH", "/")

# Create a handler with the custom format
formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(formatter)

# Configure the root logger
logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT,
    handlers=[handler]
)

# Apply the same format to all relevant Uvicorn loggers
for logger_name in ["uvicorn", "uvicorn.access"]:
    logger = logging.getLogger(logger_name)
    logger.handlers.clear()
    logger.propagate = False
    logger.addHandler(handler)


def build_codec() -> BuildCodec:
    """Create the codec for the configured node definitions."""
    if NODES_FILE:
        nodes, roots = load_nodes(Path(NODES_FILE))
        logging.info("Loaded %s node definitions from %s.", len(nodes), NODES_FILE)
    else:
        nodes, roots = DEFAULT_NODES, DEFAULT_ROOTS
    return BuildCodec(nodes, roots, orphan_policy=ORPHAN_POLICY)


codec = build_codec()


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Log the active schema on startup."""
    logging.info("Serving build codes for %s nodes (orphan policy: %s).",
                 len(codec.classifier.nodes), ORPHAN_POLICY)
    yield


app = FastAPI(lifespan=lifespan)


@app.get("/")
async def serve_home():
    """Describe the active schema."""
    return {
        "nodes": len(codec.classifier.nodes),
        "branches": {b.name.lower(): list(ids) for b, ids in codec.classifier.members.items()},
    }


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/encode")
async def encode_build(request: Request):
    """Encode a build and return its code and share link."""
    try:
        state = BuildState.from_dict(await request.json())
    except (ValueError, TypeError, AttributeError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid build: {e}") from e

    problems = codec.validate(state)
    if problems:
        raise HTTPException(status_code=422, detail=problems)

    code = codec.encode(state)
    base_url = f"{request.url.scheme}://{request.url.netloc}{BASE_PATH.rstrip('/')}"
    logging.info("%s Encoded build %s", request.client.host if request.client else "-", code)
    return {"code": code, "share_url": share.create_share_url(base_url, state, codec)}


@app.get("/api/decode/{code}")
async def decode_build(code: str):
    """Decode a build code, 404 when it is not one."""
    try:
        state = codec.decode_or_raise(code)
    except BuildCodeError as e:
        logging.info("Rejected build code %s (%s)", code, e)
        raise HTTPException(status_code=404, detail=str(e)) from e
    return state.to_dict()


@app.get("/b/{code}")
async def serve_build(code: str):
    """Shared link target: the decoded build, or home when the segment is not a build code."""
    state = None
    if share.looks_like_build_code(code):
        state = codec.decode(code)
    if state is None:
        logging.warning("Build code %s is not decodable. Redirecting.", code)
        return RedirectResponse("/")
    return state.to_dict()
