"""CLI entry point for structfs — serve a metadata record as a read-only file tree."""

import argparse
import os
import sys

from errors import StructFSError
from metadata import SCHEMAS, load_metadata
from server import make_server
from structfs import StructFS


def main():
    parser = argparse.ArgumentParser(
        description="structfs — serve a JSON metadata record as a read-only file tree over HTTP"
    )
    parser.add_argument("file", help="JSON metadata document to mount")
    parser.add_argument("-s", "--schema", choices=sorted(SCHEMAS), default="droplet",
                        help="Record type the document is loaded into")
    parser.add_argument("-t", "--tag", default="json", help="Tag key naming exposed fields")
    parser.add_argument("--prefix", default="/", help="URL prefix to serve the tree under, e.g. /metadata/v1/")
    parser.add_argument("-p", "--port", type=int, default=8080, help="Port to listen on")
    parser.add_argument("--host", default="localhost", help="Host to bind to")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every request to stderr")
    args = parser.parse_args()

    if not os.path.exists(args.file):
        print(f"Error: {args.file} not found", file=sys.stderr)
        sys.exit(1)

    try:
        record = load_metadata(args.file, args.schema)
    except StructFSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    prefix = "/" + args.prefix.strip("/") + "/" if args.prefix.strip("/") else "/"
    server = make_server(StructFS(record, args.tag), args.host, args.port, prefix, args.verbose)
    print(f"Serving {args.file} on http://{args.host}:{args.port}{prefix}")
    print("Press Ctrl+C to stop.")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down.")
        server.shutdown()


if __name__ == "__main__":
    main()
