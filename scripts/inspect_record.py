#!/usr/bin/env python3
"""Small CLI to decode an attribute record file and print its content.

Warning: records written with the pickle serializer are unpickled, which is
UNSAFE for untrusted data. Use `--serializer pickle` only on files you trust.
"""

from __future__ import annotations

import argparse
import json
import os
import pprint
import sys
from typing import Optional, Sequence

from attribute_lib.errors import CodecError
from attribute_lib.storage.base import decode_component
from attribute_lib.storage.codec import RecordCodec
from attribute_lib.storage.serializer import SERIALIZERS, get_serializer


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Decode an attribute record file and show its contents")
    p.add_argument("path", help="Path to the record file")
    p.add_argument("-s", "--serializer", default="json", choices=sorted(SERIALIZERS), help="Inner serializer the record was written with")
    p.add_argument("-j", "--json", action="store_true", help="Dump the attributes as JSON (fallbacks to str for unknown types)")
    p.add_argument("-q", "--quiet", action="store_true", help="Do not print the summary to stderr")
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    path = args.path

    if not os.path.exists(path):
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 2

    codec = RecordCodec(serializer=get_serializer(args.serializer))
    with open(path, "rb") as fh:
        data = fh.read()
    try:
        key, attributes = codec.unpack(data)
    except CodecError as exc:
        print(f"Failed to decode '{path}': {exc}", file=sys.stderr)
        return 3

    if args.json:
        print(json.dumps(attributes, indent=2, default=str))
    else:
        print(pprint.pformat(attributes, width=120))

    if not args.quiet:
        namespace, _, user = key.partition(".")
        summary = f"Record {decode_component(namespace)!r}/{decode_component(user)!r}, {len(attributes)} attribute(s)"
        if os.path.basename(path) != key:
            summary += f" (WARNING: key {key!r} does not match file name; the store treats this record as empty)"
        print(summary, file=sys.stderr)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
