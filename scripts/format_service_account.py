#!/usr/bin/env python3
"""
Format a Google Cloud service account key for environment variables.

Prints the key as minified JSON, as a single Base64 value and as Base64 split
into GOOGLE_CLOUD_KEY_PART1..N chunks for platforms that cap the size of one
variable. Any of the three shapes is accepted by shared.credentials.

Usage:
    python scripts/format_service_account.py ./my-project-key.json --part-size 4000
"""

import argparse
import base64
import json
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.credentials import PART_PREFIX, MAX_PARTS, missing_fields

DEFAULT_PART_SIZE = 4000


def minify(key_data: dict) -> str:
    return json.dumps(key_data, separators=(',', ':'))


def split_parts(value: str, part_size: int) -> list:
    return [value[i:i + part_size] for i in range(0, len(value), part_size)]


def format_env_values(key_data: dict, part_size: int = DEFAULT_PART_SIZE) -> dict:
    """
    Build every environment variable shape for a service account key.

    Returns:
        Dict with 'json', 'base64' and 'parts' (a dict of PART variable names)

    Raises:
        ValueError: if the key would need more parts than the loader reads
    """
    if part_size <= 0:
        raise ValueError("part_size must be a positive integer")
    minified = minify(key_data)
    encoded = base64.b64encode(minified.encode('utf-8')).decode('ascii')
    chunks = split_parts(encoded, part_size)
    if len(chunks) > MAX_PARTS:
        raise ValueError(
            f"Key needs {len(chunks)} parts but at most {MAX_PARTS} are read; increase --part-size"
        )
    return {
        'json': minified,
        'base64': encoded,
        'parts': {f'{PART_PREFIX}{i}': chunk for i, chunk in enumerate(chunks, start=1)},
    }


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Format a service account JSON key for environment variables."
    )
    parser.add_argument("key_file", type=Path, help="Path to the service account JSON key.")
    parser.add_argument(
        "--part-size",
        type=int,
        default=DEFAULT_PART_SIZE,
        help=f"Characters per GOOGLE_CLOUD_KEY_PART variable (default {DEFAULT_PART_SIZE}).",
    )
    parser.add_argument(
        "--write",
        action="store_true",
        help="Also save <name>-minified.json and <name>-base64.txt in the current directory.",
    )
    args = parser.parse_args(argv)
    if args.part_size <= 0:
        parser.error("--part-size must be a positive integer")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)

    if not args.key_file.exists():
        print(f"error: file not found: {args.key_file}", file=sys.stderr)
        return 1

    try:
        key_data = json.loads(args.key_file.read_text(encoding='utf-8'))
    except ValueError as e:
        print(f"error: invalid JSON file: {e}", file=sys.stderr)
        return 1

    if key_data.get('type') != 'service_account':
        print('warning: type is not "service_account"', file=sys.stderr)
    missing = missing_fields(key_data)
    if missing:
        print(f"warning: missing required fields: {missing}", file=sys.stderr)

    try:
        values = format_env_values(key_data, args.part_size)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"Project ID:   {key_data.get('project_id', 'N/A')}")
    print(f"Client email: {key_data.get('client_email', 'N/A')}")
    print()
    print("GOOGLE_CLOUD_KEY_JSON=")
    print(values['json'])
    print()
    print("GOOGLE_CLOUD_KEY_BASE64=")
    print(values['base64'])
    print()
    print(f"Multi-part ({len(values['parts'])} variables):")
    for name, chunk in values['parts'].items():
        print(f"{name}=")
        print(chunk)

    if args.write:
        stem = args.key_file.stem
        Path(f"{stem}-minified.json").write_text(values['json'], encoding='utf-8')
        Path(f"{stem}-base64.txt").write_text(values['base64'], encoding='utf-8')
        print(f"\nSaved {stem}-minified.json and {stem}-base64.txt")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
