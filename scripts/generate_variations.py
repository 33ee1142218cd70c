#!/usr/bin/env python3
"""
Generate variations from the command line and save them under their download names.
Run from the project root: python -m scripts.generate_variations edit photo.jpg "背景をぼかして"
or: PYTHONPATH=. python scripts/generate_variations.py generate - "可愛い猫の写真" --count 2
"""
import argparse
import base64
import os
import sys

# project root on PYTHONPATH
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from app.core.logging import configure_logging
from app.services.image_generation import (
    GenerationInputs,
    ImageProviderFactory,
    generate_variations,
)


def _read_image(path: str) -> str | None:
    if path == "-":
        return None
    with open(path, "rb") as f:
        return base64.b64encode(f.read()).decode("ascii")


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate image variations")
    parser.add_argument("mode", help="edit, text-only, generate or combined")
    parser.add_argument("image", help="source image path, '-' for none")
    parser.add_argument("prompt", nargs="?", default="", help="instruction or description")
    parser.add_argument("--count", type=int, default=None, help="variations, 1-3")
    parser.add_argument("--out", default=".", help="output directory")
    args = parser.parse_args()

    configure_logging()
    provider = ImageProviderFactory.create_from_settings(settings)
    inputs = GenerationInputs(
        source_image=_read_image(args.image),
        instruction=args.prompt,
        description=args.prompt,
        variation_count=args.count,
    )
    result = generate_variations(provider, args.mode, inputs)
    if not result.ok:
        print(f"{result.error.user_message} (status {result.error.http_status})", file=sys.stderr)
        if result.error.solution:
            print(result.error.solution, file=sys.stderr)
        return 1

    os.makedirs(args.out, exist_ok=True)
    for variation in result.variations:
        path = os.path.join(args.out, variation.filename)
        with open(path, "wb") as f:
            f.write(base64.b64decode(variation.data))
        print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
