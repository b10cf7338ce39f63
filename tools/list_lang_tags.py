"""
List the language tags used in a categories.txt file, with counts.

Run from the repository root:
    python -m tools.list_lang_tags path/to/categories.txt [--no-fixups]
"""

import argparse
from collections import Counter
from pathlib import Path

from domain.taxonomy import CategoryBlock, StopwordBlock, SynonymBlock, apply_fixups, parse_taxonomy
from infrastructure.config import load_fixups_config
from infrastructure.constants import FIXUPS_FILE
from infrastructure.io import read_text


def count_lang_tags(text: str) -> Counter[str]:
    """Count name, parent, synonym and stopword lines per language tag."""
    counts: Counter[str] = Counter()
    for block in parse_taxonomy(text):
        if isinstance(block, CategoryBlock):
            counts.update(entry.lang for entry in block.names)
            counts.update(parent.lang for parent in block.parents)
        elif isinstance(block, (SynonymBlock, StopwordBlock)):
            counts.update(entry.lang for entry in block.entries)
    return counts


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("infile", help="Open Food Facts categories.txt")
    ap.add_argument("--fixups", default=str(FIXUPS_FILE), help=f"Fixups YAML (default: {FIXUPS_FILE})")
    ap.add_argument("--no-fixups", action="store_true", help="Parse the file as is")
    args = ap.parse_args()

    text = read_text(Path(args.infile))
    if not args.no_fixups:
        text = apply_fixups(text, load_fixups_config(Path(args.fixups)))

    for tag, count in sorted(count_lang_tags(text).items(), key=lambda kv: (-kv[1], kv[0])):
        print(f"{tag}\t{count}")


if __name__ == "__main__":
    main()
