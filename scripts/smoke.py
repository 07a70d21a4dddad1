# scripts/smoke.py
"""
Smoke Test Script for the Blockfolio export pipeline.

Usage
-----
1. Export the built-in sample document:
    $ python scripts/smoke.py

2. Export a document file:
    $ python scripts/smoke.py --file samples/portfolio.json --out exports/
"""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from blockfolio.core.blocks.codec import encode_document
from blockfolio.core.blocks.sanitizer import sanitize
from blockfolio.core.settings import load_settings
from blockfolio.layout.reportlab_renderer import ReportLabRenderer
from blockfolio.pipelines.export import render
from blockfolio.pipelines.export_flow import Exporter

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
NESTED = sanitize(
    [
        {"type": "heading", "content": "Case study"},
        {"type": "paragraph", "content": "Rebuilt the export path end to end."},
        {"type": "numberedListItem", "content": "Sanitize"},
        {"type": "numberedListItem", "content": "Render"},
    ]
)

SAMPLE: list[dict[str, Any]] = [
    {"type": "heading", "props": {"level": 1}, "content": "Portfolio"},
    {
        "type": "paragraph",
        "content": [
            {"type": "text", "text": "Selected work, ", "styles": {}},
            {"type": "text", "text": "2026", "styles": {"bold": True}},
            {"type": "text", "text": ". See ", "styles": {}},
            {
                "type": "link",
                "href": "https://example.com",
                "content": [{"type": "text", "text": "the site", "styles": {}}],
            },
        ],
    },
    {"type": "bulletListItem", "content": "Design systems"},
    {"type": "bulletListItem", "content": "Tooling"},
    {"type": "codeBlock", "content": "print('hello')"},
    {"type": "quote", "content": "Ship small, ship often."},
    {"type": "divider"},
    {
        "type": "projectCard",
        "props": {
            "title": "Exporter",
            "subtext": "PDF export pipeline",
            "nestedContent": encode_document(NESTED),
        },
    },
]


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run Blockfolio Smoke Test")
    parser.add_argument("--file", "-f", type=str, help="Path to a JSON block document")
    parser.add_argument("--out", "-o", type=str, default=".", help="Output directory")
    args = parser.parse_args()

    # 1. Prepare Input Data
    document: Any
    if args.file:
        with open(args.file, encoding="utf-8") as f:
            document = json.load(f)
        print(f"\n📂 Using input file: {args.file}")
    else:
        print("\n📝 Using built-in sample document (No --file provided)")
        document = SAMPLE

    # 2. Inspect the output tree
    blocks = sanitize(document)
    tree = render(blocks, "Smoke Test")
    print(f"🧱 {len(blocks)} blocks -> {len(tree.output_nodes)} output nodes")
    for node in tree.output_nodes:
        print(f"  - {node.role.value}: {node.text[:50]!r}")

    # 3. Export
    cfg = load_settings()
    exporter = Exporter(
        ReportLabRenderer(), basename=cfg.export_basename, info=cfg.document_info("Smoke Test")
    )
    try:
        result = asyncio.run(exporter.export(document))
    except Exception as exc:
        print(f"\n❌ Export Crashed: {exc}")
        traceback.print_exc()
        return

    if result.is_err():
        print(f"\n❌ {result.unwrap_err().message}")
        return

    artifact = result.unwrap()
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / artifact.filename
    path.write_bytes(artifact.data)
    print(f"\n💾 Artifact saved to: {path} ({artifact.size} bytes)")


if __name__ == "__main__":
    main()
