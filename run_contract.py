#!/usr/bin/env python3
"""One-off script to render a contract from a lease JSON file, without the API."""

import argparse
import json
import logging
import sys
import os
from dotenv import load_dotenv

load_dotenv("backend/.env")
sys.path.insert(0, "backend")

from vbodegas.core.config import settings
from vbodegas.services.contract_layout import SECTION_IDS, load_layout
from vbodegas.services.contract_pdf import contract_filename, generate_contract
from vbodegas.services.contract_values import LeaseRecord


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("lease", help="JSON file with the lease record fields")
    parser.add_argument("--template", default=settings.CONTRACT_TEMPLATE_PATH)
    parser.add_argument("--output", help="output PDF (default: CONTRACT_OUTPUT_DIR/<generated name>)")
    parser.add_argument("--sections", nargs="*", choices=SECTION_IDS, help="only these sections")
    parser.add_argument("--strategy", default=settings.CONTRACT_STRATEGY, choices=("auto", "form", "coordinates"))
    parser.add_argument("--layout", default=settings.CONTRACT_LAYOUT_PATH, help="JSON layout override")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    with open(args.lease, "r", encoding="utf-8") as f:
        record = LeaseRecord.from_mapping(json.load(f))

    output = args.output or os.path.join(
        settings.CONTRACT_OUTPUT_DIR, contract_filename(record, args.sections)
    )
    content = generate_contract(
        record,
        args.template,
        output,
        selected_sections=args.sections,
        strategy=args.strategy,
        layout=load_layout(args.layout or None),
    )
    print(f"\nContract saved: {output} ({len(content) / 1024:.1f} KB)")


if __name__ == "__main__":
    main()
