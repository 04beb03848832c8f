#!/usr/bin/env python3
"""
Main entry point for the RFQ item extractor.
Takes an RFQ document (input, mandatory) and writes the extracted items
as JSON (output, optional).
"""
import argparse
import logging
import sys
from pathlib import Path

from rfq_extractor.config import ExtractionConfig
from rfq_extractor.services import ExtractionServiceFactory
from rfq_extractor.utils import save_json

EXIT_OK = 0
EXIT_INPUT_MISSING = 1
EXIT_ACQUISITION_FAILED = 2


def generate_output_filename(input_path: str) -> str:
    """
    Generate a meaningful output filename based on input filename.

    Args:
        input_path: Path to input file

    Returns:
        Output filename (e.g., rfq.pdf -> rfq_extracted.json)
    """
    return f"{Path(input_path).stem}_extracted.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Extract structured line items from RFQ PDF documents',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rfqx rfq.pdf
  rfqx rfq.pdf -o items.json
  rfqx rfq.pdf --timeout 10 --verbose

  # Already-extracted text (skips PDF text acquisition)
  rfqx rfq.txt --text

  # Or if not installed:
  python main.py rfq.pdf
        """
    )
    parser.add_argument('input', type=str, help='Input PDF file path (required)')
    parser.add_argument('-o', '--output', type=str, default=None,
                        help='Output JSON file path (optional, auto-generated if not provided)')
    parser.add_argument('--text', action='store_true',
                        help='Treat the input as extracted text instead of a PDF')
    parser.add_argument('--timeout', type=float, default=None,
                        help='Timeout in seconds for each external extraction command')
    parser.add_argument('--min-text-length', type=int, default=None,
                        help='Minimum characters an acquisition backend must return')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show debug logging from the extraction pipeline')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Validate input file exists
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {args.input}")
        return EXIT_INPUT_MISSING

    if args.output is None:
        args.output = generate_output_filename(args.input)

    config = ExtractionConfig.from_env(
        subprocess_timeout=args.timeout,
        min_text_length=args.min_text_length,
    )
    service = ExtractionServiceFactory.create_rfq_service(config=config)

    print(f"📄 Processing: {args.input}", flush=True)
    if args.text:
        print("🔄 Step 1/3: Reading text file...", end="", flush=True)
        text = input_path.read_text(encoding='utf-8', errors='replace')
        print(" ✓", flush=True)
        print("🔄 Step 2/3: Parsing items...", end="", flush=True)
        result = service.extract_from_text(text)
    else:
        print("🔄 Step 1/3: Extracting text and parsing items...", end="", flush=True)
        result = service.extract(input_path)
        if not result.ok:
            print(" ✗", flush=True)
            print(f"\n❌ {result.message}")
            for attempt in result.attempts:
                print(f"  - {attempt}")
            return EXIT_ACQUISITION_FAILED
        print(" ✓", flush=True)
        print("🔄 Step 2/3: Validating items...", end="", flush=True)
    print(" ✓", flush=True)

    print("🔄 Step 3/3: Saving results...", end="", flush=True)
    save_json(result.model_dump(mode='json'), args.output)
    print(" ✓", flush=True)
    print(f"\n✅ Done! Results saved to: {args.output}")

    summary = service.get_summary(result)
    print(f"\n📊 Extraction Summary:")
    print(f"  - {result.message}")
    print(f"  - Items extracted: {summary['items_extracted']}")
    print(f"  - Items needing review: {summary['items_needing_review']}")
    for index, reason in summary['review_reasons']:
        print(f"    • Item {index}: {reason}")

    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
