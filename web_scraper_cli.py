"""
Web Scraper Cli

Description: Command-line interface for the fact scraper: scrape one URL, print a summary, save the result as JSON
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.

Dual License:
1. Non-Commercial Use: This software is licensed under the terms of the
   Creative Commons Attribution-NonCommercial 4.0 International License.
   To view a copy of this license, visit http://creativecommons.org/licenses/by-nc/4.0/

2. Commercial Use: For commercial use, a separate license is required.
   Please contact Eric Hiss at eric@historic.camera or eric@rollei.us for licensing options.

Dependencies:
This code depends on several third-party libraries, each with its own license.
See CREDITS.md for a comprehensive list of dependencies and their licenses.

Third-party code:
- Uses Playwright (Apache 2.0): https://github.com/microsoft/playwright
- Uses Scrapling (BSD-3-Clause): https://github.com/D4Vinci/Scrapling
"""

#!/usr/bin/env python3
"""
Standalone CLI for the fact scraper.

Usage Examples:
  # Links, images and emails of an ordinary page
  fact-scraper "https://example.com/"

  # Broker directory, filtered to one location, browser hidden
  fact-scraper "https://www.ibba.org/find-a-business-broker/" --location "Denver, CO" --headless

  # Print the full result as JSON without saving it
  fact-scraper "https://example.com/" --json-output --no-save

Install Dependencies:
  pip install -e .
  playwright install chromium
"""

import argparse
import asyncio
import json
import logging
import sys
import traceback
from typing import List, Optional

from fact_scraper import InputError, PageScraper, ScraperError, load_settings
from fact_scraper.utils.output import save_result

logger = logging.getLogger("fact_scraper.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        prog="fact-scraper",
        description="Fact Scraper - extract links, images, emails and broker records from a web page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fact-scraper "https://example.com/"
  fact-scraper "https://www.ibba.org/find-a-business-broker/" --location "Denver, CO"
  fact-scraper "https://example.com/" --settings my_settings.json --json-output
        """
    )

    parser.add_argument("url", help="Absolute http(s) URL to scrape")

    parser.add_argument(
        "--settings", "-s",
        help="JSON settings file merged over the built-in defaults"
    )

    # Output settings
    parser.add_argument(
        "--output-dir", "-o",
        help="Directory for result files (default: the settings' output_dir)"
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write the result file"
    )
    parser.add_argument(
        "--json-output",
        action="store_true",
        help="Print the full result as JSON instead of a summary"
    )

    # Browser settings
    browser = parser.add_mutually_exclusive_group()
    browser.add_argument(
        "--headless",
        dest="headless",
        action="store_const",
        const=True,
        help="Hide the browser window (challenges cannot be solved by hand)"
    )
    browser.add_argument(
        "--headful",
        dest="headless",
        action="store_const",
        const=False,
        help="Show the browser window"
    )
    parser.add_argument(
        "--cookie-file",
        help="Cookie file loaded before and saved after a browser session"
    )
    parser.add_argument(
        "--location",
        help="Location filter for the broker directory"
    )

    # Verbosity
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only warnings and errors")

    return parser


def configure_logging(args) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def format_results(result, args, saved_path=None) -> str:
    """Format an ExtractionResult for output"""
    if args.json_output:
        return result.to_json()

    stats = result.stats
    lines = [
        "🎉 Scraping Complete!",
        "=" * 50,
        f"🌐 URL: {result.original_url}",
        f"🕒 Captured: {result.timestamp}",
        f"🔗 Links: {stats.total_links} ({stats.internal_links} internal, {stats.external_links} external)",
        f"🖼️  Images: {stats.total_images}",
        f"✉️  Emails: {stats.total_emails}",
    ]

    if result.brokers is not None:
        lines.append(f"👔 Brokers: {len(result.brokers)}")
        if result.brokers:
            lines.extend([
                "",
                "📋 Sample Brokers:",
                *[f"  • {b.contact} | {b.firm} | {b.email}" for b in result.brokers[:5]]
            ])
            if len(result.brokers) > 5:
                lines.append(f"  ... and {len(result.brokers) - 5} more")

    if result.emails:
        lines.extend(["", "📋 Sample Emails:", *[f"  • {e}" for e in result.emails[:5]]])

    if saved_path is not None:
        lines.extend(["", f"📁 Saved to: {saved_path}"])

    return "\n".join(lines)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function"""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args)

    try:
        settings = load_settings(args.settings).with_overrides(
            output_dir=args.output_dir,
            headless=args.headless,
            cookie_file=args.cookie_file,
            directory={"location": args.location},
        )
    except ValueError as e:
        print(f"❌ Settings error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    if args.verbose:
        logger.debug(f"Settings: {json.dumps(settings.to_dict(), indent=2)}")

    scraper = PageScraper(settings)
    try:
        result = await scraper.scrape(args.url)
    except InputError as e:
        print(f"❌ Invalid input: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except ScraperError as e:
        debug_path = getattr(e, "debug_path", None)
        print(f"❌ Scraping failed: {e}", file=sys.stderr)
        if debug_path:
            print(f"   Page markup saved to {debug_path}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        print(f"❌ Scraping failed: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return EXIT_FAILURE

    saved_path = None
    if not args.no_save:
        saved_path = save_result(result, settings.output_dir)

    print(format_results(result, args, saved_path))
    return EXIT_OK


def run() -> None:
    """Console script entry point."""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        print("\n⏹️  Scraping interrupted by user", file=sys.stderr)
        exit_code = EXIT_INTERRUPTED
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
