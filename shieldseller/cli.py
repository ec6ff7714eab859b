"""CLI tool for the ShieldSeller risk engine.

Usage:
    python -m shieldseller.cli analyze --file listing.json [--json] [--fixes]
    python -m shieldseller.cli scan --file listings.json [--output report.csv] [--max 500]
    python -m shieldseller.cli fix --file listing.json [--ai]
    python -m shieldseller.cli rules
    python -m shieldseller.cli --rules custom_rules.json analyze --text '{"product_id": ...}'
"""
import argparse
import json
import logging
import sys

from shieldseller.config import config


def cmd_analyze(args, rules):
    """Score a single listing."""
    from shieldseller.fixes import generate_fix_suggestions
    from shieldseller.risk import analyze_listing_risk

    listing = _read_listing(args)
    analysis = analyze_listing_risk(listing, rules)
    if args.json:
        print(analysis.to_json())
        return
    print(analysis.format_report())
    if args.fixes:
        print()
        print(generate_fix_suggestions(analysis))


def cmd_scan(args, rules):
    """Scan a batch of listings and summarize the shop."""
    from shieldseller.scan import parse_listings, scan_listings, scan_to_csv, scan_to_json

    text = _read_input(args.file, args.text)
    if not text:
        _fail("No input. Use --file or --text")
    try:
        listings = parse_listings(text)
    except ValueError as e:
        _fail(str(e))
    print(f"📦 Parsed {len(listings)} listings")

    result = scan_listings(listings, rules, max_items=args.max)
    print()
    print(result.summary())

    if args.output:
        fmt = args.output.rsplit(".", 1)[-1] if "." in args.output else "csv"
        data = scan_to_json(result) if fmt == "json" else scan_to_csv(result)
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(data)
        print(f"💾 Saved to {args.output}")


def cmd_fix(args, rules):
    """Suggest a compliant rewrite of a listing."""
    from shieldseller.ai_engine import ai_fix
    from shieldseller.fixes import simple_fix
    from shieldseller.risk import analyze_listing_risk

    listing = _read_listing(args)
    if args.ai:
        analysis = analyze_listing_risk(listing, rules)
        result = ai_fix(listing.title, listing.description, analysis.violations)
    else:
        result = simple_fix(listing.title, listing.description)
    print(result.summary())
    if not result.success:
        sys.exit(1)


def cmd_rules(args, rules):
    """Print the active ruleset."""
    print(rules.summary())


def _read_listing(args):
    from shieldseller.models import ListingData

    text = _read_input(args.file, args.text)
    if not text:
        _fail("No input. Use --file or --text")
    try:
        record = json.loads(text)
        if not isinstance(record, dict):
            raise ValueError("Expected a single listing object")
        return ListingData.from_dict(record)
    except ValueError as e:
        _fail(str(e))


def _read_input(file_path=None, text=None):
    """Read input from file or text argument."""
    if file_path:
        with open(file_path, encoding="utf-8") as f:
            return f.read()
    if text:
        return text
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return None


def _fail(message: str):
    print(f"❌ {message}")
    sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="shieldseller",
        description="ShieldSeller CLI: score TikTok Shop listings for policy violations and suspension risk",
    )
    parser.add_argument("--rules", help="Rules JSON file (overrides SHIELDSELLER_RULES)")
    sub = parser.add_subparsers(dest="command", help="Command")

    # analyze
    p = sub.add_parser("analyze", help="Score one listing")
    p.add_argument("--file", "-f", help="Listing JSON file")
    p.add_argument("--text", "-t", help="Listing JSON text")
    p.add_argument("--json", action="store_true", help="Print the analysis as JSON")
    p.add_argument("--fixes", action="store_true", help="Append a fix checklist")

    # scan
    p = sub.add_parser("scan", help="Scan many listings")
    p.add_argument("--file", "-f", help="Listings JSON file")
    p.add_argument("--text", "-t", help="Listings JSON text")
    p.add_argument("--output", "-o", help="Save report (.csv or .json)")
    p.add_argument("--max", type=int, default=None, help="Max listings to scan")

    # fix
    p = sub.add_parser("fix", help="Suggest a compliant rewrite")
    p.add_argument("--file", "-f", help="Listing JSON file")
    p.add_argument("--text", "-t", help="Listing JSON text")
    p.add_argument("--ai", action="store_true", help="Use the configured AI model")

    # rules
    sub.add_parser("rules", help="Show the active ruleset")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config.validate()
        rules = config.load_rules(args.rules)
    except (ValueError, OSError) as e:
        _fail(str(e))
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "analyze": cmd_analyze,
        "scan": cmd_scan,
        "fix": cmd_fix,
        "rules": cmd_rules,
    }
    commands[args.command](args, rules)


if __name__ == "__main__":
    main()
