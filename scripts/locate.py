import argparse
import logging

from smart_locator.config import settings
from smart_locator.locator.orchestrator import locate_on_page_blocking
from smart_locator.locator.proximity import DIRECTIONS
from smart_locator.locator.search import SearchOptions, merge_options


def main():
    parser = argparse.ArgumentParser(description="Locate elements on a live page by natural-language text")
    parser.add_argument("--url", required=True, help="Page to open")
    parser.add_argument("--query", required=True, help="Text describing the element, e.g. 'submit button'")
    parser.add_argument("--type", dest="element_type", default=None, help="Preferred element type")
    parser.add_argument("--exact", action="store_true", help="Require exact text matches")
    parser.add_argument("--case-sensitive", action="store_true")
    parser.add_argument("--include-hidden", action="store_true")
    parser.add_argument("--near", default=None, help="Text of a reference element for proximity ranking")
    parser.add_argument("--threshold", type=float, default=None, help="Proximity threshold in CSS pixels")
    parser.add_argument("--direction", action="append", choices=DIRECTIONS, help="Preferred direction (repeatable)")
    parser.add_argument("--max-results", type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    overrides = {
        "type": args.element_type,
        "exact_match": args.exact,
        "case_sensitive": args.case_sensitive,
        "near": args.near,
        "max_results": args.max_results,
        "proximity_threshold": args.threshold,
        "directions": args.direction,
    }
    if args.include_hidden:
        overrides["include_hidden"] = True
    options = merge_options(
        SearchOptions.from_settings(settings),
        **{key: value for key, value in overrides.items() if value is not None},
    )

    result = locate_on_page_blocking(args.url, args.query, options)
    for diagnostic in result.diagnostics:
        print(f"[diagnostic] {diagnostic.kind}: {diagnostic.message}")
    if not result.results:
        print("No matching elements")
    for rank, element in enumerate(result.results, start=1):
        print(
            f"{rank}. relevance={element.relevance:.2f} type={element.detected_type} "
            f"xpath={element.xpath} text=\"{element.text}\""
        )


if __name__ == "__main__":
    main()
