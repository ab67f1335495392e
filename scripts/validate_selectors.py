#!/usr/bin/env python3
"""
Validate DOM selectors from tock_dom_schema.py against captured HTML fixtures.

This script:
1. Collects every CSS selector defined in tockbot/providers/tock_dom_schema.py
2. Tests each selector against the page fixture where it should appear
3. Reports which selectors work and which are broken

Usage:
    python scripts/validate_selectors.py
"""

import json
from dataclasses import asdict
from pathlib import Path

from bs4 import BeautifulSoup

from tockbot.providers.tock_dom_schema import CALENDAR, CHECKOUT, CONSENT, LOGIN, SEARCH_RESULTS

# Attribute names and class names live in the schema too; only real selectors are checked.
NON_SELECTOR_FIELDS = {"disabled_attribute", "available_class", "cvv_input"}

# Each category is checked against the fixture of the page it lives on.
CATEGORIES = {
    "consent": ("login", CONSENT),
    "login": ("login", LOGIN),
    "calendar": ("search", CALENDAR),
    "search_results": ("search", SEARCH_RESULTS),
    "checkout": ("checkout", CHECKOUT),
}

# The confirmation id only exists once the purchase went through.
RECEIPT_FIELDS = {"confirmation_id"}

# The post-login marker is the calendar, so it is looked for on the search page.
SEARCH_PAGE_FIELDS = {"post_login_marker"}


def build_selectors() -> dict[str, dict[str, tuple[str, str]]]:
    """Map category -> field -> (fixture name, selector)."""
    selectors: dict[str, dict[str, tuple[str, str]]] = {}
    for category, (fixture, schema) in CATEGORIES.items():
        fields = {}
        for name, selector in asdict(schema).items():
            if name in NON_SELECTOR_FIELDS:
                continue
            if name in RECEIPT_FIELDS:
                fields[name] = ("receipt", selector)
            elif name in SEARCH_PAGE_FIELDS:
                fields[name] = ("search", selector)
            else:
                fields[name] = (fixture, selector)
        selectors[category] = fields
    return selectors


def load_html(fixture_name: str) -> BeautifulSoup | None:
    """Load an HTML fixture and return BeautifulSoup object."""
    fixtures_dir = Path(__file__).parent.parent / "tests" / "fixtures"
    html_path = fixtures_dir / f"tock_{fixture_name}_page.html"

    if not html_path.exists():
        return None

    html = html_path.read_text(encoding="utf-8")
    return BeautifulSoup(html, "html.parser")


def test_selector(soup: BeautifulSoup, selector: str) -> tuple[int, list[str]]:
    """Test a CSS selector against HTML and return match count and sample text."""
    try:
        elements = soup.select(selector)
    except ValueError as e:
        return -1, [f"ERROR: {e}"]

    samples = []
    for el in elements[:3]:  # First 3 matches
        text = el.get_text(strip=True)[:50]
        classes = el.get("class", [])
        class_str = ".".join(classes) if classes else ""
        samples.append(f"<{el.name} class='{class_str}'>{text}...")
    return len(elements), samples


def validate_selectors():
    """Main validation routine."""
    print("=" * 70)
    print("DOM Selector Validation Report")
    print("=" * 70)

    fixtures = {name: load_html(name) for name in ("login", "search", "checkout", "receipt")}

    for name, soup in fixtures.items():
        if soup is None:
            print(f"WARNING: Fixture '{name}' not found")

    results = {
        "working": [],
        "broken": [],
        "errors": [],
    }

    for category, selectors in build_selectors().items():
        print(f"\n{'=' * 70}")
        print(f"Category: {category.upper()}")
        print("=" * 70)

        for name, (fixture, selector) in selectors.items():
            soup = fixtures.get(fixture)
            if soup is None:
                print(f"\n  {name}: SKIPPED (no {fixture} fixture)")
                continue

            count, samples = test_selector(soup, selector)

            if count > 0:
                status = "[OK] FOUND"
                results["working"].append((category, name, selector, count))
            elif count == 0:
                status = "[X] NOT FOUND"
                results["broken"].append((category, name, selector))
            else:
                status = "[!] ERROR"
                results["errors"].append((category, name, selector, samples[0]))

            print(f"\n  {name}:")
            print(f"    Selector: {selector}")
            print(f"    Fixture: {fixture}")
            print(f"    Status: {status} ({count} matches)")
            if samples and count > 0:
                for sample in samples:
                    print(f"    Sample: {sample}")

    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)

    print(f"\n[OK] Working selectors: {len(results['working'])}")
    print(f"[X]  Broken selectors:  {len(results['broken'])}")
    print(f"[!]  Error selectors:   {len(results['errors'])}")

    if results["broken"]:
        print("\n" + "-" * 70)
        print("BROKEN SELECTORS (need attention):")
        print("-" * 70)
        for category, name, selector in results["broken"]:
            print(f"  [{category}] {name}: {selector}")

    if results["errors"]:
        print("\n" + "-" * 70)
        print("ERROR SELECTORS (invalid syntax?):")
        print("-" * 70)
        for category, name, selector, error in results["errors"]:
            print(f"  [{category}] {name}: {selector}")
            print(f"    Error: {error}")

    report_path = Path(__file__).parent.parent / "tests" / "fixtures" / "selector_report.json"
    report = {
        "working": [
            {"category": c, "name": n, "selector": s, "count": cnt}
            for c, n, s, cnt in results["working"]
        ],
        "broken": [{"category": c, "name": n, "selector": s} for c, n, s in results["broken"]],
        "errors": [
            {"category": c, "name": n, "selector": s, "error": e}
            for c, n, s, e in results["errors"]
        ],
    }
    report_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(f"\nReport saved to: {report_path}")


if __name__ == "__main__":
    validate_selectors()
