#!/usr/bin/env python3
"""
Multi-tenancy scoping lint check.

This script scans the storefront package for common tenant isolation
violations:
1. Store-owned tables queried without a store_id filter
2. Store URLs built by hand instead of through LinkBuilder
3. Cart reads that do not name a store slug
4. Host or path inspected outside the routing decision

USAGE:
    python scripts/check_tenant_scoping.py

    # Or with verbose output
    python scripts/check_tenant_scoping.py -v

    # Fail the build on any finding
    python scripts/check_tenant_scoping.py --strict

EXIT CODES:
    0 - No issues found (or only warnings without --strict)
    1 - Critical issues found, or any issue with --strict

Suppress a reviewed line with a trailing `# noqa: tenant-scoping`.
"""

import argparse
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

# ────────────────────────────────────────────────────────────────
# Configuration
# ────────────────────────────────────────────────────────────────

# Root directory to scan
SCAN_ROOT = Path(__file__).parent.parent / "Backend" / "storefront"

# Files/directories to exclude
EXCLUDE_PATTERNS = [
    "__pycache__",
    ".pyc",
    "tenancy/host.py",   # Owns host and path parsing
    "tenancy/links.py",  # Owns store URL construction
    "cart/store.py",     # Owns the cart partitions
    "seed.py",           # Inserts rows, never reads across stores
]

# Tables whose rows belong to exactly one store
STORE_SCOPED_MODELS = ["StoreTheme", "StoreHeaderFooter", "StoreNavigation", "StorePage", "PageSection"]

_MODELS = "|".join(STORE_SCOPED_MODELS)

# Patterns that indicate tenant scoping issues
BAD_PATTERNS: List[Tuple[str, str, str]] = [
    # (pattern, severity, description)
    (
        rf"select\(\s*({_MODELS})\s*\)",
        "HIGH",
        "Store-owned table selected without store_id filter - potential cross-tenant leak",
    ),
    (
        rf"\.select(_one)?\(\s*({_MODELS})\b",
        "HIGH",
        "QueryClient read of a store-owned table without store_id - potential cross-tenant leak",
    ),
    (
        r"\._partitions\b",
        "CRITICAL",
        "Direct access to cart partitions - use items_for()/for_tenant()",
    ),
    (
        r"\b(items_for|total_for|count_for|checkout_for)\(\s*\)",
        "CRITICAL",
        "Cart read without a store slug",
    ),
    (
        r"""f?["']/store/(\{|["']\s*\+)""",
        "HIGH",
        "Store path built by hand - use LinkBuilder",
    ),
    (
        r"""["']/store/["']\s*\+""",
        "HIGH",
        "Store path built by hand - use LinkBuilder",
    ),
    (
        r"""headers(\.get\(|\[)\s*["']host["']|url\.hostname""",
        "WARNING",
        "Host read outside HostResolver - store identity must come from the RoutingDecision",
    ),
]

# Patterns that are OK (suppress false positives)
IGNORE_PATTERNS = [
    r"^\s*#",  # Comments
    r"noqa:\s*tenant-scoping",  # Explicit suppression
]

# A store-owned query counts as scoped if one of these appears nearby
SCOPED_CONTEXT = re.compile(r"store_id\s*=|\.store_id\s*==")


# ────────────────────────────────────────────────────────────────
# Data Classes
# ────────────────────────────────────────────────────────────────

@dataclass
class Finding:
    """A single tenant scoping issue."""

    file: Path
    line_num: int
    line_text: str
    severity: str
    description: str

    def __str__(self):
        return f"{self.severity}: {self.file}:{self.line_num} - {self.description}\n  > {self.line_text.strip()}"


# ────────────────────────────────────────────────────────────────
# Scanning Logic
# ────────────────────────────────────────────────────────────────

def should_exclude(path: Path) -> bool:
    """Check if a path should be excluded from scanning."""
    path_str = path.as_posix()
    return any(excl in path_str for excl in EXCLUDE_PATTERNS)


def should_ignore_line(line: str) -> bool:
    """Check if a line should be ignored (false positive suppression)."""
    return any(re.search(pattern, line, re.IGNORECASE) for pattern in IGNORE_PATTERNS)


def scan_file(file_path: Path) -> List[Finding]:
    """Scan a single file for tenant scoping issues."""
    findings = []

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Warning: Could not read {file_path}: {e}", file=sys.stderr)
        return []

    lines = content.split("\n")

    for line_num, line in enumerate(lines, 1):
        if should_ignore_line(line):
            continue

        for pattern, severity, description in BAD_PATTERNS:
            if not re.search(pattern, line):
                continue
            if severity == "HIGH" and "store_id" in description:
                # Multi-line statements: look at this line plus the next 6
                context_window = "\n".join(lines[line_num - 1:line_num + 6])
                if SCOPED_CONTEXT.search(context_window):
                    continue

            findings.append(Finding(
                file=file_path,
                line_num=line_num,
                line_text=line,
                severity=severity,
                description=description,
            ))

    return findings


def scan_directory(root: Path) -> List[Finding]:
    """Recursively scan a directory for tenant scoping issues."""
    all_findings = []

    for path in sorted(root.rglob("*.py")):
        if should_exclude(path):
            continue
        all_findings.extend(scan_file(path))

    return all_findings


# ────────────────────────────────────────────────────────────────
# Reporting
# ────────────────────────────────────────────────────────────────

SEVERITY_ORDER = ["CRITICAL", "HIGH", "WARNING"]


def print_report(findings: List[Finding], verbose: bool = False):
    """Print the findings report."""

    if not findings:
        print("✅ No tenant scoping issues found!")
        return

    by_severity = {}
    for f in findings:
        by_severity.setdefault(f.severity, []).append(f)

    print("\n" + "=" * 60)
    print("STOREFRONT TENANT SCOPING REPORT")
    print("=" * 60)

    print("\nSUMMARY:")
    for sev in SEVERITY_ORDER:
        count = len(by_severity.get(sev, []))
        if count > 0:
            print(f"  {sev}: {count}")

    print(f"\nTOTAL: {len(findings)} issues")

    if verbose:
        print("\n" + "-" * 60)
        print("DETAILS:")
        print("-" * 60)
        for sev in SEVERITY_ORDER:
            for f in by_severity.get(sev, []):
                print(f"  {f}")
    else:
        print("\nRun with -v for detailed findings.")


# ────────────────────────────────────────────────────────────────
# Main
# ────────────────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(
        description="Check the storefront for multi-tenancy scoping issues"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed findings"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with code 1 if any issues found (for CI)"
    )
    parser.add_argument(
        "--path",
        type=Path,
        default=SCAN_ROOT,
        help=f"Path to scan (default: {SCAN_ROOT})"
    )

    args = parser.parse_args()

    if not args.path.exists():
        print(f"Error: Path {args.path} does not exist", file=sys.stderr)
        sys.exit(1)

    print(f"Scanning {args.path}...")
    findings = scan_directory(args.path)
    print_report(findings, verbose=args.verbose)

    critical = [f for f in findings if f.severity == "CRITICAL"]
    if critical or (args.strict and findings):
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
