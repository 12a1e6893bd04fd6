"""
feedrank/main.py
Command-line pager for the feed engine.

- Loads environment config and a preference snapshot (JSON)
- Fetches N pages from the catalog and prints each as a table
- --profile prints the weighted keyword profile instead of a feed

Usage: python -m feedrank.main --inputs snapshot.json [--pages 2] [--seed 7] [--profile]
"""

import argparse, os, random, sys

from tabulate import tabulate

from .catalog import CatalogClient
from .config import FeedSettings
from .engine import FeedEngine, FeedInputError
from .feats import parse_age_days
from .profile import build_profile, top_interests
from .store import load_inputs
from .utils import load_env, setup_logging

def _print_env_summary(settings: FeedSettings):
    base = os.getenv("CATALOG_BASE_URL", "(default)")
    print(f"[config] CATALOG_BASE_URL={base}  PAGE_SIZE={settings.page_size}  CEILING={settings.ceiling}"
          f"  CHANNEL_CAP={settings.channel_cap}  DISCOVERY_RATIO={settings.discovery_ratio}")

def _rows(items, subs_set, start=1):
    # [#, title + stamps, channel, views, duration]
    rows = []
    for i, v in enumerate(items, start=start):
        stamps = []
        if v.channel_id in subs_set: stamps.append("[sub]")
        age = parse_age_days(v.published_at_text)
        if age is not None and age <= 14: stamps.append("[fresh]")
        title = v.title[:80] + (" " + " ".join(stamps) if stamps else "")
        rows.append([i, title, v.channel_name[:30], v.view_count, v.duration_text or v.iso_duration])
    return rows

def _print_profile(inputs, settings):
    profile = build_profile(inputs, settings)
    rows = [[k, f"{w:.3f}"] for k, w in sorted(profile.keywords.items(), key=lambda kv: -kv[1])[:30]]
    print(tabulate(rows, headers=["Keyword", "Weight"]))
    print(f"magnitude={profile.magnitude:.3f}  top={', '.join(top_interests(profile))}")

def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Personalized feed pager")
    ap.add_argument("--inputs", required=True, help="preference snapshot (JSON)")
    ap.add_argument("--pages", type=int, default=1)
    ap.add_argument("--seed", type=int, default=None, help="fix jitter/sampling for reproducible output")
    ap.add_argument("--profile", action="store_true", help="print the keyword profile and exit")
    return ap.parse_args(argv)

def main(argv=None):
    load_env()
    setup_logging()
    args = parse_args(argv)
    settings = FeedSettings()
    _print_env_summary(settings)

    inputs = load_inputs(args.inputs)
    if args.profile:
        _print_profile(inputs, settings)
        return 0

    rng = random.Random(args.seed) if args.seed is not None else random.Random()
    engine = FeedEngine(CatalogClient(), settings, rng=rng)
    subs_set = {c.id for c in inputs.subscriptions}

    shown = 0
    try:
        for _ in range(max(1, args.pages)):
            page = engine.load_page(inputs)
            if page.items:
                print(f"\n== page {page.page} ==")
                print(tabulate(_rows(page.items, subs_set, start=shown + 1),
                               headers=["#", "Title", "Channel", "Views", "Duration"]))
                shown += len(page.items)
            if page.shorts:
                print(f"(+{len(page.shorts)} shorts)")
            if not page.has_more:
                break
    except FeedInputError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    if shown == 0:
        print("No recommendations available.")
    return 0

if __name__ == "__main__":
    sys.exit(main())
