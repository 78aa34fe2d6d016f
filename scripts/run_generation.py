#!/usr/bin/env python3
"""
Standalone generation script.
Generates sestine into a group, prints group statistics and odds,
optionally validates the group against a draw, then saves the workspace.
"""
import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sestine import analysis
from sestine.draws import parse_draw, parse_numbers, parse_optional_one
from sestine.errors import InvalidDrawInput
from sestine.probability import at_least_distribution, expected_hits
from sestine.storage import STATE_PATH, load_state, save_state


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Generate unique SuperEnalotto sestine.")
    p.add_argument("--count", type=int, default=10)
    p.add_argument("--group", default=None, help="Group name (created if missing)")
    p.add_argument("--seed", default=None, help="Seed string for reproducible output")
    p.add_argument("--exclude", default="", help="Numbers never to use, e.g. '13 17'")
    p.add_argument("--must-include", default="")
    p.add_argument("--any-of", default="")
    p.add_argument("--draw", default=None, help="Six drawn numbers to validate against")
    p.add_argument("--jolly", default="")
    p.add_argument("--superstar", default="")
    p.add_argument("--state", default=STATE_PATH)
    p.add_argument("--no-save", action="store_true")
    return p.parse_args(argv)


def _progress(done, total):
    print(f"  Progress: {done:,}/{total:,} ({100 * done / total:.0f}%)")


def main(argv=None):
    args = parse_args(argv)
    ws = load_state(args.state, verbose=True)

    s = ws.settings
    if args.seed is not None:
        s.seed_enabled = True
        s.seed_value = args.seed
    if args.exclude:
        s.exclude = parse_numbers(args.exclude)
    if args.must_include:
        s.must_include = parse_numbers(args.must_include)
    if args.any_of:
        s.must_include_any_of = parse_numbers(args.any_of)

    name = args.group or "Default"
    group = next((g for g in ws.groups if g.name == name), None) or ws.add_group(name)

    print(f"\n{'='*60}")
    print(f"GENERATING {args.count:,} SESTINE INTO '{group.name}'")
    print(f"{'='*60}")
    print(f"  Seed: {s.seed if s.seed is not None else 'OFF'}")
    print(f"  Constraints: {ws.constraints().to_dict()}")

    outcome = asyncio.run(ws.generate(group.id, args.count, progress=_progress))
    if not outcome.ok:
        print(f"\n  Generation {outcome.status.value}: [{outcome.error_kind}] {outcome.message}")
        return 1

    for combo in outcome.combinations[:20]:
        print(f"    {combo.key}  (nonce {combo.attempt_nonce})")
    if len(outcome.combinations) > 20:
        print(f"    ... {len(outcome.combinations) - 20:,} more")

    freq = analysis.frequency_map(group.combinations)
    print(f"\n{'='*60}")
    print(f"GROUP STATISTICS - {len(group.combinations):,} sestine")
    print(f"{'='*60}")
    top = ", ".join(f"{t['n']}({t['count']})" for t in analysis.top_numbers(freq, 10))
    print(f"  Top 10: {top}")
    print(f"  Missing numbers: {len(analysis.missing_numbers(freq))}")
    shares = analysis.frequency_frame(group.combinations)
    print(f"  Share per number: min {shares['pct'].min():.2f}%, "
          f"max {shares['pct'].max():.2f}% (uniform {100 / len(shares):.2f}%)")
    uni = analysis.uniformity_test(group.combinations)
    print(f"  Uniformity: chi2={uni['chi2']:.1f}, p={uni['p_value']:.3f}")

    print(f"\n  Expected matched numbers per draw: {expected_hits(len(group.combinations)):.2f}")
    print("  Best-of-group odds (independence approximation):")
    for row in at_least_distribution(len(group.combinations)):
        print(f"    >= {row['m']} matches: {row['p']:.6%}")

    if args.draw:
        try:
            draw = parse_draw(args.draw)
            result = ws.validate(group.id, draw,
                                 parse_optional_one(args.jolly),
                                 parse_optional_one(args.superstar))
        except InvalidDrawInput as e:
            print(f"\n  Invalid draw: {e.message}")
            return 1
        print(f"\n{'='*60}")
        print(f"VALIDATION - draw {' '.join(str(n) for n in result['draw'])}")
        print(f"{'='*60}")
        for hits in range(6, -1, -1):
            print(f"  {hits} hits: {result['counts'][hits]:,}")
        for tier, n in result["tier_counts"].items():
            if n and tier != "none":
                print(f"  Tier {tier}: {n:,}")
        print(f"  Estimated payout: EUR {result['total_payout']:,.2f}")

    if not args.no_save:
        save_state(ws, args.state)

    print(f"\n{'='*60}")
    print(f"DISCLAIMER: {analysis.odds_text()}")
    print(f"{'='*60}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
