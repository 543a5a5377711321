"""CLI for running a competitor analysis from the terminal.

Usage:
    python -m rivalscan.cli "Paradise Biryani" "Hyderabad"
    python -m rivalscan.cli "Paradise Biryani" "Hyderabad" --no-save
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from rivalscan.config import settings
from rivalscan.data.analyzer import CompetitorAnalyzer, build_assembler
from rivalscan.data.commentary import CommentaryClient
from rivalscan.data.places import GooglePlacesClient
from rivalscan.data.store import SqlReportStore, init_db
from rivalscan.errors import AnalysisError
from rivalscan.models.report import ReportRecord, ThreatLevel


def print_report(report: ReportRecord) -> None:
    target = report.target
    standing = report.standing

    print(f"\n{'=' * 60}")
    print(f"  {target.name}, {target.city}")
    print(f"{'=' * 60}")
    print(f"  Category:         {target.primary_category}")
    print(f"  Rating:           {target.rating:.1f} ({target.review_count:,} reviews)")
    print(f"  Competitors:      {len(report.peers)}")
    print(f"  Market threat:    {report.overall_threat_level.value} (avg {report.average_threat_score})")
    print(f"  Review rank:      #{standing.rank} of {standing.total}")
    print(f"  Percentiles:      reviews {standing.review_percentile}, rating {standing.rating_percentile}")
    print()

    if report.top_competitors:
        print("  Top competitors:")
        for profile in report.top_competitors:
            v = profile.venue
            level = ThreatLevel.for_score(v.threat_score).value
            print(
                f"    {v.threat_score:>3}  {level:<6}  {v.name} "
                f"({v.rating:.1f}, {v.review_count:,} reviews, {v.distance_km} km)"
            )
        print()

    if report.category_breakdown:
        print("  Categories:")
        for agg in report.category_breakdown:
            print(f"    {agg.category:<20} {agg.count:>3} venues  {agg.total_review_votes:>8,} reviews  avg {agg.average_rating}")
        print()

    summary = report.commentary.executive_summary
    if summary.recommendation:
        print(f"  Recommendation: {summary.recommendation}")
        print()


async def run(name: str, city: str, save: bool) -> int:
    store = None
    engine = None
    if save:
        engine = create_async_engine(settings.database_url, echo=settings.debug)
        await init_db(engine)
        store = SqlReportStore(async_sessionmaker(engine, expire_on_commit=False))

    analyzer = CompetitorAnalyzer(GooglePlacesClient(), build_assembler(CommentaryClient()), store)
    try:
        if save:
            report_id, report = await analyzer.analyze_and_save(name, city)
        else:
            report_id, report = None, await analyzer.analyze(name, city)
    except AnalysisError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.detail:
            print(f"  {e.detail}", file=sys.stderr)
        return 1
    finally:
        if engine is not None:
            await engine.dispose()

    print_report(report)
    if report_id:
        print(f"  Saved report {report_id}\n")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Competitor analysis for a local restaurant")
    parser.add_argument("name", help="Business name")
    parser.add_argument("city", help="City")
    parser.add_argument("--no-save", action="store_true", help="Skip persisting the report")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)

    sys.exit(asyncio.run(run(args.name, args.city, save=not args.no_save)))


if __name__ == "__main__":
    main()
