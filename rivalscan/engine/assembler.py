"""Report assembly: raw venues + target -> immutable ReportRecord.

Flow: filter peers -> score each peer -> commentary/classification (external)
-> merge labels -> aggregate, rank, percentile -> ReportRecord.

The only awaited step is the injected commentary source; everything else is
the pure engine.
"""

import logging

from rivalscan.data.base import CommentarySource
from rivalscan.engine.aggregation import aggregate_by_category
from rivalscan.engine.classification import (
    apply_classification,
    base_category_types,
    classify_target,
    shares_category,
)
from rivalscan.engine.filters import filter_peers
from rivalscan.engine.percentile import compute_percentile
from rivalscan.engine.ranking import emerging_venues, same_category_nearby, top_competitors
from rivalscan.engine.scoring import average_threat_score, score_venue
from rivalscan.errors import NoVenuesFound, OnlyNonCompetingVenues
from rivalscan.models.commentary import MarketCommentary
from rivalscan.models.report import (
    CompetitorProfile,
    MarketThreatLevel,
    ReportRecord,
)
from rivalscan.models.venue import TargetBusiness, VenueRecord

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_CATEGORY = "Multi-cuisine"


def score_peers(target: TargetBusiness, peers: list[VenueRecord]) -> list[VenueRecord]:
    """Score every peer against the target's location and tags."""
    return [
        score_venue(
            peer,
            target.location,
            same_category=shares_category(peer.category_tags, target.category_tags),
        )
        for peer in peers
    ]


def build_report(
    target: TargetBusiness,
    scored_peers: list[VenueRecord],
    commentary: MarketCommentary,
    fallback_category: str = DEFAULT_FALLBACK_CATEGORY,
    nearby_radius_km: float = 5.0,
    top_limit: int = 5,
    same_category_limit: int = 5,
    emerging_limit: int = 5,
    breakdown_limit: int = 8,
) -> ReportRecord:
    """Pure half of assembly, once commentary is in hand.

    Never fails on empty sub-results: empty views, 0 percentiles and a
    fallback category are all valid outputs.
    """
    classified = apply_classification(
        scored_peers, commentary.category_classification, fallback_category,
    )
    target = classify_target(target, commentary.target_category, fallback_category)

    top = top_competitors(classified, top_limit)
    profiles = tuple(CompetitorProfile(v, commentary.enhancement_for(v.name)) for v in top)

    average = average_threat_score(top)
    breakdown = aggregate_by_category(classified)

    return ReportRecord(
        target=target,
        base_category_types=tuple(base_category_types(target.category_tags)),
        peers=tuple(classified),
        top_competitors=profiles,
        same_category_nearby=tuple(
            same_category_nearby(
                classified, target.primary_category, same_category_limit, nearby_radius_km,
            )
        ),
        emerging_venues=tuple(emerging_venues(classified, emerging_limit)),
        category_breakdown=tuple(breakdown[:breakdown_limit]),
        standing=compute_percentile(target, classified),
        average_threat_score=average,
        overall_threat_level=MarketThreatLevel.for_average(average),
        commentary=commentary,
    )


class ReportAssembler:
    """Runs the scoring pipeline around an injected commentary source.

    Usage:
        assembler = ReportAssembler(CommentaryClient())
        report = await assembler.assemble(target, venues)
    """

    def __init__(
        self,
        commentary_source: CommentarySource,
        fallback_category: str = DEFAULT_FALLBACK_CATEGORY,
        nearby_radius_km: float = 5.0,
        top_limit: int = 5,
        same_category_limit: int = 5,
        emerging_limit: int = 5,
        breakdown_limit: int = 8,
    ):
        self.commentary_source = commentary_source
        self.fallback_category = fallback_category
        self.nearby_radius_km = nearby_radius_km
        self.top_limit = top_limit
        self.same_category_limit = same_category_limit
        self.emerging_limit = emerging_limit
        self.breakdown_limit = breakdown_limit

    def prepare_peers(self, target: TargetBusiness, raw_venues: list[VenueRecord]) -> list[VenueRecord]:
        """Filter and score. Raises NoPeersFound subclasses on empty input or output."""
        if not raw_venues:
            raise NoVenuesFound()

        peers = filter_peers(raw_venues)
        logger.info("%d of %d venues kept after peer filtering", len(peers), len(raw_venues))
        if not peers:
            raise OnlyNonCompetingVenues()

        return score_peers(target, peers)

    async def assemble(self, target: TargetBusiness, raw_venues: list[VenueRecord]) -> ReportRecord:
        scored = self.prepare_peers(target, raw_venues)

        commentary = await self.commentary_source.generate(
            target,
            top_competitors(scored, self.top_limit),
            scored,
        )

        report = build_report(
            target,
            scored,
            commentary,
            fallback_category=self.fallback_category,
            nearby_radius_km=self.nearby_radius_km,
            top_limit=self.top_limit,
            same_category_limit=self.same_category_limit,
            emerging_limit=self.emerging_limit,
            breakdown_limit=self.breakdown_limit,
        )
        logger.info(
            "Report assembled for %s: %d peers, primary category %r, threat %s",
            target.name, len(report.peers), report.target.primary_category,
            report.overall_threat_level.value,
        )
        return report
