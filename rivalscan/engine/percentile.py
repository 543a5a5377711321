"""Target standing among its peers: percentiles and rank position.

Percentiles are inclusive: the share of peers whose metric is <= the
target's, so a business never ranks below itself.
"""

from rivalscan.engine.rounding import round_half_up_int
from rivalscan.models.report import PercentileStanding, RankedEntry
from rivalscan.models.venue import TargetBusiness, VenueRecord

TOP_RANKED_LIMIT = 10


def _inclusive_percentile(target_value: float, peer_values: list[float]) -> int:
    if not peer_values:
        return 0
    at_or_below = sum(1 for v in peer_values if v <= target_value)
    return round_half_up_int(100 * at_or_below / len(peer_values))


def compute_percentile(
    target: TargetBusiness,
    peers: list[VenueRecord],
    top_limit: int = TOP_RANKED_LIMIT,
) -> PercentileStanding:
    """Review/rating percentiles plus the target's rank by review count.

    Rank orders target + peers by review count descending; the target sits
    ahead of peers it ties with. No peers yields 0 percentiles and rank 1 of 1.
    """
    review_percentile = _inclusive_percentile(target.review_count, [p.review_count for p in peers])
    rating_percentile = _inclusive_percentile(target.rating, [p.rating for p in peers])

    # (-reviews, is_peer, input position, ...) sorts most-reviewed first, target before ties
    entries = [(-target.review_count, 0, 0, target.name, target.rating, target.review_count)]
    for i, peer in enumerate(peers, start=1):
        entries.append((-peer.review_count, 1, i, peer.name, peer.rating, peer.review_count))
    entries.sort()

    rank = next(pos for pos, e in enumerate(entries, start=1) if e[1] == 0)
    top_ranked = tuple(
        RankedEntry(
            rank=pos,
            name=name,
            rating=rating,
            review_count=reviews,
            is_target=is_peer == 0,
        )
        for pos, (_, is_peer, _, name, rating, reviews) in enumerate(entries[:top_limit], start=1)
    )

    return PercentileStanding(
        review_percentile=review_percentile,
        rating_percentile=rating_percentile,
        rank=rank,
        total=len(entries),
        competitors_above=rank - 1,
        top_ranked=top_ranked,
    )
