"""Claude client for competitive commentary and venue category classification.

One call per report. The model returns a single JSON object which is
validated against MarketCommentary; anything else is ClassificationMalformed.
"""

import json
import logging

import anthropic
from pydantic import ValidationError

from rivalscan.config import settings
from rivalscan.errors import ClassificationMalformed, DataSourceUnavailable
from rivalscan.models.commentary import MarketCommentary
from rivalscan.models.venue import TargetBusiness, VenueRecord

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a senior restaurant competitive intelligence strategist. You write detailed, "
    "actionable and easy-to-understand analyses that any restaurant owner can follow."
)

RESPONSE_SHAPE = """{
  "executiveSummary": {
    "overview": "2-3 sentence overview of the competitive landscape",
    "keyFindings": ["finding 1", "finding 2", "finding 3", "finding 4"],
    "immediateThreats": "1-2 sentences on the most urgent threats",
    "growthOpportunities": "1-2 sentences on the biggest opportunities",
    "recommendation": "1-2 sentence first action for the owner"
  },
  "finalStrategicVerdict": "",
  "yourKeywordCluster": {"primary": [], "positive": [], "negative": []},
  "competitorKeywordClusters": [{"restaurant": "competitor name", "keywords": []}],
  "competitorEnhancements": [
    {
      "restaurant": "competitor name",
      "strengths": [], "weaknesses": [],
      "sentimentLabel": "Positive/Negative/Mixed", "sentimentScore": 0.0,
      "whatTheyDoBetter": [], "whereYouWin": []
    }
  ],
  "targetCategory": "category of the restaurant being analysed",
  "categoryClassification": {"restaurant name 1": "Biryani", "restaurant name 2": "Pizza"}
}"""


def _competitor_payload(venue: VenueRecord) -> dict:
    return {
        "name": venue.name,
        "rating": venue.rating,
        "reviews": venue.review_count,
        "distanceKm": venue.distance_km,
        "threatScore": venue.threat_score,
        "types": sorted(venue.category_tags),
    }


def build_prompt(
    target: TargetBusiness,
    top_competitors: list[VenueRecord],
    peers: list[VenueRecord],
) -> str:
    top_json = json.dumps([_competitor_payload(v) for v in top_competitors])
    peers_json = json.dumps(
        [{"name": v.name, "rating": v.rating, "reviews": v.review_count} for v in peers]
    )
    return (
        "Analyze the competitive landscape for a restaurant.\n\n"
        f"Restaurant: {target.name}\n"
        f"City: {target.city}\n\n"
        f"Top competitors (with their data):\n{top_json}\n\n"
        f"All nearby restaurants (classify each by food category):\n{peers_json}\n\n"
        "Return ONLY valid JSON, no other text, with this shape:\n\n"
        f"{RESPONSE_SHAPE}\n\n"
        "Rules:\n"
        "- executiveSummary.keyFindings has exactly 4 specific insights\n"
        "- yourKeywordCluster.primary, .positive and .negative each have 5-8 keywords\n"
        "- each competitorEnhancements entry has 2-3 whatTheyDoBetter and whereYouWin items\n"
        "- categoryClassification maps EVERY nearby restaurant name, spelled exactly as given, "
        "to one food category such as Biryani, Pizza, Chinese, North Indian, South Indian, "
        "Italian, Continental, Cafe, Fast Food, Street Food, Seafood, Bakery, Multi-cuisine, "
        "Japanese or Thai\n"
    )


def _extract_json_object(text: str) -> str:
    """The span from the first "{" to the last "}", dropping any code fence or prose around it."""
    text = text.strip()
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end < start:
        return text
    return text[start:end + 1]


def parse_commentary(text: str) -> MarketCommentary:
    """Validate a raw model response. Raises ClassificationMalformed."""
    try:
        data = json.loads(_extract_json_object(text))
    except json.JSONDecodeError as e:
        raise ClassificationMalformed(f"Commentary is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ClassificationMalformed(f"Commentary must be a JSON object, got {type(data).__name__}")

    try:
        return MarketCommentary.model_validate(data)
    except ValidationError as e:
        raise ClassificationMalformed(f"Commentary failed validation: {e.error_count()} errors") from e


class CommentaryClient:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ):
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model or settings.commentary_model
        self.max_tokens = max_tokens or settings.commentary_max_tokens

    async def generate(
        self,
        target: TargetBusiness,
        top_competitors: list[VenueRecord],
        peers: list[VenueRecord],
    ) -> MarketCommentary:
        if not self.api_key:
            raise DataSourceUnavailable("Anthropic API key not configured")

        prompt = build_prompt(target, top_competitors, peers)
        try:
            client = anthropic.AsyncAnthropic(api_key=self.api_key)
            message = await client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise DataSourceUnavailable(f"Commentary generation failed: {e}") from e

        if not message.content:
            raise ClassificationMalformed("Commentary response was empty")

        commentary = parse_commentary(message.content[0].text)
        missing = [v.name for v in peers if v.name not in commentary.category_classification]
        if missing:
            logger.info("%d of %d venues left unclassified by commentary", len(missing), len(peers))
        return commentary
