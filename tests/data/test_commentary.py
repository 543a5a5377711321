import json
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from rivalscan.data.commentary import CommentaryClient, build_prompt, parse_commentary
from rivalscan.errors import ClassificationMalformed, DataSourceUnavailable

VALID = {
    "executiveSummary": {
        "overview": "Crowded biryani belt.",
        "keyFindings": ["a", "b", "c", "d"],
        "immediateThreats": "Bawarchi",
        "growthOpportunities": "Late night",
        "recommendation": "Extend hours",
    },
    "finalStrategicVerdict": "",
    "yourKeywordCluster": {"primary": ["biryani"], "positive": ["aromatic"], "negative": ["oily"]},
    "competitorKeywordClusters": [{"restaurant": "Bawarchi", "keywords": ["mutton"]}],
    "competitorEnhancements": [{"restaurant": "Bawarchi", "strengths": ["volume"], "sentimentScore": 0.7}],
    "targetCategory": "Biryani",
    "categoryClassification": {"Bawarchi": "Biryani", "Pizza Hut": "Pizza"},
}


def _mock_anthropic(text: str) -> MagicMock:
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=MagicMock(content=[MagicMock(text=text)]))
    return client


class TestParseCommentary:
    def test_valid(self):
        commentary = parse_commentary(json.dumps(VALID))
        assert commentary.category_classification["Pizza Hut"] == "Pizza"
        assert commentary.target_category == "Biryani"
        assert commentary.competitor_enhancements[0].sentiment_score == 0.7

    def test_code_fence(self):
        text = f"Here you go:\n```json\n{json.dumps(VALID)}\n```"
        assert parse_commentary(text).executive_summary.recommendation == "Extend hours"

    def test_optional_sections_default(self):
        minimal = {k: VALID[k] for k in ("executiveSummary", "yourKeywordCluster", "categoryClassification")}
        commentary = parse_commentary(json.dumps(minimal))
        assert commentary.competitor_enhancements == []
        assert commentary.target_category is None

    def test_not_json(self):
        with pytest.raises(ClassificationMalformed):
            parse_commentary("Sorry, I can't help with that.")

    def test_not_an_object(self):
        with pytest.raises(ClassificationMalformed):
            parse_commentary("[1, 2, 3]")

    def test_missing_classification(self):
        broken = {k: v for k, v in VALID.items() if k != "categoryClassification"}
        with pytest.raises(ClassificationMalformed):
            parse_commentary(json.dumps(broken))

    def test_wrong_shape(self):
        with pytest.raises(ClassificationMalformed):
            parse_commentary(json.dumps({**VALID, "categoryClassification": ["Bawarchi", "Biryani"]}))

    def test_null_label_falls_back_per_venue(self):
        commentary = parse_commentary(json.dumps({
            **VALID, "categoryClassification": {"Bawarchi": None, "Pizza Hut": "Pizza", "Chutneys": 7},
        }))
        assert commentary.category_classification == {"Pizza Hut": "Pizza"}

    def test_null_enhancement_fields_take_defaults(self):
        commentary = parse_commentary(json.dumps({
            **VALID,
            "competitorEnhancements": [
                {"restaurant": "Bawarchi", "sentimentLabel": None, "sentimentScore": None, "strengths": None},
            ],
        }))
        enhancement = commentary.enhancement_for("Bawarchi")
        assert enhancement.sentiment_label == "Neutral"
        assert enhancement.sentiment_score == 0.0
        assert enhancement.strengths == []

    def test_unusable_enhancement_entries_skipped(self):
        commentary = parse_commentary(json.dumps({
            **VALID,
            "competitorEnhancements": [
                {"restaurant": None, "strengths": ["x"]},
                {"restaurant": "Pizza Hut", "sentimentScore": "very"},
                "Chutneys",
                {"restaurant": "Bawarchi", "strengths": ["volume"]},
            ],
            "competitorKeywordClusters": [{"keywords": ["no name"]}, {"restaurant": "Bawarchi"}],
        }))
        assert [e.restaurant for e in commentary.competitor_enhancements] == ["Bawarchi"]
        assert [c.restaurant for c in commentary.competitor_keyword_clusters] == ["Bawarchi"]

    def test_non_string_target_category_ignored(self):
        commentary = parse_commentary(json.dumps({**VALID, "targetCategory": ["Biryani"]}))
        assert commentary.target_category is None

    def test_null_classification_map_is_malformed(self):
        with pytest.raises(ClassificationMalformed):
            parse_commentary(json.dumps({**VALID, "categoryClassification": None}))

    def test_fence_inside_string_value_kept(self):
        text = json.dumps({**VALID, "finalStrategicVerdict": "Reply in ```markdown``` blocks"})
        assert parse_commentary(text).final_strategic_verdict == "Reply in ```markdown``` blocks"


class TestBuildPrompt:
    def test_includes_every_peer(self, canonical_target, scored_peers):
        prompt = build_prompt(canonical_target, scored_peers[:2], scored_peers)
        assert "Paradise Biryani" in prompt
        for venue in scored_peers:
            assert venue.name in prompt
        assert "categoryClassification" in prompt


class TestCommentaryClient:
    async def test_generate(self, canonical_target, scored_peers):
        mock_client = _mock_anthropic(json.dumps(VALID))
        with patch("rivalscan.data.commentary.anthropic.AsyncAnthropic", return_value=mock_client):
            commentary = await CommentaryClient(api_key="test-key", model="test-model").generate(
                canonical_target, scored_peers[:5], scored_peers,
            )

        assert commentary.category_classification["Bawarchi"] == "Biryani"
        kwargs = mock_client.messages.create.await_args.kwargs
        assert kwargs["model"] == "test-model"
        assert "Far Away Dhaba" in kwargs["messages"][0]["content"]

    async def test_malformed_response(self, canonical_target, scored_peers):
        mock_client = _mock_anthropic("not json at all")
        with patch("rivalscan.data.commentary.anthropic.AsyncAnthropic", return_value=mock_client):
            with pytest.raises(ClassificationMalformed):
                await CommentaryClient(api_key="test-key").generate(canonical_target, [], scored_peers)

    async def test_api_error(self, canonical_target, scored_peers):
        mock_client = MagicMock()
        mock_client.messages.create = AsyncMock(
            side_effect=anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com")),
        )
        with patch("rivalscan.data.commentary.anthropic.AsyncAnthropic", return_value=mock_client):
            with pytest.raises(DataSourceUnavailable):
                await CommentaryClient(api_key="test-key").generate(canonical_target, [], scored_peers)

    async def test_missing_key(self, canonical_target, scored_peers):
        client = CommentaryClient()
        client.api_key = ""
        with pytest.raises(DataSourceUnavailable, match="not configured"):
            await client.generate(canonical_target, [], scored_peers)
