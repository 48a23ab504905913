"""
Insight Synthesizer
===================

Rule-based generation of human-readable insights from aggregate metrics.
Each rule is independent; any subset may fire.

Rules (type, impact, confidence):
    positive rate >= 80%            positive     high    0.90
    negative rate >= 20%            negative     high    0.85
    top negative keyword exists     warning      medium  0.80
    top positive keyword exists     opportunity  medium  0.80
    5-star share >= 60%             positive     high    0.85
    response rate < 50%             warning      medium  0.80
    latest bucket rating improved   positive     medium  0.80

Percentage rules need at least one review, so an empty slice only ever
yields keyword or trend insights (and in practice none).
"""

import logging
import uuid
from typing import Dict, List, Optional, Sequence

from ..reviews.review_models import KeywordStat, Sentiment
from .analytics_models import (
    Impact,
    Insight,
    InsightType,
    SentimentDistribution,
    SummaryMetrics,
    TrendBucket,
)
from .metrics import percentage

logger = logging.getLogger(__name__)


HIGH_SATISFACTION_PCT = 80.0
HIGH_NEGATIVE_PCT = 20.0
FIVE_STAR_SHARE_PCT = 60.0
LOW_RESPONSE_RATE_PCT = 50.0


def _insight(
    type: InsightType,
    title: str,
    description: str,
    impact: Impact,
    confidence: float,
    recommendations: Sequence[str],
    data: Optional[Dict] = None,
) -> Insight:
    return Insight(
        id=uuid.uuid4().hex,
        type=type,
        title=title,
        description=description,
        impact=impact,
        confidence=confidence,
        recommendations=tuple(recommendations),
        data=data or {},
    )


class InsightSynthesizer:
    """Turns summary metrics, keywords and trends into a list of Insight."""

    def synthesize(
        self,
        summary: SummaryMetrics,
        sentiment: SentimentDistribution,
        keywords: Sequence[KeywordStat],
        trends: Sequence[TrendBucket],
        rating_distribution: Optional[Dict[int, int]] = None,
    ) -> List[Insight]:
        insights: List[Insight] = []
        insights.extend(self._sentiment_insights(sentiment))
        insights.extend(self._keyword_insights(keywords))
        insights.extend(self._rating_insights(summary, rating_distribution))
        insights.extend(self._response_insights(summary))
        insights.extend(self._trend_insights(trends))

        logger.debug(f"Synthesized {len(insights)} insights")
        return insights

    def _sentiment_insights(self, sentiment: SentimentDistribution) -> List[Insight]:
        if sentiment.total == 0:
            return []

        insights = []
        positive_pct = sentiment.percentage(Sentiment.POSITIVE)
        negative_pct = sentiment.percentage(Sentiment.NEGATIVE)

        if positive_pct >= HIGH_SATISFACTION_PCT:
            insights.append(_insight(
                InsightType.POSITIVE,
                "Alta Satisfação dos Clientes",
                f"{positive_pct:.1f}% das avaliações são positivas. Continue mantendo a qualidade!",
                Impact.HIGH,
                0.9,
                ["Continue mantendo a qualidade", "Use o feedback positivo em campanhas"],
                {"positive_percentage": positive_pct},
            ))

        if negative_pct >= HIGH_NEGATIVE_PCT:
            insights.append(_insight(
                InsightType.NEGATIVE,
                "Atenção: Aumento de Reclamações",
                f"{negative_pct:.1f}% das avaliações são negativas. Considere investigar os problemas.",
                Impact.HIGH,
                0.85,
                ["Investigue as causas dos problemas", "Melhore o processo de qualidade"],
                {"negative_percentage": negative_pct},
            ))

        return insights

    def _keyword_insights(self, keywords: Sequence[KeywordStat]) -> List[Insight]:
        insights = []

        # keywords arrive sorted by mentions, so the first match is the top one
        top_negative = next((k for k in keywords if k.sentiment == Sentiment.NEGATIVE), None)
        if top_negative is not None:
            insights.append(_insight(
                InsightType.WARNING,
                "Palavra-chave Negativa Detectada",
                f'"{top_negative.keyword}" aparece {top_negative.mentions} vezes com sentimento negativo.',
                Impact.MEDIUM,
                0.8,
                [f'Investigue as reclamações sobre "{top_negative.keyword}"'],
                {"keyword": top_negative.keyword, "mentions": top_negative.mentions},
            ))

        top_positive = next((k for k in keywords if k.sentiment == Sentiment.POSITIVE), None)
        if top_positive is not None:
            insights.append(_insight(
                InsightType.OPPORTUNITY,
                "Diferencial Competitivo Identificado",
                f'"{top_positive.keyword}" é muito elogiado pelos clientes. Use isso em suas campanhas!',
                Impact.MEDIUM,
                0.8,
                [f'Destaque "{top_positive.keyword}" na descrição do produto'],
                {"keyword": top_positive.keyword, "mentions": top_positive.mentions},
            ))

        return insights

    def _rating_insights(
        self,
        summary: SummaryMetrics,
        rating_distribution: Optional[Dict[int, int]],
    ) -> List[Insight]:
        if not rating_distribution or summary.total_reviews == 0:
            return []

        five_star_pct = percentage(rating_distribution.get(5, 0), summary.total_reviews)
        if five_star_pct < FIVE_STAR_SHARE_PCT:
            return []

        return [_insight(
            InsightType.POSITIVE,
            "Excelente Avaliação 5 Estrelas",
            f"{five_star_pct:.1f}% dos clientes deram 5 estrelas. Produto muito bem avaliado!",
            Impact.HIGH,
            0.85,
            ["Peça aos clientes satisfeitos que recomendem o produto"],
            {"five_star_percentage": five_star_pct},
        )]

    def _response_insights(self, summary: SummaryMetrics) -> List[Insight]:
        if summary.total_reviews == 0 or summary.response_rate >= LOW_RESPONSE_RATE_PCT:
            return []

        return [_insight(
            InsightType.WARNING,
            "Baixa Taxa de Resposta",
            f"Apenas {summary.response_rate:.1f}% das reviews têm resposta",
            Impact.MEDIUM,
            0.8,
            ["Implemente respostas automáticas", "Monitore reviews diariamente"],
            {"response_rate": summary.response_rate},
        )]

    def _trend_insights(self, trends: Sequence[TrendBucket]) -> List[Insight]:
        if len(trends) < 2:
            return []

        latest, previous = trends[-1], trends[-2]
        # an empty previous bucket averages 0.0, so any rated latest bucket is an improvement
        if latest.total == 0:
            return []
        if latest.average_rating <= previous.average_rating:
            return []

        return [_insight(
            InsightType.POSITIVE,
            "Melhoria na Avaliação Média",
            f"Avaliação média aumentou de {previous.average_rating:.1f} "
            f"para {latest.average_rating:.1f}",
            Impact.MEDIUM,
            0.8,
            ["Continue as melhorias implementadas", "Monitore a tendência"],
            {"current": latest.average_rating, "previous": previous.average_rating},
        )]
