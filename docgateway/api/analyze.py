# ABOUTME: Text analysis endpoint
# ABOUTME: Scores arbitrary text with the AI model without persisting documents or analyses

from fastapi import APIRouter, Depends, HTTPException

from docgateway.dependencies import validated_analyze_payload, require_api_access
from docgateway.models.errors import ANALYZE_ERRORS
from docgateway.services.analysis import AnalysisError, DocumentAnalyzer, get_analyzer
from docgateway.services.api_keys import ResolvedKey
from docgateway.utils.validators import AnalyzePayload

router = APIRouter(tags=["analysis"])


@router.post("/analyze", responses={
    200: {"description": "Analysis result", "content": {"application/json": {"example": {
        "title": "Q3 report",
        "wordCount": 4,
        "readingTimeMinutes": 1,
        "summary": "Revenue grew over the quarter.",
        "keywords": ["revenue", "growth"],
        "sentiment": "positive",
        "sentimentScore": 0.8,
        "keyTopics": ["finance"],
    }}}},
    **ANALYZE_ERRORS,
})
async def analyze(
    payload: AnalyzePayload = Depends(validated_analyze_payload),
    access: ResolvedKey = Depends(require_api_access),
    analyzer: DocumentAnalyzer = Depends(get_analyzer)
):
    """Analyze text content and return summary, keywords, sentiment, and topics."""
    try:
        return await analyzer.analyze(payload.content, payload.title)
    except AnalysisError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"code": e.code, "error": e.message}
        )
