"""Transaction analysis endpoint."""
from fastapi import APIRouter, Depends

from ...analyzers.types import AnalysisRequest
from ...core.analyzer import ChainAnalyzer
from .deps import get_analyzer

router = APIRouter()


@router.post("/transaction")
async def analyze_transaction(
    request: AnalysisRequest,
    analyzer: ChainAnalyzer = Depends(get_analyzer),
) -> dict:
    """
    Analyze a confirmed transaction for exploit patterns.

    - **signature**: base58 transaction signature
    - **network**: mainnet-beta, devnet or testnet (optional)
    """
    result = await analyzer.analyze_transaction(request)
    return result.model_dump(mode="json", by_alias=True)
