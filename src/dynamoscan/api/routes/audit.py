"""Contract audit endpoint."""
from fastapi import APIRouter, Depends

from ...analyzers.types import ContractAuditRequest
from ...core.analyzer import ChainAnalyzer
from .deps import get_analyzer

router = APIRouter()


@router.post("/contract")
async def audit_contract(
    request: ContractAuditRequest,
    analyzer: ChainAnalyzer = Depends(get_analyzer),
) -> dict:
    """
    Run the bytecode heuristics over a deployed program.

    - **programId**: base58 program address
    - **network**: mainnet-beta, devnet or testnet (optional)
    - **depth**: shallow or deep (optional, default shallow)
    """
    result = await analyzer.audit_contract(request)
    return result.model_dump(mode="json", by_alias=True)
