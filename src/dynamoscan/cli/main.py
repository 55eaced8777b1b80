"""
Dynamoscan CLI - Command Line Interface for transaction and program analysis
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Optional

from ..analyzers.types import AnalysisRequest, AuditDepth, ContractAuditRequest
from ..core.analyzer import ChainAnalyzer
from ..core.config import Network, Settings, settings
from ..data.solana_rpc import SolanaRPCClient
from ..exceptions import DynamoScanError
from ..utils.logger import setup_logger

logger = logging.getLogger("dynamoscan.cli")


def _config(rpc_url: Optional[str]) -> Settings:
    if rpc_url:
        return settings.model_copy(update={"RPC_URL": rpc_url.rstrip("/")})
    return settings


def _print(result: Any) -> None:
    print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))


async def _run(config: Settings, request: Any) -> Any:
    async with SolanaRPCClient(config.RPC_URL, timeout=config.REQUEST_TIMEOUT,
                               max_retries=config.MAX_RETRIES) as rpc:
        analyzer = ChainAnalyzer(rpc, config=config)
        if isinstance(request, ContractAuditRequest):
            return await analyzer.audit_contract(request)
        return await analyzer.analyze_transaction(request)


def analyze_transaction(signature: str, network: Optional[str] = None,
                        rpc_url: Optional[str] = None) -> None:
    """Analyze a transaction and print the JSON result."""
    request = AnalysisRequest(signature=signature, network=Network(network) if network else None)
    _print(asyncio.run(_run(_config(rpc_url), request)))


def audit_contract(program_id: str, network: Optional[str] = None, depth: str = "shallow",
                   rpc_url: Optional[str] = None) -> None:
    """Audit a deployed program and print the JSON result."""
    request = ContractAuditRequest(
        program_id=program_id,
        network=Network(network) if network else None,
        depth=AuditDepth(depth),
    )
    _print(asyncio.run(_run(_config(rpc_url), request)))


def serve(host: str, port: int, rpc_url: Optional[str] = None) -> None:
    """Run the HTTP API."""
    import uvicorn

    from ..api.app import create_application

    uvicorn.run(create_application(config=_config(rpc_url)), host=host, port=port)


def main() -> None:
    """Main entry point for the Dynamoscan CLI."""
    parser = argparse.ArgumentParser(
        description='Dynamoscan - heuristic exploit detection for Solana',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')
    parser.add_argument('--rpc-url', help='Solana JSON-RPC endpoint (default: from settings)')
    parser.add_argument('--network', choices=[n.value for n in Network],
                        help='Network tag reported in results')

    subparsers = parser.add_subparsers(dest='command', help='Available commands', required=True)

    analyze_parser = subparsers.add_parser('analyze', help='Analyze a transaction')
    analyze_parser.add_argument('signature', help='Base58 transaction signature')

    audit_parser = subparsers.add_parser('audit', help='Audit a deployed program')
    audit_parser.add_argument('program_id', help='Base58 program address')
    audit_parser.add_argument('--depth', choices=[d.value for d in AuditDepth], default='shallow',
                              help='Audit depth')

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', default=settings.HOST, help='Bind address')
    serve_parser.add_argument('--port', type=int, default=settings.PORT, help='Bind port')

    args = parser.parse_args()

    setup_logger(log_level=logging.DEBUG if args.verbose else None)

    try:
        if args.command == 'analyze':
            analyze_transaction(args.signature, network=args.network, rpc_url=args.rpc_url)
        elif args.command == 'audit':
            audit_contract(args.program_id, network=args.network, depth=args.depth,
                           rpc_url=args.rpc_url)
        elif args.command == 'serve':
            serve(args.host, args.port, rpc_url=args.rpc_url)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        sys.exit(130)
    except DynamoScanError as e:
        logger.error("Error: %s", e)
        if args.verbose:
            logger.exception("Detailed error:")
        sys.exit(1)


if __name__ == '__main__':
    main()
