"""Shared route dependencies."""
from fastapi import Request

from ...core.analyzer import ChainAnalyzer


def get_analyzer(request: Request) -> ChainAnalyzer:
    return request.app.state.analyzer
