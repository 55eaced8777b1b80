"""
Dynamoscan Analyzers Package

- Evidence Normalizer: raw transaction record to execution trace
- Detector Registry: log and balance heuristics over a trace
- Bytecode Scanner: byte-motif heuristics over program data
- State-Change Differ and Risk scoring
"""

from .bytecode_scanner import BytecodeScanner, recommendations_for
from .detectors import DetectionRule, DetectorRegistry
from .normalizer import EvidenceNormalizer
from .state_diff import StateChangeDiffer, is_suspicious_balance_change

__all__ = [
    'BytecodeScanner',
    'recommendations_for',
    'DetectionRule',
    'DetectorRegistry',
    'EvidenceNormalizer',
    'StateChangeDiffer',
    'is_suspicious_balance_change',
]
