"""
Type definitions for the exploit detection pipeline.

Every result type is a frozen pydantic model: once produced it cannot be
mutated, which is what lets the orchestrator hand the same cached instance to
any number of callers. Models serialize with camelCase aliases so
``model_dump(by_alias=True)`` yields the public response shape.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core.config import Network


class Severity(str, Enum):
    """Finding severity."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# Explicit ordering; never rely on enum declaration order.
SEVERITY_RANK: Dict[Severity, int] = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.INFO: 0,
}


class ExploitType(str, Enum):
    """Closed set of exploit categories a detection rule can report."""
    REENTRANCY = "reentrancy"
    INTEGER_OVERFLOW = "integer_overflow"
    INTEGER_UNDERFLOW = "integer_underflow"
    AUTHORITY_BYPASS = "authority_bypass"
    UNAUTHORIZED_ACCESS = "unauthorized_access"
    ACCOUNT_CONFUSION = "account_confusion"
    SIGNER_BYPASS = "signer_bypass"
    PDA_MISMATCH = "pda_mismatch"
    MISSING_OWNER_CHECK = "missing_owner_check"
    MISSING_SIGNER_CHECK = "missing_signer_check"
    ARBITRARY_CODE_EXECUTION = "arbitrary_code_execution"
    FLASH_LOAN_ATTACK = "flash_loan_attack"
    PRICE_MANIPULATION = "price_manipulation"
    FRONT_RUNNING = "front_running"
    SANDWICH = "sandwich"
    TYPE_CONFUSION = "type_confusion"
    INSUFFICIENT_RENT_EXEMPTION = "insufficient_rent_exemption"
    ORACLE_MANIPULATION = "oracle_manipulation"
    DOS_ATTACK = "dos_attack"
    ARBITRARY_CPI = "arbitrary_cpi"
    BUMP_SEED_CANONICAL = "bump_seed_canonical"
    ACCOUNT_DATA_MISMATCH = "account_data_mismatch"
    MISSING_RENT_CHECK = "missing_rent_check"
    UNCHECKED_ACCOUNT_OWNERSHIP = "unchecked_account_ownership"
    TOKEN_ACCOUNT_VALIDATION = "token_account_validation"
    MINT_AUTHORITY_BYPASS = "mint_authority_bypass"
    FREEZE_AUTHORITY_BYPASS = "freeze_authority_bypass"
    DUPLICATE_ACCOUNT_MUTABLE = "duplicate_account_mutable"
    ACCOUNT_REINITIALIZATION = "account_reinitialization"
    CLOSED_ACCOUNT_REVIVAL = "closed_account_revival"
    UNKNOWN = "unknown"


class AuditDepth(str, Enum):
    """Requested depth of a contract audit."""
    SHALLOW = "shallow"
    DEEP = "deep"


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class ExecutionTrace(_Model):
    """Uniform view of one transaction's execution evidence."""
    success: bool
    error: Optional[str] = None
    resource_units_consumed: int = Field(0, ge=0)
    logs: Tuple[str, ...] = ()
    accessed_accounts: Tuple[str, ...] = ()


class Exploit(_Model):
    category: ExploitType
    severity: Severity
    confidence: float = Field(ge=0.0, le=1.0)
    description: str
    location: str
    remediation: Optional[str] = None


class Vulnerability(_Model):
    kind: str
    severity: Severity
    description: str
    affected_instructions: Tuple[str, ...] = ()
    confidence: float = Field(ge=0.0, le=1.0)


class StateChange(_Model):
    account: str
    field: str = "lamports"
    before: str
    after: str
    suspicious: bool


class AnalysisMetadata(_Model):
    timestamp: int
    duration_ms: int = Field(ge=0)
    analyzer_version: str
    network: str


class AnalysisResult(_Model):
    """Fully formed outcome of a transaction analysis."""
    risk_score: float = Field(ge=0.0, le=100.0)
    exploits: Tuple[Exploit, ...] = ()
    state_changes: Tuple[StateChange, ...] = ()
    execution_trace: ExecutionTrace
    metadata: AnalysisMetadata


class CodeQuality(_Model):
    score: float = Field(ge=0.0, le=1.0)
    metrics: Dict[str, float]


class AuditMetadata(_Model):
    timestamp: int
    duration_ms: int = Field(ge=0)
    instructions_analyzed: int = Field(ge=0)
    depth: AuditDepth


class ContractAuditResult(_Model):
    """Fully formed outcome of a program audit."""
    program_id: str
    risk_score: float = Field(ge=0.0, le=100.0)
    vulnerabilities: Tuple[Vulnerability, ...] = ()
    code_quality: CodeQuality
    recommendations: Tuple[str, ...] = ()
    metadata: AuditMetadata


class AnalysisRequest(_Model):
    signature: str
    network: Optional[Network] = None


class ContractAuditRequest(_Model):
    program_id: str
    network: Optional[Network] = None
    depth: AuditDepth = AuditDepth.SHALLOW
