from __future__ import annotations

from enum import Enum


class DistributionFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUALLY = "semi_annually"
    ANNUALLY = "annually"
    AT_MATURITY = "at_maturity"
    CUSTOM = "custom"


class ProfitPaymentStructure(str, Enum):
    PERIODIC = "periodic"
    AT_MATURITY = "at_maturity"


class InvestmentStatus(str, Enum):
    ACTIVE = "active"
    LATE = "late"
    DEFAULTED = "defaulted"
    COMPLETED = "completed"
    PENDING = "pending"


class CashflowType(str, Enum):
    PROFIT = "profit"
    PRINCIPAL = "principal"


class CashflowStatus(str, Enum):
    UPCOMING = "upcoming"
    EXPECTED = "expected"
    RECEIVED = "received"


class AlertType(str, Enum):
    DISTRIBUTION = "distribution"
    MATURITY = "maturity"
    RISK = "risk"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
