"""
Database Models (SQLAlchemy ORM)

decision_state is the only table this service writes: insert-only except for
the lock flag and the acknowledgment timestamp - NO DELETES.
The remaining tables belong to the collaborator services and are read-only here.
"""

from sqlalchemy import (
    Column, Integer, BigInteger, String, Float, Date,
    Boolean, Text, Enum as SQLEnum, Index, text
)
import enum

from app.infrastructure.db.database import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# Enums
class RiskLevelEnum(str, enum.Enum):
    SAFE = "safe"
    CAUTION = "caution"
    WARNING = "warning"
    DANGER = "danger"
    CRITICAL = "critical"


class CommandTypeEnum(str, enum.Enum):
    PAY = "pay"
    SAVE = "save"
    SPEND = "spend"
    FREEZE = "freeze"
    WAIT = "wait"


# Tables

class DecisionStateModel(Base):
    """One computed daily decision - current (unlocked) or historical (locked)"""
    __tablename__ = "decision_state"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    decision_version = Column(String(20), nullable=False)

    risk_level = Column(
        SQLEnum(RiskLevelEnum, native_enum=False, length=20, values_callable=_enum_values),
        nullable=False,
    )
    primary_command_type = Column(
        SQLEnum(CommandTypeEnum, native_enum=False, length=20, values_callable=_enum_values),
        nullable=False,
    )
    primary_command_text = Column(Text, nullable=False)
    primary_command_amount_cents = Column(BigInteger, nullable=True)
    primary_command_target = Column(String(200), nullable=True)
    primary_command_date = Column(String(10), nullable=True)

    warning_1 = Column(Text, nullable=True)
    warning_2 = Column(Text, nullable=True)
    suggestion = Column(Text, nullable=True)

    next_action_text = Column(String(200), nullable=False)
    next_action_url = Column(String(200), nullable=False)

    decision_basis_json = Column(Text, nullable=True)

    computed_at = Column(BigInteger, nullable=False)  # epoch ms
    expires_at = Column(BigInteger, nullable=False)  # epoch ms
    is_locked = Column(Boolean, nullable=False, default=False)
    acknowledged_at = Column(BigInteger, nullable=True)  # epoch ms

    __table_args__ = (
        Index("ix_decision_state_expires", "expires_at"),
        Index("ix_decision_state_user_computed", "user_id", "computed_at"),
        # At most one current decision per user
        Index(
            "ux_decision_state_user_unlocked",
            "user_id",
            unique=True,
            postgresql_where=text("is_locked = false"),
            sqlite_where=text("is_locked = 0"),
        ),
    )


# Collaborator tables (read-only)

class UserModel(Base):
    """Users (owned by the auth service)"""
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    email = Column(String(320), nullable=False)
    plan = Column(String(20), nullable=False, default="free")  # free, pro, premium
    plan_expires_at = Column(BigInteger, nullable=True)  # epoch ms
    timezone = Column(String(64), nullable=True)  # IANA name


class AccountModel(Base):
    """Bank/cash accounts"""
    __tablename__ = "accounts"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    type = Column(String(20), nullable=False)  # checking, savings, credit, cash
    current_balance_cents = Column(BigInteger, nullable=True, default=0)


class TransactionModel(Base):
    """Ledger entries"""
    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    amount_cents = Column(BigInteger, nullable=False)
    type = Column(String(20), nullable=False)  # income, expense


class ScheduledBillModel(Base):
    """Recurring bills"""
    __tablename__ = "scheduled_bills"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    due_day = Column(Integer, nullable=True)
    next_due_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active, paused, completed


class ScheduledIncomeModel(Base):
    """Recurring paychecks"""
    __tablename__ = "scheduled_income"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    amount_cents = Column(BigInteger, nullable=False, default=0)
    next_pay_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active, paused, ended


class DebtModel(Base):
    """Outstanding debts"""
    __tablename__ = "debts"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    current_balance_cents = Column(BigInteger, nullable=False)
    apr_percent = Column(Float, nullable=False)
    minimum_payment_cents = Column(BigInteger, nullable=True)
    next_due_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active, paid_off, defaulted, deferred
