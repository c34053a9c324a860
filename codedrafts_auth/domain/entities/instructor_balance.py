from typing import Optional

from sqlalchemy import BigInteger, Column, ForeignKey, Integer
from sqlmodel import Field, SQLModel


class InstructorBalance(SQLModel, table=True):
    """Earnings ledger of a user, one-to-one with `User`.

    The row is created at zero the moment the user's email becomes verified;
    its absence means the user has never been verified. Amounts are whole
    currency units.
    """

    __tablename__ = "instructor_balances"

    id: Optional[int] = Field(default=None, primary_key=True)
    instructor_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            unique=True,
            index=True,
            nullable=False,
        ),
    )
    current_balance: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
