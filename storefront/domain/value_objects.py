"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Self

MIN_PHONE_LENGTH = 10


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def from_value(cls, value: object) -> Self:
        """Build from the loose number/string values the upstream API sends."""
        try:
            return cls(amount=Decimal(str(value if value is not None else 0)))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid money amount: {value!r}") from exc

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing stock or remaining quantity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class PromoCode:
    """Promo code normalized to uppercase; never blank."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Promo code cannot be blank")

    @classmethod
    def from_input(cls, raw: str | None) -> Self:
        return cls(value=(raw or "").strip().upper())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PhoneNumber:
    """M-Pesa phone number; only the minimum length is checked locally."""

    value: str

    def __post_init__(self) -> None:
        if len(self.value) < MIN_PHONE_LENGTH:
            raise ValueError("Phone number is too short")

    @classmethod
    def from_input(cls, raw: str | None) -> Self:
        return cls(value=(raw or "").strip())

    def masked(self) -> str:
        return f"{self.value[:4]}***{self.value[-2:]}"

    def __str__(self) -> str:
        return self.value
