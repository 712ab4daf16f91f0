"""Commission calculator for externally routed donations.

VPay transfers carry a processor fee (1.5%) and a platform cut (0.5%); every
other payment method is fee-free. Each fee is rounded half-up to the kobo
exactly once and net is the remainder, so fee + cut + net always equals gross.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import kobo_to_naira, round_kobo
from services.unit_wallet_service.models import (
    EXTERNAL_PAYMENT_METHODS,
    DonationPaymentMethod,
)

ZERO_RATE = Decimal("0")


@dataclass(frozen=True)
class CommissionBreakdown:
    gross_kobo: int
    processor_fee_kobo: int
    platform_cut_kobo: int
    net_kobo: int
    commission_rate: Decimal

    @property
    def has_commission(self) -> bool:
        return self.processor_fee_kobo > 0 or self.platform_cut_kobo > 0

    @property
    def processor_fee(self) -> Decimal:
        return kobo_to_naira(self.processor_fee_kobo)

    @property
    def platform_cut(self) -> Decimal:
        return kobo_to_naira(self.platform_cut_kobo)

    @property
    def net_amount(self) -> Decimal:
        return kobo_to_naira(self.net_kobo)


def calculate_commission(
    gross_kobo: int,
    payment_method: DonationPaymentMethod,
    *,
    processor_rate: Optional[Decimal] = None,
    platform_rate: Optional[Decimal] = None,
) -> CommissionBreakdown:
    """Split ``gross_kobo`` into processor fee, platform cut and net.

    Rates default to the configured VPay and platform rates.
    """
    if gross_kobo <= 0:
        raise ValueError("gross amount must be positive")

    if payment_method not in EXTERNAL_PAYMENT_METHODS:
        return CommissionBreakdown(
            gross_kobo=gross_kobo,
            processor_fee_kobo=0,
            platform_cut_kobo=0,
            net_kobo=gross_kobo,
            commission_rate=ZERO_RATE,
        )

    settings = get_settings()
    processor_rate = settings.VPAY_FEE_RATE if processor_rate is None else processor_rate
    platform_rate = (
        settings.PLATFORM_COMMISSION_RATE if platform_rate is None else platform_rate
    )

    gross = Decimal(gross_kobo)
    processor_fee = round_kobo(gross * processor_rate)
    platform_cut = round_kobo(gross * platform_rate)
    net = gross_kobo - processor_fee - platform_cut
    if net <= 0:
        raise ValueError("amount too small to cover commission")

    return CommissionBreakdown(
        gross_kobo=gross_kobo,
        processor_fee_kobo=processor_fee,
        platform_cut_kobo=platform_cut,
        net_kobo=net,
        commission_rate=platform_rate,
    )
