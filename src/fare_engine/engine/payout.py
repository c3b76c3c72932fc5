"""Payout splitter — realized fare → platform / driver / processor shares.

  commission     = fare × platform_fee% / 100
  driver base    = fare − commission                 (exact complement)
  driver total   = driver base + per-ride incentive  (incentive funded on top)
  processor fee  = commission × processor_fee% / 100
  platform net   = commission − processor fee
"""

from __future__ import annotations

from fare_engine.config.policy import PolicyConfig
from fare_engine.config.rate import RateConfig
from fare_engine.models.results import PayoutSplit


def _complementary_shares(total_fare: float, fee_percent: float) -> tuple[float, float]:
    """Return (commission, driver base) whose float sum is exactly ``total_fare``.

    The larger share is computed first and the smaller one as its difference
    from the fare; that subtraction is exact (Sterbenz), so the two shares
    add back to the fare without a stray ulp.
    """
    raw_commission = total_fare * (fee_percent / 100)
    if raw_commission <= total_fare / 2:
        driver_base = total_fare - raw_commission
        return total_fare - driver_base, driver_base
    return raw_commission, total_fare - raw_commission


def split_payout(
    total_fare: float,
    rate: RateConfig,
    policy: PolicyConfig | None = None,
) -> PayoutSplit:
    """Split one fare.  A 0% platform fee is a valid free plan, not an error."""
    policy = policy or PolicyConfig()

    platform_commission, driver_base_payout = _complementary_shares(
        total_fare, rate.platform_fee_percent,
    )
    driver_incentive = rate.per_ride_incentive
    processor_fee = platform_commission * (policy.processor_fee_percent / 100)

    return PayoutSplit(
        gross_fare=total_fare,
        platform_commission=platform_commission,
        driver_base_payout=driver_base_payout,
        driver_incentive=driver_incentive,
        driver_total_payout=driver_base_payout + driver_incentive,
        processor_fee=processor_fee,
        platform_net=platform_commission - processor_fee,
    )
