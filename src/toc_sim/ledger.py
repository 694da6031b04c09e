"""Cash ledger: material cost in, operating expense over time, revenue out."""

import logging
from typing import Optional

from toc_sim.models import CashStatus, EconomicsConfig

logger = logging.getLogger(__name__)


class Ledger:
    """Derives the cash position of a run from three running totals.

    Cash is recomputed from the totals on every update rather than adjusted
    incrementally, so it never drifts from
    ``starting_capital + revenue - material - operating``.
    Once cash reaches zero the ledger is insolvent and ignores updates until
    ``reset()``.
    """

    def __init__(self, config: Optional[EconomicsConfig] = None):
        self.config = config or EconomicsConfig()
        self.reset()

    def reset(self) -> None:
        self.total_revenue = 0.0
        self.total_material_cost = 0.0
        self.total_operating_cost = 0.0
        self.cash = self.config.starting_capital
        self.is_insolvent = False

    def update(self, delta_ms: float, items_entered: int, items_completed_at_sink: int) -> None:
        """Book one frame of material cost, operating expense and revenue."""
        if self.is_insolvent:
            return

        self.total_material_cost += items_entered * self.config.material_unit_cost
        self.total_operating_cost += (delta_ms / 1000.0) * self.config.op_expense_per_sec
        self.total_revenue += items_completed_at_sink * self.config.unit_revenue

        self.cash = (
            self.config.starting_capital
            + self.total_revenue
            - self.total_material_cost
            - self.total_operating_cost
        )

        if self.cash <= 0:
            self.is_insolvent = True
            logger.info(
                "insolvent: cash=%.2f revenue=%.2f material=%.2f operating=%.2f",
                self.cash,
                self.total_revenue,
                self.total_material_cost,
                self.total_operating_cost,
            )

    def cash_status(self) -> CashStatus:
        if self.is_insolvent:
            return CashStatus.INSOLVENT
        if self.cash < self.config.cash_warning_threshold:
            return CashStatus.CRITICAL
        if self.cash < self.config.starting_capital:
            return CashStatus.DRAINING
        return CashStatus.HEALTHY

    def locked_cash(self, count: int) -> float:
        """Material cash tied up in ``count`` units sitting in a buffer."""
        return count * self.config.material_unit_cost

    def sink_value(self, count: int) -> float:
        """Revenue earned by ``count`` shipped units."""
        return count * self.config.unit_revenue

    @property
    def gross_margin(self) -> float:
        return self.total_revenue - self.total_material_cost - self.total_operating_cost
