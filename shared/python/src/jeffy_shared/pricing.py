"""
pricing.py — Landed-cost, customs duty and sale financials.

All rates are percentages in the 0-100 range, matching what the admin
forms and the tax_config / custom_duty_rates tables store.

Usage:
    from jeffy_shared.pricing import CostBreakdownInput, calculate_cost_breakdown

    breakdown = calculate_cost_breakdown(
        CostBreakdownInput(base_cost=100, custom_duty_rate=20)
    )
    breakdown.total_landed_cost   # 138.0
    breakdown.final_selling_price # 197.14...
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from jeffy_shared.config import settings
from jeffy_shared.constants import PricingMethod


class CostBreakdownInput(BaseModel):
    """Inputs to the landed-cost calculator for a single unit."""

    # Accepts the camelCase keys the admin UI posts as well as snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    base_cost: float = Field(gt=0)
    transport_cost_per_unit: float = Field(default=0.0, ge=0)
    transport_cost_per_shipment: float = Field(default=0.0, ge=0)
    custom_duty_rate: float = Field(ge=0)
    import_vat_rate: float = Field(default_factory=lambda: settings.default_import_vat_rate, ge=0, le=100)
    sales_vat_rate: float = Field(default_factory=lambda: settings.default_sales_vat_rate, ge=0, le=100)
    corporate_tax_rate: float = Field(
        default_factory=lambda: settings.default_corporate_tax_rate, ge=0, le=100
    )
    desired_profit_margin: float = Field(default_factory=lambda: settings.default_profit_margin, ge=0)
    total_products_in_shipment: int = Field(default=1, ge=1)
    product_cost_proportion: float = Field(default=1.0, gt=0, le=1)
    pricing_method: PricingMethod = "margin"

    @model_validator(mode="after")
    def _margin_below_hundred(self) -> "CostBreakdownInput":
        if self.pricing_method == "margin" and self.desired_profit_margin >= 100:
            raise ValueError("desired_profit_margin must be below 100 for margin pricing")
        return self


class CostBreakdown(BaseModel):
    """Every intermediate figure of the calculation, per unit."""

    base_cost: float
    transport_cost_per_unit: float
    allocated_shipment_cost: float
    subtotal: float
    custom_duty_rate: float
    custom_duty: float
    cost_before_import_vat: float
    import_vat: float
    import_vat_reclaimable: float
    total_landed_cost: float
    effective_cost: float
    price_before_sales_vat: float
    sales_vat: float
    final_selling_price: float
    profit_before_corporate_tax: float
    corporate_tax: float
    net_profit_after_tax: float
    profit_margin_achieved: float
    pricing_method: PricingMethod

    def rounded(self, ndigits: int = 2) -> dict[str, float | str]:
        """Return a dict with money figures rounded for display or storage."""
        return {
            k: round(v, ndigits) if isinstance(v, float) else v
            for k, v in self.model_dump().items()
        }


def calculate_cost_breakdown(inp: CostBreakdownInput) -> CostBreakdown:
    """
    Compute landed cost, selling price and profit for one unit.

    The shipment transport cost is allocated by value proportion when one
    is given (proportion < 1), otherwise split evenly across the
    products in the shipment. Import VAT is reclaimable, so the
    effective cost used for pricing excludes it.
    """
    if inp.product_cost_proportion < 1:
        allocated = inp.transport_cost_per_shipment * inp.product_cost_proportion
    else:
        allocated = inp.transport_cost_per_shipment / inp.total_products_in_shipment

    subtotal = inp.base_cost + inp.transport_cost_per_unit + allocated
    custom_duty = subtotal * inp.custom_duty_rate / 100
    cost_before_import_vat = subtotal + custom_duty
    import_vat = cost_before_import_vat * inp.import_vat_rate / 100
    total_landed_cost = cost_before_import_vat + import_vat
    effective_cost = total_landed_cost - import_vat

    margin = inp.desired_profit_margin / 100
    if inp.pricing_method == "margin":
        price_before_sales_vat = effective_cost / (1 - margin)
    else:
        price_before_sales_vat = effective_cost * (1 + margin)

    sales_vat_rate = inp.sales_vat_rate / 100
    sales_vat = price_before_sales_vat * sales_vat_rate
    final_selling_price = price_before_sales_vat + sales_vat

    profit = price_before_sales_vat * (1 - sales_vat_rate) - effective_cost
    corporate_tax = max(0.0, profit) * inp.corporate_tax_rate / 100
    net_profit = profit - corporate_tax
    achieved = net_profit / price_before_sales_vat * 100 if price_before_sales_vat else 0.0

    return CostBreakdown(
        base_cost=inp.base_cost,
        transport_cost_per_unit=inp.transport_cost_per_unit,
        allocated_shipment_cost=allocated,
        subtotal=subtotal,
        custom_duty_rate=inp.custom_duty_rate,
        custom_duty=custom_duty,
        cost_before_import_vat=cost_before_import_vat,
        import_vat=import_vat,
        import_vat_reclaimable=import_vat,
        total_landed_cost=total_landed_cost,
        effective_cost=effective_cost,
        price_before_sales_vat=price_before_sales_vat,
        sales_vat=sales_vat,
        final_selling_price=final_selling_price,
        profit_before_corporate_tax=profit,
        corporate_tax=corporate_tax,
        net_profit_after_tax=net_profit,
        profit_margin_achieved=achieved,
        pricing_method=inp.pricing_method,
    )


def calculate_product_cost_proportion(product_base_cost: float, total_base_cost: float) -> float:
    """Share of a shipment's value taken by one product (1.0 when unknown)."""
    if total_base_cost <= 0:
        return 1.0
    return product_base_cost / total_base_cost


# ---------------------------------------------------------------------------
# Sale financials (one financial_transactions row per order)
# ---------------------------------------------------------------------------


class SaleFinancials(BaseModel):
    amount: float
    revenue: float
    cost_amount: float
    tax_amount: float
    import_vat_amount: float
    effective_cost: float
    profit_amount: float
    corporate_tax_amount: float
    net_profit_after_tax: float


def compute_sale_financials(
    total: float,
    cost: float,
    *,
    tax_rate: float,
    tax_inclusive: bool,
    import_vat_rate: float,
    corporate_tax_rate: float,
) -> SaleFinancials:
    """
    Split an order total into revenue, taxes and profit.

    When prices are tax-inclusive the VAT is extracted from the total,
    otherwise it is charged on top of it.
    """
    if tax_inclusive:
        tax = total * tax_rate / (100 + tax_rate)
        revenue = total - tax
    else:
        tax = total * tax_rate / 100
        revenue = total

    import_vat = cost * import_vat_rate / 100
    effective_cost = cost - import_vat
    profit = revenue - effective_cost - tax
    corporate_tax = profit * corporate_tax_rate / 100 if profit > 0 else 0.0

    return SaleFinancials(
        amount=total,
        revenue=revenue,
        cost_amount=cost,
        tax_amount=tax,
        import_vat_amount=import_vat,
        effective_cost=effective_cost,
        profit_amount=profit,
        corporate_tax_amount=corporate_tax,
        net_profit_after_tax=profit - corporate_tax,
    )


# ---------------------------------------------------------------------------
# Shipments
# ---------------------------------------------------------------------------


def compute_shipment_totals(
    *,
    total_cost_rmb: float,
    exchange_rate: float,
    shipping_cost: float = 0.0,
    insurance_cost: float = 0.0,
    import_duty: float = 0.0,
    vat_amount: float = 0.0,
) -> dict[str, float]:
    """Convert a supplier invoice to ZAR and add freight, duty and VAT."""
    total_cost_zar = total_cost_rmb * exchange_rate
    return {
        "total_cost_zar": round(total_cost_zar, 2),
        "total_landed_cost": round(
            total_cost_zar + shipping_cost + insurance_cost + import_duty + vat_amount, 2
        ),
    }


def allocate_landed_costs(
    items: list[dict[str, float]],
    *,
    exchange_rate: float,
    extra_costs: float,
) -> list[float]:
    """
    Per-unit landed cost for each shipment item.

    Each item is {"unit_cost_rmb", "quantity"}; freight, insurance, duty
    and VAT are shared in proportion to the item's line value.
    """
    line_values = [
        float(i.get("unit_cost_rmb") or 0) * float(i.get("quantity") or 0) * exchange_rate
        for i in items
    ]
    total_value = sum(line_values)
    result: list[float] = []
    for item, value in zip(items, line_values):
        qty = float(item.get("quantity") or 0)
        if qty <= 0:
            result.append(0.0)
            continue
        share = calculate_product_cost_proportion(value, total_value) if total_value else 1 / len(items)
        result.append(round((value + extra_costs * share) / qty, 2))
    return result


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_currency(amount: float, symbol: str = "R") -> str:
    """Format a rand amount, e.g. 1234.5 -> 'R1,234.50'."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"
