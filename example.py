#!/usr/bin/env python3
"""
Example script showing how to use the tax form pipeline programmatically
"""
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from calculator.decimal_math import format_money
from calculator.loss_carryforward import ProjectionYear, project_excess_business_losses
from calculator.tax_brackets import calculate_tax
from calculator.validation import ensure_valid_filing_parameters
from models.carryforward import build_loss_limitation_record
from models.form_1040 import calculate_form_1040
from models.taxpayer import FilingStatus
from services.logging_config import configure_logging


def example_wage_earner():
    """Example: Single taxpayer with W-2 income"""
    print("Example 1: Single Taxpayer with W-2 Income")
    print("=" * 60)

    ensure_valid_filing_parameters(2024, FilingStatus.SINGLE, "")

    result = calculate_form_1040(wages=100000.0, standard_deduction=14600.0, tax_year=2024)
    tax = calculate_tax(2024, "", result.taxable_income, FilingStatus.SINGLE)

    print(f"Total income (line 9):     {format_money(result.line_9)}")
    print(f"AGI (line 11):             {format_money(result.line_11)}")
    print(f"Taxable income (line 15):  {format_money(result.line_15)}")
    for bracket in tax.taxes:
        print(f"  {bracket.bracket:>5.1%} on {format_money(bracket.amount):>14} = {format_money(bracket.tax)}")
    print(f"Federal tax:               {format_money(tax.total_tax)}")
    print()


def example_excess_business_loss():
    """Example: Business loss above the Form 461 threshold"""
    print("Example 2: Excess Business Loss")
    print("=" * 60)

    result = calculate_form_1040(
        tax_year=2024,
        wages=500000.0,
        business_income=-400000.0,
        non_business_cap_gains=-8000.0,
    )
    form_461 = result.schedule_1.form_461

    print(f"Schedule D line 21:        {format_money(result.schedule_d.line_21)}")
    print(f"Form 461 line 14:          {format_money(form_461.line_14)}")
    print(f"Form 461 threshold:        {format_money(form_461.line_15)}")
    print(f"Excess business loss:      {format_money(form_461.line_16)}")
    print(f"Schedule 1 line 8p:        {format_money(result.schedule_1.line_8p)}")
    print(f"AGI (line 11):             {format_money(result.line_11)}")

    proposal = build_loss_limitation_record(form_461, ownership_interest_id=1)
    print(f"Proposed NOL carryforward: {format_money(proposal.nol_carryforward)} "
          f"(confirmed: {proposal.confirmed})")
    print()


def example_multi_year_projection():
    """Example: EBL carried forward and used as an NOL"""
    print("Example 3: Multi-Year Projection")
    print("=" * 60)

    rows = [
        ProjectionYear(year=2024, wages=500000.0, business_net_income=-400000.0),
        ProjectionYear(year=2025, wages=150000.0, business_net_income=-20000.0),
        ProjectionYear(year=2026, wages=160000.0),
    ]
    for year in project_excess_business_losses(rows, is_single=True):
        print(
            f"{year.year}: limit {format_money(year.limit)}, "
            f"disallowed {format_money(year.disallowed_loss)}, "
            f"NOL used {format_money(year.nol_used)}, "
            f"taxable {format_money(year.taxable_income)}, "
            f"carryforward {format_money(year.ending_nol)}"
        )
    print()


if __name__ == "__main__":
    configure_logging(level="WARNING")

    example_wage_earner()
    example_excess_business_loss()
    example_multi_year_projection()

    print("=" * 60)
    print("All examples completed!")
    print("=" * 60)
