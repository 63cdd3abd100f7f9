"""
Reports API

Earnings by taxonomy: sales and earnings per category/tag for a date range.
"""
from datetime import date, datetime
from typing import Optional, Union
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taxonomy_reports.config import get_settings
from taxonomy_reports.models.base import get_db
from taxonomy_reports.services.taxonomy_earnings_service import TaxonomyEarningsService, TaxonomyTerm
from taxonomy_reports.utils.date_ranges import InvalidDateRange, parse_dates_for_range
from taxonomy_reports.utils.helpers import format_amount, format_currency
from taxonomy_reports.utils.logger import log

router = APIRouter(prefix="/reports", tags=["reports"])

REPORT_COLUMNS = {
    "name": "Taxonomy",
    "sales": "Total Sales",
    "earnings": "Total Earnings",
    "average_sales": "Monthly Sales Average",
    "average_earnings": "Monthly Earnings Average",
}

NO_ITEMS_MESSAGE = "No taxonomies found."


def _parse_bound(value: Optional[str], field_name: str) -> Optional[Union[date, datetime]]:
    """ISO date or datetime string -> date/datetime"""
    if not value:
        return None
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        return datetime.fromisoformat(value)
    except ValueError:
        raise InvalidDateRange(f"Invalid {field_name}: {value}. Use YYYY-MM-DD or an ISO datetime.")


def _formatted_row(term: TaxonomyTerm) -> dict:
    """Display strings for a report row"""
    settings = get_settings()
    return {
        "name": f"— {term.name}" if term.parent else term.name,
        "sales": str(term.sales),
        "earnings": format_currency(term.earnings, settings.currency, settings.currency_decimals),
        "average_sales": format_amount(term.average_sales, settings.currency_decimals),
        "average_earnings": format_currency(term.average_earnings, settings.currency, settings.currency_decimals),
    }


@router.get("/earnings-by-taxonomy")
async def get_earnings_by_taxonomy(
    range_name: Optional[str] = Query(None, alias="range", description="Report range, e.g. this_month, last_year, other"),
    start_date: Optional[str] = Query(None, description="Custom range start (range=other)"),
    end_date: Optional[str] = Query(None, description="Custom range end (range=other)"),
    formatted: bool = Query(False, description="Include display-formatted values"),
    db: Session = Depends(get_db)
):
    """
    Sales and earnings per taxonomy term

    Parent terms come first, each followed by its direct children.
    """
    range_name = range_name or get_settings().default_report_range

    try:
        date_range = parse_dates_for_range(
            range_name,
            start=_parse_bound(start_date, "start_date"),
            end=_parse_bound(end_date, "end_date"),
        )
    except InvalidDateRange as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        terms = TaxonomyEarningsService(db).compute(date_range)
    except SQLAlchemyError as e:
        log.error(f"Error building earnings by taxonomy report: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to build earnings by taxonomy report")

    rows = []
    for term in terms:
        row = term.to_dict()
        if formatted:
            row["formatted"] = _formatted_row(term)
        rows.append(row)

    return {
        "success": True,
        "period": date_range.to_dict(),
        "columns": REPORT_COLUMNS,
        "count": len(rows),
        "data": rows,
        "message": None if rows else NO_ITEMS_MESSAGE,
    }
