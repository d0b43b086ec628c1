"""Progress payment (hakediş) distribution across vehicles and weekly summaries"""

from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from kasa_gateway.domain.models import (
    AmountBreakdown,
    HakedisType,
    ReportRow,
    Vehicle,
    VehicleWeeklySummary,
    WeeklySummary,
)
from kasa_gateway.domain.totals import round_money, to_decimal


def _route_key(name: Optional[str]) -> str:
    return (name or "").lower()


def _vehicle_amounts(vehicles: Optional[Mapping[str, Any]]) -> Dict[int, Decimal]:
    amounts: Dict[int, Decimal] = {}
    for key, amount in (vehicles or {}).items():
        try:
            amounts[int(key)] = to_decimal(amount)
        except (TypeError, ValueError):
            continue
    return amounts


def calculate_difference(raporal: Any, sistem: Any) -> float:
    """Reported minus system revenue"""
    return round_money(to_decimal(raporal) - to_decimal(sistem))


def build_report_rows(
    date: str,
    hakedis_type: HakedisType,
    routes: Optional[Mapping[str, Any]],
    vehicles: Optional[Mapping[str, Any]],
    fleet: Iterable[Vehicle],
) -> List[ReportRow]:
    """
    Fan a progress payment out into one report row per affected vehicle.

    Route amounts apply to every vehicle on that route (route names compare
    case-insensitively). For HAFTALIK payments the route amount and the
    vehicle's own amount are kept apart; for KREDI_KARTI payments both are
    credited to the vehicle. Vehicles listed in ``vehicles`` whose route is
    not in ``routes`` get a row of their own. Routes without vehicles and
    unknown vehicle numbers are skipped.
    """
    routes = routes or {}
    vehicle_amounts = _vehicle_amounts(vehicles)

    by_route: Dict[str, List[Vehicle]] = defaultdict(list)
    by_number: Dict[int, Vehicle] = {}
    for vehicle in fleet:
        by_route[_route_key(vehicle.route_name)].append(vehicle)
        by_number[vehicle.vehicle_number] = vehicle

    rows: List[ReportRow] = []
    for route_name, route_amount in routes.items():
        for vehicle in by_route.get(_route_key(route_name), []):
            own_amount = vehicle_amounts.get(vehicle.vehicle_number, Decimal(0))
            if hakedis_type == HakedisType.WEEKLY:
                route_share = to_decimal(route_amount)
                vehicle_share = own_amount
            else:
                route_share = Decimal(0)
                vehicle_share = to_decimal(route_amount) + own_amount
            rows.append(
                ReportRow(
                    date=date,
                    vehicle_number=vehicle.vehicle_number,
                    plate_number=vehicle.plate_number,
                    route_name=vehicle.route_name,
                    route_amount=round_money(route_share),
                    vehicle_amount=round_money(vehicle_share),
                    total_amount=round_money(route_share + vehicle_share),
                    type=hakedis_type.value,
                )
            )

    covered_routes = {_route_key(name) for name in routes}
    for number, amount in vehicle_amounts.items():
        vehicle = by_number.get(number)
        if vehicle is None or _route_key(vehicle.route_name) in covered_routes:
            continue
        rows.append(
            ReportRow(
                date=date,
                vehicle_number=number,
                plate_number=vehicle.plate_number,
                route_name=vehicle.route_name,
                route_amount=0.0,
                vehicle_amount=round_money(amount),
                total_amount=round_money(amount),
                type=hakedis_type.value,
            )
        )

    return rows


def _add(breakdown: AmountBreakdown, row: ReportRow) -> None:
    breakdown.route_amount = round_money(to_decimal(breakdown.route_amount) + to_decimal(row.route_amount))
    breakdown.vehicle_amount = round_money(to_decimal(breakdown.vehicle_amount) + to_decimal(row.vehicle_amount))
    breakdown.total_amount = round_money(to_decimal(breakdown.total_amount) + to_decimal(row.total_amount))


def summarize_week(
    start_date: str,
    end_date: str,
    rows: Iterable[ReportRow],
    fleet: Iterable[Vehicle],
) -> WeeklySummary:
    """Group report rows per vehicle, separating weekly and credit-card payments"""
    bank_details = {v.vehicle_number: v for v in fleet}
    summaries: Dict[int, VehicleWeeklySummary] = {}

    for row in rows:
        summary = summaries.get(row.vehicle_number)
        if summary is None:
            known = bank_details.get(row.vehicle_number)
            summary = VehicleWeeklySummary(
                vehicle_number=row.vehicle_number,
                plate_number=row.plate_number,
                route_name=row.route_name,
                iban=known.iban if known else "",
                tax_id=known.tax_id if known else "",
            )
            summaries[row.vehicle_number] = summary

        if row.type == HakedisType.WEEKLY.value:
            _add(summary.haftalik, row)
        elif row.type == HakedisType.CREDIT_CARD.value:
            _add(summary.kredi_karti, row)
        summary.grand_total = round_money(
            to_decimal(summary.haftalik.total_amount) + to_decimal(summary.kredi_karti.total_amount)
        )

    vehicles = sorted(summaries.values(), key=lambda s: s.vehicle_number)
    total_haftalik = sum((to_decimal(v.haftalik.total_amount) for v in vehicles), Decimal(0))
    total_kredi_karti = sum((to_decimal(v.kredi_karti.total_amount) for v in vehicles), Decimal(0))

    return WeeklySummary(
        start_date=start_date,
        end_date=end_date,
        vehicles=vehicles,
        total_haftalik=round_money(total_haftalik),
        total_kredi_karti=round_money(total_kredi_karti),
        grand_total=round_money(total_haftalik + total_kredi_karti),
    )
