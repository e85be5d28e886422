from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional, Union

from careplan.engine.holidays import (
    CachingHolidayProvider,
    CsvHolidayProvider,
    HolidayCalendarProvider,
    StaticHolidayProvider,
)
from careplan.engine.planning import UserMonthPlan, plan_month
from careplan.errors import HolidayProviderError, RecordValidationError
from careplan.io.loaders import load_assignments, load_clients, load_config
from careplan.io.results_export import export_plan_json, export_plan_to_excel, plan_to_dict
from careplan.models.assignment import Assignment, Client
from careplan.models.config import EngineConfig
from careplan.utils.logging_setup import setup_logging
from careplan.utils.structured_logging import configure_structlog

EXIT_OK = 0
EXIT_INVALID_INPUT = 1
EXIT_HOLIDAYS_UNAVAILABLE = 2


def _build_provider(args: argparse.Namespace) -> HolidayCalendarProvider:
    if args.holidays:
        return CachingHolidayProvider(CsvHolidayProvider(args.holidays))
    return StaticHolidayProvider(region=args.region, city=args.city)


def _targets(
    args: argparse.Namespace,
    assignments: List[Assignment],
    clients: Optional[List[Client]],
) -> List[Union[Client, str]]:
    """Clients to plan: --user, else every client, else every user with assignments."""
    if clients is not None:
        if args.user:
            found = [c for c in clients if c.id == args.user]
            return found or [args.user]
        return list(clients)
    if args.user:
        return [args.user]
    return sorted({a.user_id for a in assignments})


def _print_plan(plan: UserMonthPlan) -> None:
    print(f"Usuario {plan.user_id} ({plan.year}-{plan.month:02d})")
    for k, v in plan.summary().items():
        if k in ("user_id", "year", "month"):
            continue
        print(f" - {k}: {v}")
    for r in plan.reassignments:
        print(f"   * {r.date.isoformat()}: {r.expected_worker_id} -> {r.actual_worker_id} ({r.reason})")


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Planificación mensual de servicios con reasignación en festivos")
    p.add_argument("--assignments", required=True, help="Asignaciones (JSON o CSV)")
    p.add_argument("--holidays", help="CSV de festivos (date,name,type,region,city,is_active)")
    p.add_argument("--region", help="Región para los festivos integrados (si no hay --holidays)")
    p.add_argument("--city", help="Ciudad para los festivos integrados (si no hay --holidays)")
    p.add_argument("--year", type=int, required=True)
    p.add_argument("--month", type=int, required=True, choices=range(1, 13), metavar="1-12")
    p.add_argument("--user", help="Planificar solo este usuario")
    p.add_argument("--clients", help="Usuarios con horas contratadas (CSV o JSON)")
    p.add_argument("--config", help="Configuración del motor (JSON)")
    p.add_argument("--json", dest="json_out", action="store_true", help="Salida JSON")
    p.add_argument("--excel", help="Exportar a Excel")
    p.add_argument("--save-json", dest="save_json", help="Guardar resultados JSON en un fichero")
    p.add_argument("--log-file", dest="log_file", default=None, help="Fichero de log")
    p.add_argument("-v", "--verbose", action="count", default=0)
    args = p.parse_args(argv)

    setup_logging(
        level="DEBUG" if args.verbose else "INFO",
        log_file=args.log_file,
        console_level="DEBUG" if args.verbose else "WARNING",
    )
    configure_structlog(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        config = load_config(args.config) if args.config else EngineConfig()
        assignments = load_assignments(args.assignments)
        clients = load_clients(args.clients) if args.clients else None
    except (OSError, ValueError, RecordValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    try:
        plans = plan_month(
            _targets(args, assignments, clients),
            assignments,
            args.year,
            args.month,
            _build_provider(args),
            config,
        )
    except HolidayProviderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_HOLIDAYS_UNAVAILABLE

    if args.json_out:
        print(json.dumps({"plans": [plan_to_dict(pl) for pl in plans]}, ensure_ascii=False, indent=2))
    else:
        for plan in plans:
            _print_plan(plan)

    if args.excel:
        export_plan_to_excel(plans, args.excel)
    if args.save_json:
        export_plan_json(plans, args.save_json)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
