# careplan/io - Input/output handling
from .loaders import load_assignments, load_clients, load_config, load_holidays, save_holidays
from .results_export import (
    balances_to_dataframe,
    entries_to_dataframe,
    export_plan_json,
    export_plan_to_excel,
    reassignments_to_dataframe,
)

__all__ = [
    "load_assignments",
    "load_clients",
    "load_holidays",
    "load_config",
    "save_holidays",
    "entries_to_dataframe",
    "reassignments_to_dataframe",
    "balances_to_dataframe",
    "export_plan_to_excel",
    "export_plan_json",
]
