# careplan - Monthly schedule resolution and holiday-aware reassignment for home care
__version__ = "0.1.0"
