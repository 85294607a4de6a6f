"""Core (UI-agnostic) sales dashboard logic.

This package contains:
- upload decoding (CSV/JSON -> records) and validation
- record normalization (records -> pandas)
- dataset storage keyed by generated ids
- filter normalization and filtering
- aggregation into chart-ready series
- chart helpers (Altair -> Vega-Lite spec dict)
"""
