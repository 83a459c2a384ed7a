"""Top-level package for the Finance Tracker.

The primary modules are:

* ``db`` – SQLite store for users, transactions and budgets
* ``aggregation`` – pure reductions behind budgets, dashboards and reports
* ``services`` – per-request operations returning tagged results
* ``display`` / ``visualization`` – tables, CSV export and Plotly figures

To run the app from the command line you can execute:

```bash
python run_app.py
```
"""

__version__ = "0.1.0"

__all__ = ["aggregation", "db", "display", "services", "visualization"]
