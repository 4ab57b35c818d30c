"""
Fundbook Modules.

Thin orchestration layers over the kernel and engines, one per area of
the back office:

- Budget: budgets per account, spend tracking, budget vs actual
- Cash: bank reconciliation sessions
- GL: manual journal entries behind the balance gate
- Payroll: flat-rate payroll batches and project cost allocation

Processing logic lives in the engines; modules hold models, settings
wiring and the service facades callers use.
"""
