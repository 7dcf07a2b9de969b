"""
Payroll and billing computation core.

- Salary computation with statutory deductions and adjustments
- Billing plan pricing and invoice composition
- Platform-wide revenue rollups (MRR/ARR)
"""

__version__ = "1.0.0"
