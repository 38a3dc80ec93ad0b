"""Default chart of accounts seeded for every new business."""

from ledgersync.domain.entities import LedgerAccountType

CASH_ACCOUNT_CODE = "1000"
OPENING_BALANCE_EQUITY_CODE = "3050"

# (code, name, type)
DEFAULT_CHART_OF_ACCOUNTS: list[tuple[str, str, LedgerAccountType]] = [
    # Assets
    ("1000", "Cash", LedgerAccountType.ASSET),
    ("1010", "Petty Cash", LedgerAccountType.ASSET),
    ("1100", "Accounts Receivable", LedgerAccountType.ASSET),
    ("1200", "Inventory", LedgerAccountType.ASSET),
    ("1300", "Prepaid Expenses", LedgerAccountType.ASSET),
    ("1400", "Fixed Assets", LedgerAccountType.ASSET),
    ("1410", "Accumulated Depreciation", LedgerAccountType.ASSET),
    ("1500", "Other Assets", LedgerAccountType.ASSET),
    # Liabilities
    ("2000", "Accounts Payable", LedgerAccountType.LIABILITY),
    ("2100", "Credit Cards Payable", LedgerAccountType.LIABILITY),
    ("2200", "Payroll Liabilities", LedgerAccountType.LIABILITY),
    ("2300", "Sales Tax Payable", LedgerAccountType.LIABILITY),
    ("2400", "Loans Payable", LedgerAccountType.LIABILITY),
    ("2500", "Other Current Liabilities", LedgerAccountType.LIABILITY),
    ("2600", "Long-Term Liabilities", LedgerAccountType.LIABILITY),
    # Equity
    ("3000", "Owner's Equity", LedgerAccountType.EQUITY),
    ("3050", "Opening Balance Equity", LedgerAccountType.EQUITY),
    ("3100", "Retained Earnings", LedgerAccountType.EQUITY),
    ("3200", "Drawings/Distributions", LedgerAccountType.EQUITY),
    # Income
    ("4000", "Sales Revenue", LedgerAccountType.INCOME),
    ("4100", "Other Revenue", LedgerAccountType.INCOME),
    # Expenses
    ("5000", "Cost of Goods Sold (COGS)", LedgerAccountType.EXPENSE),
    ("6000", "Salaries and Wages", LedgerAccountType.EXPENSE),
    ("6100", "Rent Expense", LedgerAccountType.EXPENSE),
    ("6200", "Utilities Expense", LedgerAccountType.EXPENSE),
    ("6300", "Office Supplies", LedgerAccountType.EXPENSE),
    ("6400", "Advertising & Marketing", LedgerAccountType.EXPENSE),
    ("6500", "Travel & Meals", LedgerAccountType.EXPENSE),
    ("6600", "Professional Fees", LedgerAccountType.EXPENSE),
    ("6700", "Insurance Expense", LedgerAccountType.EXPENSE),
    ("6800", "Depreciation Expense", LedgerAccountType.EXPENSE),
    ("6900", "Miscellaneous Expense", LedgerAccountType.EXPENSE),
]
