# accounting/__init__.py
"""
Accounting app - counterparty ledger.

This app provides:
- AccountGroup: Named groups of accounts
- Account: Customers/suppliers with a cached running balance
- Movement: Income/expense/receivable/payable events against an account

Commands handle all mutations so that every movement write keeps its
account balance in step.
"""
