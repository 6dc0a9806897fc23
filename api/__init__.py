"""HTTP surface for the BudgetBuddy ledger."""
