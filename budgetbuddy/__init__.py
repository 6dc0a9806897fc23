"""Console entry points for the BudgetBuddy ledger."""
