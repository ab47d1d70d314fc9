"""App Django do ledger: usuários, contas, transações e Event Store."""
