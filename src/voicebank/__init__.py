"""NovaBank voice banking relay and ledger service."""
