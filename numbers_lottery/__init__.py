"""Numbers lottery backend over a flat JSON ledger."""
