"""Client-side helpers for the SupplyLink marketplace backend."""
