"""SupplyLink marketplace backend."""
