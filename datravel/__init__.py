"""Travel order approval service for the DA field office."""
