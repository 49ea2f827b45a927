"""Domain layer: records, queries, traits and the iCal formatter. No FastAPI here."""
