"""Tokenized asset aggregation and oracle valuation for STRATO users."""
