"""Response envelopes shared by both hosting adapters."""
