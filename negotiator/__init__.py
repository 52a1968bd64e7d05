"""ESG negotiation simulator: compromise generation, scoring and carbon accounting."""
