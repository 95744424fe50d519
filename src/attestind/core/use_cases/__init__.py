from attestind.core.use_cases.enrich import AttestationEnricher, EnrichStats

__all__ = ["AttestationEnricher", "EnrichStats"]
