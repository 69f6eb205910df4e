"""
ClaimGuard: claim adjudication and rule-based fraud detection.

Engines:
- claimguard.services.adjudication_engine.AdjudicationEngine
- claimguard.services.fwa.engine.FraudRuleEngine
"""

__version__ = "0.1.0"
