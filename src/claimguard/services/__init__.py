"""
Business Logic Services for Claim Adjudication and Fraud Detection.

Import from the submodules, e.g.
``from claimguard.services.adjudication_service import ClaimAdjudicationService``.
"""
